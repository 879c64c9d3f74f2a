from __future__ import annotations

import enum
from collections.abc import Iterable, Mapping, Sequence
from dataclasses import dataclass, field
from datetime import date


class RentalError(Exception):
    pass


class InvalidArgument(RentalError):
    pass


class InsufficientStock(RentalError):
    def __init__(self, film_id: int) -> None:
        super().__init__(f"Insufficient stock for film {film_id}")
        self.film_id = film_id


def allocate(
    store_id: int,
    cart: Sequence[CartLine],
    open_rentals: Iterable[OpenRental | int],
    inventory_by_film: Mapping[int, Sequence[InventoryUnit]],
) -> list[int]:
    """Pick the inventory units that satisfy ``cart`` at ``store_id``.

    Lines are served in cart order and units in the order ``inventory_by_film``
    lists them. A unit is eligible when it belongs to the store, is not in
    ``open_rentals`` and was not already taken by an earlier line of the same
    call. Either every line is satisfied or ``InsufficientStock`` is raised for
    the first line that cannot be.
    """
    store_id = _positive_int(store_id, "store_id")
    lines = [_checked(line) for line in cart]
    opened = {r.inventory_id if isinstance(r, OpenRental) else r for r in open_rentals}

    reserved: set[int] = set()
    inventory_ids: list[int] = []
    for line in lines:
        if line.quantity == 0:
            continue
        candidates = [
            unit
            for unit in inventory_by_film.get(line.film_id, ())
            if unit.store_id == store_id and unit.inventory_id not in opened and unit.inventory_id not in reserved
        ]
        if len(candidates) < line.quantity:
            raise InsufficientStock(line.film_id)
        for unit in candidates[: line.quantity]:
            reserved.add(unit.inventory_id)
            inventory_ids.append(unit.inventory_id)
    return inventory_ids


def _positive_int(value: object, name: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value <= 0:
        raise InvalidArgument(f"{name} must be a positive integer, got {value!r}")
    return value


def _checked(line: CartLine) -> CartLine:
    _positive_int(line.film_id, "film_id")
    if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 0:
        raise InvalidArgument(f"quantity must be a non-negative integer, got {line.quantity!r}")
    return line


@dataclass(frozen=True, kw_only=True)
class CartLine:
    film_id: int
    quantity: int


@dataclass(frozen=True, kw_only=True)
class InventoryUnit:
    inventory_id: int
    film_id: int
    store_id: int


@dataclass(frozen=True, kw_only=True)
class OpenRental:
    inventory_id: int


class RentalStatus(str, enum.Enum):
    OPEN = "OPEN"
    LATE = "LATE"


@dataclass(kw_only=True)
class Shift:
    store_id: int
    staff_id: int


@dataclass(kw_only=True)
class Store:
    id: int
    label: str


@dataclass(kw_only=True)
class Staff:
    id: int
    label: str
    store_id: int


@dataclass(kw_only=True)
class Customer:
    id: int
    name: str
    email: str


@dataclass(kw_only=True)
class Film:
    id: int
    title: str


@dataclass(kw_only=True)
class Availability:
    film_id: int
    available: int
    total: int


@dataclass(kw_only=True)
class Rental:
    id: int
    customer_id: int
    customer_name: str
    film_id: int
    film_title: str
    status: RentalStatus
    due_date: date | None = None


@dataclass(kw_only=True)
class Invoice:
    id: int
    rental_id: int
    total: float
    paid: float
    due: float
    customer_id: int
    customer_name: str
    film_title: str


@dataclass(kw_only=True)
class CheckoutResult:
    rental_ids: list[int]
    invoice_id: int
    message: str


@dataclass(kw_only=True)
class ReturnResult:
    returned: list[int] = field(default_factory=list)
    skipped: list[int] = field(default_factory=list)


@dataclass(kw_only=True)
class PaymentResult:
    paid: float
    due: float
