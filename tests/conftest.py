from typing import Any

import pytest

from app.rental.adapters import dto
from app.rental.adapters.backend import AbstractRentalBackend
from app.rental.adapters.client import ApiError
from app.rental.adapters.shift_store import AbstractShiftStore
from app.rental.constants import LOOKUP_LIMIT
from app.rental.domain import models
from app.rental.service_layer import unit_of_work


class FakeBackend(AbstractRentalBackend):
    def __init__(self) -> None:
        self.stores: list[dto.StoreResponse] = []
        self.staff: list[dto.StaffResponse] = []
        self.customers: list[dto.CustomerResponse] = []
        self.films: dict[int, dto.FilmResponse] = {}
        self.availability: dict[tuple[int, int], dto.FilmAvailabilityResponse] = {}
        self.inventories: dict[int, list[dto.InventoryResponse]] = {}
        self.open_rentals: dict[int, list[dto.RentalResponse]] = {}
        self.invoices: dict[int, dto.InvoiceResponse] = {}
        self.rental_ids: list[int] = []
        self.checkout_message: str | None = None
        self.fail_checkout: ApiError | None = None
        self.checkouts: list[dict[str, Any]] = []
        self.payments: list[dict[str, Any]] = []
        self.returned: list[list[int]] = []
        self.calls: list[str] = []

    async def list_stores(self) -> list[dto.StoreResponse]:
        return self.stores

    async def list_staff(self) -> list[dto.StaffResponse]:
        return self.staff

    async def list_customers(self, limit: int = LOOKUP_LIMIT) -> list[dto.CustomerResponse]:
        self.calls.append("list_customers")
        return self.customers[:limit]

    async def lookup_customers(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupCustomerResponse]:
        self.calls.append(f"lookup_customers:{query}")
        return [
            dto.LookupCustomerResponse(customer_id=c.customer_id, name=f"{c.first_name} {c.last_name}", email=c.email)
            for c in self.customers
            if query.lower() in f"{c.first_name} {c.last_name}".lower()
        ][:limit]

    async def list_films(self, limit: int = LOOKUP_LIMIT) -> list[dto.FilmResponse]:
        self.calls.append("list_films")
        return list(self.films.values())[:limit]

    async def lookup_films(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupFilmResponse]:
        self.calls.append(f"lookup_films:{query}")
        return [
            dto.LookupFilmResponse(film_id=f.film_id, title=f.title)
            for f in self.films.values()
            if query.lower() in f.title.lower()
        ][:limit]

    async def get_film(self, film_id: int) -> dto.FilmResponse:
        self.calls.append(f"get_film:{film_id}")
        if film_id not in self.films:
            raise ApiError("Film not found", status=404)
        return self.films[film_id]

    async def get_film_availability(self, film_id: int, store_id: int) -> dto.FilmAvailabilityResponse:
        return self.availability[(film_id, store_id)]

    async def list_open_rentals(self, store_id: int) -> list[dto.RentalResponse]:
        self.calls.append(f"list_open_rentals:{store_id}")
        return self.open_rentals.get(store_id, [])

    async def list_film_inventories(self, film_id: int) -> list[dto.InventoryResponse]:
        self.calls.append(f"list_film_inventories:{film_id}")
        return self.inventories.get(film_id, [])

    async def checkout(
        self, customer_id: int, staff_id: int, store_id: int, inventory_ids: list[int]
    ) -> dto.CheckoutResponse:
        self.checkouts.append(
            dict(customer_id=customer_id, staff_id=staff_id, store_id=store_id, inventory_ids=inventory_ids)
        )
        if self.fail_checkout is not None:
            raise self.fail_checkout
        return dto.CheckoutResponse(rental_ids=self.rental_ids, message=self.checkout_message)

    async def get_invoice(self, rental_id: int) -> dto.InvoiceResponse:
        self.calls.append(f"get_invoice:{rental_id}")
        if rental_id not in self.invoices:
            raise ApiError("Invoice not found", status=404)
        return self.invoices[rental_id]

    async def return_rentals(self, rental_ids: list[int]) -> dto.ReturnBatchResponse:
        self.returned.append(rental_ids)
        open_ids = {r.rental_id for rentals in self.open_rentals.values() for r in rentals}
        return dto.ReturnBatchResponse(
            updated=[i for i in rental_ids if i in open_ids],
            skipped=[i for i in rental_ids if i not in open_ids],
        )

    async def create_payment(self, customer_id: int, staff_id: int, rental_id: int, amount: float) -> None:
        self.payments.append(dict(customer_id=customer_id, staff_id=staff_id, rental_id=rental_id, amount=amount))
        summary = self.invoices[rental_id].summary
        summary.total_paid += amount
        summary.amount_due = max(summary.amount_due - amount, 0)


class FakeShiftStore(AbstractShiftStore):
    def __init__(self, shift: models.Shift | None = None) -> None:
        self._shift = shift

    async def get(self) -> models.Shift | None:
        return self._shift

    async def save(self, shift: models.Shift) -> None:
        self._shift = shift

    async def clear(self) -> None:
        self._shift = None


class FakeUnitOfWork(unit_of_work.AbstractUnitOfWork):
    def __init__(self, backend: FakeBackend | None = None, shift: models.Shift | None = None) -> None:
        self._backend = backend or FakeBackend()
        self._shifts = FakeShiftStore(shift)
        self.closed = 0

    @property
    def backend(self) -> FakeBackend:
        return self._backend

    @property
    def shifts(self) -> FakeShiftStore:
        return self._shifts

    async def close(self) -> None:
        self.closed += 1


def invoice(
    rental_id: int,
    film_id: int = 7,
    title: str = "ACADEMY DINOSAUR",
    rental_rate: float = 2.99,
    paid: float = 0,
    due: float = 2.99,
    customer: tuple[int, str, str] = (1, "MARY", "SMITH"),
    rental_date: str = "2026-02-10T10:00:00Z",
) -> dto.InvoiceResponse:
    customer_id, first_name, last_name = customer
    return dto.InvoiceResponse(
        rental=dto.InvoiceRental(rental_id=rental_id, rental_date=rental_date),
        film=dto.InvoiceFilm(film_id=film_id, title=title, rental_rate=rental_rate),
        customer=dto.InvoiceCustomer(customer_id=customer_id, first_name=first_name, last_name=last_name),
        summary=dto.InvoiceSummary(total_paid=paid, amount_due=due),
    )


@pytest.fixture
def backend() -> FakeBackend:
    return FakeBackend()


@pytest.fixture
def uow(backend: FakeBackend) -> FakeUnitOfWork:
    return FakeUnitOfWork(backend, shift=models.Shift(store_id=1, staff_id=2))


@pytest.fixture
def idle_uow(backend: FakeBackend) -> FakeUnitOfWork:
    return FakeUnitOfWork(backend)


@pytest.fixture
def make_invoice() -> Any:
    return invoice
