from dataclasses import dataclass, field


class Command:
    pass


@dataclass
class CheckoutLine:
    film_id: str | int
    quantity: int


@dataclass
class StartShift(Command):
    store_id: str | int
    staff_id: str | int


@dataclass
class EndShift(Command):
    pass


@dataclass
class Checkout(Command):
    customer_id: str | int
    cart: list[CheckoutLine] = field(default_factory=list)


@dataclass
class ReturnRentals(Command):
    rental_ids: list[str | int]


@dataclass
class PayInvoice(Command):
    rental_id: str | int
    amount: float
