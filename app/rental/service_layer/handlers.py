import logging
import math
from typing import Protocol, TypeVar

from app.rental.adapters.client import ApiError
from app.rental.domain import commands, models
from app.rental.domain.models import InsufficientStock, InvalidArgument
from app.rental.domain.values import parse_id
from app.rental.service_layer import services, unit_of_work

logger = logging.getLogger(__name__)


class NoActiveShift(Exception):
    pass


P = TypeVar("P", contravariant=True)
R = TypeVar("R", covariant=True)


class Handler(Protocol[P, R]):
    async def handle(self, cmd: P) -> R:
        ...


async def _active_shift(uow: unit_of_work.AbstractUnitOfWork) -> models.Shift:
    shift = await uow.shifts.get()
    if shift is None:
        raise NoActiveShift("No active shift, start a shift first")
    return shift


def _cart_line(line: commands.CheckoutLine) -> models.CartLine:
    film_id = parse_id(line.film_id, "Film ID")
    if isinstance(line.quantity, bool) or not isinstance(line.quantity, int) or line.quantity < 0:
        raise InvalidArgument(f"Quantity for film {film_id} is invalid")
    return models.CartLine(film_id=film_id, quantity=line.quantity)


class StartShiftCmdHandler(Handler[commands.StartShift, models.Shift]):
    def __init__(self, uow: unit_of_work.AbstractUnitOfWork) -> None:
        self._uow = uow

    async def handle(self, cmd: commands.StartShift) -> models.Shift:
        store_id = parse_id(cmd.store_id, "Store ID")
        staff_id = parse_id(cmd.staff_id, "Staff ID")
        async with self._uow:
            staff = next((s for s in await self._uow.backend.list_staff() if s.staff_id == staff_id), None)
            if staff is None or not staff.active:
                raise InvalidArgument(f"Staff {staff_id} is not an active staff member")
            if staff.store_id != store_id:
                raise InvalidArgument(f"Staff {staff_id} does not work at store {store_id}")
            shift = models.Shift(store_id=store_id, staff_id=staff_id)
            await self._uow.shifts.save(shift)
            logger.info("Shift started at store %s by staff %s", store_id, staff_id)
            return shift


class EndShiftCmdHandler(Handler[commands.EndShift, None]):
    def __init__(self, uow: unit_of_work.AbstractUnitOfWork) -> None:
        self._uow = uow

    async def handle(self, cmd: commands.EndShift) -> None:
        async with self._uow:
            await self._uow.shifts.clear()
            logger.info("Shift ended")


class CheckoutCmdHandler(Handler[commands.Checkout, models.CheckoutResult]):
    def __init__(self, uow: unit_of_work.AbstractUnitOfWork) -> None:
        self._uow = uow

    async def handle(self, cmd: commands.Checkout) -> models.CheckoutResult:
        customer_id = parse_id(cmd.customer_id, "Customer ID")
        cart = [_cart_line(line) for line in cmd.cart]
        async with self._uow:
            shift = await _active_shift(self._uow)
            try:
                inventory_ids = await services.allocate_inventory(shift.store_id, cart, self._uow.backend)
            except InsufficientStock as e:
                logger.warning("Checkout rejected at store %s: %s", shift.store_id, e)
                raise
            if not inventory_ids:
                raise InvalidArgument("Cart is empty")

            try:
                response = await self._uow.backend.checkout(
                    customer_id=customer_id,
                    staff_id=shift.staff_id,
                    store_id=shift.store_id,
                    inventory_ids=inventory_ids,
                )
            except ApiError as e:
                # the allocation is stale once the commit failed; the caller starts over
                logger.warning("Checkout commit failed for inventory %s: %s", inventory_ids, e)
                raise
            if not response.rental_ids:
                raise ApiError("Checkout succeeded but no rental id was returned", status=500)

            logger.info("Checked out rentals %s for customer %s", response.rental_ids, customer_id)
            return models.CheckoutResult(
                rental_ids=response.rental_ids,
                invoice_id=response.rental_ids[0],
                message=response.message or "Checkout succeeded.",
            )


class ReturnRentalsCmdHandler(Handler[commands.ReturnRentals, models.ReturnResult]):
    def __init__(self, uow: unit_of_work.AbstractUnitOfWork) -> None:
        self._uow = uow

    async def handle(self, cmd: commands.ReturnRentals) -> models.ReturnResult:
        rental_ids = [parse_id(rental_id, "Rental ID") for rental_id in cmd.rental_ids]
        if not rental_ids:
            raise InvalidArgument("No rental selected")
        async with self._uow:
            response = await self._uow.backend.return_rentals(rental_ids)
            logger.info("Returned rentals %s, skipped %s", response.updated, response.skipped)
            return models.ReturnResult(returned=response.updated, skipped=response.skipped)


class PayInvoiceCmdHandler(Handler[commands.PayInvoice, models.PaymentResult]):
    def __init__(self, uow: unit_of_work.AbstractUnitOfWork) -> None:
        self._uow = uow

    async def handle(self, cmd: commands.PayInvoice) -> models.PaymentResult:
        rental_id = parse_id(cmd.rental_id, "Rental ID")
        if cmd.amount is None or not math.isfinite(cmd.amount) or cmd.amount <= 0:
            raise InvalidArgument("Amount must be greater than zero")
        async with self._uow:
            shift = await _active_shift(self._uow)
            invoice = await self._uow.backend.get_invoice(rental_id)
            await self._uow.backend.create_payment(
                customer_id=invoice.customer.customer_id,
                staff_id=shift.staff_id,
                rental_id=rental_id,
                amount=cmd.amount,
            )
            latest = await self._uow.backend.get_invoice(rental_id)
            logger.info("Paid %s for rental %s, %s still due", cmd.amount, rental_id, latest.summary.amount_due)
            return models.PaymentResult(paid=latest.summary.total_paid, due=latest.summary.amount_due)
