from typing import Any

from app.rental.domain import commands
from app.rental.service_layer import handlers, unit_of_work


async def handle(message: commands.Command, uow: unit_of_work.AbstractUnitOfWork) -> list[Any]:
    results: list[Any] = []
    if isinstance(message, commands.StartShift):
        results.append(await handlers.StartShiftCmdHandler(uow).handle(message))
    elif isinstance(message, commands.EndShift):
        results.append(await handlers.EndShiftCmdHandler(uow).handle(message))
    elif isinstance(message, commands.Checkout):
        results.append(await handlers.CheckoutCmdHandler(uow).handle(message))
    elif isinstance(message, commands.ReturnRentals):
        results.append(await handlers.ReturnRentalsCmdHandler(uow).handle(message))
    elif isinstance(message, commands.PayInvoice):
        results.append(await handlers.PayInvoiceCmdHandler(uow).handle(message))
    else:
        raise Exception(f"Unknown message {message}")
    return results
