from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

import uvicorn
from fastapi import Body, Depends, FastAPI, HTTPException, Request
from fastapi.responses import JSONResponse
from pydantic import BaseModel

from app.config import config
from app.logging_utils import configure_logging
from app.rental.adapters.client import ApiError, error_message
from app.rental.domain import commands, models
from app.rental.domain.models import InsufficientStock, InvalidArgument
from app.rental.domain.values import filter_rentals
from app.rental.entrypoints.dependencies import rental_uow
from app.rental.service_layer import messagebus, views
from app.rental.service_layer.handlers import NoActiveShift
from app.rental.service_layer.unit_of_work import AbstractUnitOfWork


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    configure_logging(config.LOG_LEVEL)
    yield


app = FastAPI(title="Rental POS", lifespan=lifespan)


class CartItem(BaseModel):
    film_id: str | int
    quantity: int


@app.exception_handler(InvalidArgument)
async def invalid_argument_handler(request: Request, exc: InvalidArgument) -> JSONResponse:
    return JSONResponse(status_code=400, content={"detail": str(exc)})


@app.exception_handler(InsufficientStock)
async def insufficient_stock_handler(request: Request, exc: InsufficientStock) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc), "film_id": exc.film_id})


@app.exception_handler(NoActiveShift)
async def no_active_shift_handler(request: Request, exc: NoActiveShift) -> JSONResponse:
    return JSONResponse(status_code=409, content={"detail": str(exc)})


@app.exception_handler(ApiError)
async def api_error_handler(request: Request, exc: ApiError) -> JSONResponse:
    status_code = exc.status if 400 <= exc.status < 500 else 502
    return JSONResponse(
        status_code=status_code,
        content={"detail": error_message(exc), "code": exc.code, "request_id": exc.request_id},
    )


async def _shift_or_409(uow: AbstractUnitOfWork) -> models.Shift:
    shift = await views.current_shift(uow.shifts)
    if shift is None:
        raise NoActiveShift("No active shift, start a shift first")
    return shift


@app.get("/stores")
async def stores(uow: AbstractUnitOfWork = Depends(rental_uow)) -> list[models.Store]:
    async with uow:
        return await views.list_stores(uow.backend)


@app.get("/staff")
async def staff(uow: AbstractUnitOfWork = Depends(rental_uow)) -> list[models.Staff]:
    async with uow:
        return await views.list_staff(uow.backend)


@app.get("/shift")
async def get_shift(uow: AbstractUnitOfWork = Depends(rental_uow)) -> models.Shift:
    async with uow:
        shift = await views.current_shift(uow.shifts)
    if shift is None:
        raise HTTPException(status_code=404, detail="No active shift")
    return shift


@app.post("/shift", status_code=201)
async def start_shift(
    store_id: str | int = Body(),
    staff_id: str | int = Body(),
    uow: AbstractUnitOfWork = Depends(rental_uow),
) -> models.Shift:
    [shift] = await messagebus.handle(commands.StartShift(store_id, staff_id), uow)
    return shift


@app.delete("/shift", status_code=204)
async def end_shift(uow: AbstractUnitOfWork = Depends(rental_uow)) -> None:
    await messagebus.handle(commands.EndShift(), uow)


@app.get("/customers")
async def customers(query: str = "", uow: AbstractUnitOfWork = Depends(rental_uow)) -> list[models.Customer]:
    async with uow:
        return await views.lookup_customers(query, uow.backend)


@app.get("/films")
async def films(query: str = "", uow: AbstractUnitOfWork = Depends(rental_uow)) -> list[models.Film]:
    async with uow:
        return await views.lookup_films(query, uow.backend)


@app.get("/films/{film_id}/availability")
async def film_availability(film_id: str, uow: AbstractUnitOfWork = Depends(rental_uow)) -> models.Availability:
    async with uow:
        shift = await _shift_or_409(uow)
        return await views.film_availability(film_id, shift.store_id, uow.backend)


@app.post("/checkout", status_code=201)
async def checkout(
    customer_id: str | int = Body(),
    cart: list[CartItem] = Body(),
    uow: AbstractUnitOfWork = Depends(rental_uow),
) -> models.CheckoutResult:
    cmd = commands.Checkout(
        customer_id=customer_id,
        cart=[commands.CheckoutLine(film_id=item.film_id, quantity=item.quantity) for item in cart],
    )
    [result] = await messagebus.handle(cmd, uow)
    return result


@app.get("/rentals/open")
async def open_rentals(query: str = "", uow: AbstractUnitOfWork = Depends(rental_uow)) -> list[models.Rental]:
    async with uow:
        shift = await _shift_or_409(uow)
        rentals = await views.list_open_rentals(shift.store_id, uow.backend)
    return filter_rentals(rentals, query)


@app.post("/returns")
async def return_rentals(
    rental_ids: list[str | int] = Body(embed=True),
    uow: AbstractUnitOfWork = Depends(rental_uow),
) -> models.ReturnResult:
    [result] = await messagebus.handle(commands.ReturnRentals(rental_ids), uow)
    return result


@app.get("/invoices/{rental_id}")
async def invoice(rental_id: str, uow: AbstractUnitOfWork = Depends(rental_uow)) -> models.Invoice:
    async with uow:
        return await views.get_invoice(rental_id, uow.backend)


@app.post("/payments", status_code=201)
async def pay(
    rental_id: str | int = Body(),
    amount: float = Body(),
    uow: AbstractUnitOfWork = Depends(rental_uow),
) -> models.PaymentResult:
    [result] = await messagebus.handle(commands.PayInvoice(rental_id, amount), uow)
    return result


if __name__ == "__main__":
    uvicorn.run("app.rental.entrypoints.restapi:app", host="0.0.0.0", port=8000)
