"""Read-side queries backing the point-of-sale screens."""

import asyncio
import logging
from datetime import datetime, timezone

from app.rental.adapters.backend import AbstractRentalBackend
from app.rental.adapters.client import ApiError
from app.rental.adapters.shift_store import AbstractShiftStore
from app.rental.constants import DEFAULT_RENTAL_DURATION, LOOKUP_LIMIT
from app.rental.domain import models
from app.rental.domain.values import due_date, parse_id, person_name, rental_status

logger = logging.getLogger(__name__)


async def current_shift(shifts: AbstractShiftStore) -> models.Shift | None:
    return await shifts.get()


async def list_stores(backend: AbstractRentalBackend) -> list[models.Store]:
    return [models.Store(id=s.store_id, label=f"Store #{s.store_id}") for s in await backend.list_stores()]


async def list_staff(backend: AbstractRentalBackend) -> list[models.Staff]:
    return [
        models.Staff(id=s.staff_id, label=person_name(s.first_name, s.last_name), store_id=s.store_id)
        for s in await backend.list_staff()
        if s.active
    ]


async def lookup_customers(query: str, backend: AbstractRentalBackend) -> list[models.Customer]:
    normalized = query.strip()
    if not normalized:
        return [
            models.Customer(id=c.customer_id, name=person_name(c.first_name, c.last_name), email=c.email)
            for c in await backend.list_customers(limit=LOOKUP_LIMIT)
        ]
    return [
        models.Customer(id=c.customer_id, name=c.name, email=c.email)
        for c in await backend.lookup_customers(normalized, limit=LOOKUP_LIMIT)
    ]


async def lookup_films(query: str, backend: AbstractRentalBackend) -> list[models.Film]:
    normalized = query.strip()
    if not normalized:
        films = await backend.list_films(limit=LOOKUP_LIMIT)
    else:
        films = await backend.lookup_films(normalized, limit=LOOKUP_LIMIT)
    return [models.Film(id=f.film_id, title=f.title) for f in films]


async def film_availability(
    film_id: str | int, store_id: str | int, backend: AbstractRentalBackend
) -> models.Availability:
    parsed_film_id = parse_id(film_id, "Film ID")
    parsed_store_id = parse_id(store_id, "Store ID")
    availability = await backend.get_film_availability(parsed_film_id, parsed_store_id)
    return models.Availability(
        film_id=parsed_film_id, available=availability.available, total=availability.total
    )


async def list_open_rentals(
    store_id: str | int,
    backend: AbstractRentalBackend,
    now: datetime | None = None,
) -> list[models.Rental]:
    """Open rentals of a store with their due date and OPEN/LATE status.

    Rentals whose invoice cannot be loaded are left out of the list.
    """
    parsed_store_id = parse_id(store_id, "Store ID")
    rentals = await backend.list_open_rentals(parsed_store_id)
    if not rentals:
        return []

    outcomes = await asyncio.gather(*(backend.get_invoice(r.rental_id) for r in rentals), return_exceptions=True)
    loaded = []
    for rental, outcome in zip(rentals, outcomes):
        if isinstance(outcome, ApiError):
            logger.warning("Skipping rental %s, invoice unavailable: %s", rental.rental_id, outcome)
            continue
        if isinstance(outcome, BaseException):
            raise outcome
        loaded.append((rental, outcome))
    if not loaded:
        return []

    film_ids = list(dict.fromkeys(invoice.film.film_id for _, invoice in loaded))
    films = await asyncio.gather(*(backend.get_film(film_id) for film_id in film_ids))
    durations = {film.film_id: film.rental_duration or DEFAULT_RENTAL_DURATION for film in films}

    now = now or datetime.now(timezone.utc)
    result = []
    for rental, invoice in loaded:
        due = due_date(rental.rental_date, durations.get(invoice.film.film_id, DEFAULT_RENTAL_DURATION))
        result.append(
            models.Rental(
                id=rental.rental_id,
                customer_id=rental.customer_id,
                customer_name=person_name(invoice.customer.first_name, invoice.customer.last_name),
                film_id=invoice.film.film_id,
                film_title=invoice.film.title,
                status=rental_status(due, now),
                due_date=due,
            )
        )
    return result


async def get_invoice(rental_id: str | int, backend: AbstractRentalBackend) -> models.Invoice:
    invoice = await backend.get_invoice(parse_id(rental_id, "Rental ID"))
    return models.Invoice(
        id=invoice.rental.rental_id,
        rental_id=invoice.rental.rental_id,
        total=invoice.film.rental_rate,
        paid=invoice.summary.total_paid,
        due=invoice.summary.amount_due,
        customer_id=invoice.customer.customer_id,
        customer_name=person_name(invoice.customer.first_name, invoice.customer.last_name),
        film_title=invoice.film.title,
    )
