from __future__ import annotations

from collections.abc import Sequence
from datetime import date, datetime, timedelta, timezone

from app.rental.constants import DEFAULT_RENTAL_DURATION
from app.rental.domain.models import InvalidArgument, Rental, RentalStatus


def parse_id(value: str | int, field: str) -> int:
    """Turn an identifier typed into a form into a positive integer."""
    if isinstance(value, bool):
        raise InvalidArgument(f"{field} is invalid")
    if isinstance(value, int):
        parsed = value
    elif isinstance(value, str) and value.strip().isdecimal():
        parsed = int(value.strip())
    else:
        raise InvalidArgument(f"{field} is invalid")
    if parsed <= 0:
        raise InvalidArgument(f"{field} is invalid")
    return parsed


def parse_date(value: str | date | None) -> date | None:
    if value is None:
        return None
    if isinstance(value, datetime):
        return _utc(value).date()
    if isinstance(value, date):
        return value
    try:
        parsed = datetime.fromisoformat(value.strip().replace("Z", "+00:00"))
    except ValueError:
        return None
    return _utc(parsed).date()


def _utc(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value
    return value.astimezone(timezone.utc)


def due_date(rental_date: str | date | None, duration: int | None) -> date | None:
    start = parse_date(rental_date)
    if start is None:
        return None
    if not duration or duration <= 0:
        duration = DEFAULT_RENTAL_DURATION
    return start + timedelta(days=duration)


def rental_status(due: date | None, now: date | datetime) -> RentalStatus:
    # only meaningful for rentals that have not been returned yet
    if isinstance(now, datetime):
        now = _utc(now).date()
    if due is not None and due < now:
        return RentalStatus.LATE
    return RentalStatus.OPEN


def person_name(first_name: str, last_name: str) -> str:
    return f"{first_name} {last_name}".strip()


def filter_rentals(rentals: Sequence[Rental], query: str) -> list[Rental]:
    normalized = query.strip().lower()
    if not normalized:
        return list(rentals)
    return [r for r in rentals if normalized in f"{r.id} {r.film_title} {r.customer_name}".lower()]
