"""Where the active shift (store + staff on duty) is remembered between requests."""

import abc
import logging
from typing import TYPE_CHECKING, Any

import orjson
from redis.asyncio.client import Redis as Redis_

from app.rental.constants import SHIFT_KEY
from app.rental.domain.models import InvalidArgument, Shift
from app.rental.domain.values import parse_id

# redis-py Redis is generic only for type checkers
if TYPE_CHECKING:
    Redis = Redis_[bytes]
else:
    Redis = Redis_

logger = logging.getLogger(__name__)


def to_record(shift: Shift) -> bytes:
    return orjson.dumps(dict(storeId=str(shift.store_id), staffId=str(shift.staff_id)))


def from_record(raw: bytes | str | None) -> Shift | None:
    if not raw:
        return None
    try:
        record: Any = orjson.loads(raw)
    except orjson.JSONDecodeError:
        logger.warning("Ignoring unreadable shift record")
        return None
    if not isinstance(record, dict):
        return None
    store_id, staff_id = record.get("storeId"), record.get("staffId")
    if not isinstance(store_id, str) or not store_id or not isinstance(staff_id, str) or not staff_id:
        return None
    try:
        return Shift(store_id=parse_id(store_id, "Store ID"), staff_id=parse_id(staff_id, "Staff ID"))
    except InvalidArgument:
        return None


class AbstractShiftStore(abc.ABC):
    @abc.abstractmethod
    async def get(self) -> Shift | None:
        raise NotImplementedError

    @abc.abstractmethod
    async def save(self, shift: Shift) -> None:
        raise NotImplementedError

    @abc.abstractmethod
    async def clear(self) -> None:
        raise NotImplementedError


class RedisShiftStore(AbstractShiftStore):
    def __init__(self, redis: Redis, key: str = SHIFT_KEY) -> None:
        self._redis = redis
        self._key = key

    async def get(self) -> Shift | None:
        return from_record(await self._redis.get(self._key))

    async def save(self, shift: Shift) -> None:
        await self._redis.set(self._key, to_record(shift))

    async def clear(self) -> None:
        await self._redis.delete(self._key)
