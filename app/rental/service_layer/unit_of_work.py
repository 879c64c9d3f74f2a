from __future__ import annotations

import abc
from typing import Any

from app.config import config
from app.rental.adapters.backend import AbstractRentalBackend, HttpRentalBackend
from app.rental.adapters.client import ApiClient
from app.rental.adapters.shift_store import AbstractShiftStore, Redis, RedisShiftStore


class AbstractUnitOfWork(abc.ABC):
    async def __aenter__(self) -> AbstractUnitOfWork:
        return self

    async def __aexit__(self, *args: Any) -> None:
        await self.close()

    @property
    @abc.abstractmethod
    def backend(self) -> AbstractRentalBackend:
        raise NotImplementedError

    @property
    @abc.abstractmethod
    def shifts(self) -> AbstractShiftStore:
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:
        raise NotImplementedError


class HttpUnitOfWork(AbstractUnitOfWork):
    def __init__(
        self, base_url: str | None = None, redis_dsn: str | None = None, timeout: float | None = None
    ) -> None:
        self._base_url = base_url or config.API_BASE_URL
        self._redis_dsn = redis_dsn or config.REDIS_DSN
        self._timeout = timeout or config.API_TIMEOUT
        self._client: ApiClient = None
        self._redis: Redis = None
        self._backend: HttpRentalBackend = None
        self._shifts: RedisShiftStore = None

    @property
    def backend(self) -> AbstractRentalBackend:
        return self._backend

    @property
    def shifts(self) -> AbstractShiftStore:
        return self._shifts

    async def __aenter__(self) -> AbstractUnitOfWork:
        # clients are bound to the running event loop, so they are created here and not in __init__
        self._client = ApiClient(self._base_url, timeout=self._timeout)
        self._redis = Redis.from_url(self._redis_dsn)
        self._backend = HttpRentalBackend(self._client)
        self._shifts = RedisShiftStore(self._redis)
        return await super().__aenter__()

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
        if self._redis is not None:
            await self._redis.aclose()
