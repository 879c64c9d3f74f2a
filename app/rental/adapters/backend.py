import abc
from typing import Any, TypeVar

from pydantic import BaseModel, TypeAdapter, ValidationError

from app.rental.adapters import dto
from app.rental.adapters.client import ApiClient, ApiError
from app.rental.constants import LOOKUP_LIMIT, MAX_LIMIT

M = TypeVar("M", bound=BaseModel)


class AbstractRentalBackend(abc.ABC):
    @abc.abstractmethod
    async def list_stores(self) -> list[dto.StoreResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_staff(self) -> list[dto.StaffResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_customers(self, limit: int = LOOKUP_LIMIT) -> list[dto.CustomerResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def lookup_customers(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupCustomerResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_films(self, limit: int = LOOKUP_LIMIT) -> list[dto.FilmResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def lookup_films(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupFilmResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_film(self, film_id: int) -> dto.FilmResponse:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_film_availability(self, film_id: int, store_id: int) -> dto.FilmAvailabilityResponse:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_open_rentals(self, store_id: int) -> list[dto.RentalResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def list_film_inventories(self, film_id: int) -> list[dto.InventoryResponse]:
        raise NotImplementedError

    @abc.abstractmethod
    async def checkout(
        self, customer_id: int, staff_id: int, store_id: int, inventory_ids: list[int]
    ) -> dto.CheckoutResponse:
        raise NotImplementedError

    @abc.abstractmethod
    async def get_invoice(self, rental_id: int) -> dto.InvoiceResponse:
        raise NotImplementedError

    @abc.abstractmethod
    async def return_rentals(self, rental_ids: list[int]) -> dto.ReturnBatchResponse:
        raise NotImplementedError

    @abc.abstractmethod
    async def create_payment(self, customer_id: int, staff_id: int, rental_id: int, amount: float) -> None:
        raise NotImplementedError


def _parse(model: type[M], data: Any) -> M:
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise ApiError(f"Unexpected {model.__name__} payload", status=500, details=e.errors()) from e


def _parse_list(model: type[M], data: Any) -> list[M]:
    try:
        return TypeAdapter(list[model]).validate_python(data)  # type: ignore[valid-type]
    except ValidationError as e:
        raise ApiError(f"Unexpected {model.__name__} list payload", status=500, details=e.errors()) from e


class HttpRentalBackend(AbstractRentalBackend):
    def __init__(self, client: ApiClient) -> None:
        self._client = client

    async def list_stores(self) -> list[dto.StoreResponse]:
        data = await self._client.fetch_data("GET", "stores", params=dict(limit=MAX_LIMIT))
        return _parse_list(dto.StoreResponse, data)

    async def list_staff(self) -> list[dto.StaffResponse]:
        data = await self._client.fetch_data("GET", "staff", params=dict(limit=MAX_LIMIT))
        return _parse_list(dto.StaffResponse, data)

    async def list_customers(self, limit: int = LOOKUP_LIMIT) -> list[dto.CustomerResponse]:
        data = await self._client.fetch_data("GET", "customers", params=dict(limit=limit))
        return _parse_list(dto.CustomerResponse, data)

    async def lookup_customers(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupCustomerResponse]:
        data = await self._client.fetch_data("GET", "lookup/customers", params=dict(query=query, limit=limit))
        return _parse_list(dto.LookupCustomerResponse, data)

    async def list_films(self, limit: int = LOOKUP_LIMIT) -> list[dto.FilmResponse]:
        data = await self._client.fetch_data("GET", "films", params=dict(limit=limit))
        return _parse(dto.FilmListResponse, data).data

    async def lookup_films(self, query: str, limit: int = LOOKUP_LIMIT) -> list[dto.LookupFilmResponse]:
        data = await self._client.fetch_data("GET", "lookup/films", params=dict(query=query, limit=limit))
        return _parse_list(dto.LookupFilmResponse, data)

    async def get_film(self, film_id: int) -> dto.FilmResponse:
        data = await self._client.fetch_data("GET", f"films/{film_id}")
        return _parse(dto.FilmResponse, data)

    async def get_film_availability(self, film_id: int, store_id: int) -> dto.FilmAvailabilityResponse:
        data = await self._client.fetch_data("GET", f"films/{film_id}/availability", params=dict(storeId=store_id))
        return _parse(dto.FilmAvailabilityResponse, data)

    async def list_open_rentals(self, store_id: int) -> list[dto.RentalResponse]:
        data = await self._client.fetch_data(
            "GET", "rentals", params=dict(storeId=store_id, status="open", limit=MAX_LIMIT)
        )
        return _parse_list(dto.RentalResponse, data)

    async def list_film_inventories(self, film_id: int) -> list[dto.InventoryResponse]:
        data = await self._client.fetch_data("GET", f"films/{film_id}/inventories", params=dict(limit=MAX_LIMIT))
        return _parse_list(dto.InventoryResponse, data)

    async def checkout(
        self, customer_id: int, staff_id: int, store_id: int, inventory_ids: list[int]
    ) -> dto.CheckoutResponse:
        result = await self._client.request(
            "POST",
            "rentals/checkout",
            json=dict(customerId=customer_id, staffId=staff_id, storeId=store_id, inventoryIds=inventory_ids),
        )
        response = _parse(dto.CheckoutResponse, result.data or {})
        response.message = result.message
        return response

    async def get_invoice(self, rental_id: int) -> dto.InvoiceResponse:
        data = await self._client.fetch_data("GET", f"rentals/{rental_id}/invoice")
        return _parse(dto.InvoiceResponse, data)

    async def return_rentals(self, rental_ids: list[int]) -> dto.ReturnBatchResponse:
        data = await self._client.fetch_data("POST", "rentals/return-batch", json=dict(rentalIds=rental_ids))
        return _parse(dto.ReturnBatchResponse, data)

    async def create_payment(self, customer_id: int, staff_id: int, rental_id: int, amount: float) -> None:
        await self._client.request(
            "POST",
            "payments",
            json=dict(customerId=customer_id, staffId=staff_id, rentalId=rental_id, amount=amount),
        )
