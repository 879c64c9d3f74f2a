from typing import Any

from pydantic import BaseModel


class ApiErrorBody(BaseModel):
    code: str | None = None
    message: str | None = None
    details: Any = None


class ApiEnvelope(BaseModel):
    success: bool
    message: str | None = None
    data: Any = None
    meta: Any = None
    error: ApiErrorBody | None = None
    request_id: str | None = None


class StoreResponse(BaseModel):
    store_id: int
    manager_staff_id: int | None = None


class StaffResponse(BaseModel):
    staff_id: int
    first_name: str
    last_name: str
    store_id: int
    active: bool


class CustomerResponse(BaseModel):
    customer_id: int
    first_name: str
    last_name: str
    email: str = ""


class LookupCustomerResponse(BaseModel):
    customer_id: int
    name: str
    email: str = ""


class LookupFilmResponse(BaseModel):
    film_id: int
    title: str


class FilmResponse(BaseModel):
    film_id: int
    title: str
    rental_duration: int | None = None


class FilmListResponse(BaseModel):
    data: list[FilmResponse]


class FilmAvailabilityResponse(BaseModel):
    film_id: int
    total: int
    available: int


class InventoryResponse(BaseModel):
    inventory_id: int
    film_id: int
    store_id: int


class RentalResponse(BaseModel):
    rental_id: int
    rental_date: str
    inventory_id: int
    customer_id: int


class InvoiceRental(BaseModel):
    rental_id: int
    rental_date: str


class InvoiceFilm(BaseModel):
    film_id: int
    title: str
    rental_rate: float


class InvoiceCustomer(BaseModel):
    customer_id: int
    first_name: str
    last_name: str


class InvoiceSummary(BaseModel):
    total_paid: float
    amount_due: float


class InvoiceResponse(BaseModel):
    rental: InvoiceRental
    film: InvoiceFilm
    customer: InvoiceCustomer
    summary: InvoiceSummary


class CheckoutResponse(BaseModel):
    rental_ids: list[int] = []
    message: str | None = None


class ReturnBatchResponse(BaseModel):
    updated: list[int] = []
    skipped: list[int] = []
