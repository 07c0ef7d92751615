"""API request/response schemas for payment endpoints."""

from typing import Annotated

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    Strict,
    StringConstraints,
    ValidationInfo,
    field_validator,
)
from pydantic_core import PydanticCustomError


CurrencyCode = Annotated[str, Strict(), StringConstraints(pattern=r"^[A-Z]{3}$")]


class PaymentCreateRequest(BaseModel):
    """Payment creation payload. Any client-supplied `id` is ignored."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    amount: float = Field(strict=True, gt=0, allow_inf_nan=False)
    currency: CurrencyCode

    @field_validator("amount", mode="wrap")
    @classmethod
    def keep_integer_amounts(cls, value, handler):
        # 1000 stays 1000 rather than becoming 1000.0.
        validated = handler(value)
        return value if type(value) is int else validated


class PaymentListQuery(BaseModel):
    """List filter and pagination window, coerced from query-string values."""

    model_config = ConfigDict(frozen=True, extra="ignore")

    currency: CurrencyCode | None = None
    limit: int = Field(default=20, ge=1, le=100)
    skip: int = Field(default=0, ge=0)

    @field_validator("limit", "skip", mode="before")
    @classmethod
    def blank_means_default(cls, value, info: ValidationInfo):
        if value is None or value == "":
            return cls.model_fields[info.field_name].default
        if isinstance(value, str) and not value.isascii():
            raise PydanticCustomError("int_parsing", "Input should be a valid integer")
        return value


class Payment(BaseModel):
    """A stored payment record. Never mutated after creation."""

    model_config = ConfigDict(frozen=True)

    id: str
    amount: int | float
    currency: str


class FieldError(BaseModel):
    """One field-level validation problem."""

    model_config = ConfigDict(frozen=True)

    field: str
    message: str


class PaymentCreatedResponse(BaseModel):
    """Body returned by `POST /payments`."""

    id: str


class PaymentListResponse(BaseModel):
    """One page of payments plus the total number of matches."""

    data: list[Payment]
    total: int
    limit: int
    skip: int


class ErrorResponse(BaseModel):
    """Error body shared by every non-2xx response."""

    error: str
    message: str
    details: list[FieldError] | None = None
