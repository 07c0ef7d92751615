"""Input validation for payment creation and list queries.

Each validator runs the matching pydantic model over untyped input and never
raises for malformed data. It returns `Invalid` carrying every field error
found, so a client can fix all problems in one round trip.
"""

from dataclasses import dataclass
from typing import Any, Generic, Mapping, TypeVar

from pydantic import ValidationError

from paylite.payments.schemas import FieldError, PaymentCreateRequest, PaymentListQuery


T = TypeVar("T")


@dataclass(frozen=True)
class Valid(Generic[T]):
    value: T


@dataclass(frozen=True)
class Invalid:
    errors: list[FieldError]


ValidationResult = Valid[T] | Invalid

CURRENCY_FORMAT = "Currency must be a 3-letter ISO currency code (e.g., AUD)"
LIMIT_RANGE = "Limit must be between 1 and 100"

# (field path, pydantic error type) -> client-facing message.
MESSAGES: dict[tuple[str, str], str] = {
    ("amount", "missing"): "Amount is required",
    ("amount", "finite_number"): "Amount must be a finite number",
    ("amount", "greater_than"): "Amount must be greater than zero",
    ("currency", "missing"): "Currency is required",
    ("currency", "string_pattern_mismatch"): CURRENCY_FORMAT,
    ("limit", "greater_than_equal"): LIMIT_RANGE,
    ("limit", "less_than_equal"): LIMIT_RANGE,
    ("skip", "greater_than_equal"): "Skip must be zero or greater",
}

# Any other failure on a field is a type or parse error.
TYPE_MESSAGES: dict[str, str] = {
    "amount": "Amount must be a number",
    "currency": "Currency must be a string",
    "limit": "Limit must be a number",
    "skip": "Skip must be a number",
}


def _as_dict(raw: Any) -> dict[str, Any]:
    # Non-object payloads fail every required-field rule.
    return dict(raw) if isinstance(raw, Mapping) else {}


def _field_errors(exc: ValidationError) -> list[FieldError]:
    errors = []
    for error in exc.errors():
        field = ".".join(str(part) for part in error["loc"])
        message = MESSAGES.get((field, error["type"])) or TYPE_MESSAGES.get(field, error["msg"])
        errors.append(FieldError(field=field, message=message))
    return errors


def validate_create(raw: Any) -> ValidationResult[PaymentCreateRequest]:
    """Validate a creation payload: positive finite `amount`, ISO-shaped `currency`."""

    try:
        return Valid(PaymentCreateRequest.model_validate(_as_dict(raw)))
    except ValidationError as exc:
        return Invalid(_field_errors(exc))


def validate_list_query(raw: Any) -> ValidationResult[PaymentListQuery]:
    """Validate list query parameters, applying pagination defaults."""

    try:
        return Valid(PaymentListQuery.model_validate(_as_dict(raw)))
    except ValidationError as exc:
        return Invalid(_field_errors(exc))
