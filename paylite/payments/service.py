"""Payment use cases.

Each use case validates its input, consults the cache where the read path
allows it, calls the repository, and returns an outcome value. Expected
conditions (bad input, unknown id) are outcomes, never exceptions. Anything
the repository raises is logged once here and reported as `InternalFailure`.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Any
from uuid import uuid4

from paylite.common.config import settings
from paylite.common.logging import logger, payment_id_ctx
from paylite.common.metrics import payment_requests_total, repository_latency_seconds
from paylite.payments.cache import CacheMarker, TTLCache
from paylite.payments.repository import PaymentRepository
from paylite.payments.schemas import FieldError, Payment
from paylite.payments.validation import Invalid, validate_create, validate_list_query


PAYMENT_ID_PATTERN = re.compile(r"[0-9a-fA-F]{8}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{4}-[0-9a-fA-F]{12}")
CACHE_KEY_PREFIX = "payment:"


class BadRequestReason(str, Enum):
    REQUIRED = "required"
    MALFORMED = "malformed"


@dataclass(frozen=True)
class ValidationFailed:
    errors: list[FieldError]


@dataclass(frozen=True)
class BadRequest:
    reason: BadRequestReason


@dataclass(frozen=True)
class InternalFailure:
    pass


@dataclass(frozen=True)
class Created:
    payment_id: str


@dataclass(frozen=True)
class Found:
    payment: Payment


@dataclass(frozen=True)
class NotFound:
    payment_id: str


@dataclass(frozen=True)
class Listed:
    items: list[Payment]
    total: int
    limit: int
    skip: int


CreateOutcome = Created | ValidationFailed | InternalFailure
GetOutcome = Found | NotFound | BadRequest | InternalFailure
ListOutcome = Listed | ValidationFailed | InternalFailure


def cache_key(payment_id: str) -> str:
    return f"{CACHE_KEY_PREFIX}{payment_id}"


class PaymentService:
    """Coordinates validation, caching and persistence for payment requests."""

    def __init__(self, repository: PaymentRepository, cache: TTLCache, service_name: str | None = None) -> None:
        self.repository = repository
        self.cache = cache
        self.service_name = service_name or settings.service_name

    def _count(self, operation: str, outcome: Any) -> None:
        payment_requests_total.labels(
            service=self.service_name,
            operation=operation,
            outcome=type(outcome).__name__,
        ).inc()

    async def create_payment(self, raw: Any) -> CreateOutcome:
        """Validate `raw` and persist a new payment under a fresh identifier."""

        outcome = await self._create_payment(raw)
        self._count("create", outcome)
        return outcome

    async def _create_payment(self, raw: Any) -> CreateOutcome:
        result = validate_create(raw)
        if isinstance(result, Invalid):
            logger.warning("payment_validation_failed errors=%s", [e.model_dump() for e in result.errors])
            return ValidationFailed(result.errors)

        payment = Payment(id=str(uuid4()), amount=result.value.amount, currency=result.value.currency)
        payment_id_ctx.set(payment.id)
        try:
            with repository_latency_seconds.labels(service=self.service_name, operation="create").time():
                await self.repository.create(payment)
        except Exception:
            logger.exception("payment_create_failed payment_id=%s", payment.id)
            return InternalFailure()

        logger.info("payment_created payment_id=%s", payment.id)
        return Created(payment.id)

    async def get_payment(self, raw_id: str | None) -> GetOutcome:
        """Fetch one payment, serving repeated lookups from the cache."""

        outcome = await self._get_payment(raw_id)
        self._count("get", outcome)
        return outcome

    async def _get_payment(self, raw_id: str | None) -> GetOutcome:
        if not raw_id:
            logger.warning("payment_id_missing")
            return BadRequest(BadRequestReason.REQUIRED)
        if not PAYMENT_ID_PATTERN.fullmatch(raw_id):
            logger.warning("payment_id_malformed payment_id=%r", raw_id)
            return BadRequest(BadRequestReason.MALFORMED)

        payment_id_ctx.set(raw_id)
        key = cache_key(raw_id)
        cached = self.cache.get(key)
        if cached is not CacheMarker.NOT_CACHED:
            logger.info("payment_cache_hit payment_id=%s", raw_id)
            payment = None if cached is CacheMarker.ABSENT else cached
        else:
            logger.info("payment_cache_miss payment_id=%s", raw_id)
            try:
                with repository_latency_seconds.labels(service=self.service_name, operation="get_by_id").time():
                    payment = await self.repository.get_by_id(raw_id)
            except Exception:
                logger.exception("payment_lookup_failed payment_id=%s", raw_id)
                return InternalFailure()
            self.cache.set(key, CacheMarker.ABSENT if payment is None else payment)

        if payment is None:
            logger.warning("payment_not_found payment_id=%s", raw_id)
            return NotFound(raw_id)
        return Found(payment)

    async def list_payments(self, raw_query: Any) -> ListOutcome:
        """Return one page of payments. List results are never cached."""

        outcome = await self._list_payments(raw_query)
        self._count("list", outcome)
        return outcome

    async def _list_payments(self, raw_query: Any) -> ListOutcome:
        result = validate_list_query(raw_query)
        if isinstance(result, Invalid):
            logger.warning("payment_list_validation_failed errors=%s", [e.model_dump() for e in result.errors])
            return ValidationFailed(result.errors)

        query = result.value
        try:
            with repository_latency_seconds.labels(service=self.service_name, operation="scan").time():
                page = await self.repository.scan(query.currency, query.limit, query.skip)
        except Exception:
            logger.exception("payment_list_failed currency=%s limit=%s skip=%s", query.currency, query.limit, query.skip)
            return InternalFailure()

        return Listed(items=page.items, total=page.total, limit=query.limit, skip=query.skip)
