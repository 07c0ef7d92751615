"""Payment persistence port and its SQLAlchemy adapter."""

import asyncio
from abc import ABC, abstractmethod
from dataclasses import dataclass

from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError

from paylite.payments.models import PaymentRecord
from paylite.payments.schemas import Payment


class RepositoryError(Exception):
    """The backing store could not complete a call."""


@dataclass(frozen=True)
class Page:
    """A window of matching payments plus the count of all matches."""

    items: list[Payment]
    total: int


class PaymentRepository(ABC):
    """Port for payment persistence.

    Any failure surfaces as an exception; callers do not retry.
    """

    @abstractmethod
    async def create(self, payment: Payment) -> None:
        """Persist a new payment."""

    @abstractmethod
    async def get_by_id(self, payment_id: str) -> Payment | None:
        """Return the payment, or None when no record exists."""

    @abstractmethod
    async def scan(self, currency: str | None, limit: int, skip: int) -> Page:
        """Return at most `limit` payments after skipping `skip`, optionally filtered by currency."""


def _to_payment(record: PaymentRecord) -> Payment:
    # The Float column hands back 1000.0 for an amount created as 1000.
    amount = int(record.amount) if record.amount.is_integer() else record.amount
    return Payment(id=record.id, amount=amount, currency=record.currency)


class SqlPaymentRepository(PaymentRepository):
    """Payment repository over a SQLAlchemy session factory.

    Sessions are synchronous, so each call runs in a worker thread to keep the
    event loop free.
    """

    def __init__(self, session_factory) -> None:
        self.session_factory = session_factory

    async def create(self, payment: Payment) -> None:
        await asyncio.to_thread(self._create, payment)

    async def get_by_id(self, payment_id: str) -> Payment | None:
        return await asyncio.to_thread(self._get_by_id, payment_id)

    async def scan(self, currency: str | None, limit: int, skip: int) -> Page:
        return await asyncio.to_thread(self._scan, currency, limit, skip)

    def _create(self, payment: Payment) -> None:
        try:
            with self.session_factory() as db:
                db.add(PaymentRecord(id=payment.id, amount=payment.amount, currency=payment.currency))
                db.commit()
        except SQLAlchemyError as exc:
            raise RepositoryError(f"failed to create payment {payment.id}") from exc

    def _get_by_id(self, payment_id: str) -> Payment | None:
        try:
            with self.session_factory() as db:
                record = db.get(PaymentRecord, payment_id)
                return _to_payment(record) if record else None
        except SQLAlchemyError as exc:
            raise RepositoryError(f"failed to load payment {payment_id}") from exc

    def _scan(self, currency: str | None, limit: int, skip: int) -> Page:
        count_query = select(func.count()).select_from(PaymentRecord)
        page_query = select(PaymentRecord).order_by(PaymentRecord.created_at, PaymentRecord.id)
        if currency is not None:
            count_query = count_query.where(PaymentRecord.currency == currency)
            page_query = page_query.where(PaymentRecord.currency == currency)
        try:
            with self.session_factory() as db:
                total = db.execute(count_query).scalar_one()
                records = db.execute(page_query.offset(skip).limit(limit)).scalars().all()
                return Page(items=[_to_payment(r) for r in records], total=total)
        except SQLAlchemyError as exc:
            raise RepositoryError("failed to scan payments") from exc
