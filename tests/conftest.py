"""Shared fixtures: in-memory repository, controllable clock, wired service."""

import pytest

from paylite.payments.cache import TTLCache
from paylite.payments.repository import Page, PaymentRepository
from paylite.payments.schemas import Payment
from paylite.payments.service import PaymentService


class FakePaymentRepository(PaymentRepository):
    """Dict-backed repository that records calls and can be told to fail."""

    def __init__(self) -> None:
        self.by_id: dict[str, Payment] = {}
        self.calls: list[tuple[str, object]] = []
        self.fail_with: Exception | None = None

    def _record(self, name: str, arg: object) -> None:
        self.calls.append((name, arg))
        if self.fail_with is not None:
            raise self.fail_with

    def count(self, name: str) -> int:
        return sum(1 for call, _ in self.calls if call == name)

    async def create(self, payment: Payment) -> None:
        self._record("create", payment)
        self.by_id[payment.id] = payment

    async def get_by_id(self, payment_id: str) -> Payment | None:
        self._record("get_by_id", payment_id)
        return self.by_id.get(payment_id)

    async def scan(self, currency: str | None, limit: int, skip: int) -> Page:
        self._record("scan", (currency, limit, skip))
        matches = [p for p in self.by_id.values() if currency is None or p.currency == currency]
        return Page(items=matches[skip : skip + limit], total=len(matches))


class FakeClock:
    def __init__(self, start: float = 1000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def cache(clock: FakeClock) -> TTLCache:
    return TTLCache(ttl_seconds=60, max_entries=10, clock=clock, name="test")


@pytest.fixture
def repository() -> FakePaymentRepository:
    return FakePaymentRepository()


@pytest.fixture
def service(repository: FakePaymentRepository, cache: TTLCache) -> PaymentService:
    return PaymentService(repository, cache, service_name="test")
