"""Tests for startup config logging and log context injection."""

import logging

from fastapi.testclient import TestClient

from paylite.common.config import settings
from paylite.common.logging import ContextFilter, payment_id_ctx, trace_id_ctx
from paylite.common.startup import _safe_env
from paylite.payments.main import build_app


def test_secret_like_names_are_redacted(monkeypatch):
    monkeypatch.setenv("SOME_API_KEY", "hunter2")
    monkeypatch.setenv("CACHE_TTL_SECONDS", "30")

    assert _safe_env("SOME_API_KEY") == "<redacted>"
    assert _safe_env("CACHE_TTL_SECONDS") == "30"
    assert _safe_env("NOT_SET_ANYWHERE_123") == "<unset>"


def test_database_url_credentials_are_redacted(monkeypatch):
    monkeypatch.setenv("DATABASE_URL", "postgresql+psycopg://user:pw@db:5432/payments")

    assert _safe_env("DATABASE_URL") == "postgresql+psycopg://<redacted>@db:5432/payments"


def test_context_filter_injects_correlation_fields():
    trace_token = trace_id_ctx.set("trace-1")
    payment_token = payment_id_ctx.set("pay-1")
    try:
        record = logging.LogRecord("paylite", logging.INFO, __file__, 1, "msg", None, None)
        assert ContextFilter().filter(record)
        assert record.trace_id == "trace-1"
        assert record.payment_id == "pay-1"
        assert record.service_name == settings.service_name
    finally:
        trace_id_ctx.reset(trace_token)
        payment_id_ctx.reset(payment_token)


def test_app_builds_with_tracing_enabled(monkeypatch, service):
    monkeypatch.setattr(settings, "tracing_enabled", True)

    client = TestClient(build_app(service))

    assert client.get("/health").status_code == 200
