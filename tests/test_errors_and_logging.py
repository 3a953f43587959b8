import json
import logging

import pytest

from invoicely.services import logging as invoicely_logging
from invoicely.services.errors import (
    ConflictError,
    ErrorCode,
    ExchangeRateProviderError,
    NotFoundError,
    TemplateRenderError,
    ValidationFailedError,
    status_for,
)


class _Capture(logging.Handler):
    def __init__(self):
        super().__init__()
        self.records = []

    def emit(self, record):
        self.records.append(record)


@pytest.fixture
def captured():
    handler = _Capture()
    invoicely_logging.logger.addHandler(handler)
    yield handler.records
    invoicely_logging.logger.removeHandler(handler)


@pytest.mark.parametrize("error, status", [
    (NotFoundError("Invoice", "INVC-1"), 404),
    (ValidationFailedError("amount", "Amount must be non-negative"), 400),
    (ConflictError("Cannot delete client with existing invoices"), 409),
    (ExchangeRateProviderError("USD", "timeout"), 502),
    (TemplateRenderError("retro", "boom"), 500),
])
def test_status_mapping(error, status):
    assert status_for(error) == status


def test_error_payload_shape():
    error = TemplateRenderError("retro-neon", "No templates registered")
    assert error.to_dict() == {
        "error": "TEMPLATE_RENDER_FAILED",
        "message": "Could not load template: retro-neon",
        "detail": "No templates registered",
        "context": {"template_id": "retro-neon"},
    }


def test_error_payload_omits_empty_fields():
    assert ConflictError("busy").to_dict() == {"error": ErrorCode.CONFLICT.value, "message": "busy"}


def test_log_request_attaches_extra_fields(captured):
    invoicely_logging.log_request("GET", "/health", 200, 12.5, user_id="USR-1", client_id="127.0.0.1")

    record = captured[-1]
    assert record.getMessage() == "GET /health 200 (12.5ms)"
    assert record.extra_fields["duration_ms"] == 12.5
    assert record.extra_fields["user_id"] == "USR-1"
    assert record.extra_fields["client_id"] == "127.0.0.1"


def test_log_error_with_context(captured):
    invoicely_logging.log_error("render_failed", "Could not load template", {"template_id": "retro"})

    record = captured[-1]
    assert record.levelno == logging.ERROR
    assert record.extra_fields == {"type": "error", "error_type": "render_failed", "template_id": "retro"}


def test_log_pdf_render_flags_template_fallback(captured):
    invoicely_logging.log_pdf_render("INV-004", "retro-neon", "modern-minimalist", duration_ms=40.0)

    fields = captured[-1].extra_fields
    assert captured[-1].getMessage() == "Rendered INV-004 with modern-minimalist"
    assert fields["fallback"] is True
    assert fields["reused"] is False
    assert fields["duration_ms"] == 40.0


def test_log_pdf_render_requested_template_is_not_a_fallback(captured):
    invoicely_logging.log_pdf_render("INV-004", "classic-professional", "classic-professional", reused=True)

    fields = captured[-1].extra_fields
    assert fields["fallback"] is False
    assert fields["reused"] is True
    assert "duration_ms" not in fields


def test_configure_logging_is_idempotent():
    try:
        configured = invoicely_logging.configure_logging(level="debug", json_logs=True)
        configured = invoicely_logging.configure_logging(level="debug", json_logs=True)

        assert configured is logging.getLogger("invoicely")
        assert configured.level == logging.DEBUG
        assert len(configured.handlers) == 1
        assert isinstance(configured.handlers[0].formatter, invoicely_logging.JSONFormatter)
        assert configured.propagate is False
    finally:
        invoicely_logging.configure_logging()


def test_json_formatter_merges_extra_fields():
    record = logging.LogRecord("invoicely.test", logging.WARNING, "", 0, "rate fallback", (), None)
    record.extra_fields = {"pair": "USD-EUR"}

    payload = json.loads(invoicely_logging.JSONFormatter().format(record))

    assert payload["level"] == "WARNING"
    assert payload["message"] == "rate fallback"
    assert payload["pair"] == "USD-EUR"
