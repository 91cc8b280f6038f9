import io
import json
from decimal import Decimal

import pytest

from backend.app.core.errors import InvoiceCodeConflictError
from backend.app.core.logging import configure_logging, get_logger, reset_logging


@pytest.fixture
def log_stream():
    reset_logging()
    stream = io.StringIO()
    configure_logging(level="DEBUG", stream=stream)
    yield stream
    reset_logging()


def _lines(stream):
    return [json.loads(line) for line in stream.getvalue().splitlines() if line]


def test_log_lines_are_json_with_extra_fields(log_stream):
    get_logger("tests").info("settlement_created", extra={"student_id": 7, "total_amount": Decimal("300000")})

    [entry] = _lines(log_stream)
    assert entry["message"] == "settlement_created"
    assert entry["logger"] == "center_billing.tests"
    assert entry["level"] == "INFO"
    assert entry["student_id"] == 7
    assert entry["total_amount"] == "300000"


def test_exception_code_is_logged(log_stream):
    logger = get_logger("tests")
    try:
        raise InvoiceCodeConflictError("STL-1")
    except InvoiceCodeConflictError:
        logger.exception("settlement_failed")

    [entry] = _lines(log_stream)
    assert entry["exc_type"] == "InvoiceCodeConflictError"
    assert entry["exc_code"] == "INVOICE_CODE_CONFLICT"
    assert "traceback" in entry


def test_configure_logging_is_idempotent(log_stream):
    configure_logging(level="DEBUG", stream=io.StringIO())
    get_logger("tests").info("once")
    assert len(_lines(log_stream)) == 1
