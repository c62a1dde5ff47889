import io
import logging

import pytest

from project_finsight.logging_config import configure_logging, get_logger, reset_logging
from project_finsight.models import Invoice
from project_finsight.monthly import aggregate_monthly


@pytest.fixture(autouse=True)
def _reset():
    reset_logging()
    yield
    reset_logging()


def test_get_logger_uses_package_namespace() -> None:
    assert get_logger("monthly").name == "project_finsight.monthly"


def test_structured_output_includes_extra_fields() -> None:
    stream = io.StringIO()
    configure_logging(level="INFO", stream=stream)

    invoice = Invoice(
        id="inv-9",
        project_id="p1",
        client_name="ACME",
        amount=10,
        date="31/02/2025",
        status="paid",
    )
    aggregate_monthly([invoice], [])

    line = stream.getvalue().strip()
    assert "level=WARNING" in line
    assert "logger=project_finsight.monthly" in line
    assert "event=monthly_dates_skipped" in line
    assert "count=1" in line
    assert "records=invoice:inv-9" in line


def test_configure_logging_is_idempotent() -> None:
    configure_logging(level=logging.DEBUG, stream=io.StringIO())
    configure_logging(level=logging.DEBUG, stream=io.StringIO())

    assert len(logging.getLogger("project_finsight").handlers) == 1


def test_unknown_level_is_rejected() -> None:
    with pytest.raises(ValueError):
        configure_logging(level="LOUD")
