"""Unit tests for the logging utility."""

from __future__ import annotations

import json
import logging

from credkeep.core.logger import JSONFormatter, RequestIdFilter, configure_logging


def test_configure_logging_sets_level() -> None:
    """``configure_logging`` should set the root logger level."""

    # Act
    configure_logging("DEBUG")

    # Assert
    assert logging.getLogger().level == logging.DEBUG


def test_json_formatter_includes_credential_extras() -> None:
    record = logging.LogRecord(
        name="credkeep.services.credentials.service",
        level=logging.WARNING,
        pathname=__file__,
        lineno=1,
        msg="credential.mismatch",
        args=(),
        exc_info=None,
    )
    record.uid = "alice@example.com"
    record.client = "web"

    payload = json.loads(JSONFormatter().format(record))

    assert payload["message"] == "credential.mismatch"
    assert payload["level"] == "WARNING"
    assert payload["uid"] == "alice@example.com"
    assert payload["client"] == "web"


def test_request_id_filter_redacts_tokens_outside_requests() -> None:
    record = logging.LogRecord("x", logging.INFO, __file__, 1, "credential.issued", (), None)
    record.token = "plaintext"

    assert RequestIdFilter().filter(record) is True
    assert record.token == "***"
    assert record.request_id is None


def test_unknown_level_name_falls_back_to_info() -> None:
    configure_logging("CHATTY")

    assert logging.getLogger().level == logging.INFO
