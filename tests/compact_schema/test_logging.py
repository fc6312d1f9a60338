from __future__ import annotations

import json
import logging

import pytest

from compact_schema.logging import JsonFormatter, get_logger, setup_logging, with_fields


def test_adapter_injects_default_fields(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="compact_schema.test")
    get_logger("compact_schema.test").warning("careful")
    [record] = caplog.records
    assert record.operation == "unknown"  # type: ignore[attr-defined]
    assert record.status == "warning"  # type: ignore[attr-defined]


def test_bound_fields_do_not_override_call_extras(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="compact_schema.test")
    logger = with_fields(get_logger("compact_schema.test"), declaration="TestUser", kind="record")
    logger = with_fields(logger, kind="union")
    logger.info("generated", extra={"operation": "schema", "declaration": "Other"})
    [record] = caplog.records
    assert record.declaration == "Other"  # type: ignore[attr-defined]
    assert record.kind == "union"  # type: ignore[attr-defined]
    assert record.operation == "schema"  # type: ignore[attr-defined]
    assert record.status == "success"  # type: ignore[attr-defined]


def test_inherited_level_helpers_infer_status(caplog: pytest.LogCaptureFixture) -> None:
    caplog.set_level(logging.DEBUG, logger="compact_schema.test")
    logger = get_logger("compact_schema.test")
    logger.error("failed", extra={"operation": "load"})
    try:
        raise ValueError("bad")
    except ValueError:
        logger.exception("crashed")
    failed, crashed = caplog.records
    assert failed.status == "error"  # type: ignore[attr-defined]
    assert failed.operation == "load"  # type: ignore[attr-defined]
    assert crashed.status == "error"  # type: ignore[attr-defined]
    assert crashed.exc_info is not None


def test_json_formatter() -> None:
    record = logging.LogRecord(
        "compact_schema.x", logging.ERROR, __file__, 1, "failed %s", ("A",), None
    )
    record.operation = "generate"
    record.ignored = object()
    payload = json.loads(JsonFormatter().format(record))
    assert payload["level"] == "ERROR"
    assert payload["message"] == "failed A"
    assert payload["operation"] == "generate"
    assert "ignored" not in payload


def test_setup_logging_configures_root() -> None:
    setup_logging("debug", json_output=True)
    root = logging.getLogger()
    assert root.level == logging.DEBUG
    assert isinstance(root.handlers[0].formatter, JsonFormatter)
