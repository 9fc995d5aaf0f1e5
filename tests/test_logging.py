from __future__ import annotations

import io
import json
import logging

from taskboard.core.config import Settings
from taskboard.core.context import (
    UNBOUND_REQUEST_ID,
    bind_request_id,
    get_request_id,
    request_id_scope,
    reset_request_id,
)
from taskboard.core.logging import build_logging_config, configure_logging


def test_configure_logging_outputs_json_with_request_id() -> None:
    settings = Settings(environment="test", log_level="INFO")
    configure_logging(settings)

    root_logger = logging.getLogger()
    handler = next(
        (h for h in root_logger.handlers if isinstance(h, logging.StreamHandler)),
        None,
    )
    assert handler is not None, "Expected JSON stream handler to be configured"

    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)

    token = bind_request_id("req-json-1")
    try:
        logger = logging.getLogger("taskboard.tests.logging")
        logger.info("structured log event", extra={"component": "unit-test", "task_id": "abc"})
    finally:
        handler.flush()
        reset_request_id(token)
        handler.setStream(previous_stream)

    log_lines = buffer.getvalue().strip().splitlines()
    assert log_lines, "Expected structured log line to be captured"
    payload = json.loads(log_lines[-1])

    assert payload["message"] == "structured log event"
    assert payload["request_id"] == "req-json-1"
    assert payload["environment"] == "test"
    assert payload["level"] == "INFO"
    assert payload["component"] == "unit-test"
    assert payload["task_id"] == "abc"
    assert payload["service"] == settings.project_name
    assert payload["version"] == settings.version


def test_unserialisable_extras_are_stringified() -> None:
    settings = Settings(environment="test", log_level="DEBUG")
    configure_logging(settings)

    handler = next(h for h in logging.getLogger().handlers if isinstance(h, logging.StreamHandler))
    buffer = io.StringIO()
    previous_stream = handler.setStream(buffer)
    try:
        logging.getLogger("taskboard.tests.logging").debug("odd extra", extra={"payload": {1, 2}})
    finally:
        handler.flush()
        handler.setStream(previous_stream)

    payload = json.loads(buffer.getvalue().strip().splitlines()[-1])
    assert payload["request_id"] == "-"
    assert isinstance(payload["payload"], str)


def test_access_and_driver_loggers_are_quietened() -> None:
    config = build_logging_config(Settings(environment="development"))

    loggers = config["loggers"]
    assert config["root"]["level"] == logging.DEBUG
    assert loggers["uvicorn.access"]["level"] == logging.WARNING
    assert loggers["pymongo"]["level"] == logging.WARNING
    assert loggers["taskboard.access"]["level"] == logging.DEBUG


def test_request_id_scope_binds_and_restores() -> None:
    assert get_request_id() == UNBOUND_REQUEST_ID
    with request_id_scope("req-scope") as bound:
        assert bound == "req-scope"
        assert get_request_id() == "req-scope"
        with request_id_scope(None):
            assert get_request_id() == "req-scope"
    assert get_request_id() == UNBOUND_REQUEST_ID
