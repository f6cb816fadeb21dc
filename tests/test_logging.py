"""Tests for structlog configuration."""

from __future__ import annotations

import json
import logging

import pytest
import structlog

from health_dropin.health import evaluate_checks
from health_dropin.logging import UVICORN_LOGGERS, get_logger, setup_logging


def _state(logger: logging.Logger) -> tuple:
    return logger.handlers[:], logger.level, logger.propagate


@pytest.fixture
def restore_logging():
    loggers = [logging.getLogger(), *(logging.getLogger(n) for n in UVICORN_LOGGERS)]
    saved = [_state(logger) for logger in loggers]
    yield
    for logger, (handlers, level, propagate) in zip(loggers, saved):
        logger.handlers[:] = handlers
        logger.setLevel(level)
        logger.propagate = propagate
    structlog.reset_defaults()


def _json_lines(out: str) -> list[dict]:
    return [json.loads(line) for line in out.strip().splitlines()]


class TestSetupLogging:
    def test_json_lines_carry_service(self, restore_logging, capsys) -> None:
        setup_logging(log_level="INFO", json_logs=True, service_name="billing")
        get_logger("tests").info("health_check_failing", check="db")

        record = _json_lines(capsys.readouterr().out)[-1]
        assert record["event"] == "health_check_failing"
        assert record["check"] == "db"
        assert record["service"] == "billing"
        assert record["level"] == "info"
        assert record["logger"] == "tests"

    def test_level_filters(self, restore_logging, capsys) -> None:
        setup_logging(log_level="WARNING", json_logs=True)
        get_logger("tests").info("quiet")
        assert capsys.readouterr().out == ""

    def test_package_loggers_are_module_named(self, restore_logging, capsys) -> None:
        setup_logging(json_logs=True)
        evaluate_checks([lambda: 1])

        record = _json_lines(capsys.readouterr().out)[-1]
        assert record["event"] == "health_check_invalid_result"
        assert record["logger"] == "health_dropin.health"


class TestUvicornLoggers:
    def test_routed_through_root(self, restore_logging) -> None:
        for name in UVICORN_LOGGERS:
            logging.getLogger(name).addHandler(logging.NullHandler())
            logging.getLogger(name).propagate = False

        setup_logging()

        for name in UVICORN_LOGGERS:
            logger = logging.getLogger(name)
            assert logger.handlers == []
            assert logger.propagate is True

    def test_records_rendered_as_json(self, restore_logging, capsys) -> None:
        setup_logging(json_logs=True, service_name="billing")
        logging.getLogger("uvicorn.error").info("Started server process")

        record = _json_lines(capsys.readouterr().out)[-1]
        assert record["event"] == "Started server process"
        assert record["logger"] == "uvicorn.error"
        assert record["service"] == "billing"
