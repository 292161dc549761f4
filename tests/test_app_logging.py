"""Tests for logging configuration."""

import logging

from diet_planner.app_logging import configure_logging


def test_configure_logging_idempotent() -> None:
    logger = logging.getLogger("diet_planner")
    logger.handlers.clear()

    configure_logging()
    configure_logging()

    assert len(logger.handlers) == 1
    assert logger.level == logging.INFO


def test_configure_logging_updates_level() -> None:
    logger = logging.getLogger("diet_planner")
    logger.handlers.clear()

    configure_logging("info")
    configure_logging("debug")

    assert len(logger.handlers) == 1
    assert logger.level == logging.DEBUG
    configure_logging()
