"""Tests for singleton logging configuration."""

from __future__ import annotations

import logging
from unittest.mock import patch

import pytest

from sourcemap_doctor.logging_config import (
    _SUPPRESSED_LOGGERS,
    LOG_DATEFMT,
    LOG_FORMAT,
    setup_logging,
)


@pytest.fixture(autouse=True)
def _reset_flag() -> None:
    """Reset singleton flag before each test."""
    import sourcemap_doctor.logging_config as mod

    mod._setup_done = False


def test_setup_logging_is_idempotent() -> None:
    with patch(
        "sourcemap_doctor.logging_config.logging.basicConfig"
    ) as mock_bc:
        setup_logging()
        setup_logging()  # second call is no-op
        mock_bc.assert_called_once()


def test_level_passed_to_basic_config() -> None:
    with patch(
        "sourcemap_doctor.logging_config.logging.basicConfig"
    ) as mock_bc:
        setup_logging("debug")
    mock_bc.assert_called_once_with(
        level=logging.DEBUG, format=LOG_FORMAT, datefmt=LOG_DATEFMT
    )


def test_http_loggers_suppressed() -> None:
    setup_logging("DEBUG")
    for name in _SUPPRESSED_LOGGERS:
        lg = logging.getLogger(name)
        assert lg.level == logging.WARNING, (
            f"Logger {name!r} level is {lg.level}, expected WARNING"
        )
