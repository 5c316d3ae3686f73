from __future__ import annotations

import logging

import pytest

from hueforge.logging_setup import TRACE_LEVEL, level_from_verbosity, setup_logging


@pytest.mark.parametrize(
    ("verbose", "quiet", "level"),
    [
        (0, False, logging.WARNING),
        (1, False, logging.INFO),
        (2, False, logging.DEBUG),
        (3, False, TRACE_LEVEL),
        (0, True, logging.ERROR),
    ],
)
def test_level_from_verbosity(verbose: int, quiet: bool, level: int) -> None:
    assert level_from_verbosity(verbose, quiet) == level


def test_setup_is_idempotent_unless_forced(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("LOG_LEVEL", raising=False)
    pkg = logging.getLogger("hueforge")
    setup_logging(logging.INFO, force=True)
    assert len(pkg.handlers) == 1
    setup_logging(logging.DEBUG)
    assert len(pkg.handlers) == 1
    assert pkg.level == logging.INFO
    setup_logging(logging.DEBUG, force=True)
    assert len(pkg.handlers) == 1
    assert pkg.level == logging.DEBUG


@pytest.mark.parametrize(("env", "level"), [("debug", logging.DEBUG), ("TRACE", TRACE_LEVEL)])
def test_env_overrides_level(monkeypatch: pytest.MonkeyPatch, env: str, level: int) -> None:
    monkeypatch.setenv("LOG_LEVEL", env)
    setup_logging(logging.WARNING, force=True)
    assert logging.getLogger("hueforge").level == level
    monkeypatch.delenv("LOG_LEVEL")
    setup_logging(logging.WARNING, force=True)
