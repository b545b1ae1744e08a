from __future__ import annotations

import logging

import pytest

from coursetrack.core.logging import _ContainerFormatter, _JsonFormatter, setup_logging


@pytest.fixture(autouse=True)
def restore_root_logger():
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def _record(level: int, msg: str = "hello", pathname: str = "test.py", lineno: int = 1):
    return logging.LogRecord(
        name="test",
        level=level,
        pathname=pathname,
        lineno=lineno,
        msg=msg,
        args=(),
        exc_info=None,
    )


def test_setup_logging_sets_root_level() -> None:
    setup_logging("debug")
    assert logging.getLogger().level == logging.DEBUG

    setup_logging("warning")
    assert logging.getLogger().level == logging.WARNING


def test_setup_logging_defaults_to_info_for_unknown_level() -> None:
    setup_logging("nonexistent")
    assert logging.getLogger().level == logging.INFO


def test_setup_logging_replaces_handlers() -> None:
    setup_logging("info")
    setup_logging("info")
    assert len(logging.getLogger().handlers) == 1


def test_setup_logging_picks_formatter() -> None:
    setup_logging("info", json_format=True)
    assert isinstance(logging.getLogger().handlers[0].formatter, _JsonFormatter)

    setup_logging("info")
    assert isinstance(logging.getLogger().handlers[0].formatter, _ContainerFormatter)


@pytest.mark.parametrize("name", ["uvicorn", "sqlalchemy.engine", "httpx"])
def test_setup_logging_quiets_noisy_loggers_at_debug(name: str) -> None:
    setup_logging("debug")
    assert logging.getLogger(name).level == logging.WARNING


def test_setup_logging_allows_uvicorn_at_error() -> None:
    setup_logging("error")
    assert logging.getLogger("uvicorn").level == logging.ERROR


def test_formatter_excludes_location_for_info() -> None:
    output = _ContainerFormatter().format(_record(logging.INFO))
    assert "hello" in output
    assert "[test.py:" not in output


def test_formatter_includes_location_for_warning() -> None:
    output = _ContainerFormatter().format(
        _record(logging.WARNING, "bad thing", lineno=42)
    )
    assert "bad thing" in output
    assert "[test.py:42]" in output


def test_formatter_includes_location_for_error() -> None:
    output = _ContainerFormatter().format(
        _record(logging.ERROR, "broke", pathname="svc.py", lineno=99)
    )
    assert "[svc.py:99]" in output
