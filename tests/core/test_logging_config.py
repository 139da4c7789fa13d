# tests/core/test_logging_config.py
import io
import logging

import pytest
from rich.console import Console
from rich.logging import RichHandler

from core import logging_config
from core.logging_config import DEFAULT_LOGGER_NAME, configure_logging


@pytest.fixture(autouse=True)
def restore_root_logger(monkeypatch):
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    monkeypatch.setattr(logging_config, "_configured", False)
    yield
    root.handlers[:] = handlers
    root.setLevel(level)


def test_installs_rich_handler():
    stream = io.StringIO()

    logger = configure_logging("info", console=Console(file=stream, width=120))

    assert logger.name == DEFAULT_LOGGER_NAME
    root = logging.getLogger()
    assert root.level == logging.INFO
    assert any(isinstance(handler, RichHandler) for handler in root.handlers)

    logger.info("hello from recordguard")
    assert "hello from recordguard" in stream.getvalue()


def test_second_call_is_noop_unless_forced():
    configure_logging("warning", console=Console(file=io.StringIO()))
    configure_logging("debug", console=Console(file=io.StringIO()))
    assert logging.getLogger().level == logging.WARNING

    configure_logging("debug", console=Console(file=io.StringIO()), force=True)
    assert logging.getLogger().level == logging.DEBUG


def test_unknown_level_falls_back_to_warning():
    assert logging_config._parse_level("loud") == logging.WARNING
    assert logging_config._parse_level(None) == logging.WARNING
    assert logging_config._parse_level(10) == logging.DEBUG
