import io
import logging

import pytest

import transaction_enrichment.logging_setup as logging_setup
from transaction_enrichment.logging_setup import configure_logging, get_logger


@pytest.fixture
def pkg_logger(monkeypatch: pytest.MonkeyPatch) -> logging.Logger:
    logger = logging.getLogger("transaction_enrichment")
    monkeypatch.setattr(logging_setup, "_configured", False)
    monkeypatch.setattr(logger, "handlers", [])
    monkeypatch.setattr(logger, "propagate", True)
    monkeypatch.setattr(logger, "level", logging.NOTSET)
    return logger


def test_configure_once_and_route_child_loggers(pkg_logger: logging.Logger):
    buf = io.StringIO()
    configure_logging("DEBUG", fmt="%(name)s %(levelname)s %(message)s", stream=buf)
    # Second call is a no-op.
    configure_logging("ERROR", stream=io.StringIO())

    get_logger("transaction_enrichment.enrich").debug("enrich:done id=%s", "t1")
    assert buf.getvalue() == "transaction_enrichment.enrich DEBUG enrich:done id=t1\n"
    assert len(pkg_logger.handlers) == 1
    assert pkg_logger.propagate is False


def test_level_from_environment(pkg_logger: logging.Logger, monkeypatch: pytest.MonkeyPatch):
    monkeypatch.setenv("TXN_ENRICHMENT_LOG_LEVEL", "warning")
    configure_logging(stream=io.StringIO())
    assert pkg_logger.level == logging.WARNING


@pytest.mark.parametrize(
    "level, expected",
    [(logging.ERROR, logging.ERROR), ("debug", logging.DEBUG), ("15", 15), ("bogus", logging.INFO)],
)
def test_parse_level(level, expected: int):
    assert logging_setup._parse_level(level) == expected


def test_unconfigured_library_use_is_silent(pkg_logger: logging.Logger):
    get_logger("transaction_enrichment.categorize")
    assert any(isinstance(h, logging.NullHandler) for h in pkg_logger.handlers)
