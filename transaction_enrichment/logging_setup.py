"""Logging for ``transaction_enrichment``.

Every module asks :func:`get_logger` for a child of the ``transaction_enrichment``
logger and never installs handlers itself. The CLI calls
:func:`configure_logging` once at startup; until that happens the package
logger only carries a ``NullHandler``, so embedding applications see nothing
unless they configure logging themselves.

Message texts follow an ``area:event key=value ...`` shape, for example
``categorize:batch_done batch_index=0 count=20 latency_ms=812.40``.
"""

from __future__ import annotations

import logging
import os
import sys
from typing import IO

PACKAGE_LOGGER = "transaction_enrichment"
LOG_LEVEL_ENV = "TXN_ENRICHMENT_LOG_LEVEL"
DEFAULT_FORMAT = "%(asctime)s %(name)s %(levelname)s %(message)s"

_configured = False


def _parse_level(level: int | str | None) -> int:
    """Resolve ``level`` to a numeric level.

    ``None`` consults ``TXN_ENRICHMENT_LOG_LEVEL``. Names are case-insensitive
    and digit strings are taken literally; anything unrecognised means INFO.
    """

    if level is None:
        level = os.getenv(LOG_LEVEL_ENV) or logging.INFO
    if isinstance(level, int):
        return level
    name = level.strip().upper()
    if name.isdigit():
        return int(name)
    resolved = logging.getLevelNamesMapping().get(name)
    return resolved if resolved is not None else logging.INFO


def configure_logging(
    level: int | str | None = None,
    *,
    fmt: str | None = None,
    stream: IO[str] = sys.stderr,
) -> None:
    """Send package logs to ``stream``; later calls are ignored.

    Parameters
    ----------
    level:
        ``int`` or level name. ``None`` reads ``TXN_ENRICHMENT_LOG_LEVEL`` and
        falls back to INFO.
    fmt:
        Format string; defaults to :data:`DEFAULT_FORMAT`.
    stream:
        Destination of the single ``StreamHandler``.
    """

    global _configured
    if _configured:
        return

    numeric = _parse_level(level)
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    for h in [h for h in pkg_logger.handlers if isinstance(h, logging.NullHandler)]:
        pkg_logger.removeHandler(h)

    handler = logging.StreamHandler(stream)
    handler.setLevel(numeric)
    handler.setFormatter(logging.Formatter(fmt or DEFAULT_FORMAT))
    pkg_logger.addHandler(handler)
    pkg_logger.setLevel(numeric)
    # The root logger would print every record a second time.
    pkg_logger.propagate = False

    _configured = True


def get_logger(name: str) -> logging.Logger:
    pkg_logger = logging.getLogger(PACKAGE_LOGGER)
    if not _configured and not pkg_logger.handlers:
        pkg_logger.addHandler(logging.NullHandler())
    return logging.getLogger(name)


__all__ = ["DEFAULT_FORMAT", "LOG_LEVEL_ENV", "PACKAGE_LOGGER", "configure_logging", "get_logger"]
