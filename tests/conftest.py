"""Pytest configuration for test isolation.

The package reads ``TXN_ENRICHMENT_CONFIG`` and ``TXN_ENRICHMENT_LOG_LEVEL``
from the environment. A developer shell (or a ``.env`` loaded by an earlier
CLI test) may have them set, which would change the tables under test, so an
autouse fixture clears them for every test.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any

import pytest

from transaction_enrichment.models import RawTransactionView


@pytest.fixture(autouse=True)
def _isolate_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in ("TXN_ENRICHMENT_CONFIG", "TXN_ENRICHMENT_LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)


def _mk_tx(**overrides: Any) -> RawTransactionView:
    base: dict[str, Any] = {
        "id": "tx-1",
        "account_id": "acct-1",
        "date": "2025-06-15",
        "name": "Test Merchant",
        "amount": -10.0,
    }
    base.update(overrides)
    return RawTransactionView(**base)


@pytest.fixture
def mk_tx() -> Callable[..., RawTransactionView]:
    """Factory for :class:`RawTransactionView` with sensible required fields."""

    return _mk_tx
