"""Data models and type aliases for ``transaction_enrichment``.

Input records arrive as :class:`RawTransactionView`, a read-only projection of
an imported bank transaction. The enrichment pipeline never mutates it; it
builds a fresh :class:`EnrichedTransaction` that carries the same fields plus
an ``enriched`` bundle.

Pydantic models use snake_case attribute names with camelCase aliases, so the
records round-trip with the JSON shape the bank-sync layer produces
(``merchantName``, ``locationLat``, ...).
"""

from __future__ import annotations

import datetime as dt
from dataclasses import dataclass
from typing import Any, Literal, TypeAlias

from pydantic import BaseModel, ConfigDict, field_validator
from pydantic.alias_generators import to_camel

# ---------------------------------------------------------------------------
# Merchant type tags
# ---------------------------------------------------------------------------

MerchantType: TypeAlias = Literal[
    "gas_station",
    "grocery_store",
    "restaurant",
    "coffee_shop",
    "online_retailer",
    "streaming_service",
    "unknown",
]
"""Coarse merchant classification produced by the type classifier."""

AmountContext: TypeAlias = Literal["expense", "income"]

UNKNOWN_MERCHANT_TYPE: MerchantType = "unknown"


class _CamelModel(BaseModel):
    model_config = ConfigDict(
        frozen=True,
        alias_generator=to_camel,
        populate_by_name=True,
        extra="ignore",
    )


# ---------------------------------------------------------------------------
# Input record
# ---------------------------------------------------------------------------


class RawTransactionView(_CamelModel):
    """The minimal read-only projection of a transaction consumed here.

    ``amount`` is signed: negative for expenses, positive for income. All
    location and payment fields are optional; the pipeline degrades to
    documented defaults when they are missing.
    """

    id: str
    account_id: str
    date: dt.date
    name: str
    amount: float
    merchant_name: str | None = None
    category: str | None = None
    location_address: str | None = None
    location_city: str | None = None
    location_region: str | None = None
    location_country: str | None = None
    location_postal_code: str | None = None
    location_lat: float | None = None
    location_lon: float | None = None
    payment_channel: str | None = None
    payment_method: str | None = None
    payment_processor: str | None = None
    personal_finance_category: str | None = None
    # Previously assigned two-level category; only read by history lookups.
    category_ai_granular: str | None = None
    category_ai_general: str | None = None

    @field_validator("date", mode="before")
    @classmethod
    def _date_part(cls, v: Any) -> Any:
        # Accept 'YYYY-MM-DD', 'YYYY-MM-DDTHH:MM:SS[Z]' and 'YYYY-MM-DD HH:MM:SS'.
        if isinstance(v, dt.datetime):
            return v.date()
        if isinstance(v, str):
            s = v.strip()
            return s.split()[0].split("T", 1)[0] if s else s
        return v

    @property
    def merchant_or_name(self) -> str:
        """Merchant name when present, else the display name."""

        return self.merchant_name or self.name


# ---------------------------------------------------------------------------
# Enrichment outputs
# ---------------------------------------------------------------------------


class CleanedMerchant(_CamelModel):
    """Merchant string at three stages: untouched, cleaned, and normalized.

    ``cleaned`` and ``normalized`` are always upper-case with single spaces
    between tokens. Empty input yields three empty strings.
    """

    original: str
    cleaned: str
    normalized: str


class LocationContext(_CamelModel):
    """Descriptive location fields plus a ``"lat, lon"`` pair and a summary.

    ``formatted`` is never empty: it falls back to ``"Unknown Location"``.
    """

    address: str
    city: str
    region: str
    country: str
    coordinates: str
    formatted: str


class MerchantFeatures(_CamelModel):
    geohash: str
    merchant_type: MerchantType
    location_context: str
    payment_context: str
    amount_context: AmountContext


class Enrichment(_CamelModel):
    cleaned_merchant: CleanedMerchant
    location_context: LocationContext
    merchant_features: MerchantFeatures
    ai_context: str


class EnrichedTransaction(RawTransactionView):
    """A :class:`RawTransactionView` plus its ``enriched`` bundle.

    Built fresh per call; the pipeline keeps no reference to it.
    """

    enriched: Enrichment


# ---------------------------------------------------------------------------
# Categorization outcomes
# ---------------------------------------------------------------------------


@dataclass(frozen=True, slots=True)
class RuleCategory:
    """A two-level category label.

    Produced by the router's deterministic branch; the classifier adapter
    returns its answers in the same shape.
    """

    granular: str
    general: str


CategorySource: TypeAlias = Literal["rule", "ai", "fallback"]


@dataclass(frozen=True, slots=True)
class CategorizationResult:
    """Final category for one transaction and where it came from.

    ``source`` is ``"rule"`` when a deterministic rule fired, ``"ai"`` when the
    external classifier answered, and ``"fallback"`` when the classifier call
    failed or omitted the item.
    """

    transaction: EnrichedTransaction
    category: RuleCategory
    source: CategorySource


__all__ = [
    "AmountContext",
    "CategorizationResult",
    "CategorySource",
    "CleanedMerchant",
    "EnrichedTransaction",
    "Enrichment",
    "LocationContext",
    "MerchantFeatures",
    "MerchantType",
    "RawTransactionView",
    "RuleCategory",
    "UNKNOWN_MERCHANT_TYPE",
]
