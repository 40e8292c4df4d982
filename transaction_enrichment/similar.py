"""Similar-merchant lookups over previously categorized transactions.

These helpers give the external classifier examples of how comparable
merchants were categorized before. They operate on a caller-supplied history
(already-categorized :class:`RawTransactionView` records); fetching that
history is the persistence layer's job.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from .geohash import UNKNOWN_GEOHASH, encode_geohash, shared_prefix
from .merchant import MerchantNameCleaner, clean_merchant_name
from .models import CleanedMerchant, RawTransactionView

NO_MERCHANT_PATTERNS = "No merchant patterns available."
NO_LOCATION_PATTERNS = "No location-based patterns available."


@dataclass(frozen=True, slots=True)
class SimilarMerchant:
    merchant_name: str
    location: str
    category: str
    confidence: float


def _is_categorized(tx: RawTransactionView) -> bool:
    return bool(tx.category_ai_granular or tx.category_ai_general)


def _category_label(tx: RawTransactionView) -> str:
    return tx.category_ai_granular or tx.category_ai_general or "Unknown"


def _city_region(tx: RawTransactionView) -> str:
    return ", ".join(p for p in (tx.location_city, tx.location_region) if p)


def similarity_score(
    transaction: RawTransactionView,
    candidate: RawTransactionView,
    cleaned: CleanedMerchant,
    geohash: str,
) -> float:
    """Score how closely ``candidate`` resembles ``transaction`` in [0, 1].

    Weights: name 0.6 (normalized) or 0.4 (cleaned), same geohash 0.3 or
    same 4-character prefix 0.1, same city 0.2, same region 0.1.
    """

    score = 0.0

    candidate_name = (candidate.merchant_or_name or "").upper()
    if candidate_name and cleaned.normalized and (
        cleaned.normalized in candidate_name or candidate_name in cleaned.normalized
    ):
        score += 0.6
    elif candidate_name and cleaned.cleaned and (
        cleaned.cleaned in candidate_name or candidate_name in cleaned.cleaned
    ):
        score += 0.4

    candidate_geohash = encode_geohash(candidate.location_lat, candidate.location_lon)
    if UNKNOWN_GEOHASH not in (geohash, candidate_geohash):
        if candidate_geohash == geohash:
            score += 0.3
        elif shared_prefix(candidate_geohash, geohash, 4):
            score += 0.1

    if transaction.location_city and candidate.location_city == transaction.location_city:
        score += 0.2
    if transaction.location_region and candidate.location_region == transaction.location_region:
        score += 0.1

    return min(score, 1.0)


def _name_matches(candidate: RawTransactionView, needles: Sequence[str]) -> bool:
    haystacks = [
        h.casefold() for h in (candidate.name, candidate.merchant_name) if h
    ]
    return any(n in h for n in needles for h in haystacks)


def find_similar_merchants(
    transaction: RawTransactionView,
    history: Iterable[RawTransactionView],
    *,
    limit: int = 3,
    cleaner: MerchantNameCleaner | None = None,
) -> list[SimilarMerchant]:
    """Return up to ``limit`` categorized history entries resembling ``transaction``.

    Candidates must be categorized, must not be the transaction itself, and
    must mention the cleaned or normalized merchant in their name or merchant
    name (case-insensitive). The newest ``2 * limit`` candidates are scored and
    the best ``limit`` are returned, highest confidence first.
    """

    if limit <= 0:
        return []
    cleaned = (
        cleaner.clean(transaction.merchant_or_name)
        if cleaner is not None
        else clean_merchant_name(transaction.merchant_or_name)
    )
    needles = [n.casefold() for n in dict.fromkeys((cleaned.normalized, cleaned.cleaned)) if n]
    if not needles:
        return []

    candidates = [
        c
        for c in history
        if _is_categorized(c) and c.id != transaction.id and _name_matches(c, needles)
    ]
    candidates.sort(key=lambda c: c.date, reverse=True)
    candidates = candidates[: limit * 2]

    geohash = encode_geohash(transaction.location_lat, transaction.location_lon)
    scored = [
        SimilarMerchant(
            merchant_name=c.merchant_or_name,
            location=_city_region(c),
            category=_category_label(c),
            confidence=similarity_score(transaction, c, cleaned, geohash),
        )
        for c in candidates
    ]
    scored.sort(key=lambda m: m.confidence, reverse=True)
    return scored[:limit]


def format_similar_merchants(merchants: Sequence[SimilarMerchant]) -> str:
    return "\n".join(f"{m.merchant_name} ({m.location}) → {m.category}" for m in merchants)


def merchant_patterns(history: Iterable[RawTransactionView], *, limit: int = 20) -> str:
    """Summarize recurring merchant → category assignments, most frequent first."""

    counts: Counter[tuple[str, str | None, str | None, str | None]] = Counter(
        (tx.name, tx.merchant_name, tx.category_ai_granular, tx.category_ai_general)
        for tx in history
        if _is_categorized(tx)
    )
    lines = [
        f"{merchant or name} → {granular or general} ({n} times)"
        for (name, merchant, granular, general), n in counts.most_common()
        if n >= 2
    ][:limit]
    return "\n".join(lines) if lines else NO_MERCHANT_PATTERNS


def location_patterns(
    history: Iterable[RawTransactionView],
    *,
    city: str | None = None,
    region: str | None = None,
    limit: int = 10,
) -> str:
    """Like :func:`merchant_patterns`, grouped per city/region and optionally filtered."""

    counts: Counter[tuple[str, str | None, str | None, str | None, str | None, str | None]] = (
        Counter(
            (
                tx.name,
                tx.merchant_name,
                tx.category_ai_granular,
                tx.category_ai_general,
                tx.location_city,
                tx.location_region,
            )
            for tx in history
            if _is_categorized(tx)
            and (city is None or tx.location_city == city)
            and (region is None or tx.location_region == region)
        )
    )
    lines: list[str] = []
    for (name, merchant, granular, general, tx_city, tx_region), n in counts.most_common():
        if n < 2:
            continue
        where = ", ".join(p for p in (tx_city, tx_region) if p)
        lines.append(f"{merchant or name} ({where}) → {granular or general} ({n} times)")
        if len(lines) >= limit:
            break
    return "\n".join(lines) if lines else NO_LOCATION_PATTERNS


__all__ = [
    "NO_LOCATION_PATTERNS",
    "NO_MERCHANT_PATTERNS",
    "SimilarMerchant",
    "find_similar_merchants",
    "format_similar_merchants",
    "location_patterns",
    "merchant_patterns",
    "similarity_score",
]
