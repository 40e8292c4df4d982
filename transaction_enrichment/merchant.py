"""Merchant name cleaning and synonym normalization.

Cleaning order is fixed:

1. trim
2. strip ISO (``YYYY-MM-DD``) and US (``MM/DD/YYYY``) dates
3. strip runs of 5+ digits (reference ids)
4. strip two-letter region/country codes paired with 4+ digits, either order
5. strip trailing legal-entity suffixes (``CO``, ``USA``, ``LLC``, ``INC``,
   ``CORP``, ``LTD``) until none remains
6. collapse whitespace and upper-case -> ``cleaned``

``normalized`` is ``cleaned`` after the synonym table is applied.
"""

from __future__ import annotations

from .config import DEFAULT_CONFIG, EnrichmentConfig
from .models import CleanedMerchant


def _strip_suffixes(text: str, config: EnrichmentConfig) -> str:
    while True:
        before = text
        for pattern in config.suffix_patterns:
            text = pattern.sub("", text)
        if text == before:
            return text


class MerchantNameCleaner:
    """Strip noise tokens from merchant strings and collapse known variants."""

    def __init__(self, config: EnrichmentConfig = DEFAULT_CONFIG) -> None:
        self._config = config

    def clean(self, merchant_or_name: str | None) -> CleanedMerchant:
        if not merchant_or_name or not merchant_or_name.strip():
            return CleanedMerchant(original="", cleaned="", normalized="")

        original = merchant_or_name.strip()

        cleaned = original
        for pattern in self._config.noise_patterns:
            cleaned = pattern.sub("", cleaned)
        cleaned = _strip_suffixes(cleaned, self._config)
        cleaned = " ".join(cleaned.split()).upper()

        return CleanedMerchant(
            original=original, cleaned=cleaned, normalized=self.normalize(cleaned)
        )

    def normalize(self, cleaned: str) -> str:
        """Apply the synonym table to an already-cleaned string.

        Quirk: every entry is tested against ``cleaned`` and
        each match overwrites the previous result, so the LAST matching entry
        wins and earlier substitutions are discarded. Only the first
        occurrence of the variant is replaced.
        """

        normalized = cleaned
        for variant, canonical in self._config.synonyms:
            if variant not in cleaned:
                continue
            # "MCD" inside "MCDONALDS" is already canonical; re-expanding it
            # would break re-cleaning idempotence. Identity entries still
            # match and reset the result to `cleaned`.
            if variant != canonical and variant in canonical and canonical in cleaned:
                continue
            normalized = cleaned.replace(variant, canonical, 1)
        return normalized


_DEFAULT_CLEANER = MerchantNameCleaner()


def clean_merchant_name(merchant_or_name: str | None) -> CleanedMerchant:
    """Clean ``merchant_or_name`` with the built-in tables."""

    return _DEFAULT_CLEANER.clean(merchant_or_name)


__all__ = ["MerchantNameCleaner", "clean_merchant_name"]
