"""Static configuration tables for merchant cleaning and type inference.

All tables live on an immutable :class:`EnrichmentConfig`; components receive
one in their constructor instead of reading module globals. ``DEFAULT_CONFIG``
holds the built-in tables. A JSON file can override the synonym table, the
merchant-type keyword rules, and the gas-station snack threshold (see
:func:`load_config`).
"""

from __future__ import annotations

import json
import os
import re
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from .models import MerchantType

CONFIG_PATH_ENV = "TXN_ENRICHMENT_CONFIG"


class ConfigError(ValueError):
    """Raised when a configuration file cannot be read or is invalid."""


# ---------------------------------------------------------------------------
# Built-in tables
# ---------------------------------------------------------------------------

# Ordered: substitution iterates every entry and the last match wins.
MERCHANT_SYNONYMS: tuple[tuple[str, str], ...] = (
    ("STBCKS", "STARBUCKS"),
    ("S-BUCKS", "STARBUCKS"),
    ("STARBUCKS COFFEE", "STARBUCKS"),
    ("MCDONALDS", "MCDONALDS"),
    ("MCD", "MCDONALDS"),
    ("WALMART", "WALMART"),
    ("WAL-MART", "WALMART"),
    ("TARGET", "TARGET"),
    ("TARGET STORE", "TARGET"),
    ("SHELL", "SHELL"),
    ("SHELL OIL", "SHELL"),
    ("EXXON", "EXXON"),
    ("EXXONMOBIL", "EXXON"),
    ("SAFEWAY", "SAFEWAY"),
    ("KROGER", "KROGER"),
    ("KROGER CO", "KROGER"),
    ("AMAZON", "AMAZON"),
    ("AMAZON.COM", "AMAZON"),
    ("NETFLIX", "NETFLIX"),
    ("SPOTIFY", "SPOTIFY"),
    ("HULU", "HULU"),
    ("DISNEY", "DISNEY"),
    ("DISNEY+", "DISNEY"),
    ("HBO", "HBO"),
    ("HBO MAX", "HBO"),
    ("YOUTUBE", "YOUTUBE"),
    ("YOUTUBE PREMIUM", "YOUTUBE"),
    ("APPLE", "APPLE"),
    ("APPLE.COM", "APPLE"),
    ("GOOGLE", "GOOGLE"),
    ("GOOGLE PLAY", "GOOGLE"),
    ("MICROSOFT", "MICROSOFT"),
    ("ADOBE", "ADOBE"),
    ("DROPBOX", "DROPBOX"),
    ("ZOOM", "ZOOM"),
    ("SLACK", "SLACK"),
    ("GITHUB", "GITHUB"),
    ("FIGMA", "FIGMA"),
    ("NOTION", "NOTION"),
    ("CANVA", "CANVA"),
    ("COSTCO", "COSTCO"),
    ("SAMS CLUB", "SAMS CLUB"),
    ("SAMS", "SAMS CLUB"),
    ("PLANET FITNESS", "PLANET FITNESS"),
    ("LA FITNESS", "LA FITNESS"),
    ("GOLD GYM", "GOLD GYM"),
    ("GOLDS GYM", "GOLD GYM"),
)

# Applied in order to the trimmed input, before upper-casing.
NOISE_PATTERNS: tuple[re.Pattern[str], ...] = (
    re.compile(r"\d{4}-\d{2}-\d{2}"),  # 2025-06-15
    re.compile(r"\d{2}/\d{2}/\d{4}"),  # 06/15/2025
    re.compile(r"\d{5,}"),  # transaction/reference ids
    re.compile(r"\b[A-Z]{2}\s+\d{4,}\b", re.IGNORECASE),  # "WA 1234"
    re.compile(r"\b\d{3,4}\s+[A-Z]{2}\b", re.IGNORECASE),  # "1234 WA"
)

SUFFIX_PATTERNS: tuple[re.Pattern[str], ...] = tuple(
    re.compile(rf"\s+{suffix}\s*$", re.IGNORECASE)
    for suffix in ("CO", "USA", "LLC", "INC", "CORP", "LTD")
)


@dataclass(frozen=True, slots=True)
class KeywordRule:
    """Substring rule mapping a transaction to one merchant type.

    ``name_keywords`` are tested against the display name and the merchant
    name; ``location_keywords`` against the formatted location. All keywords
    are lower-case; matching is case-insensitive.
    """

    merchant_type: MerchantType
    name_keywords: tuple[str, ...]
    location_keywords: tuple[str, ...] = ()


# Ordered: the first rule that matches decides the type.
MERCHANT_TYPE_RULES: tuple[KeywordRule, ...] = (
    KeywordRule("gas_station", ("shell", "exxon", "mobil"), ("gas", "fuel")),
    KeywordRule("grocery_store", ("safeway", "kroger", "whole foods"), ("grocery", "supermarket")),
    KeywordRule("restaurant", ("restaurant", "cafe", "diner", "bistro")),
    KeywordRule("coffee_shop", ("starbucks", "coffee", "espresso")),
    KeywordRule("online_retailer", ("amazon", "ebay", "etsy")),
    KeywordRule("streaming_service", ("netflix", "spotify", "hulu")),
)


@dataclass(frozen=True, slots=True)
class EnrichmentConfig:
    """Read-only tables and constants shared by the enrichment components."""

    synonyms: tuple[tuple[str, str], ...] = MERCHANT_SYNONYMS
    noise_patterns: tuple[re.Pattern[str], ...] = NOISE_PATTERNS
    suffix_patterns: tuple[re.Pattern[str], ...] = SUFFIX_PATTERNS
    merchant_type_rules: tuple[KeywordRule, ...] = MERCHANT_TYPE_RULES
    unknown_location: str = "Unknown Location"
    geohash_precision: int = 6
    gas_snack_threshold: float = 50.0
    # Where the values came from: "builtin", "mapping" or a file path.
    source: str = field(default="builtin", compare=False)


DEFAULT_CONFIG = EnrichmentConfig()


# ---------------------------------------------------------------------------
# File overrides
# ---------------------------------------------------------------------------


class _KeywordRuleFile(BaseModel):
    model_config = ConfigDict(extra="forbid", str_strip_whitespace=True)

    merchant_type: MerchantType
    name_keywords: list[str]
    location_keywords: list[str] = []

    @field_validator("name_keywords", "location_keywords")
    @classmethod
    def _lower_non_blank(cls, v: list[str]) -> list[str]:
        return [k.strip().lower() for k in v if k.strip()]


class _ConfigFile(BaseModel):
    model_config = ConfigDict(extra="forbid")

    synonyms: list[tuple[str, str]] | None = None
    merchant_types: list[_KeywordRuleFile] | None = None
    gas_snack_threshold: float | None = None

    @field_validator("synonyms")
    @classmethod
    def _upper_synonyms(cls, v: list[tuple[str, str]] | None) -> list[tuple[str, str]] | None:
        if v is None:
            return None
        out: list[tuple[str, str]] = []
        for variant, canonical in v:
            variant_s, canonical_s = variant.strip().upper(), canonical.strip().upper()
            if not variant_s or not canonical_s:
                raise ValueError("synonym entries must be non-blank")
            out.append((variant_s, canonical_s))
        return out

    @field_validator("gas_snack_threshold")
    @classmethod
    def _positive(cls, v: float | None) -> float | None:
        if v is not None and v <= 0:
            raise ValueError("gas_snack_threshold must be positive")
        return v


def config_from_mapping(data: Mapping[str, Any], *, source: str = "mapping") -> EnrichmentConfig:
    """Build a config from a parsed mapping, keeping defaults for omitted keys."""

    try:
        parsed = _ConfigFile.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"invalid enrichment config ({source}): {e}") from e

    cfg = replace(DEFAULT_CONFIG, source=source)
    if parsed.synonyms is not None:
        cfg = replace(cfg, synonyms=tuple(parsed.synonyms))
    if parsed.merchant_types is not None:
        rules = tuple(
            KeywordRule(
                merchant_type=r.merchant_type,
                name_keywords=tuple(r.name_keywords),
                location_keywords=tuple(r.location_keywords),
            )
            for r in parsed.merchant_types
        )
        cfg = replace(cfg, merchant_type_rules=rules)
    if parsed.gas_snack_threshold is not None:
        cfg = replace(cfg, gas_snack_threshold=parsed.gas_snack_threshold)
    return cfg


def load_config(path: str | PathLike[str]) -> EnrichmentConfig:
    """Read a JSON override file and return the resulting config."""

    p = Path(path)
    try:
        data = json.loads(p.read_text(encoding="utf-8"))
    except FileNotFoundError as e:
        raise ConfigError(f"config file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise ConfigError(f"config file is not valid JSON: {p}: {e}") from e
    if not isinstance(data, Mapping):
        raise ConfigError(f"config file must contain a JSON object: {p}")
    return config_from_mapping(data, source=str(p))


def resolve_config(path: str | PathLike[str] | None = None) -> EnrichmentConfig:
    """Return the config from ``path``, else from ``TXN_ENRICHMENT_CONFIG``, else defaults."""

    if path is not None:
        return load_config(path)
    env_path = os.getenv(CONFIG_PATH_ENV)
    if env_path and env_path.strip():
        return load_config(env_path.strip())
    return DEFAULT_CONFIG


__all__ = [
    "CONFIG_PATH_ENV",
    "ConfigError",
    "DEFAULT_CONFIG",
    "EnrichmentConfig",
    "KeywordRule",
    "MERCHANT_SYNONYMS",
    "MERCHANT_TYPE_RULES",
    "config_from_mapping",
    "load_config",
    "resolve_config",
]
