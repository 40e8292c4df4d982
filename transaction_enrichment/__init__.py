"""Public interface for the ``transaction_enrichment`` package.

Merchant-name cleaning, location and feature extraction, and rule-first
category routing for imported bank transactions. This module only re-exports
the stable import surface; no work happens at import time.
"""

from .categorize import categorize_transactions
from .classify import MerchantTypeClassifier, infer_merchant_type
from .config import (
    DEFAULT_CONFIG,
    ConfigError,
    EnrichmentConfig,
    KeywordRule,
    load_config,
    resolve_config,
)
from .context import AIContextBuilder, build_ai_context
from .enrich import EnrichmentOrchestrator, enrich, enrich_many
from .features import MerchantFeatureExtractor, derive_merchant_features
from .geohash import GeohashEncoder, encode_geohash
from .ingest import IngestError, load_transactions
from .location import LocationContextFormatter, format_location_context
from .merchant import MerchantNameCleaner, clean_merchant_name
from .models import (
    CategorizationResult,
    CleanedMerchant,
    EnrichedTransaction,
    Enrichment,
    LocationContext,
    MerchantFeatures,
    MerchantType,
    RawTransactionView,
    RuleCategory,
)
from .routing import CategorizationRouter, apply_rules, should_use_rules
from .similar import SimilarMerchant, find_similar_merchants

__all__ = [
    # Pipeline
    "enrich",
    "enrich_many",
    "categorize_transactions",
    "load_transactions",
    # Components
    "EnrichmentOrchestrator",
    "MerchantNameCleaner",
    "LocationContextFormatter",
    "GeohashEncoder",
    "MerchantTypeClassifier",
    "MerchantFeatureExtractor",
    "CategorizationRouter",
    "AIContextBuilder",
    # Convenience functions
    "clean_merchant_name",
    "format_location_context",
    "encode_geohash",
    "infer_merchant_type",
    "derive_merchant_features",
    "should_use_rules",
    "apply_rules",
    "build_ai_context",
    "find_similar_merchants",
    # Configuration
    "EnrichmentConfig",
    "KeywordRule",
    "DEFAULT_CONFIG",
    "ConfigError",
    "load_config",
    "resolve_config",
    # Models / types
    "RawTransactionView",
    "EnrichedTransaction",
    "Enrichment",
    "CleanedMerchant",
    "LocationContext",
    "MerchantFeatures",
    "MerchantType",
    "RuleCategory",
    "CategorizationResult",
    "SimilarMerchant",
    "IngestError",
]
