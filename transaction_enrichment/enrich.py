"""Enrichment orchestration: raw transaction in, enriched transaction out.

Per record the pipeline runs in a fixed order: merchant cleaning and location
context, then the feature bundle (which includes type inference), then the AI
context block. Components hold only read-only configuration, so one
orchestrator may be shared across threads and records.
"""

from __future__ import annotations

from collections.abc import Iterable

from .classify import MerchantTypeClassifier
from .config import DEFAULT_CONFIG, EnrichmentConfig
from .context import AIContextBuilder, render_ai_context
from .features import MerchantFeatureExtractor
from .geohash import GeohashEncoder
from .location import LocationContextFormatter
from .logging_setup import get_logger
from .merchant import MerchantNameCleaner
from .models import EnrichedTransaction, Enrichment, RawTransactionView, RuleCategory
from .routing import CategorizationRouter

_logger = get_logger("transaction_enrichment.enrich")


class EnrichmentOrchestrator:
    """Wire the enrichment components together around one config."""

    def __init__(self, config: EnrichmentConfig = DEFAULT_CONFIG) -> None:
        self.config = config
        self.cleaner = MerchantNameCleaner(config)
        self.location = LocationContextFormatter(config)
        self.geohash = GeohashEncoder(config.geohash_precision)
        self.classifier = MerchantTypeClassifier(config, location_formatter=self.location)
        self.features = MerchantFeatureExtractor(
            config,
            location_formatter=self.location,
            geohash_encoder=self.geohash,
            classifier=self.classifier,
        )
        self.router = CategorizationRouter(config, classifier=self.classifier)
        self.context_builder = AIContextBuilder(
            config,
            cleaner=self.cleaner,
            location_formatter=self.location,
            feature_extractor=self.features,
        )

    def enrich(self, transaction: RawTransactionView) -> EnrichedTransaction:
        cleaned = self.cleaner.clean(transaction.merchant_or_name)
        location = self.location.format(transaction)
        features = self.features.extract(transaction)
        ai_context = render_ai_context(transaction, cleaned, location, features)

        enriched = EnrichedTransaction(
            **transaction.model_dump(exclude={"enriched"}),
            enriched=Enrichment(
                cleaned_merchant=cleaned,
                location_context=location,
                merchant_features=features,
                ai_context=ai_context,
            ),
        )
        _logger.debug(
            'enrich:done id=%s merchant="%s" type=%s geohash=%s',
            transaction.id,
            cleaned.normalized,
            features.merchant_type,
            features.geohash,
        )
        return enriched

    def enrich_many(self, transactions: Iterable[RawTransactionView]) -> list[EnrichedTransaction]:
        return [self.enrich(tx) for tx in transactions]

    def should_use_rules(self, transaction: RawTransactionView) -> bool:
        return self.router.should_use_rules(transaction)

    def apply_rules(self, transaction: RawTransactionView) -> RuleCategory | None:
        return self.router.apply_rules(transaction)


_DEFAULT_ORCHESTRATOR = EnrichmentOrchestrator()


def enrich(transaction: RawTransactionView) -> EnrichedTransaction:
    """Enrich one transaction with the built-in tables."""

    return _DEFAULT_ORCHESTRATOR.enrich(transaction)


def enrich_many(transactions: Iterable[RawTransactionView]) -> list[EnrichedTransaction]:
    return _DEFAULT_ORCHESTRATOR.enrich_many(transactions)


__all__ = ["EnrichmentOrchestrator", "enrich", "enrich_many"]
