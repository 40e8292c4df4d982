"""Merchant feature bundle: geohash, type, location, payment and polarity."""

from __future__ import annotations

from .classify import MerchantTypeClassifier
from .config import DEFAULT_CONFIG, EnrichmentConfig
from .geohash import GeohashEncoder
from .location import LocationContextFormatter
from .models import AmountContext, MerchantFeatures, RawTransactionView

UNKNOWN_PAYMENT_FIELD = "unknown"


def payment_context(transaction: RawTransactionView) -> str:
    """Pipe-join channel, method and processor, each defaulting to ``"unknown"``."""

    return " | ".join(
        value or UNKNOWN_PAYMENT_FIELD
        for value in (
            transaction.payment_channel,
            transaction.payment_method,
            transaction.payment_processor,
        )
    )


def amount_context(amount: float) -> AmountContext:
    # Zero counts as income: the rule is "not negative", not a three-way sign.
    return "expense" if amount < 0 else "income"


class MerchantFeatureExtractor:
    def __init__(
        self,
        config: EnrichmentConfig = DEFAULT_CONFIG,
        *,
        location_formatter: LocationContextFormatter | None = None,
        geohash_encoder: GeohashEncoder | None = None,
        classifier: MerchantTypeClassifier | None = None,
    ) -> None:
        self._location = location_formatter or LocationContextFormatter(config)
        self._geohash = geohash_encoder or GeohashEncoder(config.geohash_precision)
        self._classifier = classifier or MerchantTypeClassifier(
            config, location_formatter=self._location
        )

    def extract(self, transaction: RawTransactionView) -> MerchantFeatures:
        return MerchantFeatures(
            geohash=self._geohash.encode(transaction.location_lat, transaction.location_lon),
            merchant_type=self._classifier.infer(transaction),
            location_context=self._location.format(transaction).formatted,
            payment_context=payment_context(transaction),
            amount_context=amount_context(transaction.amount),
        )


_DEFAULT_EXTRACTOR = MerchantFeatureExtractor()


def derive_merchant_features(transaction: RawTransactionView) -> MerchantFeatures:
    return _DEFAULT_EXTRACTOR.extract(transaction)


__all__ = [
    "MerchantFeatureExtractor",
    "amount_context",
    "derive_merchant_features",
    "payment_context",
]
