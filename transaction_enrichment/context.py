"""Classifier-ready text block for transactions no rule can categorize.

The block is the only artifact handed to the external classifier. Line order
is fixed::

    Merchant: "<normalized merchant>"
    Location: <formatted location>
    Coordinates: <lat, lon | Unknown>
    Amount: $<absolute amount>
    Payment: <channel | method | processor>
    Type: <merchant type>
    Geohash: <geohash | unknown>
"""

from __future__ import annotations

from .config import DEFAULT_CONFIG, EnrichmentConfig
from .features import MerchantFeatureExtractor
from .location import LocationContextFormatter, format_number
from .merchant import MerchantNameCleaner
from .models import CleanedMerchant, LocationContext, MerchantFeatures, RawTransactionView


def render_ai_context(
    transaction: RawTransactionView,
    cleaned: CleanedMerchant,
    location: LocationContext,
    features: MerchantFeatures,
) -> str:
    return "\n".join(
        [
            f'Merchant: "{cleaned.normalized}"',
            f"Location: {location.formatted}",
            f"Coordinates: {location.coordinates or 'Unknown'}",
            f"Amount: ${format_number(abs(transaction.amount))}",
            f"Payment: {features.payment_context}",
            f"Type: {features.merchant_type}",
            f"Geohash: {features.geohash}",
        ]
    )


class AIContextBuilder:
    def __init__(
        self,
        config: EnrichmentConfig = DEFAULT_CONFIG,
        *,
        cleaner: MerchantNameCleaner | None = None,
        location_formatter: LocationContextFormatter | None = None,
        feature_extractor: MerchantFeatureExtractor | None = None,
    ) -> None:
        self._cleaner = cleaner or MerchantNameCleaner(config)
        self._location = location_formatter or LocationContextFormatter(config)
        self._features = feature_extractor or MerchantFeatureExtractor(
            config, location_formatter=self._location
        )

    def build(self, transaction: RawTransactionView) -> str:
        return render_ai_context(
            transaction,
            self._cleaner.clean(transaction.merchant_or_name),
            self._location.format(transaction),
            self._features.extract(transaction),
        )


_DEFAULT_BUILDER = AIContextBuilder()


def build_ai_context(transaction: RawTransactionView) -> str:
    return _DEFAULT_BUILDER.build(transaction)


__all__ = ["AIContextBuilder", "build_ai_context", "render_ai_context"]
