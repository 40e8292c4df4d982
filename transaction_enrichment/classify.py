"""Heuristic merchant-type inference from names and the formatted location."""

from __future__ import annotations

from .config import DEFAULT_CONFIG, EnrichmentConfig
from .location import LocationContextFormatter
from .models import UNKNOWN_MERCHANT_TYPE, MerchantType, RawTransactionView


class MerchantTypeClassifier:
    """Case-insensitive substring matching against ordered keyword rules.

    Rules are evaluated in configuration order (gas station, grocery,
    restaurant, coffee shop, online retailer, streaming service by default)
    and the first matching rule decides. No match yields ``"unknown"``.
    """

    def __init__(
        self,
        config: EnrichmentConfig = DEFAULT_CONFIG,
        *,
        location_formatter: LocationContextFormatter | None = None,
    ) -> None:
        self._rules = config.merchant_type_rules
        self._location = location_formatter or LocationContextFormatter(config)

    def infer(self, transaction: RawTransactionView) -> MerchantType:
        name = (transaction.name or "").lower()
        merchant = (transaction.merchant_name or "").lower()
        location = self._location.format(transaction).formatted.lower()

        for rule in self._rules:
            if any(k in name or k in merchant for k in rule.name_keywords):
                return rule.merchant_type
            if any(k in location for k in rule.location_keywords):
                return rule.merchant_type
        return UNKNOWN_MERCHANT_TYPE


_DEFAULT_CLASSIFIER = MerchantTypeClassifier()


def infer_merchant_type(transaction: RawTransactionView) -> MerchantType:
    return _DEFAULT_CLASSIFIER.infer(transaction)


__all__ = ["MerchantTypeClassifier", "infer_merchant_type"]
