"""Deterministic categorization rules and the rules-vs-classifier gate.

Two entry points are kept deliberately separate:

- :meth:`CategorizationRouter.should_use_rules` gates on gas stations under
  the snack threshold, grocery stores and streaming services.
- :meth:`CategorizationRouter.apply_rules` also handles coffee shops and gas
  stations at or above the threshold.

Whether coffee shops are meant to be reachable only through a direct
``apply_rules`` call, or the gate is simply incomplete, is an open product
question; callers may call ``apply_rules`` unconditionally and treat ``None``
as "defer to the classifier".
"""

from __future__ import annotations

from .classify import MerchantTypeClassifier
from .config import DEFAULT_CONFIG, EnrichmentConfig
from .models import MerchantType, RawTransactionView, RuleCategory

GAS_STATION_SNACKS = RuleCategory(granular="Gas Station Snacks", general="Food & Dining")
GAS_STATION = RuleCategory(granular="Gas Station", general="Transportation")
GROCERIES = RuleCategory(granular="Groceries", general="Food & Dining")
STREAMING_SERVICES = RuleCategory(granular="Streaming Services", general="Entertainment")
COFFEE_SHOPS = RuleCategory(granular="Coffee Shops", general="Food & Dining")

_GATED_TYPES: frozenset[MerchantType] = frozenset({"grocery_store", "streaming_service"})


class CategorizationRouter:
    def __init__(
        self,
        config: EnrichmentConfig = DEFAULT_CONFIG,
        *,
        classifier: MerchantTypeClassifier | None = None,
    ) -> None:
        self._classifier = classifier or MerchantTypeClassifier(config)
        self._snack_threshold = config.gas_snack_threshold

    def should_use_rules(self, transaction: RawTransactionView) -> bool:
        merchant_type = self._classifier.infer(transaction)
        if merchant_type == "gas_station":
            return abs(transaction.amount) < self._snack_threshold
        return merchant_type in _GATED_TYPES

    def apply_rules(self, transaction: RawTransactionView) -> RuleCategory | None:
        merchant_type = self._classifier.infer(transaction)
        match merchant_type:
            case "gas_station":
                if abs(transaction.amount) < self._snack_threshold:
                    return GAS_STATION_SNACKS
                return GAS_STATION
            case "grocery_store":
                return GROCERIES
            case "streaming_service":
                return STREAMING_SERVICES
            case "coffee_shop":
                return COFFEE_SHOPS
            case _:
                return None


_DEFAULT_ROUTER = CategorizationRouter()


def should_use_rules(transaction: RawTransactionView) -> bool:
    return _DEFAULT_ROUTER.should_use_rules(transaction)


def apply_rules(transaction: RawTransactionView) -> RuleCategory | None:
    return _DEFAULT_ROUTER.apply_rules(transaction)


__all__ = [
    "COFFEE_SHOPS",
    "CategorizationRouter",
    "GAS_STATION",
    "GAS_STATION_SNACKS",
    "GROCERIES",
    "STREAMING_SERVICES",
    "apply_rules",
    "should_use_rules",
]
