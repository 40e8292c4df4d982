"""Prompt construction for the external budgeting classifier.

This module builds:
- The budgeting taxonomy offered to the model.
- The system instructions and user prompt, embedding each transaction's AI
  context block, similar-merchant examples, and a JSON array delimited by
  ``BEGIN_TRANSACTIONS_JSON`` / ``END_TRANSACTIONS_JSON`` markers.
- The strict ``response_format`` (JSON Schema) object for the OpenAI
  Responses API.
"""

from __future__ import annotations

import json
from collections.abc import Sequence
from dataclasses import dataclass
from typing import Any

from openai.types.responses.response_format_text_json_schema_config_param import (
    ResponseFormatTextJSONSchemaConfigParam,
)

ESSENTIAL_CATEGORIES: tuple[str, ...] = (
    "Housing",
    "Transportation",
    "Groceries",
    "Healthcare",
    "Basic Utilities",
    "Gas Station",
    "Car Payment",
    "Car Insurance",
    "Public Transit",
    "Electricity",
    "Water",
    "Internet",
    "Cell Phone",
    "Medical Expenses",
    "Health Insurance",
    "Pharmacy",
    "Rent/Mortgage",
    "Home Maintenance",
)

NON_ESSENTIAL_CATEGORIES: tuple[str, ...] = (
    "Entertainment",
    "Luxury Food",
    "Shopping",
    "Hobbies",
    "Personal Care",
    "Fast Food",
    "Restaurants",
    "Coffee Shops",
    "Bars",
    "Streaming Services",
    "Online Shopping",
    "Clothing",
    "Electronics",
    "Beauty/Personal Care",
    "Gym/Fitness",
    "Subscriptions",
    "Gifts",
    "Donations",
    "Games",
)

MIXED_CATEGORIES: tuple[str, ...] = (
    "Gas Station Snacks",
    "Work Dining",
    "Entertainment Dining",
    "Essential Shopping",
    "Luxury Shopping",
)

FALLBACK_CATEGORY = "Miscellaneous"

ALL_CATEGORIES: tuple[str, ...] = (
    *ESSENTIAL_CATEGORIES,
    *NON_ESSENTIAL_CATEGORIES,
    *MIXED_CATEGORIES,
)

BEGIN_MARKER = "BEGIN_TRANSACTIONS_JSON"
END_MARKER = "END_TRANSACTIONS_JSON"


@dataclass(frozen=True, slots=True)
class PromptItem:
    """One transaction as presented to the model.

    ``idx`` is batch-relative (0..count-1) and is echoed back by the model for
    alignment.
    """

    idx: int
    merchant: str
    amount: float
    context: str
    similar: str = ""


def build_system_instructions() -> str:
    return (
        "You are a budgeting expert that categorizes financial transactions to help users "
        "identify essential vs non-essential spending and find waste in their budget. "
        "Choose exactly one granular category per transaction from the provided list and a "
        "short general category. Never invent granular categories. Output JSON only that "
        "conforms to the specified schema."
    )


def serialize_items_to_json(items: Sequence[PromptItem]) -> str:
    """Serialize the items the model must answer for, in a fixed field order."""

    arr: list[dict[str, Any]] = [
        {"idx": it.idx, "merchant": it.merchant, "amount": it.amount} for it in items
    ]
    return json.dumps(arr, ensure_ascii=False, indent=2)


def build_user_content(
    items: Sequence[PromptItem],
    *,
    merchant_patterns: str,
    categories: Sequence[str] = ALL_CATEGORIES,
) -> str:
    """Build the user prompt for one batch of transactions."""

    examples = "\n\n".join(
        f"Transaction {it.idx}: {it.merchant}\nContext:\n{it.context}\n"
        f"Similar: {it.similar or 'None'}"
        for it in items
    )
    lines = [
        "Categorize these transactions to help the user identify:",
        "1. Essential spending (needs) vs non-essential spending (wants)",
        "2. Areas of potential waste",
        "3. Opportunities for budget optimization",
        "",
        "AVAILABLE CATEGORIES:",
        ", ".join(categories),
        "",
        "CATEGORIZATION GUIDELINES:",
        "- Focus on budgeting insights (essential vs non-essential)",
        "- Use location context for merchant disambiguation",
        "- Consider payment method and channel",
        "- Split gas station transactions (gas vs snacks)",
        "- Distinguish work dining from entertainment",
        "- Use similar merchant examples as guidance",
        "",
        "MERCHANT PATTERNS (for reference):",
        merchant_patterns,
        "",
        "TRANSACTION CONTEXT:",
        examples,
        "",
        "Return one result per transaction, echoing its idx.",
        "",
        BEGIN_MARKER,
        serialize_items_to_json(items),
        END_MARKER,
    ]
    return "\n".join(lines)


def build_response_format(
    categories: Sequence[str] = ALL_CATEGORIES,
) -> ResponseFormatTextJSONSchemaConfigParam:
    """Return the strict JSON Schema response_format object.

    Shape: ``{"results": [{"idx", "granular_category", "general_category"}]}``
    with ``granular_category`` restricted to ``categories`` plus the fallback.
    """

    allowed = list(dict.fromkeys([*categories, FALLBACK_CATEGORY]))
    result: ResponseFormatTextJSONSchemaConfigParam = {
        "type": "json_schema",
        "name": "budget_categories",
        "schema": {
            "type": "object",
            "properties": {
                "results": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "idx": {"type": "integer"},
                            "granular_category": {"type": "string", "enum": allowed},
                            "general_category": {"type": "string"},
                        },
                        "required": ["idx", "granular_category", "general_category"],
                        "additionalProperties": False,
                    },
                }
            },
            "required": ["results"],
            "additionalProperties": False,
        },
        "strict": True,
    }
    return result


__all__ = [
    "ALL_CATEGORIES",
    "BEGIN_MARKER",
    "END_MARKER",
    "ESSENTIAL_CATEGORIES",
    "FALLBACK_CATEGORY",
    "MIXED_CATEGORIES",
    "NON_ESSENTIAL_CATEGORIES",
    "PromptItem",
    "build_response_format",
    "build_system_instructions",
    "build_user_content",
    "serialize_items_to_json",
]
