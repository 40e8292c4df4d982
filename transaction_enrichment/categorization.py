"""Parsing of classifier output and alignment back to batch positions."""

from __future__ import annotations

import json
from collections.abc import Mapping, Sequence
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError, ValidationInfo, field_validator

from .models import RuleCategory
from .prompting import ALL_CATEGORIES, FALLBACK_CATEGORY


class _ResultItem(BaseModel):
    """Typed view of one classifier result.

    ``ValidationInfo.context`` may carry ``allowed_set`` (set[str]); granular
    categories outside it are coerced to the fallback category.
    """

    model_config = ConfigDict(extra="ignore", str_strip_whitespace=True)

    idx: int
    granular_category: str = FALLBACK_CATEGORY
    general_category: str = FALLBACK_CATEGORY

    @field_validator("granular_category")
    @classmethod
    def _granular_in_allowlist(cls, v: str, info: ValidationInfo) -> str:
        allowed_set = info.context.get("allowed_set") if info.context else None
        if not v:
            return FALLBACK_CATEGORY
        if allowed_set and v not in allowed_set:
            return FALLBACK_CATEGORY
        return v

    @field_validator("general_category")
    @classmethod
    def _general_non_blank(cls, v: str) -> str:
        return v or FALLBACK_CATEGORY


class _ResultBody(BaseModel):
    model_config = ConfigDict(extra="ignore")

    results: list[_ResultItem]


def extract_response_json(resp: Any) -> Mapping[str, Any]:
    """Decode the JSON mapping from an OpenAI Responses SDK result.

    Prefers ``resp.output_text``; falls back to ``resp.output[0].content[0].text``.
    Raises ``ValueError`` when no text is found or it is not a JSON object.
    """

    text: str | None = getattr(resp, "output_text", None)
    if not text:
        output = getattr(resp, "output", None)
        first = output[0] if output else None
        content = getattr(first, "content", None)
        if content:
            txt_obj = getattr(content[0], "text", None)
            if isinstance(txt_obj, str):
                text = txt_obj
            else:
                # Some SDK versions expose text as an object with a ``value``.
                maybe_val = getattr(txt_obj, "value", None)
                if isinstance(maybe_val, str):
                    text = maybe_val
    if not text or not isinstance(text, str):
        raise ValueError("Unexpected Responses API shape; unable to locate text output")

    try:
        decoded = json.loads(text)
    except json.JSONDecodeError as e:
        raise ValueError("Model output was not valid JSON per the requested schema") from e
    if not isinstance(decoded, Mapping):
        raise ValueError("Invalid response: expected a JSON object at top level")
    return decoded


def parse_and_align_categories(
    body: Mapping[str, Any],
    *,
    num_items: int,
    allowed_categories: Sequence[str] = ALL_CATEGORIES,
) -> list[RuleCategory | None]:
    """Return one category per batch position, ``None`` where the model was silent.

    Duplicate or out-of-range ``idx`` values raise ``ValueError``. Granular
    categories outside ``allowed_categories`` become ``Miscellaneous``.
    """

    allowed_set = {*allowed_categories, FALLBACK_CATEGORY}
    try:
        parsed = _ResultBody.model_validate(body, context={"allowed_set": allowed_set})
    except ValidationError as e:
        raise ValueError(f"Invalid response: {e}") from e

    out: list[RuleCategory | None] = [None] * num_items
    for item in parsed.results:
        if not (0 <= item.idx < num_items):
            raise ValueError(f"Invalid response: 'idx' out of range: {item.idx}")
        if out[item.idx] is not None:
            raise ValueError(f"Invalid response: duplicate idx {item.idx}")
        out[item.idx] = RuleCategory(
            granular=item.granular_category, general=item.general_category
        )
    return out


__all__ = ["extract_response_json", "parse_and_align_categories"]
