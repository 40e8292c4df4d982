"""Rule-first categorization flow with an OpenAI fallback.

Public API:
    - :func:`categorize_transactions`

This is a caller of the enrichment core: it enriches every transaction, lets
the deterministic rules settle what they can, and sends the remainder to the
OpenAI Responses API in batches. No side effects occur at import time (no
client creation, no handler attachment, no environment reads).
"""

from __future__ import annotations

import random
import time
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from typing import Any, NamedTuple

from openai import OpenAI
from openai.types.responses import ResponseTextConfigParam

from . import prompting
from .categorization import extract_response_json, parse_and_align_categories
from .enrich import EnrichmentOrchestrator
from .logging_setup import get_logger
from .models import (
    CategorizationResult,
    CategorySource,
    EnrichedTransaction,
    RawTransactionView,
    RuleCategory,
)
from .similar import find_similar_merchants, format_similar_merchants, merchant_patterns

# ---- Tunables (private) ------------------------------------------------------

_BATCH_SIZE_DEFAULT: int = 20
_CONCURRENCY: int = 4
_MAX_ATTEMPTS: int = 3
_BACKOFF_SCHEDULE_SEC: tuple[float, ...] = (0.5, 2.0)
_JITTER_PCT: float = 0.20
_SIMILAR_LIMIT: int = 3

_MODEL: str = "gpt-4o"

FALLBACK = RuleCategory(
    granular=prompting.FALLBACK_CATEGORY, general=prompting.FALLBACK_CATEGORY
)

_logger = get_logger("transaction_enrichment.categorize")


# ---- Internal helpers --------------------------------------------------------


def _create_client() -> OpenAI:
    return OpenAI()


def _is_retryable(exc: BaseException) -> bool:
    """Return True only for HTTP 429 and 5xx errors."""

    sc = getattr(exc, "status_code", None)
    return isinstance(sc, int) and (sc == 429 or 500 <= sc < 600)


def _sleep_backoff(attempt_no: int) -> None:
    base = _BACKOFF_SCHEDULE_SEC[min(attempt_no - 1, len(_BACKOFF_SCHEDULE_SEC) - 1)]
    jitter = base * _JITTER_PCT
    time.sleep(max(0.0, base + random.uniform(-jitter, jitter)))


class _Batch(NamedTuple):
    batch_index: int
    # Positions into the full input sequence, in batch order.
    positions: list[int]


def _paginate(positions: Sequence[int], batch_size: int) -> list[_Batch]:
    return [
        _Batch(batch_index=k, positions=list(positions[base : base + batch_size]))
        for k, base in enumerate(range(0, len(positions), batch_size))
    ]


def _build_prompt_items(
    enriched: Sequence[EnrichedTransaction],
    batch: _Batch,
    *,
    history: Sequence[RawTransactionView],
    orchestrator: EnrichmentOrchestrator,
) -> list[prompting.PromptItem]:
    items: list[prompting.PromptItem] = []
    for page_idx, pos in enumerate(batch.positions):
        tx = enriched[pos]
        similar = find_similar_merchants(
            tx, history, limit=_SIMILAR_LIMIT, cleaner=orchestrator.cleaner
        )
        items.append(
            prompting.PromptItem(
                idx=page_idx,
                merchant=tx.name,
                amount=tx.amount,
                context=tx.enriched.ai_context,
                similar=format_similar_merchants(similar),
            )
        )
    return items


def _call_classifier(
    client: Any,
    *,
    batch_index: int,
    user_content: str,
    system_instructions: str,
    text_cfg: ResponseTextConfigParam,
    count: int,
) -> list[RuleCategory | None]:
    attempt = 1
    while True:
        t0 = time.perf_counter()
        try:
            resp = client.responses.create(
                model=_MODEL,
                instructions=system_instructions,
                input=user_content,
                text=text_cfg,
            )
            decoded = extract_response_json(resp)
            aligned = parse_and_align_categories(decoded, num_items=count)
            _logger.info(
                "categorize:batch_done batch_index=%d count=%d latency_ms=%.2f",
                batch_index,
                count,
                (time.perf_counter() - t0) * 1000.0,
            )
            return aligned
        except Exception as e:  # noqa: BLE001 - classified below, re-raised when terminal
            dt_ms = (time.perf_counter() - t0) * 1000.0
            # Parsing/validation errors are terminal; only 429/5xx are retried.
            if attempt >= _MAX_ATTEMPTS or not _is_retryable(e):
                raise
            _logger.warning(
                "categorize:batch_retry batch_index=%d count=%d latency_ms=%.2f error=%s "
                "attempt=%d",
                batch_index,
                count,
                dt_ms,
                e.__class__.__name__,
                attempt,
            )
            _sleep_backoff(attempt)
            attempt += 1


def _categorize_batch(
    batch: _Batch,
    *,
    enriched: Sequence[EnrichedTransaction],
    history: Sequence[RawTransactionView],
    orchestrator: EnrichmentOrchestrator,
    client_factory: Callable[[], Any],
    system_instructions: str,
    text_cfg: ResponseTextConfigParam,
    patterns: str,
) -> list[tuple[RuleCategory, bool]]:
    """Return ``(category, from_model)`` per batch position.

    A terminal classifier failure assigns the fallback category to the whole
    batch; an item the model omitted gets the fallback individually.
    """

    count = len(batch.positions)
    items = _build_prompt_items(enriched, batch, history=history, orchestrator=orchestrator)
    user_content = prompting.build_user_content(items, merchant_patterns=patterns)

    _logger.info("categorize:batch_llm batch_index=%d count=%d", batch.batch_index, count)
    try:
        client = client_factory()
        aligned = _call_classifier(
            client,
            batch_index=batch.batch_index,
            user_content=user_content,
            system_instructions=system_instructions,
            text_cfg=text_cfg,
            count=count,
        )
    except Exception as e:  # noqa: BLE001 - batch degrades to the fallback category
        _logger.error(
            "categorize:batch_failed_terminal batch_index=%d count=%d error=%s detail=%s",
            batch.batch_index,
            count,
            e.__class__.__name__,
            e,
        )
        return [(FALLBACK, False)] * count

    out: list[tuple[RuleCategory, bool]] = []
    for page_idx, cat in enumerate(aligned):
        if cat is None:
            _logger.warning(
                "categorize:missing_result batch_index=%d idx=%d id=%s",
                batch.batch_index,
                page_idx,
                enriched[batch.positions[page_idx]].id,
            )
            out.append((FALLBACK, False))
        else:
            out.append((cat, True))
    return out


# ---- Public API --------------------------------------------------------------


def categorize_transactions(
    transactions: Iterable[RawTransactionView],
    *,
    history: Iterable[RawTransactionView] = (),
    batch_size: int = _BATCH_SIZE_DEFAULT,
    gate_with_should_use_rules: bool = False,
    orchestrator: EnrichmentOrchestrator | None = None,
    client_factory: Callable[[], Any] | None = None,
) -> list[CategorizationResult]:
    """Categorize transactions with deterministic rules first, then OpenAI.

    Parameters
    ----------
    transactions:
        Records to categorize. Output order matches input order.
    history:
        Previously categorized records used for merchant patterns and
        similar-merchant examples in the prompt.
    batch_size:
        Transactions per classifier request (default 20).
    gate_with_should_use_rules:
        When True, ``apply_rules`` is only consulted for records that pass
        ``should_use_rules``. Default False: ``apply_rules`` is called for
        every record and ``None`` defers to the classifier.
    orchestrator:
        Enrichment pipeline to use; defaults to one built from the built-in
        tables.
    client_factory:
        Zero-argument callable returning an ``openai.OpenAI``-shaped client.
        Called once per batch.

    Returns
    -------
    list[CategorizationResult]
        One entry per input item with ``source`` ``rule``, ``ai`` or
        ``fallback``.
    """

    if not isinstance(batch_size, int) or batch_size <= 0:
        raise ValueError("batch_size must be a positive integer")

    orch = orchestrator or EnrichmentOrchestrator()
    factory = client_factory or _create_client
    history_seq = list(history)

    enriched = orch.enrich_many(transactions)
    if not enriched:
        return []

    categories: list[RuleCategory | None] = [None] * len(enriched)
    sources: list[CategorySource] = ["fallback"] * len(enriched)
    ai_queue: list[int] = []

    for pos, tx in enumerate(enriched):
        rule = None
        if not gate_with_should_use_rules or orch.should_use_rules(tx):
            rule = orch.apply_rules(tx)
        if rule is not None:
            categories[pos] = rule
            sources[pos] = "rule"
        else:
            ai_queue.append(pos)

    _logger.info(
        "categorize:start total=%d rule_based=%d ai_queue=%d",
        len(enriched),
        len(enriched) - len(ai_queue),
        len(ai_queue),
    )

    if ai_queue:
        system_instructions = prompting.build_system_instructions()
        text_cfg = ResponseTextConfigParam(format=prompting.build_response_format())
        patterns = merchant_patterns(history_seq)
        batches = _paginate(ai_queue, batch_size)

        def _map_batch(batch: _Batch) -> list[tuple[RuleCategory, bool]]:
            return _categorize_batch(
                batch,
                enriched=enriched,
                history=history_seq,
                orchestrator=orch,
                client_factory=factory,
                system_instructions=system_instructions,
                text_cfg=text_cfg,
                patterns=patterns,
            )

        with ThreadPoolExecutor(max_workers=min(_CONCURRENCY, len(batches))) as pool:
            # ``map`` yields in submission order.
            for batch, batch_results in zip(batches, pool.map(_map_batch, batches), strict=True):
                for pos, (cat, from_model) in zip(batch.positions, batch_results, strict=True):
                    categories[pos] = cat
                    sources[pos] = "ai" if from_model else "fallback"

    results: list[CategorizationResult] = []
    for tx, cat, source in zip(enriched, categories, sources, strict=True):
        if cat is None:  # pragma: no cover - every position is filled above
            raise RuntimeError(f"Internal error: no category for transaction {tx.id!r}")
        results.append(CategorizationResult(transaction=tx, category=cat, source=source))
    return results


__all__ = ["FALLBACK", "categorize_transactions"]
