# ruff: noqa: I001
"""CLI for the ``transaction_enrichment`` package.

This module exposes callable command handlers (``cmd_enrich``, ``cmd_route``,
``cmd_categorize``) and a Typer-based console interface. Environment
variables (notably ``OPENAI_API_KEY`` and ``TXN_ENRICHMENT_CONFIG``) are loaded
from a local ``.env`` using ``python-dotenv`` before delegating to command
logic.
"""

from __future__ import annotations

import json
import os
import sys
from pathlib import Path
from typing import Annotated

import typer
from dotenv import load_dotenv
from typer.models import OptionInfo

from .config import ConfigError, EnrichmentConfig, resolve_config
from .ingest import IngestError, load_transactions
from .logging_setup import configure_logging, get_logger
from .models import RawTransactionView

_logger = get_logger("transaction_enrichment.cli")


def _load_inputs(
    input_path: str, config_path: str | None
) -> tuple[list[RawTransactionView], EnrichmentConfig] | None:
    try:
        config = resolve_config(config_path)
    except ConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    try:
        transactions = load_transactions(input_path)
    except IngestError as e:
        print(f"Error: {e}", file=sys.stderr)
        return None
    _logger.debug(
        "cli:inputs_loaded count=%d config_source=%s", len(transactions), config.source
    )
    return transactions, config


# ---- Command handlers --------------------------------------------------------


def cmd_enrich(input_path: str, *, config_path: str | None = None) -> int:
    """Print one camelCase JSON object per enriched transaction."""

    from .enrich import EnrichmentOrchestrator

    loaded = _load_inputs(input_path, config_path)
    if loaded is None:
        return 1
    transactions, config = loaded

    orchestrator = EnrichmentOrchestrator(config)
    for tx in transactions:
        enriched = orchestrator.enrich(tx)
        print(json.dumps(enriched.model_dump(mode="json", by_alias=True), ensure_ascii=False))
    return 0


def cmd_route(input_path: str, *, config_path: str | None = None) -> int:
    """Print ``id, merchant_type, should_use_rules, granular, general`` per row."""

    from .enrich import EnrichmentOrchestrator

    loaded = _load_inputs(input_path, config_path)
    if loaded is None:
        return 1
    transactions, config = loaded

    orchestrator = EnrichmentOrchestrator(config)
    for tx in transactions:
        merchant_type = orchestrator.classifier.infer(tx)
        gated = orchestrator.should_use_rules(tx)
        rule = orchestrator.apply_rules(tx)
        granular, general = (rule.granular, rule.general) if rule else ("-", "-")
        print(f"{tx.id}\t{merchant_type}\t{str(gated).lower()}\t{granular}\t{general}")
    return 0


def cmd_categorize(
    input_path: str,
    *,
    history_path: str | None = None,
    config_path: str | None = None,
    batch_size: int = 20,
    gated: bool = False,
) -> int:
    """Rules first, OpenAI for the rest; print ``id, granular, general, source``."""

    from .categorize import categorize_transactions
    from .enrich import EnrichmentOrchestrator

    if not os.getenv("OPENAI_API_KEY"):
        print("Error: OPENAI_API_KEY is not set in the environment.", file=sys.stderr)
        return 1

    loaded = _load_inputs(input_path, config_path)
    if loaded is None:
        return 1
    transactions, config = loaded

    history: list[RawTransactionView] = []
    if history_path:
        try:
            history = load_transactions(history_path)
        except IngestError as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1

    try:
        results = categorize_transactions(
            transactions,
            history=history,
            batch_size=batch_size,
            gate_with_should_use_rules=gated,
            orchestrator=EnrichmentOrchestrator(config),
        )
    except ValueError as e:
        print(f"Error: categorize_transactions failed: {e}", file=sys.stderr)
        return 1

    for row in results:
        print(
            f"{row.transaction.id}\t{row.category.granular}\t{row.category.general}\t{row.source}"
        )
    return 0


# ---- Typer app ---------------------------------------------------------------

app = typer.Typer(
    add_completion=False,
    no_args_is_help=False,
    help="Merchant cleaning, location context, and rule-first categorization.",
)

# Module-level option objects to satisfy ruff B008 (no calls in parameter
# defaults). Typer inspects these when used as default values below.
INPUT_PATH_OPTION: OptionInfo = typer.Option(
    ...,
    "--input",
    help="Transactions file (.json, .jsonl or .csv).",
    dir_okay=False,
    file_okay=True,
    exists=False,  # the handler reports missing files itself
)
CONFIG_PATH_OPTION: OptionInfo = typer.Option(
    None,
    "--config",
    help="JSON config overrides (falls back to TXN_ENRICHMENT_CONFIG).",
    dir_okay=False,
)
HISTORY_PATH_OPTION: OptionInfo = typer.Option(
    None,
    "--history",
    help="Previously categorized transactions used as classifier examples.",
    dir_okay=False,
)


@app.command("enrich")
def enrich_cmd(
    input_path: Annotated[Path, INPUT_PATH_OPTION],
    config_path: Path | None = CONFIG_PATH_OPTION,
) -> None:
    code = cmd_enrich(str(input_path), config_path=str(config_path) if config_path else None)
    raise typer.Exit(code)


@app.command("route")
def route_cmd(
    input_path: Annotated[Path, INPUT_PATH_OPTION],
    config_path: Path | None = CONFIG_PATH_OPTION,
) -> None:
    code = cmd_route(str(input_path), config_path=str(config_path) if config_path else None)
    raise typer.Exit(code)


@app.command("categorize")
def categorize_cmd(
    input_path: Annotated[Path, INPUT_PATH_OPTION],
    history_path: Path | None = HISTORY_PATH_OPTION,
    config_path: Path | None = CONFIG_PATH_OPTION,
    batch_size: int = typer.Option(20, min=1, help="Transactions per classifier request."),
    gated: bool = typer.Option(
        False, help="Only apply rules to records that pass should_use_rules."
    ),
) -> None:
    code = cmd_categorize(
        str(input_path),
        history_path=str(history_path) if history_path else None,
        config_path=str(config_path) if config_path else None,
        batch_size=batch_size,
        gated=gated,
    )
    raise typer.Exit(code)


@app.callback(invoke_without_command=True)
def _root(ctx: typer.Context) -> None:
    """Root command.

    Loads ``.env`` from the current working directory (without overriding any
    already-set environment variables) and configures logging.
    """

    load_dotenv(dotenv_path=Path.cwd() / ".env", override=False)
    configure_logging()

    if ctx.invoked_subcommand is None:
        typer.echo("No subcommand provided. Use --help to see available commands.")
        raise typer.Exit(1)


if __name__ == "__main__":  # pragma: no cover
    app()
