"""Load :class:`RawTransactionView` records from JSON, JSON Lines, or CSV files.

Field names may be given either as attribute names (``merchant_name``) or as
camelCase aliases (``merchantName``). Empty CSV cells are read as missing.
"""

from __future__ import annotations

import csv
import json
from collections.abc import Mapping
from os import PathLike
from pathlib import Path
from typing import Any

from pydantic import TypeAdapter, ValidationError

from .models import RawTransactionView

_ADAPTER = TypeAdapter(list[RawTransactionView])


class IngestError(ValueError):
    """Raised when a transaction file cannot be read or validated."""


def _read_json(p: Path) -> list[Any]:
    data = json.loads(p.read_text(encoding="utf-8"))
    if isinstance(data, Mapping):
        data = data.get("transactions")
    if not isinstance(data, list):
        raise IngestError(
            f"{p}: expected a JSON array or an object with a 'transactions' array"
        )
    return data


def _read_jsonl(p: Path) -> list[Any]:
    rows: list[Any] = []
    with p.open(encoding="utf-8") as f:
        for lineno, line in enumerate(f, start=1):
            if not line.strip():
                continue
            try:
                rows.append(json.loads(line))
            except json.JSONDecodeError as e:
                raise IngestError(f"{p}:{lineno}: invalid JSON: {e.msg}") from e
    return rows


def _read_csv(p: Path) -> list[dict[str, str | None]]:
    with p.open(encoding="utf-8", newline="") as f:
        reader = csv.DictReader(f)
        if not reader.fieldnames:
            raise IngestError(f"CSV appears to have no header row: {p}")
        # DictReader may include a None key aggregating extra columns; drop it.
        return [
            {k.strip(): (v.strip() or None) if v is not None else None for k, v in row.items() if k}
            for row in reader
        ]


def load_transactions(path: str | PathLike[str]) -> list[RawTransactionView]:
    """Read and validate transactions from ``path``.

    The format is chosen by extension: ``.json``, ``.jsonl``/``.ndjson``, or
    ``.csv``. Raises :class:`IngestError` on unreadable or invalid input.
    """

    p = Path(path)
    suffix = p.suffix.lower()
    try:
        if suffix == ".json":
            rows = _read_json(p)
        elif suffix in {".jsonl", ".ndjson"}:
            rows = _read_jsonl(p)
        elif suffix == ".csv":
            rows = _read_csv(p)
        else:
            raise IngestError(f"unsupported file type: {p.suffix or '(none)'} ({p})")
    except FileNotFoundError as e:
        raise IngestError(f"file not found: {p}") from e
    except json.JSONDecodeError as e:
        raise IngestError(f"{p}: invalid JSON: {e}") from e
    except csv.Error as e:
        raise IngestError(f"{p}: failed to parse CSV: {e}") from e

    try:
        return _ADAPTER.validate_python(rows)
    except ValidationError as e:
        raise IngestError(f"{p}: invalid transaction record(s): {e}") from e


__all__ = ["IngestError", "load_transactions"]
