import json
from pathlib import Path

import pytest

from transaction_enrichment.config import (
    CONFIG_PATH_ENV,
    DEFAULT_CONFIG,
    MERCHANT_TYPE_RULES,
    ConfigError,
    config_from_mapping,
    load_config,
    resolve_config,
)
from transaction_enrichment.ingest import IngestError, load_transactions


# ---- Config ------------------------------------------------------------------


def test_defaults():
    assert DEFAULT_CONFIG.unknown_location == "Unknown Location"
    assert DEFAULT_CONFIG.geohash_precision == 6
    assert DEFAULT_CONFIG.gas_snack_threshold == 50.0
    assert DEFAULT_CONFIG.merchant_type_rules == MERCHANT_TYPE_RULES
    assert [r.merchant_type for r in MERCHANT_TYPE_RULES] == [
        "gas_station",
        "grocery_store",
        "restaurant",
        "coffee_shop",
        "online_retailer",
        "streaming_service",
    ]


def test_default_config_is_immutable():
    with pytest.raises(AttributeError):
        DEFAULT_CONFIG.gas_snack_threshold = 10.0  # type: ignore[misc]


def test_overrides_keep_unspecified_defaults():
    cfg = config_from_mapping({"gas_snack_threshold": 30})
    assert cfg.gas_snack_threshold == 30.0
    assert cfg.synonyms == DEFAULT_CONFIG.synonyms
    assert cfg.merchant_type_rules == DEFAULT_CONFIG.merchant_type_rules
    # ``source`` is informational and does not affect equality.
    assert config_from_mapping({}) == DEFAULT_CONFIG


def test_synonyms_are_uppercased():
    cfg = config_from_mapping({"synonyms": [[" peets ", "Peet's"]]})
    assert cfg.synonyms == (("PEETS", "PEET'S"),)


def test_keywords_are_lowercased():
    cfg = config_from_mapping(
        {
            "merchant_types": [
                {
                    "merchant_type": "grocery_store",
                    "name_keywords": ["Trader Joe", " "],
                    "location_keywords": ["MARKET"],
                }
            ]
        }
    )
    (rule,) = cfg.merchant_type_rules
    assert rule.name_keywords == ("trader joe",)
    assert rule.location_keywords == ("market",)


@pytest.mark.parametrize(
    "data",
    [
        {"gas_snack_threshold": 0},
        {"gas_snack_threshold": -5},
        {"synonyms": [["", "X"]]},
        {"merchant_types": [{"merchant_type": "bakery", "name_keywords": ["bread"]}]},
        {"unknown_key": True},
    ],
)
def test_invalid_overrides_raise(data):
    with pytest.raises(ConfigError):
        config_from_mapping(data)


def test_load_config_from_file(tmp_path: Path):
    p = tmp_path / "enrich.json"
    p.write_text(json.dumps({"gas_snack_threshold": 20}), encoding="utf-8")
    cfg = load_config(p)
    assert cfg.gas_snack_threshold == 20.0
    assert cfg.source == str(p)


def test_load_config_errors(tmp_path: Path):
    with pytest.raises(ConfigError, match="not found"):
        load_config(tmp_path / "missing.json")

    bad = tmp_path / "bad.json"
    bad.write_text("{not json", encoding="utf-8")
    with pytest.raises(ConfigError, match="not valid JSON"):
        load_config(bad)

    arr = tmp_path / "arr.json"
    arr.write_text("[]", encoding="utf-8")
    with pytest.raises(ConfigError, match="JSON object"):
        load_config(arr)


def test_resolve_config_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch):
    assert resolve_config() is DEFAULT_CONFIG

    env_file = tmp_path / "env.json"
    env_file.write_text(json.dumps({"gas_snack_threshold": 15}), encoding="utf-8")
    monkeypatch.setenv(CONFIG_PATH_ENV, str(env_file))
    assert resolve_config().gas_snack_threshold == 15.0

    arg_file = tmp_path / "arg.json"
    arg_file.write_text(json.dumps({"gas_snack_threshold": 35}), encoding="utf-8")
    assert resolve_config(arg_file).gas_snack_threshold == 35.0


# ---- Ingest ------------------------------------------------------------------


_ROWS = [
    {
        "id": "t1",
        "accountId": "acct",
        "date": "2025-06-15",
        "name": "SHELL OIL 4821",
        "amount": -12.5,
    },
    {
        "id": "t2",
        "account_id": "acct",
        "date": "2025-06-16T10:00:00Z",
        "name": "NETFLIX.COM",
        "amount": -15.99,
        "locationCity": "Los Gatos",
    },
]


def test_load_json_array(tmp_path: Path):
    p = tmp_path / "txs.json"
    p.write_text(json.dumps(_ROWS), encoding="utf-8")
    txs = load_transactions(p)
    assert [t.id for t in txs] == ["t1", "t2"]
    assert txs[1].location_city == "Los Gatos"


def test_load_json_object_with_transactions_key(tmp_path: Path):
    p = tmp_path / "txs.json"
    p.write_text(json.dumps({"transactions": _ROWS}), encoding="utf-8")
    assert len(load_transactions(p)) == 2


def test_load_jsonl_skips_blank_lines(tmp_path: Path):
    p = tmp_path / "txs.jsonl"
    p.write_text("\n".join([json.dumps(_ROWS[0]), "", json.dumps(_ROWS[1]), ""]), encoding="utf-8")
    assert [t.name for t in load_transactions(p)] == ["SHELL OIL 4821", "NETFLIX.COM"]


def test_load_csv_treats_empty_cells_as_missing(tmp_path: Path):
    p = tmp_path / "txs.csv"
    p.write_text(
        "id,accountId,date,name,amount,merchantName,locationLat,locationLon\n"
        "t1,acct,2025-06-15,SAFEWAY #1203,-42.10,,47.6,-122.3\n"
        "t2,acct,2025-06-16,Joe's Bistro,-45.00,Joe's,,\n",
        encoding="utf-8",
    )
    t1, t2 = load_transactions(p)
    assert t1.amount == -42.10
    assert t1.merchant_name is None
    assert (t1.location_lat, t1.location_lon) == (47.6, -122.3)
    assert t2.merchant_name == "Joe's"
    assert t2.location_lat is None


def test_ingest_errors(tmp_path: Path):
    with pytest.raises(IngestError, match="file not found"):
        load_transactions(tmp_path / "missing.json")

    unsupported = tmp_path / "txs.xml"
    unsupported.write_text("<x/>", encoding="utf-8")
    with pytest.raises(IngestError, match="unsupported file type"):
        load_transactions(unsupported)

    bad_json = tmp_path / "bad.json"
    bad_json.write_text("[{", encoding="utf-8")
    with pytest.raises(IngestError, match="invalid JSON"):
        load_transactions(bad_json)

    bad_line = tmp_path / "bad.jsonl"
    bad_line.write_text(json.dumps(_ROWS[0]) + "\n{oops\n", encoding="utf-8")
    with pytest.raises(IngestError, match=":2: invalid JSON"):
        load_transactions(bad_line)

    scalar = tmp_path / "scalar.json"
    scalar.write_text("42", encoding="utf-8")
    with pytest.raises(IngestError, match="expected a JSON array"):
        load_transactions(scalar)

    missing_field = tmp_path / "missing_amount.json"
    missing_field.write_text(
        json.dumps([{"id": "x", "accountId": "a", "date": "2025-01-01", "name": "n"}]),
        encoding="utf-8",
    )
    with pytest.raises(IngestError, match="invalid transaction record"):
        load_transactions(missing_field)
