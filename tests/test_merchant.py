import pytest

from transaction_enrichment.config import DEFAULT_CONFIG, config_from_mapping
from transaction_enrichment.merchant import MerchantNameCleaner, clean_merchant_name


def test_synonym_replaces_abbreviation_and_keeps_store_number():
    out = clean_merchant_name("STBCKS #4521 SEATTLE WA")
    assert out.original == "STBCKS #4521 SEATTLE WA"
    assert out.cleaned == "STBCKS #4521 SEATTLE WA"
    assert out.normalized == "STARBUCKS #4521 SEATTLE WA"


def test_longer_variant_wins_over_embedded_canonical():
    out = clean_merchant_name("SHELL OIL 4821")
    assert out.cleaned == "SHELL OIL 4821"
    assert out.normalized == "SHELL 4821"


@pytest.mark.parametrize(
    "raw, cleaned",
    [
        ("Blue Bottle 2025-06-15", "BLUE BOTTLE"),
        ("Blue Bottle 06/15/2025", "BLUE BOTTLE"),
        ("ACME 1234567 PAYMENT", "ACME PAYMENT"),
        ("Corner Market WA 9810", "CORNER MARKET"),
        ("Corner Market 1234 wa", "CORNER MARKET"),
    ],
)
def test_noise_tokens_are_removed(raw: str, cleaned: str):
    assert clean_merchant_name(raw).cleaned == cleaned


def test_trailing_suffixes_are_stripped_until_none_remain():
    assert clean_merchant_name("Acme Widgets Co LLC Inc").cleaned == "ACME WIDGETS"


def test_suffix_only_stripped_at_end():
    assert clean_merchant_name("Inc Partners").cleaned == "INC PARTNERS"


def test_whitespace_is_collapsed_and_uppercased():
    out = clean_merchant_name("   joe's    bistro\t downtown  ")
    assert out.original == "joe's    bistro\t downtown"
    assert out.cleaned == "JOE'S BISTRO DOWNTOWN"


@pytest.mark.parametrize("raw", ["", "   ", None])
def test_blank_input_yields_empty_fields(raw):
    out = clean_merchant_name(raw)
    assert (out.original, out.cleaned, out.normalized) == ("", "", "")


def test_last_matching_synonym_wins():
    cleaner = MerchantNameCleaner(
        config_from_mapping({"synonyms": [["FOO", "ALPHA"], ["BAR", "BETA"]]})
    )
    # Both variants match; the later entry overwrites the earlier substitution.
    assert cleaner.normalize("FOO BAR") == "FOO BETA"


@pytest.mark.parametrize(
    "raw",
    [
        # STBCKS expands first, then the later TARGET identity entry resets it.
        "STBCKS AT TARGET",
        # WAL-MART expands, then SHELL (a later identity entry) resets it.
        "WAL-MART SHELL",
    ],
)
def test_later_identity_synonym_discards_earlier_substitution(raw: str):
    first = clean_merchant_name(raw)
    assert first.normalized == raw
    assert clean_merchant_name(first.normalized).normalized == first.normalized


def test_identity_entry_before_longer_variant_still_expands():
    # SHELL (identity) matches first; SHELL OIL comes later and wins.
    assert clean_merchant_name("SHELL OIL 4821").normalized == "SHELL 4821"


def test_only_first_occurrence_is_replaced():
    cleaner = MerchantNameCleaner(config_from_mapping({"synonyms": [["AB", "XY"]]}))
    assert cleaner.normalize("AB AB") == "XY AB"


@pytest.mark.parametrize(
    "raw",
    [
        "STBCKS #4521 SEATTLE WA",
        "SHELL OIL 4821",
        "MCDONALDS 442",
        "EXXONMOBIL",
        "Kroger Co",
        "amazon.com",
        "Whole Foods Market",
    ],
)
def test_recleaning_normalized_output_is_stable(raw: str):
    cleaner = MerchantNameCleaner(DEFAULT_CONFIG)
    first = cleaner.clean(raw)
    second = cleaner.clean(first.normalized)
    assert second.normalized == first.normalized


def test_canonical_name_is_not_re_expanded():
    assert clean_merchant_name("MCDONALDS 442").normalized == "MCDONALDS 442"
