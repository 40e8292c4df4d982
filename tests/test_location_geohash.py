from dataclasses import replace

import pytest

from transaction_enrichment.config import DEFAULT_CONFIG
from transaction_enrichment.geohash import (
    GeohashEncoder,
    encode_geohash,
    shared_prefix,
)
from transaction_enrichment.location import (
    LocationContextFormatter,
    format_location_context,
    format_number,
)


# ---- Location context --------------------------------------------------------


def test_full_location(mk_tx):
    tx = mk_tx(
        location_address="123 Main St",
        location_city="Seattle",
        location_region="WA",
        location_country="US",
        location_lat=47.6062,
        location_lon=-122.3321,
    )
    loc = format_location_context(tx)
    assert loc.formatted == "123 Main St, Seattle, WA, US"
    assert loc.coordinates == "47.6062, -122.3321"
    assert loc.address == "123 Main St"
    assert (loc.city, loc.region, loc.country) == ("Seattle", "WA", "US")


def test_partial_location_skips_missing_parts(mk_tx):
    loc = format_location_context(mk_tx(location_city="Portland", location_country="US"))
    assert loc.formatted == "Portland, US"
    assert loc.address == ""
    assert loc.coordinates == ""


def test_no_location_falls_back_to_unknown(mk_tx):
    loc = format_location_context(mk_tx())
    assert loc.formatted == "Unknown Location"
    assert loc.coordinates == ""


def test_empty_strings_count_as_missing(mk_tx):
    loc = format_location_context(mk_tx(location_city="", location_region=""))
    assert loc.formatted == "Unknown Location"


def test_coordinates_require_both_values(mk_tx):
    assert format_location_context(mk_tx(location_lat=47.6)).coordinates == ""
    assert format_location_context(mk_tx(location_lon=-122.3)).coordinates == ""


def test_zero_coordinates_are_valid(mk_tx):
    loc = format_location_context(mk_tx(location_lat=0.0, location_lon=0.0))
    assert loc.coordinates == "0, 0"


def test_custom_unknown_label(mk_tx):
    formatter = LocationContextFormatter(replace(DEFAULT_CONFIG, unknown_location="Nowhere"))
    assert formatter.format(mk_tx()).formatted == "Nowhere"


@pytest.mark.parametrize(
    "value, expected",
    [(10.0, "10"), (12.5, "12.5"), (-122.4194, "-122.4194"), (0.0, "0"), (4.99, "4.99")],
)
def test_format_number(value: float, expected: str):
    assert format_number(value) == expected


# ---- Geohash -----------------------------------------------------------------


@pytest.mark.parametrize(
    "lat, lon, expected",
    [
        (57.64911, 10.40744, "u4pruy"),
        (37.8324, 112.5584, "ww8p1r"),
        (0.0, 0.0, "s00000"),
    ],
)
def test_known_geohashes(lat: float, lon: float, expected: str):
    assert encode_geohash(lat, lon) == expected


def test_missing_coordinate_is_unknown():
    assert encode_geohash(None, 10.0) == "unknown"
    assert encode_geohash(10.0, None) == "unknown"
    assert encode_geohash(None, None) == "unknown"


def test_precision_controls_length():
    assert GeohashEncoder(precision=9).encode(57.64911, 10.40744) == "u4pruydqq"
    assert GeohashEncoder(precision=1).encode(57.64911, 10.40744) == "u"


def test_invalid_precision_rejected():
    with pytest.raises(ValueError):
        GeohashEncoder(precision=0)


def test_nearby_points_share_a_prefix():
    a = encode_geohash(47.6062, -122.3321)
    b = encode_geohash(47.6097, -122.3331)
    assert shared_prefix(a, b, 4)
    assert not shared_prefix(a, "unknown", 4)
    assert not shared_prefix("unknown", "unknown", 4)

