"""Geohash encoding used as a coarse spatial bucket for merchant locations.

Standard interleaved bisection: even bits refine longitude, odd bits refine
latitude, and every 5 bits emit one character of the base-32 alphabet. At the
default precision of 6 characters a bucket is roughly 1.2 km x 0.6 km.
"""

from __future__ import annotations

BASE32 = "0123456789bcdefghjkmnpqrstuvwxyz"
UNKNOWN_GEOHASH = "unknown"
DEFAULT_PRECISION = 6


class GeohashEncoder:
    """Deterministic ``(lat, lon) -> str`` encoder with a fixed precision."""

    def __init__(self, precision: int = DEFAULT_PRECISION) -> None:
        if not isinstance(precision, int) or precision < 1:
            raise ValueError("precision must be a positive integer")
        self.precision = precision

    def encode(self, lat: float | None, lon: float | None) -> str:
        """Return the geohash of ``(lat, lon)``, or ``"unknown"`` if either is missing.

        Coordinates must be finite; out-of-range values simply saturate at the
        edge buckets.
        """

        if lat is None or lon is None:
            return UNKNOWN_GEOHASH

        lat_lo, lat_hi = -90.0, 90.0
        lon_lo, lon_hi = -180.0, 180.0
        chars: list[str] = []
        ch = 0
        bit = 0
        even = True

        while len(chars) < self.precision:
            if even:
                mid = (lon_lo + lon_hi) / 2
                if lon >= mid:
                    ch |= 1 << (4 - bit)
                    lon_lo = mid
                else:
                    lon_hi = mid
            else:
                mid = (lat_lo + lat_hi) / 2
                if lat >= mid:
                    ch |= 1 << (4 - bit)
                    lat_lo = mid
                else:
                    lat_hi = mid
            even = not even

            if bit < 4:
                bit += 1
            else:
                chars.append(BASE32[ch])
                bit = 0
                ch = 0

        return "".join(chars)


def shared_prefix(a: str, b: str, length: int) -> bool:
    """True when two known geohashes agree on their first ``length`` characters."""

    if UNKNOWN_GEOHASH in (a, b):
        return False
    return len(a) >= length and len(b) >= length and a[:length] == b[:length]


_DEFAULT_ENCODER = GeohashEncoder()


def encode_geohash(lat: float | None, lon: float | None) -> str:
    return _DEFAULT_ENCODER.encode(lat, lon)


__all__ = [
    "BASE32",
    "DEFAULT_PRECISION",
    "GeohashEncoder",
    "UNKNOWN_GEOHASH",
    "encode_geohash",
    "shared_prefix",
]
