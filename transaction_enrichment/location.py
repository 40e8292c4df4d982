"""Location context assembly from optional address and coordinate fields."""

from __future__ import annotations

from .config import DEFAULT_CONFIG, EnrichmentConfig
from .models import LocationContext, RawTransactionView


def format_number(value: float) -> str:
    """Render a number without a trailing ``.0`` for integral values.

    ``10.0`` -> ``"10"``, ``12.5`` -> ``"12.5"``, ``-122.4194`` -> ``"-122.4194"``.
    """

    f = float(value)
    if f.is_integer():
        return str(int(f))
    return repr(f)


class LocationContextFormatter:
    """Pure field assembly; performs no lookups."""

    def __init__(self, config: EnrichmentConfig = DEFAULT_CONFIG) -> None:
        self._unknown = config.unknown_location

    def format(self, transaction: RawTransactionView) -> LocationContext:
        address = transaction.location_address or ""
        city = transaction.location_city or ""
        region = transaction.location_region or ""
        country = transaction.location_country or ""

        lat, lon = transaction.location_lat, transaction.location_lon
        coordinates = (
            f"{format_number(lat)}, {format_number(lon)}"
            if lat is not None and lon is not None
            else ""
        )

        parts = [p for p in (address, city, region, country) if p]
        return LocationContext(
            address=address,
            city=city,
            region=region,
            country=country,
            coordinates=coordinates,
            formatted=", ".join(parts) if parts else self._unknown,
        )


_DEFAULT_FORMATTER = LocationContextFormatter()


def format_location_context(transaction: RawTransactionView) -> LocationContext:
    return _DEFAULT_FORMATTER.format(transaction)


__all__ = ["LocationContextFormatter", "format_location_context", "format_number"]
