"""freegeoip.app geolocation provider."""

from __future__ import annotations

from typing import Any

from netpick.providers.base import GeoProvider


class FreegeoipAppProvider(GeoProvider):
    @property
    def name(self) -> str:
        return "freegeoip.app"

    @property
    def slug(self) -> str:
        return "freegeoip_app"

    @property
    def lookup_url(self) -> str:
        return "https://freegeoip.app/json/"

    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        # No ISP information in this API
        return {
            "country": data["country_name"],
            "city": data["city"],
            "latitude": data["latitude"],
            "longitude": data["longitude"],
            "isp": None,
        }
