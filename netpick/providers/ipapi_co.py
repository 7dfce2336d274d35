"""ipapi.co geolocation provider."""

from __future__ import annotations

from typing import Any, Optional

from netpick.providers.base import GeoProvider


class IpapiCoProvider(GeoProvider):
    @property
    def name(self) -> str:
        return "ipapi.co"

    @property
    def slug(self) -> str:
        return "ipapi_co"

    @property
    def lookup_url(self) -> str:
        return "https://ipapi.co/json/"

    def error_message(self, data: dict[str, Any]) -> Optional[str]:
        if data.get("error"):
            return str(data.get("reason") or "ipapi.co error")
        return None

    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "country": data["country_name"],
            "city": data["city"],
            "latitude": data["latitude"],
            "longitude": data["longitude"],
            "isp": data.get("org"),
        }
