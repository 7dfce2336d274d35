"""ip-api.com geolocation provider."""

from __future__ import annotations

from typing import Any, Optional

from netpick.providers.base import GeoProvider


class IpApiComProvider(GeoProvider):
    """ip-api.com reports errors through ``status`` rather than HTTP codes.

    The free tier is plain HTTP only.
    """

    @property
    def name(self) -> str:
        return "ip-api.com"

    @property
    def slug(self) -> str:
        return "ip_api_com"

    @property
    def lookup_url(self) -> str:
        return "http://ip-api.com/json/?fields=status,message,country,city,lat,lon,isp"

    def error_message(self, data: dict[str, Any]) -> Optional[str]:
        if data.get("status") != "success":
            return str(data.get("message") or "ip-api.com error")
        return None

    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        return {
            "country": data["country"],
            "city": data["city"],
            "latitude": data["lat"],
            "longitude": data["lon"],
            "isp": data.get("isp"),
        }
