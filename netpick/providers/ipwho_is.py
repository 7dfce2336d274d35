"""ipwho.is geolocation provider."""

from __future__ import annotations

from typing import Any, Optional

from netpick.providers.base import GeoProvider


class IpwhoIsProvider(GeoProvider):
    @property
    def name(self) -> str:
        return "ipwho.is"

    @property
    def slug(self) -> str:
        return "ipwho_is"

    @property
    def lookup_url(self) -> str:
        return "https://ipwho.is/"

    def error_message(self, data: dict[str, Any]) -> Optional[str]:
        if data.get("success") is not True:
            return str(data.get("message") or "ipwho.is error")
        return None

    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        connection = data.get("connection") or {}
        return {
            "country": data["country"],
            "city": data["city"],
            "latitude": data["latitude"],
            "longitude": data["longitude"],
            "isp": connection.get("isp") if isinstance(connection, dict) else None,
        }
