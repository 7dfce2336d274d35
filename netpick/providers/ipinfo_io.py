"""ipinfo.io geolocation provider."""

from __future__ import annotations

from typing import Any, Optional

from netpick.providers.base import GeoProvider


class IpinfoIoProvider(GeoProvider):
    """ipinfo.io packs coordinates into a single ``loc`` string ("lat,lon")."""

    @property
    def name(self) -> str:
        return "ipinfo.io"

    @property
    def slug(self) -> str:
        return "ipinfo_io"

    @property
    def lookup_url(self) -> str:
        return "https://ipinfo.io/json"

    def error_message(self, data: dict[str, Any]) -> Optional[str]:
        error = data.get("error")
        if error:
            if isinstance(error, dict):
                return str(error.get("message") or error.get("title") or "ipinfo.io error")
            return str(error)
        return None

    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        parts = str(data["loc"]).split(",")
        if len(parts) != 2:
            raise ValueError(f"Invalid coordinates format: {data['loc']!r}")
        return {
            "country": data["country"],
            "city": data["city"],
            "latitude": parts[0].strip(),
            "longitude": parts[1].strip(),
            "isp": data.get("org"),
        }
