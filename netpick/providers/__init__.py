"""Geolocation provider registry."""

from __future__ import annotations

from typing import TYPE_CHECKING

from netpick.config import GEO_PROVIDER_ORDER

if TYPE_CHECKING:
    from netpick.providers.base import GeoProvider

_PROVIDER_MAP: dict[str, type[GeoProvider]] | None = None


def _load_providers() -> dict[str, type[GeoProvider]]:
    from netpick.providers.freegeoip_app import FreegeoipAppProvider
    from netpick.providers.ip_api_com import IpApiComProvider
    from netpick.providers.ipapi_co import IpapiCoProvider
    from netpick.providers.ipinfo_io import IpinfoIoProvider
    from netpick.providers.ipwho_is import IpwhoIsProvider

    return {
        "ipapi_co": IpapiCoProvider,
        "ip_api_com": IpApiComProvider,
        "ipinfo_io": IpinfoIoProvider,
        "freegeoip_app": FreegeoipAppProvider,
        "ipwho_is": IpwhoIsProvider,
    }


def get_provider_map() -> dict[str, type[GeoProvider]]:
    """Return the mapping of slug → provider class, loading lazily."""
    global _PROVIDER_MAP
    if _PROVIDER_MAP is None:
        _PROVIDER_MAP = _load_providers()
    return _PROVIDER_MAP


def get_provider(slug: str) -> GeoProvider:
    """Instantiate a provider by slug."""
    pmap = get_provider_map()
    if slug not in pmap:
        raise ValueError(f"Unknown provider: {slug!r}. Available: {list(pmap)}")
    return pmap[slug]()


def default_chain() -> list[GeoProvider]:
    """Return provider instances in fallback order (most preferred first)."""
    return [get_provider(slug) for slug in GEO_PROVIDER_ORDER]
