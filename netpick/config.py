"""Constants and configuration for netpick."""

from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Mapping, Optional

# Geolocation settings
GEO_TIMEOUT = 5.0  # Per-provider lookup timeout (seconds)
GEO_PROVIDER_ORDER = ["ipapi_co", "ip_api_com", "ipinfo_io", "freegeoip_app", "ipwho_is"]

# Used when every provider in the chain fails
FALLBACK_COUNTRY = "United States"
FALLBACK_CITY = "Kansas City"
FALLBACK_LAT = 39.0997
FALLBACK_LON = -94.5786
FALLBACK_SOURCE = "fallback"

# Values some providers return instead of leaving a field empty
PLACEHOLDER_NAMES = {"unknown"}

# Server directory (dynamic half of the catalog)
DIRECTORY_URL = "https://www.speedtest.net/api/js/servers?engine=js&limit=10"
DIRECTORY_LIMIT = 10
DIRECTORY_TIMEOUT = 5.0
MAX_POOL_SIZE = 20

# Latency probing
PROBE_CONCURRENCY = 15
PROBE_TIMEOUT = 2.0
PROBE_ATTEMPTS = 3

# Selection
DEFAULT_MAX_SERVERS = 3
EARTH_RADIUS_KM = 6371.0

# Geographic class weights
CLASS_WEIGHTS = {
    "regional": 1.0,
    "continental": 0.9,
    "global": 0.5,
    "backup": 0.3,
}

# Global CDN entries, always part of the catalog.
# (id, name, url, class)
GLOBAL_SERVERS = [
    ("cloudflare-global", "Cloudflare Global", "https://speed.cloudflare.com", "global"),
    ("google-global", "Google Global", "https://www.google.com", "backup"),
]

# Well-known exchange hubs.
# (id, name, url, city, country_code, lat, lon)
EXCHANGE_HUBS = [
    ("librespeed-fra", "LibreSpeed DE-IX", "https://frankfurt.speedtest.wtnet.de", "Frankfurt", "DE", 50.1109, 8.6821),
    ("librespeed-ams", "LibreSpeed AMS-IX", "https://ams.speedtest.wtnet.de", "Amsterdam", "NL", 52.3676, 4.9041),
    ("librespeed-sin", "LibreSpeed Singapore", "https://sg.speedtest.wtnet.de", "Singapore", "SG", 1.3521, 103.8198),
    ("librespeed-nyc", "LibreSpeed New York", "https://nyc.speedtest.wtnet.de", "New York", "US", 40.7128, -74.0060),
    ("librespeed-lax", "LibreSpeed Los Angeles", "https://la.speedtest.wtnet.de", "Los Angeles", "US", 34.0522, -118.2437),
    ("librespeed-tyo", "LibreSpeed Tokyo", "https://tyo.speedtest.wtnet.de", "Tokyo", "JP", 35.6762, 139.6503),
    ("librespeed-lon", "LibreSpeed London", "https://lon.speedtest.wtnet.de", "London", "GB", 51.5074, -0.1278),
    ("librespeed-syd", "LibreSpeed Sydney", "https://syd.speedtest.wtnet.de", "Sydney", "AU", -33.8688, 151.2093),
]

# Regional hubs keyed by continent name
CONTINENT_HUBS = {
    "North America": [
        ("hub-us-east", "US East Coast Hub", "https://ash.speedtest.wtnet.de", "Ashburn", "US", 39.0438, -77.4874),
        ("hub-us-west", "US West Coast Hub", "https://lax.speedtest.wtnet.de", "Los Angeles", "US", 34.0522, -118.2437),
    ],
    "Europe": [
        ("hub-eu-central", "Europe Central Hub", "https://frankfurt.speedtest.wtnet.de", "Frankfurt", "DE", 50.1109, 8.6821),
        ("hub-eu-west", "Europe West Hub", "https://lon.speedtest.wtnet.de", "London", "GB", 51.5074, -0.1278),
    ],
    "Asia": [
        ("hub-apac", "Asia Pacific Hub", "https://sg.speedtest.wtnet.de", "Singapore", "SG", 1.3521, 103.8198),
        ("hub-asia-east", "Asia East Hub", "https://tokyo.speedtest.wtnet.de", "Tokyo", "JP", 35.6762, 139.6503),
    ],
    "South America": [
        ("hub-sa", "South America Hub", "https://saopaulo.speedtest.wtnet.de", "São Paulo", "BR", -23.5505, -46.6333),
    ],
    "Africa": [
        ("hub-af", "Africa Hub", "https://capetown.speedtest.wtnet.de", "Cape Town", "ZA", -33.9249, 18.4241),
    ],
    "Oceania": [
        ("hub-oc", "Oceania Hub", "https://syd.speedtest.wtnet.de", "Sydney", "AU", -33.8688, 151.2093),
    ],
}

# Country primary servers, keyed by every name/code a provider may return
_US = ("country-us", "US Central", "https://dal.speedtest.wtnet.de", "Dallas", "US", 32.7767, -96.7970)
_GB = ("country-gb", "UK Primary", "https://lon.speedtest.wtnet.de", "London", "GB", 51.5074, -0.1278)
_DE = ("country-de", "DE Primary", "https://frankfurt.speedtest.wtnet.de", "Frankfurt", "DE", 50.1109, 8.6821)
_FR = ("country-fr", "FR Primary", "https://paris.speedtest.wtnet.de", "Paris", "FR", 48.8566, 2.3522)
_JP = ("country-jp", "JP Primary", "https://tyo.speedtest.wtnet.de", "Tokyo", "JP", 35.6762, 139.6503)
_AU = ("country-au", "AU Primary", "https://syd.speedtest.wtnet.de", "Sydney", "AU", -33.8688, 151.2093)
_CA = ("country-ca", "CA Primary", "https://tor.speedtest.wtnet.de", "Toronto", "CA", 43.6532, -79.3832)

COUNTRY_SERVERS = {
    "united states": _US,
    "us": _US,
    "united kingdom": _GB,
    "gb": _GB,
    "uk": _GB,
    "germany": _DE,
    "de": _DE,
    "france": _FR,
    "fr": _FR,
    "japan": _JP,
    "jp": _JP,
    "australia": _AU,
    "au": _AU,
    "canada": _CA,
    "ca": _CA,
}

# User agent for HTTP requests
USER_AGENT = "netpick/0.1.0"

# Environment switch for trace diagnostics
DEBUG_ENV_VAR = "NETPICK_DEBUG"
_FALSY = {"", "0", "false", "no", "off"}


@dataclass(frozen=True)
class Settings:
    """Run-wide settings, built once at startup and passed down explicitly."""

    debug: bool = False
    max_servers: int = DEFAULT_MAX_SERVERS
    geo_timeout: float = GEO_TIMEOUT
    probe_timeout: float = PROBE_TIMEOUT
    probe_attempts: int = PROBE_ATTEMPTS
    probe_concurrency: int = PROBE_CONCURRENCY
    deadline: Optional[float] = None  # Overall budget for the whole run (seconds)


def debug_from_env(environ: Optional[Mapping[str, str]] = None) -> bool:
    """Return True when the debug environment switch is set to a truthy value."""
    env = os.environ if environ is None else environ
    value = env.get(DEBUG_ENV_VAR)
    if value is None:
        return False
    return value.strip().lower() not in _FALSY


def load_settings(environ: Optional[Mapping[str, str]] = None, **overrides) -> Settings:
    """Build a Settings value from the environment plus explicit overrides."""
    values = {"debug": debug_from_env(environ)}
    values.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**values)
