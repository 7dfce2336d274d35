"""netpick: geolocation-aware test server selection."""

__version__ = "0.1.0"
