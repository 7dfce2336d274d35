"""Abstract base class for geolocation providers."""

from __future__ import annotations

import abc
from typing import Any, Optional


class GeoProvider(abc.ABC):
    """Base class that each geolocation provider must implement.

    A provider only knows its endpoint and response shape.  Fetching,
    validation and the fallback chain live in :mod:`netpick.location`.
    """

    @property
    @abc.abstractmethod
    def name(self) -> str:
        """Human-readable provider name (e.g. 'ipapi.co')."""

    @property
    @abc.abstractmethod
    def slug(self) -> str:
        """Short identifier, reported as the location source."""

    @property
    @abc.abstractmethod
    def lookup_url(self) -> str:
        """URL that returns the caller's location as JSON."""

    def error_message(self, data: dict[str, Any]) -> Optional[str]:
        """Return the provider's error message if the body flags an error."""
        return None

    @abc.abstractmethod
    def parse(self, data: dict[str, Any]) -> dict[str, Any]:
        """Map the provider's body onto raw location fields.

        Returns a dict with keys ``country``, ``city``, ``latitude``,
        ``longitude`` and ``isp``.  Values are not validated here; a
        missing required field raises ``KeyError``.
        """
