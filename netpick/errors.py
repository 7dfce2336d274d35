"""Failure taxonomy for netpick.

Provider, probe and catalog failures are recorded as tagged values and
recovered where they happen.  Only a selection with nothing reachable is
raised to the caller.
"""

from __future__ import annotations

import enum
from typing import Optional


class ProviderFailure(str, enum.Enum):
    """Why a single geolocation provider attempt was rejected."""

    TIMEOUT = "timeout"
    NETWORK_ERROR = "network_error"
    HTTP_STATUS = "http_status"
    API_ERROR = "api_error"
    PARSE_ERROR = "parse_error"
    VALIDATION_ERROR = "validation_error"


class ProbeFailure(str, enum.Enum):
    """Why a latency probe produced no measurement."""

    CONNECT_FAILED = "connect_failed"
    TIMEOUT = "timeout"


class CatalogFailure(str, enum.Enum):
    EMPTY_DYNAMIC_SET = "empty_dynamic_set"


class NetpickError(Exception):
    """Base class for errors raised by netpick."""


class LocationValidationError(NetpickError, ValueError):
    """Provider values that do not describe a usable location."""


class NoReachableServersError(NetpickError):
    """No candidate answered a latency probe, so no test can run."""

    def __init__(self, candidate_count: Optional[int] = None) -> None:
        self.candidate_count = candidate_count
        self.report = None  # SelectionReport, attached by run_selection
        message = "No reachable servers: no candidate answered a latency probe"
        if candidate_count is not None:
            message = f"No reachable servers: none of {candidate_count} candidates answered a latency probe"
        super().__init__(message)
