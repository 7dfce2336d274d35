from __future__ import annotations

from typing import Callable, Optional

import httpx
import pytest

from netpick.models import Location, ServerCandidate, ServerClass


@pytest.fixture
def berlin() -> Location:
    return Location(
        country="Germany",
        city="Berlin",
        latitude=52.52,
        longitude=13.405,
        isp="Deutsche Telekom",
        source="ipapi_co",
    )


@pytest.fixture
def make_candidate() -> Callable[..., ServerCandidate]:
    def _make(
        server_id: str,
        server_class: ServerClass = ServerClass.REGIONAL,
        distance_km: float = 0.0,
        url: Optional[str] = None,
        name: Optional[str] = None,
    ) -> ServerCandidate:
        return ServerCandidate(
            id=server_id,
            name=name or server_id,
            url=url or f"https://{server_id}.example.com",
            server_class=server_class,
            distance_km=distance_km,
        )

    return _make


@pytest.fixture
def mock_clients() -> Callable[..., Callable[[], httpx.AsyncClient]]:
    """Turn a request handler into a client factory backed by MockTransport."""

    def _factory(handler) -> Callable[[], httpx.AsyncClient]:
        transport = httpx.MockTransport(handler)
        return lambda: httpx.AsyncClient(transport=transport, timeout=5.0)

    return _factory
