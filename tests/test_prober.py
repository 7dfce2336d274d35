from __future__ import annotations

import asyncio

import httpx
import pytest

from netpick.errors import ProbeFailure
from netpick.prober import LatencyProber


@pytest.mark.asyncio
async def test_every_candidate_gets_a_result(make_candidate, mock_clients) -> None:
    def handler(request: httpx.Request) -> httpx.Response:
        host = request.url.host
        if host.startswith("down"):
            raise httpx.ConnectError("refused", request=request)
        if host.startswith("broken"):
            return httpx.Response(503)
        if host.startswith("moved"):
            return httpx.Response(301, headers={"location": "https://elsewhere.example.com"})
        return httpx.Response(200)

    candidates = [make_candidate(n) for n in ("up", "down", "broken", "moved")]
    prober = LatencyProber(client_factory=mock_clients(handler))

    results = await prober.probe(candidates)

    assert set(results) == {"up", "down", "broken", "moved"}
    assert results["up"].success and results["up"].latency_ms is not None
    assert results["up"].samples == 3
    assert results["moved"].success
    assert not results["down"].success
    assert results["down"].failure is ProbeFailure.CONNECT_FAILED
    assert results["down"].latency_ms is None
    assert results["broken"].failure is ProbeFailure.CONNECT_FAILED


@pytest.mark.asyncio
async def test_results_are_read_only(make_candidate, mock_clients) -> None:
    prober = LatencyProber(client_factory=mock_clients(lambda request: httpx.Response(200)))
    results = await prober.probe([make_candidate("a")])

    with pytest.raises(TypeError):
        results["b"] = results["a"]  # type: ignore[index]


@pytest.mark.asyncio
async def test_uses_head_requests(make_candidate, mock_clients) -> None:
    methods: list[str] = []

    def handler(request: httpx.Request) -> httpx.Response:
        methods.append(request.method)
        return httpx.Response(200)

    await LatencyProber(attempts=2, client_factory=mock_clients(handler)).probe([make_candidate("a")])
    assert methods == ["HEAD", "HEAD"]


@pytest.mark.asyncio
async def test_concurrency_is_capped(make_candidate, mock_clients) -> None:
    in_flight = 0
    peak = 0

    async def handler(request: httpx.Request) -> httpx.Response:
        nonlocal in_flight, peak
        in_flight += 1
        peak = max(peak, in_flight)
        await asyncio.sleep(0.01)
        in_flight -= 1
        return httpx.Response(200)

    candidates = [make_candidate(f"s{i}") for i in range(12)]
    prober = LatencyProber(concurrency=3, attempts=1, client_factory=mock_clients(handler))

    results = await prober.probe(candidates)

    assert len(results) == 12
    assert all(r.success for r in results.values())
    assert 1 < peak <= 3


@pytest.mark.asyncio
async def test_slow_candidate_times_out_without_blocking_others(make_candidate, mock_clients) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host.startswith("slow"):
            await asyncio.sleep(1.0)
        return httpx.Response(200)

    prober = LatencyProber(timeout=0.05, attempts=1, client_factory=mock_clients(handler))
    results = await prober.probe([make_candidate("slow"), make_candidate("fast")])

    assert results["slow"].failure is ProbeFailure.TIMEOUT
    assert results["fast"].success


@pytest.mark.asyncio
async def test_overall_deadline_marks_pending_as_timeout(make_candidate, mock_clients) -> None:
    async def handler(request: httpx.Request) -> httpx.Response:
        if request.url.host.startswith("stuck"):
            await asyncio.sleep(5.0)
        return httpx.Response(200)

    prober = LatencyProber(timeout=10.0, attempts=1, client_factory=mock_clients(handler))
    results = await asyncio.wait_for(
        prober.probe([make_candidate("stuck"), make_candidate("quick")], deadline=0.2),
        timeout=3.0,
    )

    assert results["stuck"].failure is ProbeFailure.TIMEOUT
    assert results["stuck"].detail == "overall probe deadline exceeded"
    assert results["quick"].success


@pytest.mark.asyncio
async def test_cancelled_caller_stops_started_measurements(make_candidate, mock_clients) -> None:
    finished: list[str] = []

    async def handler(request: httpx.Request) -> httpx.Response:
        await asyncio.sleep(0.3)
        finished.append(request.url.host)
        return httpx.Response(200)

    prober = LatencyProber(attempts=1, client_factory=mock_clients(handler))
    candidates = [make_candidate(f"s{i}") for i in range(3)]

    with pytest.raises(asyncio.TimeoutError):
        await asyncio.wait_for(prober.probe(candidates), timeout=0.05)
    await asyncio.sleep(0.5)

    assert finished == []


@pytest.mark.asyncio
async def test_partial_success_still_counts(make_candidate, mock_clients) -> None:
    calls = 0

    def handler(request: httpx.Request) -> httpx.Response:
        nonlocal calls
        calls += 1
        if calls == 1:
            raise httpx.ReadTimeout("slow", request=request)
        return httpx.Response(204)

    prober = LatencyProber(attempts=3, client_factory=mock_clients(handler))
    results = await prober.probe([make_candidate("flaky")])

    assert results["flaky"].success
    assert results["flaky"].samples == 2


@pytest.mark.asyncio
async def test_empty_candidate_list(mock_clients) -> None:
    prober = LatencyProber(client_factory=mock_clients(lambda request: httpx.Response(200)))
    assert dict(await prober.probe([])) == {}


def test_invalid_concurrency_rejected() -> None:
    with pytest.raises(ValueError):
        LatencyProber(concurrency=0)


@pytest.mark.asyncio
async def test_successful_measurement_reports_spread(make_candidate, mock_clients) -> None:
    prober = LatencyProber(attempts=3, client_factory=mock_clients(lambda request: httpx.Response(200)))

    result = (await prober.probe([make_candidate("a")]))["a"]

    assert result.samples == 3
    assert result.min_ms is not None and result.max_ms is not None and result.median_ms is not None
    assert result.min_ms <= result.median_ms <= result.max_ms
    assert result.min_ms <= result.latency_ms <= result.max_ms
