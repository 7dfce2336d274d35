"""Concurrent latency probing of candidate servers.

Every candidate gets one independent measurement task.  Tasks run under a
semaphore so at most ``concurrency`` probes are in flight, and results are
collected only after every task has finished or timed out.

Public API:
    LatencyProber.probe  -- measure all candidates, return id -> ProbeResult
"""

from __future__ import annotations

import asyncio
import logging
import time
from types import MappingProxyType
from typing import Callable, Iterable, Mapping, Optional

import httpx

from netpick.config import PROBE_ATTEMPTS, PROBE_CONCURRENCY, PROBE_TIMEOUT, USER_AGENT
from netpick.errors import ProbeFailure
from netpick.models import ProbeResult, ServerCandidate
from netpick.stats import compute_stats

logger = logging.getLogger(__name__)

ClientFactory = Callable[[], httpx.AsyncClient]


class LatencyProber:
    """Measures round-trip responsiveness of candidate servers.

    Each measurement sends ``attempts`` HEAD requests, each bounded by
    ``timeout`` seconds.  A 2xx or 3xx answer counts as a round trip.
    Failed candidates are reported, not raised.
    """

    def __init__(
        self,
        concurrency: int = PROBE_CONCURRENCY,
        timeout: float = PROBE_TIMEOUT,
        attempts: int = PROBE_ATTEMPTS,
        debug: bool = False,
        client_factory: Optional[ClientFactory] = None,
    ) -> None:
        if concurrency < 1:
            raise ValueError(f"concurrency must be >= 1, got {concurrency}")
        if attempts < 1:
            raise ValueError(f"attempts must be >= 1, got {attempts}")
        self.concurrency = concurrency
        self.timeout = timeout
        self.attempts = attempts
        self.debug = debug
        self._client_factory = client_factory or self._default_client

    def _default_client(self) -> httpx.AsyncClient:
        # Redirects are not followed: a 3xx already proves the server answered
        return httpx.AsyncClient(
            timeout=self.timeout,
            follow_redirects=False,
            headers={"User-Agent": USER_AGENT},
        )

    async def probe(
        self,
        candidates: Iterable[ServerCandidate],
        deadline: Optional[float] = None,
    ) -> Mapping[str, ProbeResult]:
        """Probe all *candidates* concurrently.

        Parameters
        ----------
        candidates:
            Servers to measure.  Every one of them gets an entry in the
            returned mapping.
        deadline:
            Optional overall budget in seconds.  Probes still pending when
            it expires are cancelled and reported as timeouts.

        Returns
        -------
        Mapping[str, ProbeResult]
            Read-only mapping keyed by candidate id.
        """
        candidates = list(candidates)
        if not candidates:
            return MappingProxyType({})

        semaphore = asyncio.Semaphore(self.concurrency)

        async with self._client_factory() as client:
            tasks = {
                asyncio.create_task(self._bounded_measure(semaphore, client, c)): c
                for c in candidates
            }
            try:
                done, _ = await asyncio.wait(tasks, timeout=deadline)
            finally:
                # Also runs when the caller itself is cancelled; unfinished
                # tasks must unwind before the client closes
                pending = [t for t in tasks if not t.done()]
                for task in pending:
                    task.cancel()
                if pending:
                    await asyncio.gather(*pending, return_exceptions=True)

        results: dict[str, ProbeResult] = {}
        for task, candidate in tasks.items():
            if task in done and not task.cancelled() and task.exception() is None:
                result = task.result()
            elif task in done and not task.cancelled():
                exc = task.exception()
                logger.warning("Unexpected error probing %s: %s", candidate.id, exc)
                result = ProbeResult(
                    candidate_id=candidate.id,
                    success=False,
                    failure=ProbeFailure.CONNECT_FAILED,
                    detail=f"probe error: {exc}",
                )
            else:
                result = ProbeResult(
                    candidate_id=candidate.id,
                    success=False,
                    failure=ProbeFailure.TIMEOUT,
                    detail="overall probe deadline exceeded",
                )
                self._trace(candidate, result)
            results[candidate.id] = result

        return MappingProxyType(results)

    async def _bounded_measure(
        self,
        semaphore: asyncio.Semaphore,
        client: httpx.AsyncClient,
        candidate: ServerCandidate,
    ) -> ProbeResult:
        async with semaphore:
            return await self.measure(client, candidate)

    async def measure(self, client: httpx.AsyncClient, candidate: ServerCandidate) -> ProbeResult:
        """Run the round trips for one candidate and summarize them."""
        latencies: list[float] = []
        failures: list[ProbeFailure] = []
        last_detail: Optional[str] = None

        for _ in range(self.attempts):
            t0 = time.perf_counter()
            try:
                resp = await asyncio.wait_for(client.head(candidate.url), timeout=self.timeout)
            except (asyncio.TimeoutError, httpx.TimeoutException) as exc:
                failures.append(ProbeFailure.TIMEOUT)
                last_detail = f"timed out after {self.timeout:.1f}s: {exc}"
                continue
            except httpx.HTTPError as exc:
                failures.append(ProbeFailure.CONNECT_FAILED)
                last_detail = f"connection failed: {exc}"
                continue
            elapsed_ms = (time.perf_counter() - t0) * 1000.0

            if resp.is_success or 300 <= resp.status_code < 400:
                latencies.append(round(elapsed_ms, 3))
            else:
                failures.append(ProbeFailure.CONNECT_FAILED)
                last_detail = f"unexpected status: {resp.status_code}"

        if latencies:
            stats = compute_stats(latencies)
            return ProbeResult(
                candidate_id=candidate.id,
                success=True,
                latency_ms=stats.avg,
                jitter_ms=stats.jitter,
                min_ms=stats.min,
                max_ms=stats.max,
                median_ms=stats.median,
                samples=len(latencies),
            )

        kind = ProbeFailure.TIMEOUT if all(f is ProbeFailure.TIMEOUT for f in failures) else ProbeFailure.CONNECT_FAILED
        result = ProbeResult(
            candidate_id=candidate.id,
            success=False,
            failure=kind,
            detail=last_detail,
        )
        self._trace(candidate, result)
        return result

    def _trace(self, candidate: ServerCandidate, result: ProbeResult) -> None:
        if self.debug:
            logger.debug(
                "[TRACE] Probe of %s (%s) failed (%s): %s",
                candidate.name,
                candidate.url,
                result.failure.value if result.failure else "unknown",
                result.detail,
            )
