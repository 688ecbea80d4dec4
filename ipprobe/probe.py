"""Latency probe against fixed third-party targets.

Every target is fetched concurrently as soon as the probe is launched.
Each fetch settles independently, either with a response or with a
transport error, and reports a :class:`ProbeResult` through the caller's
callback.  There is no ordering between targets, no retry and no
aggregate completion signal: callers observe a stream of settlements.

Timing uses time.perf_counter() for monotonic, high-resolution deltas.

Public API:
    probe_target        -- fetch one target and return its settlement
    launch_probes       -- fire all targets, report each via callback
    iter_probe_results  -- async iterator over settlements in arrival order
"""

from __future__ import annotations

import asyncio
import logging
import time
from typing import AsyncIterator, Callable, Iterable, Optional

import httpx

from ipprobe.config import SPEED_TEST_TARGETS
from ipprobe.models import ProbeResult, Target

logger = logging.getLogger(__name__)

# Type alias for the settlement callback.
ResultCallback = Callable[[ProbeResult], None]


def bust_cache(url: str, now: Optional[float] = None) -> str:
    """Append a ``t=<epoch-ms>`` query parameter to *url*.

    Defeats client-side caching only; CDNs and proxies upstream may still
    serve a cached copy.
    """
    millis = int((time.time() if now is None else now) * 1000)
    return str(httpx.URL(url).copy_merge_params({"t": str(millis)}))


async def probe_target(client: httpx.AsyncClient, target: Target) -> ProbeResult:
    """Fetch *target* once and report how long it took to settle.

    A response with status < 400 counts as success.  Error statuses and
    transport failures both settle as ``success=False``; neither raises.
    """
    url = bust_cache(target.url)
    status_code: Optional[int] = None
    error: Optional[str] = None

    start = time.perf_counter()
    try:
        resp = await client.get(url)
        status_code = resp.status_code
        if resp.is_error:
            error = f"HTTP {status_code}"
    except httpx.HTTPError as exc:
        error = str(exc) or type(exc).__name__
    elapsed_ms = max((time.perf_counter() - start) * 1000.0, 0.0)

    result = ProbeResult(
        name=target.name,
        duration_ms=round(elapsed_ms, 2),
        success=error is None,
        status_code=status_code,
        error=error,
    )
    logger.debug(
        "Probe %s settled in %.2fms (success=%s, error=%s)",
        target.name, result.duration_ms, result.success, error,
    )
    return result


class ProbeRun:
    """Handle on a launched set of probes.

    Settlements are delivered through the callback as they arrive.  After
    :meth:`cancel`, in-flight probes are cancelled and any settlement that
    still lands is dropped instead of delivered.
    """

    def __init__(self, on_result: ResultCallback) -> None:
        self._on_result = on_result
        self._tasks: list[asyncio.Task[None]] = []
        self._cancelled = False
        self.delivered = 0

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    @property
    def tasks(self) -> list[asyncio.Task[None]]:
        return list(self._tasks)

    @property
    def pending(self) -> int:
        return sum(1 for t in self._tasks if not t.done())

    def _spawn(self, client: httpx.AsyncClient, target: Target) -> None:
        task = asyncio.create_task(self._settle(client, target), name=f"probe-{target.key}")
        self._tasks.append(task)

    async def _settle(self, client: httpx.AsyncClient, target: Target) -> None:
        result = await probe_target(client, target)
        if self._cancelled:
            logger.debug("Dropping settlement for %s after cancel", target.name)
            return
        self.delivered += 1
        try:
            self._on_result(result)
        except Exception:
            logger.exception("Result callback failed for %s", target.name)

    async def wait(self) -> None:
        """Wait until every probe has settled or been cancelled."""
        if self._tasks:
            await asyncio.gather(*self._tasks, return_exceptions=True)

    def cancel(self) -> None:
        """Stop delivering settlements and cancel probes still in flight."""
        self._cancelled = True
        for task in self._tasks:
            task.cancel()


def launch_probes(
    client: httpx.AsyncClient,
    on_result: ResultCallback,
    targets: Iterable[Target] = SPEED_TEST_TARGETS,
) -> ProbeRun:
    """Start one probe per target without awaiting any of them.

    Must be called from a running event loop.  The callback is invoked
    exactly once per target, in settlement order.
    """
    run = ProbeRun(on_result)
    for target in targets:
        run._spawn(client, target)
    return run


async def iter_probe_results(
    client: httpx.AsyncClient,
    targets: Iterable[Target] = SPEED_TEST_TARGETS,
) -> AsyncIterator[ProbeResult]:
    """Yield each target's settlement as soon as it arrives."""
    targets = list(targets)
    queue: asyncio.Queue[ProbeResult] = asyncio.Queue()
    run = launch_probes(client, queue.put_nowait, targets)
    try:
        for _ in range(len(targets)):
            yield await queue.get()
    finally:
        run.cancel()
