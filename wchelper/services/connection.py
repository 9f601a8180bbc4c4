"""Remote database reachability: bounded-time health probe with fallback classification."""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import Sequence
from datetime import UTC, datetime
from typing import TYPE_CHECKING, Any

import httpx

from wchelper.schemas.connection import ConnectionState, ConnectionStatus

if TYPE_CHECKING:
    from wchelper.core.config import Settings

logger = logging.getLogger(__name__)

DEFAULT_TIMEOUT_MS = 5000
DEFAULT_SUCCESS_MARKER = "successful"


def _now() -> datetime:
    return datetime.now(UTC)


def _disconnected(error: str, endpoint: str | None = None) -> ConnectionStatus:
    return ConnectionStatus(
        state=ConnectionState.DISCONNECTED,
        checked_at=_now(),
        endpoint=endpoint,
        error=error,
    )


async def _abandon(task: asyncio.Task[Any]) -> None:
    """Cancel a probe that lost the race and wait until its client is closed."""
    task.cancel()
    await asyncio.gather(task, return_exceptions=True)


class ConnectionHealthMonitor:
    """
    Classifies the remote database service as connected or disconnected.

    Each check races the probe against a deadline. Whichever settles first
    decides the status; a probe that misses the deadline is cancelled, so its
    late outcome can never be observed. check_connection() never raises for
    network or payload problems.
    """

    def __init__(
        self,
        endpoints: Sequence[str],
        timeout_ms: int = DEFAULT_TIMEOUT_MS,
        success_marker: str = DEFAULT_SUCCESS_MARKER,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self._endpoints = list(endpoints)
        self._timeout_ms = timeout_ms
        self._success_marker = success_marker
        self._transport = transport
        self._status = ConnectionStatus()
        # Started/recorded check counters; an older check never overwrites a newer one.
        self._started = 0
        self._recorded = 0
        self._monitor_task: asyncio.Task[None] | None = None

    @classmethod
    def from_settings(
        cls, settings: Settings, transport: httpx.AsyncBaseTransport | None = None
    ) -> ConnectionHealthMonitor:
        return cls(
            endpoints=settings.HEALTH_ENDPOINTS,
            timeout_ms=settings.HEALTH_TIMEOUT_MS,
            success_marker=settings.HEALTH_SUCCESS_MARKER,
            transport=transport,
        )

    @property
    def endpoints(self) -> list[str]:
        return list(self._endpoints)

    @property
    def status(self) -> ConnectionStatus:
        return self._status

    def should_use_fallback(self) -> bool:
        return self._status.fallback_active

    def is_connected_payload(self, body: Any) -> bool:
        """Health success predicate: success flag plus the marker term in the message."""
        if not isinstance(body, dict) or not body.get("success"):
            return False
        message = body.get("message")
        return isinstance(message, str) and self._success_marker in message

    async def check_connection(
        self, endpoint: str | None = None, timeout_ms: int | None = None
    ) -> ConnectionStatus:
        """
        Probe the remote health endpoint(s) and return the classification.

        With no endpoint, the configured endpoints are tried in order inside a
        single deadline of timeout_ms.
        """
        endpoints = [endpoint] if endpoint else list(self._endpoints)
        deadline_ms = timeout_ms if timeout_ms is not None else self._timeout_ms
        self._started += 1
        check_id = self._started
        start = time.perf_counter()

        if not endpoints:
            status = _disconnected("no health endpoints configured")
        else:
            probe = asyncio.create_task(self._probe(endpoints, deadline_ms))
            try:
                done, _ = await asyncio.wait({probe}, timeout=deadline_ms / 1000)
            except asyncio.CancelledError:
                await _abandon(probe)
                raise
            if probe in done:
                try:
                    status = probe.result()
                except Exception as e:
                    status = _disconnected(f"probe failed: {type(e).__name__}")
            else:
                await _abandon(probe)
                status = _disconnected(f"timeout after {deadline_ms} ms")

        elapsed = time.perf_counter() - start
        log_extra = {
            "connection_state": status.state.value,
            "endpoint": status.endpoint,
            "probe_latency_seconds": elapsed,
        }
        if status.state == ConnectionState.CONNECTED:
            logger.info("Remote database connected", extra=log_extra)
        else:
            log_extra["reason"] = (status.error or "")[:200]
            logger.warning("Remote database unavailable; fallback mode active", extra=log_extra)

        self._record(status, check_id)
        return status

    def _record(self, status: ConnectionStatus, check_id: int) -> None:
        if check_id < self._recorded:
            return
        self._recorded = check_id
        self._status = status

    async def _probe(self, endpoints: list[str], deadline_ms: int) -> ConnectionStatus:
        last_error = "all health endpoints failed"
        timeout = httpx.Timeout(deadline_ms / 1000)
        async with httpx.AsyncClient(transport=self._transport, timeout=timeout) as client:
            for url in endpoints:
                try:
                    response = await client.get(url, headers={"Accept": "application/json"})
                except httpx.HTTPError as e:
                    last_error = f"{type(e).__name__} from {url}"
                    continue
                if not response.is_success:
                    last_error = f"HTTP {response.status_code} from {url}"
                    continue
                try:
                    body = response.json()
                except ValueError:
                    last_error = f"non-JSON health response from {url}"
                    continue
                if self.is_connected_payload(body):
                    return ConnectionStatus(
                        state=ConnectionState.CONNECTED,
                        checked_at=_now(),
                        endpoint=url,
                    )
                last_error = f"unsuccessful health response from {url}"
        return _disconnected(last_error)

    def start_monitoring(self, interval_sec: float) -> None:
        """Check now and then every interval_sec in a background task. No-op if running."""
        if self._monitor_task is not None and not self._monitor_task.done():
            return
        logger.info("Starting connection monitoring", extra={"interval_seconds": interval_sec})
        self._monitor_task = asyncio.create_task(self._monitor(interval_sec))

    async def stop_monitoring(self) -> None:
        task, self._monitor_task = self._monitor_task, None
        if task is None:
            return
        await _abandon(task)
        logger.info("Stopped connection monitoring")

    async def _monitor(self, interval_sec: float) -> None:
        while True:
            await self.check_connection()
            await asyncio.sleep(interval_sec)
