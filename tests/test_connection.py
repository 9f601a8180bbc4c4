"""Unit tests for wchelper.services.connection: health probe race and classification (no network)."""

import asyncio
import unittest

import httpx

from wchelper.schemas.connection import ConnectionState
from wchelper.services.connection import ConnectionHealthMonitor

PRIMARY = "http://db.test/api/postgres/health"
SECONDARY = "http://backup.test/api/postgres/health"

HEALTHY_BODY = {"success": True, "message": "Database connection successful"}


def _monitor(handler, endpoints=(PRIMARY,), timeout_ms: int = 1000) -> ConnectionHealthMonitor:
    return ConnectionHealthMonitor(
        endpoints=list(endpoints),
        timeout_ms=timeout_ms,
        transport=httpx.MockTransport(handler),
    )


class TestClassification(unittest.TestCase):
    def test_connected_on_success_marker(self) -> None:
        monitor = _monitor(lambda request: httpx.Response(200, json=HEALTHY_BODY))
        status = asyncio.run(monitor.check_connection())
        self.assertEqual(status.state, ConnectionState.CONNECTED)
        self.assertFalse(status.fallback_active)
        self.assertEqual(status.endpoint, PRIMARY)
        self.assertIsNotNone(status.checked_at)
        self.assertIs(monitor.status, status)
        self.assertFalse(monitor.should_use_fallback())

    def test_plain_200_is_not_enough(self) -> None:
        for body in (
            {"status": "ok", "timestamp": "2026-01-01T00:00:00Z"},
            {"success": True, "message": "Database connection failed"},
            {"success": False, "message": "Database connection successful"},
            {"success": True},
            ["successful"],
        ):
            monitor = _monitor(lambda request, body=body: httpx.Response(200, json=body))
            status = asyncio.run(monitor.check_connection())
            self.assertEqual(status.state, ConnectionState.DISCONNECTED, body)
            self.assertTrue(status.fallback_active)

    def test_non_2xx_is_disconnected(self) -> None:
        monitor = _monitor(lambda request: httpx.Response(503, json=HEALTHY_BODY))
        status = asyncio.run(monitor.check_connection())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)
        self.assertIn("503", status.error)

    def test_non_json_is_disconnected(self) -> None:
        monitor = _monitor(lambda request: httpx.Response(200, text="<html>ok</html>"))
        status = asyncio.run(monitor.check_connection())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)

    def test_network_error_is_disconnected_not_raised(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("Connection refused", request=request)

        status = asyncio.run(_monitor(handler).check_connection())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)
        self.assertIn("ConnectError", status.error)

    def test_unexpected_handler_error_is_disconnected(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise RuntimeError("boom")

        status = asyncio.run(_monitor(handler).check_connection())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)

    def test_initial_status_unknown_with_fallback(self) -> None:
        monitor = _monitor(lambda request: httpx.Response(200, json=HEALTHY_BODY))
        self.assertEqual(monitor.status.state, ConnectionState.UNKNOWN)
        self.assertTrue(monitor.should_use_fallback())


class TestEndpoints(unittest.TestCase):
    def test_falls_through_to_next_endpoint(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            if request.url.host == "db.test":
                raise httpx.ConnectError("refused", request=request)
            return httpx.Response(200, json=HEALTHY_BODY)

        monitor = _monitor(handler, endpoints=(PRIMARY, SECONDARY))
        status = asyncio.run(monitor.check_connection())
        self.assertEqual(status.state, ConnectionState.CONNECTED)
        self.assertEqual(status.endpoint, SECONDARY)
        self.assertEqual(seen, [PRIMARY, SECONDARY])

    def test_explicit_endpoint_overrides_configured(self) -> None:
        seen: list[str] = []

        def handler(request: httpx.Request) -> httpx.Response:
            seen.append(str(request.url))
            return httpx.Response(200, json=HEALTHY_BODY)

        monitor = _monitor(handler, endpoints=(PRIMARY,))
        asyncio.run(monitor.check_connection(endpoint=SECONDARY))
        self.assertEqual(seen, [SECONDARY])

    def test_no_endpoints(self) -> None:
        monitor = _monitor(lambda request: httpx.Response(200, json=HEALTHY_BODY), endpoints=())
        status = asyncio.run(monitor.check_connection())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)


class TestDeadlineRace(unittest.TestCase):
    """A probe slower than the deadline loses; its late result is never observed."""

    def test_slow_probe_is_disconnected_and_abandoned(self) -> None:
        finished: list[bool] = []

        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.5)
            finished.append(True)
            return httpx.Response(200, json=HEALTHY_BODY)

        monitor = _monitor(handler, timeout_ms=5000)

        async def scenario():
            status = await monitor.check_connection(timeout_ms=50)
            await asyncio.sleep(0.7)
            return status

        status = asyncio.run(scenario())
        self.assertEqual(status.state, ConnectionState.DISCONNECTED)
        self.assertIn("timeout", status.error)
        self.assertEqual(finished, [])
        self.assertEqual(monitor.status.state, ConnectionState.DISCONNECTED)

    def test_fast_probe_beats_deadline(self) -> None:
        async def handler(request: httpx.Request) -> httpx.Response:
            await asyncio.sleep(0.01)
            return httpx.Response(200, json=HEALTHY_BODY)

        status = asyncio.run(_monitor(handler).check_connection(timeout_ms=2000))
        self.assertEqual(status.state, ConnectionState.CONNECTED)


class TestMonitoring(unittest.TestCase):
    def test_periodic_checks_until_stopped(self) -> None:
        calls: list[int] = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(1)
            return httpx.Response(200, json=HEALTHY_BODY)

        monitor = _monitor(handler)

        async def scenario() -> int:
            monitor.start_monitoring(0.05)
            monitor.start_monitoring(0.05)
            await asyncio.sleep(0.18)
            await monitor.stop_monitoring()
            count = len(calls)
            await asyncio.sleep(0.1)
            self.assertEqual(len(calls), count)
            await monitor.stop_monitoring()
            return count

        count = asyncio.run(scenario())
        self.assertGreaterEqual(count, 2)
        self.assertEqual(monitor.status.state, ConnectionState.CONNECTED)


if __name__ == "__main__":
    unittest.main()
