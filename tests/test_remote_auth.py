"""Unit tests for wchelper.services.remote_auth: verdicts vs. unavailability (no network)."""

import asyncio
import json
import unittest

import httpx

from wchelper.services.remote_auth import HttpRemoteAuthenticator, RemoteAuthUnavailableError

BASE_URL = "http://db.test"
PATH = "/api/postgres/auth/login"


def _authenticator(handler) -> HttpRemoteAuthenticator:
    return HttpRemoteAuthenticator(BASE_URL, PATH, timeout_sec=1.0, transport=httpx.MockTransport(handler))


class TestVerdicts(unittest.TestCase):
    def test_accepted(self) -> None:
        sent: list[dict] = []

        def handler(request: httpx.Request) -> httpx.Response:
            sent.append(json.loads(request.content))
            self.assertEqual(str(request.url), BASE_URL + PATH)
            return httpx.Response(
                200, json={"success": True, "user": {"username": "admin@demo.com", "role": "admin"}}
            )

        verdict = asyncio.run(_authenticator(handler).authenticate("admin@demo.com", "Passw0rd!"))
        self.assertTrue(verdict.accepted)
        self.assertEqual(verdict.identity.username, "admin@demo.com")
        self.assertEqual(verdict.identity.role, "admin")
        self.assertEqual(sent, [{"username": "admin@demo.com", "password": "Passw0rd!"}])

    def test_rejected_by_status(self) -> None:
        handler = lambda request: httpx.Response(401, json={"success": False, "error": "Account locked"})
        verdict = asyncio.run(_authenticator(handler).authenticate("a@b.com", "x"))
        self.assertFalse(verdict.accepted)
        self.assertEqual(verdict.reason, "Account locked")

    def test_rejected_by_status_with_plain_body(self) -> None:
        for response in (
            httpx.Response(401, text="Unauthorized"),
            httpx.Response(403, text="<html><body>Forbidden</body></html>"),
            httpx.Response(401),
            httpx.Response(403, json=["locked"]),
        ):
            with self.subTest(status=response.status_code, body=response.text):
                verdict = asyncio.run(_authenticator(lambda request: response).authenticate("a@b.com", "x"))
                self.assertFalse(verdict.accepted)
                self.assertEqual(verdict.reason, "Invalid username or password.")

    def test_rejected_by_payload(self) -> None:
        handler = lambda request: httpx.Response(200, json={"success": False})
        verdict = asyncio.run(_authenticator(handler).authenticate("a@b.com", "x"))
        self.assertFalse(verdict.accepted)
        self.assertEqual(verdict.reason, "Invalid username or password.")


class TestUnavailable(unittest.TestCase):
    def _assert_unavailable(self, handler) -> None:
        with self.assertRaises(RemoteAuthUnavailableError):
            asyncio.run(_authenticator(handler).authenticate("a@b.com", "x"))

    def test_connect_error(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("refused", request=request)

        self._assert_unavailable(handler)

    def test_timeout(self) -> None:
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("slow", request=request)

        self._assert_unavailable(handler)

    def test_server_error(self) -> None:
        self._assert_unavailable(lambda request: httpx.Response(500, json={"success": False}))

    def test_not_json(self) -> None:
        self._assert_unavailable(lambda request: httpx.Response(200, text="<html/>"))

    def test_success_without_user(self) -> None:
        self._assert_unavailable(lambda request: httpx.Response(200, json={"success": True}))

    def test_unexpected_shape(self) -> None:
        self._assert_unavailable(lambda request: httpx.Response(200, json={"ok": 1}))


if __name__ == "__main__":
    unittest.main()
