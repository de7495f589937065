"""Tests for fetch outcome classification."""

import unittest
from unittest.mock import MagicMock, patch

import requests

from pagewatch.base import BaseFetcher
from pagewatch.factory import FetcherFactory
from pagewatch.fetchers import DEFAULT_USER_AGENT, ImpersonatingFetcher, RequestsFetcher
from pagewatch.models import Target

TARGET = Target(uri="https://example.com/jobs", text="Curator")


def _response(status_code=200, text="<p>Curator</p>"):
    resp = MagicMock()
    resp.status_code = status_code
    resp.text = text
    return resp


class _UndecodableResponse:
    status_code = 200

    @property
    def text(self):
        raise UnicodeDecodeError("utf-8", b"\xff", 0, 1, "invalid start byte")


class TestRequestsFetcher(unittest.TestCase):
    """Verify RequestsFetcher turns responses and errors into outcomes."""

    def test_success(self):
        with patch("pagewatch.fetchers.requests.get", return_value=_response()) as get:
            outcome = RequestsFetcher(timeout=7, user_agent="ua/1").run(TARGET)
        self.assertTrue(outcome.ok)
        self.assertEqual(outcome.status, "OK")
        self.assertEqual(outcome.body, "<p>Curator</p>")
        get.assert_called_once_with(TARGET.uri, headers={"User-Agent": "ua/1"}, timeout=7)

    def test_default_user_agent(self):
        with patch("pagewatch.fetchers.requests.get", return_value=_response()) as get:
            RequestsFetcher(timeout=7).run(TARGET)
        _, kwargs = get.call_args
        self.assertEqual(kwargs["headers"], {"User-Agent": DEFAULT_USER_AGENT})

    def test_any_2xx_is_success(self):
        with patch("pagewatch.fetchers.requests.get", return_value=_response(status_code=204, text="")):
            outcome = RequestsFetcher().run(TARGET)
        self.assertTrue(outcome.ok)

    def test_http_error_status(self):
        """Non-2xx responses fail with the status code as a string."""
        with patch("pagewatch.fetchers.requests.get", return_value=_response(status_code=404)):
            outcome = RequestsFetcher().run(TARGET)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.status, "404")
        self.assertIsNone(outcome.body)

    def test_connection_error_is_unknown(self):
        with patch("pagewatch.fetchers.requests.get", side_effect=requests.ConnectionError("down")):
            outcome = RequestsFetcher().run(TARGET)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.status, "unknown")

    def test_timeout_is_unknown(self):
        with patch("pagewatch.fetchers.requests.get", side_effect=requests.Timeout("slow")):
            outcome = RequestsFetcher().run(TARGET)
        self.assertEqual(outcome.status, "unknown")

    def test_error_carrying_response_uses_its_status(self):
        exc = requests.HTTPError("bad gateway", response=_response(status_code=502))
        with patch("pagewatch.fetchers.requests.get", side_effect=exc):
            outcome = RequestsFetcher().run(TARGET)
        self.assertEqual(outcome.status, "502")

    def test_undecodable_body_is_unknown(self):
        with patch("pagewatch.fetchers.requests.get", return_value=_UndecodableResponse()):
            outcome = RequestsFetcher().run(TARGET)
        self.assertFalse(outcome.ok)
        self.assertEqual(outcome.status, "unknown")

    def test_empty_uri_fails_without_request(self):
        with patch("pagewatch.fetchers.requests.get") as get:
            outcome = RequestsFetcher().run(Target(uri="", text="x"))
        self.assertFalse(outcome.ok)
        get.assert_not_called()


class TestImpersonatingFetcher(unittest.TestCase):
    """Verify the curl_cffi fetcher passes impersonation options."""

    def test_success(self):
        with patch("pagewatch.fetchers.curl_requests.Session") as session_cls:
            session = session_cls.return_value
            session.get.return_value = _response()
            outcome = ImpersonatingFetcher(impersonate="chrome120", timeout=5).run(TARGET)
        self.assertTrue(outcome.ok)
        _, kwargs = session.get.call_args
        self.assertEqual(kwargs["impersonate"], "chrome120")
        self.assertEqual(kwargs["timeout"], 5)
        session.close.assert_called_once()

    def test_keeps_browser_user_agent_by_default(self):
        """Without a configured user agent no User-Agent header is sent."""
        fetcher = FetcherFactory(timeout=5).create_fetcher("impersonate")
        with patch("pagewatch.fetchers.curl_requests.Session") as session_cls:
            session_cls.return_value.get.return_value = _response()
            fetcher.run(TARGET)
        _, kwargs = session_cls.return_value.get.call_args
        self.assertIsNone(kwargs["headers"])

    def test_sends_explicit_user_agent(self):
        fetcher = FetcherFactory(timeout=5, user_agent="Mozilla/5.0 custom").create_fetcher("impersonate")
        with patch("pagewatch.fetchers.curl_requests.Session") as session_cls:
            session_cls.return_value.get.return_value = _response()
            fetcher.run(TARGET)
        _, kwargs = session_cls.return_value.get.call_args
        self.assertEqual(kwargs["headers"], {"User-Agent": "Mozilla/5.0 custom"})

    def test_positional_timeout(self):
        """impersonate is keyword-only, so a positional argument is the timeout."""
        fetcher = ImpersonatingFetcher(5)
        with patch("pagewatch.fetchers.curl_requests.Session") as session_cls:
            session_cls.return_value.get.return_value = _response()
            fetcher.run(TARGET)
        _, kwargs = session_cls.return_value.get.call_args
        self.assertEqual(kwargs["timeout"], 5)
        self.assertEqual(kwargs["impersonate"], "chrome120")

    def test_forbidden(self):
        with patch("pagewatch.fetchers.curl_requests.Session") as session_cls:
            session_cls.return_value.get.return_value = _response(status_code=403)
            outcome = ImpersonatingFetcher().run(TARGET)
        self.assertEqual(outcome.status, "403")


class TestBaseFetcherValidation(unittest.TestCase):
    """Verify that BaseFetcher.validate() catches invalid targets."""

    class DummyFetcher(BaseFetcher):
        def fetch(self, target):
            return _response()

    def test_validate_raises_on_empty_uri(self):
        with self.assertRaises(ValueError) as ctx:
            self.DummyFetcher().validate(Target(uri="", text="x"))
        self.assertIn("uri", str(ctx.exception).lower())

    def test_validate_passes_with_uri(self):
        self.DummyFetcher().validate(TARGET)

    def test_no_user_agent_sends_no_headers(self):
        self.assertEqual(self.DummyFetcher().headers(), {})


if __name__ == "__main__":
    unittest.main()
