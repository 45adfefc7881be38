"""
Unit Tests for the Dispatcher

One attempt per call, classified into SUCCESS / TRANSIENT / FATAL.
"""
import httpx
import pytest

from appcraft.modules.proxy.dispatcher import (
    Dispatcher,
    OutcomeKind,
    is_json_content_type,
    read_response_data,
)
from appcraft.modules.proxy.normalizer import normalize_request
from appcraft.schemas.proxy import ErrorKind

from mocks.mock_upstream import HANG, MockUpstream, response


@pytest.fixture
async def dispatcher(upstream: MockUpstream):
    client = httpx.AsyncClient(transport=upstream.transport)
    yield Dispatcher(client, user_agent="AppCraft-Test/1.0")
    await client.aclose()


class TestContentTypes:
    """Response body decoding by content type"""

    @pytest.mark.parametrize("content_type,expected", [
        ("application/json", True),
        ("application/json; charset=utf-8", True),
        ("application/problem+json", True),
        ("text/html", False),
        ("application/octet-stream", False),
        ("", False),
    ])
    def test_is_json_content_type(self, content_type, expected):
        assert is_json_content_type(content_type) is expected

    async def test_json_body_parsed(self):
        resp = httpx.Response(200, json={"a": [1, 2]})
        assert await read_response_data(resp) == ({"a": [1, 2]}, False)

    async def test_invalid_json_falls_back_to_text(self):
        resp = httpx.Response(200, content=b"{not json", headers={"content-type": "application/json"})
        assert await read_response_data(resp) == ("{not json", False)

    async def test_text_body(self):
        resp = httpx.Response(200, text="<h1>hi</h1>", headers={"content-type": "text/html"})
        assert await read_response_data(resp) == ("<h1>hi</h1>", False)

    async def test_binary_body_summarized(self):
        resp = httpx.Response(200, content=b"\x89PNG" + b"\x00" * 96, headers={"content-type": "image/png"})
        data, is_binary = await read_response_data(resp)

        assert is_binary is True
        assert data == {"type": "binary", "size": 100, "contentType": "image/png"}


class TestHeaders:
    """Default headers overlaid by caller headers"""

    def test_defaults(self, dispatcher):
        headers = dispatcher.build_headers({})
        assert headers["Content-Type"] == "application/json"
        assert headers["User-Agent"] == "AppCraft-Test/1.0"

    def test_caller_overrides_case_insensitively(self, dispatcher):
        headers = dispatcher.build_headers({"content-type": "text/plain", "X-Trace": "abc"})
        assert headers["Content-Type"] == "text/plain"
        assert headers["X-Trace"] == "abc"

    async def test_headers_reach_upstream(self, dispatcher, upstream, defaults):
        upstream.json("GET", "/x", {"ok": True})
        request = normalize_request({"url": "/x", "headers": {"Authorization": "Bearer t"}}, defaults)

        await dispatcher.dispatch(request, attempt=1)

        sent = upstream.requests[0]
        assert sent.headers["Authorization"] == "Bearer t"
        assert sent.headers["User-Agent"] == "AppCraft-Test/1.0"


class TestDispatchOutcomes:
    """Classification of a single attempt"""

    async def test_success(self, dispatcher, upstream, defaults):
        upstream.json("GET", "/posts/1", {"id": 1, "title": "foo"})
        request = normalize_request({"url": "/posts/1"}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.status == 200
        assert outcome.status_text == "OK"
        assert outcome.data == {"id": 1, "title": "foo"}
        assert outcome.attempt == 1
        assert outcome.headers["content-type"] == "application/json"

    async def test_client_error_is_success_shaped(self, dispatcher, upstream, defaults):
        upstream.add("GET", "/missing", response(404, {"error": "nope"}))
        request = normalize_request({"url": "/missing"}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.kind is OutcomeKind.SUCCESS
        assert outcome.status == 404
        assert outcome.is_transient is False

    async def test_server_error_is_transient(self, dispatcher, upstream, defaults):
        upstream.add("GET", "/flaky", response(503, {"error": "down"}))
        request = normalize_request({"url": "/flaky"}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=2)

        assert outcome.kind is OutcomeKind.TRANSIENT
        assert outcome.error_kind is ErrorKind.HTTP_SERVER_ERROR
        assert outcome.code == "HTTP_503"
        assert outcome.message == "HTTP 503: Service Unavailable"
        assert outcome.status == 503
        assert outcome.attempt == 2

    async def test_timeout(self, dispatcher, upstream, defaults):
        upstream.add("GET", "/slow", HANG)
        request = normalize_request({"url": "/slow", "timeoutMs": 50}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.kind is OutcomeKind.TRANSIENT
        assert outcome.error_kind is ErrorKind.TIMEOUT
        assert outcome.code == "TIMEOUT"
        assert outcome.message == "Request timeout"

    async def test_httpx_timeout_exception(self, dispatcher, upstream, defaults):
        upstream.add("GET", "/slow", httpx.ReadTimeout("read timed out"))
        request = normalize_request({"url": "/slow"}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.error_kind is ErrorKind.TIMEOUT

    async def test_connection_error(self, dispatcher, upstream, defaults):
        upstream.add("GET", "/down", httpx.ConnectError("Connection refused"))
        request = normalize_request({"url": "/down"}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.kind is OutcomeKind.TRANSIENT
        assert outcome.error_kind is ErrorKind.NETWORK_ERROR
        assert outcome.code == "FETCH_ERROR"
        assert outcome.message == "Connection refused"

    async def test_body_sent(self, dispatcher, upstream, defaults):
        upstream.json("POST", "/items", {"created": True}, status=201)
        request = normalize_request({"url": "/items", "method": "POST", "body": {"name": "x"}}, defaults)

        outcome = await dispatcher.dispatch(request, attempt=1)

        assert outcome.status == 201
        assert upstream.last_json() == {"name": "x"}
