"""
Tests for the integration client base.

Tests cover:
- JSON request/response handling
- Error mapping per status code
- Retry with backoff for retryable errors
- Page-by-page listing
"""

import json

import httpx
import pytest

from nodeworks.integrations.base import (
    AuthenticationError,
    IntegrationClient,
    IntegrationConfig,
    IntegrationError,
    NotFoundError,
    RateLimitError,
    ValidationError,
)


class DummyClient(IntegrationClient):
    """Minimal concrete client for exercising the base class."""

    @property
    def name(self) -> str:
        return "dummy"

    def _get_auth_headers(self) -> dict[str, str]:
        return {"X-Token": "secret"}


def make_client(handler, **config) -> DummyClient:
    config.setdefault("retry_delay", 0.0)
    return DummyClient(
        IntegrationConfig(base_url="https://api.example.com/v1", **config),
        transport=httpx.MockTransport(handler),
    )


# =============================================================================
# Requests
# =============================================================================


class TestRequest:
    """Tests for IntegrationClient.request()."""

    @pytest.mark.asyncio
    async def test_returns_decoded_json(self):
        """Should send auth headers and query, and decode the body."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = str(request.url)
            seen["token"] = request.headers.get("X-Token")
            return httpx.Response(200, json={"id": "abc"})

        async with make_client(handler) as client:
            data = await client.request("GET", "things", query={"q": "x"})

        assert data == {"id": "abc"}
        assert seen["url"] == "https://api.example.com/v1/things?q=x"
        assert seen["token"] == "secret"

    @pytest.mark.asyncio
    async def test_sends_list_body(self):
        """Array bodies should be sent as JSON."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["body"] = json.loads(request.content)
            return httpx.Response(200, json=[])

        async with make_client(handler) as client:
            await client.request("POST", "users/ids", ["u1", "u2"])

        assert seen["body"] == ["u1", "u2"]

    @pytest.mark.asyncio
    async def test_empty_response_returns_none(self):
        """204 / empty bodies should map to None."""
        client = make_client(lambda request: httpx.Response(204))

        assert await client.request("DELETE", "things/1") is None
        await client.close()

    @pytest.mark.asyncio
    async def test_leading_slash_is_relative_to_base(self):
        """Paths are resolved against the base URL path."""
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["path"] = request.url.path
            return httpx.Response(200, json={})

        async with make_client(handler) as client:
            await client.request("GET", "/users")

        assert seen["path"] == "/v1/users"


# =============================================================================
# Error mapping
# =============================================================================


class TestErrorMapping:
    """Tests for status code to exception mapping."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        "status,error_class",
        [
            (401, AuthenticationError),
            (403, AuthenticationError),
            (404, NotFoundError),
            (400, ValidationError),
            (422, ValidationError),
        ],
    )
    async def test_client_errors_are_not_retried(self, status, error_class):
        """4xx errors should raise immediately."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(status, text="nope")

        client = make_client(handler, max_retries=3)

        with pytest.raises(error_class) as exc_info:
            await client.request("GET", "things")

        assert len(calls) == 1
        assert exc_info.value.status_code == status
        assert exc_info.value.retryable is False
        await client.close()

    @pytest.mark.asyncio
    async def test_rate_limit_reads_retry_after(self):
        """429 should raise RateLimitError carrying Retry-After."""
        client = make_client(
            lambda request: httpx.Response(429, headers={"Retry-After": "12"}),
            max_retries=0,
        )

        with pytest.raises(RateLimitError) as exc_info:
            await client.request("GET", "things")

        assert exc_info.value.retry_after == 12.0
        assert exc_info.value.retryable is True
        await client.close()

    def test_error_string_includes_integration_and_status(self):
        error = IntegrationError("Request failed", "dummy", status_code=502)
        assert str(error) == "[dummy] Request failed (status=502)"


# =============================================================================
# Retry
# =============================================================================


class TestRetry:
    """Tests for retry behaviour."""

    @pytest.mark.asyncio
    async def test_server_error_is_retried(self):
        """A 5xx followed by success should return the success body."""
        responses = [httpx.Response(503, text="busy"), httpx.Response(200, json={"ok": True})]

        client = make_client(lambda request: responses.pop(0), max_retries=2)

        assert await client.request("GET", "things") == {"ok": True}
        assert responses == []
        await client.close()

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self):
        """Retries stop after max_retries and the last error propagates."""
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(500, text="boom")

        client = make_client(handler, max_retries=2)

        with pytest.raises(IntegrationError) as exc_info:
            await client.request("GET", "things")

        assert len(calls) == 3
        assert exc_info.value.status_code == 500
        await client.close()

    @pytest.mark.asyncio
    async def test_timeout_is_wrapped(self):
        """Timeouts become retryable IntegrationErrors."""

        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ReadTimeout("too slow", request=request)

        client = make_client(handler, max_retries=0)

        with pytest.raises(IntegrationError, match="Request timeout") as exc_info:
            await client.request("GET", "things")

        assert exc_info.value.retryable is True
        await client.close()

    def test_backoff_uses_retry_after(self):
        client = make_client(lambda request: httpx.Response(200))
        error = RateLimitError("slow down", "dummy", retry_after=7.0)

        assert client._calculate_backoff(0, error) == 7.0

    def test_backoff_grows_exponentially_with_cap(self):
        client = make_client(lambda request: httpx.Response(200), retry_delay=1.0)
        error = IntegrationError("boom", "dummy", retryable=True)

        delay = client._calculate_backoff(2, error)
        assert 3.0 <= delay <= 5.0
        assert client._calculate_backoff(10, error) == 60.0


# =============================================================================
# Pagination
# =============================================================================


class TestRequestAllPages:
    """Tests for IntegrationClient.request_all_pages()."""

    @pytest.mark.asyncio
    async def test_walks_pages_until_short_page(self):
        """Should stop once a page is smaller than the page size."""
        pages = {0: [1, 2], 1: [3, 4], 2: [5]}
        seen = []

        def handler(request: httpx.Request) -> httpx.Response:
            page = int(request.url.params["page"])
            seen.append((page, request.url.params["per_page"], request.url.params["in_team"]))
            return httpx.Response(200, json=pages[page])

        async with make_client(handler, page_size=2) as client:
            records = await client.request_all_pages("GET", "users", query={"in_team": "t1"})

        assert records == [1, 2, 3, 4, 5]
        assert seen == [(0, "2", "t1"), (1, "2", "t1"), (2, "2", "t1")]

    @pytest.mark.asyncio
    async def test_empty_first_page(self):
        calls = []

        def handler(request: httpx.Request) -> httpx.Response:
            calls.append(request)
            return httpx.Response(200, json=[])

        async with make_client(handler, page_size=2) as client:
            assert await client.request_all_pages("GET", "users") == []

        assert len(calls) == 1
