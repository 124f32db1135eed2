"""
HTTP collaborator shared by the nodeworks integrations.

IntegrationClient wraps one lazily created ``httpx.AsyncClient`` per client
instance. Every request goes through the same path:

    request() / request_all_pages()
        -> _request()       attempts, sleeping between retryable failures
        -> _do_request()    one HTTP round trip
        -> _check_response() status code to IntegrationError subtype

Failures that may succeed on a later attempt (timeouts, connection
errors, 429 and 5xx) are retried up to ``max_retries`` times. Everything
else raises on the first attempt.
"""

from __future__ import annotations

import asyncio
import logging
import random
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any

import httpx

logger = logging.getLogger(__name__)

# JSON payloads sent to / received from the upstream APIs
JSON = Any

MAX_BACKOFF = 60.0


# =============================================================================
# Exceptions
# =============================================================================


class IntegrationError(Exception):
    """
    A request to an upstream API failed.

    ``retryable`` tells the retry loop whether another attempt may succeed.
    """

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        status_code: int | None = None,
        response_body: str | None = None,
        retryable: bool = False,
    ):
        super().__init__(message)
        self.integration = integration
        self.status_code = status_code
        self.response_body = response_body
        self.retryable = retryable

    def __str__(self) -> str:
        text = f"[{self.integration}] {self.args[0]}"
        if self.status_code:
            text += f" (status={self.status_code})"
        return text


class AuthenticationError(IntegrationError):
    """Token or API key rejected (401/403)."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


class RateLimitError(IntegrationError):
    """Too many requests (429); ``retry_after`` comes from the response header."""

    def __init__(
        self,
        message: str,
        integration: str,
        *,
        retry_after: float | None = None,
        **kwargs,
    ):
        super().__init__(message, integration, retryable=True, **kwargs)
        self.retry_after = retry_after


class NotFoundError(IntegrationError):
    """Unknown channel, user, project... (404)."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


class ValidationError(IntegrationError):
    """Request body or query rejected by the server (400/422)."""

    def __init__(self, message: str, integration: str, **kwargs):
        super().__init__(message, integration, retryable=False, **kwargs)


# Non-retryable statuses and the error raised for each
_CLIENT_ERRORS: dict[int, tuple[type[IntegrationError], str]] = {
    400: (ValidationError, "Validation error"),
    401: (AuthenticationError, "Authentication failed"),
    403: (AuthenticationError, "Authentication failed"),
    404: (NotFoundError, "Resource not found"),
    422: (ValidationError, "Validation error"),
}


# =============================================================================
# Configuration
# =============================================================================


@dataclass(frozen=True, slots=True)
class IntegrationConfig:
    """Connection settings shared by every integration client."""

    base_url: str = ""
    timeout: float = 30.0

    max_retries: int = 3
    retry_delay: float = 1.0

    # Records requested per page by request_all_pages()
    page_size: int = 100

    log_requests: bool = False
    log_responses: bool = False


# =============================================================================
# Base Client
# =============================================================================


class IntegrationClient(ABC):
    """
    Async REST client for one upstream service.

    Subclasses provide ``name`` and ``_get_auth_headers()``, and may
    override ``_base_url()`` and the pagination attributes below when the
    service names its page parameters differently.
    """

    page_param: str = "page"
    page_size_param: str = "per_page"
    first_page: int = 0

    def __init__(
        self,
        config: IntegrationConfig,
        *,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        """
        Args:
            config: Connection settings
            transport: Optional httpx transport (used by tests)
        """
        self.config = config
        self._transport = transport
        self._client: httpx.AsyncClient | None = None

    @property
    @abstractmethod
    def name(self) -> str:
        """Integration name used in errors and log lines."""
        ...

    @abstractmethod
    def _get_auth_headers(self) -> dict[str, str]:
        ...

    def _base_url(self) -> str:
        return self.config.base_url

    async def _get_client(self) -> httpx.AsyncClient:
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                base_url=self._base_url(),
                timeout=self.config.timeout,
                transport=self._transport,
                headers={
                    "Content-Type": "application/json",
                    "Accept": "application/json",
                    **self._get_auth_headers(),
                },
            )
        return self._client

    async def close(self) -> None:
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    # =========================================================================
    # Public request API
    # =========================================================================

    async def request(
        self,
        method: str,
        path: str,
        body: JSON | None = None,
        query: dict[str, Any] | None = None,
    ) -> JSON | None:
        """
        Make one request and return the decoded JSON body.

        Args:
            method: HTTP method (GET, POST, PUT, DELETE)
            path: Endpoint relative to the base URL
            body: JSON body (dict or list); empty bodies are not sent
            query: Query string parameters

        Returns:
            Decoded JSON, or None when the response has no content

        Raises:
            IntegrationError: On any non-retryable error or after max retries
        """
        response = await self._request(
            method,
            path.lstrip("/"),
            params=query or None,
            json=body if body else None,
        )

        if not response.content:
            return None
        return response.json()

    async def request_all_pages(
        self,
        method: str,
        path: str,
        body: JSON | None = None,
        query: dict[str, Any] | None = None,
    ) -> list[JSON]:
        """
        Request every page of a list endpoint.

        Advances the page number until the server returns a page smaller
        than the requested page size.

        Returns:
            All records from all pages, in order
        """
        page_size = self.config.page_size
        page = self.first_page
        records: list[JSON] = []

        while True:
            params = {
                **(query or {}),
                self.page_param: page,
                self.page_size_param: page_size,
            }
            batch = await self.request(method, path, body, params) or []
            records.extend(batch)

            if len(batch) < page_size:
                break
            page += 1

        logger.debug(f"[{self.name}] Fetched {len(records)} records from {path}")
        return records

    # =========================================================================
    # Transport
    # =========================================================================

    async def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: JSON | None = None,
    ) -> httpx.Response:
        attempts = self.config.max_retries + 1

        for attempt in range(attempts):
            try:
                return await self._do_request(method, path, params=params, json=json)
            except IntegrationError as e:
                if not e.retryable or attempt + 1 == attempts:
                    if e.retryable:
                        logger.warning(
                            f"[{self.name}] Giving up on {method} {path} "
                            f"after {attempts} attempts"
                        )
                    raise

                delay = self._calculate_backoff(attempt, e)
                logger.info(
                    f"[{self.name}] {method} {path} failed ({e.args[0]}), "
                    f"retry {attempt + 1}/{self.config.max_retries} in {delay:.2f}s"
                )
                await asyncio.sleep(delay)

        raise AssertionError("unreachable")

    def _calculate_backoff(self, attempt: int, error: IntegrationError) -> float:
        """
        Seconds to wait before retry number ``attempt + 1``.

        A server-provided Retry-After wins. Otherwise
        ``retry_delay * 2**attempt`` with ±25% jitter, capped at MAX_BACKOFF.
        """
        if isinstance(error, RateLimitError) and error.retry_after:
            return error.retry_after

        delay = self.config.retry_delay * (2 ** attempt)
        delay *= 1 + random.uniform(-0.25, 0.25)
        return min(delay, MAX_BACKOFF)

    async def _do_request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: JSON | None = None,
    ) -> httpx.Response:
        client = await self._get_client()

        if self.config.log_requests:
            logger.debug(f"[{self.name}] {method} {path} params={params} body={json}")

        try:
            response = await client.request(method, path, params=params, json=json)
        except httpx.TimeoutException as e:
            raise IntegrationError(f"Request timeout: {e}", self.name, retryable=True) from e
        except httpx.NetworkError as e:
            raise IntegrationError(f"Network error: {e}", self.name, retryable=True) from e

        if self.config.log_responses:
            logger.debug(
                f"[{self.name}] {response.status_code} {method} {path}: "
                f"{response.text[:500] or 'empty'}"
            )

        self._check_response(response)
        return response

    def _check_response(self, response: httpx.Response) -> None:
        """Raise the IntegrationError subtype matching a failed response."""
        if response.is_success:
            return

        status = response.status_code
        body = response.text

        if status == 429:
            retry_after = response.headers.get("Retry-After")
            raise RateLimitError(
                "Rate limit exceeded",
                self.name,
                status_code=status,
                response_body=body,
                retry_after=float(retry_after) if retry_after else None,
            )

        if status in _CLIENT_ERRORS:
            error_class, summary = _CLIENT_ERRORS[status]
            raise error_class(
                f"{summary}: {body}", self.name, status_code=status, response_body=body
            )

        raise IntegrationError(
            f"Request failed: {body}",
            self.name,
            status_code=status,
            response_body=body,
            retryable=status >= 500,
        )

    async def __aenter__(self) -> IntegrationClient:
        return self

    async def __aexit__(self, exc_type, exc_val, exc_tb) -> None:
        await self.close()
