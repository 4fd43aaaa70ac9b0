"""HTTP client for the Microsoft Graph drive API.

Provides retry logic, ``@odata.nextLink`` pagination and bearer-token
authentication.
"""

from __future__ import annotations

import time
from collections.abc import Iterator
from dataclasses import dataclass, field
from typing import Any

import httpx

from driveup.core.config import DEFAULT_GRAPH_URL
from driveup.core.exceptions import (
    AuthenticationError,
    ClientRetryExhaustedError,
    NetworkError,
    PermissionDeniedError,
    RequestFailedError,
    ResourceNotFoundError,
    ServerUnreachableError,
)
from driveup.core.timeouts import DEFAULT_HTTP_TIMEOUT_SECONDS
from driveup.core.validation import validate_server_url

# =============================================================================
# Constants
# =============================================================================

DEFAULT_TIMEOUT = DEFAULT_HTTP_TIMEOUT_SECONDS
DEFAULT_MAX_RETRIES = 3
RETRY_BACKOFF_BASE = 2
RETRYABLE_STATUS_CODES = {502, 503, 504}


# =============================================================================
# GraphClient
# =============================================================================


@dataclass
class GraphClient:
    """HTTP client for the Graph API with retry and pagination."""

    base_url: str = DEFAULT_GRAPH_URL
    access_token: str | None = None
    timeout: float = DEFAULT_TIMEOUT
    max_retries: int = DEFAULT_MAX_RETRIES
    verify_ssl: bool = True
    _client: httpx.Client | None = field(init=False, default=None, repr=False)

    def __post_init__(self) -> None:
        """Validate and normalize URL."""
        self.base_url = validate_server_url(self.base_url)

    # =========================================================================
    # Client Management
    # =========================================================================

    def _get_client(self) -> httpx.Client:
        """Get or create HTTP client."""
        if self._client is None:
            self._client = httpx.Client(
                base_url=self.base_url,
                timeout=self.timeout,
                verify=self.verify_ssl,
                follow_redirects=True,
            )
        return self._client

    def transfer_client(self, timeout: float) -> httpx.Client:
        """Create a fresh client for chunk uploads and content downloads.

        Upload session and download URLs are pre-authorised and must be
        called without the Authorization header, so this client shares nothing with the
        API client. The caller owns and closes it.

        Args:
            timeout: Per-request timeout in seconds.
        """
        return httpx.Client(timeout=timeout, verify=self.verify_ssl, follow_redirects=True)

    def close(self) -> None:
        """Close the HTTP client."""
        if self._client is not None:
            self._client.close()
            self._client = None

    def __enter__(self) -> GraphClient:
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def is_authenticated(self) -> bool:
        """Check if client has an access token."""
        return self.access_token is not None

    # =========================================================================
    # HTTP Methods
    # =========================================================================

    def _get_headers(self, extra: dict[str, str] | None = None) -> dict[str, str]:
        """Build request headers with the bearer token."""
        headers: dict[str, str] = {}
        if self.access_token:
            headers["Authorization"] = f"Bearer {self.access_token}"
        if extra:
            headers.update(extra)
        return headers

    def _request(
        self,
        method: str,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        """Execute HTTP request with retry logic.

        Args:
            method: HTTP method.
            path: API path relative to ``base_url``, or an absolute URL.
            params: Query parameters.
            json: JSON body.
            content: Raw body.
            headers: Additional headers.
            timeout: Request timeout override.
            max_retries: Retry limit override; 0 sends exactly one request.

        Returns:
            HTTP response.

        Raises:
            AuthenticationError: On 401.
            PermissionDeniedError: On 403.
            ResourceNotFoundError: On 404.
            RequestFailedError: On any other non-retryable error status.
            ClientRetryExhaustedError: If all retries fail.
        """
        client = self._get_client()
        request_headers = self._get_headers(headers)
        request_timeout = timeout or self.timeout
        retries = self.max_retries if max_retries is None else max_retries
        last_error: Exception | None = None

        for attempt in range(retries + 1):
            try:
                resp = client.request(
                    method,
                    path,
                    params=params,
                    json=json,
                    content=content,
                    headers=request_headers,
                    timeout=request_timeout,
                )

                if resp.status_code == 401:
                    raise AuthenticationError(self.base_url, "Access token missing or expired")
                if resp.status_code == 403:
                    raise PermissionDeniedError(path, method.lower())
                if resp.status_code == 404:
                    raise ResourceNotFoundError("item", path)

                # Retry on gateway errors
                if resp.status_code in RETRYABLE_STATUS_CODES:
                    last_error = NetworkError(self.base_url, f"HTTP {resp.status_code}")
                    if attempt < retries:
                        time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))
                        continue
                    break

                if resp.is_error:
                    raise RequestFailedError(method, path, resp.status_code, resp.text)
                return resp

            except httpx.ConnectError:
                last_error = ServerUnreachableError(self.base_url)
            except httpx.TimeoutException:
                last_error = NetworkError(self.base_url, f"Timeout after {request_timeout}s")
            except httpx.TransportError as e:
                last_error = NetworkError(self.base_url, str(e))

            if attempt < retries:
                time.sleep(RETRY_BACKOFF_BASE ** (attempt + 1))

        raise ClientRetryExhaustedError(f"{method} {path}", attempt + 1, last_error)

    def get(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """GET request."""
        return self._request("GET", path, params=params, headers=headers, timeout=timeout)

    def post(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
        max_retries: int | None = None,
    ) -> httpx.Response:
        """POST request."""
        return self._request(
            "POST",
            path,
            params=params,
            json=json,
            headers=headers,
            timeout=timeout,
            max_retries=max_retries,
        )

    def put(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
        content: bytes | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """PUT request with a raw body."""
        return self._request(
            "PUT",
            path,
            params=params,
            content=content,
            headers=headers,
            timeout=timeout,
        )

    def patch(
        self,
        path: str,
        *,
        json: Any | None = None,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """PATCH request with a JSON body."""
        return self._request("PATCH", path, json=json, headers=headers, timeout=timeout)

    def delete(
        self,
        path: str,
        *,
        headers: dict[str, str] | None = None,
        timeout: float | None = None,
    ) -> httpx.Response:
        """DELETE request."""
        return self._request("DELETE", path, headers=headers, timeout=timeout)

    # =========================================================================
    # Pagination
    # =========================================================================

    def paginate(
        self,
        path: str,
        *,
        params: dict[str, Any] | None = None,
    ) -> Iterator[dict[str, Any]]:
        """Paginated GET following ``@odata.nextLink``.

        Args:
            path: API path of a collection.
            params: Query parameters for the first page only; next links
                already carry their own.

        Yields:
            Individual items from each page's ``value`` array.
        """
        next_path: str | None = path
        page_params = params

        while next_path:
            data = self.get(next_path, params=page_params).json()
            page_params = None

            yield from data.get("value", [])
            next_path = data.get("@odata.nextLink")
