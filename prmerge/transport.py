"""
HTTP Transport for prmerge.

Handles HTTP communication with the hosting API (GraphQL and REST) and maps
error responses to typed exceptions. Requests are never retried: a failed
mutation is reported to the caller as-is.
"""

import time
from collections.abc import Callable
from typing import Any

import httpx

from prmerge.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConflictError,
    GraphQLError,
    NotFoundError,
    PrMergeError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from prmerge.logging import log_http_request, log_http_response

_REQUEST_ID_HEADER = "X-GitHub-Request-Id"


class HTTPTransport:
    """
    HTTP transport layer with token authentication.

    Handles:
    - Bearer token authentication on every request
    - GraphQL queries/mutations with ``errors`` array handling
    - REST requests for endpoints GraphQL does not cover (ref deletion)
    - Error response parsing into typed exceptions
    """

    def __init__(
        self,
        base_url: str,
        token: str,
        timeout: float = 30.0,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize HTTP transport.

        Args:
            base_url: Base URL for API requests (e.g., "https://api.github.com")
            token: Access token sent as a bearer credential
            timeout: Request timeout in seconds
            transport: Optional httpx transport (used by tests to mock responses)
        """
        self.base_url = base_url.rstrip("/")
        self.timeout = timeout

        self._client = httpx.Client(
            base_url=self.base_url,
            timeout=timeout,
            transport=transport,
            headers={
                "Authorization": f"bearer {token}",
                "Accept": "application/vnd.github+json",
                "Content-Type": "application/json",
            },
        )

    def close(self) -> None:
        """Close the HTTP client."""
        self._client.close()

    def __enter__(self) -> "HTTPTransport":
        return self

    def __exit__(self, *args: Any) -> None:
        self.close()

    @property
    def graphql_url(self) -> str:
        """
        GraphQL endpoint derived from the REST base URL.

        github.com serves REST at ``https://api.github.com`` and GraphQL at
        ``/graphql``; Enterprise servers serve REST at ``/api/v3`` and GraphQL
        at ``/api/graphql``.
        """
        if self.base_url.endswith("/api/v3"):
            return self.base_url[: -len("/v3")] + "/graphql"
        return f"{self.base_url}/graphql"

    def graphql(self, query: str, variables: dict[str, Any] | None = None) -> dict[str, Any]:
        """
        Execute a GraphQL query or mutation.

        Args:
            query: GraphQL document
            variables: Variables for the document

        Returns:
            The ``data`` member of the response

        Raises:
            GraphQLError: If the response carries an ``errors`` array
            PrMergeError: On HTTP-level errors
        """
        payload = {"query": query, "variables": variables or {}}

        url = self.graphql_url

        def make_request() -> httpx.Response:
            return self._client.post(url, json=payload)

        response = self._execute("POST", url, make_request, payload)
        errors = response.get("errors")
        if errors:
            raise self._parse_graphql_errors(errors)
        return response.get("data") or {}

    def rest_request(
        self,
        method: str,
        path: str,
        params: dict[str, Any] | None = None,
        body: dict[str, Any] | None = None,
    ) -> dict[str, Any]:
        """
        Make a REST request.

        Args:
            method: HTTP method
            path: API path (e.g., "/repos/octo/hello/git/refs/heads/topic")
            params: Query parameters
            body: Request body (for POST/PATCH)

        Returns:
            Parsed JSON response, or an empty dict for bodiless responses

        Raises:
            PrMergeError: On API errors
        """
        def make_request() -> httpx.Response:
            return self._client.request(method, path, params=params, json=body)

        return self._execute(method, path, make_request, body)

    def _execute(
        self,
        method: str,
        path: str,
        request_fn: Callable[[], httpx.Response],
        body: dict[str, Any] | None,
    ) -> dict[str, Any]:
        """
        Execute a request exactly once.

        Raises:
            ServerError: On connection failures
            PrMergeError: On error responses
        """
        url = path if "://" in path else f"{self.base_url}{path}"
        log_http_request(method, url, body=body)
        started = time.monotonic()
        try:
            response = request_fn()
        except httpx.RequestError as e:
            raise ServerError("CONNECTION_ERROR", str(e)) from e

        elapsed_ms = (time.monotonic() - started) * 1000
        if response.status_code >= 400:
            log_http_response(response.status_code, str(response.url), elapsed_ms=elapsed_ms)
            raise self._parse_error_response(response)

        if response.status_code == 204 or not response.content:
            log_http_response(response.status_code, str(response.url), elapsed_ms=elapsed_ms)
            return {}

        data = response.json()
        log_http_response(response.status_code, str(response.url), body=data, elapsed_ms=elapsed_ms)
        return data

    def _parse_graphql_errors(self, errors: list[dict[str, Any]]) -> PrMergeError:
        """
        Parse a GraphQL ``errors`` array into a typed exception.

        Args:
            errors: Error objects from the response

        Returns:
            NotFoundError, AuthorizationError or GraphQLError
        """
        messages = [e.get("message", "unknown error") for e in errors if isinstance(e, dict)]
        message = "GraphQL: " + "; ".join(messages) if messages else "GraphQL: unknown error"
        code = "GRAPHQL_ERROR"
        if errors and isinstance(errors[0], dict):
            code = errors[0].get("type") or code

        if code == "NOT_FOUND":
            return NotFoundError(code, message)
        elif code == "FORBIDDEN":
            return AuthorizationError(code, message)
        return GraphQLError(code, message)

    def _parse_error_response(self, response: httpx.Response) -> PrMergeError:
        """
        Parse an error response into a typed exception.

        Args:
            response: HTTP response with error status

        Returns:
            Appropriate PrMergeError subclass
        """
        try:
            data = response.json()
        except ValueError:
            data = {}
        if not isinstance(data, dict):
            data = {}

        message = data.get("message") or f"HTTP {response.status_code}"
        request_id = response.headers.get(_REQUEST_ID_HEADER)

        status_code = response.status_code

        if status_code == 401:
            return AuthenticationError("UNAUTHORIZED", message, request_id)
        elif status_code == 403 and response.headers.get("X-RateLimit-Remaining") == "0":
            return RateLimitedError(
                "RATE_LIMITED", message, self._retry_after(response), request_id
            )
        elif status_code == 403:
            return AuthorizationError("FORBIDDEN", message, request_id)
        elif status_code == 404:
            return NotFoundError("NOT_FOUND", message, request_id)
        elif status_code == 409:
            return ConflictError("CONFLICT", message, request_id)
        elif status_code == 429:
            return RateLimitedError(
                "RATE_LIMITED", message, self._retry_after(response), request_id
            )
        elif status_code >= 500:
            return ServerError("SERVER_ERROR", message, request_id)
        else:
            return ValidationError("VALIDATION_FAILED", message, request_id)

    @staticmethod
    def _retry_after(response: httpx.Response) -> int:
        try:
            return int(response.headers.get("Retry-After", "60"))
        except ValueError:
            return 60
