"""
prmerge remote client.

Provides the interface the merge engine uses to talk to the hosting API.
"""

import os
from typing import Any

import httpx

from prmerge.clients import PullsClient, ReposClient
from prmerge.exceptions import ConfigurationError
from prmerge.transport import HTTPTransport

_TOKEN_ENV_VARS = ("PRMERGE_TOKEN", "GH_TOKEN", "GITHUB_TOKEN")


class RemoteMergeClient:
    """
    Client for the remote side of a merge.

    Aggregates the pull request and repository resource clients over a single
    transport.

    Example:
        ```python
        from prmerge import RemoteMergeClient
        from prmerge.types import MergeMethod

        client = RemoteMergeClient.from_env()
        pr = client.pulls.get("octo", "hello", 12)
        client.pulls.merge(pr.id, MergeMethod.SQUASH)
        client.repos.delete_branch("octo", "hello", pr.head_ref_name)
        ```
    """

    DEFAULT_BASE_URL = "https://api.github.com"
    DEFAULT_HOST = "github.com"
    DEFAULT_TIMEOUT = 30.0

    def __init__(
        self,
        token: str,
        base_url: str = DEFAULT_BASE_URL,
        host: str = DEFAULT_HOST,
        timeout: float = DEFAULT_TIMEOUT,
        transport: httpx.BaseTransport | None = None,
    ) -> None:
        """
        Initialize the remote client.

        Args:
            token: Access token with permission to merge and delete branches
            base_url: REST base URL (default: https://api.github.com)
            host: Web host the repositories live on (default: github.com)
            timeout: Request timeout in seconds (default: 30.0)
            transport: Optional httpx transport, for tests
        """
        if not token:
            raise ConfigurationError("an access token is required")

        self.base_url = base_url
        self.host = host
        self.timeout = timeout

        self._transport = HTTPTransport(
            base_url=base_url,
            token=token,
            timeout=timeout,
            transport=transport,
        )

        self.pulls = PullsClient(self._transport)
        self.repos = ReposClient(self._transport)

    @classmethod
    def from_env(cls, timeout: float = DEFAULT_TIMEOUT) -> "RemoteMergeClient":
        """
        Create a client from environment variables.

        Environment variables:
            PRMERGE_TOKEN: Access token (falls back to GH_TOKEN, then GITHUB_TOKEN)
            PRMERGE_API_URL: REST base URL (optional, default: https://api.github.com)
            PRMERGE_HOST: Web host (optional, default: github.com)

        Raises:
            ConfigurationError: If no token variable is set
        """
        token = next(
            (os.environ[name] for name in _TOKEN_ENV_VARS if os.environ.get(name)),
            None,
        )
        if not token:
            raise ConfigurationError(
                "set PRMERGE_TOKEN (or GH_TOKEN / GITHUB_TOKEN) to authenticate"
            )

        return cls(
            token=token,
            base_url=os.environ.get("PRMERGE_API_URL", cls.DEFAULT_BASE_URL),
            host=os.environ.get("PRMERGE_HOST", cls.DEFAULT_HOST),
            timeout=timeout,
        )

    @property
    def transport(self) -> HTTPTransport:
        """Get the underlying HTTP transport (for advanced use cases)."""
        return self._transport

    def close(self) -> None:
        """Close the client and release resources."""
        self._transport.close()

    def __enter__(self) -> "RemoteMergeClient":
        """Context manager entry."""
        return self

    def __exit__(self, *args: Any) -> None:
        """Context manager exit - closes the client."""
        self.close()
