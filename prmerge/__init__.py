"""prmerge - pull request merge orchestration."""

from prmerge.client import RemoteMergeClient
from prmerge.exceptions import (
    AuthenticationError,
    AuthorizationError,
    ConfigurationError,
    ConflictError,
    GitError,
    GraphQLError,
    MergeBlockedError,
    MergeCancelledError,
    MergeUsageError,
    NoSuchPromptError,
    NotFoundError,
    PrMergeError,
    RateLimitedError,
    ServerError,
    ValidationError,
)
from prmerge.finder import PullRequestFinder
from prmerge.git import GitClient
from prmerge.logging import configure_logging, get_logger
from prmerge.merge import MergeOptions, MergeOutcome, MergeStateMachine, classify
from prmerge.transport import HTTPTransport

__version__ = "0.1.0"

__all__ = [
    "__version__",
    # Clients
    "RemoteMergeClient",
    "GitClient",
    "PullRequestFinder",
    # Engine
    "MergeStateMachine",
    "MergeOptions",
    "MergeOutcome",
    "classify",
    # Exceptions
    "PrMergeError",
    "AuthenticationError",
    "AuthorizationError",
    "NotFoundError",
    "ConflictError",
    "RateLimitedError",
    "ValidationError",
    "ServerError",
    "GraphQLError",
    "ConfigurationError",
    "GitError",
    "MergeUsageError",
    "MergeBlockedError",
    "MergeCancelledError",
    "NoSuchPromptError",
    # Transport
    "HTTPTransport",
    # Logging
    "configure_logging",
    "get_logger",
]
