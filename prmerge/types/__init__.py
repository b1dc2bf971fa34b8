"""prmerge type definitions.

This module exports all data model types used by the engine.
"""

from prmerge.types.pulls import (
    Commit,
    MergeMethod,
    MergeStateStatus,
    PullRequest,
    PullRequestState,
)
from prmerge.types.repos import Repository, RepositoryMergeCapabilities

__all__ = [
    # Pull request types
    "Commit",
    "MergeMethod",
    "MergeStateStatus",
    "PullRequest",
    "PullRequestState",
    # Repository types
    "Repository",
    "RepositoryMergeCapabilities",
]
