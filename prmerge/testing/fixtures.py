"""
Pytest fixtures for merge engine testing.

Provides common fixtures for testing code built on the prmerge engine.
"""

from typing import Any, Generator

import pytest

from prmerge.testing.mock import (
    MockEditor,
    MockGitClient,
    MockPrompter,
    MockRemoteMergeClient,
    RecordingOutput,
)
from prmerge.types.pulls import (
    Commit,
    MergeStateStatus,
    PullRequest,
    PullRequestState,
)
from prmerge.types.repos import Repository, RepositoryMergeCapabilities


# ============================================================================
# Mock Collaborator Fixtures
# ============================================================================


@pytest.fixture
def mock_client() -> Generator[MockRemoteMergeClient, None, None]:
    """
    Provide a MockRemoteMergeClient for testing.

    Example:
        ```python
        def test_merge(mock_client, mock_git):
            machine = MergeStateMachine(mock_client, mock_git)
            machine.run(pr, repo, options)
            assert mock_client.was_called("pulls.merge")
        ```
    """
    client = MockRemoteMergeClient()
    yield client
    client.reset()


@pytest.fixture
def mock_git() -> MockGitClient:
    """Provide a git double with ``feature`` checked out next to ``main``."""
    return MockGitClient(current_branch="feature", branches=["main", "feature"])


@pytest.fixture
def mock_prompter() -> MockPrompter:
    """Provide a prompter with no registered answers."""
    return MockPrompter()


@pytest.fixture
def mock_editor() -> MockEditor:
    """Provide an editor with no queued responses."""
    return MockEditor()


@pytest.fixture
def recording_output() -> RecordingOutput:
    """Provide an output sink that keeps every line."""
    return RecordingOutput()


# ============================================================================
# Sample Data Fixtures
# ============================================================================


@pytest.fixture
def sample_repository() -> Repository:
    """Provide a sample Repository."""
    return create_mock_repository()


@pytest.fixture
def sample_pull_request() -> PullRequest:
    """Provide an open, clean PullRequest from a same-repository branch."""
    return create_mock_pull_request()


@pytest.fixture
def sample_capabilities() -> RepositoryMergeCapabilities:
    """Provide capabilities allowing every merge method."""
    return create_mock_capabilities()


# ============================================================================
# Helper Functions
# ============================================================================


def create_mock_repository(
    owner: str = "octo",
    name: str = "widgets",
    host: str = "github.com",
) -> Repository:
    """
    Create a Repository with customizable fields.

    Args:
        owner: Repository owner login
        name: Repository name
        host: Hostname the repository lives on

    Returns:
        Repository object
    """
    return Repository(owner=owner, name=name, host=host)


def create_mock_pull_request(
    number: int = 42,
    head_oid: str = "0" * 40,
    **kwargs: Any,
) -> PullRequest:
    """
    Create a PullRequest with customizable fields.

    Args:
        number: Pull request number
        head_oid: Object id of the last commit on the head branch
        **kwargs: Additional fields to override

    Returns:
        PullRequest object
    """
    defaults: dict[str, Any] = {
        "id": f"PR_{number}",
        "title": "Add widgets",
        "state": PullRequestState.OPEN,
        "merge_state_status": MergeStateStatus.CLEAN,
        "head_ref_name": "feature",
        "base_ref_name": "main",
        "head_repository_owner": "octo",
        "url": f"https://github.com/octo/widgets/pull/{number}",
        "commits": (Commit(oid=head_oid),),
    }
    defaults.update(kwargs)
    return PullRequest(number=number, **defaults)


def create_mock_capabilities(
    merge: bool = True,
    rebase: bool = True,
    squash: bool = True,
    queue_method: Any = None,
) -> RepositoryMergeCapabilities:
    """Create RepositoryMergeCapabilities with the given methods allowed."""
    return RepositoryMergeCapabilities(
        merge_commit_allowed=merge,
        rebase_merge_allowed=rebase,
        squash_merge_allowed=squash,
        merge_queue_method=queue_method,
    )
