"""prmerge testing utilities.

Provides mock collaborators and fixtures for testing the merge engine.
"""

from prmerge.testing.fixtures import (
    create_mock_capabilities,
    create_mock_pull_request,
    create_mock_repository,
)
from prmerge.testing.mock import (
    MockCall,
    MockEditor,
    MockGitClient,
    MockPrompter,
    MockRemoteMergeClient,
    MockResponse,
    RecordingOutput,
)

__all__ = [
    # Mock collaborators
    "MockRemoteMergeClient",
    "MockGitClient",
    "MockPrompter",
    "MockEditor",
    "RecordingOutput",
    "MockCall",
    "MockResponse",
    # Helper functions
    "create_mock_repository",
    "create_mock_pull_request",
    "create_mock_capabilities",
]
