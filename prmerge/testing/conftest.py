"""
Pytest plugin for prmerge testing fixtures.

This module re-exports all fixtures from fixtures.py so they can be
automatically discovered by pytest when this package is installed.

To use these fixtures in your tests, add this to your conftest.py:

    pytest_plugins = ["prmerge.testing.conftest"]

Or import the fixtures directly:

    from prmerge.testing.fixtures import mock_client, sample_pull_request
"""

# Re-export all fixtures for pytest auto-discovery
from prmerge.testing.fixtures import (
    mock_client,
    mock_editor,
    mock_git,
    mock_prompter,
    recording_output,
    sample_capabilities,
    sample_pull_request,
    sample_repository,
)

__all__ = [
    "mock_client",
    "mock_git",
    "mock_prompter",
    "mock_editor",
    "recording_output",
    "sample_repository",
    "sample_pull_request",
    "sample_capabilities",
]
