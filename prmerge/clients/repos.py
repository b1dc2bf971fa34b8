"""Repositories resource client."""

from typing import TYPE_CHECKING
from urllib.parse import quote

from prmerge.exceptions import NotFoundError, ValidationError
from prmerge.types.pulls import MergeMethod
from prmerge.types.repos import RepositoryMergeCapabilities

if TYPE_CHECKING:
    from prmerge.transport import HTTPTransport

_MERGE_CAPABILITIES = """
query RepositoryMergeCapabilities($owner: String!, $name: String!) {
  repository(owner: $owner, name: $name) {
    mergeCommitAllowed
    rebaseMergeAllowed
    squashMergeAllowed
  }
}
"""

_MERGE_CAPABILITIES_WITH_QUEUE = """
query RepositoryMergeCapabilities($owner: String!, $name: String!, $branch: String!) {
  repository(owner: $owner, name: $name) {
    mergeCommitAllowed
    rebaseMergeAllowed
    squashMergeAllowed
    mergeQueue(branch: $branch) { configuration { mergeMethod } }
  }
}
"""

_MISSING_REF_MESSAGE = "Reference does not exist"


class ReposClient:
    """Client for repository operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the repos client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def merge_capabilities(
        self, owner: str, repo: str, branch: str | None = None
    ) -> RepositoryMergeCapabilities:
        """
        Get the merge methods a repository allows.

        Args:
            owner: Repository owner
            repo: Repository name
            branch: Base branch whose merge queue configuration to include

        Returns:
            RepositoryMergeCapabilities; ``merge_queue_method`` is set only when
            ``branch`` has a merge queue
        """
        if branch is None:
            data = self.transport.graphql(
                _MERGE_CAPABILITIES, {"owner": owner, "name": repo}
            )
        else:
            data = self.transport.graphql(
                _MERGE_CAPABILITIES_WITH_QUEUE,
                {"owner": owner, "name": repo, "branch": branch},
            )
        node = data.get("repository")
        if not node:
            raise NotFoundError("NOT_FOUND", f"repository {owner}/{repo} not found")

        queue_method = None
        queue = node.get("mergeQueue") or {}
        configured = (queue.get("configuration") or {}).get("mergeMethod")
        if configured:
            queue_method = MergeMethod(configured)

        return RepositoryMergeCapabilities(
            merge_commit_allowed=node.get("mergeCommitAllowed", False),
            rebase_merge_allowed=node.get("rebaseMergeAllowed", False),
            squash_merge_allowed=node.get("squashMergeAllowed", False),
            merge_queue_method=queue_method,
        )

    def delete_branch(self, owner: str, repo: str, branch: str) -> None:
        """
        Delete a branch on the remote.

        Raises:
            NotFoundError: With code ``REFERENCE_NOT_FOUND`` if the branch is already gone
            PrMergeError: On any other API error
        """
        path = f"/repos/{owner}/{repo}/git/refs/heads/{quote(branch)}"
        try:
            self.transport.rest_request("DELETE", path)
        except ValidationError as e:
            if _MISSING_REF_MESSAGE in e.message:
                raise NotFoundError(
                    "REFERENCE_NOT_FOUND", e.message, e.request_id
                ) from e
            raise
