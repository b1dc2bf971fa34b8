"""Pull requests resource client."""

from typing import TYPE_CHECKING, Any

from prmerge.exceptions import NotFoundError
from prmerge.types.pulls import (
    Commit,
    MergeMethod,
    MergeStateStatus,
    PullRequest,
    PullRequestState,
)

if TYPE_CHECKING:
    from prmerge.transport import HTTPTransport

_PULL_REQUEST_FIELDS = """
    id
    number
    title
    url
    state
    mergeStateStatus
    headRefName
    baseRefName
    headRepositoryOwner { login }
    isInMergeQueue
    isMergeQueueEnabled
    commits(last: 1) { nodes { commit { oid } } }
"""

_PULL_REQUEST_BY_NUMBER = """
query PullRequestByNumber($owner: String!, $name: String!, $number: Int!) {
  repository(owner: $owner, name: $name) {
    pullRequest(number: $number) {%s}
  }
}
""" % _PULL_REQUEST_FIELDS

_PULL_REQUEST_BY_BRANCH = """
query PullRequestForBranch($owner: String!, $name: String!, $headRefName: String!) {
  repository(owner: $owner, name: $name) {
    pullRequests(headRefName: $headRefName, states: [OPEN, MERGED], first: 1,
                 orderBy: {field: CREATED_AT, direction: DESC}) {
      nodes {%s}
    }
  }
}
""" % _PULL_REQUEST_FIELDS

_MERGE_PULL_REQUEST = """
mutation PullRequestMerge($input: MergePullRequestInput!) {
  mergePullRequest(input: $input) { clientMutationId }
}
"""

_ENABLE_AUTO_MERGE = """
mutation PullRequestAutoMerge($input: EnablePullRequestAutoMergeInput!) {
  enablePullRequestAutoMerge(input: $input) { clientMutationId }
}
"""

_DISABLE_AUTO_MERGE = """
mutation PullRequestAutoMergeDisable($prID: ID!) {
  disablePullRequestAutoMerge(input: {pullRequestId: $prID}) { clientMutationId }
}
"""

_MERGE_MESSAGE_DEFAULTS = """
query PullRequestMergeText($prID: ID!, $method: PullRequestMergeMethod!) {
  node(id: $prID) {
    ... on PullRequest {
      viewerMergeHeadlineText(mergeType: $method)
      viewerMergeBodyText(mergeType: $method)
    }
  }
}
"""


class PullsClient:
    """Client for pull request operations."""

    def __init__(self, transport: "HTTPTransport") -> None:
        """
        Initialize the pulls client.

        Args:
            transport: HTTP transport for making requests
        """
        self.transport = transport

    def get(self, owner: str, repo: str, number: int) -> PullRequest:
        """
        Get a pull request by number.

        Raises:
            NotFoundError: If the pull request does not exist
        """
        data = self.transport.graphql(
            _PULL_REQUEST_BY_NUMBER,
            {"owner": owner, "name": repo, "number": number},
        )
        node = (data.get("repository") or {}).get("pullRequest")
        if not node:
            raise NotFoundError(
                "NOT_FOUND", f"no pull request #{number} in {owner}/{repo}"
            )
        return self._parse_pull_request(node)

    def find_by_branch(self, owner: str, repo: str, branch: str) -> PullRequest:
        """
        Get the most recent open or merged pull request whose head is ``branch``.

        Raises:
            NotFoundError: If no pull request uses the branch
        """
        data = self.transport.graphql(
            _PULL_REQUEST_BY_BRANCH,
            {"owner": owner, "name": repo, "headRefName": branch},
        )
        nodes = ((data.get("repository") or {}).get("pullRequests") or {}).get("nodes") or []
        if not nodes:
            raise NotFoundError(
                "NOT_FOUND", f"no pull requests found for branch {branch!r}"
            )
        return self._parse_pull_request(nodes[0])

    def merge(
        self,
        pr_id: str,
        method: MergeMethod,
        headline: str | None = None,
        body: str | None = None,
        author_email: str | None = None,
        expected_head_oid: str | None = None,
    ) -> None:
        """
        Merge a pull request immediately.

        Args:
            pr_id: The pull request's node ID
            method: Merge method
            headline: Commit headline; omitted when None so the server default applies
            body: Commit body; omitted when None so the server default applies
            author_email: Override for the merge commit's author email
            expected_head_oid: Head OID the server must see for the merge to proceed

        Raises:
            GraphQLError: If the server rejects the merge (including head mismatch)
        """
        merge_input = self._merge_input(
            pr_id, method, headline, body, author_email, expected_head_oid
        )
        self.transport.graphql(_MERGE_PULL_REQUEST, {"input": merge_input})

    def enable_auto_merge(
        self,
        pr_id: str,
        method: MergeMethod,
        headline: str | None = None,
        body: str | None = None,
        author_email: str | None = None,
        expected_head_oid: str | None = None,
    ) -> None:
        """
        Enable auto-merge, or add to the merge queue when the base branch has one.

        Args are as for :meth:`merge`.
        """
        merge_input = self._merge_input(
            pr_id, method, headline, body, author_email, expected_head_oid
        )
        self.transport.graphql(_ENABLE_AUTO_MERGE, {"input": merge_input})

    def disable_auto_merge(self, pr_id: str) -> None:
        """Disable auto-merge for a pull request."""
        self.transport.graphql(_DISABLE_AUTO_MERGE, {"prID": pr_id})

    def merge_message_defaults(
        self, pr_id: str, method: MergeMethod
    ) -> tuple[str | None, str | None]:
        """
        Get the server-computed default commit headline and body.

        Returns:
            ``(headline, body)``; a missing or empty text is None
        """
        data = self.transport.graphql(
            _MERGE_MESSAGE_DEFAULTS, {"prID": pr_id, "method": method.value}
        )
        node = data.get("node") or {}
        return (
            node.get("viewerMergeHeadlineText") or None,
            node.get("viewerMergeBodyText") or None,
        )

    @staticmethod
    def _merge_input(
        pr_id: str,
        method: MergeMethod,
        headline: str | None,
        body: str | None,
        author_email: str | None,
        expected_head_oid: str | None,
    ) -> dict[str, Any]:
        merge_input: dict[str, Any] = {
            "pullRequestId": pr_id,
            "mergeMethod": method.value,
        }
        if headline is not None:
            merge_input["commitHeadline"] = headline
        if body is not None:
            merge_input["commitBody"] = body
        if author_email is not None:
            merge_input["authorEmail"] = author_email
        if expected_head_oid is not None:
            merge_input["expectedHeadOid"] = expected_head_oid
        return merge_input

    def _parse_pull_request(self, data: dict) -> PullRequest:
        """Parse pull request data from a GraphQL node."""
        commit_nodes = (data.get("commits") or {}).get("nodes") or []
        commits = tuple(
            Commit(oid=node["commit"]["oid"])
            for node in commit_nodes
            if node and node.get("commit")
        )
        owner = data.get("headRepositoryOwner") or {}

        return PullRequest(
            id=data["id"],
            number=data["number"],
            title=data.get("title", ""),
            url=data.get("url", ""),
            state=PullRequestState(data["state"]),
            merge_state_status=MergeStateStatus.parse(data.get("mergeStateStatus")),
            head_ref_name=data["headRefName"],
            base_ref_name=data["baseRefName"],
            head_repository_owner=owner.get("login", ""),
            is_in_merge_queue=data.get("isInMergeQueue", False),
            is_merge_queue_enabled=data.get("isMergeQueueEnabled", False),
            commits=commits,
        )
