"""Minimal pull request lookup by number, URL or branch name."""

import re
from typing import TYPE_CHECKING

from prmerge.exceptions import ConfigurationError, GitError
from prmerge.types.pulls import PullRequest
from prmerge.types.repos import Repository

if TYPE_CHECKING:
    from prmerge.client import RemoteMergeClient
    from prmerge.git import GitClient

_PULL_URL_RE = re.compile(r"^https?://(?P<host>[^/]+)/(?P<owner>[^/]+)/(?P<name>[^/]+)/pull/(?P<number>\d+)")
_NUMBER_RE = re.compile(r"^#?(?P<number>\d+)$")


class PullRequestFinder:
    """
    Resolves a selector to a pull request and its base repository.

    Selectors: ``12``, ``#12``, a pull request URL, a head branch name, or
    empty for the branch currently checked out.
    """

    def __init__(
        self,
        remote: "RemoteMergeClient",
        git: "GitClient",
        repo: Repository | None = None,
    ) -> None:
        self.remote = remote
        self.git = git
        self.repo = repo

    def find(self, selector: str) -> tuple[PullRequest, Repository]:
        """
        Look up the pull request ``selector`` refers to.

        Raises:
            NotFoundError: If no matching pull request exists
            ConfigurationError: If the selector needs a repository and none is configured
            GitError: If the selector is empty and no branch is checked out
        """
        selector = selector.strip()

        url_match = _PULL_URL_RE.match(selector)
        if url_match:
            repo = Repository(
                owner=url_match["owner"], name=url_match["name"], host=url_match["host"]
            )
            return self.remote.pulls.get(repo.owner, repo.name, int(url_match["number"])), repo

        repo = self._require_repo()
        number_match = _NUMBER_RE.match(selector)
        if number_match:
            return self.remote.pulls.get(repo.owner, repo.name, int(number_match["number"])), repo

        branch = selector
        if not branch:
            try:
                branch = self.git.current_branch()
            except GitError as e:
                raise GitError(
                    "could not determine the current branch; pass a pull request number, URL or branch",
                    e.stderr,
                ) from e
        return self.remote.pulls.find_by_branch(repo.owner, repo.name, branch), repo

    def _require_repo(self) -> Repository:
        if self.repo is None:
            raise ConfigurationError(
                "no repository configured: pass --repo OWNER/REPO or set PRMERGE_REPO"
            )
        return self.repo
