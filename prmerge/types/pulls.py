"""Pull request-related data models."""

from dataclasses import dataclass, field
from enum import Enum


class PullRequestState(str, Enum):
    """Lifecycle state of a pull request."""

    OPEN = "OPEN"
    CLOSED = "CLOSED"
    MERGED = "MERGED"


class MergeStateStatus(str, Enum):
    """Server-computed mergeability of a pull request."""

    CLEAN = "CLEAN"
    BLOCKED = "BLOCKED"
    DIRTY = "DIRTY"
    UNSTABLE = "UNSTABLE"
    UNKNOWN = "UNKNOWN"

    @classmethod
    def parse(cls, value: str | None) -> "MergeStateStatus":
        """Map a server value to a status, treating unrecognised values as UNKNOWN."""
        try:
            return cls(value)
        except ValueError:
            return cls.UNKNOWN


class MergeMethod(str, Enum):
    """How the pull request's commits land on the base branch."""

    MERGE = "MERGE"
    REBASE = "REBASE"
    SQUASH = "SQUASH"

    @property
    def accepts_commit_message(self) -> bool:
        """Rebase replays commits as-is, so only merge and squash take a message."""
        return self is not MergeMethod.REBASE


@dataclass(frozen=True)
class Commit:
    """A commit recorded on a pull request."""

    oid: str


@dataclass(frozen=True)
class PullRequest:
    """Snapshot of a pull request, read once per merge attempt."""

    id: str
    number: int
    title: str
    state: PullRequestState
    merge_state_status: MergeStateStatus
    head_ref_name: str
    base_ref_name: str
    head_repository_owner: str
    url: str = ""
    is_in_merge_queue: bool = False
    is_merge_queue_enabled: bool = False
    commits: tuple[Commit, ...] = field(default_factory=tuple)

    @property
    def last_commit_oid(self) -> str | None:
        """OID of the most recent commit, if any were recorded."""
        if not self.commits:
            return None
        return self.commits[-1].oid
