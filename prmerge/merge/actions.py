"""
Classification of a merge request into exactly one action.

``classify`` is a total function over the pull request snapshot and the
caller's options. Every combination of inputs lands on one of the
``MergeAction`` variants below.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Union

from prmerge.merge.options import MergeOptions
from prmerge.types.pulls import MergeStateStatus, PullRequest, PullRequestState


class BlockedReason(str, Enum):
    """Why the pull request cannot be acted on as requested."""

    CLOSED = "closed"
    QUEUE_OWNS_BRANCH = "queue_owns_branch"
    BASE_POLICY = "base_policy"
    MERGE_CONFLICTS = "merge_conflicts"


@dataclass(frozen=True)
class DirectMerge:
    """Merge the pull request now."""


@dataclass(frozen=True)
class EnqueueToQueue:
    """Hand the pull request to the base branch's merge queue."""


@dataclass(frozen=True)
class EnableAutoMerge:
    """Ask the server to merge once requirements are met."""


@dataclass(frozen=True)
class DisableAutoMerge:
    """Turn off a previously enabled auto-merge."""


@dataclass(frozen=True)
class ReportAlreadyMerged:
    """Nothing to merge; go straight to branch cleanup."""


@dataclass(frozen=True)
class ReportBlocked:
    """The pull request's state rules out the request."""

    reason: BlockedReason


@dataclass(frozen=True)
class ReportAlreadyQueued:
    """The pull request is already in the merge queue."""


MergeAction = Union[
    DirectMerge,
    EnqueueToQueue,
    EnableAutoMerge,
    DisableAutoMerge,
    ReportAlreadyMerged,
    ReportBlocked,
    ReportAlreadyQueued,
]

#: Actions after which local and remote branch cleanup runs.
CLEANUP_ACTIONS = (DirectMerge, EnqueueToQueue, ReportAlreadyMerged)


def classify(pr: PullRequest, options: MergeOptions) -> MergeAction:
    """
    Pick the single action for this pull request and these options.

    Precedence, first match wins:

    1. merged → ReportAlreadyMerged
    2. closed → ReportBlocked(CLOSED)
    3. in the merge queue → ReportAlreadyQueued
    4. --disable-auto → DisableAutoMerge
    5. branch deletion requested on a queue-managed base → ReportBlocked(QUEUE_OWNS_BRANCH)
    6. merge queue enabled, no admin override → EnqueueToQueue
    7. --auto, unless DIRTY → EnableAutoMerge
    8. BLOCKED, no admin override → ReportBlocked(BASE_POLICY)
    9. DIRTY → ReportBlocked(MERGE_CONFLICTS), admin or not
    10. otherwise → DirectMerge
    """
    if pr.state is PullRequestState.MERGED:
        return ReportAlreadyMerged()
    if pr.state is PullRequestState.CLOSED:
        return ReportBlocked(BlockedReason.CLOSED)
    if pr.is_in_merge_queue:
        return ReportAlreadyQueued()
    if options.auto_merge_disable:
        return DisableAutoMerge()
    if options.delete_branch is True and pr.is_merge_queue_enabled:
        return ReportBlocked(BlockedReason.QUEUE_OWNS_BRANCH)
    if pr.is_merge_queue_enabled and not options.admin:
        return EnqueueToQueue()

    status = pr.merge_state_status
    if options.auto_merge_enable and status is not MergeStateStatus.DIRTY:
        return EnableAutoMerge()
    if status is MergeStateStatus.BLOCKED and not options.admin:
        return ReportBlocked(BlockedReason.BASE_POLICY)
    if status is MergeStateStatus.DIRTY:
        return ReportBlocked(BlockedReason.MERGE_CONFLICTS)
    return DirectMerge()
