"""Merge orchestration: classification, method and message resolution, cleanup."""

from prmerge.merge.actions import (
    BlockedReason,
    DirectMerge,
    DisableAutoMerge,
    EnableAutoMerge,
    EnqueueToQueue,
    MergeAction,
    ReportAlreadyMerged,
    ReportAlreadyQueued,
    ReportBlocked,
    classify,
)
from prmerge.merge.cleanup import (
    BranchCleanupOrchestrator,
    BranchDeletionPlan,
    CleanupReport,
    CleanupStep,
    StepResult,
    StepStatus,
)
from prmerge.merge.engine import MergeOutcome, MergeStateMachine
from prmerge.merge.message import CommitMessage, CommitMessageComposer
from prmerge.merge.method import MergeMethodResolver, resolve_method_flags
from prmerge.merge.options import MergeOptions
from prmerge.merge.output import MergeOutput

__all__ = [
    # Actions
    "MergeAction",
    "DirectMerge",
    "EnqueueToQueue",
    "EnableAutoMerge",
    "DisableAutoMerge",
    "ReportAlreadyMerged",
    "ReportBlocked",
    "ReportAlreadyQueued",
    "BlockedReason",
    "classify",
    # Engine
    "MergeStateMachine",
    "MergeOutcome",
    "MergeOptions",
    "MergeOutput",
    # Method and message
    "MergeMethodResolver",
    "resolve_method_flags",
    "CommitMessage",
    "CommitMessageComposer",
    # Cleanup
    "BranchCleanupOrchestrator",
    "BranchDeletionPlan",
    "CleanupReport",
    "CleanupStep",
    "StepResult",
    "StepStatus",
]
