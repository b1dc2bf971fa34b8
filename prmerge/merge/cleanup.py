"""
Branch cleanup after a merge.

Switches away from the merged branch, deletes it locally and deletes it on
the remote. Each step is attempted independently and reported on its own;
one failing never rolls back or skips another.
"""

from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING

from prmerge.exceptions import GitError, NotFoundError, PrMergeError
from prmerge.logging import get_logger
from prmerge.merge.options import MergeOptions
from prmerge.merge.output import MergeOutput
from prmerge.prompt import Prompter
from prmerge.types.pulls import PullRequest
from prmerge.types.repos import Repository

if TYPE_CHECKING:
    from prmerge.client import RemoteMergeClient
    from prmerge.git import GitClient

logger = get_logger("merge")


class CleanupStep(str, Enum):
    SWITCH_BRANCH = "switch_branch"
    PULL_BASE = "pull_base"
    DELETE_LOCAL = "delete_local"
    DELETE_REMOTE = "delete_remote"


class StepStatus(str, Enum):
    OK = "ok"
    FAILED = "failed"
    SKIPPED = "skipped"


@dataclass(frozen=True)
class StepResult:
    step: CleanupStep
    status: StepStatus
    message: str = ""


@dataclass
class CleanupReport:
    """Outcome of every cleanup step that was considered."""

    steps: list[StepResult] = field(default_factory=list)

    def add(self, step: CleanupStep, status: StepStatus, message: str = "") -> StepResult:
        result = StepResult(step=step, status=status, message=message)
        self.steps.append(result)
        return result

    def result(self, step: CleanupStep) -> StepResult | None:
        for r in self.steps:
            if r.step is step:
                return r
        return None

    @property
    def failed(self) -> list[StepResult]:
        return [r for r in self.steps if r.status is StepStatus.FAILED]

    @property
    def ok(self) -> bool:
        return not self.failed


@dataclass(frozen=True)
class BranchDeletionPlan:
    """Which cleanup steps apply for this pull request."""

    delete_local: bool = False
    switch_to_base: bool = False
    delete_remote: bool = False

    @property
    def deletes_anything(self) -> bool:
        return self.delete_local or self.delete_remote


def is_fork(pr: PullRequest, repo: Repository) -> bool:
    """Whether the head branch lives in a repository owned by someone else."""
    return pr.head_repository_owner.lower() != repo.owner.lower()


class BranchCleanupOrchestrator:
    """Runs the post-merge branch cleanup sequence."""

    def __init__(
        self,
        git: "GitClient",
        remote: "RemoteMergeClient",
        prompter: Prompter | None = None,
        output: MergeOutput | None = None,
        remote_name: str = "origin",
    ) -> None:
        self.git = git
        self.remote = remote
        self.prompter = prompter
        self.output = output or MergeOutput()
        self.remote_name = remote_name

    def wants_deletion(
        self,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
        already_merged: bool = False,
    ) -> bool:
        """
        Decide whether the user wants the head branch deleted.

        The explicit flag wins; otherwise an interactive session is asked,
        defaulting to yes unless the branch comes from a fork.
        """
        if options.delete_branch is not None:
            return options.delete_branch
        if not options.interactive or self.prompter is None:
            return False

        fork = is_fork(pr, repo)
        where = "locally" if fork else f"locally and on {repo.host}"
        question = f"Delete the branch {where}?"
        if already_merged:
            question = f"Pull request {repo.full_name}#{pr.number} was already merged. {question}"
        return self.prompter.confirm(question, not fork)

    def plan(self, pr: PullRequest, repo: Repository, delete: bool) -> BranchDeletionPlan:
        """Work out which steps apply, given the deletion decision."""
        if not delete:
            return BranchDeletionPlan()

        head = pr.head_ref_name
        current = None
        try:
            local_exists = self.git.has_local_branch(head)
        except GitError as e:
            logger.debug("could not inspect local branches: %s", e.message)
            local_exists = False
        if local_exists:
            try:
                current = self.git.current_branch()
            except GitError:
                # detached HEAD
                current = None

        return BranchDeletionPlan(
            delete_local=local_exists,
            switch_to_base=local_exists and current == head,
            delete_remote=not is_fork(pr, repo),
        )

    def run(
        self,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
        already_merged: bool = False,
        queued: bool = False,
    ) -> CleanupReport:
        """
        Run cleanup for a merged (or queued) pull request.

        Queued pull requests keep their branch: the queue deletes it after merging.

        Raises:
            MergeCancelledError: If the user cancels the deletion prompt
        """
        report = CleanupReport()
        delete = False if queued else self.wants_deletion(pr, repo, options, already_merged)
        plan = self.plan(pr, repo, delete)
        logger.debug("branch deletion plan for %s: %s", pr.head_ref_name, plan)

        if not delete:
            return report

        head = pr.head_ref_name
        switched = True
        if plan.switch_to_base:
            switched = self._switch_to_base(pr.base_ref_name, report)

        if not plan.delete_local:
            report.add(CleanupStep.DELETE_LOCAL, StepStatus.SKIPPED, "no local branch")
        elif not switched:
            self._fail(
                report,
                CleanupStep.DELETE_LOCAL,
                f"Failed to delete local branch {head}: it is still checked out",
            )
        else:
            self._delete_local(head, report)

        if plan.delete_remote:
            self._delete_remote(repo, head, report)
        else:
            report.add(CleanupStep.DELETE_REMOTE, StepStatus.SKIPPED, "head branch is in a fork")

        return report

    def _switch_to_base(self, base: str, report: CleanupReport) -> bool:
        try:
            if self.git.has_local_branch(base):
                self.git.checkout(base)
            else:
                self.git.checkout_new_tracking(base, f"{self.remote_name}/{base}")
        except GitError as e:
            self._fail(
                report,
                CleanupStep.SWITCH_BRANCH,
                f"Failed to switch to branch {base}: {e.message}",
            )
            return False
        self._succeed(report, CleanupStep.SWITCH_BRANCH, f"Switched to branch {base}")

        try:
            self.git.pull_fast_forward()
        except GitError as e:
            self._fail(
                report,
                CleanupStep.PULL_BASE,
                f"Failed to pull latest changes into {base}: {e.message}",
            )
        else:
            self._succeed(report, CleanupStep.PULL_BASE, f"Pulled latest changes into {base}")
        return True

    def _delete_local(self, head: str, report: CleanupReport) -> None:
        try:
            self.git.delete_local_branch(head)
        except GitError as e:
            self._fail(
                report,
                CleanupStep.DELETE_LOCAL,
                f"Failed to delete local branch {head}: {e.message}",
            )
            return
        self._succeed(report, CleanupStep.DELETE_LOCAL, f"Deleted local branch {head}")

    def _delete_remote(self, repo: Repository, head: str, report: CleanupReport) -> None:
        try:
            self.remote.repos.delete_branch(repo.owner, repo.name, head)
        except NotFoundError as e:
            if e.code != "REFERENCE_NOT_FOUND":
                self._fail(
                    report,
                    CleanupStep.DELETE_REMOTE,
                    f"Failed to delete remote branch {head}: {e.message}",
                )
                return
            logger.debug("remote branch %s was already gone", head)
        except PrMergeError as e:
            self._fail(
                report,
                CleanupStep.DELETE_REMOTE,
                f"Failed to delete remote branch {head}: {e.message}",
            )
            return
        self._succeed(report, CleanupStep.DELETE_REMOTE, f"Deleted remote branch {head}")

    def _succeed(self, report: CleanupReport, step: CleanupStep, message: str) -> None:
        report.add(step, StepStatus.OK, message)
        self.output.success(message)

    def _fail(self, report: CleanupReport, step: CleanupStep, message: str) -> None:
        report.add(step, StepStatus.FAILED, message)
        self.output.failure(message)
