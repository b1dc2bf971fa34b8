"""
Merge state machine.

Classifies the pull request, resolves method and commit message when a merge
is going to happen, performs the remote call and hands over to branch
cleanup.
"""

from dataclasses import dataclass
from typing import TYPE_CHECKING, TextIO

from prmerge.exceptions import GitError, MergeBlockedError, MergeUsageError
from prmerge.logging import get_logger
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
from prmerge.merge.cleanup import BranchCleanupOrchestrator, CleanupReport
from prmerge.merge.message import CommitMessage, CommitMessageComposer
from prmerge.merge.method import MergeMethodResolver
from prmerge.merge.options import MergeOptions
from prmerge.merge.output import MergeOutput
from prmerge.prompt import Editor, Prompter
from prmerge.types.pulls import MergeMethod, PullRequest
from prmerge.types.repos import Repository, RepositoryMergeCapabilities

if TYPE_CHECKING:
    from prmerge.client import RemoteMergeClient
    from prmerge.git import GitClient

logger = get_logger("merge")

_MERGED_VERBS = {
    MergeMethod.MERGE: "Merged",
    MergeMethod.REBASE: "Rebased and merged",
    MergeMethod.SQUASH: "Squashed and merged",
}


@dataclass
class MergeOutcome:
    """What a merge run did."""

    action: MergeAction
    method: MergeMethod | None = None
    cleanup: CleanupReport | None = None

    @property
    def ok(self) -> bool:
        return self.cleanup is None or self.cleanup.ok


class MergeStateMachine:
    """
    Drives one merge invocation from classification to cleanup.

    Example:
        ```python
        from prmerge import RemoteMergeClient
        from prmerge.git import GitClient
        from prmerge.merge import MergeOptions, MergeStateMachine

        remote = RemoteMergeClient.from_env()
        machine = MergeStateMachine(remote, GitClient())
        options = MergeOptions.from_flags(squash=True, delete_branch=True)
        outcome = machine.run(pr, repo, options)
        ```
    """

    def __init__(
        self,
        remote: "RemoteMergeClient",
        git: "GitClient",
        prompter: Prompter | None = None,
        editor: Editor | None = None,
        output: MergeOutput | None = None,
        remote_name: str = "origin",
        stdin: TextIO | None = None,
    ) -> None:
        self.remote = remote
        self.git = git
        self.prompter = prompter
        self.editor = editor
        self.output = output or MergeOutput()
        self.remote_name = remote_name
        self.stdin = stdin
        self.method_resolver = MergeMethodResolver(prompter)
        self.cleanup = BranchCleanupOrchestrator(
            git, remote, prompter=prompter, output=self.output, remote_name=remote_name
        )

    def run(self, pr: PullRequest, repo: Repository, options: MergeOptions) -> MergeOutcome:
        """
        Perform the single action the pull request's state and options call for.

        Raises:
            MergeUsageError: On options that cannot apply to this pull request
            MergeBlockedError: If the pull request's state prevents the action
            MergeCancelledError: If the user cancels at a prompt
            PrMergeError: On remote errors, surfaced unmodified
        """
        action = classify(pr, options)
        logger.debug(
            "pull request %s#%d classified as %s", repo.full_name, pr.number, type(action).__name__
        )

        if isinstance(action, ReportAlreadyQueued):
            raise MergeBlockedError(
                "ALREADY_QUEUED",
                f"Pull request {self._ref(pr, repo)} is already queued to merge",
            )
        if isinstance(action, ReportBlocked):
            raise self._blocked_error(action.reason, pr, repo)
        if isinstance(action, ReportAlreadyMerged):
            return self._already_merged(action, pr, repo, options)
        if isinstance(action, DisableAutoMerge):
            self.remote.pulls.disable_auto_merge(pr.id)
            self.output.success(f"Auto-merge disabled for pull request {self._ref(pr, repo)}")
            return MergeOutcome(action)

        capabilities = _CapabilityCache(self.remote, repo)

        if isinstance(action, EnqueueToQueue):
            return self._enqueue(action, pr, repo, options, capabilities)
        if isinstance(action, EnableAutoMerge):
            return self._enable_auto_merge(action, pr, repo, options, capabilities)
        return self._merge(action, pr, repo, options, capabilities)

    def _already_merged(
        self,
        action: ReportAlreadyMerged,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
    ) -> MergeOutcome:
        if options.delete_branch is None and not (options.interactive and self.prompter):
            self.output.warning(f"Pull request {self._ref(pr, repo)} was already merged")
        report = self.cleanup.run(pr, repo, options, already_merged=True)
        return MergeOutcome(action, cleanup=report)

    def _enqueue(
        self,
        action: EnqueueToQueue,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
        capabilities: "_CapabilityCache",
    ) -> MergeOutcome:
        queue_method = capabilities.get(pr.base_ref_name).merge_queue_method
        if queue_method is not None and options.method not in (None, queue_method):
            self.output.warning(
                f"The merge strategy for {pr.base_ref_name} is set by the merge queue"
            )
        method = self.method_resolver.resolve(
            options.method,
            options.interactive,
            capabilities.get,
            queue_method=queue_method,
        )
        self._warn_if_diverged(pr, repo)
        message = self._composer(pr).compose(method, options)

        self._enable(pr, method, message, options)
        self.output.success(
            f"Pull request {self._ref(pr, repo)} will be added to the merge queue "
            f"for {pr.base_ref_name} when ready"
        )
        report = self.cleanup.run(pr, repo, options, queued=True)
        return MergeOutcome(action, method=method, cleanup=report)

    def _enable_auto_merge(
        self,
        action: EnableAutoMerge,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
        capabilities: "_CapabilityCache",
    ) -> MergeOutcome:
        method = self.method_resolver.resolve(
            options.method, options.interactive, capabilities.get
        )
        message = self._composer(pr).compose(method, options)

        self._enable(pr, method, message, options)
        self.output.success(
            f"Pull request {self._ref(pr, repo)} will be automatically merged "
            f"via {method.value.lower()} when all requirements are met"
        )
        return MergeOutcome(action, method=method)

    def _merge(
        self,
        action: DirectMerge,
        pr: PullRequest,
        repo: Repository,
        options: MergeOptions,
        capabilities: "_CapabilityCache",
    ) -> MergeOutcome:
        method = self.method_resolver.resolve(
            options.method, options.interactive, capabilities.get
        )
        self._warn_if_diverged(pr, repo)
        message = self._composer(pr).compose(method, options)

        self.remote.pulls.merge(
            pr.id,
            method,
            headline=message.headline,
            body=message.body,
            author_email=options.author_email,
            expected_head_oid=options.match_head_commit,
        )
        self.output.success(
            f"{_MERGED_VERBS[method]} pull request {self._ref(pr, repo)} ({pr.title})"
        )
        report = self.cleanup.run(pr, repo, options)
        return MergeOutcome(action, method=method, cleanup=report)

    def _enable(
        self,
        pr: PullRequest,
        method: MergeMethod,
        message: CommitMessage,
        options: MergeOptions,
    ) -> None:
        self.remote.pulls.enable_auto_merge(
            pr.id,
            method,
            headline=message.headline,
            body=message.body,
            author_email=options.author_email,
            expected_head_oid=options.match_head_commit,
        )

    def _composer(self, pr: PullRequest) -> CommitMessageComposer:
        def load_defaults(method: MergeMethod) -> tuple[str | None, str | None]:
            return self.remote.pulls.merge_message_defaults(pr.id, method)

        return CommitMessageComposer(
            load_defaults, prompter=self.prompter, editor=self.editor, stdin=self.stdin
        )

    def _warn_if_diverged(self, pr: PullRequest, repo: Repository) -> None:
        """Warn, without blocking, when local HEAD is not the PR's latest commit."""
        expected = pr.last_commit_oid
        if expected is None:
            return
        try:
            local = self.git.last_commit_hash()
        except GitError as e:
            logger.debug("skipping divergence check: %s", e.message)
            return
        if local != expected:
            self.output.warning(
                f"Pull request {self._ref(pr, repo)} ({pr.title}) has diverged from local branch"
            )

    def _blocked_error(
        self, reason: BlockedReason, pr: PullRequest, repo: Repository
    ) -> Exception:
        ref = self._ref(pr, repo)
        if reason is BlockedReason.QUEUE_OWNS_BRANCH:
            return MergeUsageError(
                "cannot use --delete-branch when the base branch has a merge queue; "
                "the merge queue manages branch deletion"
            )
        if reason is BlockedReason.CLOSED:
            return MergeBlockedError(
                "PULL_REQUEST_CLOSED", f"Pull request {ref} is closed and cannot be merged"
            )
        if reason is BlockedReason.BASE_POLICY:
            return MergeBlockedError(
                "NOT_MERGEABLE",
                f"Pull request {ref} is not mergeable: the base branch policy prohibits the merge.",
                [
                    "To have the pull request merged after all the requirements have been met, "
                    "add the `--auto` flag.",
                    "To use administrator privileges to immediately merge the pull request, "
                    "add the `--admin` flag.",
                ],
            )
        remote, head, base = self.remote_name, pr.head_ref_name, pr.base_ref_name
        return MergeBlockedError(
            "NOT_MERGEABLE",
            f"Pull request {ref} is not mergeable: the merge commit cannot be cleanly created.",
            [
                "Run the following to resolve the merge conflicts locally:",
                f"  git fetch {remote} pull/{pr.number}/head:{head} && git checkout {head} "
                f"&& git fetch {remote} {base} && git merge {remote}/{base}",
            ],
        )

    @staticmethod
    def _ref(pr: PullRequest, repo: Repository) -> str:
        return f"{repo.full_name}#{pr.number}"


class _CapabilityCache:
    """Fetches repository merge capabilities at most once, and only on demand."""

    def __init__(self, remote: "RemoteMergeClient", repo: Repository) -> None:
        self._remote = remote
        self._repo = repo
        self._value: RepositoryMergeCapabilities | None = None

    def get(self, branch: str | None = None) -> RepositoryMergeCapabilities:
        if self._value is None:
            self._value = self._remote.repos.merge_capabilities(
                self._repo.owner, self._repo.name, branch
            )
        return self._value
