"""
Tests for the merge state machine.
"""

import pytest
from hypothesis import given, settings
from hypothesis import strategies as st

from prmerge.exceptions import (
    GraphQLError,
    MergeBlockedError,
    MergeCancelledError,
    MergeUsageError,
    ServerError,
)
from prmerge.merge.actions import (
    DirectMerge,
    DisableAutoMerge,
    EnableAutoMerge,
    EnqueueToQueue,
    ReportAlreadyMerged,
)
from prmerge.merge.cleanup import CleanupStep, StepStatus
from prmerge.merge.engine import MergeStateMachine
from prmerge.merge.message import CANCEL, EDIT_SUBJECT, SUBMIT
from prmerge.merge.options import MergeOptions
from prmerge.testing import (
    MockEditor,
    MockGitClient,
    MockPrompter,
    MockRemoteMergeClient,
    RecordingOutput,
    create_mock_capabilities,
    create_mock_pull_request,
    create_mock_repository,
)
from prmerge.types.pulls import MergeMethod, MergeStateStatus, PullRequestState

REPO = create_mock_repository()
HEAD = "a" * 40
UNSET_FIELDS = {"headline": None, "body": None, "author_email": None, "expected_head_oid": None}


class Harness:
    def __init__(self, git=None, prompter=None, editor=None):
        self.remote = MockRemoteMergeClient()
        self.git = git or MockGitClient(current_branch="main", branches=["feature"], head_oid=HEAD)
        self.output = RecordingOutput()
        self.prompter = prompter
        self.machine = MergeStateMachine(
            self.remote,
            self.git,
            prompter=prompter,
            editor=editor,
            output=self.output,
        )

    def run(self, pr, **option_fields):
        return self.machine.run(pr, REPO, MergeOptions(**option_fields))


def make_pr(**fields):
    fields.setdefault("head_oid", HEAD)
    return create_mock_pull_request(**fields)


# ============================================================================
# Direct merge
# ============================================================================


def test_clean_merge_sends_one_call_without_optional_fields() -> None:
    h = Harness()
    pr = make_pr()

    outcome = h.run(pr, method=MergeMethod.MERGE)

    assert outcome.action == DirectMerge()
    assert outcome.method is MergeMethod.MERGE
    assert outcome.ok
    calls = h.remote.get_calls()
    assert [c.method for c in calls] == ["pulls.merge"]
    assert calls[0].args == (pr.id, MergeMethod.MERGE)
    assert calls[0].kwargs == UNSET_FIELDS
    assert h.output.lines == ["✓ Merged pull request octo/widgets#42 (Add widgets)"]


@pytest.mark.parametrize(
    "method, verb",
    [
        (MergeMethod.REBASE, "Rebased and merged"),
        (MergeMethod.SQUASH, "Squashed and merged"),
    ],
)
def test_merge_success_wording(method: MergeMethod, verb: str) -> None:
    h = Harness()

    h.run(make_pr(), method=method)

    assert h.output.lines == [f"✓ {verb} pull request octo/widgets#42 (Add widgets)"]


def test_flags_are_passed_through() -> None:
    h = Harness()

    h.run(
        make_pr(),
        method=MergeMethod.SQUASH,
        subject="Ship it",
        body="Done.",
        author_email="dev@example.com",
        match_head_commit=HEAD,
    )

    assert h.remote.get_calls("pulls.merge")[0].kwargs == {
        "headline": "Ship it",
        "body": "Done.",
        "author_email": "dev@example.com",
        "expected_head_oid": HEAD,
    }


def test_conflicting_method_flags_fail_before_any_call() -> None:
    h = Harness()

    with pytest.raises(MergeUsageError):
        options = MergeOptions.from_flags(merge=True, squash=True)
        h.machine.run(make_pr(), REPO, options)

    assert h.remote.call_count() == 0
    assert h.git.calls == []


def test_admin_merges_blocked_pull_request() -> None:
    h = Harness()

    outcome = h.run(
        make_pr(merge_state_status=MergeStateStatus.BLOCKED),
        method=MergeMethod.MERGE,
        admin=True,
    )

    assert outcome.action == DirectMerge()
    assert h.remote.was_called("pulls.merge")


def test_remote_error_is_surfaced_unmodified() -> None:
    h = Harness()
    error = GraphQLError("GRAPHQL_ERROR", "GraphQL: Head branch was modified")
    h.remote.pulls.configure_merge(error=error)

    with pytest.raises(GraphQLError) as exc_info:
        h.run(make_pr(), method=MergeMethod.MERGE, delete_branch=True)

    assert exc_info.value is error
    assert not h.remote.was_called("repos.delete_branch")
    assert not h.git.was_called("delete_local_branch")


def test_merge_then_cleanup() -> None:
    git = MockGitClient(current_branch="feature", branches=["main"], head_oid=HEAD)
    h = Harness(git=git)

    outcome = h.run(make_pr(), method=MergeMethod.SQUASH, delete_branch=True)

    assert outcome.ok
    assert [c.method for c in h.remote.mutations] == ["pulls.merge", "repos.delete_branch"]
    assert git.branch == "main"
    assert h.output.lines == [
        "✓ Squashed and merged pull request octo/widgets#42 (Add widgets)",
        "✓ Switched to branch main",
        "✓ Pulled latest changes into main",
        "✓ Deleted local branch feature",
        "✓ Deleted remote branch feature",
    ]


def test_failed_cleanup_makes_outcome_not_ok() -> None:
    h = Harness()
    h.remote.repos.configure_delete_branch(error=ServerError("SERVER_ERROR", "boom"))

    outcome = h.run(make_pr(), method=MergeMethod.MERGE, delete_branch=True)

    assert not outcome.ok
    assert outcome.cleanup.result(CleanupStep.DELETE_REMOTE).status is StepStatus.FAILED
    assert h.remote.was_called("pulls.merge")


# ============================================================================
# Divergence
# ============================================================================


@given(
    local=st.sampled_from(["a" * 40, "b" * 40]),
    recorded=st.sampled_from(["a" * 40, "b" * 40]),
)
@settings(max_examples=20)
def test_property_divergence_warning_iff_hashes_differ(local: str, recorded: str) -> None:
    """
    Property: Divergence is advisory

    The divergence warning SHALL appear exactly when the local HEAD differs
    from the pull request's last recorded commit, and the merge SHALL
    proceed either way.
    """
    h = Harness(git=MockGitClient(head_oid=local))

    h.run(make_pr(head_oid=recorded), method=MergeMethod.MERGE)

    warning = "! Pull request octo/widgets#42 (Add widgets) has diverged from local branch"
    assert (warning in h.output.lines) == (local != recorded)
    assert h.remote.call_count("pulls.merge") == 1


def test_divergence_check_skipped_when_git_fails() -> None:
    git = MockGitClient(head_oid=HEAD)
    git.fail("last_commit_hash")
    h = Harness(git=git)

    h.run(make_pr(), method=MergeMethod.MERGE)

    assert h.remote.was_called("pulls.merge")
    assert not any("diverged" in line for line in h.output.lines)


# ============================================================================
# Blocking states
# ============================================================================


def test_blocked_without_admin() -> None:
    h = Harness()

    with pytest.raises(MergeBlockedError) as exc_info:
        h.run(make_pr(merge_state_status=MergeStateStatus.BLOCKED), method=MergeMethod.MERGE)

    error = exc_info.value
    assert error.code == "NOT_MERGEABLE"
    assert "base branch policy prohibits the merge" in error.message
    remediation = "\n".join(error.remediation)
    assert "--auto" in remediation
    assert "--admin" in remediation
    assert h.remote.call_count() == 0


def test_dirty_even_with_admin() -> None:
    h = Harness()

    with pytest.raises(MergeBlockedError) as exc_info:
        h.run(
            make_pr(merge_state_status=MergeStateStatus.DIRTY),
            method=MergeMethod.MERGE,
            admin=True,
        )

    assert "cannot be cleanly created" in exc_info.value.message
    assert exc_info.value.remediation[-1] == (
        "  git fetch origin pull/42/head:feature && git checkout feature "
        "&& git fetch origin main && git merge origin/main"
    )
    assert h.remote.call_count() == 0


def test_already_queued() -> None:
    h = Harness()

    with pytest.raises(MergeBlockedError) as exc_info:
        h.run(make_pr(is_in_merge_queue=True, is_merge_queue_enabled=True))

    assert exc_info.value.code == "ALREADY_QUEUED"
    assert exc_info.value.message == "Pull request octo/widgets#42 is already queued to merge"
    assert h.remote.call_count() == 0


def test_closed_pull_request() -> None:
    h = Harness()

    with pytest.raises(MergeBlockedError) as exc_info:
        h.run(make_pr(state=PullRequestState.CLOSED), method=MergeMethod.MERGE)

    assert exc_info.value.code == "PULL_REQUEST_CLOSED"
    assert h.remote.call_count() == 0


def test_queue_with_delete_branch_fails_before_any_call() -> None:
    h = Harness()

    with pytest.raises(MergeUsageError) as exc_info:
        h.run(make_pr(is_merge_queue_enabled=True), delete_branch=True)

    assert "merge queue" in exc_info.value.message
    assert h.remote.call_count() == 0
    assert h.git.calls == []


# ============================================================================
# Already merged
# ============================================================================


def test_already_merged_fork_cleans_up_locally_only() -> None:
    git = MockGitClient(current_branch="feature", branches=["main"], head_oid=HEAD)
    h = Harness(git=git)
    pr = make_pr(state=PullRequestState.MERGED, head_repository_owner="hubot")

    outcome = h.run(pr, delete_branch=True)

    assert outcome.action == ReportAlreadyMerged()
    assert h.remote.mutations == []
    assert git.branch == "main"
    assert "feature" not in git.branches
    assert outcome.cleanup.result(CleanupStep.DELETE_REMOTE).status is StepStatus.SKIPPED


def test_already_merged_non_interactive_warns() -> None:
    h = Harness()

    outcome = h.run(make_pr(state=PullRequestState.MERGED))

    assert h.output.lines == ["! Pull request octo/widgets#42 was already merged"]
    assert outcome.cleanup.steps == []
    assert h.remote.call_count() == 0


def test_already_merged_interactive_asks() -> None:
    prompter = MockPrompter()
    prompter.register_confirm(
        "Pull request octo/widgets#42 was already merged. "
        "Delete the branch locally and on github.com?",
        True,
    )
    h = Harness(prompter=prompter)

    outcome = h.run(make_pr(state=PullRequestState.MERGED), interactive=True)

    assert outcome.ok
    assert [c.method for c in h.remote.mutations] == ["repos.delete_branch"]
    assert not any(line.startswith("!") for line in h.output.lines)


# ============================================================================
# Merge queue and auto-merge
# ============================================================================


def test_enqueue_uses_queue_method_and_keeps_branch() -> None:
    git = MockGitClient(current_branch="feature", branches=["main"], head_oid=HEAD)
    h = Harness(git=git)
    h.remote.repos.configure_merge_capabilities(
        response=create_mock_capabilities(queue_method=MergeMethod.SQUASH)
    )

    outcome = h.run(
        make_pr(is_merge_queue_enabled=True, merge_state_status=MergeStateStatus.BLOCKED),
        method=MergeMethod.MERGE,
    )

    assert outcome.action == EnqueueToQueue()
    assert outcome.method is MergeMethod.SQUASH
    assert h.remote.get_calls("repos.merge_capabilities")[0].kwargs == {"branch": "main"}
    assert [c.method for c in h.remote.mutations] == ["pulls.enable_auto_merge"]
    assert h.remote.get_calls("pulls.enable_auto_merge")[0].args[1] is MergeMethod.SQUASH
    assert h.output.lines == [
        "! The merge strategy for main is set by the merge queue",
        "✓ Pull request octo/widgets#42 will be added to the merge queue for main when ready",
    ]
    assert git.branch == "feature"


@pytest.mark.parametrize("queue_method", [None, MergeMethod.MERGE])
def test_enqueue_without_overridden_method_does_not_warn(queue_method) -> None:
    h = Harness()
    h.remote.repos.configure_merge_capabilities(
        response=create_mock_capabilities(queue_method=queue_method)
    )

    outcome = h.run(make_pr(is_merge_queue_enabled=True), method=MergeMethod.MERGE)

    assert outcome.method is MergeMethod.MERGE
    assert h.output.lines == [
        "✓ Pull request octo/widgets#42 will be added to the merge queue for main when ready",
    ]


def test_enqueue_without_configured_method_needs_one() -> None:
    h = Harness()

    with pytest.raises(MergeUsageError):
        h.run(make_pr(is_merge_queue_enabled=True))

    assert h.remote.mutations == []


def test_enable_auto_merge() -> None:
    h = Harness()

    outcome = h.run(
        make_pr(merge_state_status=MergeStateStatus.BLOCKED),
        method=MergeMethod.SQUASH,
        auto_merge_enable=True,
        delete_branch=True,
    )

    assert outcome.action == EnableAutoMerge()
    assert outcome.cleanup is None
    assert [c.method for c in h.remote.mutations] == ["pulls.enable_auto_merge"]
    assert h.remote.get_calls("pulls.enable_auto_merge")[0].kwargs == UNSET_FIELDS
    assert h.output.lines == [
        "✓ Pull request octo/widgets#42 will be automatically merged via squash "
        "when all requirements are met"
    ]


def test_disable_auto_merge() -> None:
    h = Harness()

    outcome = h.run(make_pr(), auto_merge_disable=True)

    assert outcome.action == DisableAutoMerge()
    assert [c.method for c in h.remote.get_calls()] == ["pulls.disable_auto_merge"]
    assert h.output.lines == ["✓ Auto-merge disabled for pull request octo/widgets#42"]


def test_disable_auto_merge_on_queue_enabled_base() -> None:
    h = Harness()
    h.remote.repos.configure_merge_capabilities(
        response=create_mock_capabilities(queue_method=MergeMethod.SQUASH)
    )

    outcome = h.run(make_pr(is_merge_queue_enabled=True), auto_merge_disable=True)

    assert outcome.action == DisableAutoMerge()
    assert h.remote.was_called("pulls.disable_auto_merge")
    assert not h.remote.was_called("pulls.enable_auto_merge")
    assert [c.method for c in h.remote.mutations] == ["pulls.disable_auto_merge"]


# ============================================================================
# Interactive sessions
# ============================================================================


def test_interactive_flow() -> None:
    prompter = MockPrompter()
    prompter.register_select("What merge method would you like to use?", "Squash and merge")
    prompter.register_select("What's next?", EDIT_SUBJECT)
    prompter.register_select("What's next?", SUBMIT)
    prompter.register_confirm("Delete the branch locally and on github.com?", None)
    editor = MockEditor(["Add widgets, properly"])
    git = MockGitClient(current_branch="feature", branches=["main"], head_oid=HEAD)
    h = Harness(git=git, prompter=prompter, editor=editor)
    h.remote.pulls.configure_merge_message_defaults(response=("Add widgets (#42)", "* one"))

    outcome = h.run(make_pr(), interactive=True)

    assert outcome.ok
    assert prompter.unanswered == []
    assert h.remote.call_count("repos.merge_capabilities") == 1
    merge_call = h.remote.get_calls("pulls.merge")[0]
    assert merge_call.args[1] is MergeMethod.SQUASH
    assert merge_call.kwargs["headline"] == "Add widgets, properly"
    assert merge_call.kwargs["body"] == "* one"
    assert h.remote.was_called("repos.delete_branch")


def test_interactive_subject_edit_leaves_empty_default_body_unset() -> None:
    prompter = MockPrompter()
    prompter.register_select("What's next?", EDIT_SUBJECT)
    prompter.register_select("What's next?", SUBMIT)
    h = Harness(prompter=prompter, editor=MockEditor(["New headline"]))
    h.remote.pulls.configure_merge_message_defaults(response=("Default headline", None))

    h.run(make_pr(), method=MergeMethod.SQUASH, interactive=True, delete_branch=False)

    merge_call = h.remote.get_calls("pulls.merge")[0]
    assert merge_call.kwargs["headline"] == "New headline"
    assert merge_call.kwargs["body"] is None


def test_interactive_cancel_stops_before_merge() -> None:
    prompter = MockPrompter()
    prompter.register_select("What's next?", CANCEL)
    h = Harness(prompter=prompter, editor=MockEditor())

    with pytest.raises(MergeCancelledError):
        h.run(make_pr(), method=MergeMethod.MERGE, interactive=True)

    assert h.remote.mutations == []
