"""Command line entry point: ``prmerge [SELECTOR] [flags]``."""

import logging
import os
import sys

import click

from prmerge.client import RemoteMergeClient
from prmerge.exceptions import (
    MergeBlockedError,
    MergeCancelledError,
    MergeUsageError,
    PrMergeError,
)
from prmerge.finder import PullRequestFinder
from prmerge.git import GitClient
from prmerge.logging import configure_logging
from prmerge.merge import MergeOptions, MergeOutput, MergeStateMachine
from prmerge.merge.output import FAILURE_ICON
from prmerge.prompt import ClickEditor, ClickPrompter
from prmerge.types.repos import Repository

EXIT_ERROR = 1
EXIT_CANCELLED = 2


def _can_prompt() -> bool:
    if os.environ.get("PRMERGE_PROMPT_DISABLED"):
        return False
    return sys.stdin.isatty() and sys.stdout.isatty()


def _build_remote() -> RemoteMergeClient:
    return RemoteMergeClient.from_env()


def _build_git() -> GitClient:
    return GitClient()


@click.command(name="prmerge")
@click.argument("selector", required=False, default="")
@click.option("-m", "--merge", "merge", is_flag=True, help="Merge the commits with the base branch.")
@click.option("-r", "--rebase", is_flag=True, help="Rebase the commits onto the base branch.")
@click.option("-s", "--squash", is_flag=True, help="Squash the commits into one commit and merge it into the base branch.")
@click.option(
    "-d",
    "--delete-branch/--no-delete-branch",
    "delete_branch",
    default=None,
    help="Delete the local and remote branch after merge.",
)
@click.option("-t", "--subject", default=None, help="Subject text for the merge commit.")
@click.option("-b", "--body", default=None, help="Body text for the merge commit.")
@click.option("-F", "--body-file", "body_file", default=None, metavar="FILE", help='Read body text from FILE (use "-" to read from standard input).')
@click.option("--match-head-commit", default=None, metavar="SHA", help="Commit SHA that the pull request head must match to allow merge.")
@click.option("-A", "--author-email", default=None, help="Email text for merge commit author.")
@click.option("--admin", is_flag=True, help="Use administrator privileges to merge a pull request that does not meet requirements.")
@click.option("--auto", "auto_merge", is_flag=True, help="Automatically merge only after necessary requirements are met.")
@click.option("--disable-auto", is_flag=True, help="Disable auto-merge for this pull request.")
@click.option("-R", "--repo", default=None, envvar="PRMERGE_REPO", metavar="[HOST/]OWNER/REPO", help="Select the base repository.")
@click.option("-v", "--verbose", is_flag=True, help="Log API calls and git commands.")
@click.pass_context
def cli(
    ctx: click.Context,
    selector: str,
    merge: bool,
    rebase: bool,
    squash: bool,
    delete_branch: bool | None,
    subject: str | None,
    body: str | None,
    body_file: str | None,
    match_head_commit: str | None,
    author_email: str | None,
    admin: bool,
    auto_merge: bool,
    disable_auto: bool,
    repo: str | None,
    verbose: bool,
) -> None:
    """Merge a pull request and clean up its branch.

    SELECTOR is a pull request number, URL or head branch name. Without one,
    the pull request for the current branch is merged.
    """
    if verbose:
        configure_logging(level=logging.DEBUG)

    interactive = _can_prompt()
    try:
        options = MergeOptions.from_flags(
            selector=selector,
            merge=merge,
            rebase=rebase,
            squash=squash,
            delete_branch=delete_branch,
            subject=subject,
            body=body,
            body_source=body_file,
            author_email=author_email,
            match_head_commit=match_head_commit,
            admin=admin,
            auto_merge_enable=auto_merge,
            auto_merge_disable=disable_auto,
            interactive=interactive,
        )
    except MergeUsageError as e:
        raise click.UsageError(e.message, ctx=ctx) from e

    base_repo = None
    if repo:
        try:
            base_repo = Repository.parse(repo, host=os.environ.get("PRMERGE_HOST", "github.com"))
        except ValueError as e:
            raise click.BadParameter(str(e), ctx=ctx, param_hint="--repo") from e

    output = MergeOutput()
    exit_code = 0
    try:
        with _build_remote() as remote:
            git = _build_git()
            pr, pr_repo = PullRequestFinder(remote, git, base_repo).find(selector)
            machine = MergeStateMachine(
                remote,
                git,
                prompter=ClickPrompter() if interactive else None,
                editor=ClickEditor() if interactive else None,
                output=output,
                remote_name=os.environ.get("PRMERGE_REMOTE", "origin"),
            )
            outcome = machine.run(pr, pr_repo, options)
            if not outcome.ok:
                exit_code = EXIT_ERROR
    except MergeCancelledError:
        click.echo("Cancelled.", err=True)
        exit_code = EXIT_CANCELLED
    except MergeUsageError as e:
        raise click.UsageError(e.message, ctx=ctx) from e
    except MergeBlockedError as e:
        output.write(f"{FAILURE_ICON} {e.message}")
        for line in e.remediation:
            output.write(line)
        exit_code = EXIT_ERROR
    except PrMergeError as e:
        raise click.ClickException(e.message) from e

    if exit_code:
        ctx.exit(exit_code)


def main() -> None:
    cli(prog_name="prmerge")
