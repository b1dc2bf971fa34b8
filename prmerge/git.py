"""
Local git operations used around a merge.

Inspects and mutates the local checkout: current branch, ref existence,
checkout, forced branch deletion and fast-forward pulls.
"""

import subprocess
from pathlib import Path

from prmerge.exceptions import GitError
from prmerge.logging import log_git_command


class GitClient:
    """
    Thin wrapper over the ``git`` executable for one working tree.

    Example:
        ```python
        from prmerge.git import GitClient

        git = GitClient("./my-repo")
        if git.current_branch() == "feature":
            git.checkout("main")
            git.pull_fast_forward()
        git.delete_local_branch("feature")
        ```
    """

    def __init__(self, repo_path: str | Path | None = None) -> None:
        """
        Initialize the git client.

        Args:
            repo_path: Working tree to operate on (default: current directory)
        """
        self.repo_path = Path(repo_path) if repo_path is not None else None

    def current_branch(self) -> str:
        """
        Get the name of the checked-out branch.

        Raises:
            GitError: If HEAD is detached or this is not a git repository
        """
        result = self._run(["symbolic-ref", "--quiet", "--short", "HEAD"], check=False)
        if result.returncode != 0:
            raise GitError("could not determine current branch", result.stderr)
        return result.stdout.strip()

    def has_local_branch(self, branch: str) -> bool:
        """Check whether ``refs/heads/<branch>`` exists."""
        result = self._run(
            ["rev-parse", "--verify", "--quiet", f"refs/heads/{branch}"], check=False
        )
        return result.returncode == 0

    def checkout(self, branch: str) -> None:
        """Check out an existing local branch."""
        self._run(["checkout", branch])

    def checkout_new_tracking(self, branch: str, remote_ref: str) -> None:
        """
        Create and check out ``branch`` tracking ``remote_ref``.

        Args:
            branch: New local branch name
            remote_ref: Remote-tracking ref to start from (e.g., "origin/main")
        """
        self._run(["checkout", "-b", branch, "--track", remote_ref])

    def delete_local_branch(self, branch: str) -> None:
        """Force-delete a local branch."""
        self._run(["branch", "-D", branch])

    def pull_fast_forward(self) -> None:
        """Pull the current branch's upstream, refusing anything but a fast-forward."""
        self._run(["pull", "--ff-only"])

    def last_commit_hash(self, ref: str = "HEAD") -> str:
        """Get the full commit hash ``ref`` points at."""
        result = self._run(["rev-parse", "--verify", f"{ref}^{{commit}}"])
        return result.stdout.strip()

    def _run(self, args: list[str], check: bool = True) -> subprocess.CompletedProcess:
        """
        Run a git command.

        Raises:
            GitError: If ``check`` is set and git exits non-zero, or git is missing
        """
        try:
            result = subprocess.run(
                ["git", *args],
                cwd=self.repo_path,
                capture_output=True,
                text=True,
            )
        except OSError as e:
            raise GitError(f"could not run git: {e}") from e

        log_git_command(args, result.returncode)

        if check and result.returncode != 0:
            stderr = result.stderr.strip()
            raise GitError(
                f"git {args[0]} failed: {stderr or f'exit status {result.returncode}'}",
                stderr,
            )
        return result
