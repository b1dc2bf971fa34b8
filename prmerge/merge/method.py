"""Merge method selection."""

from collections.abc import Callable

from prmerge.exceptions import MergeBlockedError, MergeUsageError
from prmerge.logging import get_logger
from prmerge.prompt import Prompter
from prmerge.types.pulls import MergeMethod
from prmerge.types.repos import RepositoryMergeCapabilities

logger = get_logger("merge")

METHOD_LABELS = {
    MergeMethod.MERGE: "Create a merge commit",
    MergeMethod.REBASE: "Rebase and merge",
    MergeMethod.SQUASH: "Squash and merge",
}


def resolve_method_flags(merge: bool, rebase: bool, squash: bool) -> MergeMethod | None:
    """
    Turn the three method flags into at most one method.

    Raises:
        MergeUsageError: If more than one flag is set
    """
    chosen = [
        method
        for method, enabled in (
            (MergeMethod.MERGE, merge),
            (MergeMethod.REBASE, rebase),
            (MergeMethod.SQUASH, squash),
        )
        if enabled
    ]
    if len(chosen) > 1:
        raise MergeUsageError("only one of --merge, --rebase, or --squash can be enabled")
    return chosen[0] if chosen else None


class MergeMethodResolver:
    """Decides the merge method from the queue, flags, or an interactive survey."""

    def __init__(self, prompter: Prompter | None = None) -> None:
        self.prompter = prompter

    def resolve(
        self,
        requested: MergeMethod | None,
        interactive: bool,
        load_capabilities: Callable[[], RepositoryMergeCapabilities],
        queue_method: MergeMethod | None = None,
    ) -> MergeMethod:
        """
        Resolve the method to merge with.

        Args:
            requested: Method fixed by flags, if any
            interactive: Whether the user can be asked
            load_capabilities: Fetches repository capabilities; only called for the survey
            queue_method: Method pinned by the base branch's merge queue

        Raises:
            MergeUsageError: If nothing is fixed and the session is not interactive
            MergeBlockedError: If the repository allows no merge method at all
        """
        if queue_method is not None:
            return queue_method
        if requested is not None:
            return requested
        if not interactive or self.prompter is None:
            raise MergeUsageError(
                "--merge, --rebase, or --squash required when not running interactively"
            )

        methods = load_capabilities().allowed_methods()
        if not methods:
            raise MergeBlockedError(
                "NO_MERGE_METHODS", "the repository does not allow any merge methods"
            )

        index = self.prompter.select(
            "What merge method would you like to use?",
            0,
            [METHOD_LABELS[m] for m in methods],
        )
        logger.debug("merge method chosen interactively: %s", methods[index].value)
        return methods[index]
