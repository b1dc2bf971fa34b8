"""Caller intent for a single merge invocation."""

from dataclasses import dataclass

from prmerge.exceptions import MergeUsageError
from prmerge.merge.method import resolve_method_flags
from prmerge.types.pulls import MergeMethod


@dataclass(frozen=True)
class MergeOptions:
    """
    What the user asked for, fixed before any I/O.

    ``delete_branch`` is tri-state: None means "not specified", which lets an
    interactive session ask.
    """

    selector: str = ""
    method: MergeMethod | None = None
    delete_branch: bool | None = None
    subject: str | None = None
    body: str | None = None
    body_source: str | None = None
    author_email: str | None = None
    match_head_commit: str | None = None
    admin: bool = False
    auto_merge_enable: bool = False
    auto_merge_disable: bool = False
    interactive: bool = False

    @classmethod
    def from_flags(
        cls,
        selector: str = "",
        merge: bool = False,
        rebase: bool = False,
        squash: bool = False,
        delete_branch: bool | None = None,
        subject: str | None = None,
        body: str | None = None,
        body_source: str | None = None,
        author_email: str | None = None,
        match_head_commit: str | None = None,
        admin: bool = False,
        auto_merge_enable: bool = False,
        auto_merge_disable: bool = False,
        interactive: bool = False,
    ) -> "MergeOptions":
        """
        Validate flag combinations and build options.

        Raises:
            MergeUsageError: On conflicting flags
        """
        method = resolve_method_flags(merge, rebase, squash)

        if sum([admin, auto_merge_enable, auto_merge_disable]) > 1:
            raise MergeUsageError("specify only one of --auto, --disable-auto, or --admin")

        if body is not None and body_source is not None:
            raise MergeUsageError("specify only one of --body or --body-file")

        if auto_merge_disable and (
            method is not None or subject is not None or body is not None or body_source is not None
        ):
            raise MergeUsageError(
                "--disable-auto cannot be combined with a merge method or commit message"
            )

        return cls(
            selector=selector,
            method=method,
            delete_branch=delete_branch,
            subject=subject,
            body=body,
            body_source=body_source,
            author_email=author_email,
            match_head_commit=match_head_commit,
            admin=admin,
            auto_merge_enable=auto_merge_enable,
            auto_merge_disable=auto_merge_disable,
            interactive=interactive,
        )

    @property
    def has_commit_message(self) -> bool:
        """Whether the commit subject or body was fixed by flags."""
        return (
            self.subject is not None
            or self.body is not None
            or self.body_source is not None
        )
