"""Commit subject/body resolution for merge and squash commits."""

import sys
from collections.abc import Callable
from dataclasses import dataclass
from pathlib import Path
from typing import TextIO

from prmerge.exceptions import MergeCancelledError, MergeUsageError
from prmerge.merge.options import MergeOptions
from prmerge.prompt import Editor, Prompter
from prmerge.types.pulls import MergeMethod

SUBMIT = "Submit"
EDIT_MESSAGE = "Edit commit message"
EDIT_SUBJECT = "Edit commit subject"
CANCEL = "Cancel"

_MESSAGE_FILENAME = "MERGE_MSG.md"
_SUBJECT_FILENAME = "MERGE_SUBJECT.txt"


@dataclass(frozen=True)
class CommitMessage:
    """Commit text to send; None fields are left to the server's defaults."""

    headline: str | None = None
    body: str | None = None


def read_body_source(source: str, stdin: TextIO | None = None) -> str:
    """
    Read a commit body from a file, or from stdin when ``source`` is ``-``.

    Raises:
        MergeUsageError: If the file cannot be read
    """
    if source == "-":
        return (stdin or sys.stdin).read()
    try:
        return Path(source).read_text()
    except OSError as e:
        raise MergeUsageError(f"failed to read file {source}: {e.strerror or e}") from e


class CommitMessageComposer:
    """
    Works out the commit headline and body.

    Precedence: subject/body flags, then the body file, then the interactive
    edit loop (seeded with the server's defaults), then nothing at all.
    """

    def __init__(
        self,
        load_defaults: Callable[[MergeMethod], tuple[str | None, str | None]],
        prompter: Prompter | None = None,
        editor: Editor | None = None,
        stdin: TextIO | None = None,
    ) -> None:
        self.load_defaults = load_defaults
        self.prompter = prompter
        self.editor = editor
        self.stdin = stdin

    def compose(self, method: MergeMethod, options: MergeOptions) -> CommitMessage:
        """
        Resolve the commit message for ``method``.

        Raises:
            MergeCancelledError: If the user picks Cancel
        """
        can_ask = options.interactive and self.prompter is not None

        if not method.accepts_commit_message:
            if can_ask:
                self._confirm_submit()
            return CommitMessage()

        if options.has_commit_message:
            body = options.body
            if body is None and options.body_source is not None:
                body = read_body_source(options.body_source, self.stdin)
            return CommitMessage(headline=options.subject, body=body)

        if can_ask and self.editor is not None:
            return self._edit_loop(method)

        return CommitMessage()

    def _confirm_submit(self) -> None:
        choices = [SUBMIT, CANCEL]
        if choices[self.prompter.select("What's next?", 0, choices)] == CANCEL:
            raise MergeCancelledError()

    def _edit_loop(self, method: MergeMethod) -> CommitMessage:
        choices = [SUBMIT, EDIT_MESSAGE, EDIT_SUBJECT, CANCEL]
        headline: str | None = None
        body: str | None = None
        loaded = False

        while True:
            choice = choices[self.prompter.select("What's next?", 0, choices)]
            if choice == SUBMIT:
                return CommitMessage(headline=headline, body=body)
            if choice == CANCEL:
                raise MergeCancelledError()

            if not loaded:
                headline, body = (text or None for text in self.load_defaults(method))
                loaded = True

            if choice == EDIT_MESSAGE:
                body = self.editor.edit(_MESSAGE_FILENAME, body or "")
            else:
                headline = self.editor.edit(_SUBJECT_FILENAME, headline or "")
