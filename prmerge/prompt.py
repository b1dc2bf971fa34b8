"""
Interactive prompt and editor collaborators.

The merge engine only talks to the ``Prompter`` and ``Editor`` protocols so
tests can script answers; the click-backed implementations are what the
command line uses.
"""

from typing import Protocol

import click

from prmerge.exceptions import MergeCancelledError


class Prompter(Protocol):
    """Asks the user questions."""

    def confirm(self, prompt: str, default: bool) -> bool: ...

    def select(self, prompt: str, default: int, options: list[str]) -> int: ...


class Editor(Protocol):
    """Lets the user edit a piece of text."""

    def edit(self, filename: str, text: str) -> str: ...


class ClickPrompter:
    """Prompter that reads answers from the terminal."""

    def confirm(self, prompt: str, default: bool) -> bool:
        try:
            return click.confirm(prompt, default=default, err=True)
        except click.Abort as e:
            raise MergeCancelledError() from e

    def select(self, prompt: str, default: int, options: list[str]) -> int:
        """
        Present numbered options and return the chosen index.

        Raises:
            MergeCancelledError: If the user aborts with Ctrl-C / EOF
        """
        click.echo(prompt, err=True)
        for i, option in enumerate(options, start=1):
            click.echo(f"  {i}. {option}", err=True)
        try:
            choice = click.prompt(
                "Choose",
                type=click.IntRange(1, len(options)),
                default=default + 1,
                err=True,
            )
        except click.Abort as e:
            raise MergeCancelledError() from e
        return choice - 1


class ClickEditor:
    """Editor that opens ``$VISUAL`` / ``$EDITOR`` on a temporary file."""

    def edit(self, filename: str, text: str) -> str:
        suffix = "." + filename.rsplit(".", 1)[-1] if "." in filename else ".txt"
        edited = click.edit(text, extension=suffix, require_save=False)
        if edited is None:
            return text
        return edited.rstrip("\n")
