"""User-facing status lines for a merge run."""

import click

SUCCESS_ICON = "✓"
WARNING_ICON = "!"
FAILURE_ICON = "X"


class MergeOutput:
    """Writes status lines to stderr, the way the command line reports progress."""

    def success(self, message: str) -> None:
        self.write(f"{SUCCESS_ICON} {message}")

    def warning(self, message: str) -> None:
        self.write(f"{WARNING_ICON} {message}")

    def failure(self, message: str) -> None:
        self.write(f"{FAILURE_ICON} {message}")

    def write(self, line: str) -> None:
        click.echo(line, err=True)
