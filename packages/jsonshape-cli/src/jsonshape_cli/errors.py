"""Error reporting for the jsonshape CLI.

Every failure a command reports is a CLIError. The exit code separates user
mistakes (1) from environment problems such as missing or unwritable files
(2). jsonshape-core errors are shown through their ``user_message``; their
internal details only reach the log.
"""

from __future__ import annotations

from collections.abc import Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, NoReturn

import click

from jsonshape_cli.output import error
from jsonshape_core.errors import JsonShapeError

if TYPE_CHECKING:
    from pydantic import ValidationError

EXIT_USER_ERROR = 1
EXIT_SYSTEM_ERROR = 2


class CLIError(click.ClickException):
    """Failure reported to the user with its own exit code."""

    def __init__(self, message: str, exit_code: int = EXIT_USER_ERROR) -> None:
        super().__init__(message)
        self.exit_code = exit_code

    def show(self, file: object = None) -> None:
        error(self.format_message())


def format_pydantic_error(err: ValidationError) -> str:
    """Render every validation failure as an indented ``field: message`` line."""
    lines = ["Validation failed:"]
    for detail in err.errors():
        field = ".".join(str(part) for part in detail["loc"]) or "<root>"
        lines.append(f"  - {field}: {detail['msg']}")
    return "\n".join(lines)


def missing_file(path: str, option: str) -> NoReturn:
    """Report a missing jsonshape.yaml, naming the option that selects another one."""
    raise CLIError(
        f"File not found: {path}\n\n"
        f"Create a jsonshape.yaml file, or use {option} to specify a path.",
        exit_code=EXIT_SYSTEM_ERROR,
    )


@contextmanager
def reported_as(action: str, destination: str) -> Iterator[None]:
    """Turn core and filesystem failures inside the block into CLIErrors.

    Args:
        action: What the block does, e.g. "Schema export".
        destination: Path the block writes to, named in permission errors.

    Raises:
        CLIError: Exit code 1 for jsonshape-core errors, 2 when
            ``destination`` cannot be written.
    """
    try:
        yield
    except JsonShapeError as e:
        raise CLIError(f"{action} failed: {e.user_message}") from None
    except PermissionError:
        raise CLIError(
            f"Permission denied: cannot write {destination}",
            exit_code=EXIT_SYSTEM_ERROR,
        ) from None
