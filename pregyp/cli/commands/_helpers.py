"""Shared helpers for CLI commands."""

from __future__ import annotations

from typing import TYPE_CHECKING, NoReturn, TypeVar

import typer

from pregyp.core.errors import PublishError, exit_code_for
from pregyp.core.result import Err, Result
from pregyp.output.console import Style

if TYPE_CHECKING:
    from pregyp.output.console import ConsoleProtocol


T = TypeVar("T")


def print_error(error: PublishError, console: ConsoleProtocol) -> None:
    """Print an error message, with its hint dimmed underneath."""
    console.error(error.message)
    if error.hint:
        console.print(f"hint: {error.hint}", Style.DIM)


def exit_on_error[T](result: Result[T, PublishError], console: ConsoleProtocol) -> T:
    """Return the value of an Ok result, or print the error and exit.

    The exit code depends on the error type (see ``exit_code_for``).
    """
    if isinstance(result, Err):
        print_error(result.error, console)
        exit_with_code(int(exit_code_for(result.error)))
    return result.value


def exit_with_code(code: int) -> NoReturn:
    """Exit with given code. Explicit helper for clarity."""
    raise typer.Exit(code=code)
