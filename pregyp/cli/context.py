from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

import typer

from pregyp.cli.commands._helpers import print_error
from pregyp.core.config import CONFIG_FILE_NAME, Config, load_config_or_default
from pregyp.core.errors import exit_code_for
from pregyp.core.result import Err
from pregyp.output.console import ConsoleProtocol, RichConsole


@dataclass(frozen=True, slots=True)
class CLIContext:
    cwd: Path
    config: Config
    console: ConsoleProtocol


def build_context(cwd: Path | None = None) -> CLIContext:
    root = (cwd or Path.cwd()).resolve()
    console = RichConsole()

    config_result = load_config_or_default(root / CONFIG_FILE_NAME)
    if isinstance(config_result, Err):
        print_error(config_result.error, console)
        raise typer.Exit(code=int(exit_code_for(config_result.error)))

    return CLIContext(cwd=root, config=config_result.value, console=console)
