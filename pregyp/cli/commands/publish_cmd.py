"""Publish command - upload build/stage/<tag>/ to the GitHub release."""

from __future__ import annotations

import os

import typer

from pregyp.cli.commands._helpers import exit_on_error
from pregyp.cli.context import build_context
from pregyp.github.http import RealHttpClient
from pregyp.output.console import RichConsole
from pregyp.publish.service import PublishOptions, publish, token_from_env

TOKEN_ENV = "GH_TOKEN"


def publish_cmd(
    release: bool = typer.Option(
        False,
        "--release",
        "-r",
        help="Publish immediately, do not create a draft release.",
    ),
) -> None:
    """Publish ./build/stage/{version} to the current version's GitHub release."""
    # Token first: nothing else is read until we know we can authenticate.
    token = exit_on_error(token_from_env(os.environ, TOKEN_ENV), RichConsole())

    ctx = build_context()
    http = RealHttpClient(
        timeout=ctx.config.http.timeout,
        upload_timeout=ctx.config.http.upload_timeout,
    )
    exit_on_error(
        publish(
            PublishOptions(draft=not release),
            token=token,
            cwd=ctx.cwd,
            http=http,
            console=ctx.console,
            config=ctx.config,
        ),
        ctx.console,
    )
