"""Publish staged binaries to the GitHub release of the current version.

This is the single entry point behind ``pregyp-github publish``:

1. check the API token
2. load and validate ``package.json``
3. derive the release tag from ``binary.remote_path``
4. list ``build/stage/<tag>/``
5. find the release tagged ``<tag>``, or create one for the version
6. upload the staged files the release does not have yet

Any failure stops the run and is returned as a typed error. Nothing is
remembered between runs; every invocation starts from package.json, the
stage directory and the current state of the remote.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING

from pregyp.core.config import Config
from pregyp.core.errors import ConfigError, PublishError
from pregyp.core.metadata import load_metadata
from pregyp.core.result import Err, Ok, Result
from pregyp.github.api import GitHubReleasesApi
from pregyp.publish.assets import UploadReport, list_staged_files, upload_missing_assets
from pregyp.publish.release import locate_or_create_release

if TYPE_CHECKING:
    from pregyp.github.http import HttpClient
    from pregyp.output.console import ConsoleProtocol

__all__ = ["PublishOptions", "publish", "token_from_env"]


@dataclass(frozen=True, slots=True)
class PublishOptions:
    """Caller choices for one publish run."""

    draft: bool = True


def token_from_env(env: Mapping[str, str], name: str) -> Result[str, ConfigError]:
    """Read the API token from ``env[name]``."""
    token = env.get(name, "").strip()
    if not token:
        return Err(ConfigError(f"{name} environment variable not found"))
    return Ok(token)


def publish(
    options: PublishOptions,
    *,
    token: str | None,
    cwd: Path,
    http: HttpClient,
    console: ConsoleProtocol,
    config: Config | None = None,
) -> Result[UploadReport, PublishError]:
    """Publish ``<cwd>/build/stage/<tag>/`` to the release for this version.

    Args:
        options: Publish options (draft flag)
        token: GitHub API token, resolved by the caller
        cwd: Project root holding package.json and the stage directory
        http: HTTP client for the GitHub API
        console: Sink for progress notices
        config: Tool settings; defaults when None

    Returns:
        Ok(UploadReport) once every staged file was uploaded or skipped,
        otherwise Err with the first failure
    """
    if not token:
        return Err(ConfigError("GitHub token not provided", hint="set GH_TOKEN"))

    cfg = config or Config()

    metadata_result = load_metadata(cwd / cfg.publish.descriptor)
    if isinstance(metadata_result, Err):
        return metadata_result
    metadata = metadata_result.value

    tag = metadata.release_tag
    # A leading "/" in remote_path must not make the join absolute.
    stage_dir = cwd / cfg.publish.stage_dir / tag.lstrip("/")
    console.header(f"{metadata.name} {metadata.version} -> {metadata.repository.slug} ({tag})")

    staged_result = list_staged_files(stage_dir, console)
    if isinstance(staged_result, Err):
        return staged_result

    api = GitHubReleasesApi(http, metadata.repository, token)

    release_result = locate_or_create_release(
        api,
        tag=tag,
        name=metadata.name,
        version=metadata.version,
        draft=options.draft,
        target_branch=cfg.publish.target_branch,
        console=console,
    )
    if isinstance(release_result, Err):
        return release_result

    report_result = upload_missing_assets(
        api,
        release_result.value,
        staged_result.value,
        console,
        max_workers=cfg.publish.max_workers,
    )
    if isinstance(report_result, Err):
        return report_result

    report = report_result.value
    console.success(
        f"Done: {len(report.uploaded)} uploaded, {len(report.skipped)} already present"
    )
    return Ok(report)
