"""Upload staged binaries that the release does not have yet.

Each staged file is handled independently: skipped if an asset of the same
name already exists, uploaded otherwise. Uploads run on a small thread pool
and every outcome is collected before the phase returns, so one failed file
neither hides nor blocks the others.
"""

from __future__ import annotations

import mimetypes
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from pregyp.core.errors import FileSystemError, RemoteError
from pregyp.core.result import Err, Ok, Result

if TYPE_CHECKING:
    from pregyp.github.api import GitHubReleasesApi, Release
    from pregyp.output.console import ConsoleProtocol

__all__ = [
    "DEFAULT_CONTENT_TYPE",
    "StagedFile",
    "UploadOutcome",
    "UploadReport",
    "content_type_for",
    "list_staged_files",
    "upload_missing_assets",
    "upload_staged_file",
]

DEFAULT_CONTENT_TYPE = "application/octet-stream"

# mimetypes reports "x.tar.gz" as (application/x-tar, gzip); what goes over the
# wire is the compressed stream, so the encoding wins.
_ENCODING_TYPES = {
    "gzip": "application/gzip",
    "bzip2": "application/x-bzip2",
    "xz": "application/x-xz",
    "compress": "application/x-compress",
    "br": "application/x-brotli",
}

UploadStatus = Literal["uploaded", "skipped", "failed"]


@dataclass(frozen=True, slots=True)
class StagedFile:
    """A file waiting in the stage directory."""

    name: str
    path: Path
    size: int
    content_type: str


@dataclass(frozen=True, slots=True)
class UploadOutcome:
    name: str
    status: UploadStatus
    error: FileSystemError | RemoteError | None = None


@dataclass(frozen=True, slots=True)
class UploadReport:
    """Outcomes of one upload phase, in staging order."""

    tag_name: str
    outcomes: tuple[UploadOutcome, ...]

    def _names(self, status: UploadStatus) -> list[str]:
        return [o.name for o in self.outcomes if o.status == status]

    @property
    def uploaded(self) -> list[str]:
        return self._names("uploaded")

    @property
    def skipped(self) -> list[str]:
        return self._names("skipped")

    @property
    def failed(self) -> list[UploadOutcome]:
        return [o for o in self.outcomes if o.status == "failed"]


def content_type_for(name: str) -> str:
    """Guess a MIME type from the file extension."""
    mime_type, encoding = mimetypes.guess_type(name, strict=False)
    if encoding is not None:
        return _ENCODING_TYPES.get(encoding, DEFAULT_CONTENT_TYPE)
    return mime_type or DEFAULT_CONTENT_TYPE


def list_staged_files(
    stage_dir: Path,
    console: ConsoleProtocol | None = None,
) -> Result[list[StagedFile], FileSystemError]:
    """List the regular files directly inside ``stage_dir``.

    An empty directory is an error: publishing nothing is almost always a
    missing build step.
    """
    if not stage_dir.is_dir():
        return Err(
            FileSystemError(
                f"Stage directory not found: {stage_dir}",
                path=stage_dir,
                hint="build and package the binaries first",
            )
        )

    try:
        entries = sorted(stage_dir.iterdir(), key=lambda p: p.name)
    except OSError as e:
        return Err(
            FileSystemError(f"Unable to read stage directory {stage_dir} ({e})", path=stage_dir)
        )

    staged: list[StagedFile] = []
    for entry in entries:
        if not entry.is_file():
            if console is not None:
                console.warning(f"Skipping {entry.name}: not a regular file")
            continue
        try:
            size = entry.stat().st_size
        except OSError as e:
            return Err(FileSystemError(f"Unable to read staged file {entry} ({e})", path=entry))
        staged.append(
            StagedFile(
                name=entry.name,
                path=entry,
                size=size,
                content_type=content_type_for(entry.name),
            )
        )

    if not staged:
        return Err(
            FileSystemError(
                f"No files found within the stage directory: {stage_dir}",
                path=stage_dir,
            )
        )
    return Ok(staged)


def upload_staged_file(
    api: GitHubReleasesApi,
    release: Release,
    staged: StagedFile,
    console: ConsoleProtocol,
) -> UploadOutcome:
    """Read ``staged`` and upload it as a release asset.

    Never raises; failures are returned in the outcome and reported.
    """
    try:
        data = staged.path.read_bytes()
    except OSError as e:
        error = FileSystemError(f"Unable to read staged file {staged.path} ({e})", path=staged.path)
        console.error(error.pretty())
        return UploadOutcome(staged.name, "failed", error)

    console.info(f"Staged file {staged.name} found. Proceeding to upload it.")

    result = api.upload_asset(
        release,
        name=staged.name,
        data=data,
        content_type=staged.content_type,
    )
    if isinstance(result, Err):
        console.error(result.error.pretty())
        return UploadOutcome(staged.name, "failed", result.error)

    console.success(
        f"Staged file {staged.name} saved to {api.repository.slug} "
        f"release {release.tag_name} successfully."
    )
    return UploadOutcome(staged.name, "uploaded")


def upload_missing_assets(
    api: GitHubReleasesApi,
    release: Release,
    staged: list[StagedFile],
    console: ConsoleProtocol,
    *,
    max_workers: int = 4,
) -> Result[UploadReport, FileSystemError | RemoteError]:
    """Upload every staged file the release does not already have.

    Returns:
        Ok(UploadReport) when nothing failed; otherwise Err with the first
        failure in staging order, after every file has been attempted.
    """
    outcomes: dict[str, UploadOutcome] = {}
    pending: list[StagedFile] = []

    for item in staged:
        if release.has_asset(item.name):
            console.info(
                f"Staged file {item.name} found but it already exists in release "
                f"{release.tag_name}. If you would like to replace it, you must first "
                "manually delete it within GitHub."
            )
            outcomes[item.name] = UploadOutcome(item.name, "skipped")
        else:
            pending.append(item)

    if pending:
        workers = max(1, min(max_workers, len(pending)))
        with ThreadPoolExecutor(max_workers=workers, thread_name_prefix="pregyp-upload") as pool:
            futures = [
                pool.submit(upload_staged_file, api, release, item, console) for item in pending
            ]
            for item, future in zip(pending, futures):
                try:
                    outcome = future.result()
                except Exception as e:
                    error = RemoteError(f"Upload of {item.name} failed ({e!r})")
                    console.error(error.pretty())
                    outcome = UploadOutcome(item.name, "failed", error)
                outcomes[item.name] = outcome

    report = UploadReport(
        tag_name=release.tag_name,
        outcomes=tuple(outcomes[item.name] for item in staged),
    )

    failed = report.failed
    if failed:
        console.error(f"{len(failed)} of {len(staged)} staged files failed to upload")
        first = failed[0].error
        if first is not None:
            return Err(first)
    return Ok(report)
