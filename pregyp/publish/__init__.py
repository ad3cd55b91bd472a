"""Publish workflow: locate or create the release, upload staged binaries."""

from .assets import (
    StagedFile,
    UploadOutcome,
    UploadReport,
    list_staged_files,
    upload_missing_assets,
)
from .release import locate_or_create_release
from .service import PublishOptions, publish, token_from_env

__all__ = [
    "PublishOptions",
    "StagedFile",
    "UploadOutcome",
    "UploadReport",
    "list_staged_files",
    "locate_or_create_release",
    "publish",
    "token_from_env",
    "upload_missing_assets",
]
