"""Core domain types and logic."""

from .config import Config, load_config, load_config_or_default
from .errors import ConfigError, ErrorCode, FileSystemError, PublishError, RemoteError
from .metadata import ProjectMetadata, RepositoryRef, load_metadata, release_tag
from .result import Err, Ok, Result, is_err, is_ok

__all__ = [
    # config
    "Config",
    "load_config",
    "load_config_or_default",
    # errors
    "ConfigError",
    "ErrorCode",
    "FileSystemError",
    "PublishError",
    "RemoteError",
    # metadata
    "ProjectMetadata",
    "RepositoryRef",
    "load_metadata",
    "release_tag",
    # result
    "Err",
    "Ok",
    "Result",
    "is_err",
    "is_ok",
]
