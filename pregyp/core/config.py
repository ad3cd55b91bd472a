"""Typed tool configuration loaded from ``.pregyp.toml``.

The file is optional. Every key falls back to the defaults below, which
reproduce the classic node-pre-gyp-github layout (``package.json`` descriptor,
``build/stage`` staging root, ``master`` target branch).
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path

from .errors import ConfigError
from .result import Err, Ok, Result
from .structured import StrDict, as_str_dict, get_float, get_int, get_str, get_table

__all__ = [
    "CONFIG_FILE_NAME",
    "Config",
    "HttpConfig",
    "PublishConfig",
    "load_config",
    "load_config_or_default",
]

CONFIG_FILE_NAME = ".pregyp.toml"

DEFAULT_DESCRIPTOR = "package.json"
DEFAULT_STAGE_DIR = "build/stage"
DEFAULT_TARGET_BRANCH = "master"
DEFAULT_MAX_WORKERS = 4

DEFAULT_TIMEOUT = 30.0
DEFAULT_UPLOAD_TIMEOUT = 300.0


@dataclass(frozen=True, slots=True)
class PublishConfig:
    """Where to find inputs and how to create releases."""

    descriptor: str = DEFAULT_DESCRIPTOR
    stage_dir: str = DEFAULT_STAGE_DIR
    target_branch: str = DEFAULT_TARGET_BRANCH
    max_workers: int = DEFAULT_MAX_WORKERS


@dataclass(frozen=True, slots=True)
class HttpConfig:
    """HTTP client timeouts, in seconds."""

    timeout: float = DEFAULT_TIMEOUT
    upload_timeout: float = DEFAULT_UPLOAD_TIMEOUT


@dataclass(frozen=True, slots=True)
class Config:
    """Main configuration container."""

    publish: PublishConfig = field(default_factory=PublishConfig)
    http: HttpConfig = field(default_factory=HttpConfig)

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> Config:
        """Create Config from a mapping (parsed TOML)."""
        publish: StrDict = get_table(data, "publish") or {}
        http: StrDict = get_table(data, "http") or {}

        max_workers = get_int(publish, "max_workers")
        if max_workers is not None and max_workers < 1:
            raise ValueError(f"publish.max_workers must be >= 1, got {max_workers}")

        return cls(
            publish=PublishConfig(
                descriptor=get_str(publish, "descriptor") or DEFAULT_DESCRIPTOR,
                stage_dir=get_str(publish, "stage_dir") or DEFAULT_STAGE_DIR,
                target_branch=get_str(publish, "target_branch") or DEFAULT_TARGET_BRANCH,
                max_workers=max_workers or DEFAULT_MAX_WORKERS,
            ),
            http=HttpConfig(
                timeout=get_float(http, "timeout") or DEFAULT_TIMEOUT,
                upload_timeout=get_float(http, "upload_timeout") or DEFAULT_UPLOAD_TIMEOUT,
            ),
        )


def _parse_toml(path: Path) -> Result[StrDict, ConfigError]:
    """Parse a TOML file, handling read and parse errors."""
    import tomllib

    try:
        content = path.read_bytes()
        data_obj: object = tomllib.loads(content.decode("utf-8"))
        data = as_str_dict(data_obj)
        if data is None:
            return Err(ConfigError("Config root must be a TOML table", path=path))
        return Ok(data)
    except FileNotFoundError:
        return Err(ConfigError(f"Config file not found: {path}", path=path))
    except PermissionError:
        return Err(ConfigError(f"Permission denied reading: {path}", path=path))
    except tomllib.TOMLDecodeError as e:
        return Err(ConfigError(f"Invalid TOML syntax: {e}", path=path))
    except UnicodeDecodeError as e:
        return Err(ConfigError(f"Error reading config: {e}", path=path))


def load_config(path: Path) -> Result[Config, ConfigError]:
    """Load and parse configuration from a TOML file.

    Args:
        path: Path to ``.pregyp.toml``

    Returns:
        Ok(Config) on success, Err(ConfigError) on failure
    """
    result = _parse_toml(path)
    if isinstance(result, Err):
        return result

    try:
        return Ok(Config.from_dict(result.value))
    except (KeyError, TypeError, ValueError) as e:
        return Err(ConfigError(f"Invalid config structure: {e}", path=path))


def load_config_or_default(path: Path) -> Result[Config, ConfigError]:
    """Load config if the file exists, otherwise return defaults.

    A present but broken file is still an error.
    """
    if not path.exists():
        return Ok(Config())
    return load_config(path)
