"""Project metadata resolution from ``package.json``.

node-pre-gyp projects describe where their prebuilt binaries live:

    {
      "name": "widget",
      "version": "1.0.0",
      "repository": {"url": "git+https://github.com/acme/widget.git"},
      "binary": {
        "host": "https://github.com/acme/widget/releases/download/",
        "remote_path": "{version}"
      }
    }

``binary.host`` must point at the release download prefix of the repository
named by ``repository.url``, otherwise the binaries we upload would never be
found by ``node-pre-gyp install``.
"""

from __future__ import annotations

import json
import re
from dataclasses import dataclass
from pathlib import Path

from .errors import ConfigError
from .result import Err, Ok, Result
from .structured import as_str_dict, get_str, get_table

__all__ = [
    "ProjectMetadata",
    "RepositoryRef",
    "VERSION_PLACEHOLDER",
    "load_metadata",
    "parse_metadata",
    "parse_repository_url",
    "release_tag",
]

VERSION_PLACEHOLDER = "{version}"

# Searched, not anchored: "git+https://host/owner/repo.git" matches too.
_REPOSITORY_URL_RE = re.compile(r"https?://([^/]+)/(.*)(?=\.git)", re.IGNORECASE)


@dataclass(frozen=True, slots=True)
class RepositoryRef:
    """A GitHub repository address."""

    host: str
    owner: str
    repo: str

    @property
    def slug(self) -> str:
        return f"{self.owner}/{self.repo}"

    @property
    def download_prefix(self) -> str:
        """The value ``binary.host`` is required to have."""
        return f"https://{self.host}/{self.owner}/{self.repo}/releases/download/"

    @property
    def api_base_url(self) -> str:
        return f"https://api.{self.host}"


@dataclass(frozen=True, slots=True)
class ProjectMetadata:
    """Validated fields of the project descriptor."""

    name: str
    version: str
    repository_url: str
    binary_host: str
    binary_remote_path: str
    repository: RepositoryRef

    @property
    def release_tag(self) -> str:
        return release_tag(self.binary_remote_path, self.version)


def release_tag(template: str, version: str) -> str:
    """Substitute every ``{version}`` placeholder in ``template``."""
    return template.replace(VERSION_PLACEHOLDER, version)


def parse_repository_url(url: str) -> RepositoryRef | None:
    """Extract host, owner and repo from a ``.git`` repository URL.

    Returns None when the URL has no ``https?://host/owner/repo.git`` shape.
    """
    match = _REPOSITORY_URL_RE.search(url)
    if match is None:
        return None

    host, uri = match.group(1), match.group(2)
    parts = uri.split("/")
    if len(parts) < 2 or not parts[0] or not parts[1]:
        return None
    return RepositoryRef(host=host, owner=parts[0], repo=parts[1])


def parse_metadata(
    data: dict[str, object],
    *,
    path: Path | None = None,
) -> Result[ProjectMetadata, ConfigError]:
    """Validate a parsed descriptor.

    Checks run in order (name, version, repository.url, binary.host,
    binary.remote_path) and stop at the first failure.
    """
    name = get_str(data, "name", strip=False)
    if name is None:
        return Err(ConfigError("Missing name in package.json", path=path))
    # Used verbatim in the release tag and stage path.
    version = get_str(data, "version", strip=False)
    if version is None:
        return Err(ConfigError("Missing version in package.json", path=path))

    repository = get_table(data, "repository") or {}
    repository_url = get_str(repository, "url")
    if repository_url is None:
        return Err(ConfigError("Missing repository.url in package.json", path=path))

    repo_ref = parse_repository_url(repository_url)
    if repo_ref is None:
        return Err(
            ConfigError(
                "A correctly formatted GitHub repository.url was not found in package.json",
                path=path,
                hint="expected https://<host>/<owner>/<repo>.git",
            )
        )

    binary = get_table(data, "binary") or {}
    # Compared byte-for-byte, so no whitespace stripping here.
    binary_host = get_str(binary, "host", strip=False)
    if binary_host is None:
        return Err(ConfigError("Missing binary.host in package.json", path=path))

    expected = repo_ref.download_prefix
    if binary_host != expected:
        return Err(ConfigError(f"Invalid binary.host: Should be {expected}", path=path))

    remote_path = get_str(binary, "remote_path", strip=False)
    if remote_path is None:
        return Err(ConfigError("Missing binary.remote_path in package.json", path=path))

    return Ok(
        ProjectMetadata(
            name=name,
            version=version,
            repository_url=repository_url,
            binary_host=binary_host,
            binary_remote_path=remote_path,
            repository=repo_ref,
        )
    )


def load_metadata(path: Path) -> Result[ProjectMetadata, ConfigError]:
    """Read and validate the project descriptor at ``path``.

    Args:
        path: Path to ``package.json``

    Returns:
        Ok(ProjectMetadata), or Err(ConfigError) if the file cannot be read,
        is not a JSON object, or fails validation
    """
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        return Err(ConfigError(f"Unable to read package.json ({e})", path=path))

    try:
        obj: object = json.loads(raw)
    except json.JSONDecodeError as e:
        return Err(ConfigError(f"Unable to read package.json ({e})", path=path))

    data = as_str_dict(obj)
    if data is None:
        return Err(ConfigError("package.json root must be a JSON object", path=path))

    return parse_metadata(data, path=path)
