"""GitHub releases REST API.

Only the three calls publishing needs:
- list releases:  GET  /repos/{owner}/{repo}/releases
- create release: POST /repos/{owner}/{repo}/releases
- upload asset:   POST {upload_url}?name={asset}

All functions go through an injected HttpClient so tests never touch the
network.
"""

from __future__ import annotations

import re
import urllib.parse
from dataclasses import dataclass
from typing import TYPE_CHECKING

from pregyp.core.errors import RemoteError
from pregyp.core.result import Err, Ok, Result
from pregyp.core.structured import as_obj_list, as_str_dict, get_bool, get_int, get_list, get_str

if TYPE_CHECKING:
    from pregyp.core.metadata import RepositoryRef
    from pregyp.github.http import HttpClient, HttpError

__all__ = [
    "GitHubReleasesApi",
    "Release",
    "ReleaseDraft",
    "RELEASES_PER_PAGE",
    "asset_upload_url",
    "parse_release",
]

RELEASES_PER_PAGE = 100

# upload_url is an RFC 6570 template: ".../assets{?name,label}"
_URL_TEMPLATE_RE = re.compile(r"\{[^}]*\}$")


@dataclass(frozen=True, slots=True)
class Release:
    """A GitHub release as far as publishing is concerned."""

    id: int
    tag_name: str
    upload_url: str
    draft: bool
    prerelease: bool
    asset_names: frozenset[str]

    def has_asset(self, name: str) -> bool:
        return name in self.asset_names


@dataclass(frozen=True, slots=True)
class ReleaseDraft:
    """Fields sent when creating a release."""

    tag_name: str
    target_commitish: str
    name: str
    body: str
    draft: bool
    prerelease: bool = False

    def payload(self) -> dict[str, object]:
        return {
            "tag_name": self.tag_name,
            "target_commitish": self.target_commitish,
            "name": self.name,
            "body": self.body,
            "draft": self.draft,
            "prerelease": self.prerelease,
        }


def parse_release(obj: object) -> Release | None:
    """Narrow a release payload, or None if required fields are missing."""
    data = as_str_dict(obj)
    if data is None:
        return None

    release_id = get_int(data, "id")
    tag_name = data.get("tag_name")
    upload_url = get_str(data, "upload_url")
    if release_id is None or not isinstance(tag_name, str) or upload_url is None:
        return None

    names: set[str] = set()
    for item in get_list(data, "assets") or []:
        asset = as_str_dict(item)
        if asset is None:
            continue
        name = asset.get("name")
        if isinstance(name, str):
            names.add(name)

    return Release(
        id=release_id,
        tag_name=tag_name,
        upload_url=upload_url,
        draft=get_bool(data, "draft") or False,
        prerelease=get_bool(data, "prerelease") or False,
        asset_names=frozenset(names),
    )


def asset_upload_url(upload_url: str, name: str) -> str:
    """Expand a release ``upload_url`` template for one asset name."""
    base = _URL_TEMPLATE_RE.sub("", upload_url)
    return f"{base}?name={urllib.parse.quote(name, safe='')}"


def _remote_error(message: str, error: HttpError) -> RemoteError:
    return RemoteError(message=message, status=error.status, hint=error.message)


class GitHubReleasesApi:
    """Releases endpoints of one repository.

    Args:
        http: HTTP client used for every request
        repository: Repository the releases belong to
        token: API token sent as ``Authorization: token ...``
    """

    def __init__(self, http: HttpClient, repository: RepositoryRef, token: str) -> None:
        self.http = http
        self.repository = repository
        self._token = token

    @property
    def releases_url(self) -> str:
        return f"{self.repository.api_base_url}/repos/{self.repository.slug}/releases"

    def _headers(self) -> dict[str, str]:
        return {
            "Accept": "application/vnd.github+json",
            "Authorization": f"token {self._token}",
        }

    def list_releases(self) -> Result[list[Release], RemoteError]:
        """Fetch every release of the repository, following pagination."""
        releases: list[Release] = []
        page = 1
        while True:
            url = f"{self.releases_url}?per_page={RELEASES_PER_PAGE}&page={page}"
            result = self.http.get_json(url, headers=self._headers())
            if isinstance(result, Err):
                message = f"failed to list releases of {self.repository.slug}"
                return Err(_remote_error(message, result.error))

            items = as_obj_list(result.value)
            if items is None:
                return Err(RemoteError(message=f"unexpected releases payload: {url}"))

            for item in items:
                release = parse_release(item)
                if release is not None:
                    releases.append(release)

            if len(items) < RELEASES_PER_PAGE:
                return Ok(releases)
            page += 1

    def create_release(self, draft: ReleaseDraft) -> Result[Release, RemoteError]:
        result = self.http.post_json(self.releases_url, draft.payload(), headers=self._headers())
        if isinstance(result, Err):
            return Err(
                _remote_error(
                    f"failed to create release {draft.tag_name} in {self.repository.slug}",
                    result.error,
                )
            )

        release = parse_release(result.value)
        if release is None:
            return Err(RemoteError(message=f"unexpected create release payload: {draft.tag_name}"))
        return Ok(release)

    def upload_asset(
        self,
        release: Release,
        *,
        name: str,
        data: bytes,
        content_type: str,
    ) -> Result[None, RemoteError]:
        url = asset_upload_url(release.upload_url, name)
        result = self.http.post_bytes(
            url,
            data,
            content_type=content_type,
            headers=self._headers(),
        )
        if isinstance(result, Err):
            return Err(
                _remote_error(
                    f"failed to upload {name} to release {release.tag_name}",
                    result.error,
                )
            )
        return Ok(None)
