"""Find the release for this version, or create it."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pregyp.core.errors import RemoteError
from pregyp.core.result import Err, Ok, Result
from pregyp.github.api import Release, ReleaseDraft

if TYPE_CHECKING:
    from pregyp.github.api import GitHubReleasesApi
    from pregyp.output.console import ConsoleProtocol

__all__ = ["find_release", "locate_or_create_release", "release_draft"]


def find_release(releases: list[Release], tag: str) -> Release | None:
    """First release whose tag_name equals ``tag`` exactly."""
    for release in releases:
        if release.tag_name == tag:
            return release
    return None


def release_draft(
    *,
    name: str,
    version: str,
    target_branch: str,
    draft: bool,
) -> ReleaseDraft:
    return ReleaseDraft(
        tag_name=version,
        target_commitish=target_branch,
        name=f"v{version}",
        body=f"{name} {version}",
        draft=draft,
        prerelease=False,
    )


def locate_or_create_release(
    api: GitHubReleasesApi,
    *,
    tag: str,
    name: str,
    version: str,
    draft: bool,
    target_branch: str,
    console: ConsoleProtocol,
) -> Result[Release, RemoteError]:
    """Return the release tagged ``tag``, creating one if none exists.

    Lookup uses ``tag`` (the templated remote path) while creation tags the
    release with the bare ``version``. When the two differ, a release created
    here is not found by the next run, so that case is reported as a warning.
    """
    listed = api.list_releases()
    if isinstance(listed, Err):
        return listed

    existing = find_release(listed.value, tag)
    if existing is not None:
        console.info(f"Using existing release {existing.tag_name} (id {existing.id})")
        return Ok(existing)

    if tag != version:
        console.warning(
            f"No release tagged {tag}; creating one tagged {version}. "
            f"Later runs look releases up by {tag} and will not find it."
        )

    created = api.create_release(
        release_draft(name=name, version=version, target_branch=target_branch, draft=draft)
    )
    if isinstance(created, Err):
        return created

    release = created.value
    kind = "draft release" if release.draft else "release"
    console.success(f"Created {kind} {release.tag_name} in {api.repository.slug}")
    return Ok(release)
