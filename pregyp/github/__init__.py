"""GitHub REST API adapters."""

from .api import GitHubReleasesApi, Release, ReleaseDraft
from .http import HttpClient, HttpError, MockHttpClient, RealHttpClient

__all__ = [
    "GitHubReleasesApi",
    "HttpClient",
    "HttpError",
    "MockHttpClient",
    "RealHttpClient",
    "Release",
    "ReleaseDraft",
]
