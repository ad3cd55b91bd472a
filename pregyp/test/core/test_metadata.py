"""Tests for pregyp.core.metadata module."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from pregyp.core.errors import ConfigError
from pregyp.core.metadata import (
    RepositoryRef,
    load_metadata,
    parse_metadata,
    parse_repository_url,
    release_tag,
)
from pregyp.core.result import Err, Ok


def _descriptor(**overrides: object) -> dict[str, object]:
    data: dict[str, object] = {
        "name": "widget",
        "version": "1.0.0",
        "repository": {"type": "git", "url": "https://github.com/acme/widget.git"},
        "binary": {
            "host": "https://github.com/acme/widget/releases/download/",
            "remote_path": "{version}",
        },
    }
    data.update(overrides)
    return data


def _error(data: dict[str, object]) -> ConfigError:
    result = parse_metadata(data)
    assert isinstance(result, Err)
    return result.error


class TestParseRepositoryUrl:
    def test_https_git_url(self) -> None:
        ref = parse_repository_url("https://github.com/acme/widget.git")
        assert ref == RepositoryRef(host="github.com", owner="acme", repo="widget")

    def test_git_plus_https_prefix(self) -> None:
        ref = parse_repository_url("git+https://github.com/acme/widget.git")
        assert ref == RepositoryRef(host="github.com", owner="acme", repo="widget")

    def test_scheme_is_case_insensitive(self) -> None:
        ref = parse_repository_url("HTTPS://github.com/acme/widget.git")
        assert ref is not None
        assert ref.slug == "acme/widget"

    def test_plain_http_and_enterprise_host(self) -> None:
        ref = parse_repository_url("http://git.example.com/team/lib.git")
        assert ref == RepositoryRef(host="git.example.com", owner="team", repo="lib")

    def test_missing_git_suffix_fails(self) -> None:
        assert parse_repository_url("https://github.com/acme/widget") is None

    def test_missing_repo_fails(self) -> None:
        assert parse_repository_url("https://github.com/acme.git") is None

    def test_not_a_url_fails(self) -> None:
        assert parse_repository_url("acme/widget") is None

    def test_ssh_url_fails(self) -> None:
        assert parse_repository_url("git@github.com:acme/widget.git") is None


class TestRepositoryRef:
    def test_download_prefix(self) -> None:
        ref = RepositoryRef(host="github.com", owner="acme", repo="widget")
        assert ref.download_prefix == "https://github.com/acme/widget/releases/download/"

    def test_api_base_url(self) -> None:
        ref = RepositoryRef(host="github.com", owner="acme", repo="widget")
        assert ref.api_base_url == "https://api.github.com"


class TestReleaseTag:
    def test_substitutes_placeholder(self) -> None:
        assert release_tag("download/{version}/", "2.3.0") == "download/2.3.0/"

    def test_substitutes_every_occurrence(self) -> None:
        assert release_tag("{version}/v{version}", "1.2.3") == "1.2.3/v1.2.3"

    def test_no_placeholder_is_unchanged(self) -> None:
        assert release_tag("latest", "1.2.3") == "latest"

    def test_substitution_is_idempotent(self) -> None:
        once = release_tag("v{version}", "1.0.0")
        assert release_tag(once, "1.0.0") == once


class TestParseMetadata:
    def test_valid_descriptor(self) -> None:
        result = parse_metadata(_descriptor())
        assert isinstance(result, Ok)
        metadata = result.value
        assert metadata.name == "widget"
        assert metadata.version == "1.0.0"
        assert metadata.repository.slug == "acme/widget"
        assert metadata.release_tag == "1.0.0"

    def test_version_is_not_normalised(self) -> None:
        data = _descriptor(version="2.3.0 ")
        data["binary"] = {
            "host": "https://github.com/acme/widget/releases/download/",
            "remote_path": "download/{version}/",
        }
        result = parse_metadata(data)
        assert isinstance(result, Ok)
        assert result.value.version == "2.3.0 "
        assert result.value.release_tag == "download/2.3.0 /"

    def test_missing_version(self) -> None:
        data = _descriptor()
        del data["version"]
        assert "version" in _error(data).message

    def test_missing_repository_url(self) -> None:
        error = _error(_descriptor(repository={"type": "git"}))
        assert error.message == "Missing repository.url in package.json"

    def test_repository_as_string_is_missing_url(self) -> None:
        error = _error(_descriptor(repository="acme/widget"))
        assert "repository.url" in error.message

    def test_malformed_repository_url(self) -> None:
        error = _error(_descriptor(repository={"url": "https://github.com/acme/widget"}))
        assert "repository.url" in error.message

    def test_missing_binary_host(self) -> None:
        error = _error(_descriptor(binary={"remote_path": "{version}"}))
        assert error.message == "Missing binary.host in package.json"

    def test_mismatched_binary_host_states_expected_value(self) -> None:
        error = _error(
            _descriptor(
                binary={
                    "host": "https://github.com/acme/other/releases/download/",
                    "remote_path": "{version}",
                }
            )
        )
        assert "https://github.com/acme/widget/releases/download/" in error.message

    def test_binary_host_must_match_exactly(self) -> None:
        # No trailing slash
        error = _error(
            _descriptor(
                binary={
                    "host": "https://github.com/acme/widget/releases/download",
                    "remote_path": "{version}",
                }
            )
        )
        assert error.message.startswith("Invalid binary.host")

    def test_missing_remote_path(self) -> None:
        error = _error(
            _descriptor(binary={"host": "https://github.com/acme/widget/releases/download/"})
        )
        assert "binary.remote_path" in error.message


class TestLoadMetadata:
    def test_load_valid_file(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text(json.dumps(_descriptor()), encoding="utf-8")

        result = load_metadata(path)

        assert isinstance(result, Ok)
        assert result.value.repository.repo == "widget"

    def test_missing_file(self, tmp_path: Path) -> None:
        result = load_metadata(tmp_path / "package.json")
        assert isinstance(result, Err)
        assert result.error.message.startswith("Unable to read package.json")

    def test_invalid_json(self, tmp_path: Path) -> None:
        path = tmp_path / "package.json"
        path.write_text("{not json", encoding="utf-8")

        result = load_metadata(path)

        assert isinstance(result, Err)
        assert result.error.path == path

    @pytest.mark.parametrize("content", ["[]", '"widget"', "42"])
    def test_non_object_root(self, tmp_path: Path, content: str) -> None:
        path = tmp_path / "package.json"
        path.write_text(content, encoding="utf-8")

        result = load_metadata(path)

        assert isinstance(result, Err)
        assert "JSON object" in result.error.message
