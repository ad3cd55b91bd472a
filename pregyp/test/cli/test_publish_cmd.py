from __future__ import annotations

import json
from pathlib import Path

import pytest
from typer.testing import CliRunner

from pregyp import __version__
from pregyp.cli.app import app
from pregyp.core.errors import ErrorCode
from pregyp.github.api import asset_upload_url
from pregyp.github.http import HttpError, MockHttpClient

runner = CliRunner()

RELEASES_URL = "https://api.github.com/repos/acme/widget/releases"
LIST_URL = f"{RELEASES_URL}?per_page=100&page=1"
UPLOAD_URL = "https://uploads.github.com/repos/acme/widget/releases/1/assets{?name,label}"


def _project(root: Path, *files: str) -> None:
    descriptor = {
        "name": "widget",
        "version": "1.0.0",
        "repository": {"url": "https://github.com/acme/widget.git"},
        "binary": {
            "host": "https://github.com/acme/widget/releases/download/",
            "remote_path": "{version}",
        },
    }
    (root / "package.json").write_text(json.dumps(descriptor), encoding="utf-8")
    stage = root / "build" / "stage" / "1.0.0"
    stage.mkdir(parents=True)
    for name in files:
        (stage / name).write_bytes(b"bin")


def _release_payload(*, draft: bool) -> dict[str, object]:
    return {
        "id": 1,
        "tag_name": "1.0.0",
        "upload_url": UPLOAD_URL,
        "draft": draft,
        "prerelease": False,
        "assets": [],
    }


@pytest.fixture
def http(monkeypatch: pytest.MonkeyPatch) -> MockHttpClient:
    import pregyp.cli.commands.publish_cmd as publish_cmd

    client = MockHttpClient()

    def fake_client(**_: object) -> MockHttpClient:
        return client

    monkeypatch.setattr(publish_cmd, "RealHttpClient", fake_client)
    return client


def test_no_arguments_prints_usage(http: MockHttpClient) -> None:
    result = runner.invoke(app, [])
    assert "publish" in result.output
    assert http.calls == []


def test_help_command() -> None:
    result = runner.invoke(app, ["help"])
    assert result.exit_code == 0
    assert "Usage: pregyp-github publish" in result.output


def test_version() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_missing_token(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("GH_TOKEN", raising=False)

    result = runner.invoke(app, ["publish"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert "GH_TOKEN environment variable not found" in result.output
    assert http.calls == []


def test_publish_defaults_to_draft(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    _project(tmp_path, "a.zip")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GH_TOKEN", "secret")
    http.set_response("GET", LIST_URL, [])
    http.set_response("POST", RELEASES_URL, _release_payload(draft=True))
    http.set_response("POST", asset_upload_url(UPLOAD_URL, "a.zip"), {"name": "a.zip"})

    result = runner.invoke(app, ["publish"])

    assert result.exit_code == 0, result.output
    create = http.calls_for("POST", RELEASES_URL)[0]
    assert create.body["draft"] is True  # type: ignore[index]
    assert create.headers["Authorization"] == "token secret"


def test_publish_release_flag(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    _project(tmp_path, "a.zip")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GH_TOKEN", "secret")
    http.set_response("GET", LIST_URL, [])
    http.set_response("POST", RELEASES_URL, _release_payload(draft=False))
    http.set_response("POST", asset_upload_url(UPLOAD_URL, "a.zip"), {"name": "a.zip"})

    result = runner.invoke(app, ["publish", "-r"])

    assert result.exit_code == 0, result.output
    assert http.calls_for("POST", RELEASES_URL)[0].body["draft"] is False  # type: ignore[index]


def test_empty_stage_exit_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    _project(tmp_path)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GH_TOKEN", "secret")

    result = runner.invoke(app, ["publish"])

    assert result.exit_code == int(ErrorCode.IO_ERROR)
    assert "No files found" in result.output


def test_remote_error_exit_code(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    _project(tmp_path, "a.zip")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GH_TOKEN", "secret")
    http.set_response("GET", LIST_URL, HttpError(url=LIST_URL, status=401, message="Bad creds"))

    result = runner.invoke(app, ["publish"])

    assert result.exit_code == int(ErrorCode.NETWORK_ERROR)
    assert "Bad creds" in result.output


def test_invalid_config_file(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch, http: MockHttpClient
) -> None:
    _project(tmp_path, "a.zip")
    (tmp_path / ".pregyp.toml").write_text("[publish\n", encoding="utf-8")
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GH_TOKEN", "secret")

    result = runner.invoke(app, ["publish"])

    assert result.exit_code == int(ErrorCode.USER_ERROR)
    assert http.calls == []
