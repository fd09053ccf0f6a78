"""Unit tests for repository/owner inference."""

from __future__ import annotations

import subprocess
from pathlib import Path

import pytest

from labelr import repo_info
from labelr.errors import TargetResolutionError
from labelr.repo_info import EnvLookup, infer_repo_info, parse_remote_url


@pytest.mark.parametrize(
    ("url", "expected"),
    [
        ("https://github.com/rgreinho/labelr.git", ("labelr", "rgreinho")),
        ("https://github.com/rgreinho/labelr", ("labelr", "rgreinho")),
        ("git@github.com:rgreinho/labelr.git", ("labelr", "rgreinho")),
        ("ssh://git@github.com/rgreinho/labelr.git\n", ("labelr", "rgreinho")),
        ("https://ghe.example.com/org/sub/project.git", ("project", "sub")),
        ("/srv/git/labelr.git", ("labelr", "git")),
        ("labelr.git", ("labelr", None)),
    ],
)
def test_parse_remote_url(url: str, expected: tuple[str, str | None]) -> None:
    assert parse_remote_url(url) == expected


@pytest.mark.parametrize("url", ["", "   ", "https://github.com/"])
def test_parse_remote_url_rejects_unusable_urls(url: str) -> None:
    with pytest.raises(ValueError):
        parse_remote_url(url)


def _no_remote(path: Path) -> tuple[str, str | None]:
    raise ValueError("not a git repository")


def _env(values: dict[str, str]) -> EnvLookup:
    return values.get


def test_remote_metadata_wins(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(
        repo_info, "get_repo_info_from_remote", lambda path: ("labelr", "rgreinho")
    )

    result = infer_repo_info(
        tmp_path, owner="someone", env=_env({"GITHUB_USER": "env-user"})
    )

    assert result == ("labelr", "rgreinho")


def test_remote_without_owner_falls_back_to_organization(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", lambda path: ("labelr", None))

    assert infer_repo_info(tmp_path, organization="octo-org") == ("labelr", "octo-org")
    assert infer_repo_info(
        tmp_path, organization="octo-org", env=_env({"GITHUB_ORGANIZATION": "env-org"})
    ) == ("labelr", "env-org")


def test_fallback_uses_directory_name_and_env_owner(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", _no_remote)
    checkout = tmp_path / "my-project"
    checkout.mkdir()

    result = infer_repo_info(checkout, owner="cli-owner", env=_env({"GITHUB_USER": "env-user"}))

    assert result == ("my-project", "env-user")


def test_fallback_uses_explicit_owner_without_env(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", _no_remote)
    checkout = tmp_path / "my-project"
    checkout.mkdir()

    assert infer_repo_info(checkout, owner="cli-owner") == ("my-project", "cli-owner")


def test_fallback_uses_organization_when_no_owner(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", _no_remote)
    checkout = tmp_path / "my-project"
    checkout.mkdir()

    assert infer_repo_info(
        checkout, organization="cli-org", env=_env({"GITHUB_ORGANIZATION": "env-org"})
    ) == ("my-project", "env-org")
    assert infer_repo_info(checkout, organization="cli-org") == ("my-project", "cli-org")


def test_no_owner_or_organization_is_an_error(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", _no_remote)

    with pytest.raises(TargetResolutionError, match="no owner name or organization"):
        infer_repo_info(tmp_path)


def test_missing_path_is_an_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(repo_info, "get_repo_info_from_remote", _no_remote)

    with pytest.raises(TargetResolutionError, match="does not exist"):
        infer_repo_info(tmp_path / "missing", owner="someone")


def test_git_remote_is_read_from_origin(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[list[str]] = []

    def fake_run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        calls.append(cmd)
        return subprocess.CompletedProcess(
            cmd, 0, stdout="git@github.com:rgreinho/labelr-rs.git\n", stderr=""
        )

    monkeypatch.setattr(repo_info.subprocess, "run", fake_run)

    assert repo_info.get_repo_info_from_remote(tmp_path) == ("labelr-rs", "rgreinho")
    assert calls == [["git", "-C", str(tmp_path), "config", "--get", "remote.origin.url"]]


def test_git_failure_becomes_value_error(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    def fake_run(cmd: list[str], **kwargs: object) -> subprocess.CompletedProcess[str]:
        raise subprocess.CalledProcessError(1, cmd)

    monkeypatch.setattr(repo_info.subprocess, "run", fake_run)

    with pytest.raises(ValueError, match="cannot read the origin remote"):
        repo_info.get_repo_info_from_remote(tmp_path)
