"""Test configuration and fixtures."""

from __future__ import annotations

from pathlib import Path
from unittest.mock import Mock

import pytest

from github_forker.forker.config import ForkerSettings
from github_forker.forker.github.client import GitHubClient
from github_forker.forker.request import ForkResult, RepositoryRef


@pytest.fixture
def settings(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> ForkerSettings:
    """Provide settings isolated from the developer's environment and `.env`."""
    for name in (
        "GITHUB_BASE_URL",
        "GITHUB_WEB_URL",
        "LOG_LEVEL",
        "FORKER_RENAME_DELAY_SECONDS",
        "FORKER_PROPAGATION_DELAY_SECONDS",
        "FORKER_ISSUE_PACING_SECONDS",
        "FORKER_ISSUE_PAGE_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_FORKER_TOKEN", "test-token")
    return ForkerSettings()


@pytest.fixture
def mock_github() -> Mock:
    """Provide a GitHub client double with the real client's interface."""
    github = Mock(spec=GitHubClient)
    github.get_authenticated_login.return_value = "octocat"
    return github


@pytest.fixture
def source() -> RepositoryRef:
    return RepositoryRef(owner="upstream-org", name="widget")


@pytest.fixture
def fork() -> ForkResult:
    return ForkResult(fork_owner="octocat", fork_name="widget")
