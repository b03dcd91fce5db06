"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from github_forker.forker.config import ForkerSettings


def _clear_env(monkeypatch: pytest.MonkeyPatch) -> None:
    for name in (
        "GITHUB_FORKER_TOKEN",
        "GITHUB_BASE_URL",
        "GITHUB_WEB_URL",
        "LOG_LEVEL",
        "FORKER_RENAME_DELAY_SECONDS",
        "FORKER_PROPAGATION_DELAY_SECONDS",
        "FORKER_ISSUE_PACING_SECONDS",
        "FORKER_ISSUE_PAGE_LIMIT",
    ):
        monkeypatch.delenv(name, raising=False)


def test_settings_loads_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "GITHUB_FORKER_TOKEN=test-token",
                "LOG_LEVEL=DEBUG",
                "FORKER_ISSUE_PACING_SECONDS=0.5",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = ForkerSettings()

    assert settings.github_token == "test-token"
    assert settings.log_level == "DEBUG"
    assert settings.issue_pacing_seconds == 0.5


def test_settings_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_FORKER_TOKEN", "test-token")

    settings = ForkerSettings()

    assert settings.github_base_url == "https://api.github.com"
    assert settings.github_web_url == "https://github.com"
    assert settings.rename_delay_seconds == 2.0
    assert settings.fork_propagation_seconds == 2.0
    assert settings.issue_pacing_seconds == 1.0
    assert settings.issue_page_limit == 10


def test_settings_require_token(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError, match="GITHUB_FORKER_TOKEN is required"):
        ForkerSettings()


def test_settings_reject_negative_delay(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    _clear_env(monkeypatch)
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("GITHUB_FORKER_TOKEN", "test-token")
    monkeypatch.setenv("FORKER_ISSUE_PACING_SECONDS", "-1")

    with pytest.raises(ValidationError):
        ForkerSettings()


def test_repository_web_url_normalizes_slashes(settings: ForkerSettings) -> None:
    enterprise = settings.model_copy(update={"github_web_url": "https://ghe.example.com/"})

    assert settings.repository_web_url("octocat/widget") == "https://github.com/octocat/widget"
    assert enterprise.repository_web_url("octocat/widget") == "https://ghe.example.com/octocat/widget"
