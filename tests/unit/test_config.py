"""Unit tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest
from pydantic import ValidationError

from github_label_sync.config import LabelSyncSettings


def test_settings_loads_from_dotenv(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    (tmp_path / ".env").write_text(
        "\n".join(
            [
                "LABEL_SYNC_GITHUB_TOKEN=test-token",
                "LABEL_SYNC_VERBOSE=true",
                "LABEL_SYNC_MAX_WORKERS=4",
                "",
            ]
        ),
        encoding="utf-8",
    )

    settings = LabelSyncSettings()

    assert settings.github_token == "test-token"
    assert settings.verbose is True
    assert settings.execute is False
    assert settings.max_workers == 4
    assert settings.effective_log_level == "DEBUG"


def test_settings_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LABEL_SYNC_GITHUB_TOKEN", "test-token")

    settings = LabelSyncSettings()

    assert settings.github_base_url == "https://api.github.com"
    assert settings.request_timeout == 30.0
    assert settings.max_retries == 0
    assert settings.effective_log_level == "INFO"


def test_keyword_overrides_take_precedence(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LABEL_SYNC_GITHUB_TOKEN", "env-token")

    settings = LabelSyncSettings(github_token="cli-token", execute=True)

    assert settings.github_token == "cli-token"
    assert settings.execute is True


def test_token_is_required(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError, match="LABEL_SYNC_GITHUB_TOKEN"):
        LabelSyncSettings()


def test_invalid_worker_count(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)

    with pytest.raises(ValidationError):
        LabelSyncSettings(github_token="t", max_workers=0)


def test_log_level_is_normalized(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", " warning ")

    settings = LabelSyncSettings(github_token="t")

    assert settings.log_level == "WARNING"
    assert settings.effective_log_level == "WARNING"


def test_unknown_log_level_is_rejected(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.setenv("LOG_LEVEL", "loud")

    with pytest.raises(ValidationError, match="unknown log level"):
        LabelSyncSettings(github_token="t")
