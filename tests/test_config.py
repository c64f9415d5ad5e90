"""Tests for settings loading."""

from __future__ import annotations

from pathlib import Path

import pytest

from arec.config import load_settings


def test_defaults(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("AREC_ENV_FILE", raising=False)
    monkeypatch.delenv("AREC_MAX_CYCLES", raising=False)
    monkeypatch.delenv("AREC_SCRAPE_SNIPPET_CHARS", raising=False)

    settings = load_settings()

    assert settings.max_cycles == 5
    assert settings.scrape_snippet_chars == 500
    assert settings.plan_max_retries == 1


def test_env_file_override(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    env_file = tmp_path / "agent.env"
    env_file.write_text("AREC_MAX_CYCLES=3\nAREC_PLANNER=mock\n", encoding="utf-8")
    monkeypatch.setenv("AREC_ENV_FILE", str(env_file))
    monkeypatch.delenv("AREC_MAX_CYCLES", raising=False)
    monkeypatch.delenv("AREC_PLANNER", raising=False)

    settings = load_settings()

    assert settings.max_cycles == 3
    assert settings.planner == "mock"


def test_environment_variables_use_prefix(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.chdir(tmp_path)
    monkeypatch.delenv("AREC_ENV_FILE", raising=False)
    monkeypatch.setenv("AREC_SEARCH_PROVIDER", "mock")

    assert load_settings().search_provider == "mock"
