"""Shared test fixtures."""

import os
from pathlib import Path

import pytest
import tomlkit

from glnote.models import Project
from glnote.settings import SettingsStore
from tests.fakes import RecordingNotifier, make_project


@pytest.fixture(autouse=True)
def isolated_env(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Keep real GLNOTE_* variables and any .env in the cwd out of the tests."""
    for key in list(os.environ):
        if key.startswith("GLNOTE_"):
            monkeypatch.delenv(key)
    monkeypatch.chdir(tmp_path)


@pytest.fixture
def projects() -> list[Project]:
    return [make_project(1, "B"), make_project(2, "A"), make_project(3, "C")]


@pytest.fixture
def config_path(tmp_path: Path) -> Path:
    path = tmp_path / "config" / "config.toml"
    path.parent.mkdir()
    path.write_text(tomlkit.dumps({"token": "glpat-test-token", "gitlab_url": "https://gitlab.example"}))
    return path


@pytest.fixture
def store(config_path: Path) -> SettingsStore:
    return SettingsStore(config_path)


@pytest.fixture
def notifier() -> RecordingNotifier:
    return RecordingNotifier()
