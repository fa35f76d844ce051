from __future__ import annotations

from pathlib import Path

import pytest

from stepcheck.core.config import ProgressMode
from stepcheck.pipeline.bootstrap import ENV_PROJECT_ROOT, load_settings


def test_environment_populates_settings(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STEPCHECK_MODE", "executed")
    monkeypatch.setenv("STEPCHECK_FORCE_ALL_PASSED", "true")
    monkeypatch.setenv("STEPCHECK_RUNNER", "node --test")
    monkeypatch.setenv("STEPCHECK_TIMEOUT", "0")

    settings = load_settings(tmp_path)

    assert settings.project_root == tmp_path.resolve()
    assert settings.mode is ProgressMode.EXECUTED
    assert settings.force_all_passed is True
    assert settings.runner == ["node", "--test"]
    assert settings.timeout_seconds is None


def test_explicit_overrides_beat_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STEPCHECK_MODE", "executed")

    settings = load_settings(tmp_path, mode="declared", test_dir=None)

    assert settings.mode is ProgressMode.DECLARED
    assert settings.resolved_test_dir == (tmp_path / "test").resolve()


def test_project_root_from_environment(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv(ENV_PROJECT_ROOT, str(tmp_path))

    settings = load_settings()

    assert settings.project_root == tmp_path.resolve()


def test_dotenv_file_is_loaded(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    (tmp_path / ".env").write_text("STEPCHECK_TEST_DIR=specs\nSTEPCHECK_OUTPUT_LIMIT=123\n", encoding="utf-8")

    settings = load_settings(tmp_path)

    assert settings.resolved_test_dir == (tmp_path / "specs").resolve()
    assert settings.output_limit == 123


def test_invalid_mode_in_environment_raises(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setenv("STEPCHECK_MODE", "eventually")
    with pytest.raises(ValueError):
        load_settings(tmp_path)
