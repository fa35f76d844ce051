from __future__ import annotations

from pathlib import Path
from unittest.mock import patch

import pytest

from apps.result_server.main import app, get_settings
from stepcheck.cli.serve import build_parser, main, settings_from_args
from stepcheck.core.config import ProgressMode


@pytest.fixture(autouse=True)
def _reset_overrides():
    yield
    app.dependency_overrides.pop(get_settings, None)


def test_parser_defaults(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.delenv("PORT", raising=False)
    args = build_parser().parse_args([])
    assert args.port == 3000
    assert args.host == "0.0.0.0"
    assert args.mode is None
    assert args.force_all_passed is None


def test_test_flag_maps_to_force_all_passed(tmp_path: Path) -> None:
    args = build_parser().parse_args(["--project-root", str(tmp_path), "--test", "--mode", "executed"])

    settings = settings_from_args(args)

    assert settings.force_all_passed is True
    assert settings.mode is ProgressMode.EXECUTED
    assert settings.project_root == tmp_path.resolve()


def test_runner_and_timeout_flags(tmp_path: Path) -> None:
    args = build_parser().parse_args(
        ["--project-root", str(tmp_path), "--runner", "node --test", "--timeout", "-1", "--test-dir", "specs"]
    )

    settings = settings_from_args(args)

    assert settings.runner == ["node", "--test"]
    assert settings.timeout_seconds is None
    assert settings.resolved_test_dir == (tmp_path / "specs").resolve()


def test_main_runs_uvicorn_with_pinned_settings(tmp_path: Path) -> None:
    with patch("stepcheck.cli.serve.uvicorn.run") as run:
        exit_code = main(["--project-root", str(tmp_path), "--port", "4100", "--test"])

    assert exit_code == 0
    run.assert_called_once()
    _, kwargs = run.call_args
    assert kwargs["port"] == 4100
    assert app.dependency_overrides[get_settings]().force_all_passed is True


def test_main_rejects_empty_runner(tmp_path: Path) -> None:
    with patch("stepcheck.cli.serve.uvicorn.run") as run, pytest.raises(SystemExit) as excinfo:
        main(["--project-root", str(tmp_path), "--runner", ""])
    assert excinfo.value.code == 2
    run.assert_not_called()
