import json
import shlex
import sys
from pathlib import Path

from typer.testing import CliRunner

import stepcheck.cli.progress as progress_cli

RUNNER = CliRunner()


def _exercise(tmp_path: Path, pointer: str | None = "test/2.test.js") -> Path:
    test_dir = tmp_path / "test"
    test_dir.mkdir()
    for name in ("1.test.js", "2.test.js", "2.1.test.js", "helpers.js"):
        (test_dir / name).write_text("", encoding="utf-8")
    if pointer is not None:
        (tmp_path / ".mocharc.json").write_text(json.dumps({"spec": [pointer]}), encoding="utf-8")
    return tmp_path


def test_report_json_in_declared_mode(tmp_path: Path) -> None:
    root = _exercise(tmp_path)

    result = RUNNER.invoke(progress_cli.app, ["report", "--project-root", str(root), "--json"])

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["current"] == "2.test.js"
    assert payload["passed"] == ["1.test.js"]
    assert payload["locked"] == ["2.1.test.js"]
    assert payload["next"] == "2.1.test.js"


def test_report_table_output(tmp_path: Path) -> None:
    root = _exercise(tmp_path)

    result = RUNNER.invoke(progress_cli.app, ["report", "--project-root", str(root)])

    assert result.exit_code == 0
    assert "2.test.js" in result.stdout
    assert "Passed %" in result.stdout


def test_report_missing_pointer_exits_nonzero(tmp_path: Path) -> None:
    root = _exercise(tmp_path, pointer=None)

    result = RUNNER.invoke(progress_cli.app, ["report", "--project-root", str(root), "--json"])

    assert result.exit_code == 1
    assert json.loads(result.stdout)["error"] == "ConfigurationMissing"


def test_report_force_all_passed(tmp_path: Path) -> None:
    root = _exercise(tmp_path, pointer=None)

    result = RUNNER.invoke(
        progress_cli.app,
        ["report", "--project-root", str(root), "--force-all-passed", "--json"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["passed"] == ["1.test.js", "2.test.js", "2.1.test.js"]
    assert payload["passedPercent"] == 100


def test_report_executed_mode_runs_first_step(tmp_path: Path) -> None:
    test_dir = tmp_path / "test"
    test_dir.mkdir()
    (test_dir / "1.test.py").write_text("print('1 passing')\n", encoding="utf-8")

    result = RUNNER.invoke(
        progress_cli.app,
        ["report", "--project-root", str(tmp_path), "--mode", "executed", "--runner", shlex.quote(sys.executable), "--json"],
    )

    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["passed"] == ["1.test.py"]
    assert payload["execution"]["passed"] is True


def test_report_rejects_unknown_mode(tmp_path: Path) -> None:
    result = RUNNER.invoke(progress_cli.app, ["report", "--project-root", str(tmp_path), "--mode", "later"])

    assert result.exit_code != 0
    assert "later" in result.output


def test_steps_lists_in_order(tmp_path: Path) -> None:
    root = _exercise(tmp_path)

    result = RUNNER.invoke(progress_cli.app, ["steps", "--project-root", str(root), "--json"])

    assert result.exit_code == 0
    rows = json.loads(result.stdout)
    assert [row["identifier"] for row in rows] == ["1.test.js", "2.test.js", "2.1.test.js"]
    assert rows[2]["step"] == 2.1


def test_steps_empty_directory_message(tmp_path: Path) -> None:
    result = RUNNER.invoke(progress_cli.app, ["steps", "--project-root", str(tmp_path)])

    assert result.exit_code == 0
    assert "No numbered tests" in result.stdout
