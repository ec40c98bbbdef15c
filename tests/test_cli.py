"""CLI tests."""

from __future__ import annotations

import json
from pathlib import Path

from typer.testing import CliRunner

from tfs_analyzer import __version__
from tfs_analyzer.cli import app

runner = CliRunner()

CLEAN_SCRIPT = "\n".join(
    [
        "local movement = MoveEvent()",
        "function movement.onStepIn(creature, item, position, fromPosition)",
        "  return true",
        "end",
        "movement:register()",
    ]
)

LEAKY_SCRIPT = "\n".join(
    [
        'local password = "hunter22"',
        "local t = [1, 2]",
        "function onUse(cid, item)",
        "end",
    ]
)


def test_root_help_works() -> None:
    result = runner.invoke(app, ["--help"])
    assert result.exit_code == 0
    assert "Analyze The Forgotten Server" in result.stdout
    assert "analyze" in result.stdout
    assert "detect" in result.stdout
    assert "config-init" in result.stdout


def test_version_flag() -> None:
    result = runner.invoke(app, ["--version"])
    assert result.exit_code == 0
    assert result.stdout.strip() == __version__


def test_analyze_file_json(tmp_path: Path) -> None:
    script = tmp_path / "stepin.lua"
    script.write_text(CLEAN_SCRIPT, encoding="utf-8")

    result = runner.invoke(
        app, ["analyze", str(script), "--format", "json", "--project", str(tmp_path)]
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["format"] == "revscript"
    assert payload["moduleType"] == "movement"
    assert payload["scores"]["overall"] == 100
    assert payload["meta"]["source"] == str(script)


def test_analyze_stdin_human() -> None:
    result = runner.invoke(app, ["analyze", "--stdin"], input=CLEAN_SCRIPT)
    assert result.exit_code == 0
    assert "stdin: 100/100 (GOOD)" in result.stdout


def test_analyze_directory_respects_include_and_exclude(tmp_path: Path) -> None:
    scripts = tmp_path / "scripts"
    (scripts / "lib").mkdir(parents=True)
    (scripts / "stepin.lua").write_text(CLEAN_SCRIPT, encoding="utf-8")
    (scripts / "lib" / "helpers.lua").write_text(LEAKY_SCRIPT, encoding="utf-8")
    (scripts / "notes.txt").write_text("not a script", encoding="utf-8")

    result = runner.invoke(
        app,
        [
            "analyze",
            str(scripts),
            "--format",
            "json",
            "--exclude",
            "lib/*",
            "--project",
            str(tmp_path),
        ],
    )
    assert result.exit_code == 0
    payload = json.loads(result.stdout)
    assert payload["meta"]["source"] == str(scripts / "stepin.lua")


def test_analyze_fail_below_exits_nonzero(tmp_path: Path) -> None:
    script = tmp_path / "leaky.lua"
    script.write_text(LEAKY_SCRIPT, encoding="utf-8")

    result = runner.invoke(
        app,
        ["analyze", str(script), "--fail-below", "90", "--project", str(tmp_path)],
    )
    assert result.exit_code == 1
    assert "SECURITY_LEAKAGE" in result.stdout


def test_analyze_empty_file_is_rejected(tmp_path: Path) -> None:
    script = tmp_path / "empty.lua"
    script.write_text("", encoding="utf-8")
    result = runner.invoke(app, ["analyze", str(script), "--project", str(tmp_path)])
    assert result.exit_code == 2


def test_analyze_rejects_unknown_module_type(tmp_path: Path) -> None:
    result = runner.invoke(
        app,
        ["analyze", "--stdin", "--module-type", "bogus", "--project", str(tmp_path)],
        input=CLEAN_SCRIPT,
    )
    assert result.exit_code == 2


def test_analyze_requires_input(tmp_path: Path) -> None:
    result = runner.invoke(app, ["analyze", "--project", str(tmp_path)])
    assert result.exit_code == 2


def test_detect_command_json(tmp_path: Path) -> None:
    script = tmp_path / "actions.xml"
    script.write_text(
        '<actions><action itemid="2050" script="potion.lua"/></actions>', encoding="utf-8"
    )

    result = runner.invoke(app, ["detect", str(script), "--format", "json"])
    assert result.exit_code == 0
    assert json.loads(result.stdout) == {"format": "xml", "moduleType": "action"}


def test_detect_command_stdin_human() -> None:
    result = runner.invoke(app, ["detect", "--stdin"], input=CLEAN_SCRIPT)
    assert result.exit_code == 0
    assert "format: revscript" in result.stdout
    assert "module: movement" in result.stdout


def test_analyze_no_timestamp_output_is_identical_across_runs() -> None:
    args = ["analyze", "--stdin", "--format", "json", "--no-timestamp"]
    first = runner.invoke(app, args, input=CLEAN_SCRIPT)
    second = runner.invoke(app, args, input=CLEAN_SCRIPT)
    assert first.exit_code == 0
    assert first.stdout == second.stdout
    assert "generated_at" not in json.loads(first.stdout)["meta"]
