"""Tests for the authoring CLI."""

from __future__ import annotations

import yaml
from typer.testing import CliRunner

from assessment_engine.cli import app

runner = CliRunner()


def _config(tmp_path):
    path = tmp_path / "config.yaml"
    path.write_text(
        yaml.safe_dump(
            {
                "paths": {
                    "question_sets_dir": str(tmp_path / "sets"),
                    "profiles_dir": str(tmp_path / "profiles"),
                }
            }
        ),
        encoding="utf-8",
    )
    return path


def test_parse_command_previews_questions(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    source = tmp_path / "questions.txt"
    source.write_text("[PG] 2+2?\nA. 3\nB. 4 *\nC. 5\n", encoding="utf-8")

    result = runner.invoke(app, ["parse", str(source), "--config", str(_config(tmp_path))])

    assert result.exit_code == 0, result.output
    assert "2+2?" in result.output


def test_parse_command_fails_on_review_errors(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    source = tmp_path / "questions.txt"
    source.write_text("[PG] Unmarked\nA. a\nB. b\n", encoding="utf-8")

    result = runner.invoke(app, ["parse", str(source), "--config", str(_config(tmp_path))])

    assert result.exit_code == 1
    assert "No option is marked" in result.output


def test_import_and_show_state(tmp_path, monkeypatch):
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    config = _config(tmp_path)
    source = tmp_path / "questions.txt"
    source.write_text("[MC] Pick\nA. yes *\nB. no\n", encoding="utf-8")

    imported = runner.invoke(
        app, ["import", str(source), "--level", "3", "--variant", "B", "--config", str(config)]
    )
    assert imported.exit_code == 0, imported.output
    assert "L3-B" in imported.output
    assert (tmp_path / "sets" / "L3-B.jsonl").exists()

    shown = runner.invoke(app, ["show-state", "student-1", "--config", str(config)])
    assert shown.exit_code == 0
    assert "Level 1 Variant A" in shown.output
