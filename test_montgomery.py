#!/usr/bin/env python3
"""
Tests for the command line interface
"""

import json

import pytest
from click.testing import CliRunner

import montgomery
from store import EntryStore


@pytest.fixture(autouse=True)
def state_dir(tmp_path, monkeypatch):
    monkeypatch.setenv("MONTGOMERY_STATE_DIR", str(tmp_path / "state"))
    monkeypatch.delenv("MONTGOMERY_STORE_KEY", raising=False)
    monkeypatch.delenv("EXCLUDED_PROJECTS", raising=False)
    return tmp_path / "state"


@pytest.fixture
def runner():
    return CliRunner()


def _batch_file(tmp_path, rows):
    path = tmp_path / "batch.json"
    path.write_text(json.dumps(rows), encoding="utf-8")
    return path


DAY = [
    {"project": "P0", "task": "T0", "date": "2014-08-18", "start": "09:00"},
    {"project": "Lunch", "task": "", "date": "2014-08-18", "start": "12:30"},
    {"project": "P0", "task": "T0", "date": "2014-08-18", "start": "13:00"},
    {"project": "Home", "task": "", "date": "2014-08-18", "start": "17:00"},
]


def test_show_without_entries(runner):
    result = runner.invoke(montgomery.main, [])

    assert result.exit_code == 0
    assert "No stored entries" in result.output


def test_import_saves_and_summarizes(runner, tmp_path):
    result = runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, DAY))])

    assert result.exit_code == 0, result.output
    assert "Saved 4 entries" in result.output
    assert "7.5" in result.output
    assert len(EntryStore().load()) == 4


def test_import_with_errors_is_not_saved(runner, tmp_path):
    rows = DAY + [{"project": "", "task": "", "date": "2014-08-18", "start": "18:00"}]

    result = runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, rows))])

    assert result.exit_code == 1
    assert "not saved" in result.output
    assert EntryStore().load() == []


def test_import_rejects_non_list(runner, tmp_path):
    path = tmp_path / "batch.json"
    path.write_text('{"project": "P0"}', encoding="utf-8")

    result = runner.invoke(montgomery.main, ["import", str(path)])

    assert result.exit_code == 1
    assert "JSON list" in result.output


def test_import_rejects_broken_json(runner, tmp_path):
    path = tmp_path / "batch.json"
    path.write_text("[{", encoding="utf-8")

    result = runner.invoke(montgomery.main, ["import", str(path)])

    assert result.exit_code == 1
    assert "not valid JSON" in result.output


def test_log_appends_to_stored_batch(runner):
    first = runner.invoke(montgomery.main, ["log", "P0", "T0", "--start", "0900", "--date", "2014-08-18"])
    second = runner.invoke(montgomery.main, ["log", "Home", "--start", "05:00 pm", "--date", "2014-08-18"])

    assert first.exit_code == 0, first.output
    assert second.exit_code == 0, second.output
    stored = EntryStore().load()
    assert [(e.project, e.task, e.start) for e in stored] == [("P0", "T0", "09:00"), ("Home", "", "17:00")]
    assert "8" in second.output


def test_log_with_bad_time_keeps_previous_batch(runner):
    runner.invoke(montgomery.main, ["log", "P0", "T0", "--start", "09:00", "--date", "2014-08-18"])

    result = runner.invoke(montgomery.main, ["log", "P0", "T1", "--start", "9.30", "--date", "2014-08-18"])

    assert result.exit_code == 1
    assert len(EntryStore().load()) == 1


def test_show_json(runner, tmp_path):
    runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, DAY))])

    result = runner.invoke(montgomery.main, ["show", "--json"])

    assert result.exit_code == 0, result.output
    payload = json.loads(result.output)
    assert payload["entries"] == [{"project": "P0", "task": "T0", "date": "2014-08-18", "minutes": 450.0}]


def test_show_minutes(runner, tmp_path):
    runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, DAY))])

    result = runner.invoke(montgomery.main, ["show", "--minutes"])

    assert result.exit_code == 0, result.output
    assert "450" in result.output


def test_clear_requires_confirmation(runner, tmp_path):
    runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, DAY))])

    declined = runner.invoke(montgomery.main, ["clear"], input="n\n")
    assert len(EntryStore().load()) == 4
    assert "Nothing cleared" in declined.output

    accepted = runner.invoke(montgomery.main, ["clear", "--yes"])
    assert accepted.exit_code == 0
    assert EntryStore().load() == []


def test_enter_submits_prompted_rows(runner, monkeypatch):
    monkeypatch.setattr(
        montgomery,
        "_prompt_rows",
        lambda today, summaries: [
            {"date": "2014-08-18", "project": "P0", "task": "T0", "start": "09:00"},
            {"date": "2014-08-18", "project": "Home", "task": "", "start": "10:30"},
        ],
    )

    result = runner.invoke(montgomery.main, ["enter"])

    assert result.exit_code == 0, result.output
    assert "1.5" in result.output
    assert len(EntryStore().load()) == 2


def test_enter_without_rows(runner, monkeypatch):
    monkeypatch.setattr(montgomery, "_prompt_rows", lambda today, summaries: [])

    result = runner.invoke(montgomery.main, ["enter"])

    assert result.exit_code == 0
    assert "No new check-ins" in result.output


def test_verbose_prints_debug_lines(runner, tmp_path):
    result = runner.invoke(montgomery.main, ["--verbose", "import", str(_batch_file(tmp_path, DAY))])

    assert result.exit_code == 0, result.output
    assert "Validated 4 row(s)" in result.output


def test_import_rejects_non_text_fields(runner, tmp_path):
    path = _batch_file(tmp_path, [{"project": "P0", "date": "2014-08-18", "start": 900}])

    result = runner.invoke(montgomery.main, ["import", str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "row 1" in result.output
    assert "start" in result.output
    assert EntryStore().load() == []


def test_import_rejects_non_utf8_file(runner, tmp_path):
    path = tmp_path / "batch.json"
    path.write_bytes(b'[{"project": "\xff\xfe"}]')

    result = runner.invoke(montgomery.main, ["import", str(path)])

    assert result.exit_code == 1
    assert isinstance(result.exception, SystemExit)
    assert "not valid JSON" in result.output


@pytest.mark.parametrize("value, shown", [("0", False), ("false", False), ("", False), ("1", True), ("TRUE", True)])
def test_debug_environment_variable(runner, tmp_path, monkeypatch, value, shown):
    monkeypatch.setenv("MONTGOMERY_DEBUG", value)

    result = runner.invoke(montgomery.main, ["import", str(_batch_file(tmp_path, DAY))])

    assert result.exit_code == 0, result.output
    assert ("Validated 4 row(s)" in result.output) is shown
