"""
Tests for the habitly command line tool
"""
import json

import pytest

from habitly import cli


@pytest.fixture
def run(monkeypatch, tmp_path, capsys):
    monkeypatch.setattr(cli, "setup_logging", lambda cfg=None: None)
    monkeypatch.setenv("HABITLY_TIMEZONE", "UTC")
    for name in ("data", "backups", "exports", "logs"):
        monkeypatch.setenv(f"HABITLY_{name.rstrip('s').upper()}_DIR", str(tmp_path / name))

    def _run(*argv):
        code = cli.main(["--json", *argv])
        out, err = capsys.readouterr()
        return code, (json.loads(out) if out.strip() else None), err

    return _run


class TestCli:
    def test_check_empty(self, run):
        code, payload, _ = run("check")
        assert code == 0
        assert payload["status"] == "healthy"
        assert payload["habits"] == 0

    def test_add_record_list(self, run):
        code, habit, _ = run("add", "Pushups", "--goal-type", "count", "--goal-value", "10",
                             "--days", "1,2,3,4,5", "--reminder", "07:00")
        assert code == 0
        assert habit["repeatDays"] == [1, 2, 3, 4, 5]

        code, recorded, _ = run("record", habit["id"], "--date", "2026-10-16", "--value", "12")
        assert code == 0
        assert recorded["history"] == [{"date": "2026-10-16", "status": "done", "value": 12.0}]

        code, habits, _ = run("list")
        assert [h["id"] for h in habits] == [habit["id"]]

        code, due, _ = run("due", "--date", "2026-10-18")
        assert due == []

    def test_validation_error_exit_code(self, run):
        code, payload, err = run("add", "Pushups", "--goal-type", "count")
        assert code == 1
        assert payload is None
        assert "goal_value" in err

    def test_delete_unknown(self, run):
        code, _, err = run("delete", "missing")
        assert code == 1
        assert "not found" in err

    def test_stats(self, run):
        run("add", "Read")
        code, payload, _ = run("stats")
        assert code == 0
        assert payload["today_percent"] == 0
        assert len(payload["last_7_days"]) == 7
        assert payload["most_consistent"] == "Read"

    def test_export_csv(self, run, tmp_path):
        _, habit, _ = run("add", "Read")
        run("record", habit["id"], "--date", "2026-10-15")

        code, payload, _ = run("export", "--format", "csv", "--output", "history.csv")
        assert code == 0
        exported = tmp_path / "exports" / "history.csv"
        assert payload["path"] == str(exported)
        assert "2026-10-15" in exported.read_text(encoding="utf-8")

    def test_backup_and_restore(self, run):
        code, _, err = run("backup")
        assert code == 1
        assert "No snapshot" in err

        _, habit, _ = run("add", "Read")
        code, backup, _ = run("backup")
        assert code == 0

        run("delete", habit["id"])
        _, backups, _ = run("backup", "--list")
        assert len(backups) == 1

        code, restored, _ = run("backup", "--restore", backup["path"])
        assert code == 0
        assert restored["habits"] == 1
