"""
Tests for JSON and CSV exports
"""
import csv
import io
import json

from habitly.core.models import Habit, HistoryRecord, Streak
from habitly.core.snapshot import STORAGE_KEY
from habitly.services.data_export import CSV_COLUMNS, export_history_csv, export_json, write_export


def sample_habits():
    return [
        Habit(
            id="h1",
            name="Pushups",
            goal_type="count",
            goal_value=20,
            created_at="2026-10-01T07:00:00Z",
            streak=Streak(current=1, longest=2),
            history=[
                HistoryRecord(date="2026-10-14", status="done", value=22),
                HistoryRecord(date="2026-10-15", status="skip"),
            ],
        ),
        Habit(id="h2", name="Café ☕", created_at="2026-10-02T07:00:00Z"),
    ]


def read_rows(data: bytes):
    return list(csv.DictReader(io.StringIO(data.decode("utf-8"))))


class TestExportJson:
    def test_document_shape(self):
        data = json.loads(export_json(sample_habits()))

        assert data["export_info"]["format"] == "json"
        assert data["export_info"]["storage_key"] == STORAGE_KEY
        assert data["export_info"]["habits_count"] == 2
        assert data["export_info"]["exported_at"].endswith("Z")
        assert [h["id"] for h in data["habits"]] == ["h1", "h2"]
        assert data["habits"][1]["name"] == "Café ☕"


class TestExportCsv:
    def test_one_row_per_record(self):
        rows = read_rows(export_history_csv(sample_habits()))

        assert len(rows) == 2
        assert list(rows[0]) == CSV_COLUMNS
        assert rows[0]["habit_id"] == "h1"
        assert rows[0]["date"] == "2026-10-14"
        assert rows[0]["value"] == "22"
        assert rows[1]["status"] == "skip"
        assert rows[1]["value"] == ""
        assert rows[1]["longest_streak"] == "2"

    def test_no_history_gives_header_only(self):
        data = export_history_csv([Habit(id="h2", name="Walk")])
        assert data.decode("utf-8").strip() == ",".join(CSV_COLUMNS)


class TestWriteExport:
    def test_creates_directory(self, tmp_path):
        path = write_export(b"{}", tmp_path / "exports" / "nested", "out.json")
        assert path.read_bytes() == b"{}"
