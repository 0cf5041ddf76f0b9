# services/data_export.py

import json
import logging
from pathlib import Path
from typing import Sequence

import pandas as pd

from habitly.core.models import Habit
from habitly.core.snapshot import STORAGE_KEY
from habitly.utils.datetime_utils import now_iso

logger = logging.getLogger(__name__)

CSV_COLUMNS = [
    "habit_id", "name", "goal_type", "goal_value", "date", "status", "value",
    "current_streak", "longest_streak",
]


def export_json(habits: Sequence[Habit]) -> bytes:
    export_data = {
        "export_info": {
            "format": "json",
            "storage_key": STORAGE_KEY,
            "exported_at": now_iso(),
            "habits_count": len(habits),
        },
        "habits": [h.to_dict() for h in habits],
    }
    return json.dumps(export_data, ensure_ascii=False, indent=2).encode("utf-8")


def export_history_csv(habits: Sequence[Habit]) -> bytes:
    """One row per history record"""
    rows = []
    for habit in habits:
        for record in habit.history:
            rows.append({
                "habit_id": habit.id,
                "name": habit.name,
                "goal_type": habit.goal_type,
                "goal_value": habit.goal_value,
                "date": record.date,
                "status": record.status,
                "value": record.value,
                "current_streak": habit.streak.current,
                "longest_streak": habit.streak.longest,
            })

    if not rows:
        return (",".join(CSV_COLUMNS) + "\n").encode("utf-8")

    df = pd.DataFrame(rows, columns=CSV_COLUMNS, dtype=object)
    return df.to_csv(index=False).encode("utf-8")


def write_export(data: bytes, export_dir: Path, filename: str) -> Path:
    export_dir = Path(export_dir)
    export_dir.mkdir(parents=True, exist_ok=True)
    path = export_dir / filename
    path.write_bytes(data)
    logger.info(f"Export written to {path} ({len(data)} bytes)")
    return path
