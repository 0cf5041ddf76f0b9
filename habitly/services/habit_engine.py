#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habitly - Habit Engine
Owner of the canonical habit collection.

Every mutation builds the complete next collection, persists it through the
snapshot store and only then swaps it in as the visible state. A failed write
raises PersistenceError and leaves the visible collection untouched.

The ``streak`` of each habit is a cache derived from its history and schedule
as of the last write; it is never edited directly.

Habits go in and come out as deep copies, so callers never hold a reference into
the visible collection.
"""

import asyncio
import copy
import logging
from dataclasses import replace
from datetime import date
from typing import Callable, List, Optional, Union

from habitly.config import HabitlyConfig, config as default_config
from habitly.core.database import PersistenceError, SnapshotStore, create_file_store
from habitly.core.models import (
    DuplicateIdError,
    Habit,
    HabitStatus,
    HistoryRecord,
    NotFoundError,
    new_habit_id,
    validate_enum_value,
    validate_habit,
    validate_iso_date,
    validate_record_value,
)
from habitly.core.snapshot import parse_habits, serialize_habits
from habitly.core.streaks import compute_streak, is_scheduled
from habitly.utils.datetime_utils import now_iso, parse_date, today

logger = logging.getLogger(__name__)


class HabitEngine:
    """Habit collection with atomic, persisted state transitions"""

    def __init__(self, store: SnapshotStore, clock: Optional[Callable[[], date]] = None):
        self.store = store
        self.clock = clock or today
        self._habits: List[Habit] = []
        self._loaded = False
        self._write_lock = asyncio.Lock()

    @property
    def loaded(self) -> bool:
        return self._loaded

    # ===== READ API =====

    def select_all(self) -> List[Habit]:
        """All habits, most recently created first"""
        return copy.deepcopy(self._habits)

    def select_due(self, on_date: Union[date, str, None] = None) -> List[Habit]:
        """Habits scheduled on the given date (today by default)"""
        day = parse_date(validate_iso_date(on_date)) if on_date is not None else self.clock()
        return copy.deepcopy([h for h in self._habits if is_scheduled(h.repeat_days, day)])

    def get(self, habit_id: str) -> Habit:
        return copy.deepcopy(self._habits[self._index_of(habit_id)])

    def _index_of(self, habit_id: str) -> int:
        for index, habit in enumerate(self._habits):
            if habit.id == habit_id:
                return index
        raise NotFoundError(habit_id)

    # ===== LOADING =====

    async def reload(self) -> List[Habit]:
        """Re-read and sanitize the snapshot, discarding unpersisted in-memory state"""
        async with self._write_lock:
            try:
                blob = await self.store.load()
            except PersistenceError as e:
                logger.error(f"Snapshot load failed, starting with no habits: {e}")
                blob = None

            self._habits = parse_habits(blob)
            self._loaded = True
            logger.info(f"Loaded {len(self._habits)} habits from snapshot")
            return self.select_all()

    # ===== MUTATIONS =====

    async def create(self, draft: Habit) -> Habit:
        """Validate a draft, assign id/created_at, derive its streak and insert it at the front"""
        habit = copy.deepcopy(validate_habit(draft))
        habit = replace(
            habit,
            id=habit.id or new_habit_id(),
            created_at=habit.created_at or now_iso(),
        )

        async with self._write_lock:
            if any(h.id == habit.id for h in self._habits):
                raise DuplicateIdError(habit.id)
            habit = replace(habit, streak=compute_streak(habit.repeat_days, habit.history, self.clock()))
            await self._commit([habit] + self._habits)

        logger.info(f"Created habit {habit.name!r} ({habit.id})")
        return copy.deepcopy(habit)

    async def update(self, habit: Habit) -> Habit:
        """Replace the stored habit with the same id.

        History and streak are stored as supplied; a changed schedule is not
        reconciled against them until the next recorded completion.
        """
        validated = copy.deepcopy(validate_habit(habit))

        async with self._write_lock:
            index = self._index_of(habit.id)
            current = self._habits[index]
            updated = replace(validated, created_at=current.created_at)

            next_habits = list(self._habits)
            next_habits[index] = updated
            await self._commit(next_habits)

        logger.debug(f"Updated habit {updated.id}")
        return copy.deepcopy(updated)

    async def delete(self, habit_id: str) -> None:
        async with self._write_lock:
            self._index_of(habit_id)
            await self._commit([h for h in self._habits if h.id != habit_id])

        logger.info(f"Deleted habit {habit_id}")

    async def record_completion(self, habit_id: str, on_date: Union[date, str],
                                status: Union[HabitStatus, str],
                                value: Optional[float] = None) -> Habit:
        """Upsert the record for on_date and recompute the habit's streak"""
        day = validate_iso_date(on_date)
        status = validate_enum_value(status, HabitStatus, "status")
        value = validate_record_value(value)

        async with self._write_lock:
            index = self._index_of(habit_id)
            habit = self._habits[index]

            history = [r for r in habit.history if r.date != day]
            history.append(HistoryRecord(date=day, status=status, value=value))
            history.sort(key=lambda r: r.date)

            updated = replace(
                habit,
                history=history,
                streak=compute_streak(habit.repeat_days, history, self.clock()),
            )
            next_habits = list(self._habits)
            next_habits[index] = updated
            await self._commit(next_habits)

        logger.debug(f"Recorded {status} for habit {habit_id} on {day}")
        return copy.deepcopy(updated)

    async def refresh_streaks(self) -> int:
        """Recompute every streak against today; persists only when something changed"""
        async with self._write_lock:
            reference = self.clock()
            changed = 0
            next_habits = []
            for habit in self._habits:
                streak = compute_streak(habit.repeat_days, habit.history, reference)
                if streak != habit.streak:
                    changed += 1
                    habit = replace(habit, streak=streak)
                next_habits.append(habit)

            if changed:
                await self._commit(next_habits)

        logger.info(f"Refreshed streaks as of {reference.isoformat()}: {changed} changed")
        return changed

    async def reset(self) -> None:
        """Remove every habit"""
        async with self._write_lock:
            await self._commit([])

        logger.info("All habits cleared")

    # ===== PERSISTENCE =====

    async def _commit(self, next_habits: List[Habit]) -> None:
        """Persist next_habits, then make them visible. Caller holds the write lock."""
        blob = serialize_habits(next_habits)
        try:
            saved = await self.store.save(blob)
        except (PersistenceError, OSError) as e:
            logger.error(f"Snapshot write failed: {e}")
            raise PersistenceError(f"Snapshot write failed: {e}") from e

        if not saved:
            logger.error("Snapshot write failed, keeping previous state")
            raise PersistenceError("Snapshot write failed")

        self._habits = next_habits


def create_habit_engine(cfg: Optional[HabitlyConfig] = None,
                        clock: Optional[Callable[[], date]] = None) -> HabitEngine:
    """HabitEngine backed by the configured snapshot file"""
    cfg = cfg or default_config
    return HabitEngine(create_file_store(cfg), clock=clock or (lambda: today(cfg.timezone)))


__all__ = [
    'HabitEngine',
    'create_habit_engine',
]
