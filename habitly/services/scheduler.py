# services/scheduler.py

import logging
from pathlib import Path
from typing import Optional

from apscheduler.schedulers.asyncio import AsyncIOScheduler
from apscheduler.triggers.interval import IntervalTrigger

from habitly.config import HabitlyConfig, config as default_config
from habitly.core.database import FileSnapshotStore

logger = logging.getLogger(__name__)

BACKUP_JOB_ID = "periodic_backup"


class BackupScheduler:
    """Periodic snapshot backups. Streaks are never recomputed here."""

    def __init__(self, store: FileSnapshotStore, interval_hours: int = 6):
        self.store = store
        self.interval_hours = interval_hours
        self.scheduler = AsyncIOScheduler()
        self.scheduler.add_job(
            self.run_backup,
            IntervalTrigger(hours=interval_hours),
            id=BACKUP_JOB_ID,
            replace_existing=True,
        )

    @property
    def running(self) -> bool:
        return self.scheduler.running

    async def run_backup(self) -> Optional[Path]:
        backup_path = await self.store.create_backup()
        if backup_path:
            logger.info(f"Periodic backup completed: {backup_path}")
        else:
            logger.warning("Periodic backup produced no file")
        return backup_path

    def start(self) -> None:
        self.scheduler.start()
        logger.info(f"Backup scheduler started (every {self.interval_hours}h)")

    def shutdown(self) -> None:
        if self.scheduler.running:
            self.scheduler.shutdown(wait=False)
            logger.info("Backup scheduler stopped")


def create_backup_scheduler(store: FileSnapshotStore, cfg: Optional[HabitlyConfig] = None) -> BackupScheduler:
    cfg = cfg or default_config
    return BackupScheduler(store, interval_hours=cfg.storage.backup_interval_hours)
