#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habitly - Snapshot storage
Byte-oriented load/save of the whole habit collection with backups
"""

import abc
import asyncio
import gzip
import logging
import shutil
import threading
from concurrent.futures import ThreadPoolExecutor
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from habitly.config import HabitlyConfig, config as default_config
from habitly.core.models import HabitError
from habitly.core.snapshot import STORAGE_KEY

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class PersistenceError(HabitError):
    """Snapshot could not be read or written"""
    pass

# ===== STORES =====

class SnapshotStore(abc.ABC):
    """Opaque blob store holding the single snapshot under one key"""

    key: str = STORAGE_KEY

    @abc.abstractmethod
    async def load(self) -> Optional[bytes]:
        """Stored blob, or None when nothing was saved yet. Raises PersistenceError."""

    @abc.abstractmethod
    async def save(self, blob: bytes) -> bool:
        """Replace the stored blob; False when the write failed"""


class MemorySnapshotStore(SnapshotStore):
    """In-process store, used for embedding and tests"""

    def __init__(self, blob: Optional[bytes] = None, key: str = STORAGE_KEY):
        self.key = key
        self.data: Dict[str, bytes] = {}
        if blob is not None:
            self.data[key] = blob
        self.fail_saves = False
        self.save_count = 0

    async def load(self) -> Optional[bytes]:
        return self.data.get(self.key)

    async def save(self, blob: bytes) -> bool:
        if self.fail_saves:
            logger.error("Snapshot save rejected (fail_saves is set)")
            return False
        self.data[self.key] = bytes(blob)
        self.save_count += 1
        return True


class BackupManager:
    """Timestamped copies of the snapshot file"""

    def __init__(self, backup_dir: Path, max_backups: int = 10):
        self.backup_dir = Path(backup_dir)
        self.max_backups = max_backups

    def create_backup(self, source_file: Path, compressed: bool = True) -> Optional[Path]:
        """Copy source_file into the backup directory"""
        if not source_file.exists():
            logger.warning(f"Source file {source_file} does not exist for backup")
            return None

        self.backup_dir.mkdir(parents=True, exist_ok=True)
        timestamp = datetime.now().strftime('%Y%m%d_%H%M%S_%f')
        backup_name = f"backup_{timestamp}.json"

        try:
            if compressed:
                backup_path = self.backup_dir / (backup_name + ".gz")
                with open(source_file, 'rb') as f_in:
                    with gzip.open(backup_path, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                backup_path = self.backup_dir / backup_name
                shutil.copy2(source_file, backup_path)
        except OSError as e:
            logger.error(f"Failed to create backup: {e}")
            return None

        logger.info(f"Backup created: {backup_path}")
        self._cleanup_old_backups()
        return backup_path

    def restore_backup(self, backup_path: Path, target_file: Path) -> bool:
        """Replace target_file with a backup, keeping a safety copy of the current file"""
        if not backup_path.exists():
            logger.error(f"Backup file {backup_path} does not exist")
            return False

        try:
            if target_file.exists():
                safety_backup = target_file.with_suffix('.safety_backup.json')
                shutil.copy2(target_file, safety_backup)
                logger.info(f"Safety backup created: {safety_backup}")

            target_file.parent.mkdir(parents=True, exist_ok=True)
            if backup_path.name.endswith('.gz'):
                with gzip.open(backup_path, 'rb') as f_in:
                    with open(target_file, 'wb') as f_out:
                        shutil.copyfileobj(f_in, f_out)
            else:
                shutil.copy2(backup_path, target_file)
        except OSError as e:
            logger.error(f"Failed to restore backup: {e}")
            return False

        logger.info(f"Backup restored from {backup_path} to {target_file}")
        return True

    def list_backups(self) -> List[Dict[str, Any]]:
        """Backups, newest first"""
        backups = []
        if not self.backup_dir.exists():
            return backups

        for backup_file in self.backup_dir.glob("backup_*.json*"):
            stat = backup_file.stat()
            backups.append({
                'name': backup_file.name,
                'path': str(backup_file),
                'size_mb': stat.st_size / (1024 * 1024),
                'created': datetime.fromtimestamp(stat.st_mtime).isoformat(),
                'compressed': backup_file.name.endswith('.gz')
            })

        # names embed the timestamp, so they sort chronologically
        return sorted(backups, key=lambda x: x['name'], reverse=True)

    def _cleanup_old_backups(self) -> None:
        backups = sorted(self.backup_dir.glob("backup_*.json*"), key=lambda p: p.name, reverse=True)
        for backup in backups[self.max_backups:]:
            try:
                backup.unlink()
                logger.info(f"Removed old backup: {backup}")
            except OSError as e:
                logger.error(f"Failed to remove old backup {backup}: {e}")


class FileSnapshotStore(SnapshotStore):
    """Snapshot kept in one JSON file; blocking I/O runs in a thread pool"""

    def __init__(self, path: Path, backup_manager: Optional[BackupManager] = None,
                 max_workers: int = 2, key: str = STORAGE_KEY):
        self.key = key
        self.path = Path(path)
        self.backup_manager = backup_manager
        self.file_lock = threading.RLock()
        self.executor = ThreadPoolExecutor(max_workers=max_workers)

    async def _run(self, func, *args):
        return await asyncio.get_running_loop().run_in_executor(self.executor, func, *args)

    def _read_sync(self) -> Optional[bytes]:
        with self.file_lock:
            if not self.path.exists():
                return None
            return self.path.read_bytes()

    def _write_sync(self, blob: bytes) -> None:
        with self.file_lock:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            # atomic replace through a temp file
            temp_file = self.path.with_suffix('.tmp')
            try:
                with open(temp_file, 'wb') as f:
                    f.write(blob)
                shutil.move(str(temp_file), str(self.path))
            except OSError:
                if temp_file.exists():
                    temp_file.unlink()
                raise

    def _backup_sync(self, compressed: bool) -> Optional[Path]:
        with self.file_lock:
            return self.backup_manager.create_backup(self.path, compressed)

    def _restore_sync(self, backup_path: Path) -> bool:
        with self.file_lock:
            return self.backup_manager.restore_backup(backup_path, self.path)

    async def load(self) -> Optional[bytes]:
        try:
            return await self._run(self._read_sync)
        except OSError as e:
            raise PersistenceError(f"Failed to read snapshot {self.path}: {e}") from e

    async def save(self, blob: bytes) -> bool:
        try:
            await self._run(self._write_sync, blob)
        except OSError as e:
            logger.error(f"Failed to write snapshot {self.path}: {e}")
            return False
        logger.debug(f"Snapshot saved to {self.path} ({len(blob)} bytes)")
        return True

    async def create_backup(self, compressed: bool = True) -> Optional[Path]:
        if not self.backup_manager:
            logger.warning("Backups are not configured for this store")
            return None
        return await self._run(self._backup_sync, compressed)

    async def restore_backup(self, backup_path: Path) -> bool:
        if not self.backup_manager:
            logger.warning("Backups are not configured for this store")
            return False
        return await self._run(self._restore_sync, Path(backup_path))

    def list_backups(self) -> List[Dict[str, Any]]:
        if not self.backup_manager:
            return []
        return self.backup_manager.list_backups()

    def close(self) -> None:
        self.executor.shutdown(wait=True)


def create_file_store(cfg: Optional[HabitlyConfig] = None) -> FileSnapshotStore:
    """FileSnapshotStore configured from HabitlyConfig"""
    cfg = cfg or default_config
    return FileSnapshotStore(
        cfg.storage.snapshot_path,
        backup_manager=BackupManager(cfg.storage.backup_dir, cfg.storage.max_backups),
        max_workers=cfg.max_workers,
    )


__all__ = [
    'PersistenceError',
    'SnapshotStore',
    'MemorySnapshotStore',
    'BackupManager',
    'FileSnapshotStore',
    'create_file_store',
]
