#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Habitly - Configuration
Centralized environment-driven configuration with validation
"""

import os
import sys
from pathlib import Path
from typing import Dict, Any
from dataclasses import dataclass
from enum import Enum

import pytz


class Environment(Enum):
    """Runtime environments"""
    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"


class LogLevel(Enum):
    """Logging levels"""
    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class StorageConfig:
    """Snapshot storage configuration"""
    data_dir: Path
    backup_dir: Path
    snapshot_name: str = "habitly_habits_v1.json"
    backup_interval_hours: int = 6
    max_backups: int = 10

    @property
    def snapshot_path(self) -> Path:
        return self.data_dir / self.snapshot_name


def _env_flag(key: str, default: str) -> bool:
    return os.getenv(key, default).lower() == 'true'


class HabitlyConfig:
    """Main configuration object"""

    def __init__(self):
        self._load_config()
        self._validate_config()

    def _load_config(self):
        """Read configuration from environment variables"""
        errors = []

        try:
            self.environment = Environment(os.getenv('ENVIRONMENT', 'development'))
        except ValueError:
            errors.append(f"ENVIRONMENT must be one of {[e.value for e in Environment]}")
            self.environment = Environment.DEVELOPMENT

        try:
            self.log_level = LogLevel(os.getenv('LOG_LEVEL', 'INFO').upper())
        except ValueError:
            errors.append(f"LOG_LEVEL must be one of {[l.value for l in LogLevel]}")
            self.log_level = LogLevel.INFO

        # Directories
        self.data_dir = Path(os.getenv('HABITLY_DATA_DIR', 'data'))
        self.backup_dir = Path(os.getenv('HABITLY_BACKUP_DIR', 'backups'))
        self.export_dir = Path(os.getenv('HABITLY_EXPORT_DIR', 'exports'))
        self.log_dir = Path(os.getenv('HABITLY_LOG_DIR', 'logs'))

        self.timezone = os.getenv('HABITLY_TIMEZONE', 'UTC')

        try:
            self.storage = StorageConfig(
                data_dir=self.data_dir,
                backup_dir=self.backup_dir,
                backup_interval_hours=int(os.getenv('BACKUP_INTERVAL_HOURS', 6)),
                max_backups=int(os.getenv('MAX_BACKUPS', 10)),
            )
            self.max_workers = int(os.getenv('MAX_WORKERS', 2))
        except ValueError as e:
            errors.append(f"Numeric setting is not an integer: {e}")
            self.storage = StorageConfig(data_dir=self.data_dir, backup_dir=self.backup_dir)
            self.max_workers = 2

        # Logging
        self.log_to_file = _env_flag('LOG_TO_FILE', 'false')
        self.log_format = os.getenv(
            'LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

        self._load_errors = errors

    def _validate_config(self):
        """Validate loaded values, reporting every problem at once"""
        errors = list(self._load_errors)

        if self.timezone not in pytz.all_timezones_set:
            errors.append(f"HABITLY_TIMEZONE '{self.timezone}' is not a known timezone")

        if self.storage.max_backups < 1:
            errors.append("MAX_BACKUPS must be at least 1")

        if self.storage.backup_interval_hours < 1:
            errors.append("BACKUP_INTERVAL_HOURS must be at least 1")

        if self.max_workers < 1:
            errors.append("MAX_WORKERS must be at least 1")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"- {error}" for error in errors))

    def get_logging_config(self) -> Dict[str, Any]:
        """Build a logging.config.dictConfig mapping"""
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        config_dict = {
            'version': 1,
            'disable_existing_loggers': False,
            'formatters': {
                'default': {
                    'format': self.log_format,
                    'datefmt': '%Y-%m-%d %H:%M:%S'
                }
            },
            'handlers': {
                'console': {
                    'class': 'logging.StreamHandler',
                    'level': self.log_level.value,
                    'formatter': 'default',
                    'stream': sys.stderr
                },
            },
            'loggers': {
                '': {
                    'level': self.log_level.value,
                    'handlers': handlers,
                    'propagate': False
                },
                'apscheduler': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
            }
        }

        if self.log_to_file:
            config_dict['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': self.log_level.value,
                'formatter': 'default',
                'filename': str(self.log_dir / f"habitly_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return config_dict

    def to_dict(self) -> Dict[str, Any]:
        """Printable configuration summary"""
        return {
            'environment': self.environment.value,
            'timezone': self.timezone,
            'snapshot_path': str(self.storage.snapshot_path),
            'backup_dir': str(self.backup_dir),
            'export_dir': str(self.export_dir),
            'max_backups': self.storage.max_backups,
            'backup_interval_hours': self.storage.backup_interval_hours,
            'log_level': self.log_level.value,
            'log_to_file': self.log_to_file,
        }


# Global configuration instance
config = HabitlyConfig()

__all__ = [
    'config',
    'HabitlyConfig',
    'Environment',
    'LogLevel',
    'StorageConfig',
]
