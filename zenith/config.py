#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Configuration
Centralized configuration with validation

Version: 1.0.0
"""

import os
import sys
from pathlib import Path
from typing import Optional, Dict, Any
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
    """Document store configuration"""
    data_dir: Path
    export_dir: Path
    data_file: str = "planner_data.json"
    namespace: str = "zenith"

    @property
    def path(self) -> Path:
        return self.data_dir / self.data_file


@dataclass
class PlannerSettings:
    """Runtime planner behaviour"""
    timezone: str = "UTC"
    focus_tick_seconds: float = 1.0
    chart_height: int = 150


@dataclass
class SettingsDefaults:
    """Defaults written into the settings document"""
    work_start: str = "09:00"
    work_end: str = "17:00"
    daily_capacity: int = 5
    pomodoro_length: int = 25
    break_length: int = 5

    def to_dict(self) -> Dict[str, Any]:
        return {
            "workStart": self.work_start,
            "workEnd": self.work_end,
            "dailyCapacity": self.daily_capacity,
            "pomodoroLength": self.pomodoro_length,
            "breakLength": self.break_length,
        }


DEFAULT_SETTINGS = SettingsDefaults()


class PlannerConfig:
    """Main configuration object"""

    def __init__(self, env: Optional[Dict[str, str]] = None):
        self._env = env
        self.environment = Environment(self._get('ZENITH_ENVIRONMENT', 'development'))
        self._load_config()
        self._validate_config()

    def _get(self, key: str, default: Optional[str] = None) -> Optional[str]:
        if self._env is not None:
            return self._env.get(key, default)
        return os.getenv(key, default)

    def _load_config(self):
        """Load configuration from environment variables"""

        self.storage = StorageConfig(
            data_dir=Path(self._get('ZENITH_DATA_DIR', 'data')),
            export_dir=Path(self._get('ZENITH_EXPORT_DIR', 'exports')),
            data_file=self._get('ZENITH_DATA_FILE', 'planner_data.json'),
            namespace=self._get('ZENITH_NAMESPACE', 'zenith'),
        )

        self.planner = PlannerSettings(
            timezone=self._get('ZENITH_TIMEZONE', 'UTC'),
            focus_tick_seconds=float(self._get('ZENITH_FOCUS_TICK_SECONDS', '1')),
            chart_height=int(self._get('ZENITH_CHART_HEIGHT', '150')),
        )

        # Logging
        self.log_level = LogLevel(self._get('ZENITH_LOG_LEVEL', 'INFO').upper())
        self.log_to_file = self._get('ZENITH_LOG_TO_FILE', 'false').lower() == 'true'
        self.log_dir = Path(self._get('ZENITH_LOG_DIR', 'logs'))
        self.log_format = self._get(
            'ZENITH_LOG_FORMAT',
            '%(asctime)s [%(levelname)s] %(name)s: %(message)s'
        )

    def _validate_config(self):
        """Validate configuration"""
        errors = []

        if self.planner.timezone not in pytz.all_timezones_set:
            errors.append(f"Unknown timezone: {self.planner.timezone}")

        if self.planner.focus_tick_seconds <= 0:
            errors.append("ZENITH_FOCUS_TICK_SECONDS must be positive")

        if self.planner.chart_height <= 0:
            errors.append("ZENITH_CHART_HEIGHT must be positive")

        if not self.storage.namespace.strip():
            errors.append("ZENITH_NAMESPACE must not be empty")

        if errors:
            raise ValueError("Configuration errors:\n" + "\n".join(f"• {error}" for error in errors))

    @property
    def timezone(self):
        return pytz.timezone(self.planner.timezone)

    def ensure_directories(self):
        """Create the working directories"""
        directories = [self.storage.data_dir, self.storage.export_dir]
        if self.log_to_file:
            directories.append(self.log_dir)

        for directory in directories:
            directory.mkdir(parents=True, exist_ok=True)

    def get_logging_config(self, verbose: bool = False) -> Dict[str, Any]:
        """Build a logging.config.dictConfig dictionary (DEBUG everywhere when verbose)"""
        level = LogLevel.DEBUG.value if verbose else self.log_level.value
        handlers = ['console']
        if self.log_to_file:
            handlers.append('file')

        logging_config = {
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
                    'level': level,
                    'formatter': 'default',
                    'stream': sys.stderr
                },
            },
            'loggers': {
                '': {
                    'level': level,
                    'handlers': handlers,
                    'propagate': False
                },
                'asyncio': {
                    'level': 'WARNING',
                    'handlers': handlers,
                    'propagate': False
                },
            }
        }

        if self.log_to_file:
            logging_config['handlers']['file'] = {
                'class': 'logging.handlers.RotatingFileHandler',
                'level': level,
                'formatter': 'default',
                'filename': str(self.log_dir / f"zenith_{self.environment.value}.log"),
                'maxBytes': 10485760,  # 10MB
                'backupCount': 5,
                'encoding': 'utf-8'
            }

        return logging_config

    def to_dict(self) -> Dict[str, Any]:
        """Serialize configuration to a dictionary"""
        return {
            'environment': self.environment.value,
            'storage': {
                'path': str(self.storage.path),
                'export_dir': str(self.storage.export_dir),
                'namespace': self.storage.namespace,
            },
            'planner': {
                'timezone': self.planner.timezone,
                'focus_tick_seconds': self.planner.focus_tick_seconds,
                'chart_height': self.planner.chart_height,
            },
            'log_level': self.log_level.value,
            'log_to_file': self.log_to_file,
        }


__all__ = [
    'Environment',
    'LogLevel',
    'StorageConfig',
    'PlannerSettings',
    'SettingsDefaults',
    'DEFAULT_SETTINGS',
    'PlannerConfig',
]
