#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Zenith Planner - Document Store
Namespaced key -> JSON value storage with best-effort writes

Every top-level entity lives under its own key. Writes replace the whole
value for a key. Backend failures are logged and counted but never raised:
a failed write is dropped and a failed read returns None.

Version: 1.0.0
"""

import copy
import json
import logging
import threading
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, List, Optional

from zenith.config import DEFAULT_SETTINGS
from zenith.core.models import LifeArea

logger = logging.getLogger(__name__)

# ===== EXCEPTIONS =====

class StorageError(Exception):
    """Base error for document store failures"""
    pass

class StorageUnavailableError(StorageError):
    """The backend rejected a read or write (disabled, full, unreadable)"""
    pass

# ===== KEYS =====

class StorageKeys:
    """The known top-level keys, prefixed with a namespace"""

    NAMES = {
        'USER': 'user',
        'TASKS': 'tasks',
        'HABITS': 'habits',
        'GOALS': 'goals',
        'TIME_BLOCKS': 'timeblocks',
        'DAILY_DATA': 'daily_data',
        'WEEKLY_OBJECTIVES': 'weekly_objectives',
        'SETTINGS': 'settings',
        'THEME': 'theme',
    }

    def __init__(self, namespace: str = "zenith"):
        self.namespace = namespace
        for attr, suffix in self.NAMES.items():
            setattr(self, attr, f"{namespace}_{suffix}")

    def all(self) -> List[str]:
        return [getattr(self, attr) for attr in self.NAMES]

    def __contains__(self, key: str) -> bool:
        return key in self.all()


def empty_goals() -> Dict[str, Any]:
    return {
        'yearly': [],
        'monthly': [],
        'lifeAreas': {area.value: [] for area in LifeArea},
    }

# ===== STORE =====

@dataclass
class StoreStats:
    reads: int = 0
    writes: int = 0
    removes: int = 0
    failed_operations: int = 0
    last_write: Optional[str] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            'reads': self.reads,
            'writes': self.writes,
            'removes': self.removes,
            'failed_operations': self.failed_operations,
            'last_write': self.last_write,
        }


class DocumentStore(ABC):
    """
    Base document store

    Subclasses implement the raw ``_read``/``_write``/``_delete`` calls and may
    raise anything; ``get``/``set``/``remove`` turn failures into logged no-ops.
    """

    def __init__(self, namespace: str = "zenith"):
        self.keys = StorageKeys(namespace)
        self.stats = StoreStats()

    @abstractmethod
    def _read(self, key: str) -> Optional[str]:
        ...

    @abstractmethod
    def _write(self, key: str, payload: str) -> None:
        ...

    @abstractmethod
    def _delete(self, key: str) -> None:
        ...

    @abstractmethod
    def stored_keys(self) -> List[str]:
        ...

    def get(self, key: str) -> Any:
        """Parsed value for a key, or None when absent or unreadable"""
        try:
            payload = self._read(key)
            self.stats.reads += 1
            if payload is None:
                return None
            return json.loads(payload)
        except Exception as e:
            self.stats.failed_operations += 1
            logger.error(f"❌ Error reading from storage [{key}]: {e}")
            return None

    def set(self, key: str, value: Any) -> bool:
        """Store a JSON-serializable value; returns False when the write was dropped"""
        try:
            payload = json.dumps(value, ensure_ascii=False)
            self._write(key, payload)
            self.stats.writes += 1
            self.stats.last_write = datetime.now().isoformat()
            logger.debug(f"💾 Stored [{key}]")
            return True
        except Exception as e:
            self.stats.failed_operations += 1
            logger.error(f"❌ Error writing to storage [{key}]: {e}")
            return False

    def remove(self, key: str) -> bool:
        try:
            self._delete(key)
            self.stats.removes += 1
            return True
        except Exception as e:
            self.stats.failed_operations += 1
            logger.error(f"❌ Error removing from storage [{key}]: {e}")
            return False

    def clear(self) -> None:
        """Remove every known planner key (other keys are left alone)"""
        for key in self.keys.all():
            self.remove(key)
        logger.info("🧹 Planner storage cleared")

    def health_check(self) -> Dict[str, Any]:
        status = "healthy" if self.stats.failed_operations == 0 else "warning"
        return {
            'status': status,
            'backend': type(self).__name__,
            'keys': len(self.stored_keys()),
            'stats': self.stats.to_dict(),
        }


class MemoryDocumentStore(DocumentStore):
    """In-process store; values are kept serialized so callers never share state"""

    def __init__(self, namespace: str = "zenith", initial: Optional[Dict[str, Any]] = None):
        super().__init__(namespace)
        self._data: Dict[str, str] = {}
        for key, value in (initial or {}).items():
            self._data[key] = json.dumps(value)

    def _read(self, key: str) -> Optional[str]:
        return self._data.get(key)

    def _write(self, key: str, payload: str) -> None:
        self._data[key] = payload

    def _delete(self, key: str) -> None:
        self._data.pop(key, None)

    def stored_keys(self) -> List[str]:
        return list(self._data)


class JsonFileDocumentStore(DocumentStore):
    """
    Whole key map kept in a single JSON file

    The file is rewritten atomically through a temp file on every write.
    A file that cannot be decoded or parsed is moved aside and the store starts
    empty; an unreadable one is left in place and the store starts empty too.
    """

    def __init__(self, path: Path, namespace: str = "zenith", backup_dir: Optional[Path] = None):
        super().__init__(namespace)
        self.path = Path(path)
        self.backup_dir = Path(backup_dir) if backup_dir else self.path.parent / "backups"
        self._lock = threading.RLock()
        self._data: Dict[str, Any] = {}
        self._load()

    def _load(self):
        """Load the key map from disk"""
        try:
            if not self.path.exists():
                logger.info(f"📂 Data file {self.path} not found, starting empty")
                self._data = {}
                return

            with open(self.path, 'r', encoding='utf-8') as f:
                data = json.load(f)

            if not isinstance(data, dict):
                logger.warning("⚠️ Invalid data file format, starting empty")
                self._move_aside()
                self._data = {}
                return

            self._data = data
            logger.info(f"📂 Loaded {len(data)} keys from {self.path}")

        except (json.JSONDecodeError, UnicodeDecodeError) as e:
            logger.error(f"❌ Cannot decode {self.path}: {e}")
            self._move_aside()
            self._data = {}
        except OSError as e:
            logger.error(f"❌ Cannot read {self.path}: {e}")
            self._data = {}

    def _move_aside(self):
        try:
            self.backup_dir.mkdir(parents=True, exist_ok=True)
            backup_name = f"corrupted_backup_{datetime.now().strftime('%Y%m%d_%H%M%S')}.json"
            backup_path = self.backup_dir / backup_name
            self.path.replace(backup_path)
            logger.warning(f"🔄 Corrupted data file moved to {backup_path}")
        except OSError as e:
            logger.error(f"❌ Could not move corrupted data file: {e}")

    def _flush(self, data: Dict[str, Any]):
        start_time = time.time()
        temp_file = self.path.with_suffix('.tmp')
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with open(temp_file, 'w', encoding='utf-8') as f:
                json.dump(data, f, ensure_ascii=False, indent=2)
            temp_file.replace(self.path)
        except OSError as e:
            raise StorageUnavailableError(f"Cannot write {self.path}: {e}") from e
        logger.debug(f"💾 Data saved in {time.time() - start_time:.3f}s ({len(data)} keys)")

    def _read(self, key: str) -> Optional[str]:
        with self._lock:
            if key not in self._data:
                return None
            return json.dumps(self._data[key], ensure_ascii=False)

    def _write(self, key: str, payload: str) -> None:
        with self._lock:
            updated = dict(self._data)
            updated[key] = json.loads(payload)
            # memory only changes once the file write succeeded
            self._flush(updated)
            self._data = updated

    def _delete(self, key: str) -> None:
        with self._lock:
            if key not in self._data:
                return
            updated = dict(self._data)
            del updated[key]
            self._flush(updated)
            self._data = updated

    def stored_keys(self) -> List[str]:
        with self._lock:
            return list(self._data)


# ===== INITIALIZATION =====

def default_documents(keys: StorageKeys) -> Dict[str, Any]:
    return {
        keys.TASKS: [],
        keys.HABITS: [],
        keys.GOALS: empty_goals(),
        keys.TIME_BLOCKS: [],
        keys.DAILY_DATA: {},
        keys.WEEKLY_OBJECTIVES: [],
        keys.SETTINGS: DEFAULT_SETTINGS.to_dict(),
    }


def initialize_store(store: DocumentStore) -> None:
    """Seed empty collections and default settings for absent keys"""
    seeded = []
    for key, value in default_documents(store.keys).items():
        if store.get(key) is None:
            store.set(key, copy.deepcopy(value))
            seeded.append(key)
    if seeded:
        logger.info(f"🆕 Initialized storage keys: {', '.join(seeded)}")


def reset_store(store: DocumentStore) -> None:
    store.clear()
    initialize_store(store)
    logger.info("🔄 Planner data reset to defaults")
