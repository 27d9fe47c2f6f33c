# services/data_export.py

import json
import logging
from datetime import date
from pathlib import Path
from typing import Any, Dict, List, Optional, Union

import pandas as pd
from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator

from zenith.core.models import Theme
from zenith.core.storage import DocumentStore
from zenith.services.repositories import TaskRepository
from zenith.utils.datetime_utils import today_local
from zenith.utils.validators import is_valid_date

logger = logging.getLogger(__name__)

TASK_COLUMNS = [
    "id", "title", "date", "priority", "category", "duration",
    "completed", "completedAt", "createdAt",
]


class ImportDataError(Exception):
    """The import payload is not valid planner data"""
    pass

# ===== SNAPSHOT SCHEMA =====

class RecordSnapshot(BaseModel):
    model_config = ConfigDict(extra="allow")

    id: str


class DailyEntrySnapshot(BaseModel):
    model_config = ConfigDict(extra="allow")

    highlight: Optional[str] = None
    energy: Optional[int] = Field(None, ge=1, le=5)
    mood: Optional[int] = Field(None, ge=1, le=5)
    sleep: Optional[int] = Field(None, ge=1, le=5)
    reflection: Optional[str] = None
    wins: Optional[str] = None


class GoalsSnapshot(BaseModel):
    model_config = ConfigDict(extra="allow")

    yearly: List[RecordSnapshot] = []
    monthly: List[RecordSnapshot] = []
    lifeAreas: Dict[str, List[RecordSnapshot]] = {}


class PlannerSnapshot(BaseModel):
    """Shape check for an exported planner, keyed by un-namespaced key suffix"""

    user: Optional[Dict[str, Any]] = None
    tasks: Optional[List[RecordSnapshot]] = None
    habits: Optional[List[RecordSnapshot]] = None
    goals: Optional[GoalsSnapshot] = None
    timeblocks: Optional[List[RecordSnapshot]] = None
    daily_data: Optional[Dict[str, DailyEntrySnapshot]] = None
    weekly_objectives: Optional[List[RecordSnapshot]] = None
    settings: Optional[Dict[str, Any]] = None
    theme: Optional[Theme] = None

    @field_validator("daily_data")
    @classmethod
    def validate_daily_keys(cls, v):
        if v is not None:
            bad = [key for key in v if not is_valid_date(key)]
            if bad:
                raise ValueError(f"daily data keys must be ISO dates: {bad[:3]}")
        return v

# ===== EXPORTER =====

class DataExporter:
    """Backup and restore of the whole planner"""

    def __init__(self, store: DocumentStore, export_dir: Optional[Path] = None):
        self.store = store
        self.export_dir = Path(export_dir) if export_dir else Path("exports")

    def _prefix(self) -> str:
        return f"{self.store.keys.namespace}_"

    def snapshot(self) -> Dict[str, Any]:
        return {key: self.store.get(key) for key in self.store.keys.all()}

    def export_data(self) -> str:
        """All known keys with their current values (null when absent)"""
        return json.dumps(self.snapshot(), ensure_ascii=False, indent=2)

    def parse_import(self, text: str) -> Dict[str, Any]:
        """Validate an export and return the known keys it carries"""
        try:
            payload = json.loads(text)
        except (json.JSONDecodeError, TypeError) as e:
            raise ImportDataError(f"Invalid JSON: {e}")

        if not isinstance(payload, dict):
            raise ImportDataError("Import data must be a JSON object")

        known = set(self.store.keys.all())
        present = {key: value for key, value in payload.items() if key in known}
        ignored = len(payload) - len(present)
        if ignored:
            logger.warning(f"⚠️ Ignoring {ignored} unknown keys in import")

        prefix = self._prefix()
        try:
            PlannerSnapshot.model_validate({key[len(prefix):]: value for key, value in present.items()})
        except ValidationError as e:
            raise ImportDataError(f"Invalid planner data: {e}")

        return present

    def import_data(self, text: str) -> bool:
        """Replace every collection present in the payload; nothing changes on failure"""
        try:
            present = self.parse_import(text)
        except ImportDataError as e:
            logger.error(f"❌ Import failed: {e}")
            return False

        previous = {key: self.store.get(key) for key in present}
        failed = self._write_values(present)
        if failed:
            logger.error(f"❌ Import failed writing {', '.join(failed)}; restoring previous data")
            still_failed = self._write_values(previous)
            if still_failed:
                logger.error(f"❌ Could not restore {', '.join(still_failed)}")
            return False

        logger.info(f"📥 Imported {len(present)} collections")
        return True

    def _write_values(self, values: Dict[str, Any]) -> List[str]:
        """Write or remove (None) each key; returns the keys whose write was dropped"""
        failed = []
        for key, value in values.items():
            ok = self.store.remove(key) if value is None else self.store.set(key, value)
            if not ok:
                failed.append(key)
        return failed

    def export_to_file(self, directory: Optional[Union[str, Path]] = None,
                       today: Optional[date] = None) -> Optional[Path]:
        export_dir = Path(directory) if directory else self.export_dir
        filename = export_dir / f"zenith-backup-{(today or today_local()).isoformat()}.json"
        try:
            export_dir.mkdir(parents=True, exist_ok=True)
            with open(filename, "w", encoding="utf-8") as f:
                f.write(self.export_data())
        except OSError as e:
            logger.error(f"❌ Export to {filename} failed: {e}")
            return None

        logger.info(f"📤 Data exported to {filename}")
        return filename

    def import_from_file(self, path: Union[str, Path]) -> bool:
        try:
            with open(path, "r", encoding="utf-8") as f:
                text = f.read()
        except (OSError, UnicodeDecodeError) as e:
            logger.error(f"❌ Cannot read import file {path}: {e}")
            return False
        return self.import_data(text)

    def export_tasks_csv(self, path: Optional[Union[str, Path]] = None) -> str:
        """All tasks as CSV; written to ``path`` as well when given"""
        tasks = [task.to_dict() for task in TaskRepository(self.store).list()]
        df = pd.DataFrame(tasks, columns=TASK_COLUMNS)
        csv_data = df.to_csv(index=False)

        if path is not None:
            Path(path).parent.mkdir(parents=True, exist_ok=True)
            with open(path, "w", encoding="utf-8", newline="") as f:
                f.write(csv_data)
            logger.info(f"📤 {len(tasks)} tasks exported to {path}")

        return csv_data
