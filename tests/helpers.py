from datetime import date, datetime, timedelta

from zenith.core.storage import MemoryDocumentStore, StorageUnavailableError
from zenith.services import Planner

TODAY = date(2026, 1, 12)  # a Monday
MORNING = datetime(2026, 1, 12, 9, 30)


def days_ago(n: int) -> str:
    return (TODAY - timedelta(days=n)).isoformat()


def make_planner(namespace: str = "zenith") -> Planner:
    return Planner(MemoryDocumentStore(namespace=namespace))


class FlakyStore(MemoryDocumentStore):
    """Memory store whose writes fail while ``broken`` is set, or always for ``failing_keys``"""

    def __init__(self, *args, failing_keys=(), **kwargs):
        super().__init__(*args, **kwargs)
        self.broken = False
        self.failing_keys = set(failing_keys)

    def _write(self, key, payload):
        if self.broken or key in self.failing_keys:
            raise StorageUnavailableError("storage quota exceeded")
        super()._write(key, payload)
