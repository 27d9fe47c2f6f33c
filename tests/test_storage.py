import json
import tempfile
import unittest
from pathlib import Path

from zenith.core.storage import (
    JsonFileDocumentStore, MemoryDocumentStore, StorageKeys, empty_goals, initialize_store,
    reset_store,
)

from helpers import FlakyStore


class TestStorageKeys(unittest.TestCase):
    def test_namespaced_keys(self) -> None:
        keys = StorageKeys("zenith")
        self.assertEqual(keys.TASKS, "zenith_tasks")
        self.assertEqual(keys.TIME_BLOCKS, "zenith_timeblocks")
        self.assertEqual(keys.DAILY_DATA, "zenith_daily_data")
        self.assertEqual(len(keys.all()), 9)
        self.assertIn("zenith_theme", keys)
        self.assertEqual(StorageKeys("work").USER, "work_user")


class TestMemoryStore(unittest.TestCase):
    def test_values_are_copied(self) -> None:
        store = MemoryDocumentStore()
        tasks = [{"id": "t1"}]
        store.set(store.keys.TASKS, tasks)
        tasks.append({"id": "t2"})

        loaded = store.get(store.keys.TASKS)
        loaded.append({"id": "t3"})
        self.assertEqual(store.get(store.keys.TASKS), [{"id": "t1"}])

    def test_absent_key_is_none(self) -> None:
        self.assertIsNone(MemoryDocumentStore().get("zenith_tasks"))

    def test_clear_only_touches_known_keys(self) -> None:
        store = MemoryDocumentStore(initial={"zenith_tasks": [], "other_app": 1})
        store.clear()
        self.assertEqual(store.stored_keys(), ["other_app"])

    def test_unserializable_value_is_dropped(self) -> None:
        store = MemoryDocumentStore()
        self.assertFalse(store.set("zenith_tasks", {object()}))
        self.assertIsNone(store.get("zenith_tasks"))
        self.assertEqual(store.stats.failed_operations, 1)

    def test_failing_backend_is_a_logged_no_op(self) -> None:
        store = FlakyStore()
        store.set(store.keys.TASKS, [{"id": "t1"}])
        store.broken = True

        with self.assertLogs("zenith.core.storage", level="ERROR"):
            self.assertFalse(store.set(store.keys.TASKS, []))

        self.assertEqual(store.get(store.keys.TASKS), [{"id": "t1"}])
        health = store.health_check()
        self.assertEqual(health["status"], "warning")
        self.assertEqual(health["stats"]["failed_operations"], 1)


class TestInitialization(unittest.TestCase):
    def test_seeds_defaults(self) -> None:
        store = MemoryDocumentStore()
        initialize_store(store)
        self.assertEqual(store.get(store.keys.TASKS), [])
        self.assertEqual(store.get(store.keys.DAILY_DATA), {})
        self.assertEqual(store.get(store.keys.GOALS), empty_goals())
        self.assertEqual(store.get(store.keys.SETTINGS)["pomodoroLength"], 25)
        self.assertIsNone(store.get(store.keys.USER))
        self.assertIsNone(store.get(store.keys.THEME))

    def test_existing_values_are_kept(self) -> None:
        store = MemoryDocumentStore(initial={"zenith_tasks": [{"id": "t1"}]})
        initialize_store(store)
        self.assertEqual(store.get("zenith_tasks"), [{"id": "t1"}])

    def test_reset(self) -> None:
        store = MemoryDocumentStore(initial={"zenith_tasks": [{"id": "t1"}], "zenith_theme": "dark"})
        reset_store(store)
        self.assertEqual(store.get("zenith_tasks"), [])
        self.assertIsNone(store.get("zenith_theme"))


class TestJsonFileStore(unittest.TestCase):
    def test_persists_across_instances(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "planner_data.json"
            store = JsonFileDocumentStore(path)
            store.set(store.keys.TASKS, [{"id": "t1", "title": "Résumé"}])
            store.set(store.keys.THEME, "dark")
            store.remove(store.keys.THEME)

            reopened = JsonFileDocumentStore(path)
            self.assertEqual(reopened.get("zenith_tasks"), [{"id": "t1", "title": "Résumé"}])
            self.assertIsNone(reopened.get("zenith_theme"))
            self.assertFalse(path.with_suffix(".tmp").exists())

    def test_corrupted_file_is_moved_aside(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "planner_data.json"
            path.write_text("{not json", encoding="utf-8")

            store = JsonFileDocumentStore(path)

            self.assertEqual(store.stored_keys(), [])
            self.assertFalse(path.exists())
            backups = list((Path(td) / "backups").glob("corrupted_backup_*.json"))
            self.assertEqual(len(backups), 1)

            store.set(store.keys.TASKS, [])
            self.assertEqual(json.loads(path.read_text(encoding="utf-8")), {"zenith_tasks": []})

    def test_undecodable_file_is_moved_aside(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "planner_data.json"
            path.write_bytes(b'{"zenith_theme": "\xff\xfe"}')

            with self.assertLogs("zenith.core.storage", level="ERROR"):
                store = JsonFileDocumentStore(path)

            self.assertEqual(store.stored_keys(), [])
            self.assertFalse(path.exists())
            backups = list((Path(td) / "backups").glob("corrupted_backup_*.json"))
            self.assertEqual(len(backups), 1)

    def test_unreadable_path_starts_empty(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "planner_data.json"
            path.mkdir()

            with self.assertLogs("zenith.core.storage", level="ERROR"):
                store = JsonFileDocumentStore(path)

            self.assertEqual(store.stored_keys(), [])
            self.assertTrue(path.is_dir())

    def test_failed_flush_keeps_memory_unchanged(self) -> None:
        with tempfile.TemporaryDirectory() as td:
            blocker = Path(td) / "file"
            blocker.write_text("", encoding="utf-8")
            # the data file's parent is a regular file, so every write fails
            store = JsonFileDocumentStore(blocker / "planner_data.json")

            self.assertFalse(store.set(store.keys.TASKS, [{"id": "t1"}]))
            self.assertIsNone(store.get(store.keys.TASKS))
            self.assertEqual(store.stats.failed_operations, 1)


if __name__ == "__main__":
    unittest.main(verbosity=2)
