import json
import tempfile
import unittest
from pathlib import Path

from zenith.services import Planner
from zenith.services.data_export import TASK_COLUMNS, ImportDataError

from helpers import TODAY, FlakyStore, make_planner


class TestExportImport(unittest.TestCase):
    def setUp(self) -> None:
        self.planner = make_planner()
        self.planner.user.complete_onboarding("Ada")
        self.planner.tasks.add("Write report", "2026-01-12", priority="high", duration=90)
        self.planner.habits.add("Stretch")
        self.planner.goals.add("yearly", "Run a marathon")
        self.planner.daily_data.set("2026-01-12", {"mood": 4, "wins": "Shipped"})
        self.planner.settings.set_theme("dark")
        self.exporter = self.planner.exporter

    def test_export_lists_every_key(self) -> None:
        data = json.loads(self.exporter.export_data())
        self.assertEqual(sorted(data), sorted(self.planner.store.keys.all()))
        self.assertEqual(data["zenith_theme"], "dark")
        self.assertEqual(data["zenith_daily_data"]["2026-01-12"]["mood"], 4)

    def test_round_trip_restores_snapshot(self) -> None:
        exported = self.exporter.export_data()
        before = self.exporter.snapshot()

        self.planner.tasks.add("Scratch", "2026-01-13")
        self.planner.settings.set_theme("light")
        self.planner.daily_data.set("2026-01-13", {"mood": 1})

        self.assertTrue(self.exporter.import_data(exported))
        self.assertEqual(self.exporter.snapshot(), before)

    def test_null_value_removes_key(self) -> None:
        self.assertTrue(self.exporter.import_data(json.dumps({"zenith_theme": None})))
        self.assertIsNone(self.planner.store.get("zenith_theme"))
        self.assertEqual(self.planner.settings.get_theme(), "light")
        self.assertEqual(len(self.planner.tasks.list()), 1)

    def test_unknown_keys_are_ignored(self) -> None:
        payload = {"zenith_tasks": [], "other_app_data": [1, 2, 3]}
        with self.assertLogs("zenith.services.data_export", level="WARNING"):
            self.assertTrue(self.exporter.import_data(json.dumps(payload)))
        self.assertEqual(self.planner.tasks.list(), [])
        self.assertNotIn("other_app_data", self.planner.store.stored_keys())

    def test_invalid_payload_changes_nothing(self) -> None:
        before = self.exporter.snapshot()
        bad_payloads = [
            "{not json",
            "[1, 2]",
            json.dumps({"zenith_tasks": "none"}),
            json.dumps({"zenith_theme": "sepia"}),
            json.dumps({"zenith_tasks": [], "zenith_habits": [{"name": "no id"}]}),
            json.dumps({"zenith_daily_data": {"yesterday": {"mood": 3}}}),
            json.dumps({"zenith_daily_data": {"2026-01-12": {"mood": 9}}}),
        ]
        for text in bad_payloads:
            with self.subTest(text=text):
                with self.assertRaises(ImportDataError):
                    self.exporter.parse_import(text)
                self.assertFalse(self.exporter.import_data(text))
                self.assertEqual(self.exporter.snapshot(), before)

    def test_failed_write_restores_previous_data(self) -> None:
        store = FlakyStore()
        planner = Planner(store)
        planner.tasks.add("Write report", "2026-01-12")
        planner.settings.set_theme("dark")
        store.failing_keys.add("zenith_theme")
        payload = json.dumps({"zenith_tasks": [], "zenith_theme": "light"})

        with self.assertLogs("zenith.services.data_export", level="ERROR"):
            self.assertFalse(planner.exporter.import_data(payload))
        self.assertEqual([t.title for t in planner.tasks.list()], ["Write report"])
        self.assertEqual(planner.settings.get_theme(), "dark")

    def test_unavailable_storage_reports_failure(self) -> None:
        store = FlakyStore()
        planner = Planner(store)
        planner.tasks.add("Write report", "2026-01-12")
        store.broken = True

        self.assertFalse(planner.exporter.import_data(json.dumps({"zenith_tasks": []})))
        self.assertEqual(len(planner.tasks.list()), 1)


class TestFiles(unittest.TestCase):
    def test_export_and_import_file(self) -> None:
        source = make_planner()
        source.tasks.add("Write report", "2026-01-12")

        with tempfile.TemporaryDirectory() as td:
            path = source.exporter.export_to_file(td, today=TODAY)
            self.assertEqual(path, Path(td) / "zenith-backup-2026-01-12.json")

            target = make_planner()
            self.assertTrue(target.exporter.import_from_file(path))
            self.assertEqual(target.tasks.list(), source.tasks.list())

            self.assertFalse(target.exporter.import_from_file(Path(td) / "missing.json"))

    def test_tasks_csv(self) -> None:
        planner = make_planner()
        header = ",".join(TASK_COLUMNS)
        self.assertEqual(planner.exporter.export_tasks_csv().strip(), header)

        planner.tasks.add("Write report", "2026-01-12", duration=90)
        planner.tasks.add("Email", "2026-01-13")
        with tempfile.TemporaryDirectory() as td:
            path = Path(td) / "out" / "tasks.csv"
            csv_data = planner.exporter.export_tasks_csv(path)

            lines = csv_data.strip().splitlines()
            self.assertEqual(lines[0], header)
            self.assertEqual(len(lines), 3)
            self.assertIn("Write report", lines[1])
            self.assertEqual(path.read_text(encoding="utf-8"), csv_data)


if __name__ == "__main__":
    unittest.main(verbosity=2)
