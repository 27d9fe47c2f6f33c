import unittest
from datetime import datetime

from zenith.services.analytics import range_start

from helpers import MORNING, TODAY, make_planner


class TestScenario(unittest.TestCase):
    def test_write_report_uses_thirty_percent_of_capacity(self) -> None:
        planner = make_planner()
        planner.tasks.add("Write report", "2026-01-12", priority="high", category="work", duration=90)

        overview = planner.analytics.daily_overview("2026-01-12", now=MORNING)

        self.assertEqual(overview["planned_minutes"], 90)
        self.assertEqual(overview["planned_hours"], 1.5)
        self.assertEqual(overview["capacity_percent"], 30)
        self.assertEqual(overview["capacity_status"], "none")
        self.assertEqual(overview["greeting"], "Good morning")
        self.assertEqual(overview["date_display"], "Monday, January 12, 2026")

    def test_time_blocks_are_listed_with_display_times(self) -> None:
        planner = make_planner()
        planner.time_blocks.add("Review", "13:05", "14:00", "2026-01-12")
        planner.time_blocks.add("Deep work", "09:00", "10:30", "2026-01-12")

        blocks = planner.analytics.daily_overview("2026-01-12", now=MORNING)["time_blocks"]

        self.assertEqual([b["title"] for b in blocks], ["Deep work", "Review"])
        self.assertEqual(blocks[1]["time_display"], "1:05 PM - 2:00 PM")

    def test_over_capacity_is_reported_but_fill_is_clamped(self) -> None:
        planner = make_planner()
        planner.user.complete_onboarding("Ada", daily_capacity=2)
        planner.tasks.add("Long task", "2026-01-12", duration=180)

        overview = planner.analytics.daily_overview("2026-01-12", now=datetime(2026, 1, 12, 18, 0))

        self.assertEqual(overview["capacity_percent"], 150)
        self.assertEqual(overview["capacity_status"], "danger")
        self.assertEqual(overview["capacity_fill"], 100)
        self.assertEqual(overview["greeting"], "Good evening, Ada")


class TestAnalyticsReport(unittest.TestCase):
    def setUp(self) -> None:
        self.planner = make_planner()
        tasks = self.planner.tasks
        for title, day, done in (("a", "2026-01-10", True), ("b", "2026-01-10", True),
                                 ("c", "2026-01-12", True), ("d", "2026-01-12", False),
                                 ("old", "2025-12-01", True)):
            task = tasks.add(title, day)
            if done:
                tasks.update(task.id, {"completed": True})

        habit = self.planner.habits.add("Stretch")
        self.planner.habits.toggle_completion(habit.id, "2026-01-11", today=TODAY)
        self.planner.habits.toggle_completion(habit.id, "2026-01-12", today=TODAY)

        self.planner.daily_data.set("2026-01-11", {"mood": 4})
        self.planner.daily_data.set("2026-01-12", {"mood": 5, "energy": 2})

    def test_week_report(self) -> None:
        report = self.planner.analytics.report("week", TODAY)

        self.assertEqual(report["start_date"], "2026-01-05")
        self.assertEqual(report["end_date"], "2026-01-12")
        self.assertEqual(len(report["days"]), 8)
        self.assertEqual(report["labels"][0], "Jan 5")
        self.assertEqual(report["completed_per_day"], [0, 0, 0, 0, 0, 2, 0, 1])
        self.assertEqual(report["bar_heights"], [0, 0, 0, 0, 0, 150, 0, 75])
        self.assertEqual(report["stats"]["completion_rate"], 75)
        self.assertEqual(report["stats"]["habit_completion_rate"], 25)
        self.assertEqual(report["stats"]["average_mood"], 4.5)
        self.assertEqual(report["productivity_score"], 55)
        self.assertEqual(report["energy_pattern"], [3, 3, 3, 3, 3, 3, 3, 2])
        self.assertEqual(report["mood_pattern"][-2:], [4, 5])
        self.assertEqual(report["top_streaks"][0]["current_streak"], 2)

    def test_longer_ranges(self) -> None:
        self.assertEqual(range_start("month", TODAY).isoformat(), "2025-12-12")
        self.assertEqual(range_start("quarter", TODAY).isoformat(), "2025-10-12")
        quarter = self.planner.analytics.report("quarter", TODAY)
        self.assertEqual(quarter["stats"]["completed_tasks"], 4)

    def test_unknown_range(self) -> None:
        self.assertIsNone(self.planner.analytics.report("decade", TODAY))


class TestSummaries(unittest.TestCase):
    def setUp(self) -> None:
        self.planner = make_planner()

    def test_weekly_summary(self) -> None:
        self.planner.tasks.add("Plan", "2026-01-14", duration=60)
        self.planner.objectives.add("Ship proposal", "2026-01-12")
        self.planner.objectives.add("Next week", "2026-01-19")

        summary = self.planner.analytics.weekly_summary("2026-01-15")

        self.assertEqual(summary["week_start"], "2026-01-12")
        self.assertEqual(summary["week_range"], "Jan 12 - 18, 2026")
        self.assertEqual(len(summary["days"]), 7)
        self.assertEqual(summary["days"][2]["tasks"][0]["title"], "Plan")
        self.assertEqual([o["title"] for o in summary["objectives"]], ["Ship proposal"])
        self.assertEqual(summary["completed_tasks"], 0)

    def test_malformed_dates(self) -> None:
        self.planner.tasks.add("Plan", "2026-01-14")
        self.assertIsNone(self.planner.analytics.weekly_summary("mid-January"))
        self.assertIsNone(self.planner.analytics.daily_overview("2026-01-32", now=MORNING))
        self.assertEqual(self.planner.analytics.stats("2026-01-01", "soon").total_tasks, 0)

    def test_monthly_summary(self) -> None:
        self.planner.tasks.add("Plan", "2026-01-14")
        for day in ("2026-01-03", "2026-01-28", "2026-02-02"):
            self.planner.time_blocks.add("Block", "09:00", "10:00", day)
        self.planner.goals.add("monthly", "Read 2 books")
        self.planner.daily_data.set("2026-01-05", {"mood": 3})

        summary = self.planner.analytics.monthly_summary(2026, 1, TODAY)

        self.assertEqual(summary["title"], "January 2026")
        self.assertEqual(len(summary["grid"]), 42)
        cells = {cell["date"]: cell for cell in summary["grid"]}
        self.assertTrue(cells["2026-01-14"]["has_tasks"])
        self.assertFalse(cells["2026-01-13"]["has_tasks"])
        self.assertTrue(cells["2026-01-12"]["is_today"])
        self.assertEqual(summary["time_blocks"], 2)
        self.assertEqual(summary["average_mood"], 3.0)
        self.assertEqual(summary["goals"][0]["title"], "Read 2 books")

    def test_year_in_pixels(self) -> None:
        self.planner.daily_data.set("2026-01-12", {"mood": 5})
        self.planner.daily_data.set("2026-01-13", {"energy": 5})

        weeks = self.planner.analytics.year_in_pixels(2026)

        days = [day for week in weeks for day in week["days"]]
        self.assertEqual(len(days), 365)
        self.assertEqual(weeks[0]["week"], 1)
        moods = {day["date"]: day["mood"] for day in days}
        self.assertEqual(moods["2026-01-12"], 5)
        self.assertIsNone(moods["2026-01-13"])


class TestShutdownRitual(unittest.TestCase):
    def test_end_of_day(self) -> None:
        planner = make_planner()
        done = planner.tasks.add("Write report", "2026-01-12", duration=90)
        planner.tasks.toggle(done.id)
        open_task = planner.tasks.add("Email", "2026-01-12")
        ritual = planner.shutdown

        review = ritual.review(TODAY)
        self.assertEqual([t.id for t in review["completed"]], [done.id])
        self.assertEqual([t.id for t in review["incomplete"]], [open_task.id])

        self.assertEqual(ritual.move_to_tomorrow(open_task.id, TODAY).date, "2026-01-13")
        self.assertIsNone(ritual.move_to_tomorrow("missing", TODAY))

        self.assertEqual(ritual.record_wins(TODAY, "Shipped the report").wins, "Shipped the report")

        self.assertIsNone(ritual.set_tomorrow_highlight(TODAY, "   "))
        self.assertFalse(planner.daily_data.has_entry("2026-01-13"))
        ritual.set_tomorrow_highlight(TODAY, "Prepare slides")
        self.assertEqual(planner.daily_data.get("2026-01-13").highlight, "Prepare slides")

        summary = ritual.summary(TODAY)
        self.assertEqual(summary, {"completed_count": 1, "focus_minutes": 90, "focus_duration": "1h 30m"})


if __name__ == "__main__":
    unittest.main(verbosity=2)
