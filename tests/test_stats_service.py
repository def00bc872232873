import os
import sys
import datetime
import unittest
sys.path.append(os.path.dirname(os.path.dirname(__file__)))
from models import (
    NA,
    CardioDetails,
    ExerciseEntry,
    SetEntry,
    WeightEntry,
    WorkoutEntry,
)
from stats_service import StatisticsService

TODAY = datetime.date(2024, 3, 10)
STAMP = datetime.datetime(2024, 3, 10, 12, 0, tzinfo=datetime.timezone.utc)


def strength(wid, date, exercises, recovery=None, notes=""):
    return WorkoutEntry(
        id=wid,
        type="strength",
        date=date,
        notes=notes,
        recovery=recovery,
        timestamp=STAMP,
        exercises=[
            ExerciseEntry(
                name=name, sets=[SetEntry(reps=r, weight=w) for r, w in sets]
            )
            for name, sets in exercises
        ],
    )


def cardio(wid, date, duration=30, distance=None, recovery=None):
    return WorkoutEntry(
        id=wid,
        type="cardio",
        date=date,
        recovery=recovery,
        timestamp=STAMP,
        cardio=CardioDetails(activity="Run", duration=duration, distance=distance),
    )


def days_ago(n):
    return TODAY - datetime.timedelta(days=n)


class SummaryStatsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.stats = StatisticsService()

    def test_counts_and_recovery_average(self) -> None:
        workouts = [
            strength(4, days_ago(0), [("Squat", [(5, 225.0)])], recovery=7),
            cardio(3, days_ago(1), recovery=8),
            strength(2, days_ago(3), [("Bench", [(5, 135.0)])]),
            strength(1, days_ago(20), [("Row", [(5, 95.0)])], recovery=8),
        ]
        summary = self.stats.summary_stats(workouts, [], TODAY)
        self.assertEqual(summary["total_workouts"], len(workouts))
        self.assertEqual(summary["strength_count"], 3)
        self.assertEqual(summary["cardio_count"], 1)
        self.assertEqual(summary["last_7_days_count"], 3)
        self.assertEqual(summary["avg_recovery"], 7.7)
        self.assertEqual(summary["current_weight"], NA)

    def test_no_recovery_scores_is_not_available(self) -> None:
        workouts = [strength(1, TODAY, [("Squat", [(5, 225.0)])])]
        summary = self.stats.summary_stats(workouts, [], TODAY)
        self.assertEqual(summary["avg_recovery"], NA)

    def test_recovery_average_rounds_half_up(self) -> None:
        workouts = [
            cardio(i, TODAY, recovery=score) for i, score in enumerate([7, 7, 7, 8], 1)
        ]
        self.assertEqual(self.stats.summary_stats(workouts, [], TODAY)["avg_recovery"], 7.3)

    def test_empty_collections(self) -> None:
        summary = self.stats.summary_stats([], [], TODAY)
        self.assertEqual(summary["total_workouts"], 0)
        self.assertEqual(summary["last_7_days_count"], 0)
        self.assertEqual(summary["avg_recovery"], NA)
        self.assertEqual(summary["current_weight"], NA)

    def test_current_weight_is_most_recent_entry(self) -> None:
        weights = [WeightEntry(weight=180.5, date=TODAY, timestamp=STAMP)]
        summary = self.stats.summary_stats([], weights, TODAY)
        self.assertEqual(summary["current_weight"], 180.5)

    def test_seven_day_window_is_inclusive(self) -> None:
        workouts = [
            cardio(3, days_ago(-1)),
            cardio(2, days_ago(7)),
            cardio(1, days_ago(8)),
        ]
        recent = self.stats.last_7_days(workouts, TODAY)
        self.assertEqual([w.id for w in recent], [2])


class WeeklyBreakdownTest(unittest.TestCase):
    def test_goal_met_with_old_cardio_excluded(self) -> None:
        stats = StatisticsService(weekly_goal=3)
        workouts = [
            strength(4, days_ago(1), [("Squat", [(5, 225.0)])]),
            strength(3, days_ago(3), [("Bench", [(5, 135.0)])]),
            strength(2, days_ago(5), [("Deadlift", [(5, 275.0)])]),
            cardio(1, days_ago(10)),
        ]
        weekly = stats.weekly_breakdown(workouts, TODAY)
        self.assertEqual(weekly["strength"], 3)
        self.assertEqual(weekly["cardio"], 0)
        self.assertEqual(weekly["total"], 3)
        self.assertTrue(weekly["goal_met"])

    def test_goal_not_met(self) -> None:
        stats = StatisticsService(weekly_goal=3)
        workouts = [
            strength(2, days_ago(1), [("Squat", [(5, 225.0)])]),
            cardio(1, days_ago(2)),
        ]
        weekly = stats.weekly_breakdown(workouts, TODAY)
        self.assertEqual(weekly["strength"], 1)
        self.assertEqual(weekly["cardio"], 1)
        self.assertEqual(weekly["goal"], 3)
        self.assertFalse(weekly["goal_met"])


class PersonalRecordsTest(unittest.TestCase):
    def setUp(self) -> None:
        self.stats = StatisticsService()

    def test_heaviest_set_per_exercise(self) -> None:
        workouts = [
            strength(2, days_ago(1), [("Bench", [(5, 135.0), (3, 155.0)])]),
            cardio(3, days_ago(2)),
            strength(1, days_ago(4), [("Bench", [(8, 145.0)]), ("Squat", [(5, 225.0)])]),
        ]
        records = self.stats.personal_records(workouts)
        self.assertEqual([r["exercise"] for r in records], ["Bench", "Squat"])
        self.assertEqual(records[0]["weight"], 155.0)
        self.assertEqual(records[0]["reps"], 3)
        self.assertEqual(records[0]["date"], days_ago(1).isoformat())
        self.assertEqual(records[0]["est_1rm"], 170.48)

    def test_tie_keeps_most_recent_workout(self) -> None:
        workouts = [
            strength(2, days_ago(1), [("Bench", [(5, 100.0)])]),
            strength(1, days_ago(9), [("Bench", [(8, 100.0)])]),
        ]
        record = self.stats.personal_records(workouts)[0]
        self.assertEqual(record["reps"], 5)
        self.assertEqual(record["date"], days_ago(1).isoformat())

    def test_tie_within_workout_keeps_first_set(self) -> None:
        workouts = [strength(1, TODAY, [("Bench", [(3, 100.0), (5, 100.0)])])]
        self.assertEqual(self.stats.personal_records(workouts)[0]["reps"], 3)

    def test_display_limit_in_first_seen_order(self) -> None:
        names = [f"Lift {i}" for i in range(8)]
        workouts = [
            strength(1, TODAY, [(name, [(5, 100.0 + i)]) for i, name in enumerate(names)])
        ]
        records = self.stats.personal_records(workouts)
        self.assertEqual([r["exercise"] for r in records], names[:6])
        self.assertEqual(len(self.stats.personal_records(workouts, limit=0)), 8)
        self.assertEqual(len(self.stats.personal_records(workouts, limit=2)), 2)
        with self.assertRaises(ValueError):
            self.stats.personal_records(workouts, limit=-1)

    def test_bodyweight_set_counts(self) -> None:
        workouts = [strength(1, TODAY, [("Pull-ups", [(10, 0.0)])])]
        record = self.stats.personal_records(workouts)[0]
        self.assertEqual(record["weight"], 0.0)
        self.assertEqual(record["est_1rm"], 0.0)


class HistoryTest(unittest.TestCase):
    def setUp(self) -> None:
        self.stats = StatisticsService()

    def test_history_rows(self) -> None:
        workouts = [
            cardio(2, TODAY, duration=45, distance="5 km", recovery=6),
            strength(1, days_ago(1), [("Squat", [(5, 200.0), (5, 210.0)]), ("Row", [(8, 95.0)])]),
        ]
        rows = self.stats.history_list(workouts)
        self.assertEqual([r["id"] for r in rows], [2, 1])
        self.assertEqual(rows[0]["summary"], "Run • 45 min • 5 km")
        self.assertEqual(rows[0]["recovery"], 6)
        self.assertNotIn("volume", rows[0])
        self.assertEqual(rows[1]["summary"], "2 exercises • 3 total sets")
        self.assertEqual(rows[1]["volume"], 2810.0)
        self.assertIsNone(rows[1]["recovery"])

    def test_cardio_summary_without_distance(self) -> None:
        self.assertEqual(
            self.stats.workout_summary(cardio(1, TODAY, duration=20)), "Run • 20 min"
        )

    def test_workout_detail(self) -> None:
        workouts = [cardio(1, TODAY, duration=20)]
        detail = self.stats.workout_detail(workouts, 1)
        self.assertEqual(detail["cardio"]["duration"], 20)
        self.assertNotIn("exercises", detail)
        self.assertIsNone(self.stats.workout_detail(workouts, 99))


class WeightTrendTest(unittest.TestCase):
    def test_trend(self) -> None:
        stats = StatisticsService(recent_weights_limit=2, weight_unit="kg")
        weights = [
            WeightEntry(weight=181.0, date=TODAY, timestamp=STAMP),
            WeightEntry(weight=180.5, date=days_ago(3), timestamp=STAMP),
            WeightEntry(weight=180.0, date=days_ago(7), timestamp=STAMP),
        ]
        trend = stats.weight_trend(weights)
        self.assertEqual(len(trend["entries"]), 2)
        self.assertEqual(trend["entries"][0], {"date": TODAY.isoformat(), "weight": 181.0})
        self.assertEqual(trend["current"], 181.0)
        self.assertEqual(trend["change"], 1.0)
        self.assertIsNotNone(trend["weekly_rate"])
        self.assertGreater(trend["weekly_rate"], 0)
        self.assertEqual(trend["unit"], "kg")
        self.assertEqual(len(stats.weight_trend(weights, limit=10)["entries"]), 3)
        self.assertEqual(len(stats.weight_trend(weights, limit=0)["entries"]), 3)
        with self.assertRaises(ValueError):
            stats.weight_trend(weights, limit=-1)

    def test_empty_trend(self) -> None:
        trend = StatisticsService().weight_trend([])
        self.assertEqual(trend["entries"], [])
        self.assertEqual(trend["current"], NA)
        self.assertIsNone(trend["change"])
        self.assertIsNone(trend["weekly_rate"])

    def test_single_entry_has_no_rate(self) -> None:
        weights = [WeightEntry(weight=180.5, date=TODAY, timestamp=STAMP)]
        trend = StatisticsService().weight_trend(weights)
        self.assertEqual(trend["change"], 0.0)
        self.assertIsNone(trend["weekly_rate"])


if __name__ == "__main__":
    unittest.main()
