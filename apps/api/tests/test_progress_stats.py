"""
Tests for progress statistics: streaks, completion and weight history
"""
from datetime import date, datetime, timedelta, timezone
from uuid import uuid4

from schemas import ProgressRange
from services.progress_stats import (
    build_weight_history,
    calculate_best_streak,
    calculate_completion_stats,
    calculate_current_streak,
    completed_days,
    is_workout_day_completed,
    weight_change,
    workout_dates,
)

TODAY = date(2024, 3, 10)
NOW = datetime(2024, 3, 10, 12, 0, tzinfo=timezone.utc)


def workout(day, type="workout", **extra):
    log = {"date": datetime(day.year, day.month, day.day, 9, 0, tzinfo=timezone.utc), "type": type}
    log.update(extra)
    return log


def on(*days):
    return [workout(date(2024, 3, d)) for d in days]


class TestStreaks:

    def test_no_logs(self):
        assert calculate_current_streak([], TODAY) == 0
        assert calculate_best_streak([]) == 0

    def test_consecutive_days(self):
        assert calculate_current_streak(on(10, 9, 8), TODAY) == 3

    def test_one_skipped_day_keeps_streak(self):
        assert calculate_current_streak(on(10, 9, 7), TODAY) == 3

    def test_two_skipped_days_break_streak(self):
        assert calculate_current_streak(on(10, 9, 7, 3), TODAY) == 3

    def test_yesterday_keeps_streak_alive(self):
        assert calculate_current_streak(on(9, 8), TODAY) == 2

    def test_streak_lapses_after_a_missed_day(self):
        assert calculate_current_streak(on(8, 7, 6), TODAY) == 0

    def test_same_day_counts_once(self):
        logs = on(10, 10, 9)
        assert workout_dates(logs) == [date(2024, 3, 10), date(2024, 3, 9)]
        assert calculate_current_streak(logs, TODAY) == 2

    def test_other_activity_types_ignored(self):
        logs = on(10) + [workout(date(2024, 3, 9), type="cardio")]
        assert calculate_current_streak(logs, TODAY) == 1

    def test_best_streak(self):
        assert calculate_best_streak(on(1, 2, 3, 10, 12)) == 3
        assert calculate_best_streak(on(5)) == 1


class TestCompletionStats:

    def test_stats(self):
        logs = [
            {"date": NOW - timedelta(days=1), "type": "workout"},
            {"date": NOW - timedelta(days=3), "type": "workout"},
            {"date": NOW - timedelta(days=10), "type": "workout"},
            {"date": NOW - timedelta(days=20), "type": "workout"},
            {"date": NOW - timedelta(days=2), "type": "cardio"},
        ]
        stats = calculate_completion_stats(logs, total_planned=12, now=NOW)
        assert stats.total_completed == 4
        assert stats.total_planned == 12
        assert stats.completion_rate == 33
        assert stats.last_7_days == 2
        assert stats.last_30_days == 4
        # 20 days of history is 3 (partial) weeks
        assert stats.average_per_week == 1.3

    def test_nothing_planned(self):
        stats = calculate_completion_stats([], total_planned=0, now=NOW)
        assert stats.completion_rate == 0
        assert stats.average_per_week == 0


class TestWeightHistory:

    def test_points_in_range_oldest_first(self):
        logs = [
            {"date": NOW - timedelta(days=5), "type": "workout", "weight_kg": 76},
            {"date": NOW - timedelta(days=40), "type": "workout", "weight_kg": 85},
            {"date": NOW - timedelta(days=20), "type": "workout", "weight_kg": 80},
            {"date": NOW - timedelta(days=3), "type": "workout", "weight_kg": None},
            {"date": NOW + timedelta(days=1), "type": "workout", "weight_kg": 70},
        ]
        points = build_weight_history(logs, 180, ProgressRange.MONTH, now=NOW)
        assert [p.weight_kg for p in points] == [80, 76]
        # 80 / 1.8² = 24.69
        assert points[0].bmi == 24.7

    def test_quarter_range_reaches_further(self):
        logs = [{"date": NOW - timedelta(days=40), "type": "workout", "weight_kg": 85}]
        assert build_weight_history(logs, 180, ProgressRange.WEEK, now=NOW) == []
        assert len(build_weight_history(logs, 180, ProgressRange.QUARTER, now=NOW)) == 1

    def test_no_height_no_bmi(self):
        logs = [{"date": NOW - timedelta(days=1), "type": "workout", "weight_kg": 80}]
        assert build_weight_history(logs, None, now=NOW)[0].bmi is None

    def test_weight_change(self):
        logs = [
            {"date": NOW - timedelta(days=20), "type": "workout", "weight_kg": 80},
            {"date": NOW - timedelta(days=5), "type": "workout", "weight_kg": 76},
        ]
        change = weight_change(build_weight_history(logs, 180, now=NOW))
        assert change == {"kg": -4.0, "percent": -5.0}

    def test_weight_change_single_point(self):
        assert weight_change([]) == {"kg": 0.0, "percent": 0.0}


class TestPlanDayCompletion:

    def test_completed_days(self):
        plan_id = uuid4()
        logs = [
            workout(TODAY, workout_plan_id=plan_id, day_number=3),
            workout(TODAY, workout_plan_id=plan_id, day_number=1),
            workout(TODAY, workout_plan_id=uuid4(), day_number=2),
            workout(TODAY),
        ]
        assert completed_days(logs, plan_id) == [1, 3]
        assert is_workout_day_completed(logs, plan_id, 3)
        assert not is_workout_day_completed(logs, plan_id, 2)
