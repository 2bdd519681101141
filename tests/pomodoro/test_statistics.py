import datetime as dt
import unittest

from pomodoro.codec import LegacySession
from pomodoro.ledger import Activity
from pomodoro.statistics import compute_statistics, daily_histogram

UTC = dt.timezone.utc


def _activity(
    activity_id: int,
    mode: str,
    start: dt.datetime,
    elapsed: int,
    *,
    completed: bool = True,
) -> Activity:
    return Activity(
        id=activity_id,
        mode=mode,  # type: ignore[arg-type]
        title="Work" if mode == "Work" else None,
        start=start,
        end=start + dt.timedelta(seconds=elapsed),
        elapsed_seconds=elapsed,
        completed=completed,
    )


class StatisticsTests(unittest.TestCase):
    def setUp(self) -> None:
        day_1 = dt.datetime(2024, 1, 1, 9, 0, tzinfo=UTC)
        day_2 = dt.datetime(2024, 1, 2, 9, 0, tzinfo=UTC)
        self.activities = [
            _activity(1, "Work", day_1, 600),
            _activity(2, "Short Break", day_1 + dt.timedelta(minutes=10), 120),
            _activity(3, "Work", day_1 + dt.timedelta(minutes=12), 600),
            _activity(4, "Work", day_1 + dt.timedelta(minutes=30), 300, completed=False),
            _activity(5, "Long Break", day_1 + dt.timedelta(minutes=40), 599),
            _activity(6, "Work", day_2, 780),
        ]

    def test_totals_count_completed_activities_only(self) -> None:
        statistics = compute_statistics(
            self.activities,
            sessions_before_long_break=2,
            tz=UTC,
        )

        self.assertEqual(3, statistics.completed_pomodoros)
        self.assertEqual(1, statistics.session_count)
        self.assertEqual(33, statistics.total_work_minutes)
        self.assertEqual(12, statistics.total_break_minutes)

    def test_histogram_groups_work_by_start_date(self) -> None:
        histogram = daily_histogram(self.activities, tz=UTC)

        self.assertEqual(("2024-01-01", "2024-01-02"), histogram.labels)
        self.assertEqual((2, 1), histogram.counts)

    def test_histogram_dates_follow_requested_time_zone(self) -> None:
        late = dt.datetime(2024, 1, 1, 23, 30, tzinfo=UTC)
        histogram = daily_histogram(
            [_activity(1, "Work", late, 600)],
            tz=dt.timezone(dt.timedelta(hours=2)),
        )

        self.assertEqual(("2024-01-02",), histogram.labels)

    def test_empty_history_yields_zeroes(self) -> None:
        statistics = compute_statistics([], sessions_before_long_break=4, tz=UTC)

        self.assertEqual(0, statistics.completed_pomodoros)
        self.assertEqual(0, statistics.session_count)
        self.assertEqual(0, statistics.total_work_minutes)
        self.assertEqual((), statistics.daily_histogram.labels)

    def test_legacy_sessions_are_reported_separately(self) -> None:
        statistics = compute_statistics(
            self.activities,
            sessions_before_long_break=4,
            tz=UTC,
            legacy_sessions=[
                LegacySession(date=dt.datetime(2023, 12, 1, tzinfo=UTC), pomodoros=4)
            ],
        )

        self.assertEqual(3, statistics.completed_pomodoros)
        self.assertEqual(4, statistics.legacy_pomodoros)


if __name__ == "__main__":
    unittest.main()
