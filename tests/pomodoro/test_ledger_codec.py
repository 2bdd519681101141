import datetime as dt
import unittest

from pomodoro.codec import (
    activities_from_records,
    activity_from_record,
    activity_to_record,
    legacy_sessions_from_records,
    parse_timestamp,
)
from pomodoro.ledger import Activity, ActivityLedger, Segment

T0 = dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.timezone.utc)


def _at(seconds: float) -> dt.datetime:
    return T0 + dt.timedelta(seconds=seconds)


def _mixed_history() -> ActivityLedger:
    ledger = ActivityLedger()
    work = ledger.begin_activity("Work", "Writing", T0)
    ledger.start_segment(work, T0)
    ledger.finalize(work, _at(60), completed=True)

    abandoned = ledger.begin_activity("Short Break", None, _at(60))
    ledger.start_segment(abandoned, _at(60))
    ledger.end_segment(abandoned, _at(90))
    ledger.finalize(abandoned, _at(100), completed=False)

    running = ledger.begin_activity("Work", "Writing", _at(120))
    ledger.start_segment(running, _at(120))
    ledger.end_segment(running, _at(150))
    ledger.start_segment(running, _at(160))
    return ledger


class LedgerCodecTests(unittest.TestCase):
    def test_activity_record_uses_camel_case_keys(self) -> None:
        activity = Activity(
            id=3,
            mode="Work",
            title="Reading",
            start=T0,
            end=T0 + dt.timedelta(seconds=90),
            segments=[
                Segment(start=T0, end=T0 + dt.timedelta(seconds=90), elapsed_seconds=90)
            ],
            elapsed_seconds=90,
            completed=True,
        )

        record = activity_to_record(activity)

        self.assertEqual(
            {
                "id": 3,
                "mode": "Work",
                "title": "Reading",
                "start": "2024-01-01T09:00:00+00:00",
                "end": "2024-01-01T09:01:30+00:00",
                "segments": [
                    {
                        "start": "2024-01-01T09:00:00+00:00",
                        "end": "2024-01-01T09:01:30+00:00",
                        "elapsedSeconds": 90,
                    }
                ],
                "elapsedSeconds": 90,
                "completed": True,
                "segmentStart": None,
            },
            record,
        )
        self.assertEqual(activity, activity_from_record(record, fallback_id=99))

    def test_naive_timestamps_are_read_as_local_time(self) -> None:
        parsed = parse_timestamp("2024-01-01T09:00:00", "start")
        self.assertIsNotNone(parsed.tzinfo)

    def test_records_without_ids_get_ids_after_known_ones(self) -> None:
        records = [
            {"mode": "Work", "start": "2024-01-01T09:00:00+00:00", "completed": True},
            {"id": 5, "mode": "Short Break", "start": "2024-01-01T09:30:00+00:00"},
            {"mode": "Work", "start": "2024-01-01T10:00:00+00:00"},
        ]

        activities = activities_from_records(records)

        self.assertEqual([6, 5, 7], [activity.id for activity in activities])

    def test_malformed_records_are_skipped_with_warning(self) -> None:
        records = [
            {"id": 1, "mode": "Nap", "start": "2024-01-01T09:00:00+00:00"},
            "not-an-object",
            {"id": 2, "mode": "Work", "start": "yesterday"},
            {"id": 3, "mode": "Work", "start": "2024-01-01T09:00:00+00:00"},
        ]

        with self.assertLogs("pomodoro.codec", level="WARNING") as logs:
            activities = activities_from_records(records)

        self.assertEqual([3], [activity.id for activity in activities])
        self.assertEqual(3, len(logs.output))

    def test_mixed_history_restores_field_for_field(self) -> None:
        ledger = _mixed_history()

        restored = ActivityLedger.restore(ledger.persist())

        self.assertEqual(ledger.activities, restored.activities)
        self.assertEqual([1, 2, 3], [activity.id for activity in restored])
        abandoned, running = restored.activities[1:]
        self.assertIsNone(abandoned.title)
        self.assertFalse(abandoned.completed)
        self.assertIsNone(running.end)
        self.assertEqual(_at(160), running.segment_start)
        self.assertEqual(30, running.elapsed_seconds)
        self.assertIs(running, restored.open_activity())

    def test_duplicate_ids_are_reassigned_with_warning(self) -> None:
        records = [
            {
                "id": 4,
                "mode": "Work",
                "start": "2024-01-01T09:00:00+00:00",
                "end": "2024-01-01T09:01:00+00:00",
                "completed": True,
            },
            {"id": 4, "mode": "Short Break", "start": "2024-01-01T09:01:00+00:00"},
        ]

        with self.assertLogs("pomodoro.codec", level="WARNING") as logs:
            activities = activities_from_records(records)

        self.assertEqual([4, 5], [activity.id for activity in activities])
        self.assertIn("reuses id 4", logs.output[0])

    def test_open_activity_before_the_last_entry_is_skipped(self) -> None:
        records = [
            {"id": 1, "mode": "Work", "start": "2024-01-01T09:00:00+00:00"},
            {"id": 2, "mode": "Short Break", "start": "2024-01-01T09:30:00+00:00"},
        ]

        with self.assertLogs("pomodoro.codec", level="WARNING") as logs:
            activities = activities_from_records(records)

        self.assertEqual([2], [activity.id for activity in activities])
        self.assertIn("not the last entry", logs.output[0])

    def test_legacy_sessions_are_decoded(self) -> None:
        sessions = legacy_sessions_from_records(
            [
                {"date": "2023-12-31T20:00:00+00:00", "pomodoros": 4},
                {"date": None, "pomodoros": 4},
            ]
        )

        self.assertEqual(1, len(sessions))
        self.assertEqual(4, sessions[0].pomodoros)


if __name__ == "__main__":
    unittest.main()
