import unittest

from pomodoro.errors import SettingsValidationError
from pomodoro.settings import TimerSettings, settings_from_mapping, settings_to_mapping


class SettingsValidationTests(unittest.TestCase):
    def test_defaults(self) -> None:
        settings = TimerSettings()

        self.assertEqual("Work", settings.title)
        self.assertEqual(13, settings.work_minutes)
        self.assertEqual(2, settings.short_break_minutes)
        self.assertEqual(10, settings.long_break_minutes)
        self.assertFalse(settings.auto_start)
        self.assertTrue(settings.notifications)
        self.assertTrue(settings.sound)
        self.assertEqual(4, settings.sessions_before_long_break)

    def test_mapping_uses_persisted_key_names(self) -> None:
        mapping = settings_to_mapping(TimerSettings())

        self.assertEqual(
            {
                "title": "Work",
                "work": 13,
                "shortBreak": 2,
                "longBreak": 10,
                "autoStart": False,
                "notifications": True,
                "sound": True,
                "sessionsBeforeLongBreak": 4,
            },
            mapping,
        )
        self.assertEqual(TimerSettings(), settings_from_mapping(mapping))

    def test_partial_mapping_merges_over_base(self) -> None:
        base = TimerSettings(work_minutes=50)
        settings = settings_from_mapping({"shortBreak": "7", "autoStart": "yes"}, base=base)

        self.assertEqual(50, settings.work_minutes)
        self.assertEqual(7, settings.short_break_minutes)
        self.assertTrue(settings.auto_start)

    def test_title_is_compacted_and_truncated(self) -> None:
        settings = settings_from_mapping({"title": "  Deep \n  work  " + "x" * 80})

        self.assertTrue(settings.title.startswith("Deep work "))
        self.assertEqual(60, len(settings.title))

    def test_blank_title_falls_back_to_default(self) -> None:
        self.assertEqual("Work", settings_from_mapping({"title": "   "}).title)

    def test_non_positive_durations_are_rejected(self) -> None:
        for raw in ({"work": 0}, {"longBreak": -5}, {"sessionsBeforeLongBreak": 0}):
            with self.subTest(raw=raw):
                with self.assertRaises(SettingsValidationError):
                    settings_from_mapping(raw)

    def test_non_numeric_values_are_rejected(self) -> None:
        for raw in ({"work": "soon"}, {"shortBreak": True}, {"longBreak": 2.5}):
            with self.subTest(raw=raw):
                with self.assertRaises(SettingsValidationError):
                    settings_from_mapping(raw)

    def test_durations_above_one_day_are_rejected(self) -> None:
        with self.assertRaises(SettingsValidationError):
            settings_from_mapping({"work": 24 * 60 + 1})

    def test_unknown_keys_are_ignored(self) -> None:
        self.assertEqual(TimerSettings(), settings_from_mapping({"theme": "dark"}))

    def test_non_mapping_is_rejected(self) -> None:
        with self.assertRaises(SettingsValidationError):
            settings_from_mapping(["work", 25])  # type: ignore[arg-type]


if __name__ == "__main__":
    unittest.main()
