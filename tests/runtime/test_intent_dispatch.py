import datetime as dt
import json
import logging
import unittest

from pomodoro import PomodoroTimer, TimerSettings
from runtime.intents import IntentDispatcher, parse_intent
from runtime.ui import RuntimeUIPublisher

T0 = dt.datetime(2024, 1, 1, 9, 0, tzinfo=dt.timezone.utc)


class _ManualClock:
    def __init__(self, start: dt.datetime):
        self.current = start

    def now(self) -> dt.datetime:
        return self.current

    def advance(self, seconds: float) -> None:
        self.current += dt.timedelta(seconds=seconds)


class _UIServerStub:
    def __init__(self):
        self.events: list[tuple[str, dict[str, object]]] = []

    def publish(self, event_type: str, **payload):
        self.events.append((event_type, payload))

    def publish_state(self, state: str, *, message=None, **payload):
        self.events.append(("state_update", {"state": state, "message": message, **payload}))

    def of_type(self, event_type: str) -> list[dict[str, object]]:
        return [payload for kind, payload in self.events if kind == event_type]


class _NotifierStub:
    def __init__(self):
        self.permission = "default"
        self.permission_requests = 0

    def request_permission(self) -> str:
        self.permission_requests += 1
        return self.permission

    def notify(self, message: str) -> bool:
        return True

    def set_permission(self, permission: str) -> None:
        self.permission = permission


class IntentParsingTests(unittest.TestCase):
    def test_parse_intent_accepts_known_intents(self) -> None:
        self.assertEqual(
            {"intent": "set_mode", "mode": "Long Break"},
            parse_intent('{"intent": "set_mode", "mode": "Long Break"}'),
        )

    def test_parse_intent_rejects_malformed_messages(self) -> None:
        for raw in ("not json", "[]", '{"intent": "explode"}', '{"mode": "Work"}'):
            with self.subTest(raw=raw):
                self.assertIsNone(parse_intent(raw))


class IntentDispatchTests(unittest.TestCase):
    def setUp(self) -> None:
        self.clock = _ManualClock(T0)
        self.timer = PomodoroTimer(
            settings=TimerSettings(work_minutes=1, short_break_minutes=1),
            clock=self.clock,
        )
        self.ui = _UIServerStub()
        self.notifier = _NotifierStub()
        self.calls: list[str] = []
        self.dispatcher = IntentDispatcher(
            logger=logging.getLogger("test"),
            timer=self.timer,
            ui=RuntimeUIPublisher(self.ui),
            notifier=self.notifier,
            publish_statistics=lambda: self.calls.append("statistics"),
            publish_status=lambda: self.calls.append("status"),
        )

    def _send(self, **intent):
        return self.dispatcher.handle_raw(json.dumps(intent))

    def test_start_intent_runs_timer_and_publishes_update(self) -> None:
        result = self._send(intent="start")

        self.assertIsNotNone(result)
        self.assertEqual("running", self.timer.snapshot().phase)
        timer_event = self.ui.of_type("timer")[-1]
        self.assertEqual("start", timer_event["action"])
        self.assertTrue(timer_event["accepted"])
        self.assertEqual(["statistics", "status"], self.calls)

    def test_rejected_action_reports_reason_without_statistics(self) -> None:
        self._send(intent="pause")

        timer_event = self.ui.of_type("timer")[-1]
        self.assertFalse(timer_event["accepted"])
        self.assertEqual("not_running", timer_event["reason"])
        self.assertEqual("The timer is not running.", timer_event["message"])
        self.assertEqual([], self.ui.of_type("error"))
        self.assertEqual(["status"], self.calls)

    def test_unknown_mode_publishes_error_event(self) -> None:
        self._send(intent="set_mode", mode="Nap")

        errors = self.ui.of_type("error")
        self.assertEqual(1, len(errors))
        self.assertIn("Unknown mode", str(errors[0]["message"]))

    def test_set_mode_switches_mode(self) -> None:
        self._send(intent="set_mode", mode="Long Break")
        self.assertEqual("Long Break", self.timer.snapshot().mode)

    def test_open_settings_publishes_form(self) -> None:
        result = self._send(intent="open_settings")

        self.assertIsNone(result)
        settings_event = self.ui.of_type("settings")[-1]
        self.assertTrue(settings_event["open"])
        self.assertEqual(1, settings_event["settings"]["work"])  # type: ignore[index]

    def test_commit_settings_applies_and_requests_permission(self) -> None:
        result = self._send(intent="commit_settings", settings={"work": 25})

        self.assertIsNotNone(result)
        self.assertEqual(25, self.timer.settings.work_minutes)
        settings_event = self.ui.of_type("settings")[-1]
        self.assertFalse(settings_event["open"])
        self.assertEqual(1, self.notifier.permission_requests)

    def test_commit_invalid_settings_keeps_previous_values(self) -> None:
        self._send(intent="commit_settings", settings={"work": "later"})

        self.assertEqual(1, self.timer.settings.work_minutes)
        self.assertEqual([], self.ui.of_type("settings"))
        self.assertEqual(1, len(self.ui.of_type("error")))
        self.assertEqual(0, self.notifier.permission_requests)

    def test_commit_without_settings_object_keeps_timer_running(self) -> None:
        self._send(intent="start")
        self.clock.advance(30)

        for intent in (
            {"intent": "commit_settings", "settings": "garbage"},
            {"intent": "commit_settings"},
        ):
            with self.subTest(intent=intent):
                result = self.dispatcher.handle_raw(json.dumps(intent))

                if result is None:
                    self.fail("Expected an action result")
                self.assertFalse(result.accepted)
                self.assertEqual("invalid_settings", result.reason)
                self.assertEqual("running", self.timer.snapshot().phase)
                self.assertEqual(30, self.timer.snapshot().remaining_seconds)
                self.assertEqual(1, len(self.timer.ledger))
                self.assertTrue(self.timer.ledger.activities[0].is_running)

        self.assertEqual([], self.ui.of_type("settings"))

    def test_notification_permission_updates_notifier(self) -> None:
        self._send(intent="notification_permission", permission="granted")
        self.assertEqual("granted", self.notifier.permission)

    def test_malformed_message_is_ignored(self) -> None:
        with self.assertLogs("test", level="WARNING"):
            result = self.dispatcher.handle_raw("{broken")

        self.assertIsNone(result)
        self.assertEqual([], self.ui.events)


if __name__ == "__main__":
    unittest.main()
