class PomodoroError(Exception):
    """Base exception for pomodoro core failures."""


class LedgerError(PomodoroError):
    """Raised when a ledger operation violates the activity lifecycle."""


class SettingsValidationError(PomodoroError):
    """Raised when submitted timer settings are invalid."""
