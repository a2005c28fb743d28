"""
Error Taxonomy
Store failures are caught at the point of call and translated into one of
these kinds. Fatal kinds travel back as structured results, non-fatal kinds
are logged and swallowed.
"""


class QuizError(Exception):
    """Base class for all quiz errors"""


class StoreError(QuizError):
    """A call to the relational store failed"""


class InitializationError(QuizError):
    """Empty catalog or session creation failure"""


class RecordWriteError(QuizError):
    """Answer audit record could not be written (non-fatal)"""


class SessionUpdateError(QuizError):
    """Session totals could not be persisted (non-fatal)"""


class LeaderboardUpsertError(QuizError):
    """Leaderboard entry could not be written, placement unknown"""


class LeaderboardReadError(QuizError):
    """Ranked view could not be fetched"""


class SessionClosedError(QuizError):
    """Operation attempted on a session that is not in progress"""

    def __init__(self, message, outcome=None):
        super().__init__(message)
        self.outcome = outcome


class RegistrationError(QuizError):
    """Registration form is incomplete"""


class UsernameTakenError(RegistrationError):
    """Username already registered"""


class CapViolationWarning(UserWarning):
    """Leaderboard holds more rows than its cap (operators only)"""
