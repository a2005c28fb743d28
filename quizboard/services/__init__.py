"""
Services Package
"""
from quizboard.services.scoring_service import ScoringService
from quizboard.services.countdown import Countdown
from quizboard.services.store import QuizStore
from quizboard.services.leaderboard_service import LeaderboardService, LeaderboardResult
from quizboard.services.session_lifecycle import (
    SessionLifecycle, SessionOutcome, SessionState, AnswerResult
)

__all__ = [
    'ScoringService', 'Countdown', 'QuizStore', 'LeaderboardService',
    'LeaderboardResult', 'SessionLifecycle', 'SessionOutcome', 'SessionState',
    'AnswerResult'
]
