"""
Scoring Service
Time-weighted points for a single answer
"""
from quizboard.utils.helpers import round_half_up


class ScoringService:
    """Service for scoring answers"""

    BASE_POINTS = 10
    WRONG_ANSWER_PENALTY = -5
    # Answers slower than this earn the base points only
    BONUS_WINDOW_SECONDS = 10

    @staticmethod
    def calculate_points(is_correct, answer_latency_ms, passed=False):
        """
        Calculate points for an answer

        A pass scores 0, a wrong selection costs 5 points. A correct answer
        earns 10 plus a speed bonus that falls linearly from 10 at 0s to 0 at
        10s, rounded to the nearest integer (halves round up).
        """
        if passed:
            return 0

        if not is_correct:
            return ScoringService.WRONG_ANSWER_PENALTY

        latency_seconds = max(0.0, answer_latency_ms / 1000)
        if latency_seconds > ScoringService.BONUS_WINDOW_SECONDS:
            return ScoringService.BASE_POINTS

        bonus = round_half_up(max(0.0, ScoringService.BONUS_WINDOW_SECONDS - latency_seconds))
        return ScoringService.BASE_POINTS + bonus
