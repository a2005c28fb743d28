"""
Models Package
Exports all database models and core snapshots
"""
from quizboard.models.player import Player
from quizboard.models.question import Question
from quizboard.models.session import QuizSession
from quizboard.models.answer import AnswerRecord
from quizboard.models.leaderboard import LeaderboardEntry
from quizboard.models.snapshots import Participant, QuestionCard, LeaderboardRow

__all__ = [
    'Player', 'Question', 'QuizSession', 'AnswerRecord', 'LeaderboardEntry',
    'Participant', 'QuestionCard', 'LeaderboardRow'
]
