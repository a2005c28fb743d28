"""Immutable values handed from the store to the quiz core."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True, slots=True)
class Participant:
    """A registered player as the core sees it."""

    username: str
    name: str
    phone: str


@dataclass(frozen=True, slots=True)
class QuestionCard:
    """Catalog question detached from the database session."""

    id: int
    question_text: str
    options: tuple[str, str, str, str]
    correct_option: int

    def to_payload(self) -> dict:
        """Client view, without the correct option."""
        return {
            'id': self.id,
            'question_text': self.question_text,
            'options': list(self.options),
        }


@dataclass(frozen=True, slots=True)
class LeaderboardRow:
    """One ranked leaderboard entry."""

    username: str
    name: str
    score: int
    achieved_at: datetime
