"""Shared fixtures for the quizboard test suite."""
from datetime import datetime, timedelta, timezone

import pytest

from quizboard import create_app
from quizboard.errors import StoreError
from quizboard.extensions import active_sessions, db
from quizboard.models import Participant, Player, Question
from quizboard.services import LeaderboardService, QuizStore


class FakeClock:
    """Monotonic clock the tests move by hand"""

    def __init__(self, start=1000.0):
        self.now = start

    def __call__(self):
        return self.now

    def advance(self, seconds):
        self.now += seconds


class FlakyStore:
    """Delegates to a real store but fails the named operations"""

    def __init__(self, inner, failing=(), count_override=None):
        self.inner = inner
        self.failing = set(failing)
        self.count_override = count_override
        self.calls = []

    def __getattr__(self, name):
        target = getattr(self.inner, name)

        def call(*args, **kwargs):
            self.calls.append(name)
            if name in self.failing:
                raise StoreError(f"{name} failed: connection reset")
            if name == 'count_leaderboard' and self.count_override is not None:
                return self.count_override
            return target(*args, **kwargs)

        return call


@pytest.fixture
def app():
    app = create_app('testing')
    yield app
    with app.app_context():
        db.session.remove()
        db.drop_all()
    active_sessions.clear()


@pytest.fixture
def ctx(app):
    with app.app_context():
        yield


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def store(ctx):
    return QuizStore()


@pytest.fixture
def leaderboard(store):
    return LeaderboardService(store)


@pytest.fixture
def make_player(ctx):
    def make(username, name=None, phone='555-0100'):
        db.session.add(Player(username=username, name=name or username.title(), phone=phone))
        db.session.commit()
        return Participant(username, name or username.title(), phone)
    return make


@pytest.fixture
def add_questions(ctx):
    def add(count):
        questions = [
            Question(
                question_text=f"Question {i}?",
                option_1=f"Q{i} option A",
                option_2=f"Q{i} option B",
                option_3=f"Q{i} option C",
                option_4=f"Q{i} option D",
                correct_option=(i % 4) + 1,
            )
            for i in range(1, count + 1)
        ]
        db.session.add_all(questions)
        db.session.commit()
        return [q.id for q in questions]
    return add


@pytest.fixture
def full_board(store, make_player):
    """Leaderboard holding ten players scoring 100, 90, ... 10"""
    base = datetime(2025, 3, 1, 12, 0, tzinfo=timezone.utc)
    players = []
    for idx, score in enumerate(range(100, 0, -10)):
        player = make_player(f"player{score}")
        store.upsert_leaderboard_entry(player, score, base + timedelta(minutes=idx))
        players.append(player)
    return players
