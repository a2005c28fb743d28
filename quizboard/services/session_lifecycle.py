"""Service managing one quiz attempt from start to leaderboard placement."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
import logging
import math
import random
import threading
import time
from typing import Callable

from quizboard.errors import (
    InitializationError, LeaderboardUpsertError, RecordWriteError,
    SessionClosedError, StoreError
)
from quizboard.models.snapshots import Participant, QuestionCard
from quizboard.services.countdown import Countdown
from quizboard.services.leaderboard_service import LeaderboardResult, entries_payload
from quizboard.services.scoring_service import ScoringService
from quizboard.utils.helpers import now_utc, rank_suffix

logger = logging.getLogger(__name__)

DEFAULT_DURATION_SECONDS = 90

REASON_COMPLETED = "completed"
REASON_TIMEOUT = "timeout"


class SessionState(Enum):
    INITIALIZING = "initializing"
    IN_PROGRESS = "in_progress"
    TERMINATING = "terminating"
    TERMINATED = "terminated"


@dataclass(slots=True)
class SessionOutcome:
    """Final result surfaced to the participant."""

    final_score: int
    duration_seconds: int
    reason: str
    leaderboard: LeaderboardResult

    @property
    def rank(self) -> int | None:
        return self.leaderboard.rank

    @property
    def top10(self) -> list:
        return self.leaderboard.top10

    def to_payload(self, tz_name: str = "Asia/Kolkata") -> dict:
        rank = self.leaderboard.rank
        return {
            "final_score": self.final_score,
            "duration_seconds": self.duration_seconds,
            "reason": self.reason,
            "leaderboard_confirmed": self.leaderboard.confirmed,
            "leaderboard_available": self.leaderboard.available,
            "rank": rank,
            "rank_label": f"{rank}{rank_suffix(rank)}" if rank else None,
            "made_leaderboard": self.leaderboard.made_leaderboard,
            "top10": entries_payload(self.leaderboard.top10, tz_name),
        }


@dataclass(slots=True)
class AnswerResult:
    """Outcome of a single answer or pass."""

    question_id: int
    points: int
    correct: bool
    passed: bool
    total_score: int
    finished: bool
    outcome: SessionOutcome | None = None
    next_question: QuestionCard | None = field(default=None)


def run_inline(task: Callable, *args) -> None:
    task(*args)


class SessionLifecycle:
    """State machine for a single participant's quiz attempt."""

    def __init__(
        self,
        participant: Participant,
        store,
        leaderboard,
        duration_seconds: int = DEFAULT_DURATION_SECONDS,
        clock: Callable[[], float] = time.monotonic,
        rng: random.Random | None = None,
        dispatch: Callable = run_inline,
    ) -> None:
        self.participant = participant
        self._store = store
        self._leaderboard = leaderboard
        self._clock = clock
        self._rng = rng or random.Random()
        self._dispatch = dispatch
        self.countdown = Countdown(duration_seconds, clock=clock)
        self.countdown.add_expiry_listener(self.expire)

        self._state = SessionState.INITIALIZING
        self._lock = threading.RLock()
        self._questions: list[QuestionCard] = []
        self._position = 0
        self._question_shown_at: float | None = None
        self._started_at: float | None = None
        self._score = 0
        self._session_id: int | None = None
        self._outcome: SessionOutcome | None = None
        self._terminated_at: float | None = None
        self._terminated_listeners: list[Callable[[SessionOutcome], None]] = []

    # ================= STATE =================

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def session_id(self) -> int | None:
        return self._session_id

    @property
    def score(self) -> int:
        return self._score

    @property
    def outcome(self) -> SessionOutcome | None:
        return self._outcome

    @property
    def terminated_at(self) -> float | None:
        """Clock reading when the session reached TERMINATED."""
        return self._terminated_at

    @property
    def question_count(self) -> int:
        return len(self._questions)

    @property
    def position(self) -> int:
        return self._position

    @property
    def current_question(self) -> QuestionCard | None:
        if self._state is not SessionState.IN_PROGRESS:
            return None
        return self._questions[self._position]

    def add_terminated_listener(self, listener: Callable[[SessionOutcome], None]) -> None:
        self._terminated_listeners.append(listener)

    # ================= TRANSITIONS =================

    def initialize(self) -> int:
        """Load and shuffle the catalog, open a session row, start the clock."""
        with self._lock:
            if self._state is not SessionState.INITIALIZING:
                raise SessionClosedError("Session already initialized.")

            try:
                questions = self._store.fetch_questions()
            except StoreError as exc:
                raise InitializationError(f"Could not load questions: {exc}") from exc
            if not questions:
                raise InitializationError("No questions available.")

            questions = list(questions)
            self._rng.shuffle(questions)

            try:
                session_id = self._store.insert_session(
                    self.participant.username, now_utc()
                )
            except StoreError as exc:
                raise InitializationError(f"Could not create quiz session: {exc}") from exc

            self._questions = questions
            self._session_id = session_id
            self._position = 0
            self._score = 0
            self._started_at = self._clock()
            self._question_shown_at = self._started_at
            self.countdown.start()
            self._state = SessionState.IN_PROGRESS

        logger.info(
            "Quiz session %s started for %s with %d questions",
            session_id, self.participant.username, len(questions)
        )
        return session_id

    def submit_answer(self, selected_option: int) -> AnswerResult:
        if selected_option not in (1, 2, 3, 4):
            raise ValueError("Selected option must be between 1 and 4.")
        return self._record(selected_option)

    def pass_question(self) -> AnswerResult:
        return self._record(None)

    def expire(self) -> SessionOutcome | None:
        """Countdown reached zero."""
        return self.terminate(REASON_TIMEOUT)

    def terminate(self, reason: str = REASON_COMPLETED) -> SessionOutcome | None:
        """Run the end-of-session protocol exactly once.

        Later calls are no-ops returning the first outcome (None while the
        first call is still talking to the store).
        """
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                return self._outcome
            self._state = SessionState.TERMINATING
            final_score = self._score
            duration = int(math.floor(max(0.0, self._clock() - self._started_at)))
        self.countdown.stop()

        logger.info(
            "Terminating session %s (%s): score %d in %ds",
            self._session_id, reason, final_score, duration
        )
        result = LeaderboardResult(confirmed=False)
        try:
            result = self._leaderboard.finish_session(
                self._session_id, final_score, duration, self.participant
            )
        except Exception as exc:
            logger.exception("Leaderboard protocol failed for session %s", self._session_id)
            result = LeaderboardResult(
                confirmed=False,
                errors=[LeaderboardUpsertError(f"{self.participant.username}: {exc}")],
            )
        finally:
            outcome = SessionOutcome(
                final_score=final_score,
                duration_seconds=duration,
                reason=reason,
                leaderboard=result,
            )
            with self._lock:
                self._outcome = outcome
                self._terminated_at = self._clock()
                self._state = SessionState.TERMINATED

        for listener in list(self._terminated_listeners):
            try:
                listener(outcome)
            except Exception:
                logger.exception("Terminated listener failed for session %s", self._session_id)
        return outcome

    # ================= INTERNALS =================

    def _record(self, selected_option: int | None) -> AnswerResult:
        passed = selected_option is None
        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                raise SessionClosedError("Quiz session is not in progress.", self._outcome)
            expired = self.countdown.is_expired()

        if expired:
            outcome = self.expire()
            raise SessionClosedError("Time is up.", outcome)

        with self._lock:
            if self._state is not SessionState.IN_PROGRESS:
                raise SessionClosedError("Quiz session is not in progress.", self._outcome)

            question = self._questions[self._position]
            latency_ms = max(0.0, (self._clock() - self._question_shown_at) * 1000)
            correct = not passed and selected_option == question.correct_option
            points = ScoringService.calculate_points(correct, latency_ms, passed=passed)
            self._score += points

            self._dispatch(self._write_answer, {
                "session_id": self._session_id,
                "question_id": question.id,
                "selected_option": selected_option,
                "correct": correct,
                "answer_time_seconds": latency_ms / 1000,
                "passed": passed,
            })

            finished = self._position >= len(self._questions) - 1
            if not finished:
                self._position += 1
                self._question_shown_at = self._clock()
            total = self._score
            next_card = None if finished else self._questions[self._position]

        outcome = self.terminate(REASON_COMPLETED) if finished else None
        return AnswerResult(
            question_id=question.id,
            points=points,
            correct=correct,
            passed=passed,
            total_score=total,
            finished=finished,
            outcome=outcome,
            next_question=next_card,
        )

    def _write_answer(self, record: dict) -> None:
        try:
            self._store.insert_answer(**record)
        except StoreError as exc:
            error = RecordWriteError(f"session {record['session_id']}: {exc}")
            logger.warning("Failed to record answer: %s", error)
