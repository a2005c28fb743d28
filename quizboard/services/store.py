"""
Quiz Store
Relational store interface used by the quiz core, backed by Flask-SQLAlchemy.
Every call either returns plain snapshots or raises StoreError.
"""
from contextlib import contextmanager
import logging

from sqlalchemy import delete, func, select, text, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from quizboard.errors import StoreError, UsernameTakenError
from quizboard.extensions import db
from quizboard.models import (
    AnswerRecord, LeaderboardEntry, LeaderboardRow, Participant, Player,
    Question, QuestionCard, QuizSession
)

logger = logging.getLogger(__name__)

# Canonical leaderboard ordering: higher score first, earlier achiever wins ties
RANK_ORDER = (
    LeaderboardEntry.score.desc(),
    LeaderboardEntry.achieved_at.asc(),
    LeaderboardEntry.username.asc(),
)

# Serializes upsert+trim between concurrent finishers on PostgreSQL
LEADERBOARD_LOCK_KEY = 741_852_963


@contextmanager
def store_call(action):
    """Roll back and translate SQLAlchemy failures into StoreError"""
    try:
        yield
    except SQLAlchemyError as exc:
        db.session.rollback()
        logger.debug("Store call '%s' failed", action, exc_info=True)
        raise StoreError(f"{action} failed: {exc}") from exc


class QuizStore:
    """SQLAlchemy implementation of the quiz store"""

    # ================= CATALOG =================

    def fetch_questions(self):
        """Return the whole question catalog as detached cards"""
        with store_call("fetch questions"):
            rows = db.session.execute(
                select(Question).order_by(Question.id)
            ).scalars().all()
            return [
                QuestionCard(
                    id=q.id,
                    question_text=q.question_text,
                    options=tuple(q.get_options()),
                    correct_option=q.correct_option,
                )
                for q in rows
            ]

    # ================= PLAYERS =================

    def get_player(self, username):
        with store_call("get player"):
            player = db.session.get(Player, username)
            if player is None:
                return None
            return Participant(player.username, player.name, player.phone)

    def insert_player(self, participant):
        """Register a new player; raises UsernameTakenError on conflict"""
        try:
            with store_call("insert player"):
                db.session.add(Player(
                    username=participant.username,
                    name=participant.name,
                    phone=participant.phone,
                ))
                db.session.commit()
        except StoreError as exc:
            if isinstance(exc.__cause__, IntegrityError):
                raise UsernameTakenError(
                    f"Username '{participant.username}' is already taken"
                ) from exc
            raise
        return participant

    # ================= SESSIONS =================

    def insert_session(self, username, start_time):
        """Create a session row with zero totals and return its id"""
        with store_call("insert session"):
            quiz_session = QuizSession(
                username=username,
                start_time=start_time,
                total_score=0,
                duration_seconds=0,
            )
            db.session.add(quiz_session)
            db.session.commit()
            return quiz_session.id

    def update_session(self, session_id, **fields):
        with store_call("update session"):
            result = db.session.execute(
                update(QuizSession)
                .where(QuizSession.id == session_id)
                .values(**fields)
            )
            db.session.commit()
        if result.rowcount == 0:
            raise StoreError(f"update session failed: no session {session_id}")

    def insert_answer(self, session_id, question_id, selected_option,
                      correct, answer_time_seconds, passed):
        with store_call("insert answer"):
            db.session.add(AnswerRecord(
                session_id=session_id,
                question_id=question_id,
                selected_option=selected_option,
                correct=correct,
                answer_time_seconds=answer_time_seconds,
                passed=passed,
            ))
            db.session.commit()

    # ================= LEADERBOARD =================

    def upsert_leaderboard_entry(self, participant, score, achieved_at,
                                 keep_best=False, capacity=10):
        """
        Insert or replace the participant's entry, then trim everything
        ranked beyond `capacity`. Both happen in one transaction so no
        committed state ever holds more than `capacity` rows.
        """
        with store_call("upsert leaderboard"):
            dialect = db.session.get_bind().dialect.name
            if dialect == 'postgresql':
                db.session.execute(
                    text("SELECT pg_advisory_xact_lock(:key)"),
                    {"key": LEADERBOARD_LOCK_KEY}
                )

            stmt = self._insert_for(dialect).values(
                username=participant.username,
                name=participant.name,
                phone=participant.phone,
                score=score,
                achieved_at=achieved_at,
            )
            replace = {
                'name': stmt.excluded.name,
                'phone': stmt.excluded.phone,
                'score': stmt.excluded.score,
                'achieved_at': stmt.excluded.achieved_at,
            }
            if keep_best:
                stmt = stmt.on_conflict_do_update(
                    index_elements=[LeaderboardEntry.username],
                    set_=replace,
                    where=stmt.excluded.score > LeaderboardEntry.score,
                )
            else:
                stmt = stmt.on_conflict_do_update(
                    index_elements=[LeaderboardEntry.username],
                    set_=replace,
                )
            db.session.execute(stmt)

            keep = select(LeaderboardEntry.username).order_by(*RANK_ORDER).limit(capacity)
            trimmed = db.session.execute(
                delete(LeaderboardEntry)
                .where(LeaderboardEntry.username.not_in(keep))
                .execution_options(synchronize_session=False)
            )
            db.session.commit()

        if trimmed.rowcount:
            logger.info("Trimmed %d leaderboard row(s) beyond rank %d",
                        trimmed.rowcount, capacity)

    def fetch_leaderboard(self, limit=10):
        """Ranked view, score desc then achieved_at asc"""
        with store_call("fetch leaderboard"):
            rows = db.session.execute(
                select(LeaderboardEntry).order_by(*RANK_ORDER).limit(limit)
            ).scalars().all()
            return [
                LeaderboardRow(
                    username=row.username,
                    name=row.name,
                    score=row.score,
                    achieved_at=row.achieved_at,
                )
                for row in rows
            ]

    def count_leaderboard(self):
        with store_call("count leaderboard"):
            return db.session.execute(
                select(func.count()).select_from(LeaderboardEntry)
            ).scalar_one()

    @staticmethod
    def _insert_for(dialect):
        if dialect == 'postgresql':
            return pg_insert(LeaderboardEntry)
        if dialect == 'sqlite':
            return sqlite_insert(LeaderboardEntry)
        raise StoreError(f"upsert not supported on dialect '{dialect}'")
