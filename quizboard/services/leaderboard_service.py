"""
Leaderboard Service
End-of-session write sequence and ranked top-N view
"""
from dataclasses import dataclass, field
import logging
import warnings

from quizboard.errors import (
    CapViolationWarning, LeaderboardReadError, LeaderboardUpsertError,
    SessionUpdateError, StoreError
)
from quizboard.utils.helpers import now_utc, rank_suffix, utc_to_local

logger = logging.getLogger(__name__)

MERGE_LATEST = 'latest'
MERGE_BEST = 'best'


@dataclass
class LeaderboardResult:
    """What the protocol learned about a finished session"""
    confirmed: bool
    top10: list = field(default_factory=list)
    rank: int = None
    available: bool = False
    errors: list = field(default_factory=list)

    @property
    def made_leaderboard(self):
        return self.rank is not None

    def to_payload(self, tz_name='Asia/Kolkata'):
        return {
            'confirmed': self.confirmed,
            'available': self.available,
            'rank': self.rank,
            'rank_label': f"{self.rank}{rank_suffix(self.rank)}" if self.rank else None,
            'made_leaderboard': self.made_leaderboard,
            'top10': entries_payload(self.top10, tz_name),
        }


def entries_payload(rows, tz_name='Asia/Kolkata'):
    """Serialize ranked rows for the UI (phone numbers never leave the server)"""
    payload = []
    for idx, row in enumerate(rows, 1):
        achieved = utc_to_local(row.achieved_at, tz_name)
        payload.append({
            'rank': idx,
            'username': row.username,
            'name': row.name,
            'score': row.score,
            'achieved_at': achieved.isoformat() if achieved else None,
        })
    return payload


class LeaderboardService:
    """Leaderboard consistency protocol over a QuizStore"""

    def __init__(self, store, capacity=10, merge_policy=MERGE_LATEST):
        if merge_policy not in (MERGE_LATEST, MERGE_BEST):
            raise ValueError(f"Unknown leaderboard merge policy: {merge_policy}")
        self.store = store
        self.capacity = capacity
        self.merge_policy = merge_policy

    @classmethod
    def from_config(cls, store, app_config):
        return cls(
            store,
            capacity=app_config.get('LEADERBOARD_SIZE', 10),
            merge_policy=app_config.get('LEADERBOARD_MERGE_POLICY', MERGE_LATEST),
        )

    def finish_session(self, session_id, final_score, duration_seconds,
                       participant, achieved_at=None):
        """
        Record a finished session and place the participant

        1. persist session totals (non-fatal)
        2. upsert the participant's entry, trimming beyond capacity (fatal)
        3. read the ranked view (fatal to ranking only)
        4. locate the participant
        5. advisory row-count check
        """
        errors = []

        try:
            self.store.update_session(
                session_id,
                total_score=final_score,
                duration_seconds=duration_seconds,
            )
        except StoreError as exc:
            error = SessionUpdateError(f"session {session_id}: {exc}")
            logger.warning("Failed to update quiz session: %s", error)
            errors.append(error)

        try:
            self.store.upsert_leaderboard_entry(
                participant,
                final_score,
                achieved_at or now_utc(),
                keep_best=self.merge_policy == MERGE_BEST,
                capacity=self.capacity,
            )
        except StoreError as exc:
            error = LeaderboardUpsertError(f"{participant.username}: {exc}")
            logger.error("Failed to upsert leaderboard: %s", error)
            errors.append(error)
            return LeaderboardResult(confirmed=False, errors=errors)

        try:
            top = self.store.fetch_leaderboard(limit=self.capacity)
        except StoreError as exc:
            error = LeaderboardReadError(str(exc))
            logger.error("Failed to fetch leaderboard: %s", error)
            errors.append(error)
            return LeaderboardResult(confirmed=True, errors=errors)

        rank = self.rank_of(top, participant.username)
        logger.info(
            "Session %s finished: %s scored %d, rank %s",
            session_id, participant.username, final_score, rank or "unranked"
        )

        self.check_capacity()

        return LeaderboardResult(
            confirmed=True,
            top10=top,
            rank=rank,
            available=True,
            errors=errors,
        )

    def get_leaderboard(self):
        """Current ranked view; raises LeaderboardReadError"""
        try:
            return self.store.fetch_leaderboard(limit=self.capacity)
        except StoreError as exc:
            raise LeaderboardReadError(str(exc)) from exc

    def check_capacity(self):
        """Warn operators when the table holds more rows than its cap"""
        try:
            count = self.store.count_leaderboard()
        except StoreError as exc:
            logger.warning("Leaderboard health check skipped: %s", exc)
            return None

        if count > self.capacity:
            message = (
                f"Leaderboard holds {count} entries (cap is {self.capacity}); "
                "cap enforcement did not run"
            )
            logger.warning("HEALTH CHECK FAILED - %s", message)
            warnings.warn(message, CapViolationWarning, stacklevel=2)
        return count

    @staticmethod
    def rank_of(rows, username):
        """1-based position of username in the ranked rows, or None"""
        for idx, row in enumerate(rows, 1):
            if row.username == username:
                return idx
        return None
