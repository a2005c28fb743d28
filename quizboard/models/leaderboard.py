"""
LeaderboardEntry Model
At most one row per player and at most LEADERBOARD_SIZE rows overall
"""
from quizboard.extensions import db
from quizboard.utils.helpers import now_utc


class LeaderboardEntry(db.Model):
    """Leaderboard entry model"""
    __tablename__ = 'leaderboard'

    username = db.Column(
        db.String(100), db.ForeignKey('players.username'), primary_key=True
    )
    name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    score = db.Column(db.Integer, nullable=False)
    achieved_at = db.Column(db.DateTime(timezone=True), nullable=False, default=now_utc)

    __table_args__ = (
        db.Index('ix_leaderboard_rank', 'score', 'achieved_at'),
    )

    def __repr__(self):
        return f'<LeaderboardEntry {self.username}: {self.score}>'
