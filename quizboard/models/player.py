"""
Player Model
Registered quiz-takers, identified by a unique username
"""
from quizboard.extensions import db
from quizboard.utils.helpers import now_utc


class Player(db.Model):
    """Player model"""
    __tablename__ = 'players'

    username = db.Column(db.String(100), primary_key=True)
    name = db.Column(db.String(200), nullable=False)
    phone = db.Column(db.String(50), nullable=False)
    registered_at = db.Column(db.DateTime(timezone=True), default=now_utc)

    def __repr__(self):
        return f'<Player {self.username}>'
