"""
QuizSession Model
One quiz attempt, created at start and updated once at termination
"""
from quizboard.extensions import db
from quizboard.utils.helpers import now_utc


class QuizSession(db.Model):
    """Quiz session model"""
    __tablename__ = 'quiz_sessions'

    id = db.Column(db.Integer, primary_key=True)
    username = db.Column(
        db.String(100), db.ForeignKey('players.username'), index=True
    )
    start_time = db.Column(db.DateTime(timezone=True), default=now_utc)
    total_score = db.Column(db.Integer, nullable=False, default=0)
    duration_seconds = db.Column(db.Integer, nullable=False, default=0)

    answers = db.relationship('AnswerRecord', backref='session', lazy=True)

    def __repr__(self):
        return f'<QuizSession {self.id} by {self.username}: {self.total_score}>'
