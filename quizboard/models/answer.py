"""
AnswerRecord Model
Append-only audit trail of every answer or pass
"""
from quizboard.extensions import db


class AnswerRecord(db.Model):
    """Answer record model"""
    __tablename__ = 'player_answers'

    id = db.Column(db.Integer, primary_key=True)
    session_id = db.Column(db.Integer, db.ForeignKey('quiz_sessions.id'), index=True)
    question_id = db.Column(db.Integer, db.ForeignKey('questions.id'), index=True)
    selected_option = db.Column(db.Integer, nullable=True)  # NULL when passed
    correct = db.Column(db.Boolean, nullable=False)
    answer_time_seconds = db.Column(db.Float, nullable=False)
    passed = db.Column(db.Boolean, default=False)

    def __repr__(self):
        return f'<AnswerRecord Q{self.question_id} in session {self.session_id}>'
