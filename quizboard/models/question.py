"""
Question Model
Read-only catalog of four-option questions
"""
from quizboard.extensions import db


class Question(db.Model):
    """Question model"""
    __tablename__ = 'questions'

    id = db.Column(db.Integer, primary_key=True)
    question_text = db.Column(db.Text, nullable=False)
    option_1 = db.Column(db.String(500), nullable=False)
    option_2 = db.Column(db.String(500), nullable=False)
    option_3 = db.Column(db.String(500), nullable=False)
    option_4 = db.Column(db.String(500), nullable=False)

    # 1-based index of the correct option
    correct_option = db.Column(db.Integer, nullable=False)

    __table_args__ = (
        db.CheckConstraint(
            'correct_option BETWEEN 1 AND 4',
            name='ck_questions_correct_option'
        ),
    )

    def __repr__(self):
        return f'<Question {self.id}: {self.question_text[:50]}...>'

    def get_options(self):
        """Options in display order (option 1 first)"""
        return [self.option_1, self.option_2, self.option_3, self.option_4]
