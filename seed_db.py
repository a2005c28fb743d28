# seed_db.py
"""
Load the question catalog from a JSON file

    python seed_db.py questions.json [--replace]

Each item: {"question_text": "...", "options": ["a", "b", "c", "d"], "correct_option": 1}
"""
import json
import logging
import sys

from sqlalchemy.exc import SQLAlchemyError

from quizboard import create_app
from quizboard.extensions import db
from quizboard.models import Question

logger = logging.getLogger("quizboard.seed")


def build_question(item):
    """Validate one catalog item and build its Question row"""
    options = [str(option).strip() for option in item.get('options', [])]
    if len(options) != 4 or not all(options):
        raise ValueError(f"Question needs exactly four non-empty options: {item!r}")

    text = str(item.get('question_text', '')).strip()
    if not text:
        raise ValueError(f"Question text must not be empty: {item!r}")

    correct = int(item.get('correct_option', 0))
    if not 1 <= correct <= 4:
        raise ValueError(f"correct_option must be 1-4: {item!r}")

    return Question(
        question_text=text,
        option_1=options[0],
        option_2=options[1],
        option_3=options[2],
        option_4=options[3],
        correct_option=correct,
    )


def seed_questions(path, replace=False):
    """Insert every question from `path`; returns the number inserted"""
    with open(path, encoding='utf-8') as handle:
        items = json.load(handle)

    questions = [build_question(item) for item in items]

    try:
        if replace:
            Question.query.delete()
        db.session.add_all(questions)
        db.session.commit()
    except SQLAlchemyError:
        db.session.rollback()
        raise

    logger.info("Seeded %d question(s) from %s", len(questions), path)
    return len(questions)


if __name__ == '__main__':
    if len(sys.argv) < 2:
        print(__doc__)
        sys.exit(1)

    app = create_app()
    with app.app_context():
        seed_questions(sys.argv[1], replace='--replace' in sys.argv[2:])
