"""
Registration Routes
Player sign-up before a quiz
"""
import logging

from flask import Blueprint, current_app, jsonify, request, session

from quizboard.errors import RegistrationError, StoreError, UsernameTakenError
from quizboard.models import Participant

logger = logging.getLogger(__name__)

registration_bp = Blueprint('registration', __name__)


def read_registration(data):
    """Trimmed Participant from form/JSON data; all fields required"""
    fields = {key: str(data.get(key) or '').strip() for key in ('username', 'name', 'phone')}
    missing = [key for key, value in fields.items() if not value]
    if missing:
        raise RegistrationError(f"Please fill in all fields: {', '.join(missing)}")
    return Participant(**fields)


def current_participant():
    """Registered participant for this browser session, if any"""
    if not session.get('username'):
        return None
    return Participant(
        username=session['username'],
        name=session.get('name', ''),
        phone=session.get('phone', ''),
    )


@registration_bp.route('/register', methods=['POST'])
def register():
    """Register a new player"""
    data = request.get_json(silent=True) or request.form
    store = current_app.extensions['quiz_store']

    try:
        participant = read_registration(data)
        if store.get_player(participant.username) is not None:
            raise UsernameTakenError(
                f"Username '{participant.username}' is already taken"
            )
        store.insert_player(participant)
    except UsernameTakenError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 409
    except RegistrationError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 400
    except StoreError:
        logger.exception("Registration failed")
        return jsonify({
            'success': False,
            'error': 'There was an error during registration. Please try again.'
        }), 503

    session['username'] = participant.username
    session['name'] = participant.name
    session['phone'] = participant.phone
    logger.info("Registered player %s", participant.username)

    return jsonify({'success': True, 'username': participant.username}), 201


@registration_bp.route('/logout', methods=['POST'])
def logout():
    """Forget the registered player (play again as someone else)"""
    session.clear()
    return jsonify({'success': True})
