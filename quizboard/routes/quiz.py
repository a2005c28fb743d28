"""
Quiz Routes
Start a timed session, answer or pass questions, read the outcome
"""
import logging
import time

from flask import Blueprint, current_app, jsonify, request

from quizboard.errors import InitializationError, SessionClosedError
from quizboard.extensions import active_sessions
from quizboard.routes.registration import current_participant
from quizboard.services import SessionLifecycle, SessionState
from quizboard.sockets import (
    background_dispatch, emit_quiz_finished, emit_tick, emit_time_up,
    start_countdown_task
)
from quizboard.services.session_lifecycle import REASON_TIMEOUT, run_inline

logger = logging.getLogger(__name__)

quiz_bp = Blueprint('quiz', __name__)


def build_lifecycle(participant):
    """Wire a new lifecycle to the store, leaderboard and event stream"""
    app = current_app._get_current_object()
    tz_name = app.config['TIMEZONE']

    if app.config['RECORD_ANSWERS_IN_BACKGROUND']:
        dispatch = background_dispatch(app)
    else:
        dispatch = run_inline

    lifecycle = SessionLifecycle(
        participant,
        app.extensions['quiz_store'],
        app.extensions['leaderboard_service'],
        duration_seconds=app.config['QUIZ_DURATION_SECONDS'],
        dispatch=dispatch,
    )

    username = participant.username
    lifecycle.countdown.add_tick_listener(lambda remaining: emit_tick(username, remaining))

    def on_terminated(outcome):
        if outcome.reason == REASON_TIMEOUT:
            emit_time_up(username)
        emit_quiz_finished(username, outcome, tz_name)

    lifecycle.add_terminated_listener(on_terminated)
    return lifecycle


def session_payload(lifecycle):
    question = lifecycle.current_question
    return {
        'session_id': lifecycle.session_id,
        'state': lifecycle.state.value,
        'score': lifecycle.score,
        'remaining_seconds': lifecycle.countdown.remaining_seconds(),
        'question_number': lifecycle.position + 1,
        'question_count': lifecycle.question_count,
        'question': question.to_payload() if question else None,
    }


def closed_response(message, outcome):
    tz_name = current_app.config['TIMEZONE']
    return jsonify({
        'success': False,
        'error': message,
        'outcome': outcome.to_payload(tz_name) if outcome else None,
    }), 409


def require_lifecycle():
    participant = current_participant()
    if participant is None:
        return None, (jsonify({'success': False, 'error': 'Please register first'}), 401)
    lifecycle = active_sessions.get(participant.username)
    if lifecycle is None:
        return None, (jsonify({'success': False, 'error': 'No quiz in progress'}), 404)
    # Expiry is also noticed lazily on every request
    lifecycle.countdown.poll()
    return lifecycle, None


def evict_finished_sessions(ttl_seconds, now=None):
    """Drop terminated lifecycles older than ttl_seconds; returns how many"""
    now = time.monotonic() if now is None else now
    stale = [
        username for username, lifecycle in list(active_sessions.items())
        if lifecycle.state is SessionState.TERMINATED
        and lifecycle.terminated_at is not None
        and now - lifecycle.terminated_at >= ttl_seconds
    ]
    for username in stale:
        active_sessions.pop(username, None)
    if stale:
        logger.debug("Evicted %d finished quiz session(s)", len(stale))
    return len(stale)


@quiz_bp.route('/start', methods=['POST'])
def start_quiz():
    """Begin a new timed quiz for the registered participant"""
    evict_finished_sessions(current_app.config['FINISHED_SESSION_TTL_SECONDS'])

    participant = current_participant()
    if participant is None:
        return jsonify({'success': False, 'error': 'Please register first'}), 401

    existing = active_sessions.get(participant.username)
    if existing is not None and existing.state is SessionState.IN_PROGRESS:
        existing.countdown.poll()
        if existing.state is SessionState.IN_PROGRESS:
            return jsonify({
                'success': False,
                'error': 'A quiz is already in progress',
                **session_payload(existing),
            }), 409

    lifecycle = build_lifecycle(participant)
    try:
        lifecycle.initialize()
    except InitializationError as exc:
        logger.error("Failed to start quiz for %s: %s", participant.username, exc)
        return jsonify({'success': False, 'error': str(exc)}), 503

    active_sessions[participant.username] = lifecycle
    if current_app.config['RUN_COUNTDOWN_TASK']:
        start_countdown_task(current_app._get_current_object(), lifecycle)

    return jsonify({'success': True, **session_payload(lifecycle)}), 201


@quiz_bp.route('/current')
def current_question():
    lifecycle, error = require_lifecycle()
    if error:
        return error
    return jsonify({'success': True, **session_payload(lifecycle)})


def answer_response(result):
    tz_name = current_app.config['TIMEZONE']
    return jsonify({
        'success': True,
        'question_id': result.question_id,
        'points': result.points,
        'is_correct': result.correct,
        'passed': result.passed,
        'score': result.total_score,
        'finished': result.finished,
        'next_question': result.next_question.to_payload() if result.next_question else None,
        'outcome': result.outcome.to_payload(tz_name) if result.outcome else None,
    })


@quiz_bp.route('/answer', methods=['POST'])
def submit_answer():
    """Answer the current question with option 1-4"""
    lifecycle, error = require_lifecycle()
    if error:
        return error

    data = request.get_json(silent=True) or request.form
    try:
        option = int(data.get('option'))
    except (TypeError, ValueError):
        return jsonify({'success': False, 'error': 'Option must be a number 1-4'}), 400

    try:
        result = lifecycle.submit_answer(option)
    except ValueError as exc:
        return jsonify({'success': False, 'error': str(exc)}), 400
    except SessionClosedError as exc:
        return closed_response(str(exc), exc.outcome)
    return answer_response(result)


@quiz_bp.route('/pass', methods=['POST'])
def pass_question():
    """Skip the current question without penalty"""
    lifecycle, error = require_lifecycle()
    if error:
        return error
    try:
        result = lifecycle.pass_question()
    except SessionClosedError as exc:
        return closed_response(str(exc), exc.outcome)
    return answer_response(result)


@quiz_bp.route('/outcome')
def outcome():
    """Final score and leaderboard placement once the quiz has ended"""
    lifecycle, error = require_lifecycle()
    if error:
        return error
    if lifecycle.outcome is None:
        return jsonify({'success': False, 'error': 'Quiz has not finished yet'}), 409

    # Outcome is read once, then the finished session is released
    active_sessions.pop(lifecycle.participant.username, None)
    return jsonify({
        'success': True,
        **lifecycle.outcome.to_payload(current_app.config['TIMEZONE'])
    })
