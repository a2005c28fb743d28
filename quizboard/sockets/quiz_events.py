"""
Socket.IO Event Handlers
Countdown ticks, time-up and quiz-finished notifications
"""
import logging

from flask import current_app, session
from flask_socketio import emit, join_room, leave_room

from quizboard.extensions import socketio, active_sessions

logger = logging.getLogger(__name__)


def register_socket_events():
    """Register all Socket.IO event handlers"""

    @socketio.on('join_quiz')
    def join_quiz(data=None):
        """Participant subscribes to their own session events"""
        username = session.get('username') or (data or {}).get('username')
        if not username:
            emit('error', {'message': 'Register before joining a quiz'})
            return
        join_room(username)
        logger.debug("%s joined their quiz room", username)

        lifecycle = active_sessions.get(username)
        if lifecycle is not None:
            emit('tick', {'remaining': lifecycle.countdown.remaining_seconds()})

    @socketio.on('leave_quiz')
    def leave_quiz(data=None):
        username = session.get('username') or (data or {}).get('username')
        if username:
            leave_room(username)


def emit_tick(username, remaining):
    socketio.emit('tick', {'remaining': remaining}, room=username)


def emit_time_up(username):
    socketio.emit('time_up', {}, room=username)


def emit_quiz_finished(username, outcome, tz_name):
    socketio.emit('quiz_finished', outcome.to_payload(tz_name), room=username)


def start_countdown_task(app, lifecycle):
    """Drive a session's countdown from a Socket.IO background task"""
    def runner():
        with app.app_context():
            try:
                lifecycle.countdown.run(sleep=socketio.sleep)
            except Exception:
                logger.exception(
                    "Countdown task failed for session %s", lifecycle.session_id
                )

    return socketio.start_background_task(runner)


def background_dispatch(app=None):
    """Fire-and-forget runner for writes off the scoring path"""
    app = app or current_app._get_current_object()

    def dispatch(task, *args):
        def runner():
            with app.app_context():
                try:
                    task(*args)
                except Exception:
                    logger.exception("Background task %s failed", getattr(task, '__name__', task))

        socketio.start_background_task(runner)

    return dispatch
