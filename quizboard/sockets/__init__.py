"""
Sockets Package
"""
from quizboard.sockets.quiz_events import (
    register_socket_events,
    emit_tick,
    emit_time_up,
    emit_quiz_finished,
    start_countdown_task,
    background_dispatch
)

__all__ = [
    'register_socket_events',
    'emit_tick',
    'emit_time_up',
    'emit_quiz_finished',
    'start_countdown_task',
    'background_dispatch'
]
