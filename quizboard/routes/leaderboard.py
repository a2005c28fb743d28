"""
Leaderboard Routes
Public top-10 view
"""
import logging

from flask import Blueprint, current_app, jsonify

from quizboard.errors import LeaderboardReadError
from quizboard.routes.registration import current_participant
from quizboard.services.leaderboard_service import LeaderboardService, entries_payload

logger = logging.getLogger(__name__)

leaderboard_bp = Blueprint('leaderboard', __name__)


@leaderboard_bp.route('/leaderboard')
def leaderboard():
    """Current ranked leaderboard"""
    service = current_app.extensions['leaderboard_service']
    try:
        rows = service.get_leaderboard()
    except LeaderboardReadError as exc:
        logger.error("Failed to load leaderboard: %s", exc)
        return jsonify({'success': False, 'error': 'Leaderboard unavailable'}), 503

    participant = current_participant()
    rank = LeaderboardService.rank_of(rows, participant.username) if participant else None

    return jsonify({
        'success': True,
        'entries': entries_payload(rows, current_app.config['TIMEZONE']),
        'your_rank': rank,
    })
