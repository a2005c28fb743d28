"""
Routes Package
Exports all route blueprints
"""
from quizboard.routes.registration import registration_bp
from quizboard.routes.quiz import quiz_bp
from quizboard.routes.leaderboard import leaderboard_bp

__all__ = ['registration_bp', 'quiz_bp', 'leaderboard_bp']
