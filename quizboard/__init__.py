"""
Application Factory
Creates and configures the Flask application
"""
import logging

from flask import Flask

from quizboard.config import get_config
from quizboard.extensions import db, socketio
from quizboard.utils.logging_config import configure_logging

logger = logging.getLogger(__name__)


def create_app(config_name=None):
    """
    Application factory pattern
    Creates and configures Flask app
    """
    app = Flask(__name__)

    # Load configuration
    if config_name:
        from quizboard.config import config
        app.config.from_object(config[config_name])
    else:
        app.config.from_object(get_config())

    configure_logging(app.config['LOG_LEVEL'])

    # Initialize extensions
    db.init_app(app)
    socketio.init_app(
        app,
        cors_allowed_origins=app.config['SOCKETIO_CORS_ALLOWED_ORIGINS'],
        async_mode=app.config['SOCKETIO_ASYNC_MODE']
    )

    # Quiz core services
    from quizboard.services import QuizStore, LeaderboardService
    store = QuizStore()
    app.extensions['quiz_store'] = store
    app.extensions['leaderboard_service'] = LeaderboardService.from_config(store, app.config)

    # Register blueprints
    from quizboard.routes import registration_bp, quiz_bp, leaderboard_bp
    app.register_blueprint(registration_bp)
    app.register_blueprint(quiz_bp, url_prefix='/quiz')
    app.register_blueprint(leaderboard_bp)

    # Register Socket.IO events
    from quizboard.sockets import register_socket_events
    with app.app_context():
        register_socket_events()

    # Create database tables
    with app.app_context():
        db.create_all()
        logger.info("Database tables created/verified")

    return app
