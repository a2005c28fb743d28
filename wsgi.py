"""
Production WSGI Entry Point
Used by gunicorn and other WSGI servers
"""
import os
from quizboard import create_app
from quizboard.extensions import socketio

# Create Flask app
app = create_app()

# For development server
if __name__ == '__main__':
    # In production, use: gunicorn -w 1 --threads 100 wsgi:app
    port = int(os.getenv('PORT', 5000))

    socketio.run(
        app,
        host='0.0.0.0',
        port=port,
        debug=True,
        use_reloader=False
    )
