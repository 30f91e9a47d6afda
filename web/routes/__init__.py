"""Web server route blueprints.

This package contains Flask blueprints for organizing routes by feature area.
"""

from .timer import timer_bp
from .builder import builder_bp
from .utilities import utilities_bp

__all__ = [
    'timer_bp',
    'builder_bp',
    'utilities_bp',
]


def register_all_blueprints(app):
    """Register all route blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(utilities_bp)
    app.register_blueprint(timer_bp)
    app.register_blueprint(builder_bp)
