from flask import Flask

from .routes import inventory_bp, DATABASE_EXTENSION

def create_app(database=None):
    """Create the Flask application.

    Args:
        database: Optional database interface; defaults to the configured connection
    """
    app = Flask(__name__)
    if database is not None:
        app.extensions[DATABASE_EXTENSION] = database
    app.register_blueprint(inventory_bp)
    return app

__all__ = ['create_app', 'inventory_bp']
