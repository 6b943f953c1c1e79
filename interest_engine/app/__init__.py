"""Application factory and app-wide configuration."""

from typing import Optional

from flask import Flask
from flask_cors import CORS

from interest_engine.app.api.routes import calculate_bp
from interest_engine.logging_setup import configure_logging
from interest_engine.settings import EngineSettings


def create_app(settings: Optional[EngineSettings] = None) -> Flask:
    """Build the Flask app instance."""
    settings = settings or EngineSettings.from_env()
    configure_logging(settings.log_level)

    app = Flask(__name__)
    app.config["ENGINE_SETTINGS"] = settings

    CORS(
        app,
        resources={r"/calculate/*": {"origins": ["http://localhost:5173", "http://127.0.0.1:5173"]}},
        supports_credentials=True,
    )

    app.register_blueprint(calculate_bp, url_prefix="/calculate")
    return app
