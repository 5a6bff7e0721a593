from flask import Flask
from flask_cors import CORS
from .config import Config


def create_app(config_object=Config) -> Flask:
    app = Flask(__name__)
    app.config.from_object(config_object)
    app.logger.setLevel(app.config.get("LOG_LEVEL", "INFO"))

    # CORS; the skip summary travels in headers
    CORS(
        app,
        resources={r"/*": {"origins": app.config.get("CORS_ORIGINS", "*")}},
        expose_headers=["X-Consolidated-Count", "X-Skipped-Count", "X-Skipped-Details", "Content-Disposition"],
    )

    # Blueprints
    from .routes import bp as api_bp  # noqa: WPS433 (import within function)
    app.register_blueprint(api_bp, url_prefix="/api")

    return app
