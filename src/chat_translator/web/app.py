"""Flask application configuration and blueprint registration."""

from __future__ import annotations

from pathlib import Path

from flask import Flask, g, jsonify, request

from chat_translator import i18n
from chat_translator.ai.service import TranslationService
from chat_translator.language_codes import get_all_languages
from chat_translator.logger import get_logger

from .routes.settings import settings_bp
from .routes.translation import translation_bp

logger = get_logger(__name__)


def get_current_language() -> str:
    """
    Determine the UI language for messages.
    Priority: query param > cookie > Accept-Language header > default (en)
    """
    lang = request.args.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    lang = request.cookies.get('lang')
    if lang and lang in i18n.SUPPORTED_LANGUAGES:
        return lang

    accept_lang = request.accept_languages.best_match(
        list(i18n.SUPPORTED_LANGUAGES.keys()),
        default=i18n.DEFAULT_LANGUAGE
    )
    if accept_lang:
        return i18n.normalize_language_code(accept_lang)

    return i18n.DEFAULT_LANGUAGE


def build_app(config_file: Path, service: TranslationService) -> Flask:
    """Create and configure the Flask application."""
    app = Flask(__name__)

    # Ensure JSON responses keep Unicode data.
    app.json.ensure_ascii = False
    app.config["CONFIG_FILE"] = Path(config_file)
    app.extensions["translation_service"] = service

    @app.before_request
    def before_request():
        """Set current language in g before each request."""
        g.lang = get_current_language()

    register_blueprints(app)
    register_default_routes(app)

    return app


def register_blueprints(app: Flask) -> None:
    """Register Flask blueprints."""
    app.register_blueprint(translation_bp, url_prefix="/api")
    app.register_blueprint(settings_bp, url_prefix="/api/settings")


def register_default_routes(app: Flask) -> None:
    """Register health and metadata routes."""

    @app.get("/health")
    def health_check():
        logger.debug("Health check requested")
        return jsonify({"status": "ok"})

    @app.get("/api/languages")
    def list_languages():
        return jsonify({
            "languages": get_all_languages(),
            "ui_languages": i18n.get_available_languages(),
        })

    @app.errorhandler(500)
    def internal_error(e):
        logger.exception("Internal server error: %s", e)
        return jsonify({"error": "Internal server error"}), 500
