"""Translation API routes."""

from __future__ import annotations

import asyncio
from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request

import chat_translator.config as config
from chat_translator import i18n
from chat_translator.ai.exceptions import (
    DecodeError,
    HttpError,
    InvalidEndpointError,
    NoApiKeyError,
    NoResultError,
    NoSettingsError,
    TranslationError,
    TransportError,
)
from chat_translator.language_codes import (
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    Language,
)
from chat_translator.logger import get_logger
from chat_translator.models import TranslationRequest
from chat_translator.session import describe_error

translation_bp = Blueprint("translation", __name__)
logger = get_logger(__name__)

# Client-side problems (fix settings) vs. upstream failures
_ERROR_STATUS = [
    ((NoApiKeyError, NoSettingsError, InvalidEndpointError), 400),
    ((TransportError,), 504),
    ((HttpError, DecodeError, NoResultError), 502),
]


def status_for_error(error: TranslationError) -> int:
    for error_types, status in _ERROR_STATUS:
        if isinstance(error, error_types):
            return status
    return 500


def _parse_language(value: Any, default: Language) -> Language:
    if value is None or value == "":
        return default
    return Language.from_code(str(value))


@translation_bp.post("/translate")
def translate_text():
    """Translate one text with the saved provider settings."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data: Dict[str, Any] = request.get_json(silent=True) or {}

    text = data.get("text")
    if not isinstance(text, str) or not text.strip():
        return jsonify({"error": i18n.get_translation("api.text_required", lang=lang)}), 400
    if len(text) > config.MAX_TEXT_LENGTH:
        return jsonify({
            "error": i18n.get_translation("api.text_too_long", lang=lang, max_length=config.MAX_TEXT_LENGTH)
        }), 400

    languages = []
    for key, default in (("source", DEFAULT_SOURCE_LANGUAGE), ("target", DEFAULT_TARGET_LANGUAGE)):
        try:
            languages.append(_parse_language(data.get(key), default))
        except ValueError:
            return jsonify({
                "error": i18n.get_translation("api.invalid_language", lang=lang, code=data.get(key))
            }), 400
    source, target = languages

    settings = config.load_config(current_app.config["CONFIG_FILE"])
    provider_config = config.get_provider_config(settings)
    service = current_app.extensions["translation_service"]
    translation_request = TranslationRequest(text=text, source_language=source, target_language=target)

    try:
        response = asyncio.run(service.translate(translation_request, provider_config))
    except TranslationError as e:
        logger.warning("Translation request failed: %s", e)
        error_response = {"error": describe_error(e, lang), "code": e.code}
        if isinstance(e, HttpError):
            error_response["status_code"] = e.status_code
        return jsonify(error_response), status_for_error(e)

    return jsonify(response.to_dict())

