"""Settings management API routes."""

from __future__ import annotations

from typing import Any, Dict

from flask import Blueprint, current_app, g, jsonify, request

import chat_translator.config as config
from chat_translator import i18n
from chat_translator.config import BUILTIN_PROVIDERS, LOG_MODES, PROVIDER_PRESETS
from chat_translator.logger import _clear_log_mode_cache, get_logger

settings_bp = Blueprint("settings", __name__)
logger = get_logger(__name__)

EDITABLE_KEYS = ["provider", "api_key", "api_url", "model", "prompt", "timeout", "log_mode"]


def _settings_meta() -> Dict[str, Any]:
    return {
        "providers": [
            {
                "id": provider,
                "name": PROVIDER_PRESETS[provider]["name"],
                "api_url": PROVIDER_PRESETS[provider]["api_url"],
                "model": PROVIDER_PRESETS[provider]["model"],
            }
            for provider in BUILTIN_PROVIDERS
        ],
        "default_prompt": config.DEFAULT_PROMPT,
        "log_modes": LOG_MODES,
    }


@settings_bp.get("/")
def get_settings():
    """Return current settings plus provider presets for the settings form."""
    current_config = config.load_config(current_app.config["CONFIG_FILE"])
    logger.debug("Settings retrieved")
    return jsonify({"config": current_config, "meta": _settings_meta()})


@settings_bp.put("/")
def update_settings():
    """Validate and persist settings."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    data = request.get_json(silent=True)
    if not isinstance(data, dict) or not isinstance(data.get("config"), dict):
        return jsonify({"error": i18n.get_translation("api.config_missing", lang=lang)}), 400

    new_config = {key: value for key, value in data["config"].items() if key in EDITABLE_KEYS}
    validation_error = config.validate_settings(new_config)
    if validation_error:
        return jsonify({"error": validation_error}), 400

    config_file = current_app.config["CONFIG_FILE"]
    current_config = config.load_config(config_file)

    # Switching provider without explicit endpoint/model picks up the preset
    provider = new_config.get("provider")
    if provider and provider != current_config.get("provider"):
        preset = config.provider_defaults(provider)
        new_config.setdefault("api_url", preset["api_url"])
        new_config.setdefault("model", preset["model"])

    current_config.update(new_config)

    try:
        config.save_config(current_config, config_file)
    except OSError:
        return jsonify({"error": i18n.get_translation("api.failed_to_save_settings", lang=lang)}), 500

    # Clear log mode cache to ensure new log mode takes effect
    if "log_mode" in new_config:
        _clear_log_mode_cache(config_file)

    logger.info("Settings updated successfully")
    return jsonify({"message": "Settings updated successfully", "config": current_config})


@settings_bp.post("/reset")
def reset_settings():
    """Restore endpoint, model and prompt to the selected provider's defaults."""
    lang = getattr(g, 'lang', i18n.DEFAULT_LANGUAGE)
    try:
        current_config = config.reset_to_defaults(current_app.config["CONFIG_FILE"])
    except OSError:
        return jsonify({"error": i18n.get_translation("api.failed_to_save_settings", lang=lang)}), 500
    return jsonify({"message": "Settings reset to defaults", "config": current_config})


@settings_bp.get("/translations")
def get_translations():
    """Return UI message packs for the requested language (for frontend JavaScript)."""
    lang = request.args.get("lang", i18n.DEFAULT_LANGUAGE)
    return jsonify({
        "translations": i18n.get_all_translations(lang),
        "lang": i18n.normalize_language_code(lang),
        "available_languages": i18n.get_available_languages(),
    })
