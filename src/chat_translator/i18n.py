"""
Internationalization (i18n) for user-facing messages.

Loads JSON language packs from the `locales` directory and looks strings up
by dotted key, falling back to English. Log messages are NOT translated -
they remain in English for debugging purposes.
"""

import json
from pathlib import Path
from typing import Any, Dict, List, Optional

from chat_translator.logger import get_logger

logger = get_logger(__name__)

# Language pack directory
LOCALES_DIR = Path(__file__).parent / "locales"

# Default language
DEFAULT_LANGUAGE = "en"

# Supported languages with their display names
SUPPORTED_LANGUAGES = {
    "en": {"name": "English", "native_name": "English"},
    "zh-CN": {"name": "Chinese (Simplified)", "native_name": "简体中文"},
}

# Cache for loaded language packs
_language_cache: Dict[str, Dict[str, Any]] = {}


def load_language(lang_code: str) -> Dict[str, Any]:
    """
    Load a language pack from JSON file.

    Args:
        lang_code: The language code (e.g., 'en', 'zh-CN')

    Returns:
        Dictionary containing all translations for the language
    """
    lang_code = normalize_language_code(lang_code)
    if lang_code in _language_cache:
        return _language_cache[lang_code]

    lang_file = LOCALES_DIR / f"{lang_code}.json"

    if not lang_file.exists():
        logger.debug(f"Language file not found: {lang_file}, falling back to {DEFAULT_LANGUAGE}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}

    try:
        with open(lang_file, 'r', encoding='utf-8') as f:
            translations = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        logger.error(f"Failed to load language file {lang_file}: {e}")
        if lang_code != DEFAULT_LANGUAGE:
            return load_language(DEFAULT_LANGUAGE)
        return {}

    _language_cache[lang_code] = translations
    logger.debug(f"Loaded language pack: {lang_code}")
    return translations


def normalize_language_code(lang_code: str) -> str:
    """
    Normalize a language code to match our supported languages.

    Args:
        lang_code: Raw language code (e.g., 'zh', 'zh-cn', 'zh_CN')

    Returns:
        Normalized language code (e.g., 'zh-CN')
    """
    if not lang_code:
        return DEFAULT_LANGUAGE

    lang_lower = lang_code.lower().replace('_', '-')

    for supported in SUPPORTED_LANGUAGES:
        if lang_lower == supported.lower():
            return supported

    # Partial match (e.g., 'zh' -> 'zh-CN')
    lang_prefix = lang_lower.split('-')[0]
    for supported in SUPPORTED_LANGUAGES:
        if supported.lower().startswith(lang_prefix):
            return supported

    return DEFAULT_LANGUAGE


def get_nested_value(data: Dict[str, Any], key_path: str) -> Optional[str]:
    """Get a string from a nested dictionary using dot notation ('errors.no_api_key')."""
    current: Any = data
    for key in key_path.split('.'):
        if isinstance(current, dict) and key in current:
            current = current[key]
        else:
            return None
    return current if isinstance(current, str) else None


def get_translation(key: str, lang: str = DEFAULT_LANGUAGE, **kwargs) -> str:
    """
    Get a translated string for the given key and language.

    Args:
        key: The translation key (dot notation, e.g., 'errors.http_404')
        lang: The language code (default: 'en')
        **kwargs: Optional format arguments for string interpolation

    Returns:
        The translated string, or the key itself if not found
    """
    lang = normalize_language_code(lang)
    value = get_nested_value(load_language(lang), key)

    if value is None and lang != DEFAULT_LANGUAGE:
        value = get_nested_value(load_language(DEFAULT_LANGUAGE), key)

    if value is None:
        logger.debug(f"Translation not found for key: {key} (lang: {lang})")
        return key

    if kwargs:
        try:
            value = value.format(**kwargs)
        except KeyError as e:
            logger.warning(f"Missing interpolation key {e} for translation: {key}")

    return value


def get_available_languages() -> List[Dict[str, Any]]:
    """List UI languages and whether their pack is installed."""
    return [
        {
            "code": code,
            "name": info["name"],
            "native_name": info["native_name"],
            "available": (LOCALES_DIR / f"{code}.json").exists(),
        }
        for code, info in SUPPORTED_LANGUAGES.items()
    ]


def clear_cache() -> None:
    """Clear the language cache (useful for development/testing)."""
    _language_cache.clear()
    logger.debug("Language cache cleared")


def get_all_translations(lang: str = DEFAULT_LANGUAGE) -> Dict[str, Any]:
    """Get all translations for a language (useful for frontend)."""
    return load_language(normalize_language_code(lang))
