"""Web application package for the translator."""

from pathlib import Path
from typing import Optional

from flask import Flask

from chat_translator.ai.service import TranslationService
from chat_translator.config import CONFIG_FILE


def create_app(config_file: Optional[Path] = None, service: Optional[TranslationService] = None) -> Flask:
    """Application factory for the web interface."""
    from .app import build_app  # Import here to avoid circular imports

    return build_app(config_file=config_file or CONFIG_FILE, service=service or TranslationService())


__all__ = ["create_app"]
