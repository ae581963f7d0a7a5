"""
AI Module

Chat-completion client, prompt rendering and the translation service.
"""

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
from chat_translator.ai.client import ChatCompletionClient
from chat_translator.ai.service import TranslationService, validate_provider_config

__all__ = [
    'TranslationError',
    'NoApiKeyError',
    'NoSettingsError',
    'InvalidEndpointError',
    'TransportError',
    'HttpError',
    'DecodeError',
    'NoResultError',
    'ChatCompletionClient',
    'TranslationService',
    'validate_provider_config',
]
