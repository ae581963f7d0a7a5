"""Value types passed between the session, the service and the settings layer."""

from dataclasses import dataclass
from typing import Any, Dict

from chat_translator.language_codes import Language


@dataclass(frozen=True)
class TranslationRequest:
    """One translation attempt. Created per call, never persisted."""

    text: str
    source_language: Language
    target_language: Language


@dataclass(frozen=True)
class TranslationResponse:
    """Result of a successful translation."""

    translated_text: str
    source_language: Language
    target_language: Language
    original_text: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            'translated_text': self.translated_text,
            'original_text': self.original_text,
            'source': self.source_language.code,
            'target': self.target_language.code,
        }


@dataclass(frozen=True)
class ProviderConfig:
    """
    Read-only snapshot of the provider settings.

    Produced by the settings layer (see config.get_provider_config) and handed
    to the service on every call; the translation core never mutates it.
    """

    api_key: str
    endpoint_url: str
    model_name: str
    prompt_template: str = ''

    @property
    def is_configured(self) -> bool:
        """True only when key, endpoint and model are all present."""
        return all(
            value and value.strip()
            for value in (self.api_key, self.endpoint_url, self.model_name)
        )
