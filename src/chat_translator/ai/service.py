"""
Translation Service Module

Turns a TranslationRequest plus a ProviderConfig snapshot into a
TranslationResponse:
- settings validation
- prompt construction (system instruction + rendered template)
- delegation to the chat-completion client

Errors from the client propagate unchanged; mapping them to user-facing
messages is the session's job.
"""

from typing import Optional

from chat_translator.config import DEFAULT_PROMPT, DEFAULT_SYSTEM_MESSAGE
from chat_translator.logger import get_logger
from chat_translator.models import ProviderConfig, TranslationRequest, TranslationResponse
from chat_translator.ai.client import ChatCompletionClient
from chat_translator.ai.exceptions import NoApiKeyError, NoSettingsError
from chat_translator.ai.prompt import render

logger = get_logger(__name__)


def validate_provider_config(config: Optional[ProviderConfig]) -> ProviderConfig:
    """
    Validate that provider settings are filled in.

    A blank key is reported as NoApiKeyError, the more specific kind, so the
    user is pointed at the key rather than at settings in general.

    Raises:
        NoSettingsError: If there is no config, or its endpoint or model is blank.
        NoApiKeyError: If the API key is blank.
    """
    if config is None:
        raise NoSettingsError("Translation settings not configured")

    if not (config.api_key and config.api_key.strip()):
        raise NoApiKeyError("API key not configured")

    missing = [
        field_name
        for field_name, value in (
            ("endpoint_url", config.endpoint_url),
            ("model_name", config.model_name),
        )
        if not (value and value.strip())
    ]
    if missing:
        raise NoSettingsError(
            "Translation settings not configured",
            details={"missing_fields": missing},
        )
    return config


class TranslationService:
    """Single-text translation through a chat-completion endpoint."""

    def __init__(self, client: Optional[ChatCompletionClient] = None, system_message: str = DEFAULT_SYSTEM_MESSAGE):
        self.client = client or ChatCompletionClient()
        self.system_message = system_message

    def build_user_prompt(self, request: TranslationRequest, config: ProviderConfig) -> str:
        template = config.prompt_template or DEFAULT_PROMPT
        return render(
            template,
            request.source_language.display_name,
            request.target_language.display_name,
            request.text,
        )

    async def translate(self, request: TranslationRequest, config: Optional[ProviderConfig]) -> TranslationResponse:
        """
        Translate one request.

        Raises:
            NoSettingsError: Settings are absent or incomplete.
            NoApiKeyError: The API key is blank.
            TranslationError: Any client failure, unchanged.
        """
        config = validate_provider_config(config)

        logger.info(
            f"Translating {len(request.text)} chars "
            f"{request.source_language.code} -> {request.target_language.code} "
            f"(model: {config.model_name})"
        )

        translated = await self.client.send(
            endpoint_url=config.endpoint_url,
            api_key=config.api_key,
            model_name=config.model_name,
            system_prompt=self.system_message,
            user_prompt=self.build_user_prompt(request, config),
        )

        return TranslationResponse(
            translated_text=translated.strip(),
            source_language=request.source_language,
            target_language=request.target_language,
            original_text=request.text,
        )
