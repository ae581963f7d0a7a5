"""
Translation session: the state behind one translator window.

Holds input/output text and language selection, debounces auto-translation,
keeps at most one translation's effect alive at a time, and turns service
errors into user-facing messages.

A translation is tagged with a generation number when it starts. Starting a
newer one, clearing, or swapping bumps the generation; when an older call
finishes its outcome no longer matches and is dropped. The HTTP request
itself is not aborted.
"""

import asyncio
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

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
from chat_translator.ai.service import TranslationService
from chat_translator.config import AUTO_TRANSLATE_DELAY, COPY_FEEDBACK_DELAY
from chat_translator.language_codes import (
    DEFAULT_SOURCE_LANGUAGE,
    DEFAULT_TARGET_LANGUAGE,
    Language,
)
from chat_translator.logger import get_logger
from chat_translator.models import ProviderConfig, TranslationRequest
from chat_translator.scheduler import AsyncioScheduler, Scheduler

logger = get_logger(__name__)


@dataclass(frozen=True)
class SessionState:
    """Snapshot of a session handed to observers."""

    input_text: str
    output_text: str
    source_language: Language
    target_language: Language
    is_translating: bool
    last_error: Optional[TranslationError]
    is_copied: bool


_ERROR_MESSAGE_KEYS = [
    (NoApiKeyError, "errors.no_api_key"),
    (NoSettingsError, "errors.no_settings"),
    (InvalidEndpointError, "errors.invalid_endpoint"),
    (TransportError, "errors.transport"),
    (DecodeError, "errors.decode"),
    (NoResultError, "errors.no_result"),
]


def describe_error(error: TranslationError, lang: str = i18n.DEFAULT_LANGUAGE) -> str:
    """Human-readable message for a translation error kind."""
    if isinstance(error, HttpError):
        code = error.status_code
        if code == 401:
            return i18n.get_translation("errors.http_401", lang)
        if code == 404:
            return i18n.get_translation("errors.http_404", lang)
        if code == 429:
            return i18n.get_translation("errors.http_429", lang)
        if 500 <= code <= 599:
            return i18n.get_translation("errors.http_5xx", lang, code=code)
        return i18n.get_translation("errors.http_other", lang, code=code)

    for error_type, key in _ERROR_MESSAGE_KEYS:
        if isinstance(error, error_type):
            return i18n.get_translation(key, lang)
    return i18n.get_translation("errors.unknown", lang, error=str(error))


def _discard_copy(text: str) -> None:
    logger.debug("Copy requested but no clipboard is attached")


class TranslationSession:
    """
    View-model for the translator.

    Args:
        service: Translation service used for every call.
        settings: Returns the current ProviderConfig snapshot (or None when the
            user has not configured a provider). Called once per translation.
        scheduler: Timer/task scheduler; defaults to the running asyncio loop.
        clipboard: Callable receiving the text to copy. Without one, copying
            only drives the `is_copied` feedback.
        debounce_delay: Quiet period before an edit triggers auto-translation.
        copy_reset_delay: How long `is_copied` stays true after a copy.
        ui_language: Language used for error messages.
    """

    def __init__(
        self,
        service: TranslationService,
        settings: Callable[[], Optional[ProviderConfig]],
        scheduler: Optional[Scheduler] = None,
        clipboard: Optional[Callable[[str], None]] = None,
        debounce_delay: float = AUTO_TRANSLATE_DELAY,
        copy_reset_delay: float = COPY_FEEDBACK_DELAY,
        source_language: Language = DEFAULT_SOURCE_LANGUAGE,
        target_language: Language = DEFAULT_TARGET_LANGUAGE,
        ui_language: str = i18n.DEFAULT_LANGUAGE,
    ):
        self.service = service
        self.settings = settings
        self.scheduler = scheduler or AsyncioScheduler()
        self.clipboard = clipboard or _discard_copy
        self.debounce_delay = debounce_delay
        self.copy_reset_delay = copy_reset_delay
        self.ui_language = ui_language

        self._input_text = ""
        self._output_text = ""
        self._source_language = source_language
        self._target_language = target_language
        self._is_translating = False
        self._last_error: Optional[TranslationError] = None
        self._is_copied = False

        self._generation = 0
        self._debounce_handle: Any = None
        self._copy_reset_handle: Any = None
        self._listeners: List[Callable[[SessionState], None]] = []

    # -- observation ---------------------------------------------------------

    @property
    def input_text(self) -> str:
        return self._input_text

    @property
    def output_text(self) -> str:
        return self._output_text

    @property
    def source_language(self) -> Language:
        return self._source_language

    @property
    def target_language(self) -> Language:
        return self._target_language

    @property
    def is_translating(self) -> bool:
        return self._is_translating

    @property
    def last_error(self) -> Optional[TranslationError]:
        return self._last_error

    @property
    def is_copied(self) -> bool:
        return self._is_copied

    @property
    def error_message(self) -> Optional[str]:
        if self._last_error is None:
            return None
        return describe_error(self._last_error, self.ui_language)

    @property
    def state(self) -> SessionState:
        return SessionState(
            input_text=self._input_text,
            output_text=self._output_text,
            source_language=self._source_language,
            target_language=self._target_language,
            is_translating=self._is_translating,
            last_error=self._last_error,
            is_copied=self._is_copied,
        )

    def subscribe(self, listener: Callable[[SessionState], None]) -> Callable[[], None]:
        """
        Register a callback invoked with a fresh SessionState after every change.

        Returns:
            A function that unregisters the callback.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self) -> None:
        state = self.state
        for listener in list(self._listeners):
            try:
                listener(state)
            except Exception:
                logger.exception("Session listener failed")

    # -- input ---------------------------------------------------------------

    def set_input_text(self, text: str) -> None:
        """Update the input and (re)start the auto-translate countdown."""
        self._input_text = text
        self._cancel_debounce()
        self._debounce_handle = self.scheduler.call_later(
            self.debounce_delay, lambda: self._on_debounce_elapsed(text)
        )
        self._notify()

    def set_languages(self, source: Optional[Language] = None, target: Optional[Language] = None) -> None:
        """Change the language selection. Does not trigger a translation."""
        if source is not None:
            self._source_language = source
        if target is not None:
            self._target_language = target
        self._notify()

    def _on_debounce_elapsed(self, scheduled_text: str) -> None:
        self._debounce_handle = None
        if self._input_text != scheduled_text:
            return
        if not scheduled_text.strip():
            return
        logger.debug("Input settled, starting auto-translation")
        self.translate_now()

    def _cancel_debounce(self) -> None:
        if self._debounce_handle is not None:
            self._debounce_handle.cancel()
            self._debounce_handle = None

    # -- translation ---------------------------------------------------------

    def translate_now(self) -> Optional['asyncio.Future[None]']:
        """
        Translate the current input.

        Blank input is a no-op and returns None. Otherwise any translation
        still in flight is superseded, `is_translating` is set, and the task
        running the new translation is returned.
        """
        if not self._input_text.strip():
            return None

        self._generation += 1
        generation = self._generation
        request = TranslationRequest(
            text=self._input_text,
            source_language=self._source_language,
            target_language=self._target_language,
        )

        self._is_translating = True
        self._last_error = None
        self._notify()

        return self.scheduler.spawn(self._run_translation(generation, request))

    async def _run_translation(self, generation: int, request: TranslationRequest) -> None:
        try:
            response = await self.service.translate(request, self.settings())
        except TranslationError as e:
            self._fail(generation, e)
            return
        except Exception as e:
            logger.exception("Unexpected error during translation")
            self._fail(generation, TranslationError(str(e) or type(e).__name__, code="unexpected_error"))
            return

        if generation != self._generation:
            logger.debug(f"Dropping result from superseded translation #{generation}")
            return

        self._output_text = response.translated_text
        self._is_translating = False
        self._notify()

    def _fail(self, generation: int, error: TranslationError) -> None:
        if generation != self._generation:
            logger.debug(f"Dropping error from superseded translation #{generation}: {error}")
            return
        logger.warning(f"Translation failed: {error}")
        self._last_error = error
        self._output_text = ""
        self._is_translating = False
        self._notify()

    def _invalidate_in_flight(self) -> None:
        self._generation += 1
        self._is_translating = False

    # -- actions -------------------------------------------------------------

    def swap_languages(self) -> None:
        """Exchange languages and input/output text. No translation is triggered."""
        self._cancel_debounce()
        self._invalidate_in_flight()
        self._source_language, self._target_language = self._target_language, self._source_language
        self._input_text, self._output_text = self._output_text, self._input_text
        self._notify()

    def clear(self) -> None:
        """Reset texts and error; language selection is kept."""
        self._cancel_debounce()
        self._invalidate_in_flight()
        self._input_text = ""
        self._output_text = ""
        self._last_error = None
        self._notify()

    def copy_result(self) -> None:
        """Copy the output to the clipboard and flag `is_copied` for a while."""
        self.clipboard(self._output_text)
        if self._copy_reset_handle is not None:
            self._copy_reset_handle.cancel()
        self._is_copied = True
        self._copy_reset_handle = self.scheduler.call_later(self.copy_reset_delay, self._reset_copied)
        self._notify()

    def _reset_copied(self) -> None:
        self._copy_reset_handle = None
        self._is_copied = False
        self._notify()
