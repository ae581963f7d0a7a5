"""Tests for TranslationSession: debounce, supersession, swap, clear, copy feedback."""

import asyncio

import pytest

from chat_translator.ai.exceptions import (
    DecodeError,
    HttpError,
    NoApiKeyError,
    NoSettingsError,
    TranslationError,
    TransportError,
)
from chat_translator.language_codes import Language
from chat_translator.models import TranslationResponse
from chat_translator.session import TranslationSession, describe_error


def respond(request, text):
    return TranslationResponse(
        translated_text=text,
        source_language=request.source_language,
        target_language=request.target_language,
        original_text=request.text,
    )


@pytest.fixture
def make_session(fake_service, scheduler, provider_config):
    def factory(**kwargs):
        kwargs.setdefault("settings", lambda: provider_config)
        return TranslationSession(service=fake_service, scheduler=scheduler, **kwargs)
    return factory


async def _settle():
    # Let spawned tasks reach their first await
    for _ in range(3):
        await asyncio.sleep(0)


class TestTranslateNow:

    def test_success_updates_output_and_clears_flag(self, make_session, fake_service, provider_config):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            task = session.translate_now()

            assert session.is_translating is True
            assert session.last_error is None
            await _settle()

            request, config = fake_service.calls[0]
            assert request.text == "Hello"
            assert request.source_language is Language.ENGLISH
            assert request.target_language is Language.CHINESE
            assert config is provider_config

            fake_service.pending[0].set_result(respond(request, "你好"))
            await task
            return session

        session = asyncio.run(scenario())
        assert session.output_text == "你好"
        assert session.is_translating is False
        assert session.last_error is None

    def test_failure_sets_error_and_clears_output(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            first = session.translate_now()
            await _settle()
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "你好"))
            await first

            second = session.translate_now()
            await _settle()
            fake_service.pending[1].set_exception(HttpError(500))
            await second
            return session

        session = asyncio.run(scenario())
        assert isinstance(session.last_error, HttpError)
        assert session.output_text == ""
        assert session.is_translating is False
        assert "500" in session.error_message

    def test_new_translation_clears_previous_error(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            first = session.translate_now()
            await _settle()
            fake_service.pending[0].set_exception(TransportError("offline"))
            await first
            assert session.last_error is not None

            session.translate_now()
            return session

        session = asyncio.run(scenario())
        assert session.last_error is None
        assert session.is_translating is True

    def test_unexpected_exception_becomes_translation_error(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            first = session.translate_now()
            await _settle()
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "你好"))
            await first

            second = session.translate_now()
            await _settle()
            fake_service.pending[1].set_exception(RuntimeError("socket exploded"))
            await second
            return session

        session = asyncio.run(scenario())
        assert isinstance(session.last_error, TranslationError)
        assert session.last_error.code == "unexpected_error"
        assert session.output_text == ""
        assert session.is_translating is False
        assert "socket exploded" in session.error_message

    @pytest.mark.parametrize("text", ["", "   ", "\n\t "])
    def test_blank_input_is_a_no_op(self, make_session, fake_service, text):
        async def scenario():
            session = make_session()
            session.set_input_text(text)
            before = session.state
            result = session.translate_now()
            await _settle()
            return session, before, result

        session, before, result = asyncio.run(scenario())
        assert result is None
        assert session.state == before
        assert fake_service.calls == []

    def test_missing_settings_surface_as_error(self, fake_service, scheduler):
        from chat_translator.ai.service import TranslationService

        async def scenario():
            session = TranslationSession(
                service=TranslationService(), settings=lambda: None, scheduler=scheduler
            )
            session.set_input_text("Hello")
            await session.translate_now()
            return session

        session = asyncio.run(scenario())
        assert isinstance(session.last_error, NoSettingsError)
        assert session.is_translating is False
        assert "Settings" in session.error_message


class TestSupersession:
    """Only the newest translation's outcome reaches the state."""

    def test_late_stale_success_is_ignored(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("first")
            old = session.translate_now()
            session.set_input_text("second")
            new = session.translate_now()
            await _settle()

            fake_service.pending[1].set_result(respond(fake_service.calls[1][0], "SECOND"))
            await new
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "FIRST"))
            await old
            return session

        session = asyncio.run(scenario())
        assert session.output_text == "SECOND"
        assert session.is_translating is False

    def test_early_stale_success_does_not_end_translating(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("first")
            old = session.translate_now()
            session.set_input_text("second")
            new = session.translate_now()
            await _settle()

            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "FIRST"))
            await old
            assert session.output_text == ""
            assert session.is_translating is True

            fake_service.pending[1].set_result(respond(fake_service.calls[1][0], "SECOND"))
            await new
            return session

        session = asyncio.run(scenario())
        assert session.output_text == "SECOND"
        assert session.is_translating is False

    def test_stale_error_is_ignored(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("first")
            old = session.translate_now()
            new = session.translate_now()
            await _settle()

            fake_service.pending[0].set_exception(HttpError(429))
            await old
            fake_service.pending[1].set_result(respond(fake_service.calls[1][0], "ok"))
            await new
            return session

        session = asyncio.run(scenario())
        assert session.last_error is None
        assert session.output_text == "ok"

    def test_new_error_wins_over_stale_success(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("first")
            old = session.translate_now()
            new = session.translate_now()
            await _settle()

            fake_service.pending[1].set_exception(NoApiKeyError("no key"))
            await new
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "stale"))
            await old
            return session

        session = asyncio.run(scenario())
        assert isinstance(session.last_error, NoApiKeyError)
        assert session.output_text == ""


class TestDebounce:

    def test_rapid_edits_trigger_one_translation_for_final_text(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session()
            for text in ("H", "He", "Hel", "Hell", "Hello"):
                session.set_input_text(text)
                scheduler.advance(0.3)
            assert fake_service.calls == []

            scheduler.advance(1.0)
            await _settle()
            return session

        session = asyncio.run(scenario())
        assert [call[0].text for call in fake_service.calls] == ["Hello"]
        assert session.is_translating is True

    def test_trigger_waits_for_full_delay(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            scheduler.advance(0.75)
            await _settle()
            assert fake_service.calls == []
            scheduler.advance(0.25)
            await _settle()
            return session

        asyncio.run(scenario())
        assert len(fake_service.calls) == 1

    def test_custom_delay(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session(debounce_delay=0.25)
            session.set_input_text("Hello")
            scheduler.advance(0.25)
            await _settle()

        asyncio.run(scenario())
        assert len(fake_service.calls) == 1

    def test_blank_input_does_not_trigger(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session()
            session.set_input_text("   ")
            scheduler.advance(5)
            await _settle()
            return session

        session = asyncio.run(scenario())
        assert fake_service.calls == []
        assert session.is_translating is False

    def test_clear_cancels_pending_trigger(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            session.clear()
            scheduler.advance(5)
            await _settle()

        asyncio.run(scenario())
        assert fake_service.calls == []
        assert scheduler.pending_timers == []


class TestSwapAndClear:

    def test_swap_exchanges_languages_and_texts(self, make_session, fake_service, scheduler):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            task = session.translate_now()
            await _settle()
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "你好"))
            await task

            session.swap_languages()
            scheduler.advance(5)
            await _settle()
            return session

        session = asyncio.run(scenario())
        assert session.source_language is Language.CHINESE
        assert session.target_language is Language.ENGLISH
        assert session.input_text == "你好"
        assert session.output_text == "Hello"
        assert len(fake_service.calls) == 1

    def test_double_swap_restores_state(self, make_session, fake_service):
        async def scenario():
            session = make_session(source_language=Language.FRENCH, target_language=Language.KOREAN)
            session.set_input_text("Bonjour")
            task = session.translate_now()
            await _settle()
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "안녕하세요"))
            await task

            before = session.state
            session.swap_languages()
            session.swap_languages()
            return before, session.state

        before, after = asyncio.run(scenario())
        assert after == before

    def test_clear_keeps_languages(self, make_session):
        async def scenario():
            session = make_session()
            session.set_languages(source=Language.SPANISH, target=Language.GERMAN)
            session.set_input_text("Hola")
            session.clear()
            return session

        session = asyncio.run(scenario())
        assert session.input_text == ""
        assert session.output_text == ""
        assert session.last_error is None
        assert session.source_language is Language.SPANISH
        assert session.target_language is Language.GERMAN

    def test_clear_discards_in_flight_result(self, make_session, fake_service):
        async def scenario():
            session = make_session()
            session.set_input_text("Hello")
            task = session.translate_now()
            await _settle()
            session.clear()
            assert session.is_translating is False
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "你好"))
            await task
            return session

        session = asyncio.run(scenario())
        assert session.output_text == ""


class TestCopyResult:

    def test_copy_writes_clipboard_and_resets_after_delay(self, make_session, fake_service, scheduler):
        copied = []

        async def scenario():
            session = make_session(clipboard=copied.append)
            session.set_input_text("Hello")
            task = session.translate_now()
            await _settle()
            fake_service.pending[0].set_result(respond(fake_service.calls[0][0], "你好"))
            await task

            session.copy_result()
            assert session.is_copied is True
            scheduler.advance(1.5)
            assert session.is_copied is True
            scheduler.advance(0.5)
            return session

        session = asyncio.run(scenario())
        assert copied == ["你好"]
        assert session.is_copied is False

    def test_second_copy_restarts_feedback_timer(self, make_session, scheduler):
        copied = []
        session = make_session(clipboard=copied.append)

        session.copy_result()
        scheduler.advance(1.5)
        session.copy_result()
        scheduler.advance(1.5)
        assert session.is_copied is True
        scheduler.advance(0.5)
        assert session.is_copied is False
        assert len(copied) == 2

    def test_copy_without_clipboard_still_gives_feedback(self, make_session, scheduler):
        session = make_session()

        session.copy_result()
        assert session.is_copied is True
        scheduler.advance(2.0)
        assert session.is_copied is False


class TestObservation:

    def test_listeners_receive_snapshots(self, make_session):
        states = []
        session = make_session()
        unsubscribe = session.subscribe(states.append)

        session.set_languages(target=Language.JAPANESE)
        unsubscribe()
        session.set_languages(target=Language.RUSSIAN)

        assert len(states) == 1
        assert states[0].target_language is Language.JAPANESE

    def test_failing_listener_does_not_break_session(self, make_session):
        session = make_session()

        def broken(state):
            raise RuntimeError("boom")

        session.subscribe(broken)
        session.set_languages(source=Language.ARABIC)
        assert session.source_language is Language.ARABIC


class TestErrorMessages:

    @pytest.mark.parametrize("status_code, fragment", [
        (401, "Authentication failed"),
        (404, "endpoint not found"),
        (429, "Rate limit"),
        (502, "Server error (502)"),
        (418, "HTTP error 418"),
    ])
    def test_http_errors_have_specific_messages(self, status_code, fragment):
        assert fragment in describe_error(HttpError(status_code))

    def test_messages_are_localized(self):
        assert describe_error(NoApiKeyError("x"), "zh-CN") == "未配置 API 密钥。请打开设置并输入您的 API 密钥。"

    def test_no_error_no_message(self, make_session):
        assert make_session().error_message is None


class TestWithRealLoop:
    """Session wired to the asyncio scheduler, the real service and a mock HTTP transport."""

    def test_asyncio_scheduler_timers_and_tasks(self):
        from chat_translator.scheduler import AsyncioScheduler

        async def scenario():
            scheduler = AsyncioScheduler()
            fired = []
            scheduler.call_later(0.01, lambda: fired.append("timer"))
            handle = scheduler.call_later(0.01, lambda: fired.append("cancelled"))
            handle.cancel()

            async def work():
                return 42

            result = await scheduler.spawn(work())
            await asyncio.sleep(0.05)
            return fired, result

        fired, result = asyncio.run(scenario())
        assert fired == ["timer"]
        assert result == 42

    def test_auto_translation_end_to_end(self, provider_config):
        import httpx

        from chat_translator.ai.client import ChatCompletionClient
        from chat_translator.ai.service import TranslationService
        from conftest import RecordingHandler, chat_response

        handler = RecordingHandler(httpx.Response(404), chat_response("你好"))

        async def scenario():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
                service = TranslationService(client=ChatCompletionClient(http_client=http_client))
                session = TranslationSession(
                    service=service, settings=lambda: provider_config, debounce_delay=0.01
                )
                session.set_input_text("Hel")
                session.set_input_text("Hello")
                for _ in range(100):
                    await asyncio.sleep(0.01)
                    if handler.requests and not session.is_translating:
                        break
                return session

        session = asyncio.run(scenario())
        assert session.output_text == "你好"
        assert session.is_translating is False
        assert len(handler.requests) == 2
        assert "Hello" in handler.bodies()[0]["messages"][1]["content"]

    def test_undecodable_body_surfaces_as_decode_error(self, provider_config):
        import httpx

        from chat_translator.ai.client import ChatCompletionClient
        from chat_translator.ai.service import TranslationService
        from conftest import RecordingHandler

        handler = RecordingHandler(
            httpx.Response(200, headers={"Content-Encoding": "gzip"}, content=b"not gzip at all"),
        )

        async def scenario():
            async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
                service = TranslationService(client=ChatCompletionClient(http_client=http_client))
                session = TranslationSession(service=service, settings=lambda: provider_config)
                session.set_input_text("Hello")
                await session.translate_now()
                return session

        session = asyncio.run(scenario())
        assert isinstance(session.last_error, DecodeError)
        assert session.is_translating is False
        assert session.output_text == ""
