"""Shared fixtures and fakes for the test suite."""

import asyncio
import json

import httpx
import pytest

from chat_translator.ai.client import ChatCompletionClient
from chat_translator.models import ProviderConfig
from chat_translator.scheduler import Scheduler


class _ManualTimer:
    def __init__(self, due, callback):
        self.due = due
        self.callback = callback
        self.cancelled = False

    def cancel(self):
        self.cancelled = True


class ManualScheduler(Scheduler):
    """
    Scheduler with a manual clock.

    Timers fire only when the test calls `advance`. Tasks still run on the
    real asyncio loop, so `spawn` must be called from inside a coroutine.
    """

    def __init__(self):
        self.now = 0.0
        self._timers = []

    def call_later(self, delay, callback):
        timer = _ManualTimer(self.now + delay, callback)
        self._timers.append(timer)
        return timer

    def spawn(self, coro):
        return asyncio.get_running_loop().create_task(coro)

    @property
    def pending_timers(self):
        return [t for t in self._timers if not t.cancelled]

    def advance(self, seconds):
        target = self.now + seconds
        while True:
            due = [t for t in self.pending_timers if t.due <= target]
            if not due:
                break
            timer = min(due, key=lambda t: t.due)
            self._timers.remove(timer)
            self.now = timer.due
            timer.callback()
        self.now = target


class FakeTranslationService:
    """
    Service stand-in whose calls stay pending until the test resolves them.

    Each call appends (request, config) to `calls` and a future to `pending`;
    resolve with `pending[i].set_result(...)` or `.set_exception(...)`.
    """

    def __init__(self):
        self.calls = []
        self.pending = []

    async def translate(self, request, config):
        self.calls.append((request, config))
        future = asyncio.get_running_loop().create_future()
        self.pending.append(future)
        return await future


class RecordingHandler:
    """httpx.MockTransport handler that replays canned responses in order."""

    def __init__(self, *responses):
        self.responses = list(responses)
        self.requests = []

    def __call__(self, request):
        self.requests.append(request)
        response = self.responses.pop(0)
        if isinstance(response, Exception):
            raise response
        return response

    def bodies(self):
        return [json.loads(request.content) for request in self.requests]


def chat_response(content, status_code=200):
    """Build a chat-completion style httpx.Response."""
    return httpx.Response(
        status_code,
        json={"choices": [{"message": {"role": "assistant", "content": content}}]},
    )


async def send_with(handler, **overrides):
    """Run ChatCompletionClient.send against a mock transport."""
    kwargs = {
        "endpoint_url": "https://api.openai.com/v1/chat/completions",
        "api_key": "sk-0123456789abcdefghijklmnop",
        "model_name": "gpt-3.5-turbo",
        "system_prompt": "system",
        "user_prompt": "user",
    }
    kwargs.update(overrides)
    async with httpx.AsyncClient(transport=httpx.MockTransport(handler)) as http_client:
        client = ChatCompletionClient(http_client=http_client)
        return await client.send(**kwargs)


@pytest.fixture
def scheduler():
    return ManualScheduler()


@pytest.fixture
def fake_service():
    return FakeTranslationService()


@pytest.fixture
def provider_config():
    return ProviderConfig(
        api_key="sk-test",
        endpoint_url="https://api.deepseek.com/chat/completions",
        model_name="deepseek-chat",
        prompt_template="Translate from {source_language} to {target_language}: {text}",
    )


@pytest.fixture
def config_file(tmp_path):
    return tmp_path / "config" / "config.json"
