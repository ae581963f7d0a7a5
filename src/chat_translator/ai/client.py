"""
Chat-completion HTTP client.

Sends one OpenAI-style chat-completion request and classifies every failure
into a TranslationError subclass:

- transport problems (DNS, refused connection, timeout) -> TransportError
- non-2xx status -> HttpError
- 2xx with a body that cannot be decoded or is not a chat-completion
  document -> DecodeError
- no first choice message content -> NoResultError

DeepSeek used to serve chat completions without the /v1 prefix; a 404 from
that host on an unprefixed path is retried once against /v1/chat/completions.
"""

from typing import Any, Dict, List, Optional

import httpx

from chat_translator.config import DEFAULT_TIMEOUT
from chat_translator.logger import get_logger
from chat_translator.ai.exceptions import (
    DecodeError,
    HttpError,
    InvalidEndpointError,
    NoApiKeyError,
    NoResultError,
    TransportError,
)

logger = get_logger(__name__)

TEMPERATURE = 0.3
MAX_TOKENS = 2000

LEGACY_HOST_MARKER = "api.deepseek.com"
VERSIONED_PATH_MARKER = "/v1/"
CHAT_COMPLETIONS_PATH = "/chat/completions"
VERSIONED_CHAT_COMPLETIONS_PATH = "/v1/chat/completions"

# Hosts whose keys are issued with an "sk-" prefix
SK_PREFIX_HOSTS = ("deepseek.com", "openai.com")
MIN_KEY_LENGTH = 20


def get_httpx_timeout(timeout_config: Any) -> httpx.Timeout:
    """
    Convert timeout configuration to httpx.Timeout object.

    Args:
        timeout_config: Either a number (read timeout) or a dict with
            connect, write, read, pool keys

    Returns:
        httpx.Timeout object
    """
    if isinstance(timeout_config, dict):
        return httpx.Timeout(
            connect=timeout_config.get('connect', 10.0),
            write=timeout_config.get('write', 60.0),
            read=timeout_config.get('read', float(DEFAULT_TIMEOUT)),
            pool=timeout_config.get('pool', 10.0),
        )
    timeout_value = float(timeout_config) if timeout_config else float(DEFAULT_TIMEOUT)
    return httpx.Timeout(
        connect=10.0,
        write=60.0,
        read=timeout_value,
        pool=10.0,
    )


def build_messages(system_prompt: str, user_prompt: str) -> List[Dict[str, str]]:
    return [
        {"role": "system", "content": system_prompt},
        {"role": "user", "content": user_prompt},
    ]


def build_request_body(model_name: str, system_prompt: str, user_prompt: str) -> Dict[str, Any]:
    """JSON payload for a non-streaming chat-completion request."""
    return {
        "model": model_name,
        "messages": build_messages(system_prompt, user_prompt),
        "stream": False,
        "temperature": TEMPERATURE,
        "max_tokens": MAX_TOKENS,
    }


def validate_endpoint(endpoint_url: str) -> str:
    """
    Make sure the endpoint is an absolute http(s) URL.

    Returns:
        The stripped URL.

    Raises:
        InvalidEndpointError: If the URL cannot be used for a request.
    """
    url = (endpoint_url or "").strip()
    try:
        parsed = httpx.URL(url)
    except httpx.InvalidURL as e:
        raise InvalidEndpointError(
            f"Invalid API endpoint URL: {url!r}", details={"endpoint": url}
        ) from e
    if parsed.scheme not in ("http", "https") or not parsed.host:
        raise InvalidEndpointError(
            f"Invalid API endpoint URL: {url!r}", details={"endpoint": url}
        )
    return url


def fallback_endpoint(endpoint_url: str) -> Optional[str]:
    """
    Versioned endpoint to retry after a 404, or None when no retry applies.

    Only the DeepSeek host with no /v1/ segment yet qualifies. A URL without
    /chat/completions has nothing to rewrite and is retried as-is.
    """
    if LEGACY_HOST_MARKER not in endpoint_url or VERSIONED_PATH_MARKER in endpoint_url:
        return None
    return endpoint_url.replace(CHAT_COMPLETIONS_PATH, VERSIONED_CHAT_COMPLETIONS_PATH)


def check_api_key_format(endpoint_url: str, api_key: str) -> List[str]:
    """
    Advisory key checks. Never blocks a request; returns the warnings logged.
    """
    warnings = []
    for host in SK_PREFIX_HOSTS:
        if host in endpoint_url and not api_key.startswith("sk-"):
            warnings.append(f"API keys for {host} typically start with 'sk-'")
    if len(api_key) < MIN_KEY_LENGTH:
        warnings.append(
            f"API key seems too short ({len(api_key)} characters, expected 40+)"
        )
    for message in warnings:
        logger.warning(message)
    return warnings


def _error_detail(response: httpx.Response) -> str:
    """Best-effort provider error message from a failed response."""
    try:
        error_json = response.json()
    except ValueError:
        return response.text[:500]
    if isinstance(error_json, dict) and "error" in error_json:
        error_detail = error_json["error"]
        if isinstance(error_detail, dict):
            return str(error_detail.get("message", error_detail))
        return str(error_detail)
    return response.text[:500]


def extract_content(payload: Any) -> str:
    """
    Pull choices[0].message.content out of a decoded response body.

    Raises:
        DecodeError: If the body does not have the chat-completion shape.
        NoResultError: If there is no first choice or it carries no content.
    """
    if not isinstance(payload, dict):
        raise DecodeError("Unexpected response format: top-level JSON is not an object")

    choices = payload.get("choices")
    if not isinstance(choices, list):
        raise DecodeError("Unexpected response format: 'choices' is missing or not a list")
    if not choices:
        raise NoResultError("No translation result returned from the API")

    choice = choices[0]
    if not isinstance(choice, dict):
        raise DecodeError("Unexpected response format: choice is not an object")
    message = choice.get("message")
    if message is None:
        raise NoResultError("No translation result returned from the API")
    if not isinstance(message, dict):
        raise DecodeError("Unexpected response format: message is not an object")

    content = message.get("content")
    if content is None:
        raise NoResultError("No translation result returned from the API")
    if not isinstance(content, str):
        raise DecodeError("Unexpected response format: message content is not a string")
    return content.strip()


class ChatCompletionClient:
    """
    Async client for OpenAI-compatible chat-completion endpoints.

    Pass `http_client` to share a connection pool (or to inject a mock
    transport); otherwise a short-lived httpx.AsyncClient is opened per call.
    """

    def __init__(self, http_client: Optional[httpx.AsyncClient] = None, timeout: Any = DEFAULT_TIMEOUT):
        self._http_client = http_client
        self._timeout = get_httpx_timeout(timeout)

    async def send(
        self,
        endpoint_url: str,
        api_key: str,
        model_name: str,
        system_prompt: str,
        user_prompt: str,
    ) -> str:
        """
        Send one chat-completion request and return the assistant's text.

        Raises:
            NoApiKeyError: Key is blank; no request is made.
            InvalidEndpointError: Endpoint is not an absolute http(s) URL.
            TransportError, HttpError, DecodeError, NoResultError: see module docs.
        """
        key = (api_key or "").strip()
        if not key:
            raise NoApiKeyError("API key not configured")

        url = validate_endpoint(endpoint_url)
        check_api_key_format(url, key)

        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {key}",
        }
        body = build_request_body(model_name, system_prompt, user_prompt)

        try:
            return await self._post(url, headers, body)
        except HttpError as e:
            retry_url = fallback_endpoint(url) if e.status_code == 404 else None
            if retry_url is None:
                raise
            logger.info(f"Retrying with v1 endpoint: {retry_url}")
            return await self._post(retry_url, headers, body)

    async def _post(self, url: str, headers: Dict[str, str], body: Dict[str, Any]) -> str:
        if self._http_client is not None:
            return await self._request(self._http_client, url, headers, body)
        async with httpx.AsyncClient(timeout=self._timeout) as client:
            return await self._request(client, url, headers, body)

    async def _request(
        self,
        client: httpx.AsyncClient,
        url: str,
        headers: Dict[str, str],
        body: Dict[str, Any],
    ) -> str:
        logger.debug(f"Calling chat completion API (model: {body['model']}, url: {url})...")

        try:
            response = await client.post(url, headers=headers, json=body)
        except httpx.TimeoutException as e:
            logger.warning(f"Chat completion request timed out: {url}")
            raise TransportError("API request timeout", details={"endpoint": url}) from e
        except httpx.DecodingError as e:
            logger.error(f"Failed to decode API response body: {e}")
            raise DecodeError(f"Failed to decode API response: {e}", details={"endpoint": url}) from e
        except httpx.RequestError as e:
            logger.warning(f"Chat completion request failed: {e}")
            raise TransportError(f"API request failed: {e}", details={"endpoint": url}) from e

        if not response.is_success:
            detail = _error_detail(response)
            logger.error(f"Chat completion API HTTP error: {response.status_code} - {detail}")
            if response.status_code == 404:
                logger.debug(f"404 for POST {url}, response body: {response.text[:500]}")
            raise HttpError(
                response.status_code,
                f"API error ({response.status_code}): {detail}",
                details={"endpoint": url},
            )

        try:
            payload = response.json()
        except ValueError as e:
            logger.error(f"Failed to decode API response: {e}")
            raise DecodeError(f"Failed to decode API response: {e}") from e

        content = extract_content(payload)
        logger.debug(f"  Received {len(content)} chars from chat completion API")
        return content
