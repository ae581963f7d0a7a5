"""
Translation Exceptions

Every failure the client and service can produce is a TranslationError
subclass, so callers can catch the base class and dispatch on the kind.
Separated to avoid circular imports between client.py and service.py.
"""


class TranslationError(Exception):
    """Translation service error with optional code and details."""

    code = "translation_error"

    def __init__(self, message: str, code: str = None, details: dict = None):
        super().__init__(message)
        if code:
            self.code = code
        self.details = details or {}


class NoApiKeyError(TranslationError):
    """API key is empty or whitespace."""

    code = "no_api_key"


class NoSettingsError(TranslationError):
    """Provider settings are missing (key, endpoint or model)."""

    code = "no_settings"


class InvalidEndpointError(TranslationError):
    """Endpoint URL cannot be used for a request."""

    code = "invalid_endpoint"


class TransportError(TranslationError):
    """Network-level failure: DNS, refused connection, timeout."""

    code = "transport_error"


class HttpError(TranslationError):
    """Provider answered with a non-2xx status."""

    code = "http_error"

    def __init__(self, status_code: int, message: str = None, details: dict = None):
        super().__init__(message or f"HTTP error {status_code}", details=details)
        self.status_code = status_code


class DecodeError(TranslationError):
    """Response body is not a chat-completion JSON document."""

    code = "decode_error"


class NoResultError(TranslationError):
    """Response parsed but carried no first choice message content."""

    code = "no_result"
