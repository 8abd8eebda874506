"""Failure taxonomy for the recipe generation pipeline.

Transport failures (raised by ResilientTransport):
- NetworkError: connection/timeout failure, retryable
- HttpClientError: HTTP 400, terminal
- HttpOtherError: any other non-2xx status, retryable
- RetryExhausted: retry budget spent, wraps the last retryable failure

Response failures (raised by the validator):
- MalformedResponse: generated text missing from the provider envelope
- InvalidJSON: generated text is not a JSON object
- SchemaViolation: required recipe field missing or invalid

str() of every error is a human-readable detail suitable for the UI.
"""

from typing import Optional


class RecipeGenerationError(Exception):
    """Base class for every failure the generation pipeline can surface."""

    @property
    def kind(self) -> str:
        return type(self).__name__


class TransportError(RecipeGenerationError):
    """Failure while talking to the provider endpoint."""


class NetworkError(TransportError):
    """Transport-level failure (DNS, connection reset, timeout)."""


class HttpError(TransportError):
    """Provider answered with a non-2xx status."""

    def __init__(self, status: int, message: str) -> None:
        super().__init__(message)
        self.status = status
        self.message = message


class HttpClientError(HttpError):
    """HTTP 400: the request itself is malformed, retrying is futile."""

    def __init__(self, message: str, status: int = 400) -> None:
        super().__init__(status, f"Bad Request: {message}")


class HttpOtherError(HttpError):
    """Any other non-2xx status (429, 5xx, ...)."""


class RetryExhausted(TransportError):
    """All attempts failed with retryable errors."""

    def __init__(self, attempts: int, last_error: Exception) -> None:
        super().__init__(f"API call failed after {attempts} attempts: {last_error}")
        self.attempts = attempts
        self.last_error = last_error


class ResponseError(RecipeGenerationError):
    """Provider answered but the payload cannot become a Recipe."""


class MalformedResponse(ResponseError):
    """Expected text path is absent from the provider envelope."""

    DEFAULT_MESSAGE = "Received an empty or malformed response from the AI."

    def __init__(self, message: Optional[str] = None) -> None:
        super().__init__(message or self.DEFAULT_MESSAGE)


class InvalidJSON(ResponseError):
    """Generated text could not be parsed as a JSON object."""


class SchemaViolation(ResponseError):
    """A required recipe field is missing or has the wrong shape."""

    def __init__(self, field: str, reason: str = "missing") -> None:
        super().__init__(f"Generated JSON has an invalid '{field}' field ({reason})")
        self.field = field
        self.reason = reason
