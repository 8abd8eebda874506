"""Resilient HTTP transport for the Gemini generateContent endpoint.

ResilientTransport executes one GenerationRequest with bounded retries:
- HTTP 400 is terminal (malformed request): raised immediately, no wait
- Any other non-2xx status and any network failure is retryable
- Between retryable failures it waits RetryPolicy.backoff(i) seconds
  (base_delay * 2**i plus bounded random jitter, i = zero-based attempt)
- When the budget is spent it raises RetryExhausted wrapping the last error

RetryPolicy carries the budget, the backoff function and the retryable
predicate; its sleep and jitter callables are injectable so tests never wait
on real timers.
"""

import asyncio
import json
import random
from typing import Awaitable, Callable, Optional

import aiohttp

from src.models.models import GenerationRequest, RawProviderResponse
from src.utils.errors import (
    HttpClientError,
    HttpOtherError,
    MalformedResponse,
    NetworkError,
    RetryExhausted,
    TransportError,
)
from src.utils.logger import logger

DEFAULT_BASE_URL = "https://generativelanguage.googleapis.com/v1beta"

# Raw bodies (often HTML error pages) are cut to this many characters
MAX_ERROR_BODY_CHARS = 500


def is_retryable_error(error: Exception) -> bool:
    """Default predicate: network failures and non-400 HTTP statuses."""
    return isinstance(error, (NetworkError, HttpOtherError))


class RetryPolicy:
    """Retry budget and exponential backoff with jitter."""

    def __init__(
        self,
        max_attempts: int = 5,
        base_delay: float = 1.0,
        max_jitter: float = 1.0,
        is_retryable: Optional[Callable[[Exception], bool]] = None,
        sleep: Optional[Callable[[float], Awaitable[None]]] = None,
        jitter: Optional[Callable[[float, float], float]] = None,
    ) -> None:
        """Initialize RetryPolicy.

        Args:
            max_attempts: Total attempts per request, including the first (>= 1).
            base_delay: Wait in seconds after the first failure, doubled per attempt.
            max_jitter: Upper bound in seconds of the random delay added to each wait.
            is_retryable: Predicate deciding whether a failure may be retried.
            sleep: Async sleep used for waits. Default: asyncio.sleep.
            jitter: Callable(low, high) returning the random extra delay. Default: random.uniform.

        Raises:
            ValueError: If max_attempts < 1 or a delay bound is negative.
        """
        if max_attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {max_attempts}")
        if base_delay < 0 or max_jitter < 0:
            raise ValueError("base_delay and max_jitter must not be negative")

        self.max_attempts = max_attempts
        self.base_delay = base_delay
        self.max_jitter = max_jitter
        self.is_retryable = is_retryable or is_retryable_error
        self.sleep = sleep or asyncio.sleep
        self.jitter = jitter or random.uniform

    @classmethod
    def from_config(cls, config) -> "RetryPolicy":
        return cls(
            max_attempts=config.MAX_RETRIES,
            base_delay=config.RETRY_BASE_DELAY,
            max_jitter=config.RETRY_MAX_JITTER,
        )

    def backoff(self, attempt_index: int) -> float:
        """Seconds to wait after the failed attempt with zero-based index attempt_index."""
        extra = min(max(self.jitter(0.0, self.max_jitter), 0.0), self.max_jitter)
        return self.base_delay * (2**attempt_index) + extra


def extract_error_message(status: int, body: str) -> str:
    """Pick the most specific diagnostic from an error response.

    Priority: JSON error envelope message -> raw body text -> "HTTP status N".
    """
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError, ValueError):
        data = None

    if isinstance(data, dict):
        error = data.get("error")
        if isinstance(error, dict):
            message = error.get("message")
            if isinstance(message, str) and message.strip():
                return message.strip()

    text = (body or "").strip()
    if text:
        return text[:MAX_ERROR_BODY_CHARS]

    return f"HTTP status {status}"


def classify_http_error(status: int, body: str) -> TransportError:
    """Map a non-2xx response to a terminal or retryable error."""
    message = extract_error_message(status, body)
    if status == 400:
        return HttpClientError(message)
    return HttpOtherError(status, message)


def decode_envelope(body: str) -> RawProviderResponse:
    """Decode a 2xx body into the provider envelope."""
    try:
        data = json.loads(body)
    except (json.JSONDecodeError, TypeError, ValueError) as e:
        raise MalformedResponse(f"Provider returned a non-JSON body: {e}") from e
    if not isinstance(data, dict):
        raise MalformedResponse("Provider returned a JSON body that is not an object")
    return data


class ResilientTransport:
    """Send GenerationRequests to Gemini with retry, backoff and failure classification."""

    def __init__(
        self,
        api_key: str,
        model: str,
        base_url: str = DEFAULT_BASE_URL,
        retry_policy: Optional[RetryPolicy] = None,
        timeout_seconds: float = 60.0,
        session: Optional[aiohttp.ClientSession] = None,
    ) -> None:
        """Initialize ResilientTransport.

        Args:
            api_key: Gemini API key, sent as the ``key`` query parameter.
            model: Model id, e.g. "gemini-2.5-flash-preview-09-2025".
            base_url: REST root of the Generative Language API.
            retry_policy: Retry behaviour. Default: RetryPolicy().
            timeout_seconds: Total timeout of one attempt.
            session: Optional shared aiohttp session. When omitted, each send()
                opens and closes its own session.

        Raises:
            ValueError: If api_key or model is empty.
        """
        if not api_key:
            raise ValueError("GEMINI_API_KEY is required")
        if not model:
            raise ValueError("model is required")

        self.api_key = api_key
        self.model = model
        self.base_url = base_url.rstrip("/")
        self.retry_policy = retry_policy or RetryPolicy()
        self.timeout = aiohttp.ClientTimeout(total=timeout_seconds)
        self._session = session

    @classmethod
    def from_config(cls, config, session: Optional[aiohttp.ClientSession] = None) -> "ResilientTransport":
        return cls(
            api_key=config.GEMINI_API_KEY,
            model=config.GEMINI_MODEL,
            base_url=config.GEMINI_API_BASE_URL,
            retry_policy=RetryPolicy.from_config(config),
            timeout_seconds=config.REQUEST_TIMEOUT_SECONDS,
            session=session,
        )

    @property
    def endpoint(self) -> str:
        return f"{self.base_url}/models/{self.model}:generateContent"

    async def send(self, request: GenerationRequest, max_attempts: Optional[int] = None) -> RawProviderResponse:
        """Execute the request, retrying retryable failures within the budget.

        Args:
            request: Immutable generation request.
            max_attempts: Attempt budget for this call. Default: the policy's budget.

        Returns:
            Decoded provider envelope of the first successful attempt.

        Raises:
            HttpClientError: On HTTP 400 (first occurrence, never retried).
            RetryExhausted: After max_attempts retryable failures.
            MalformedResponse: If a 2xx body is not a JSON object.
            ValueError: If max_attempts < 1.
        """
        attempts = self.retry_policy.max_attempts if max_attempts is None else max_attempts
        if attempts < 1:
            raise ValueError(f"max_attempts must be at least 1, got: {attempts}")

        payload = request.to_payload()
        last_error: Optional[TransportError] = None

        for attempt in range(attempts):
            logger.debug(
                f"Generation attempt {attempt + 1}/{attempts} -> {self.endpoint}",
                extra={"attempt": attempt + 1, "max_attempts": attempts},
            )
            try:
                return await self._attempt(payload)
            except TransportError as e:
                if not self.retry_policy.is_retryable(e):
                    logger.error(
                        f"Terminal failure on attempt {attempt + 1}/{attempts}: {e}",
                        extra={"attempt": attempt + 1, "error_kind": e.kind},
                    )
                    raise

                last_error = e
                if attempt < attempts - 1:
                    delay = self.retry_policy.backoff(attempt)
                    logger.warning(
                        f"Attempt {attempt + 1}/{attempts} failed ({e}), retrying in {delay:.2f}s",
                        extra={"attempt": attempt + 1, "delay_seconds": delay, "error_kind": e.kind},
                    )
                    await self.retry_policy.sleep(delay)

        logger.error(f"Generation failed after {attempts} attempts: {last_error}")
        raise RetryExhausted(attempts, last_error) from last_error

    async def _attempt(self, payload: dict) -> RawProviderResponse:
        if self._session is not None:
            return await self._post(self._session, payload)
        async with aiohttp.ClientSession() as session:
            return await self._post(session, payload)

    async def _post(self, session: aiohttp.ClientSession, payload: dict) -> RawProviderResponse:
        """Single network call: POST, then classify the status."""
        try:
            async with session.post(
                self.endpoint,
                params={"key": self.api_key},
                json=payload,
                timeout=self.timeout,
            ) as response:
                status = response.status
                body = await response.text()
        except asyncio.TimeoutError as e:
            raise NetworkError("Request to the AI provider timed out") from e
        except aiohttp.ClientError as e:
            raise NetworkError(f"Network error: {e or type(e).__name__}") from e

        if not 200 <= status < 300:
            raise classify_http_error(status, body)

        logger.debug(f"Provider answered HTTP {status} ({len(body)} bytes)", extra={"status": status})
        return decode_envelope(body)
