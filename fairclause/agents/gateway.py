"""AI Gateway - the single boundary to the generative AI provider.

Every provider call goes through BaseGateway.invoke(), which enforces an
explicit, bounded timeout and converts any provider failure into a
GatewayError with an advisory classification. The gateway never retries;
a failed call is reported once and the pipeline falls back.

Classification is matched on error type, HTTP status and message text:
- 503 / 529 / "overloaded"              -> OVERLOADED
- 429 / "quota" / "rate limit"          -> QUOTA_EXCEEDED
- connection/timeout errors, "timeout"  -> NETWORK_ERROR
- anything else                         -> UNKNOWN
"""

import asyncio
import functools
import logging
import time
from abc import ABC, abstractmethod
from concurrent.futures import ThreadPoolExecutor
from concurrent.futures import TimeoutError as FutureTimeoutError
from typing import Callable

import openai
from openai import OpenAI

from app.config import get_settings
from fairclause.errors import GatewayError, GatewayErrorKind

logger = logging.getLogger("fairclause.gateway")

JSON_ONLY_SYSTEM_PROMPT = (
    "You are an expert legal analyst. You always answer with a single valid JSON "
    "object and nothing else."
)

OVERLOADED_STATUS_CODES = frozenset({503, 529})
QUOTA_STATUS_CODES = frozenset({429})

OVERLOADED_MARKERS = ("overloaded", "service unavailable", "503", "529")
QUOTA_MARKERS = (
    "quota",
    "rate limit",
    "rate_limit",
    "ratelimit",
    "resource exhausted",
    "resource_exhausted",
    "too many requests",
    "429",
)
NETWORK_MARKERS = (
    "timeout",
    "timed out",
    "connection",
    "network",
    "econnreset",
    "econnrefused",
    "enotfound",
    "socket",
)

NETWORK_ERROR_TYPES: tuple[type[BaseException], ...] = (
    ConnectionError,
    TimeoutError,
    openai.APIConnectionError,
)


def _status_code(error: BaseException) -> int | None:
    for attr in ("status_code", "status"):
        value = getattr(error, attr, None)
        if isinstance(value, int):
            return value
    return None


def classify_error(error: BaseException) -> GatewayError:
    """Classify a raw provider failure.

    Args:
        error: Exception raised by the provider client.

    Returns:
        GatewayError carrying the kind, message and status code.
    """
    if isinstance(error, GatewayError):
        return error

    status_code = _status_code(error)
    message = str(error) or type(error).__name__
    lowered = message.lower()

    kind = GatewayErrorKind.UNKNOWN
    if status_code in OVERLOADED_STATUS_CODES:
        kind = GatewayErrorKind.OVERLOADED
    elif status_code in QUOTA_STATUS_CODES:
        kind = GatewayErrorKind.QUOTA_EXCEEDED
    elif isinstance(error, NETWORK_ERROR_TYPES):
        kind = GatewayErrorKind.NETWORK_ERROR
    elif any(marker in lowered for marker in OVERLOADED_MARKERS):
        kind = GatewayErrorKind.OVERLOADED
    elif any(marker in lowered for marker in QUOTA_MARKERS):
        kind = GatewayErrorKind.QUOTA_EXCEEDED
    elif any(marker in lowered for marker in NETWORK_MARKERS):
        kind = GatewayErrorKind.NETWORK_ERROR

    return GatewayError(kind=kind, message=message, status_code=status_code)


class BaseGateway(ABC):
    """Abstract single-call boundary to an AI provider.

    Subclasses implement _generate(); callers use invoke(), which applies the
    timeout and error classification.
    """

    NAME: str = "base"

    def __init__(self, timeout_seconds: float | None = None) -> None:
        self.timeout_seconds = timeout_seconds or get_settings().ai_timeout_seconds

    @abstractmethod
    def _generate(self, prompt: str, timeout: float) -> str:
        """Send one prompt to the provider and return its raw text reply."""
        pass

    def invoke(self, prompt: str, timeout: float | None = None) -> str:
        """Send a prompt and return the raw reply text (synchronous).

        Args:
            prompt: Complete prompt text.
            timeout: Timeout in seconds; defaults to the configured timeout.

        Returns:
            Raw reply text, possibly empty.

        Raises:
            GatewayError: If the provider call failed for any reason.
        """
        timeout = timeout if timeout is not None else self.timeout_seconds
        if timeout <= 0:
            raise ValueError("Gateway timeout must be positive")

        start_time = time.time()
        try:
            raw_text = self._generate(prompt, timeout)
        except Exception as e:
            error = classify_error(e)
            elapsed_ms = int((time.time() - start_time) * 1000)
            logger.warning(
                f"❌ {self.NAME} call failed after {elapsed_ms}ms: "
                f"kind={error.kind.value} status={error.status_code} error={error}"
            )
            if error is e:
                raise
            raise error from e

        elapsed_ms = int((time.time() - start_time) * 1000)
        raw_text = raw_text or ""
        logger.info(
            f"{self.NAME} reply received in {elapsed_ms}ms "
            f"(prompt_chars={len(prompt)}, reply_chars={len(raw_text)})"
        )
        return raw_text

    async def invoke_async(self, prompt: str, timeout: float | None = None) -> str:
        """Send a prompt and return the raw reply text (asynchronous)."""
        loop = asyncio.get_event_loop()
        return await loop.run_in_executor(None, functools.partial(self.invoke, prompt, timeout))


class CallableGateway(BaseGateway):
    """Gateway around any plain `generate(prompt) -> text` callable.

    The callable runs on a worker thread so the gateway timeout bounds the
    wait even when the callable itself never returns.

    Example:
        gateway = CallableGateway(lambda prompt: my_provider.complete(prompt))
    """

    NAME = "callable"

    def __init__(
        self,
        generate: Callable[[str], str],
        timeout_seconds: float | None = None,
    ) -> None:
        super().__init__(timeout_seconds)
        self._generate_fn = generate

    def _generate(self, prompt: str, timeout: float) -> str:
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix="fairclause-gateway")
        future = executor.submit(self._generate_fn, prompt)
        try:
            return future.result(timeout=timeout)
        except FutureTimeoutError:
            future.cancel()
            raise TimeoutError(f"AI call timed out after {timeout}s")
        finally:
            # A timed-out call is abandoned; its late reply is discarded
            executor.shutdown(wait=False)


class OpenAIGateway(BaseGateway):
    """Gateway backed by the OpenAI chat completions API.

    The SDK's built-in retry loop is disabled; one call is one attempt.
    """

    NAME = "openai"

    def __init__(
        self,
        model: str | None = None,
        temperature: float | None = None,
        max_output_tokens: int | None = None,
        timeout_seconds: float | None = None,
        client: OpenAI | None = None,
    ) -> None:
        super().__init__(timeout_seconds)
        settings = get_settings()
        self.model = model or settings.ai_model
        self.temperature = temperature if temperature is not None else settings.ai_temperature
        self.max_output_tokens = max_output_tokens or settings.ai_max_output_tokens
        self._client = client

    @property
    def client(self) -> OpenAI:
        """Get or create OpenAI client (lazy initialization)."""
        if self._client is None:
            settings = get_settings()
            if not settings.openai_api_key or settings.openai_api_key in ("", "your_openai_api_key_here"):
                raise GatewayError(
                    kind=GatewayErrorKind.UNKNOWN,
                    message="OpenAI API key not configured. Set OPENAI_API_KEY in .env",
                )
            self._client = OpenAI(api_key=settings.openai_api_key, max_retries=0)
        return self._client

    def _generate(self, prompt: str, timeout: float) -> str:
        response = self.client.chat.completions.create(
            model=self.model,
            messages=[
                {"role": "system", "content": JSON_ONLY_SYSTEM_PROMPT},
                {"role": "user", "content": prompt},
            ],
            temperature=self.temperature,
            max_completion_tokens=self.max_output_tokens,
            timeout=timeout,
        )

        usage = response.usage
        if usage:
            logger.debug(
                f"model={self.model} | input_tokens={usage.prompt_tokens} | "
                f"output_tokens={usage.completion_tokens}"
            )

        if not response.choices:
            return ""
        return response.choices[0].message.content or ""
