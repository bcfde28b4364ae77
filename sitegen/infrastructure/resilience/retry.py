"""Retry policy with credential rotation for model calls.

One logical "ask the model" operation: attempt the call, and on a transient
failure rotate to the next API key, back off and try again, up to a fixed
number of attempts. Classification is structural (exception types raised by
the adapter), never based on error message text.
"""

import logging
from collections.abc import Sequence
from enum import Enum
from typing import Any

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    retry_if_exception,
    stop_after_attempt,
    wait_exponential,
)

from sitegen.domain.errors import (
    GenerationError,
    GenerationExhausted,
    OutputSchemaError,
    TransientGenerationError,
)
from sitegen.domain.ports.llm import LLMMessage, LLMPort
from sitegen.infrastructure.llm.json_output import parse_json_output

logger = logging.getLogger(__name__)


class ResponseShape(str, Enum):
    """Expected shape of the model answer."""

    TEXT = "text"
    JSON = "json"


class CredentialPool:
    """Round-robin pool of API keys.

    Shared by every run in the process; rotation only spreads load, no caller
    relies on a particular key being used for a particular call.
    """

    def __init__(self, keys: Sequence[str]) -> None:
        self._keys = [k for k in keys if k]
        self._index = 0
        self.rotations = 0

    @property
    def size(self) -> int:
        return len(self._keys)

    @property
    def index(self) -> int:
        return self._index

    def current(self) -> str | None:
        """Key for the next call, or None when the endpoint needs no auth."""
        if not self._keys:
            return None
        return self._keys[self._index]

    def rotate(self) -> None:
        """Advance to the next key, wrapping around."""
        self.rotations += 1
        if len(self._keys) > 1:
            self._index = (self._index + 1) % len(self._keys)
            logger.info("Rotated to API key %d/%d", self._index + 1, len(self._keys))


def is_transient(exc: BaseException) -> bool:
    """Rate limit / overload, network trouble, or unusable output."""
    return isinstance(exc, (TransientGenerationError, OutputSchemaError, httpx.TransportError))


class RetryPolicy:
    """Bounded retries with exponential backoff and key rotation (tenacity)."""

    def __init__(
        self,
        pool: CredentialPool,
        max_attempts: int = 3,
        base_delay: float = 1.0,
        max_delay: float = 10.0,
    ) -> None:
        self.pool = pool
        self.max_attempts = max_attempts
        self._base_delay = base_delay
        self._max_delay = max_delay

    def _before_retry(self, retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            "Model call attempt %d/%d failed: %s",
            retry_state.attempt_number,
            self.max_attempts,
            exc,
        )
        self.pool.rotate()

    async def ask(
        self,
        llm: LLMPort,
        messages: list[LLMMessage],
        *,
        model: str,
        temperature: float = 0.7,
        shape: ResponseShape = ResponseShape.TEXT,
        schema: Any | None = None,
    ) -> Any:
        """Ask the model once, resiliently.

        Returns the text for ResponseShape.TEXT, or the parsed (and, with
        *schema*, validated) value for ResponseShape.JSON.

        Raises:
            GenerationExhausted: attempts used up, or a fatal provider error occurred.
            Anything that is not a generation or HTTP failure propagates unchanged.

        """
        attempts = 0
        result: Any = None
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_attempts),
            wait=wait_exponential(multiplier=self._base_delay, max=self._max_delay),
            retry=retry_if_exception(is_transient),
            before_sleep=self._before_retry,
            reraise=True,
        )
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    result = await self._attempt(llm, messages, model, temperature, shape, schema)
        except (GenerationError, httpx.HTTPError) as e:
            logger.error("Model call gave up after %d attempt(s): %s", attempts, e)
            raise GenerationExhausted(e, attempts) from e
        return result

    async def _attempt(
        self,
        llm: LLMPort,
        messages: list[LLMMessage],
        model: str,
        temperature: float,
        shape: ResponseShape,
        schema: Any | None,
    ) -> Any:
        response = await llm.generate(
            messages=messages,
            model=model,
            temperature=temperature,
            api_key=self.pool.current(),
            json_mode=shape is ResponseShape.JSON,
        )
        if shape is ResponseShape.JSON:
            return parse_json_output(response.content, schema)
        if not response.content.strip():
            raise OutputSchemaError("Model returned an empty response")
        return response.content
