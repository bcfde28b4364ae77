"""OpenAI-compatible adapter - Gemini OpenAI endpoint, vLLM, LM Studio."""

import logging

import httpx

from sitegen.domain.errors import FatalGenerationError, TransientGenerationError
from sitegen.domain.ports.config import OpenAICompatibleConfig
from sitegen.domain.ports.llm import LLMMessage, LLMResponse

logger = logging.getLogger(__name__)

# Rate limit, quota, overload and gateway failures: worth another attempt with another key
TRANSIENT_STATUS_CODES = frozenset({408, 409, 425, 429, 500, 502, 503, 504, 529})


class OpenAICompatibleAdapter:
    """Implements LLMPort via /chat/completions. The credential is chosen per call."""

    def __init__(self, config: OpenAICompatibleConfig) -> None:
        """Initialize with OpenAI-compatible config."""
        self._config = config
        self._base_url = config.base_url.rstrip("/")
        self._client: httpx.AsyncClient | None = None

    def _get_client(self) -> httpx.AsyncClient:
        """Get or create persistent async HTTP client."""
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(
                timeout=self._config.timeout,
                headers={"Content-Type": "application/json"},
            )
        return self._client

    async def close(self) -> None:
        """Close the underlying HTTP client (call during app shutdown)."""
        if self._client and not self._client.is_closed:
            await self._client.aclose()
            self._client = None

    @staticmethod
    def _auth_headers(api_key: str | None) -> dict[str, str]:
        return {"Authorization": f"Bearer {api_key}"} if api_key else {}

    def _chat_body(
        self,
        model: str,
        messages: list[LLMMessage],
        temperature: float,
        json_mode: bool,
    ) -> dict:
        """Build request body; optional max_tokens from config."""
        body: dict = {
            "model": model,
            "messages": [{"role": m.role, "content": m.content} for m in messages],
            "temperature": temperature,
            "stream": False,
        }
        if self._config.max_tokens is not None:
            body["max_tokens"] = self._config.max_tokens
        if json_mode:
            body["response_format"] = {"type": "json_object"}
        return body

    async def generate(
        self,
        messages: list[LLMMessage],
        model: str | None = None,
        temperature: float = 0.7,
        api_key: str | None = None,
        json_mode: bool = False,
    ) -> LLMResponse:
        """Generate a single response (non-streaming).

        Raises:
            TransientGenerationError: rate limit / quota / overload status.
            FatalGenerationError: any other error status or a malformed body.
            httpx.TransportError: connection problems and timeouts.

        """
        model = model or "default"
        body = self._chat_body(model, messages, temperature, json_mode)
        client = self._get_client()
        resp = await client.post(
            f"{self._base_url}/chat/completions",
            json=body,
            headers=self._auth_headers(api_key),
        )
        if resp.status_code >= 400:
            err_text = resp.text[:500]
            logger.error("LLM API error %s: %s", resp.status_code, err_text, extra={"model": model})
            if resp.status_code in TRANSIENT_STATUS_CODES:
                raise TransientGenerationError(
                    f"LLM API error {resp.status_code}: {err_text[:200]}",
                    status_code=resp.status_code,
                )
            raise FatalGenerationError(
                f"LLM API error {resp.status_code}: {err_text[:200]}",
                status_code=resp.status_code,
            )
        try:
            data = resp.json()
            choice = (data.get("choices") or [{}])[0]
            content = (choice.get("message") or {}).get("content") or ""
        except (ValueError, AttributeError) as e:
            raise FatalGenerationError(f"Malformed completion body: {e}") from e
        return LLMResponse(content=content, model=model, done=True)

    async def is_available(self, api_key: str | None = None) -> bool:
        """Check if the endpoint answers /models."""
        try:
            async with httpx.AsyncClient(timeout=5.0) as client:
                resp = await client.get(f"{self._base_url}/models", headers=self._auth_headers(api_key))
                return resp.status_code == 200
        except (httpx.ConnectTimeout, httpx.ConnectError, httpx.ReadTimeout, OSError) as e:
            logger.debug("OpenAI-compatible availability check failed (connection): %s", e)
            return False
        except httpx.HTTPError as e:
            logger.debug("OpenAI-compatible availability check failed (HTTP): %s", e)
            return False
