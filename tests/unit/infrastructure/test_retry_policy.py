"""Retry policy and credential rotation."""

from unittest.mock import AsyncMock

import httpx
import pytest
from pydantic import BaseModel

from sitegen.domain.errors import (
    FatalGenerationError,
    GenerationExhausted,
    OutputSchemaError,
    TransientGenerationError,
)
from sitegen.domain.ports.llm import LLMMessage, LLMResponse
from sitegen.infrastructure.resilience.retry import (
    CredentialPool,
    ResponseShape,
    RetryPolicy,
    is_transient,
)

MESSAGES = [LLMMessage(role="user", content="hi")]


def _ok(content: str = "ok") -> LLMResponse:
    return LLMResponse(content=content, model="m")


def _rate_limited() -> TransientGenerationError:
    return TransientGenerationError("LLM API error 429: quota", status_code=429)


class _Answer(BaseModel):
    answer: int


class TestCredentialPool:
    def test_round_robin_wraps(self):
        pool = CredentialPool(["a", "b", "c"])
        seen = [pool.current()]
        for _ in range(3):
            pool.rotate()
            seen.append(pool.current())
        assert seen == ["a", "b", "c", "a"]
        assert pool.rotations == 3

    def test_empty_pool(self):
        pool = CredentialPool(["", ""])
        assert pool.size == 0
        assert pool.current() is None
        pool.rotate()
        assert pool.current() is None

    def test_single_key_stays(self):
        pool = CredentialPool(["only"])
        pool.rotate()
        assert pool.current() == "only"
        assert pool.rotations == 1


def test_classification_is_structural():
    assert is_transient(_rate_limited())
    assert is_transient(OutputSchemaError("bad json"))
    assert is_transient(httpx.ReadTimeout("slow"))
    assert not is_transient(FatalGenerationError("rate limit exceeded", status_code=400))
    assert not is_transient(ValueError("429 quota"))


@pytest.mark.parametrize("failures", [0, 1, 2])
async def test_succeeds_after_n_minus_one_transient_failures(failures):
    pool = CredentialPool(["a", "b", "c"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=[_rate_limited() for _ in range(failures)] + [_ok("done")])

    result = await policy.ask(llm, MESSAGES, model="m")

    assert result == "done"
    assert llm.generate.await_count == failures + 1
    assert pool.rotations == failures
    assert pool.index == failures % pool.size
    used_keys = [c.kwargs["api_key"] for c in llm.generate.call_args_list]
    assert used_keys == ["a", "b", "c"][: failures + 1]


async def test_exhaustion_after_exactly_max_attempts():
    pool = CredentialPool(["a", "b"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=_rate_limited())

    with pytest.raises(GenerationExhausted) as exc_info:
        await policy.ask(llm, MESSAGES, model="m")

    assert llm.generate.await_count == 3
    assert exc_info.value.attempts == 3
    assert isinstance(exc_info.value.last_error, TransientGenerationError)
    # rotation happens only between attempts
    assert pool.rotations == 2


async def test_fatal_error_not_retried():
    pool = CredentialPool(["a", "b"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=FatalGenerationError("bad request", status_code=400))

    with pytest.raises(GenerationExhausted) as exc_info:
        await policy.ask(llm, MESSAGES, model="m")

    assert llm.generate.await_count == 1
    assert exc_info.value.attempts == 1
    assert pool.rotations == 0


async def test_transport_errors_retried():
    pool = CredentialPool(["a"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=[httpx.ConnectError("down"), _ok()])

    assert await policy.ask(llm, MESSAGES, model="m") == "ok"
    assert llm.generate.await_count == 2


async def test_json_shape_validates_schema_and_retries_bad_output():
    pool = CredentialPool(["a", "b"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(
        side_effect=[
            _ok("no json here"),
            _ok('{"answer": "not a number"}'),
            _ok('Sure! {"answer": 42}'),
        ]
    )

    result = await policy.ask(llm, MESSAGES, model="m", shape=ResponseShape.JSON, schema=_Answer)

    assert result == _Answer(answer=42)
    assert llm.generate.await_count == 3
    assert all(c.kwargs["json_mode"] for c in llm.generate.call_args_list)


async def test_empty_text_is_retried():
    pool = CredentialPool([])
    policy = RetryPolicy(pool, max_attempts=2, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=[_ok("   "), _ok("text")])

    assert await policy.ask(llm, MESSAGES, model="m") == "text"
    assert llm.generate.call_args_list[0].kwargs["api_key"] is None


async def test_programming_errors_propagate_unwrapped():
    pool = CredentialPool(["a", "b"])
    policy = RetryPolicy(pool, max_attempts=3, base_delay=0, max_delay=0)
    llm = AsyncMock()
    llm.generate = AsyncMock(side_effect=TypeError("unexpected keyword argument"))

    with pytest.raises(TypeError):
        await policy.ask(llm, MESSAGES, model="m")

    assert llm.generate.await_count == 1
    assert pool.rotations == 0


async def test_http_status_error_is_exhaustion():
    policy = RetryPolicy(CredentialPool(["a"]), max_attempts=3, base_delay=0, max_delay=0)
    request = httpx.Request("POST", "http://llm.test/chat/completions")
    llm = AsyncMock()
    llm.generate = AsyncMock(
        side_effect=httpx.HTTPStatusError("boom", request=request, response=httpx.Response(400, request=request))
    )

    with pytest.raises(GenerationExhausted):
        await policy.ask(llm, MESSAGES, model="m")

    assert llm.generate.await_count == 1
