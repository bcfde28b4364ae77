"""Pytest configuration and shared fixtures."""

import pytest

from sitegen.domain.ports.config import ModelConfig
from sitegen.infrastructure.resilience.retry import CredentialPool, RetryPolicy
from sitegen.infrastructure.workflow.context import GenerationContext, GenerationNotifier
from tests.fakes import ScriptedLLM


@pytest.fixture
def scripted_llm():
    return ScriptedLLM()


@pytest.fixture
def credential_pool():
    return CredentialPool(["key-a", "key-b", "key-c"])


@pytest.fixture
def retry_policy(credential_pool):
    """Three attempts, no backoff sleeps."""
    return RetryPolicy(credential_pool, max_attempts=3, base_delay=0, max_delay=0)


@pytest.fixture
def make_context(scripted_llm, retry_policy):
    """Factory for a GenerationContext around the scripted model."""

    def _make(llm=None, notifier: GenerationNotifier | None = None, max_concurrency: int = 4):
        return GenerationContext(
            llm=llm or scripted_llm,
            retry=retry_policy,
            models=ModelConfig(router="router-m", planner="planner-m", coder="coder-m", chat="chat-m"),
            notifier=notifier or GenerationNotifier(),
            max_concurrency=max_concurrency,
        )

    return _make
