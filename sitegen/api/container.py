"""Dependency Injection Container - centralized service management."""

from functools import cached_property
from typing import TYPE_CHECKING

from sitegen.domain.ports.config import AppConfig
from sitegen.infrastructure.config import load_config
from sitegen.infrastructure.resilience import CredentialPool, RetryPolicy

if TYPE_CHECKING:
    from sitegen.application.generation.use_case import GenerationUseCase
    from sitegen.infrastructure.llm.openai_compatible import OpenAICompatibleAdapter


class Container:
    """Dependency Injection Container with lazy initialization.

    All dependencies are created on first access and cached. The credential
    pool is therefore one per process, shared by every generation run.

    Usage:
        container = Container()
        use_case = container.generation_use_case
    """

    def __init__(self, config: AppConfig | None = None):
        """Initialize container with optional config override."""
        self._config_override = config

    @cached_property
    def config(self) -> AppConfig:
        """Application configuration."""
        if self._config_override:
            return self._config_override
        return load_config()

    @cached_property
    def llm(self) -> "OpenAICompatibleAdapter":
        """LLM adapter for the configured OpenAI-compatible endpoint."""
        from sitegen.infrastructure.llm.openai_compatible import OpenAICompatibleAdapter

        return OpenAICompatibleAdapter(self.config.openai_compatible)

    @cached_property
    def credential_pool(self) -> CredentialPool:
        """Round-robin API keys, rotated on transient failures."""
        return CredentialPool(self.config.openai_compatible.api_keys)

    @cached_property
    def retry_policy(self) -> RetryPolicy:
        """Retry policy for single model calls."""
        retry = self.config.retry
        return RetryPolicy(
            self.credential_pool,
            max_attempts=retry.max_attempts,
            base_delay=retry.base_delay,
            max_delay=retry.max_delay,
        )

    @cached_property
    def generation_use_case(self) -> "GenerationUseCase":
        """Generation use case with all dependencies."""
        from sitegen.application.generation.use_case import GenerationUseCase

        return GenerationUseCase(
            llm=self.llm,
            retry_policy=self.retry_policy,
            models=self.config.models,
            generation=self.config.generation,
        )

    def reset(self) -> None:
        """Reset all cached instances (useful for testing)."""
        for attr in list(self.__dict__.keys()):
            if not attr.startswith("_"):
                delattr(self, attr)


# Global container instance
_container: Container | None = None


def get_container() -> Container:
    """Get or create global container instance."""
    global _container
    if _container is None:
        _container = Container()
    return _container


def reset_container() -> None:
    """Reset global container (for testing)."""
    global _container
    if _container:
        _container.reset()
    _container = None
