"""FastAPI dependencies - DI container."""

from typing import TYPE_CHECKING

from slowapi import Limiter
from slowapi.util import get_remote_address

from sitegen.api.container import get_container
from sitegen.domain.ports.config import AppConfig

if TYPE_CHECKING:
    from sitegen.application.generation.use_case import GenerationUseCase

limiter = Limiter(key_func=get_remote_address)


def get_config() -> AppConfig:
    """Config of the global container (loaded once)."""
    return get_container().config


def generate_rate_limit() -> str:
    """Per-client limit for generation requests, from config."""
    return f"{get_config().security.rate_limit_requests_per_minute}/minute"


def get_generation_use_case() -> "GenerationUseCase":
    """GenerationUseCase sharing the process-wide credential pool."""
    return get_container().generation_use_case
