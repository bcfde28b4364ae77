"""Generation application layer."""

from sitegen.application.generation.dto import (
    GenerateRequest,
    GenerateResponse,
    GenerationResult,
    GenerationStreamEvent,
)
from sitegen.application.generation.use_case import GenerationUseCase

__all__ = [
    "GenerateRequest",
    "GenerateResponse",
    "GenerationResult",
    "GenerationStreamEvent",
    "GenerationUseCase",
]
