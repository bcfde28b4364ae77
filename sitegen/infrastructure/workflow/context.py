"""Per-run context: notification callbacks, model access, stage settings.

A fresh context (and a fresh compiled graph closing over it) is built for every
run, so concurrent runs in one process never see each other's callbacks.
"""

import logging
from collections.abc import Callable
from dataclasses import dataclass, field

from sitegen.domain.entities.project import GeneratedFile
from sitegen.domain.ports.config import ModelConfig
from sitegen.domain.ports.llm import LLMMessage, LLMPort
from sitegen.infrastructure.resilience.retry import ResponseShape, RetryPolicy

logger = logging.getLogger(__name__)

FileCallback = Callable[[GeneratedFile], None]
PhaseCallback = Callable[[str], None]


class GenerationNotifier:
    """Pair of optional progress callbacks for one run.

    Called synchronously and unbatched. A path rewritten by a later stage is
    reported again; de-duplication is left to the listener.
    """

    def __init__(
        self,
        on_file_produced: FileCallback | None = None,
        on_phase_changed: PhaseCallback | None = None,
    ) -> None:
        self._on_file_produced = on_file_produced
        self._on_phase_changed = on_phase_changed

    @property
    def active(self) -> bool:
        return self._on_file_produced is not None or self._on_phase_changed is not None

    def file_produced(self, file: GeneratedFile) -> None:
        if self._on_file_produced is None:
            return
        try:
            self._on_file_produced(file)
        except Exception:
            logger.exception("on_file_produced callback failed for %s", file.path)

    def phase_changed(self, phase: str) -> None:
        if self._on_phase_changed is None:
            return
        try:
            self._on_phase_changed(phase)
        except Exception:
            logger.exception("on_phase_changed callback failed for %s", phase)

    def close(self) -> None:
        """Drop both callbacks; later notifications become no-ops."""
        self._on_file_produced = None
        self._on_phase_changed = None


@dataclass(frozen=True)
class GenerationContext:
    """Everything a stage needs besides the workflow state."""

    llm: LLMPort
    retry: RetryPolicy
    models: ModelConfig = field(default_factory=ModelConfig)
    notifier: GenerationNotifier = field(default_factory=GenerationNotifier)
    max_concurrency: int = 4

    async def ask(
        self,
        system: str,
        user: str,
        *,
        model: str,
        temperature: float = 0.7,
        shape: ResponseShape = ResponseShape.TEXT,
        schema: object | None = None,
    ):
        """System + user prompt through the retry policy."""
        messages = [
            LLMMessage(role="system", content=system),
            LLMMessage(role="user", content=user),
        ]
        return await self.retry.ask(
            self.llm,
            messages,
            model=model,
            temperature=temperature,
            shape=shape,
            schema=schema,
        )
