"""Generation use case - runs the LangGraph generation workflow."""

import asyncio
import logging
import uuid
from collections.abc import AsyncIterator

from sitegen.application.generation.dto import (
    GenerateRequest,
    GenerateResponse,
    GenerationResult,
    GenerationStreamEvent,
)
from sitegen.domain.entities.project import Blueprint, GeneratedFile, ProjectType
from sitegen.domain.entities.workflow_events import GenerationEventType, phase_message
from sitegen.domain.entities.workflow_state import WorkflowState, initial_state
from sitegen.domain.ports.config import GenerationConfig, ModelConfig
from sitegen.domain.ports.llm import LLMPort
from sitegen.infrastructure.agents.llm_helpers import make_file
from sitegen.infrastructure.resilience.retry import RetryPolicy
from sitegen.infrastructure.workflow.context import (
    FileCallback,
    GenerationContext,
    GenerationNotifier,
    PhaseCallback,
)
from sitegen.infrastructure.workflow.graph import compile_generation_graph
from sitegen.shared.logging import generation_log_context

logger = logging.getLogger(__name__)

INITIAL_MESSAGE = "I'm analyzing your requirements and planning the website structure..."


def _state_to_result(state: WorkflowState) -> GenerationResult:
    """Map final workflow state to a plain result."""
    files = state.get("files") or {}
    return GenerationResult(
        files={path: f.content for path, f in files.items()},
        errors=[e.to_dict() for e in state.get("errors") or []],
        messages=list(state.get("messages") or []),
        intent=state.get("request_intent"),
        chat_response=state.get("chat_response"),
        iterations=state.get("iteration_count", 0),
        blueprint=state.get("blueprint"),
    )


class GenerationUseCase:
    """Drives one workflow run per call: route → (chat | modify | create) → validate ⇄ repair."""

    def __init__(
        self,
        llm: LLMPort,
        retry_policy: RetryPolicy,
        models: ModelConfig | None = None,
        generation: GenerationConfig | None = None,
    ) -> None:
        self._llm = llm
        self._retry = retry_policy
        self._models = models or ModelConfig()
        self._generation = generation or GenerationConfig()

    async def generate(
        self,
        prompt: str,
        project_type: ProjectType = ProjectType.FRONTEND,
        on_file_produced: FileCallback | None = None,
        on_phase_changed: PhaseCallback | None = None,
        existing_files: dict[str, str] | None = None,
        blueprint: Blueprint | None = None,
    ) -> GenerationResult:
        """Run the workflow to completion.

        Callbacks live only for this call and are dropped when it returns or
        fails. Files reported before a failure stay valid for the caller.

        Raises:
            WorkflowError: a stage without fallback failed.

        """
        notifier = GenerationNotifier(on_file_produced, on_phase_changed)
        ctx = GenerationContext(
            llm=self._llm,
            retry=self._retry,
            models=self._models,
            notifier=notifier,
            max_concurrency=self._generation.max_concurrency,
        )
        graph = compile_generation_graph(ctx, self._generation.max_repair_iterations)
        files: dict[str, GeneratedFile] = {}
        for path, content in (existing_files or {}).items():
            file = make_file(path, content)
            files[file.path] = file
        initial = initial_state(prompt, project_type, files=files, blueprint=blueprint)

        log_context = generation_log_context(
            generation_id=uuid.uuid4().hex[:12],
            project_type=ProjectType(project_type).value,
        )
        with log_context:
            logger.info("Generation started (%d existing files)", len(files))
            try:
                final = await graph.ainvoke(
                    initial,
                    config={"recursion_limit": self._generation.recursion_limit},
                )
            finally:
                notifier.close()
            result = _state_to_result(final)
            logger.info(
                "Generation finished: %d files, %d errors, %d repair iterations",
                len(result.files),
                len(result.errors),
                result.iterations,
            )
        return result

    async def execute(self, request: GenerateRequest) -> GenerateResponse:
        """Run the workflow, return the full result."""
        result = await self.generate(
            request.prompt,
            request.project_type,
            existing_files=request.existing_files,
            blueprint=request.blueprint,
        )
        return GenerateResponse(
            success=True,
            project_name=result.blueprint.project_name if result.blueprint else None,
            total_files=len(result.files),
            files=result.files,
            errors=result.errors,
            messages=result.messages,
            intent=result.intent.value if result.intent else None,
            chat_response=result.chat_response,
            iterations=result.iterations,
            blueprint=result.blueprint,
        )

    async def execute_stream(self, request: GenerateRequest) -> AsyncIterator[GenerationStreamEvent]:
        """Run the workflow, stream phase and file events via SSE."""
        queue: asyncio.Queue[GenerationStreamEvent] = asyncio.Queue()
        current_phase = "thinking"

        def on_phase_changed(phase: str) -> None:
            nonlocal current_phase
            current_phase = phase
            queue.put_nowait(
                GenerationStreamEvent(
                    event_type=GenerationEventType.PHASE.value,
                    payload={"phase": phase, "message": phase_message(phase)},
                )
            )

        def on_file_produced(file: GeneratedFile) -> None:
            queue.put_nowait(
                GenerationStreamEvent(
                    event_type=GenerationEventType.FILE.value,
                    payload={"path": file.path, "content": file.content, "phase": current_phase},
                )
            )

        async def run_generation() -> None:
            try:
                result = await self.generate(
                    request.prompt,
                    request.project_type,
                    on_file_produced=on_file_produced,
                    on_phase_changed=on_phase_changed,
                    existing_files=request.existing_files,
                    blueprint=request.blueprint,
                )
                if result.chat_response is not None:
                    message = result.chat_response
                else:
                    message = f"Generated {len(result.files)} files"
                queue.put_nowait(
                    GenerationStreamEvent(
                        event_type=GenerationEventType.COMPLETE.value,
                        payload={
                            "total_files": len(result.files),
                            "errors": result.errors,
                            "iterations": result.iterations,
                            "intent": result.intent.value if result.intent else None,
                            "messages": result.messages,
                            "message": message,
                        },
                    )
                )
            except Exception as e:
                logger.exception("Streaming generation failed")
                queue.put_nowait(
                    GenerationStreamEvent(
                        event_type=GenerationEventType.ERROR.value,
                        payload={"message": str(e) or "Generation failed"},
                    )
                )

        yield GenerationStreamEvent(
            event_type=GenerationEventType.MESSAGE.value,
            payload={"content": INITIAL_MESSAGE, "phase": current_phase},
        )
        task = asyncio.create_task(run_generation())
        try:
            while True:
                event = await queue.get()
                yield event
                if event.event_type in (GenerationEventType.COMPLETE.value, GenerationEventType.ERROR.value):
                    break
        finally:
            task.cancel()
            try:
                await task
            except asyncio.CancelledError:
                pass
