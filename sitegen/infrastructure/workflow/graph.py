"""LangGraph workflow - intent → blueprint → structure → core → components → pages → validation ⇄ repair.

Follow-up requests branch at the intent router: questions are answered without
touching files, modifications are planned and applied, then validated.
"""

import logging
import time
from collections.abc import Awaitable, Callable
from enum import Enum

from langgraph.graph import END, START, StateGraph

from sitegen.domain.entities.project import RequestIntent
from sitegen.domain.entities.workflow_events import Phase
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.domain.errors import GenerationExhausted, WorkflowError
from sitegen.infrastructure.agents.blueprint import blueprint_node
from sitegen.infrastructure.agents.chat_response import chat_response_node
from sitegen.infrastructure.agents.code_writers import components_node, core_node, pages_node
from sitegen.infrastructure.agents.intent_router import intent_router_node
from sitegen.infrastructure.agents.modification import apply_modification_node, modification_analyzer_node
from sitegen.infrastructure.agents.repair import repair_node
from sitegen.infrastructure.agents.structure import structure_node
from sitegen.infrastructure.agents.validator import validation_node
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

StageFn = Callable[[WorkflowState, GenerationContext], Awaitable[WorkflowState]]


class Stage(str, Enum):
    """Node identifiers."""

    INTENT_ROUTER = "intent_router"
    CHAT_RESPONSE = "chat_response"
    MODIFICATION_ANALYZER = "modification_analyzer"
    APPLY_MODIFICATION = "apply_modification"
    BLUEPRINT = "blueprint"
    STRUCTURE = "structure"
    CORE = "core"
    COMPONENTS = "components"
    PAGES = "pages"
    VALIDATION = "validation"
    REPAIR = "repair"


class Route(str, Enum):
    """Outcomes of the conditional edges."""

    CHAT = "chat"
    MODIFY = "modify"
    CREATE = "create"
    REPAIR = "repair"
    DONE = "done"


STAGES: dict[Stage, tuple[StageFn, Phase]] = {
    Stage.INTENT_ROUTER: (intent_router_node, Phase.INTENT),
    Stage.CHAT_RESPONSE: (chat_response_node, Phase.CHAT),
    Stage.MODIFICATION_ANALYZER: (modification_analyzer_node, Phase.ANALYZE),
    Stage.APPLY_MODIFICATION: (apply_modification_node, Phase.MODIFY),
    Stage.BLUEPRINT: (blueprint_node, Phase.BLUEPRINT),
    Stage.STRUCTURE: (structure_node, Phase.STRUCTURE),
    Stage.CORE: (core_node, Phase.CORE),
    Stage.COMPONENTS: (components_node, Phase.COMPONENTS),
    Stage.PAGES: (pages_node, Phase.PAGES),
    Stage.VALIDATION: (validation_node, Phase.VALIDATION),
    Stage.REPAIR: (repair_node, Phase.REPAIR),
}


def route_by_intent(state: WorkflowState) -> Route:
    """question/explain → chat, modify → modification, anything else → full creation."""
    intent = state.get("request_intent")
    if intent in (RequestIntent.QUESTION, RequestIntent.EXPLAIN):
        return Route.CHAT
    if intent == RequestIntent.MODIFY:
        return Route.MODIFY
    return Route.CREATE


def make_validation_router(max_repair_iterations: int) -> Callable[[WorkflowState], Route]:
    def route_after_validation(state: WorkflowState) -> Route:
        if not state.get("errors"):
            return Route.DONE
        if state.get("iteration_count", 0) >= max_repair_iterations:
            logger.warning(
                "Repair limit reached with %d error(s) remaining",
                len(state.get("errors") or []),
            )
            return Route.DONE
        return Route.REPAIR

    return route_after_validation


def wrap_stage(stage: Stage, fn: StageFn, phase: Phase, ctx: GenerationContext):
    """Bind a stage to the run context: phase notification, failure mapping, timing."""

    async def node(state: WorkflowState) -> WorkflowState:
        ctx.notifier.phase_changed(phase.value)
        started = time.perf_counter()
        try:
            update = await fn(state, ctx)
        except GenerationExhausted as e:
            logger.error("Stage %s failed: %s", stage.value, e)
            raise WorkflowError(stage.value, e) from e
        logger.debug("Stage %s finished in %.2fs", stage.value, time.perf_counter() - started)
        return {**update, "current_phase": phase.value}

    node.__name__ = f"{stage.value}_node"
    return node


def build_generation_graph(ctx: GenerationContext, max_repair_iterations: int = 3) -> StateGraph:
    """Build the workflow graph for one run, closing over its context."""
    builder = StateGraph(WorkflowState)
    for stage, (fn, phase) in STAGES.items():
        builder.add_node(stage.value, wrap_stage(stage, fn, phase, ctx))

    builder.add_edge(START, Stage.INTENT_ROUTER.value)
    builder.add_conditional_edges(
        Stage.INTENT_ROUTER.value,
        route_by_intent,
        path_map={
            Route.CHAT: Stage.CHAT_RESPONSE.value,
            Route.MODIFY: Stage.MODIFICATION_ANALYZER.value,
            Route.CREATE: Stage.BLUEPRINT.value,
        },
    )
    builder.add_edge(Stage.CHAT_RESPONSE.value, END)

    builder.add_edge(Stage.MODIFICATION_ANALYZER.value, Stage.APPLY_MODIFICATION.value)
    builder.add_edge(Stage.APPLY_MODIFICATION.value, Stage.VALIDATION.value)

    builder.add_edge(Stage.BLUEPRINT.value, Stage.STRUCTURE.value)
    builder.add_edge(Stage.STRUCTURE.value, Stage.CORE.value)
    builder.add_edge(Stage.CORE.value, Stage.COMPONENTS.value)
    builder.add_edge(Stage.COMPONENTS.value, Stage.PAGES.value)
    builder.add_edge(Stage.PAGES.value, Stage.VALIDATION.value)

    builder.add_conditional_edges(
        Stage.VALIDATION.value,
        make_validation_router(max_repair_iterations),
        path_map={Route.DONE: END, Route.REPAIR: Stage.REPAIR.value},
    )
    builder.add_edge(Stage.REPAIR.value, Stage.VALIDATION.value)
    return builder


def compile_generation_graph(ctx: GenerationContext, max_repair_iterations: int = 3):
    """Compiled graph for one run. No checkpointer: state lives only for the invocation."""
    return build_generation_graph(ctx, max_repair_iterations).compile()
