"""Intent router - decides whether a request creates, modifies or asks about a project."""

import logging

from sitegen.domain.entities.project import RequestIntent
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.domain.errors import GenerationExhausted
from sitegen.domain.services.intent_detector import IntentDetector
from sitegen.infrastructure.agents.prompts import INTENT_SYSTEM, build_intent_prompt
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

_detector = IntentDetector()


async def intent_router_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Set request_intent. Without existing files or blueprint this is always CREATE."""
    prompt = state.get("user_prompt", "")
    files = state.get("files") or {}
    blueprint = state.get("blueprint")

    if not files and blueprint is None:
        logger.info("No existing project, intent: create")
        return {"request_intent": RequestIntent.CREATE}

    try:
        answer = await ctx.ask(
            INTENT_SYSTEM,
            build_intent_prompt(prompt, len(files), blueprint is not None),
            model=ctx.models.router,
            temperature=0.1,
        )
        intent = _detector.parse_model_answer(answer, prompt)
    except GenerationExhausted as e:
        intent = _detector.detect(prompt, has_project=bool(files))
        logger.warning("Intent classification unavailable (%s), keyword fallback: %s", e, intent.value)

    logger.info("Detected intent: %s", intent.value)
    return {
        "request_intent": intent,
        "messages": [f"Request understood as: {intent.value}"],
    }
