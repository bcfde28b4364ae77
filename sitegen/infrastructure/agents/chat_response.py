"""Chat response - answers questions about an existing project without touching files."""

import logging

from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.domain.errors import GenerationExhausted
from sitegen.infrastructure.agents.prompts import CHAT_SYSTEM, build_chat_prompt
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)


def build_project_context(state: WorkflowState) -> str:
    """Blueprint summary, pages, components and the sorted file list."""
    sections: list[str] = []
    blueprint = state.get("blueprint")
    files = state.get("files") or {}

    if blueprint is not None:
        sections += [f"PROJECT: {blueprint.project_name}", f"DESCRIPTION: {blueprint.description}", ""]
        if blueprint.pages:
            sections.append("PAGES:")
            sections += [f"  - {p.name} ({p.route}) - {p.description}" for p in blueprint.pages]
            sections.append("")

    features: list[str] = []
    components: list[str] = []
    for path in files:
        name = path.rsplit("/", 1)[-1]
        if "/components/features/" in path or "/components/feature/" in path:
            features.append(f"  - {name} - {path}")
        elif "/components/" in path:
            components.append(f"  - {name} - {path}")

    if features:
        sections += ["FEATURE COMPONENTS:", *features, ""]
    if components:
        sections += ["UI COMPONENTS:", *components, ""]

    sections.append("FILE STRUCTURE:")
    sections += [f"  {path}" for path in sorted(files)]
    return "\n".join(sections)


def _fallback_answer(state: WorkflowState) -> str:
    files = state.get("files") or {}
    blueprint = state.get("blueprint")
    answer = "I encountered an error while processing your question. "
    if files:
        answer += f"However, I can tell you that this project has {len(files)} files. "
        if blueprint is not None:
            answer += f'The project is called "{blueprint.project_name}" and has {len(blueprint.pages)} pages.'
    return answer.strip()


async def chat_response_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Answer the user's question from the project context."""
    question = state.get("user_prompt", "")
    try:
        answer = await ctx.ask(
            CHAT_SYSTEM,
            build_chat_prompt(question, build_project_context(state)),
            model=ctx.models.chat,
            temperature=0.7,
        )
    except GenerationExhausted as e:
        logger.warning("Chat answer unavailable, using summary fallback: %s", e)
        answer = _fallback_answer(state)

    return {"chat_response": answer, "messages": [answer]}
