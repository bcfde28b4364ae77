"""Blueprint agent - plans the project and its page set."""

import logging

from pydantic import BaseModel, Field

from sitegen.domain.entities.project import Blueprint, PageSpec
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.domain.errors import GenerationExhausted
from sitegen.infrastructure.agents.prompts import (
    BLUEPRINT_SYSTEM,
    PAGES_SYSTEM,
    build_blueprint_prompt,
    build_pages_prompt,
)
from sitegen.infrastructure.resilience.retry import ResponseShape
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

STANDARD_DEPENDENCIES: dict[str, str] = {
    "react": "^18.3.1",
    "react-dom": "^18.3.1",
    "react-router-dom": "^7.1.1",
    "framer-motion": "^11.14.4",
    "lucide-react": "^0.460.0",
    "clsx": "^2.1.1",
    "tailwind-merge": "^2.5.5",
}

# Generated by the core stage, never as planned components
RESERVED_COMPONENTS = frozenset({"Navbar", "Footer"})


class _PageSet(BaseModel):
    pages: list[PageSpec] = Field(..., min_length=1)


def fallback_pages() -> list[PageSpec]:
    """Minimal page set used when page extraction fails."""
    return [
        PageSpec(
            name="HomePage",
            route="/",
            description="Main landing page",
            sections=["Hero", "Features", "CTA"],
            components=["Hero", "FeatureGrid"],
        ),
        PageSpec(
            name="NotFoundPage",
            route="*",
            description="404 error page",
            sections=["ErrorMessage"],
            components=["ErrorDisplay"],
        ),
    ]


async def extract_pages(ctx: GenerationContext, user_prompt: str, draft: Blueprint) -> list[PageSpec]:
    """Project-specific pages from the model; the two-page minimum on exhaustion."""
    try:
        page_set: _PageSet = await ctx.ask(
            PAGES_SYSTEM,
            build_pages_prompt(user_prompt, draft),
            model=ctx.models.planner,
            temperature=0.7,
            shape=ResponseShape.JSON,
            schema=_PageSet,
        )
        pages = page_set.pages
    except GenerationExhausted as e:
        logger.warning("Page extraction failed, using minimal fallback pages: %s", e)
        pages = fallback_pages()

    unique: dict[str, PageSpec] = {}
    for page in pages:
        unique.setdefault(page.name, page)
    return list(unique.values())


async def blueprint_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Produce the blueprint. No fallback: exhaustion fails the run."""
    user_prompt = state.get("user_prompt", "")
    draft: Blueprint = await ctx.ask(
        BLUEPRINT_SYSTEM,
        build_blueprint_prompt(user_prompt, state["project_type"]),
        model=ctx.models.planner,
        temperature=0.4,
        shape=ResponseShape.JSON,
        schema=Blueprint,
    )
    pages = await extract_pages(ctx, user_prompt, draft)

    components = {}
    for component in draft.components:
        if component.name not in RESERVED_COMPONENTS:
            components.setdefault(component.name, component)

    blueprint = draft.model_copy(
        update={
            "pages": pages,
            "components": list(components.values()),
            "dependencies": {**STANDARD_DEPENDENCIES, **draft.dependencies},
        }
    )
    logger.info(
        "Blueprint %s: %d pages, %d components",
        blueprint.project_name,
        len(blueprint.pages),
        len(blueprint.components),
    )
    return {
        "blueprint": blueprint,
        "messages": [
            f"Planning complete: {blueprint.project_name}",
            f"{len(blueprint.pages)} pages planned: {', '.join(p.name for p in blueprint.pages)}",
            f"{len(blueprint.features)} features identified",
        ],
    }
