"""Code writer agents - core files, components and pages."""

import logging

from sitegen.domain.entities.project import Blueprint, ComponentSpec, PageSpec
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.infrastructure.agents.llm_helpers import generate_files
from sitegen.infrastructure.agents.prompts import (
    build_component_prompt,
    build_core_file_prompt,
    build_page_prompt,
)
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

CORE_FILES: list[tuple[str, str]] = [
    (
        "src/components/layout/Navbar.tsx",
        "Responsive navigation bar linking to every page route with react-router-dom <Link>. "
        "Named export Navbar and default export.",
    ),
    (
        "src/components/layout/Footer.tsx",
        "Site footer with project name and page links. Named export Footer and default export.",
    ),
    (
        "src/App.tsx",
        "Root component: BrowserRouter with a <Route> per page, rendering Navbar and Footer "
        "around the routes. Import each page as a default import from './pages/<Name>'. "
        "Default export App.",
    ),
    (
        "src/main.tsx",
        "Entry point: import './index.css', render <App /> from './App' into #root with React StrictMode.",
    ),
]


def component_path(component: ComponentSpec) -> str:
    return f"src/components/{component.type}/{component.name}.tsx"


def page_path(page: PageSpec) -> str:
    return f"src/pages/{page.name}.tsx"


def planned_paths(state: WorkflowState, blueprint: Blueprint) -> list[str]:
    """Every path that exists or will exist once the creation pipeline finishes."""
    paths = list(state.get("files") or {})
    paths += [path for path, _ in CORE_FILES]
    paths += [component_path(c) for c in blueprint.components]
    paths += [page_path(p) for p in blueprint.pages]
    return sorted(set(paths))


async def core_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Entry point, root component and layout. No fallback."""
    blueprint: Blueprint = state["blueprint"]
    paths = planned_paths(state, blueprint)
    jobs = [(path, build_core_file_prompt(path, purpose, blueprint, paths)) for path, purpose in CORE_FILES]
    files = await generate_files(ctx, jobs)
    return {"files": files, "messages": [f"Core files generated ({len(files)})"]}


async def components_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """One file per planned component."""
    blueprint: Blueprint = state["blueprint"]
    if not blueprint.components:
        return {"messages": ["No reusable components planned"]}
    jobs = [
        (component_path(c), build_component_prompt(c, blueprint, component_path(c)))
        for c in blueprint.components
    ]
    files = await generate_files(ctx, jobs)
    logger.info("Generated %d components", len(files))
    return {"files": files, "messages": [f"{len(files)} components generated"]}


async def pages_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """One file per planned page."""
    blueprint: Blueprint = state["blueprint"]
    paths = planned_paths(state, blueprint)
    jobs = [(page_path(p), build_page_prompt(p, blueprint, page_path(p), paths)) for p in blueprint.pages]
    files = await generate_files(ctx, jobs)
    logger.info("Generated %d pages", len(files))
    return {"files": files, "messages": [f"{len(files)} pages generated"]}
