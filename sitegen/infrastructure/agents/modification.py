"""Modification agents - plan follow-up changes, then apply them.

Example: "Add a Gallery page" yields
    create  src/pages/GalleryPage.tsx
    modify  src/App.tsx (route)
    modify  src/components/layout/Navbar.tsx (nav link)
"""

import logging
import re

from sitegen.domain.entities.project import FileChange, GeneratedFile, ModificationPlan, normalize_path
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.domain.errors import GenerationExhausted
from sitegen.infrastructure.agents.llm_helpers import generate_file
from sitegen.infrastructure.agents.prompts import (
    ANALYZER_SYSTEM,
    CODER_SYSTEM,
    MODIFY_SYSTEM,
    build_analyzer_prompt,
    build_modify_file_prompt,
    build_new_file_prompt,
)
from sitegen.infrastructure.resilience.retry import ResponseShape
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

APP_PATH = "src/App.tsx"
NAVBAR_PATHS = ("src/components/layout/Navbar.tsx", "src/components/layout/Header.tsx")

_ADD_PAGE_RE = re.compile(r"add.*?(\w+)\s*page", re.IGNORECASE)
_TARGET_PAGE_RE = re.compile(r"\b(?:to|in|on)\s+(?:the\s+)?(\w+)(?:\s*page)?", re.IGNORECASE)


def build_file_tree(files: dict[str, GeneratedFile]) -> str:
    """Sorted file list grouped by directory."""
    grouped: dict[str, list[str]] = {}
    for path in sorted(files):
        directory, _, name = path.rpartition("/")
        grouped.setdefault(directory or "root", []).append(name)

    lines = ["CURRENT PROJECT FILES:"]
    for directory, names in grouped.items():
        lines.append(f"\n{directory}/")
        lines += [f"  └── {name}" for name in names]
    return "\n".join(lines)


def fallback_plan(user_prompt: str, files: dict[str, GeneratedFile]) -> ModificationPlan:
    """Keyword and regex detection used when the analyzer model is unavailable. May be empty."""
    lowered = user_prompt.lower()
    creates: list[str] = []
    modifies: list[str] = []

    if "add" in lowered and "page" in lowered:
        match = _ADD_PAGE_RE.search(user_prompt)
        if match:
            name = match.group(1)[:1].upper() + match.group(1)[1:]
            page = f"src/pages/{name}Page.tsx"
            # "add X to the home page" names an existing page, not a new one
            if page not in files:
                creates.append(page)
                modifies.append(APP_PATH)
                if NAVBAR_PATHS[0] in files:
                    modifies.append(NAVBAR_PATHS[0])

    if "add" in lowered and ("section" in lowered or "component" in lowered):
        match = _TARGET_PAGE_RE.search(user_prompt)
        if match:
            needle = match.group(1).lower()
            target = next((p for p in files if "/pages/" in p and needle in p.lower()), None)
            if target and target not in modifies:
                modifies.append(target)

    return ModificationPlan(
        summary="Fallback modification plan",
        changes=[FileChange(file=f, action="create", description="Create new file") for f in creates]
        + [FileChange(file=f, action="modify", description="Update existing file") for f in modifies],
    )


def find_existing(path: str, files: dict[str, GeneratedFile]) -> str | None:
    """Exact normalized match first, then a suffix match on a path boundary."""
    path = normalize_path(path)
    if path in files:
        return path
    for candidate in files:
        if candidate.endswith("/" + path) or path.endswith("/" + candidate):
            return candidate
    return None


async def modification_analyzer_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    files = state.get("files") or {}
    user_prompt = state.get("user_prompt", "")
    app = files.get(APP_PATH)
    navbar = next((files[p] for p in NAVBAR_PATHS if p in files), None)

    try:
        plan: ModificationPlan = await ctx.ask(
            ANALYZER_SYSTEM,
            build_analyzer_prompt(
                user_prompt,
                build_file_tree(files),
                app.content[:2000] if app else None,
                navbar.content[:1500] if navbar else None,
            ),
            model=ctx.models.planner,
            temperature=0.3,
            shape=ResponseShape.JSON,
            schema=ModificationPlan,
        )
    except GenerationExhausted as e:
        logger.warning("Modification analysis failed, using regex fallback: %s", e)
        plan = fallback_plan(user_prompt, files)

    for change in plan.changes:
        logger.info("Planned %s: %s", change.action, change.file)
    return {
        "modification_plan": plan,
        "messages": [
            f"Analyzed request: {plan.summary}",
            f"{len(plan.changes)} file(s) will be affected",
        ],
    }


async def apply_modification_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """Apply the plan in order. A path touched twice keeps its first change."""
    files = state.get("files") or {}
    plan: ModificationPlan | None = state.get("modification_plan")
    request = state.get("user_prompt", "")
    changes = plan.changes if plan else []

    update: dict[str, GeneratedFile | None] = {}
    seen: set[str] = set()
    for change in changes:
        if change.action == "create":
            target = normalize_path(change.file)
        else:
            target = find_existing(change.file, files)
            if target is None:
                logger.warning("Skipping %s of missing file %s", change.action, change.file)
                continue
        if target in seen:
            logger.info("Ignoring repeated %s of %s", change.action, target)
            continue
        seen.add(target)

        if change.action == "create":
            paths = sorted(set(files) | set(update))
            update[target] = await generate_file(
                ctx,
                target,
                build_new_file_prompt(target, request, change.description, paths),
                system=CODER_SYSTEM,
            )
        elif change.action == "modify":
            update[target] = await generate_file(
                ctx,
                target,
                build_modify_file_prompt(target, files[target].content, request, change.description),
                system=MODIFY_SYSTEM,
                temperature=0.3,
            )
        else:
            update[target] = None

    written = sum(1 for f in update.values() if f is not None)
    deleted = len(update) - written
    return {
        "files": update,
        "modification_plan": None,
        "messages": [f"Modification applied: {written} file(s) written, {deleted} deleted"],
    }
