"""Repair agent - rewrites files reported by validation."""

import logging

from sitegen.domain.entities.project import ValidationIssue, normalize_path
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.infrastructure.agents.llm_helpers import generate_files
from sitegen.infrastructure.agents.prompts import REPAIR_SYSTEM, build_repair_prompt
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)


def group_errors(errors: list[ValidationIssue]) -> dict[str, list[str]]:
    """Error messages per normalized file path, in first-seen order."""
    grouped: dict[str, list[str]] = {}
    for error in errors:
        grouped.setdefault(normalize_path(error.file), []).append(error.message)
    return grouped


async def repair_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    """One repair cycle. Always increments iteration_count, even if nothing was fixable."""
    files = state.get("files") or {}
    iteration = state.get("iteration_count", 0) + 1

    jobs: list[tuple[str, str]] = []
    for path, problems in group_errors(state.get("errors") or []).items():
        file = files.get(path)
        if file is None:
            logger.warning("Cannot repair %s: file not in project", path)
            continue
        jobs.append((path, build_repair_prompt(path, file.content, problems)))

    repaired = await generate_files(ctx, jobs, system=REPAIR_SYSTEM, temperature=0.3) if jobs else {}
    logger.info("Repair iteration %d rewrote %d file(s)", iteration, len(repaired))
    return {
        "files": repaired,
        "iteration_count": iteration,
        "messages": [f"Repair iteration {iteration}: fixed {len(repaired)} file(s)"],
    }
