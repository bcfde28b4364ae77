"""Workflow state schema for LangGraph."""

from typing import Annotated, TypedDict

from sitegen.domain.entities.project import (
    Blueprint,
    GeneratedFile,
    ModificationPlan,
    ProjectType,
    RequestIntent,
    ValidationIssue,
)
from sitegen.domain.services.state_merge import append_messages, merge_files


class WorkflowState(TypedDict, total=False):
    """State passed between workflow nodes. Nodes return partial updates."""

    # Input (immutable after creation)
    user_prompt: str
    project_type: ProjectType

    # Routing
    request_intent: RequestIntent | None

    # Generation
    blueprint: Blueprint | None
    files: Annotated[dict[str, GeneratedFile], merge_files]
    errors: list[ValidationIssue]  # replaced on every validation pass
    iteration_count: int

    # Modify / question branches
    modification_plan: ModificationPlan | None  # consumed by apply_modification
    chat_response: str | None

    # Progress
    current_phase: str
    messages: Annotated[list[str], append_messages]


def initial_state(
    user_prompt: str,
    project_type: ProjectType = ProjectType.FRONTEND,
    files: dict[str, GeneratedFile] | None = None,
    blueprint: Blueprint | None = None,
) -> WorkflowState:
    """Build the state every run starts from."""
    return {
        "user_prompt": user_prompt,
        "project_type": project_type,
        "request_intent": None,
        "blueprint": blueprint,
        "files": dict(files or {}),
        "errors": [],
        "iteration_count": 0,
        "modification_plan": None,
        "chat_response": None,
        "current_phase": "init",
        "messages": [],
    }
