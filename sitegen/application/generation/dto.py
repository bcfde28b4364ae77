"""Generation DTOs."""

from pydantic import BaseModel, Field

from sitegen.domain.entities.project import Blueprint, ProjectType, RequestIntent


class GenerateRequest(BaseModel):
    """Request to generate, modify or ask about a project."""

    prompt: str = Field(..., min_length=1, max_length=50_000)
    project_type: ProjectType = ProjectType.FRONTEND
    existing_files: dict[str, str] | None = None  # path -> content of a project to continue
    blueprint: Blueprint | None = None


class GenerationResult(BaseModel):
    """Final state of a finished run, as plain data."""

    files: dict[str, str] = {}
    errors: list[dict] = []
    messages: list[str] = []
    intent: RequestIntent | None = None
    chat_response: str | None = None
    iterations: int = 0
    blueprint: Blueprint | None = None

    @property
    def degraded(self) -> bool:
        """Repair limit hit with errors left: usable but imperfect."""
        return bool(self.errors)


class GenerateResponse(BaseModel):
    """Response from a non-streaming generation."""

    success: bool
    project_name: str | None = None
    total_files: int
    files: dict[str, str]
    errors: list[dict]
    messages: list[str]
    intent: str | None = None
    chat_response: str | None = None
    iterations: int = 0
    blueprint: Blueprint | None = None


class GenerationStreamEvent(BaseModel):
    """SSE event for streaming generation progress."""

    event_type: str  # message, phase, file, complete, error
    payload: dict = {}
