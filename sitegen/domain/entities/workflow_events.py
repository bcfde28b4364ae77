"""Phase names and event types for SSE streaming."""

from enum import Enum


class Phase(str, Enum):
    """Stable phase names surfaced through on_phase_changed."""

    INTENT = "intent"
    CHAT = "chat"
    ANALYZE = "analyze"
    MODIFY = "modify"
    BLUEPRINT = "blueprint"
    STRUCTURE = "structure"
    CORE = "core"
    COMPONENTS = "components"
    PAGES = "pages"
    VALIDATION = "validation"
    REPAIR = "repair"


PHASE_MESSAGES: dict[Phase, str] = {
    Phase.INTENT: "Understanding your request...",
    Phase.CHAT: "Looking through the project to answer...",
    Phase.ANALYZE: "Working out which files need to change...",
    Phase.MODIFY: "Applying changes to the project...",
    Phase.BLUEPRINT: "Creating project blueprint...",
    Phase.STRUCTURE: "Setting up project structure...",
    Phase.CORE: "Generating core files (main.tsx, App.tsx, layouts)...",
    Phase.COMPONENTS: "Building UI components...",
    Phase.PAGES: "Creating page components...",
    Phase.VALIDATION: "Validating generated code...",
    Phase.REPAIR: "Fixing validation issues...",
}


def phase_message(phase: str) -> str:
    """Human-readable text for a phase name."""
    try:
        return PHASE_MESSAGES[Phase(phase)]
    except ValueError:
        return f"Processing {phase}..."


class GenerationEventType(str, Enum):
    """Event types streamed to client."""

    MESSAGE = "message"
    PHASE = "phase"
    FILE = "file"
    COMPLETE = "complete"
    ERROR = "error"
