"""Phase vocabulary and event types."""

from sitegen.domain.entities.workflow_events import (
    PHASE_MESSAGES,
    GenerationEventType,
    Phase,
    phase_message,
)


def test_every_phase_has_a_message():
    assert set(PHASE_MESSAGES) == set(Phase)


def test_creation_phase_names_are_stable():
    names = {p.value for p in Phase}
    assert {"blueprint", "structure", "core", "components", "pages", "validation", "repair"} <= names


def test_phase_message():
    assert phase_message("core") == "Generating core files (main.tsx, App.tsx, layouts)..."
    assert phase_message("warp") == "Processing warp..."


def test_event_types():
    assert [e.value for e in GenerationEventType] == ["message", "phase", "file", "complete", "error"]
