"""How a stage's partial update composes into the running workflow state.

files     upsert by normalized path; a None value is an explicit delete
messages  appended in stage order
others    replaced when present in the update, kept otherwise
"""

from collections.abc import Mapping
from typing import TYPE_CHECKING

from sitegen.domain.entities.project import GeneratedFile, normalize_path

if TYPE_CHECKING:
    from sitegen.domain.entities.workflow_state import WorkflowState

FileUpdate = Mapping[str, GeneratedFile | None]


def merge_files(
    current: Mapping[str, GeneratedFile] | None,
    update: FileUpdate | None,
) -> dict[str, GeneratedFile]:
    """Reducer for WorkflowState.files. Existing paths keep their position on overwrite."""
    merged: dict[str, GeneratedFile] = dict(current or {})
    for raw_path, file in (update or {}).items():
        path = normalize_path(raw_path)
        if file is None:
            merged.pop(path, None)
            continue
        if file.path != path:
            file = GeneratedFile(path=path, content=file.content, exports=file.exports)
        merged[path] = file
    return merged


def append_messages(current: list[str] | None, update: list[str] | None) -> list[str]:
    """Reducer for WorkflowState.messages."""
    return [*(current or []), *(update or [])]


def merge_state(state: "WorkflowState", update: Mapping) -> "WorkflowState":
    """Apply a partial update outside the graph, with the same rules the graph uses."""
    merged: dict = dict(state)
    for key, value in update.items():
        if key == "files":
            merged["files"] = merge_files(state.get("files"), value)
        elif key == "messages":
            merged["messages"] = append_messages(state.get("messages"), value)
        else:
            merged[key] = value
    return merged  # type: ignore[return-value]
