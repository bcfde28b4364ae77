"""Project entities: generated files, blueprint, validation findings, modification plans."""

import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator

_MULTI_SLASH_RE = re.compile(r"/{2,}")


class ProjectType(str, Enum):
    """Kind of project the user asked for."""

    FRONTEND = "frontend"
    BACKEND = "backend"
    FULLSTACK = "fullstack"


class RequestIntent(str, Enum):
    """What the user wants done with the project."""

    CREATE = "create"
    MODIFY = "modify"
    QUESTION = "question"
    EXPLAIN = "explain"


class Severity(str, Enum):
    """Validation finding severity. Only errors drive the repair loop."""

    ERROR = "error"
    WARNING = "warning"


def normalize_path(path: str) -> str:
    """Normalize to project-relative form: forward slashes, no leading './' or '/'.

    >>> normalize_path("/src//App.tsx")
    'src/App.tsx'
    >>> normalize_path(".\\\\src\\\\main.tsx")
    'src/main.tsx'
    """
    p = path.strip().replace("\\", "/")
    p = _MULTI_SLASH_RE.sub("/", p)
    while p.startswith("./"):
        p = p[2:]
    return p.lstrip("/")


@dataclass(frozen=True)
class GeneratedFile:
    """A single file of the generated project. Identity is the normalized path."""

    path: str
    content: str
    exports: tuple[str, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        object.__setattr__(self, "path", normalize_path(self.path))
        object.__setattr__(self, "exports", tuple(self.exports))


@dataclass(frozen=True)
class ValidationIssue:
    """Structured finding of the validation stage. Carried in state, never raised."""

    file: str
    message: str
    severity: Severity = Severity.ERROR

    def to_dict(self) -> dict:
        return {"file": self.file, "message": self.message, "severity": self.severity.value}


class PageSpec(BaseModel):
    """One page of the planned site."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    route: str = Field(..., min_length=1)
    description: str = ""
    sections: list[str] = []
    components: list[str] = []

    @field_validator("name")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return re.sub(r"\s+", "", v)


class ComponentSpec(BaseModel):
    """Reusable component planned for the site."""

    model_config = ConfigDict(extra="ignore")

    name: str = Field(..., min_length=1)
    type: Literal["ui", "layout", "feature"] = "ui"
    props: list[str] = []

    @field_validator("name")
    @classmethod
    def _strip_whitespace(cls, v: str) -> str:
        return re.sub(r"\s+", "", v)


class Blueprint(BaseModel):
    """Project plan produced by the blueprint stage. Replaced wholesale, never patched."""

    model_config = ConfigDict(extra="ignore", populate_by_name=True, frozen=True)

    project_name: str = Field(..., min_length=1, alias="projectName")
    description: str = ""
    features: list[str] = []
    pages: list[PageSpec] = []
    components: list[ComponentSpec] = []
    dependencies: dict[str, str] = {}

    @field_validator("features", mode="before")
    @classmethod
    def _feature_names(cls, v: object) -> object:
        # Models return either plain strings or {"name": ...} objects
        if isinstance(v, list):
            return [f.get("name", "") if isinstance(f, dict) else str(f) for f in v]
        return v


class FileChange(BaseModel):
    """Single entry of a modification plan."""

    model_config = ConfigDict(extra="ignore")

    file: str = Field(..., min_length=1)
    action: Literal["create", "modify", "delete"]
    description: str = ""

    @field_validator("file")
    @classmethod
    def _normalize(cls, v: str) -> str:
        return normalize_path(v)


class ModificationPlan(BaseModel):
    """Files to create, modify or delete for a follow-up request."""

    model_config = ConfigDict(extra="ignore")

    summary: str = ""
    changes: list[FileChange] = []
