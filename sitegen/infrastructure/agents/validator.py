"""Validation agent - deterministic static checks over the whole file set.

Produces a fresh list of errors on every pass. Warnings are logged only and
never reach the workflow state, so they cannot keep the repair loop alive.
"""

import json
import logging
import posixpath
import re

from sitegen.domain.entities.project import GeneratedFile, Severity, ValidationIssue
from sitegen.domain.entities.workflow_state import WorkflowState
from sitegen.infrastructure.agents.llm_helpers import extract_exports
from sitegen.infrastructure.workflow.context import GenerationContext

logger = logging.getLogger(__name__)

CODE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js")
RESOLVE_EXTENSIONS = (".tsx", ".ts", ".jsx", ".js", ".json")

_IMPORT_FROM_RE = re.compile(r"""^\s*import\s+(?:type\s+)?([^'";]*?)\s+from\s+['"]([^'"]+)['"]""", re.MULTILINE)
_SIDE_EFFECT_IMPORT_RE = re.compile(r"""^\s*import\s+['"]([^'"]+)['"]""", re.MULTILINE)
_REEXPORT_RE = re.compile(r"""^\s*export\s+(?:\*|\{[^}]*\})\s+from\s+['"]([^'"]+)['"]""", re.MULTILINE)
_EXPORT_STAR_RE = re.compile(r"^\s*export\s+\*\s+from\b", re.MULTILINE)


def is_code_file(path: str) -> bool:
    return path.endswith(CODE_EXTENSIONS)


def resolve_import(importer: str, source: str, paths: set[str]) -> str | None:
    """Map a local import specifier to a path in *paths*.

    Returns None when nothing matches. Raises ValueError when a relative
    specifier climbs above the project root.
    """
    if source.startswith("@/"):
        base = "src/" + source[2:]
    else:
        base = posixpath.normpath(posixpath.join(posixpath.dirname(importer), source))
        if base == ".." or base.startswith("../"):
            raise ValueError(source)

    candidates = [base]
    candidates += [base + ext for ext in RESOLVE_EXTENSIONS]
    candidates += [f"{base}/index{ext}" for ext in RESOLVE_EXTENSIONS]
    for candidate in candidates:
        if candidate in paths:
            return candidate
    return None


def parse_import_clause(clause: str) -> tuple[bool, list[str]]:
    """(has default import, named imports) of an import clause.

    Namespace imports (`* as ns`) check nothing and yield (False, []).
    """
    clause = clause.strip()
    if clause.startswith("*"):
        return False, []

    named: list[str] = []
    brace = re.search(r"\{([^}]*)\}", clause)
    if brace:
        for part in brace.group(1).split(","):
            name = part.strip()
            if name.startswith("type "):
                name = name[5:].strip()
            name = name.split(" as ")[0].strip()
            if name:
                named.append(name)
        clause = clause[: brace.start()]

    head = clause.strip().rstrip(",").strip()
    has_default = bool(head) and not head.startswith("*")
    return has_default, named


def local_imports(content: str) -> list[tuple[str, str]]:
    """(clause, source) for every relative or `@/` import and re-export."""
    found: list[tuple[str, str]] = []
    for match in _IMPORT_FROM_RE.finditer(content):
        found.append((match.group(1), match.group(2)))
    for match in _SIDE_EFFECT_IMPORT_RE.finditer(content):
        found.append(("", match.group(1)))
    for match in _REEXPORT_RE.finditer(content):
        found.append(("", match.group(1)))
    return [(clause, source) for clause, source in found if source.startswith((".", "@/"))]


def _check_json(file: GeneratedFile) -> list[ValidationIssue]:
    try:
        json.loads(file.content)
    except json.JSONDecodeError as e:
        return [ValidationIssue(file.path, f"Invalid JSON: {e.msg} (line {e.lineno})")]
    return []


def _check_imports(file: GeneratedFile, files: dict[str, GeneratedFile]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    paths = set(files)
    for clause, source in local_imports(file.content):
        try:
            target = resolve_import(file.path, source, paths)
        except ValueError:
            issues.append(ValidationIssue(file.path, f"Import '{source}' points outside the project"))
            continue
        if target is None:
            issues.append(ValidationIssue(file.path, f"Cannot resolve import '{source}'"))
            continue
        if not clause or not is_code_file(target):
            continue

        target_content = files[target].content
        if _EXPORT_STAR_RE.search(target_content):
            continue
        exports = set(extract_exports(target_content))
        has_default, named = parse_import_clause(clause)
        if has_default and "default" not in exports:
            issues.append(ValidationIssue(file.path, f"'{source}' has no default export"))
        for name in named:
            if name not in exports:
                issues.append(ValidationIssue(file.path, f"'{source}' does not export '{name}'"))
    return issues


def validate_file(file: GeneratedFile, files: dict[str, GeneratedFile]) -> list[ValidationIssue]:
    """All findings for one file, errors and warnings."""
    if not file.content.strip():
        return [ValidationIssue(file.path, "File is empty")]
    if file.path.endswith(".json"):
        return _check_json(file)
    if not is_code_file(file.path):
        return []

    issues = _check_imports(file, files)
    exports = extract_exports(file.content)
    if file.path.startswith("src/pages/") and "default" not in exports:
        issues.append(ValidationIssue(file.path, "Page module has no default export"))
    elif file.path.startswith("src/components/") and not exports and not _EXPORT_STAR_RE.search(file.content):
        issues.append(ValidationIssue(file.path, "Component module exports nothing", Severity.WARNING))
    return issues


def validate_files(files: dict[str, GeneratedFile]) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    for file in files.values():
        issues.extend(validate_file(file, files))
    return issues


async def validation_node(state: WorkflowState, ctx: GenerationContext) -> WorkflowState:
    files = state.get("files") or {}
    issues = validate_files(files)
    errors = [i for i in issues if i.severity is Severity.ERROR]
    for warning in (i for i in issues if i.severity is Severity.WARNING):
        logger.warning("Validation warning in %s: %s", warning.file, warning.message)

    if errors:
        message = f"Validation found {len(errors)} error(s) in {len({e.file for e in errors})} file(s)"
    else:
        message = f"Validation passed ({len(files)} files)"
    logger.info(message)
    return {"errors": errors, "messages": [message]}
