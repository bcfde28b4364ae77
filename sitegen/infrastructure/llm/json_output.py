"""Parse structured data out of model output and validate its shape."""

import json
import re
from typing import Any

from pydantic import TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from sitegen.domain.errors import OutputSchemaError

_FENCE_RE = re.compile(r"^```[\w-]*\s*\n?(.*?)\n?```\s*$", re.DOTALL)
_OBJECT_RE = re.compile(r"\{[\s\S]*\}")
_ARRAY_RE = re.compile(r"\[[\s\S]*\]")


def strip_code_fences(text: str) -> str:
    """Remove a surrounding markdown code fence, if any."""
    stripped = text.strip()
    match = _FENCE_RE.match(stripped)
    return match.group(1).strip() if match else stripped


def extract_json(text: str) -> Any:
    """Load JSON from model output, salvaging the outermost object or array.

    Raises:
        OutputSchemaError: nothing JSON-like could be decoded.

    """
    candidate = strip_code_fences(text)
    try:
        return json.loads(candidate)
    except json.JSONDecodeError:
        pass
    for pattern in (_OBJECT_RE, _ARRAY_RE):
        match = pattern.search(candidate)
        if not match:
            continue
        try:
            return json.loads(match.group(0))
        except json.JSONDecodeError:
            continue
    raise OutputSchemaError(f"No JSON found in model output: {candidate[:120]!r}")


def parse_json_output(text: str, schema: Any | None = None) -> Any:
    """Extract JSON and validate it against a pydantic model / type when given."""
    data = extract_json(text)
    if schema is None:
        return data
    try:
        return TypeAdapter(schema).validate_python(data)
    except PydanticValidationError as e:
        raise OutputSchemaError(f"Model output does not match {getattr(schema, '__name__', schema)}: {e}") from e
