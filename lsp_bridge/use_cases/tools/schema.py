"""
Declared argument schemas for tools and prompts, and their validation.

Schemas are immutable and built once. ``validate_arguments`` is a pure
function: it never touches the backend or the filesystem.
"""

from dataclasses import dataclass, field
from typing import Any, Optional

from lsp_bridge.exceptions import SchemaValidationError

_PY_TYPES: dict[str, tuple[type, ...]] = {
    "string": (str,),
    "boolean": (bool,),
    "integer": (int,),
    "number": (int, float),
    "array": (list, tuple),
    "object": (dict,),
}


def _matches(json_type: str, value: Any) -> bool:
    # bool is a subclass of int but never counts as a number here
    if json_type in ("integer", "number") and isinstance(value, bool):
        return False
    if json_type == "integer" and isinstance(value, float):
        return value.is_integer()
    return isinstance(value, _PY_TYPES[json_type])


@dataclass(frozen=True)
class ArgumentField:
    """One named argument of a tool or prompt."""

    name: str
    type: str
    description: str
    required: bool = False
    default: Any = None
    minimum: Optional[int] = None
    items: Optional[dict[str, Any]] = None

    def to_json_schema(self) -> dict[str, Any]:
        schema: dict[str, Any] = {"type": self.type, "description": self.description}
        if self.default is not None:
            schema["default"] = self.default
        if self.minimum is not None:
            schema["minimum"] = self.minimum
        if self.items is not None:
            schema["items"] = self.items
        return schema


@dataclass(frozen=True)
class OperationSchema:
    """Name, description and argument fields of a tool or prompt."""

    name: str
    description: str
    fields: tuple[ArgumentField, ...] = field(default_factory=tuple)

    def field_names(self) -> list[str]:
        return [f.name for f in self.fields]

    def to_json_schema(self) -> dict[str, Any]:
        """JSON Schema of the argument object."""
        return {
            "type": "object",
            "properties": {f.name: f.to_json_schema() for f in self.fields},
            "required": [f.name for f in self.fields if f.required],
            "additionalProperties": False,
        }


def validate_arguments(schema: OperationSchema, raw: Any) -> dict[str, Any]:
    """
    Validate a raw argument payload against a schema.

    Args:
        schema: Declared schema of the operation
        raw: Argument payload as received (None is treated as no arguments)

    Returns:
        Normalized arguments: every declared field present, defaults applied

    Raises:
        SchemaValidationError: On unknown fields, missing required fields or type mismatches
    """
    if raw is None:
        raw = {}
    if not isinstance(raw, dict):
        raise SchemaValidationError(f"Arguments of '{schema.name}' must be an object")

    known = set(schema.field_names())
    unknown = sorted(k for k in raw if k not in known)
    if unknown:
        raise SchemaValidationError(
            f"Unknown argument(s) for '{schema.name}': {', '.join(unknown)}",
            field=unknown[0],
        )

    normalized: dict[str, Any] = {}
    for f in schema.fields:
        value = raw.get(f.name)
        if value is None:
            if f.required:
                raise SchemaValidationError(
                    f"Missing required argument '{f.name}' for '{schema.name}'", field=f.name
                )
            normalized[f.name] = f.default
            continue
        if not _matches(f.type, value):
            raise SchemaValidationError(
                f"Argument '{f.name}' must be of type {f.type}, got {type(value).__name__}",
                field=f.name,
            )
        if f.type == "integer":
            value = int(value)
        if f.minimum is not None and value < f.minimum:
            raise SchemaValidationError(
                f"Argument '{f.name}' must be >= {f.minimum}, got {value}", field=f.name
            )
        if f.type == "array":
            value = list(value)
        normalized[f.name] = value
    return normalized
