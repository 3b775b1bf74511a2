"""
Tests for argument schemas and validate_arguments.
"""

import pytest

from lsp_bridge.exceptions import SchemaValidationError
from lsp_bridge.use_cases.tools.schema import (
    ArgumentField,
    OperationSchema,
    validate_arguments,
)

SCHEMA = OperationSchema(
    "demo",
    "Demo operation",
    (
        ArgumentField("filePath", "string", "Path", required=True),
        ArgumentField("showLineNumbers", "boolean", "Numbers", default=True),
        ArgumentField("index", "integer", "Index", minimum=1),
        ArgumentField("edits", "array", "Edits", items={"type": "object"}),
    ),
)


class TestValidateArguments:
    """Test cases for validate_arguments."""

    def test_defaults_applied(self):
        args = validate_arguments(SCHEMA, {"filePath": "a.go"})
        assert args == {"filePath": "a.go", "showLineNumbers": True, "index": None, "edits": None}

    def test_explicit_false_kept(self):
        args = validate_arguments(SCHEMA, {"filePath": "a.go", "showLineNumbers": False})
        assert args["showLineNumbers"] is False

    def test_none_payload_is_empty(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_arguments(SCHEMA, None)
        assert exc_info.value.field == "filePath"

    def test_unknown_field_rejected(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_arguments(SCHEMA, {"filePath": "a.go", "symbol": "F"})
        assert exc_info.value.field == "symbol"
        assert "Unknown argument(s)" in str(exc_info.value)

    @pytest.mark.parametrize(
        "field,value",
        [
            ("filePath", 3),
            ("showLineNumbers", "yes"),
            ("index", True),
            ("index", 1.5),
            ("index", "2"),
            ("edits", {"range": {}}),
        ],
    )
    def test_type_mismatch(self, field, value):
        payload = {"filePath": "a.go", field: value}
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_arguments(SCHEMA, payload)
        assert exc_info.value.field == field

    def test_integral_float_index_normalized(self):
        args = validate_arguments(SCHEMA, {"filePath": "a.go", "index": 2.0})
        assert args["index"] == 2
        assert isinstance(args["index"], int)

    def test_minimum(self):
        with pytest.raises(SchemaValidationError) as exc_info:
            validate_arguments(SCHEMA, {"filePath": "a.go", "index": 0})
        assert ">= 1" in str(exc_info.value)

    def test_payload_must_be_object(self):
        with pytest.raises(SchemaValidationError):
            validate_arguments(SCHEMA, ["a.go"])


class TestOperationSchema:
    """Test cases for the JSON Schema rendering."""

    def test_to_json_schema(self):
        schema = SCHEMA.to_json_schema()

        assert schema["type"] == "object"
        assert schema["required"] == ["filePath"]
        assert schema["additionalProperties"] is False
        assert schema["properties"]["showLineNumbers"]["default"] is True
        assert schema["properties"]["index"]["minimum"] == 1
        assert schema["properties"]["edits"]["items"] == {"type": "object"}
