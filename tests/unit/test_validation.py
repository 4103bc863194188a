"""Unit tests for schema validation."""

from __future__ import annotations

import jsonschema
import pytest

from contracts.errors import ToolInputError
from toolkit.validation import SchemaValidator, validate_input

SCHEMA = {
    "type": "object",
    "properties": {
        "urls": {"type": "array", "items": {"type": "string"}, "maxItems": 2},
        "when": {"type": "string", "pattern": r"^\d{4}-\d{2}-\d{2}$", "format": "date"},
        "browser": {"type": "string", "default": "default"},
    },
    "required": ["urls"],
}


class TestCompiledValidator:
    def test_accepts_conforming_input(self) -> None:
        v = SchemaValidator.compile(SCHEMA)
        assert v.check({"urls": ["a"], "when": "2024-01-31"})

    def test_missing_required(self) -> None:
        v = SchemaValidator.compile(SCHEMA)
        assert not v.check({})
        assert any("'urls' is a required property" in m for m in v.errors({}))

    def test_wrong_type(self) -> None:
        assert not SchemaValidator.compile(SCHEMA).check({"urls": "a"})

    def test_max_items(self) -> None:
        assert not SchemaValidator.compile(SCHEMA).check({"urls": ["a", "b", "c"]})

    def test_pattern_rejects_free_text_date(self) -> None:
        assert not SchemaValidator.compile(SCHEMA).check({"urls": [], "when": "invalid-date"})

    def test_format_rejects_impossible_date(self) -> None:
        assert not SchemaValidator.compile(SCHEMA).check({"urls": [], "when": "2024-02-30"})

    def test_errors_are_path_prefixed(self) -> None:
        errors = SchemaValidator.compile(SCHEMA).errors({"urls": [1]})
        assert errors == ["urls.0: 1 is not of type 'string'"]

    def test_validate_raises_tool_input_error(self) -> None:
        with pytest.raises(ToolInputError) as info:
            SchemaValidator.compile(SCHEMA).validate({"urls": "x"})
        assert info.value.messages

    def test_non_object_candidate(self) -> None:
        assert not SchemaValidator.compile(SCHEMA).check(None)


class TestCompile:
    def test_invalid_schema_raises(self) -> None:
        with pytest.raises(jsonschema.SchemaError):
            SchemaValidator.compile({"type": "no-such-type"})

    def test_convenience_never_raises(self) -> None:
        assert validate_input({"type": "no-such-type"}, {}) is False
        assert validate_input(SCHEMA, {"urls": []}) is True
