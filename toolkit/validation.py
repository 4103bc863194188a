"""Schema validation for tool inputs.

A thin wrapper over ``jsonschema``'s Draft 7 validator. Checking a value
never raises; only compiling a structurally invalid schema does.
"""

from __future__ import annotations

from typing import Any

import jsonschema
from jsonschema import Draft7Validator, FormatChecker

from contracts.errors import ToolInputError
from contracts.tool_sdk import InputSchema


class CompiledValidator:
    """A schema compiled once and checked many times."""

    def __init__(self, schema: InputSchema) -> None:
        self.schema = schema
        self._validator = Draft7Validator(schema, format_checker=FormatChecker())

    def check(self, value: Any) -> bool:
        return self._validator.is_valid(value)

    def errors(self, value: Any) -> list[str]:
        """Return one readable message per violation, prefixed by its path."""
        messages: list[str] = []
        for err in sorted(self._validator.iter_errors(value), key=lambda e: [str(p) for p in e.path]):
            location = ".".join(str(p) for p in err.absolute_path)
            messages.append(f"{location}: {err.message}" if location else err.message)
        return messages

    def validate(self, value: Any) -> None:
        """Raise ``ToolInputError`` listing every violation."""
        messages = self.errors(value)
        if messages:
            raise ToolInputError(messages)


class SchemaValidator:
    """Compiles JSON Schemas into reusable validators."""

    @staticmethod
    def compile(schema: InputSchema) -> CompiledValidator:
        """Compile *schema*.

        Raises ``jsonschema.SchemaError`` if the schema itself is invalid.
        """
        Draft7Validator.check_schema(schema)
        return CompiledValidator(schema)


def validate_input(schema: InputSchema, value: Any) -> bool:
    """Check *value* against *schema*; False for any mismatch or bad schema."""
    try:
        return SchemaValidator.compile(schema).check(value)
    except jsonschema.SchemaError:
        return False
