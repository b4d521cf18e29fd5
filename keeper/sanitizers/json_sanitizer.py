"""
JSON sanitizer.

Parses into the plain JSON tree (dict, list, str, int/float, bool, None),
folds it and serializes back with stable two-space indentation.
"""

import json
from typing import Any

from .base import Sanitizer, FileFormat, ParseError, REDACTION_TOKEN


def _reject_constant(name: str):
    # json accepts NaN/Infinity by default; they are not valid JSON
    raise ValueError(f"Invalid constant {name!r}")


def redact_json_value(value: Any) -> Any:
    """
    Redact one JSON value.

    Objects and arrays are rebuilt with the same keys/length and order;
    strings, numbers and booleans become placeholders; null stays null.
    """
    if isinstance(value, dict):
        return {key: redact_json_value(child) for key, child in value.items()}
    if isinstance(value, list):
        return [redact_json_value(child) for child in value]
    if isinstance(value, str):
        return REDACTION_TOKEN
    # bool before int: bool is an int subclass
    if isinstance(value, bool):
        return False
    if isinstance(value, (int, float)):
        return 0
    return value


class JsonSanitizer(Sanitizer):
    """Redacts every scalar in a JSON document."""

    file_format = FileFormat.JSON

    def __init__(self, indent: int = 2):
        self.indent = indent

    def sanitize(self, content: str) -> str:
        try:
            value = json.loads(content, parse_constant=_reject_constant)
        except RecursionError as e:
            raise ParseError("Invalid JSON: nesting too deep") from e
        except ValueError as e:
            # JSONDecodeError is a ValueError subclass
            raise ParseError(f"Invalid JSON: {e}") from e

        try:
            return json.dumps(
                redact_json_value(value),
                indent=self.indent,
                ensure_ascii=False,
            )
        except RecursionError as e:
            raise ParseError("Invalid JSON: nesting too deep") from e
