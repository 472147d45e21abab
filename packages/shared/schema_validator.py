"""
Validate layout configuration JSON against the layout schema.
"""
from __future__ import annotations

import functools
import json
from pathlib import Path
from typing import Any

import jsonschema

LAYOUT_SCHEMA_PATH = Path(__file__).resolve().parent.parent.parent / "schemas" / "layout.schema.json"


@functools.lru_cache(maxsize=None)
def _layout_validator(schema_path: Path) -> jsonschema.Draft202012Validator:
    with open(schema_path, "r", encoding="utf-8") as f:
        schema = json.load(f)
    jsonschema.Draft202012Validator.check_schema(schema)
    return jsonschema.Draft202012Validator(schema)


def _location(error: jsonschema.ValidationError) -> str:
    path = "".join(f"[{p}]" if isinstance(p, int) else f".{p}" for p in error.absolute_path)
    return f"${path}"


def validate_layout(data: dict[str, Any], schema_path: Path = LAYOUT_SCHEMA_PATH) -> tuple[bool, list[str]]:
    """
    Validate a layout document before it is turned into layout models.
    Returns (is_valid, list_of_error_messages), messages sorted by location.
    """
    validator = _layout_validator(schema_path)
    errors = sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    messages = [f"{_location(e)}: {e.message}" for e in errors]
    return (not messages, messages)
