"""Synthesize example values from resolved JSON Schemas.

:func:`synthesize` produces a representative value for a schema: an
explicit ``example``/``examples``/``enum`` entry when the schema declares
one, otherwise a fixed literal for its type.  :func:`skeleton` produces the
structure-only variant used when examples are disabled: object keys and
nesting, with no literal content.

Both functions expect schemas already expanded by
:func:`~specdeck.parser.resolver.resolve`.  A cycle leaf synthesizes to an
empty object, and an in-progress guard keyed on object identity stops
recursion on any cyclic graph passed in unresolved.
"""

from __future__ import annotations

import json
from typing import Any, Callable, Optional

from specdeck.parser.resolver import is_cycle_leaf

_STRING_FORMAT_EXAMPLES = {
    "email": "user@example.com",
    "uri": "https://example.com",
    "url": "https://example.com",
    "uuid": "550e8400-e29b-41d4-a716-446655440000",
    "date": "2024-01-15",
    "date-time": "2024-01-15T10:30:00Z",
    "password": "********",
    "byte": "SGVsbG8gV29ybGQ=",
    "hostname": "example.com",
    "ipv4": "192.168.1.1",
    "ipv6": "2001:0db8:85a3:0000:0000:8a2e:0370:7334",
}

_SCALAR_DEFAULTS: dict[str, Any] = {
    "integer": 0,
    "number": 0.0,
    "boolean": False,
    "null": None,
}


def schema_type(schema: dict[str, Any]) -> Optional[str]:
    """Return the effective type of *schema*.

    OpenAPI 3.1 type arrays (e.g. ``["string", "null"]``) yield their first
    non-null entry.  Schemas without ``type`` are inferred as ``object``
    when they declare ``properties`` and ``array`` when they declare
    ``items``.
    """
    type_value = schema.get("type")
    if isinstance(type_value, list):
        non_null = [t for t in type_value if t != "null"]
        if non_null:
            return str(non_null[0])
        return "null" if type_value else None
    if isinstance(type_value, str):
        return type_value
    if "properties" in schema:
        return "object"
    if "items" in schema:
        return "array"
    return None


def string_example(fmt: Optional[str]) -> str:
    """Return an exemplar string for a JSON Schema string ``format``."""
    return _STRING_FORMAT_EXAMPLES.get(fmt or "", "string")


def synthesize(schema: Any) -> Any:
    """Generate an example value for *schema*.

    Args:
        schema: A resolved schema mapping.  Anything else yields ``None``.

    Returns:
        A JSON-compatible example value.
    """
    return _synthesize(schema, set())


def _synthesize(schema: Any, in_progress: set[int]) -> Any:
    if not isinstance(schema, dict):
        return None
    if is_cycle_leaf(schema) or id(schema) in in_progress:
        return {}

    if "example" in schema:
        return schema["example"]
    examples = schema.get("examples")
    if isinstance(examples, list) and examples:
        return examples[0]
    enum_values = schema.get("enum")
    if isinstance(enum_values, list) and enum_values:
        return enum_values[0]

    in_progress.add(id(schema))
    try:
        return _synthesize_by_type(schema, in_progress)
    finally:
        in_progress.discard(id(schema))


def _synthesize_by_type(schema: dict[str, Any], in_progress: set[int]) -> Any:
    kind = schema_type(schema)

    if kind == "object":
        properties = schema.get("properties")
        if isinstance(properties, dict):
            return {
                name: _synthesize(prop, in_progress)
                for name, prop in properties.items()
                if isinstance(prop, dict)
            }
        composed = _compose(schema, _synthesize, in_progress)
        return composed if isinstance(composed, dict) else {}

    if kind == "array":
        item = _synthesize(schema.get("items"), in_progress)
        return [item] if item is not None else []

    if kind in ("string", "integer", "number", "boolean", "null"):
        if "default" in schema:
            return schema["default"]
        if kind == "string":
            return string_example(schema.get("format"))
        return _SCALAR_DEFAULTS[kind]

    # Untyped composition keywords
    return _compose(schema, _synthesize, in_progress)


def _compose(
    schema: dict[str, Any],
    walk: Callable[[Any, set[int]], Any],
    in_progress: set[int],
) -> Any:
    """Merge ``allOf`` parts, or follow the first ``oneOf``/``anyOf`` branch."""
    all_of = schema.get("allOf")
    if isinstance(all_of, list) and all_of:
        merged: dict[str, Any] = {}
        for part in all_of:
            value = walk(part, in_progress)
            if isinstance(value, dict):
                merged.update(value)
        return merged
    for keyword in ("oneOf", "anyOf"):
        branches = schema.get(keyword)
        if isinstance(branches, list) and branches:
            return walk(branches[0], in_progress)
    return None


def skeleton(schema: Any) -> Any:
    """Return the declared structure of *schema* without literal content.

    Objects keep their property names (recursively), arrays are empty and
    scalars are ``None``.  Composition follows the same rules as
    :func:`synthesize`.
    """
    return _skeleton(schema, set())


def _skeleton(schema: Any, in_progress: set[int]) -> Any:
    if not isinstance(schema, dict):
        return None
    if is_cycle_leaf(schema) or id(schema) in in_progress:
        return {}

    kind = schema_type(schema)
    in_progress.add(id(schema))
    try:
        if kind == "object":
            properties = schema.get("properties")
            if isinstance(properties, dict):
                return {
                    name: _skeleton(prop, in_progress)
                    for name, prop in properties.items()
                    if isinstance(prop, dict)
                }
            composed = _compose(schema, _skeleton, in_progress)
            return composed if isinstance(composed, dict) else {}
        if kind == "array":
            return []
        if kind is None:
            return _compose(schema, _skeleton, in_progress)
        return None
    finally:
        in_progress.discard(id(schema))


def format_example(value: Any) -> str:
    """Render an example value as the string stored in a key/value row.

    Booleans render as ``true``/``false``, whole floats drop their
    fraction, containers are JSON-encoded, and ``None`` becomes ``""``.
    """
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (int, float)):
        return str(value)
    return json.dumps(value, default=str)
