"""Tests for specdeck.parser.examples."""

from __future__ import annotations

from typing import Any

import pytest

from specdeck.parser.examples import (
    format_example,
    schema_type,
    skeleton,
    string_example,
    synthesize,
)
from specdeck.parser.resolver import CYCLE_REF_KEY, ResolutionContext, resolve


# ---------------------------------------------------------------------------
# schema_type
# ---------------------------------------------------------------------------


class TestSchemaType:
    def test_plain_type(self) -> None:
        assert schema_type({"type": "integer"}) == "integer"

    def test_type_array_skips_null(self) -> None:
        assert schema_type({"type": ["null", "string"]}) == "string"

    def test_type_array_only_null(self) -> None:
        assert schema_type({"type": ["null"]}) == "null"

    def test_inferred_object(self) -> None:
        assert schema_type({"properties": {}}) == "object"

    def test_inferred_array(self) -> None:
        assert schema_type({"items": {"type": "string"}}) == "array"

    def test_unknown(self) -> None:
        assert schema_type({"description": "anything"}) is None


# ---------------------------------------------------------------------------
# synthesize
# ---------------------------------------------------------------------------


class TestSynthesize:
    """Test example value synthesis."""

    def test_explicit_example_wins(self) -> None:
        schema = {"type": "string", "example": "hello", "enum": ["a"], "default": "d"}
        assert synthesize(schema) == "hello"

    def test_examples_list_first_item(self) -> None:
        assert synthesize({"type": "integer", "examples": [42, 7]}) == 42

    def test_enum_first_value(self) -> None:
        assert synthesize({"type": "string", "enum": ["available", "sold"]}) == "available"

    def test_default_for_scalars(self) -> None:
        assert synthesize({"type": "integer", "default": 5}) == 5
        assert synthesize({"type": "boolean", "default": True}) is True

    @pytest.mark.parametrize(
        ("schema", "expected"),
        [
            ({"type": "string"}, "string"),
            ({"type": "integer"}, 0),
            ({"type": "number"}, 0.0),
            ({"type": "boolean"}, False),
            ({"type": "null"}, None),
        ],
    )
    def test_type_literals(self, schema: dict[str, Any], expected: Any) -> None:
        assert synthesize(schema) == expected

    @pytest.mark.parametrize(
        ("fmt", "expected"),
        [
            ("email", "user@example.com"),
            ("uuid", "550e8400-e29b-41d4-a716-446655440000"),
            ("date", "2024-01-15"),
            ("date-time", "2024-01-15T10:30:00Z"),
            ("uri", "https://example.com"),
        ],
    )
    def test_string_formats(self, fmt: str, expected: str) -> None:
        assert synthesize({"type": "string", "format": fmt}) == expected

    def test_unknown_format_is_plain_string(self) -> None:
        assert string_example("made-up") == "string"
        assert string_example(None) == "string"

    def test_object_properties_in_order(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "name": {"type": "string"},
                "age": {"type": "integer"},
                "email": {"type": "string", "format": "email"},
            },
        }
        result = synthesize(schema)
        assert result == {"name": "string", "age": 0, "email": "user@example.com"}
        assert list(result) == ["name", "age", "email"]

    def test_untyped_properties_is_object(self) -> None:
        assert synthesize({"properties": {"id": {"type": "integer"}}}) == {"id": 0}

    def test_array_wraps_one_item(self) -> None:
        assert synthesize({"type": "array", "items": {"type": "string"}}) == ["string"]

    def test_array_without_items_is_empty(self) -> None:
        assert synthesize({"type": "array"}) == []

    def test_type_array_nullable(self) -> None:
        assert synthesize({"type": ["string", "null"]}) == "string"

    def test_all_of_merges(self) -> None:
        schema = {
            "allOf": [
                {"type": "object", "properties": {"id": {"type": "integer"}}},
                {"type": "object", "properties": {"name": {"type": "string"}}},
            ]
        }
        assert synthesize(schema) == {"id": 0, "name": "string"}

    def test_one_of_uses_first_branch(self) -> None:
        schema = {"oneOf": [{"type": "integer"}, {"type": "string"}]}
        assert synthesize(schema) == 0

    def test_any_of_uses_first_branch(self) -> None:
        schema = {"anyOf": [{"type": "boolean"}, {"type": "string"}]}
        assert synthesize(schema) is False

    def test_object_with_only_all_of_merges(self) -> None:
        schema = {
            "type": "object",
            "allOf": [
                {"properties": {"id": {"type": "integer"}}},
                {"properties": {"name": {"type": "string", "example": "Rex"}}},
            ],
        }
        assert synthesize(schema) == {"id": 0, "name": "Rex"}

    def test_object_with_properties_ignores_all_of(self) -> None:
        schema = {
            "type": "object",
            "properties": {"id": {"type": "integer"}},
            "allOf": [{"properties": {"extra": {"type": "string"}}}],
        }
        assert synthesize(schema) == {"id": 0}

    def test_cycle_leaf_is_empty_object(self) -> None:
        assert synthesize({CYCLE_REF_KEY: "#/components/schemas/Category"}) == {}

    def test_non_mapping_is_none(self) -> None:
        assert synthesize(None) is None
        assert synthesize("string") is None

    def test_unresolved_cyclic_graph_terminates(self) -> None:
        node: dict[str, Any] = {"type": "object", "properties": {}}
        node["properties"]["self"] = node
        assert synthesize(node) == {"self": {}}

    def test_resolved_recursive_schema(self, complex_refs_raw: dict[str, Any]) -> None:
        schema = resolve(
            {"$ref": "#/components/schemas/Category"}, complex_refs_raw, ResolutionContext()
        )
        assert synthesize(schema) == {"id": 0, "name": "string", "parent": {}}


# ---------------------------------------------------------------------------
# skeleton
# ---------------------------------------------------------------------------


class TestSkeleton:
    """Test the structure-only variant."""

    def test_object_keys_without_values(self) -> None:
        schema = {
            "type": "object",
            "properties": {
                "name": {"type": "string", "example": "Ada"},
                "tags": {"type": "array", "items": {"type": "string"}},
                "address": {
                    "type": "object",
                    "properties": {"city": {"type": "string"}},
                },
            },
        }
        assert skeleton(schema) == {"name": None, "tags": [], "address": {"city": None}}

    def test_scalar_is_none(self) -> None:
        assert skeleton({"type": "string", "example": "x"}) is None

    def test_all_of_merges(self) -> None:
        schema = {
            "allOf": [
                {"properties": {"a": {"type": "string"}}},
                {"properties": {"b": {"type": "integer"}}},
            ]
        }
        assert skeleton(schema) == {"a": None, "b": None}

    @pytest.mark.parametrize("keyword", ["oneOf", "anyOf"])
    def test_first_branch(self, keyword: str) -> None:
        schema = {
            keyword: [
                {"type": "object", "properties": {"a": {"type": "string"}}},
                {"type": "object", "properties": {"b": {"type": "string"}}},
            ]
        }
        assert skeleton(schema) == {"a": None}

    def test_object_with_only_all_of(self) -> None:
        schema = {
            "type": "object",
            "allOf": [
                {"properties": {"a": {"type": "string"}}},
                {"properties": {"b": {"type": "integer"}}},
            ],
        }
        assert skeleton(schema) == {"a": None, "b": None}

    def test_typed_object_without_structure(self) -> None:
        assert skeleton({"type": "object"}) == {}

    def test_cycle_leaf(self) -> None:
        assert skeleton({CYCLE_REF_KEY: "#/x"}) == {}

    def test_non_mapping(self) -> None:
        assert skeleton(None) is None


# ---------------------------------------------------------------------------
# format_example
# ---------------------------------------------------------------------------


class TestFormatExample:
    @pytest.mark.parametrize(
        ("value", "expected"),
        [
            (None, ""),
            ("text", "text"),
            (True, "true"),
            (False, "false"),
            (20, "20"),
            (1.0, "1"),
            (2.5, "2.5"),
            ([1, 2], "[1, 2]"),
            ({"a": 1}, '{"a": 1}'),
        ],
    )
    def test_formats(self, value: Any, expected: str) -> None:
        assert format_example(value) == expected
