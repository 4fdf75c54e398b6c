"""Tool Schemas — boundary validation and core conversion for editor payloads.

Tests:
    - ToolDraft rejects execution_specs as a user property
    - ToolDraft rejects required names that are not properties
    - ExecutionPolicySchema counters are >= 0
    - to_document / from_document preserve properties, order, and policy
"""

import pytest
from pydantic import ValidationError

from app.core.domain_types import PropertyKind
from app.schemas.tool import (
    ExecutionPolicySchema,
    PropertySchema,
    RawSchemaRequest,
    ToolDraft,
)


def _draft(**overrides):
    data = {
        "name": "get_weather",
        "description": "Weather",
        "properties": {
            "city": {"kind": "string"},
            "unit": {"kind": "enum", "enum_values": ["c", "f"], "default": "c"},
        },
        "required": ["city"],
    }
    data.update(overrides)
    return ToolDraft(**data)


def test_draft_defaults():
    draft = ToolDraft()
    assert draft.name == ""
    assert draft.strict is True
    assert draft.include_execution_specs is False
    assert draft.execution_specs.max_retry_attempts == 1
    assert draft.execution_specs.wait_time_in_millis == 60000


def test_draft_rejects_reserved_property():
    with pytest.raises(ValidationError, match="execution_specs"):
        _draft(properties={"execution_specs": {"kind": "object"}})


def test_draft_rejects_unknown_required():
    with pytest.raises(ValidationError, match="ghost"):
        _draft(required=["city", "ghost"])


def test_policy_rejects_negative_retry():
    with pytest.raises(ValidationError):
        ExecutionPolicySchema(max_retry_attempts=-1)


def test_policy_rejects_negative_wait():
    with pytest.raises(ValidationError):
        ExecutionPolicySchema(wait_time_in_millis=-5)


def test_unknown_kind_rejected():
    with pytest.raises(ValidationError):
        PropertySchema(kind="integer")


def test_raw_schema_request_length_limit():
    with pytest.raises(ValidationError):
        RawSchemaRequest(raw="x" * 200_001)


def test_to_document_converts_properties():
    document = _draft().to_document()
    assert list(document.tree.properties) == ["city", "unit"]
    assert document.tree.properties["unit"].kind is PropertyKind.ENUM
    assert document.tree.properties["unit"].default == "c"
    assert document.tree.required == ["city"]


def test_to_document_deduplicates_required():
    document = _draft(required=["city", "city"]).to_document()
    assert document.tree.required == ["city"]


def test_nested_property_schema_converts_recursively():
    schema = PropertySchema(
        kind="array",
        items={"kind": "object", "children": {"zip": {"kind": "string"}}},
    )
    definition = schema.to_definition()
    assert definition.items.kind is PropertyKind.OBJECT
    assert definition.items.children["zip"].kind is PropertyKind.STRING
    assert PropertySchema.from_definition(definition).model_dump() == schema.model_dump()


def test_from_document_round_trip():
    draft = _draft(
        strict=False,
        execution_specs={"max_retry_attempts": 3, "wait_time_in_millis": 10},
    )
    restored = ToolDraft.from_document(draft.to_document())
    assert restored.model_dump()["properties"] == draft.model_dump()["properties"]
    assert restored.required == draft.required
    assert restored.strict is False
    assert restored.execution_specs.model_dump() == draft.execution_specs.model_dump()


def test_with_document_keeps_ui_fields():
    draft = _draft(include_execution_specs=True, original_name="old_weather")
    document = draft.to_document()
    document.tree.remove_property("unit")
    updated = draft.with_document(document)
    assert updated.include_execution_specs is True
    assert updated.original_name == "old_weather"
    assert list(updated.properties) == ["city"]
