"""Schema Codec — ToolDocument <-> canonical OpenAI function-tool JSON.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects
    - serialize_tool always injects RESERVED_PROPERTY; required never contains it
    - parse_tool_schema strips RESERVED_PROPERTY from properties and required
    - Pasted text is strict JSON: NaN/Infinity literals and runaway nesting are MALFORMED_JSON,
      property schemas deeper than MAX_NESTING_DEPTH are INVALID_PROPERTY_SCHEMA
    - Parsed execution policy is always discarded: the editor's policy wins
    - validate_tool_schema and parse_tool_schema share one code path
    - parse(serialize(doc)).tree == doc.tree unless a default was leniently coerced

Design Decisions:
    - serialize_property / parse_property are the single inverse pair for the
      enum kind: ENUM <-> {"type": "string", "enum": [...]} (ADR: tagged union at the editor layer)
    - Return (value, error) tuples: same value-returned error shape as parameter_tree
    - Envelope matching follows JavaScript truthiness ({} and [] count as present)
      so documents accepted by the browser editor are accepted here too
"""

import copy
import json
from dataclasses import dataclass
from typing import Any

from app.core.domain_types import (
    MAX_NESTING_DEPTH,
    PARAMETERS_TYPE,
    PREVIEW_DESCRIPTION_PLACEHOLDER,
    PREVIEW_NAME_PLACEHOLDER,
    RESERVED_PROPERTY,
    TOOL_TYPE,
    ExecutionType,
    PropertyKind,
)
from app.core.parameter_tree import (
    ParameterTree,
    PropertyDefinition,
    check_tree,
    load_json,
    validate_name,
)
from app.core.schema_errors import ErrorCode, schema_error, with_path
from app.core.tool_document import ExecutionPolicy, ToolDocument

_SCHEMA_TYPES = {
    PropertyKind.STRING.value,
    PropertyKind.NUMBER.value,
    PropertyKind.BOOLEAN.value,
    PropertyKind.OBJECT.value,
    PropertyKind.ARRAY.value,
}


@dataclass
class ParsedTool:
    """Metadata and tree recovered from a pasted document, before a policy is attached."""

    name: str
    description: str
    tree: ParameterTree
    strict: bool

    def to_document(self, policy: ExecutionPolicy) -> ToolDocument:
        """Attach the editor's execution policy. Any policy in the pasted JSON was already dropped."""
        return ToolDocument(
            name=self.name,
            description=self.description,
            tree=self.tree,
            strict=self.strict,
            execution_policy=policy,
        )


# ─── Serialize ──────────────────────────────────────────────────

def build_execution_specs_property(policy: ExecutionPolicy) -> dict:
    """The reserved property mirroring the execution policy inside the schema."""
    return {
        "type": "object",
        "properties": {
            "type": {"type": "string", "enum": [policy.type.value]},
            "maxRetryAttempts": {"type": "number", "enum": [policy.max_retry_attempts]},
            "waitTimeInMillis": {"type": "number", "enum": [policy.wait_time_in_millis]},
        },
    }


def serialize_property(definition: PropertyDefinition) -> dict:
    schema: dict[str, Any] = {"type": definition.kind.schema_type}
    if definition.description:
        schema["description"] = definition.description
    if definition.default is not None:
        schema["default"] = copy.deepcopy(definition.default)
    if definition.enum_values:
        schema["enum"] = list(definition.enum_values)
    if definition.children:
        schema["properties"] = {
            name: serialize_property(child)
            for name, child in definition.children.items()
        }
    if definition.items is not None:
        schema["items"] = serialize_property(definition.items)
    return schema


def serialize_tool(document: ToolDocument) -> dict:
    """Canonical JSON document. Deterministic; property order follows the tree."""
    tree = document.tree
    properties = {
        name: serialize_property(definition)
        for name, definition in tree.properties.items()
        if name != RESERVED_PROPERTY
    }
    properties[RESERVED_PROPERTY] = build_execution_specs_property(document.execution_policy)
    return {
        "type": TOOL_TYPE,
        "name": document.name,
        "description": document.description,
        "parameters": {
            "type": PARAMETERS_TYPE,
            "properties": properties,
            "required": [r for r in tree.required if r != RESERVED_PROPERTY],
            "additionalProperties": tree.additional_properties,
        },
        "strict": document.strict,
    }


def preview_tool(document: ToolDocument) -> dict:
    """Live-preview form: trimmed metadata, placeholders when blank."""
    shown = ToolDocument(
        name=document.name.strip() or PREVIEW_NAME_PLACEHOLDER,
        description=document.description.strip() or PREVIEW_DESCRIPTION_PLACEHOLDER,
        tree=document.tree,
        strict=document.strict,
        execution_policy=document.execution_policy,
    )
    return serialize_tool(shown)


def render_json(document: dict) -> str:
    """Pretty-print a canonical document the way the preview pane shows it."""
    return json.dumps(document, indent=2, ensure_ascii=False)


def to_stored(document: ToolDocument) -> dict:
    """Persisted form: canonical document plus the policy in readable form."""
    stored = serialize_tool(document)
    stored["executionSpecs"] = document.execution_policy.to_dict()
    return stored


# ─── Parse ──────────────────────────────────────────────────────

def parse_tool_schema(raw_text: str) -> tuple[ParsedTool | None, dict | None]:
    """Parse pasted raw JSON into a validated tree plus metadata."""
    if not raw_text or not raw_text.strip():
        return None, schema_error(ErrorCode.EMPTY_INPUT, "Paste a function schema to continue")
    try:
        obj = load_json(raw_text)
    except json.JSONDecodeError as e:
        return None, schema_error(ErrorCode.MALFORMED_JSON, f"Invalid JSON: {e.msg}")
    except ValueError as e:
        return None, schema_error(ErrorCode.MALFORMED_JSON, f"Invalid JSON: {e}")
    except RecursionError:
        return None, schema_error(ErrorCode.MALFORMED_JSON, "Invalid JSON: nested too deeply")
    return parse_tool_object(obj)


def validate_tool_schema(raw_text: str) -> dict | None:
    """Accept/reject without keeping the tree. Always agrees with parse_tool_schema."""
    _, error = parse_tool_schema(raw_text)
    return error


def parse_tool_object(obj: Any) -> tuple[ParsedTool | None, dict | None]:
    """Validate an already-decoded document and build its ParsedTool."""
    fn = _match_envelope(obj)
    if fn is None:
        return None, schema_error(
            ErrorCode.NOT_A_FUNCTION_TOOL, "Schema must be an OpenAI function tool",
        )

    raw_name = fn.get("name")
    name = raw_name.strip() if isinstance(raw_name, str) else ("" if raw_name is None else str(raw_name))
    error = validate_name(name, function=True)
    if error:
        return None, error

    description = fn.get("description")
    if not isinstance(description, str) or not description.strip():
        return None, schema_error(
            ErrorCode.INVALID_DESCRIPTION, "Function description is required",
        )

    params = fn.get("parameters")
    if not isinstance(params, dict):
        return None, schema_error(
            ErrorCode.PARAMETERS_NOT_OBJECT_TYPE, "parameters must be an object",
        )
    if params.get("type") != PARAMETERS_TYPE:
        return None, schema_error(
            ErrorCode.PARAMETERS_NOT_OBJECT_TYPE, 'parameters.type must be "object"',
        )

    tree, error = _parse_tree(params)
    if error:
        return None, error

    strict = _is_set(fn["strict"]) if "strict" in fn else True
    return ParsedTool(
        name=name, description=description.strip(), tree=tree, strict=strict,
    ), None


def parse_property(
    schema: Any, depth: int = 1,
) -> tuple[PropertyDefinition | None, dict | None]:
    """Raise one property schema to a PropertyDefinition (inverse of serialize_property).

    Only shape errors are reported here; structural rules are applied by
    check_tree once the whole tree is built.
    """
    if depth > MAX_NESTING_DEPTH:
        return None, schema_error(
            ErrorCode.INVALID_PROPERTY_SCHEMA,
            f"Property schema is nested more than {MAX_NESTING_DEPTH} levels deep",
        )
    if not isinstance(schema, dict):
        return None, schema_error(
            ErrorCode.INVALID_PROPERTY_SCHEMA, "Property schema must be an object",
        )

    schema_type = schema.get("type")
    if not isinstance(schema_type, str) or schema_type not in _SCHEMA_TYPES:
        return None, schema_error(
            ErrorCode.UNSUPPORTED_PROPERTY_TYPE,
            f"Unsupported property type: {schema_type!r}",
        )

    enum = schema.get("enum")
    if enum is not None and not isinstance(enum, list):
        return None, schema_error(ErrorCode.INVALID_PROPERTY_SCHEMA, "enum must be a list")
    if schema_type == PropertyKind.STRING.value and enum:
        if not all(isinstance(v, str) for v in enum):
            return None, schema_error(
                ErrorCode.INVALID_PROPERTY_SCHEMA, "Enum values must be strings",
            )
        kind = PropertyKind.ENUM
    else:
        kind = PropertyKind(schema_type)

    description = schema.get("description")
    definition = PropertyDefinition(
        kind=kind,
        description=description if isinstance(description, str) and description else None,
        default=copy.deepcopy(schema.get("default")),
        enum_values=list(enum) if enum else None,
    )

    nested = schema.get("properties")
    if nested is not None:
        if not isinstance(nested, dict):
            return None, schema_error(
                ErrorCode.INVALID_PROPERTY_SCHEMA, "properties must be an object",
            )
        children = {}
        for child_name, child_schema in nested.items():
            child, error = parse_property(child_schema, depth + 1)
            if error:
                return None, with_path(error, child_name)
            children[child_name] = child
        definition.children = children or None

    items = schema.get("items")
    if items is not None:
        definition.items, error = parse_property(items, depth + 1)
        if error:
            return None, with_path(error, "items")

    return definition, None


def document_from_stored(data: dict) -> tuple[ToolDocument | None, dict | None]:
    """Rebuild a ToolDocument from its persisted form, restoring the saved policy."""
    parsed, error = parse_tool_object(data)
    if error:
        return None, error
    return parsed.to_document(_policy_from_stored(data.get("executionSpecs"))), None


# ─── Helpers ────────────────────────────────────────────────────

def _match_envelope(obj: Any) -> dict | None:
    """First matching envelope wins: nested function, flat function, bare."""
    if not isinstance(obj, dict):
        return None
    if obj.get("type") == TOOL_TYPE and isinstance(obj.get("function"), dict):
        return obj["function"]
    if obj.get("type") == TOOL_TYPE and _is_set(obj.get("name")) and _is_set(obj.get("parameters")):
        fn = {key: obj.get(key) for key in ("name", "description", "parameters")}
        if "strict" in obj:
            fn["strict"] = obj["strict"]
        return fn
    if _is_set(obj.get("name")) and _is_set(obj.get("parameters")):
        return obj
    return None


def _parse_tree(params: dict) -> tuple[ParameterTree | None, dict | None]:
    raw_properties = params.get("properties")
    if raw_properties is None:
        raw_properties = {}
    if not isinstance(raw_properties, dict):
        return None, schema_error(
            ErrorCode.INVALID_PROPERTY_SCHEMA, "parameters.properties must be an object",
        )

    properties: dict[str, PropertyDefinition] = {}
    for name, schema in raw_properties.items():
        if name == RESERVED_PROPERTY:
            continue
        definition, error = parse_property(schema)
        if error:
            return None, with_path(error, name)
        properties[name] = definition

    raw_required = params.get("required")
    required: list[str] = []
    for entry in raw_required if isinstance(raw_required, list) else []:
        if isinstance(entry, str) and entry in properties and entry not in required:
            required.append(entry)

    tree = ParameterTree(
        properties=properties,
        required=required,
        additional_properties=_is_set(params.get("additionalProperties")),
    )
    error = check_tree(tree)
    if error:
        return None, error
    return tree, None


def _policy_from_stored(specs: Any) -> ExecutionPolicy:
    if not isinstance(specs, dict):
        return ExecutionPolicy()
    defaults = ExecutionPolicy()
    try:
        execution_type = ExecutionType(specs.get("type", defaults.type.value))
    except ValueError:
        execution_type = defaults.type
    return ExecutionPolicy(
        type=execution_type,
        max_retry_attempts=_non_negative_int(
            specs.get("maxRetryAttempts"), defaults.max_retry_attempts,
        ),
        wait_time_in_millis=_non_negative_int(
            specs.get("waitTimeInMillis"), defaults.wait_time_in_millis,
        ),
    )


def _non_negative_int(value: Any, fallback: int) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 0:
        return fallback
    return value


def _is_set(value: Any) -> bool:
    """JavaScript truthiness: empty objects and arrays still count as present."""
    if isinstance(value, (dict, list)):
        return True
    return bool(value)
