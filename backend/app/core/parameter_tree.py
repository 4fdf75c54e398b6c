"""Parameter Tree — in-memory model of a tool's parameter properties.

Invariants:
    - All functions are PURE: no IO, no async, no DB, no side effects outside the tree
    - Return error dict on violation, None on success
    - Every operation is atomic: validation runs before the first mutation
    - Every name in required exists in properties; RESERVED_PROPERTY never does
    - A PropertyDefinition carries at most one of enum_values/children/items,
      and only the one that matches its kind

Design Decisions:
    - Dataclasses mutated in place (like ForgeState): the editor session owns
      exactly one tree and applies operations sequentially
    - Stored definitions are deep copies of caller input: no aliasing between
      a nested editor's working copy and the committed tree
    - Lenient default coercion returns a tagged CoercedDefault instead of
      silently swallowing the failure (ADR: callers decide whether to warn)
"""

import copy
import json
import math
from dataclasses import dataclass, field, replace
from typing import Any, NamedTuple

from app.core.domain_types import (
    MIN_FUNCTION_NAME_LENGTH,
    NAME_PATTERN,
    RESERVED_PROPERTY,
    PropertyKind,
)
from app.core.schema_errors import ErrorCode, schema_error, with_path


@dataclass
class PropertyDefinition:
    """A single typed property, recursively nested for objects and arrays."""

    kind: PropertyKind
    description: str | None = None
    default: Any = None  # None = no default
    enum_values: list[str] | None = None
    children: dict[str, "PropertyDefinition"] | None = None
    items: "PropertyDefinition | None" = None


@dataclass
class ParameterTree:
    """The properties map of a tool's parameters plus required bookkeeping."""

    properties: dict[str, PropertyDefinition] = field(default_factory=dict)
    required: list[str] = field(default_factory=list)
    additional_properties: bool = False

    # ─── Mutations ──────────────────────────────────────────────

    def add_or_update_property(
        self,
        name: str,
        definition: PropertyDefinition,
        rename_from: str | None = None,
    ) -> dict | None:
        """Insert, replace or rename a property.

        rename_from=None adds a fresh property (required by default).
        rename_from=name updates in place. Any other rename_from renames,
        carrying the old required/optional status over to the new name.
        """
        error = validate_name(name, function=False)
        if error:
            return error
        if name == RESERVED_PROPERTY:
            return _reserved()

        if rename_from is None:
            if name in self.properties:
                return schema_error(ErrorCode.DUPLICATE_NAME, "Property already exists")
        else:
            if rename_from not in self.properties:
                return _not_found(rename_from)
            if rename_from != name and name in self.properties:
                return schema_error(ErrorCode.DUPLICATE_NAME, "Property already exists")

        error = check_property_definition(definition)
        if error:
            return error

        stored = copy.deepcopy(definition)
        if rename_from is None:
            self.properties[name] = stored
            if name not in self.required:
                self.required.append(name)
        elif rename_from == name:
            self.properties[name] = stored
        else:
            self.properties = {
                (name if key == rename_from else key): (stored if key == rename_from else value)
                for key, value in self.properties.items()
            }
            self.required = [name if r == rename_from else r for r in self.required]
        return None

    def remove_property(self, name: str) -> None:
        """Delete a property and its required marking. Idempotent."""
        self.properties.pop(name, None)
        self.required = [r for r in self.required if r != name]

    def toggle_required(self, name: str) -> dict | None:
        """Flip required/optional for an existing property."""
        if name not in self.properties:
            return _not_found(name)
        if name in self.required:
            self.required = [r for r in self.required if r != name]
        else:
            self.required.append(name)
        return None

    def set_nested_children(
        self, name: str, children: dict[str, PropertyDefinition],
    ) -> dict | None:
        """Commit an object property's sub-properties from a nested editor."""
        return self._replace_nested(name, PropertyKind.OBJECT, children=children)

    def set_nested_items(self, name: str, items: PropertyDefinition) -> dict | None:
        """Commit an array property's item schema from a nested editor."""
        return self._replace_nested(name, PropertyKind.ARRAY, items=items)

    def set_enum_values(self, name: str, values: list[str]) -> dict | None:
        """Commit an enum property's value list from a nested editor."""
        return self._replace_nested(name, PropertyKind.ENUM, enum_values=list(values))

    def _replace_nested(self, name: str, kind: PropertyKind, **changes: Any) -> dict | None:
        current = self.properties.get(name)
        if current is None:
            return _not_found(name)
        if current.kind is not kind:
            return schema_error(
                ErrorCode.WRONG_PROPERTY_KIND,
                f"Property '{name}' is {current.kind.value}, not {kind.value}",
            )
        candidate = replace(current, **copy.deepcopy(changes))
        error = check_property_definition(candidate)
        if error:
            return with_path(error, name)
        self.properties[name] = candidate
        return None


# ─── Validation ─────────────────────────────────────────────────

def validate_name(name: str, function: bool = True) -> dict | None:
    """Name rule shared by function names and property names.

    Function names additionally need MIN_FUNCTION_NAME_LENGTH characters.
    """
    label = "Function name" if function else "Property name"
    if not name or not name.strip():
        return schema_error(ErrorCode.EMPTY_NAME, f"{label} is required")
    if function and len(name.strip()) < MIN_FUNCTION_NAME_LENGTH:
        return schema_error(
            ErrorCode.NAME_TOO_SHORT,
            f"{label} must be at least {MIN_FUNCTION_NAME_LENGTH} characters long",
        )
    if not NAME_PATTERN.match(name):
        return schema_error(
            ErrorCode.INVALID_NAME_FORMAT,
            f"{label} must start with a letter and can only contain letters, "
            "numbers, and underscores (e.g., add_two_numbers)",
        )
    return None


def check_tree(tree: ParameterTree) -> dict | None:
    """Whole-tree check for trees assembled outside the mutation methods."""
    for name, definition in tree.properties.items():
        if name == RESERVED_PROPERTY:
            return _reserved()
        error = validate_name(name, function=False) or check_property_definition(definition)
        if error:
            return with_path(error, name)
    return None


def check_property_definition(definition: PropertyDefinition) -> dict | None:
    """Structural checks for one definition and everything nested under it."""
    kind = definition.kind

    if kind is PropertyKind.ENUM:
        if not definition.enum_values:
            return schema_error(
                ErrorCode.ENUM_REQUIRES_VALUES,
                "Enum type requires at least one enum value",
            )
        if definition.default is not None and definition.default not in definition.enum_values:
            return schema_error(
                ErrorCode.ENUM_DEFAULT_NOT_IN_SET,
                "Default value must be one of the defined enum values",
            )
    elif definition.enum_values:
        return _unexpected(kind, "enum values")

    if kind is PropertyKind.OBJECT:
        if not definition.children:
            return schema_error(
                ErrorCode.OBJECT_REQUIRES_CHILDREN,
                "Object type requires at least one property",
            )
        for child_name, child in definition.children.items():
            error = validate_name(child_name, function=False) or check_property_definition(child)
            if error:
                return with_path(error, child_name)
    elif definition.children:
        return _unexpected(kind, "nested properties")

    if kind is PropertyKind.ARRAY:
        if definition.items is None:
            return schema_error(
                ErrorCode.ARRAY_REQUIRES_ITEMS,
                "Array type requires items definition",
            )
        error = check_property_definition(definition.items)
        if error:
            return with_path(error, "items")
    elif definition.items is not None:
        return _unexpected(kind, "an items definition")

    return None


# ─── Default-value coercion ─────────────────────────────────────

def load_json(text: str) -> Any:
    """json.loads that rejects NaN, Infinity and -Infinity like a browser JSON.parse.

    Raises json.JSONDecodeError on malformed text, ValueError on a non-finite
    literal, and RecursionError when nesting exceeds the interpreter limit.
    """
    return json.loads(text, parse_constant=_reject_constant)


def _reject_constant(literal: str) -> Any:
    raise ValueError(f"{literal} is not valid JSON")


class CoercedDefault(NamedTuple):
    """Result of coercing raw form text. failed=True means value is the raw text."""
    value: Any
    failed: bool = False


def coerce_default(raw: str | None, kind: PropertyKind) -> CoercedDefault:
    """Coerce a raw default-value input to the property's kind.

    Blank input means "no default". On failure the raw text is kept and the
    result is tagged failed; the add/update operation itself is not rejected.
    """
    if raw is None or not raw.strip():
        return CoercedDefault(None)

    if kind is PropertyKind.NUMBER:
        return _coerce_number(raw)
    if kind is PropertyKind.BOOLEAN:
        return CoercedDefault(raw.strip().lower() == "true")
    if kind in (PropertyKind.OBJECT, PropertyKind.ARRAY):
        try:
            return CoercedDefault(load_json(raw))
        except (ValueError, RecursionError):
            return CoercedDefault(raw, failed=True)
    if kind is PropertyKind.ENUM:
        return CoercedDefault(raw.strip())
    return CoercedDefault(raw)


def _coerce_number(raw: str) -> CoercedDefault:
    text = raw.strip()
    try:
        return CoercedDefault(int(text))
    except ValueError:
        pass
    try:
        value = float(text)
    except ValueError:
        return CoercedDefault(raw, failed=True)
    if not math.isfinite(value):
        return CoercedDefault(raw, failed=True)
    return CoercedDefault(value)


def property_from_form(
    kind: PropertyKind,
    description: str | None = None,
    raw_default: str | None = None,
    enum_values: list[str] | None = None,
    children: dict[str, PropertyDefinition] | None = None,
    items: PropertyDefinition | None = None,
) -> tuple[PropertyDefinition, CoercedDefault]:
    """Build a definition from raw form fields, keeping only the sub-schema its kind uses."""
    coerced = coerce_default(raw_default, kind)
    definition = PropertyDefinition(
        kind=kind,
        description=(description or "").strip() or None,
        default=coerced.value,
        enum_values=list(enum_values or []) if kind is PropertyKind.ENUM else None,
        children=dict(children) if kind is PropertyKind.OBJECT and children else None,
        items=items if kind is PropertyKind.ARRAY else None,
    )
    return definition, coerced


# ─── Helpers ────────────────────────────────────────────────────

def _not_found(name: str) -> dict:
    return schema_error(ErrorCode.PROPERTY_NOT_FOUND, f"Property '{name}' does not exist")


def _reserved() -> dict:
    return schema_error(
        ErrorCode.RESERVED_NAME,
        f"'{RESERVED_PROPERTY}' is reserved for the execution policy",
    )


def _unexpected(kind: PropertyKind, what: str) -> dict:
    return schema_error(
        ErrorCode.UNEXPECTED_SUBSCHEMA,
        f"{kind.value} properties cannot carry {what}",
    )
