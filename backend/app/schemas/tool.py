"""Tool Schemas — Pydantic models with field-level validation for API boundaries.

Invariants:
    - ToolDraft is the editor's whole state; the API is stateless between calls
    - ToolDraft.required only names existing properties, never execution_specs
    - ExecutionPolicySchema counters are >= 0
    - Conversion to/from core dataclasses goes through to_*/from_* methods only

Design Decisions:
    - Pydantic models at the boundary, dataclasses in core: core stays free of
      framework imports (ADR: ExMA functional core)
    - include_execution_specs is UI visibility only; the policy is always
      serialized and always saved
    - original_name marks an edit of a stored tool: saving under a new name renames
"""

from typing import Any

from pydantic import BaseModel, Field, field_validator, model_validator

from app.core.domain_types import (
    DEFAULT_MAX_RETRY_ATTEMPTS,
    DEFAULT_WAIT_TIME_IN_MILLIS,
    RESERVED_PROPERTY,
    ExecutionType,
    PropertyKind,
)
from app.core.parameter_tree import ParameterTree, PropertyDefinition
from app.core.tool_document import ExecutionPolicy, ToolDocument


class PropertySchema(BaseModel):
    """One property definition as the editor sends and receives it."""
    kind: PropertyKind
    description: str | None = None
    default: Any = None
    enum_values: list[str] | None = None
    children: dict[str, "PropertySchema"] | None = None
    items: "PropertySchema | None" = None

    def to_definition(self) -> PropertyDefinition:
        return PropertyDefinition(
            kind=self.kind,
            description=self.description,
            default=self.default,
            enum_values=list(self.enum_values) if self.enum_values is not None else None,
            children=(
                {name: child.to_definition() for name, child in self.children.items()}
                if self.children is not None else None
            ),
            items=self.items.to_definition() if self.items is not None else None,
        )

    @classmethod
    def from_definition(cls, definition: PropertyDefinition) -> "PropertySchema":
        return cls(
            kind=definition.kind,
            description=definition.description,
            default=definition.default,
            enum_values=definition.enum_values,
            children=(
                {name: cls.from_definition(child) for name, child in definition.children.items()}
                if definition.children is not None else None
            ),
            items=cls.from_definition(definition.items) if definition.items is not None else None,
        )


PropertySchema.model_rebuild()


class ExecutionPolicySchema(BaseModel):
    """Execution policy controls."""
    type: ExecutionType = ExecutionType.CLIENT_SIDE
    max_retry_attempts: int = Field(DEFAULT_MAX_RETRY_ATTEMPTS, ge=0)
    wait_time_in_millis: int = Field(DEFAULT_WAIT_TIME_IN_MILLIS, ge=0)

    def to_policy(self) -> ExecutionPolicy:
        return ExecutionPolicy(
            type=self.type,
            max_retry_attempts=self.max_retry_attempts,
            wait_time_in_millis=self.wait_time_in_millis,
        )

    @classmethod
    def from_policy(cls, policy: ExecutionPolicy) -> "ExecutionPolicySchema":
        return cls(
            type=policy.type,
            max_retry_attempts=policy.max_retry_attempts,
            wait_time_in_millis=policy.wait_time_in_millis,
        )


class ToolDraft(BaseModel):
    """Editor state for one tool."""
    name: str = Field("", max_length=255)
    description: str = Field("", max_length=10_000)
    properties: dict[str, PropertySchema] = Field(default_factory=dict)
    required: list[str] = Field(default_factory=list)
    additional_properties: bool = False
    strict: bool = True
    execution_specs: ExecutionPolicySchema = Field(default_factory=ExecutionPolicySchema)
    include_execution_specs: bool = False
    original_name: str | None = None

    @field_validator("properties")
    @classmethod
    def reject_reserved_property(
        cls, v: dict[str, PropertySchema],
    ) -> dict[str, PropertySchema]:
        if RESERVED_PROPERTY in v:
            raise ValueError(f"'{RESERVED_PROPERTY}' is managed by execution_specs")
        return v

    @model_validator(mode="after")
    def validate_required_subset(self):
        unknown = [r for r in self.required if r not in self.properties]
        if unknown:
            raise ValueError(f"required names unknown properties: {', '.join(unknown)}")
        return self

    def to_document(self) -> ToolDocument:
        return ToolDocument(
            name=self.name,
            description=self.description,
            tree=ParameterTree(
                properties={
                    name: prop.to_definition() for name, prop in self.properties.items()
                },
                required=list(dict.fromkeys(self.required)),
                additional_properties=self.additional_properties,
            ),
            strict=self.strict,
            execution_policy=self.execution_specs.to_policy(),
        )

    def with_document(self, document: ToolDocument) -> "ToolDraft":
        """Copy of this draft carrying the document's content, keeping UI-only fields."""
        return ToolDraft.from_document(
            document,
            include_execution_specs=self.include_execution_specs,
            original_name=self.original_name,
        )

    @classmethod
    def from_document(
        cls,
        document: ToolDocument,
        include_execution_specs: bool = False,
        original_name: str | None = None,
    ) -> "ToolDraft":
        tree = document.tree
        return cls(
            name=document.name,
            description=document.description,
            properties={
                name: PropertySchema.from_definition(d) for name, d in tree.properties.items()
            },
            required=list(tree.required),
            additional_properties=tree.additional_properties,
            strict=document.strict,
            execution_specs=ExecutionPolicySchema.from_policy(document.execution_policy),
            include_execution_specs=include_execution_specs,
            original_name=original_name,
        )


# ─── Property form ──────────────────────────────────────────────

class PropertyForm(BaseModel):
    """Raw property form fields. default_text is coerced per kind."""
    name: str = Field(max_length=255)
    kind: PropertyKind = PropertyKind.STRING
    description: str | None = Field(None, max_length=2000)
    default_text: str | None = None
    enum_values: list[str] = Field(default_factory=list)
    children: dict[str, PropertySchema] = Field(default_factory=dict)
    items: PropertySchema | None = None
    editing_name: str | None = None  # set when the form edits an existing property


class PropertyUpsertRequest(BaseModel):
    draft: ToolDraft
    form: PropertyForm


class PropertyNameRequest(BaseModel):
    draft: ToolDraft
    name: str


class NestedChildrenRequest(BaseModel):
    draft: ToolDraft
    name: str
    children: dict[str, PropertySchema]


class NestedItemsRequest(BaseModel):
    draft: ToolDraft
    name: str
    items: PropertySchema


class EnumValuesRequest(BaseModel):
    draft: ToolDraft
    name: str
    values: list[str]


class DraftResponse(BaseModel):
    """Updated draft plus its live canonical preview."""
    draft: ToolDraft
    preview: dict
    warnings: list[str] = Field(default_factory=list)


# ─── Raw JSON import ────────────────────────────────────────────

class RawSchemaRequest(BaseModel):
    """Pasted JSON plus the editor's current execution policy (which always wins)."""
    raw: str = Field(max_length=200_000)
    execution_specs: ExecutionPolicySchema = Field(default_factory=ExecutionPolicySchema)


class ValidationResponse(BaseModel):
    valid: bool
    error: dict | None = None


# ─── Stored tools ───────────────────────────────────────────────

class ToolResponse(BaseModel):
    """A saved tool in its stored form."""
    name: str
    description: str
    document: dict


class RenameRequest(BaseModel):
    new_name: str = Field(max_length=255)
