"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - PropertyKind is the editor-level kind; ENUM lowers to JSON Schema "string" + "enum"
    - RESERVED_PROPERTY never appears in user-editable properties or in required
    - Function names need >= MIN_FUNCTION_NAME_LENGTH chars; property names have no minimum
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - str Enums: serialize to JSON without custom encoders (ADR: tool documents are plain JSON)
    - Editor defaults live here, not in config: core never imports from the shell
"""

import re
from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

ToolName = NewType("ToolName", str)
PropertyName = NewType("PropertyName", str)


# ─── Enums ───────────────────────────────────────────────────────

class PropertyKind(str, Enum):
    """Editor-level property kinds. ENUM is a refinement of STRING."""
    STRING = "string"
    NUMBER = "number"
    BOOLEAN = "boolean"
    OBJECT = "object"
    ARRAY = "array"
    ENUM = "enum"

    @property
    def is_scalar(self) -> bool:
        return self in (PropertyKind.STRING, PropertyKind.NUMBER, PropertyKind.BOOLEAN)

    @property
    def schema_type(self) -> str:
        """JSON Schema "type" emitted for this kind."""
        if self is PropertyKind.ENUM:
            return PropertyKind.STRING.value
        return self.value


class ExecutionType(str, Enum):
    """Where a tool runs. Only client-side execution is supported."""
    CLIENT_SIDE = "client_side"


class ErrorCategory(str, Enum):
    """Core error taxonomy: every value-returned error belongs to one."""
    NAME = "name"
    SCHEMA_STRUCTURE = "schema_structure"
    PARSE = "parse"


# ─── Constants ───────────────────────────────────────────────────

TOOL_TYPE = "function"
PARAMETERS_TYPE = "object"
RESERVED_PROPERTY = "execution_specs"

NAME_PATTERN = re.compile(r"^[a-zA-Z][a-zA-Z0-9_]*$")
MIN_FUNCTION_NAME_LENGTH = 3

MAX_NESTING_DEPTH = 32  # nested properties/items levels below parameters

DEFAULT_MAX_RETRY_ATTEMPTS = 1
DEFAULT_WAIT_TIME_IN_MILLIS = 60_000

PREVIEW_NAME_PLACEHOLDER = "function_name"
PREVIEW_DESCRIPTION_PLACEHOLDER = "Function description"
