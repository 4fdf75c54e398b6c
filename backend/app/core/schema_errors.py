"""Schema Errors — value-returned error codes for the tool schema engine.

Invariants:
    - Every core error is a plain dict: status, error_code, category, message
    - Core functions return the dict (or None on success); they never raise it
    - Each code belongs to exactly one ErrorCategory
    - Errors are deterministic functions of their input and are never retried

Design Decisions:
    - Return dicts (not exceptions): callers decide display policy, and the error
      path serializes to JSON exactly like the success path (ADR: uniform response shape)
    - Shell wraps a dict in ToolValidationError only when it must abort a request
"""

from enum import Enum

from app.core.domain_types import ErrorCategory


class ErrorCode(str, Enum):
    """Stable machine-readable error codes."""
    # name
    EMPTY_NAME = "EMPTY_NAME"
    NAME_TOO_SHORT = "NAME_TOO_SHORT"
    INVALID_NAME_FORMAT = "INVALID_NAME_FORMAT"
    DUPLICATE_NAME = "DUPLICATE_NAME"
    RESERVED_NAME = "RESERVED_NAME"
    # schema_structure
    ENUM_REQUIRES_VALUES = "ENUM_REQUIRES_VALUES"
    ENUM_DEFAULT_NOT_IN_SET = "ENUM_DEFAULT_NOT_IN_SET"
    OBJECT_REQUIRES_CHILDREN = "OBJECT_REQUIRES_CHILDREN"
    ARRAY_REQUIRES_ITEMS = "ARRAY_REQUIRES_ITEMS"
    UNEXPECTED_SUBSCHEMA = "UNEXPECTED_SUBSCHEMA"
    PROPERTY_NOT_FOUND = "PROPERTY_NOT_FOUND"
    WRONG_PROPERTY_KIND = "WRONG_PROPERTY_KIND"
    # parse
    EMPTY_INPUT = "EMPTY_INPUT"
    MALFORMED_JSON = "MALFORMED_JSON"
    NOT_A_FUNCTION_TOOL = "NOT_A_FUNCTION_TOOL"
    INVALID_DESCRIPTION = "INVALID_DESCRIPTION"
    PARAMETERS_NOT_OBJECT_TYPE = "PARAMETERS_NOT_OBJECT_TYPE"
    INVALID_PROPERTY_SCHEMA = "INVALID_PROPERTY_SCHEMA"
    UNSUPPORTED_PROPERTY_TYPE = "UNSUPPORTED_PROPERTY_TYPE"


_CATEGORIES: dict[ErrorCode, ErrorCategory] = {
    ErrorCode.EMPTY_NAME: ErrorCategory.NAME,
    ErrorCode.NAME_TOO_SHORT: ErrorCategory.NAME,
    ErrorCode.INVALID_NAME_FORMAT: ErrorCategory.NAME,
    ErrorCode.DUPLICATE_NAME: ErrorCategory.NAME,
    ErrorCode.RESERVED_NAME: ErrorCategory.NAME,
    ErrorCode.ENUM_REQUIRES_VALUES: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.ENUM_DEFAULT_NOT_IN_SET: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.OBJECT_REQUIRES_CHILDREN: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.ARRAY_REQUIRES_ITEMS: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.UNEXPECTED_SUBSCHEMA: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.PROPERTY_NOT_FOUND: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.WRONG_PROPERTY_KIND: ErrorCategory.SCHEMA_STRUCTURE,
    ErrorCode.EMPTY_INPUT: ErrorCategory.PARSE,
    ErrorCode.MALFORMED_JSON: ErrorCategory.PARSE,
    ErrorCode.NOT_A_FUNCTION_TOOL: ErrorCategory.PARSE,
    ErrorCode.INVALID_DESCRIPTION: ErrorCategory.PARSE,
    ErrorCode.PARAMETERS_NOT_OBJECT_TYPE: ErrorCategory.PARSE,
    ErrorCode.INVALID_PROPERTY_SCHEMA: ErrorCategory.PARSE,
    ErrorCode.UNSUPPORTED_PROPERTY_TYPE: ErrorCategory.PARSE,
}


def schema_error(code: ErrorCode, message: str) -> dict:
    """Construct a standard error dict."""
    return {
        "status": "error",
        "error_code": code.value,
        "category": _CATEGORIES[code].value,
        "message": message,
    }


def with_path(error: dict, path: str) -> dict:
    """Prefix a nested error's message with the property path it came from."""
    return {**error, "message": f"{path}: {error['message']}"}
