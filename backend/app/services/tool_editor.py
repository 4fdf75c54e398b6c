"""Tool Editor — orchestrates draft edits, JSON import and saves around the pure core.

Invariants:
    - Every draft operation converts draft -> core tree, applies ONE core
      operation, and converts back; a rejected operation leaves no partial edit
    - Core error dicts become ToolValidationError here, never inside core
    - A saved tool always carries the draft's execution policy
    - Imported JSON never contributes an execution policy: the editor's wins
    - Name and description are validated and trimmed before any repository write

Design Decisions:
    - Imperative shell around functional core (ADR: ExMA impureim sandwich):
      pure draft functions here are sync, only save/load touch the repository
    - Lenient default coercion surfaces as a warning string, not a failure
"""

import logging

from app.config import Settings
from app.core.errors import ErrorContext, ResourceNotFoundError, ToolValidationError
from app.core.parameter_tree import check_tree, property_from_form, validate_name
from app.core.repository_protocols import ToolRepository
from app.core.schema_codec import parse_tool_schema, preview_tool
from app.core.schema_errors import ErrorCode, schema_error
from app.core.tool_document import ExecutionPolicy, ToolDocument
from app.schemas.tool import (
    DraftResponse,
    ExecutionPolicySchema,
    PropertyForm,
    PropertySchema,
    ToolDraft,
)

logger = logging.getLogger(__name__)


# ─── Draft operations (pure) ────────────────────────────────────

def new_draft(settings: Settings) -> ToolDraft:
    """Blank draft seeded with the configured execution-policy defaults."""
    return ToolDraft(
        execution_specs=ExecutionPolicySchema(
            max_retry_attempts=settings.default_max_retry_attempts,
            wait_time_in_millis=settings.default_wait_time_in_millis,
        ),
    )


def draft_response(draft: ToolDraft, warnings: list[str] | None = None) -> DraftResponse:
    return DraftResponse(
        draft=draft,
        preview=preview_tool(draft.to_document()),
        warnings=warnings or [],
    )


def upsert_property(draft: ToolDraft, form: PropertyForm) -> DraftResponse:
    """Add a new property, update one in place, or rename one (form.editing_name)."""
    document = draft.to_document()
    definition, coerced = property_from_form(
        kind=form.kind,
        description=form.description,
        raw_default=form.default_text,
        enum_values=form.enum_values,
        children={name: child.to_definition() for name, child in form.children.items()},
        items=form.items.to_definition() if form.items is not None else None,
    )
    _raise_on_error(
        document.tree.add_or_update_property(
            form.name, definition, rename_from=form.editing_name,
        ),
        document, form.name,
    )

    warnings = []
    if coerced.failed:
        logger.warning(
            "Default value kept as raw text",
            extra={"tool_name": document.name or None, "property_name": form.name},
        )
        warnings.append(
            f"Default for '{form.name}' is not a valid {form.kind.value}; kept as text",
        )
    return draft_response(draft.with_document(document), warnings)


def remove_property(draft: ToolDraft, name: str) -> DraftResponse:
    document = draft.to_document()
    document.tree.remove_property(name)
    return draft_response(draft.with_document(document))


def toggle_required(draft: ToolDraft, name: str) -> DraftResponse:
    document = draft.to_document()
    _raise_on_error(document.tree.toggle_required(name), document, name)
    return draft_response(draft.with_document(document))


def set_nested_children(
    draft: ToolDraft, name: str, children: dict[str, PropertySchema],
) -> DraftResponse:
    document = draft.to_document()
    error = document.tree.set_nested_children(
        name, {child_name: child.to_definition() for child_name, child in children.items()},
    )
    _raise_on_error(error, document, name)
    return draft_response(draft.with_document(document))


def set_nested_items(draft: ToolDraft, name: str, items: PropertySchema) -> DraftResponse:
    document = draft.to_document()
    _raise_on_error(
        document.tree.set_nested_items(name, items.to_definition()), document, name,
    )
    return draft_response(draft.with_document(document))


def set_enum_values(draft: ToolDraft, name: str, values: list[str]) -> DraftResponse:
    document = draft.to_document()
    _raise_on_error(document.tree.set_enum_values(name, values), document, name)
    return draft_response(draft.with_document(document))


def import_draft(raw: str, execution_specs: ExecutionPolicySchema) -> DraftResponse:
    """Parse pasted JSON into a draft; the preview carries the editor's policy."""
    document = _parse_or_raise(raw, execution_specs.to_policy())
    return draft_response(ToolDraft.from_document(document))


# ─── Persistence (async shell) ──────────────────────────────────

async def save_draft(repository: ToolRepository, draft: ToolDraft) -> ToolDocument:
    """Validate and persist a form-built draft; renames when original_name differs."""
    document = draft.to_document()
    document.name = document.name.strip()
    document.description = document.description.strip()

    _raise_on_error(validate_name(document.name, function=True), document)
    _raise_on_error(check_tree(document.tree), document)
    if not document.description:
        _raise_on_error(
            schema_error(ErrorCode.INVALID_DESCRIPTION, "Please enter a description"),
            document,
        )

    await repository.put(document, replaces=draft.original_name)
    return document


async def save_imported(
    repository: ToolRepository, raw: str, execution_specs: ExecutionPolicySchema,
) -> ToolDocument:
    """Persist pasted JSON with the editor's execution policy attached."""
    document = _parse_or_raise(raw, execution_specs.to_policy())
    await repository.put(document)
    return document


async def rename_tool(
    repository: ToolRepository, old_name: str, new_name: str,
) -> ToolDocument:
    """Move a stored tool to a new key, keeping its content."""
    new_name = new_name.strip()
    error = validate_name(new_name, function=True)
    if error:
        raise ToolValidationError(error, ErrorContext(tool_name=old_name))
    await repository.rename(old_name, new_name)
    return await repository.get(new_name)


async def load_draft(repository: ToolRepository, name: str) -> ToolDraft:
    """Open a stored tool for editing. Execution-policy controls start hidden."""
    document = await repository.get(name)
    if document is None:
        raise ResourceNotFoundError("Tool", name)
    return ToolDraft.from_document(document, original_name=document.name)


# ─── Helpers ────────────────────────────────────────────────────

def _parse_or_raise(raw: str, policy: ExecutionPolicy) -> ToolDocument:
    parsed, error = parse_tool_schema(raw)
    if error:
        raise ToolValidationError(error)
    return parsed.to_document(policy)


def _raise_on_error(
    error: dict | None, document: ToolDocument, property_name: str | None = None,
) -> None:
    if error is None:
        return
    raise ToolValidationError(
        error,
        ErrorContext(tool_name=document.name or None, property_name=property_name),
    )

