"""Tool Drafts — stateless editor operations on an in-progress tool definition.

Invariants:
    - Every request carries the whole draft; the server keeps no editor state
    - Every successful response returns the updated draft AND its canonical preview
    - A rejected edit returns 400 with the core error code; the client's draft is untouched
    - The preview always includes execution_specs, whatever include_execution_specs says

Design Decisions:
    - Stateless drafts over a server-side editor session: one editor per browser tab,
      no shared mutable state to lock (ADR: single-threaded core)
    - POST for every operation: bodies carry nested drafts that do not fit query strings
"""

import logging

from fastapi import APIRouter

from app.config import get_settings
from app.schemas.tool import (
    DraftResponse,
    EnumValuesRequest,
    NestedChildrenRequest,
    NestedItemsRequest,
    PropertyNameRequest,
    PropertyUpsertRequest,
    ToolDraft,
)
from app.services import tool_editor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/drafts", tags=["drafts"])


@router.post("/new", response_model=DraftResponse)
async def create_draft():
    """Blank draft with configured execution-policy defaults."""
    return tool_editor.draft_response(tool_editor.new_draft(get_settings()))


@router.post("/preview", response_model=DraftResponse)
async def preview_draft(draft: ToolDraft):
    """Canonical JSON preview for the current draft."""
    return tool_editor.draft_response(draft)


@router.post("/properties", response_model=DraftResponse)
async def upsert_property(body: PropertyUpsertRequest):
    """Add, update or rename a property from the property form."""
    return tool_editor.upsert_property(body.draft, body.form)


@router.post("/properties/remove", response_model=DraftResponse)
async def remove_property(body: PropertyNameRequest):
    """Remove a property. Removing an absent property is not an error."""
    return tool_editor.remove_property(body.draft, body.name)


@router.post("/properties/toggle-required", response_model=DraftResponse)
async def toggle_required(body: PropertyNameRequest):
    return tool_editor.toggle_required(body.draft, body.name)


@router.post("/properties/children", response_model=DraftResponse)
async def set_nested_children(body: NestedChildrenRequest):
    """Commit the nested object editor back into the parent property."""
    return tool_editor.set_nested_children(body.draft, body.name, body.children)


@router.post("/properties/items", response_model=DraftResponse)
async def set_nested_items(body: NestedItemsRequest):
    """Commit the array item editor back into the parent property."""
    return tool_editor.set_nested_items(body.draft, body.name, body.items)


@router.post("/properties/enum-values", response_model=DraftResponse)
async def set_enum_values(body: EnumValuesRequest):
    """Commit the enum value list editor back into the parent property."""
    return tool_editor.set_enum_values(body.draft, body.name, body.values)
