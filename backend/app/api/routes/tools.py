"""Tool Library — save, load, rename, import and delete client-side tools.

Invariants:
    - Tools are keyed by name; saving under an existing name overwrites it
    - Saving a draft whose original_name differs renames the stored tool
    - Imported JSON is validated by the same codec path as /import/validate
    - Stored documents always carry executionSpecs and the execution_specs property

Design Decisions:
    - Repository built per request from the get_db session (ADR: explicit
      ToolRepository capability, no ambient global store)
    - /import/validate always answers 200 with {valid, error}: it drives save-button
      enablement and is polled on every keystroke
"""

import logging

from fastapi import APIRouter, Depends, status
from fastapi.responses import PlainTextResponse, Response
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import ResourceNotFoundError
from app.core.schema_codec import render_json, serialize_tool, to_stored, validate_tool_schema
from app.core.tool_document import ToolDocument
from app.infrastructure.database import get_db
from app.infrastructure.tool_repository import SqlToolRepository
from app.schemas.tool import (
    DraftResponse,
    RawSchemaRequest,
    RenameRequest,
    ToolDraft,
    ToolResponse,
    ValidationResponse,
)
from app.services import tool_editor

logger = logging.getLogger(__name__)
router = APIRouter(prefix="/api/v1/tools", tags=["tools"])


def get_tool_repository(db: AsyncSession = Depends(get_db)) -> SqlToolRepository:
    return SqlToolRepository(db)


def _tool_response(document: ToolDocument) -> ToolResponse:
    return ToolResponse(
        name=document.name,
        description=document.description,
        document=to_stored(document),
    )


@router.get("")
async def list_tools(repository: SqlToolRepository = Depends(get_tool_repository)):
    """All saved tools, ordered by name."""
    documents = await repository.list_all()
    return {"tools": [_tool_response(d) for d in documents]}


@router.post("", response_model=ToolResponse, status_code=status.HTTP_201_CREATED)
async def save_tool(
    draft: ToolDraft, repository: SqlToolRepository = Depends(get_tool_repository),
):
    """Save a form-built draft (create, overwrite, or rename via original_name)."""
    document = await tool_editor.save_draft(repository, draft)
    return _tool_response(document)


@router.post("/import/validate", response_model=ValidationResponse)
async def validate_import(body: RawSchemaRequest):
    error = validate_tool_schema(body.raw)
    return ValidationResponse(valid=error is None, error=error)


@router.post("/import/preview", response_model=DraftResponse)
async def preview_import(body: RawSchemaRequest):
    """Parsed draft plus canonical preview with the editor's execution policy."""
    return tool_editor.import_draft(body.raw, body.execution_specs)


@router.post("/import", response_model=ToolResponse, status_code=status.HTTP_201_CREATED)
async def save_import(
    body: RawSchemaRequest, repository: SqlToolRepository = Depends(get_tool_repository),
):
    document = await tool_editor.save_imported(repository, body.raw, body.execution_specs)
    return _tool_response(document)


@router.get("/{name}", response_model=ToolResponse)
async def get_tool(name: str, repository: SqlToolRepository = Depends(get_tool_repository)):
    document = await repository.get(name)
    if document is None:
        raise ResourceNotFoundError("Tool", name)
    return _tool_response(document)


@router.get("/{name}/draft", response_model=DraftResponse)
async def edit_tool(name: str, repository: SqlToolRepository = Depends(get_tool_repository)):
    """Load a saved tool into an editable draft."""
    draft = await tool_editor.load_draft(repository, name)
    return tool_editor.draft_response(draft)


@router.get("/{name}/schema", response_class=PlainTextResponse)
async def export_tool_schema(
    name: str, repository: SqlToolRepository = Depends(get_tool_repository),
):
    """Pretty-printed canonical schema, ready to copy."""
    document = await repository.get(name)
    if document is None:
        raise ResourceNotFoundError("Tool", name)
    return PlainTextResponse(render_json(serialize_tool(document)), media_type="application/json")


@router.post("/{name}/rename", response_model=ToolResponse)
async def rename_tool(
    name: str,
    body: RenameRequest,
    repository: SqlToolRepository = Depends(get_tool_repository),
):
    document = await tool_editor.rename_tool(repository, name, body.new_name)
    return _tool_response(document)


@router.delete("/{name}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_tool(name: str, repository: SqlToolRepository = Depends(get_tool_repository)):
    if not await repository.delete(name):
        raise ResourceNotFoundError("Tool", name)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
