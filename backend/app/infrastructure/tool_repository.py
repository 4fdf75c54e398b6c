"""SQL Tool Repository — ToolRepository implementation over the client_tools table.

Invariants:
    - Rows are keyed by tool name; put() overwrites an existing row with the same name
    - put(replaces=old) deletes the old row and writes the new one in a single commit
    - Stored documents are decoded through the same codec path as pasted JSON

Design Decisions:
    - One repository per AsyncSession: the request-scoped session from get_db
      owns the transaction (ADR: thin shell around pure codec)
    - A stored document that no longer decodes is a DatabaseError, not a
      validation error: the user did not supply it in this request
"""

import logging

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.errors import DatabaseError, ErrorContext, ResourceNotFoundError
from app.core.schema_codec import document_from_stored, to_stored
from app.core.tool_document import ToolDocument
from app.models.client_tool import ClientTool

logger = logging.getLogger(__name__)


class SqlToolRepository:
    """Persists ToolDocuments as JSON rows."""

    def __init__(self, db: AsyncSession):
        self._db = db

    async def get(self, name: str) -> ToolDocument | None:
        row = await self._db.get(ClientTool, name)
        return _decode(row) if row else None

    async def list_all(self) -> list[ToolDocument]:
        result = await self._db.execute(select(ClientTool).order_by(ClientTool.name))
        return [_decode(row) for row in result.scalars().all()]

    async def put(
        self, document: ToolDocument, replaces: str | None = None,
    ) -> None:
        if replaces and replaces != document.name:
            old = await self._db.get(ClientTool, replaces)
            if old is not None:
                await self._db.delete(old)

        stored = to_stored(document)
        row = await self._db.get(ClientTool, document.name)
        if row is None:
            self._db.add(ClientTool(
                name=document.name,
                description=document.description,
                document=stored,
            ))
        else:
            row.description = document.description
            row.document = stored
        await self._db.commit()
        logger.info(
            "Tool saved",
            extra={"tool_name": document.name, "previous_name": replaces},
        )

    async def rename(self, old_name: str, new_name: str) -> None:
        document = await self.get(old_name)
        if document is None:
            raise ResourceNotFoundError("Tool", old_name)
        if old_name == new_name:
            return
        document.name = new_name
        await self.put(document, replaces=old_name)

    async def delete(self, name: str) -> bool:
        row = await self._db.get(ClientTool, name)
        if row is None:
            return False
        await self._db.delete(row)
        await self._db.commit()
        logger.info("Tool deleted", extra={"tool_name": name})
        return True


def _decode(row: ClientTool) -> ToolDocument:
    document, error = document_from_stored(row.document)
    if error:
        logger.error(
            f"Stored tool no longer decodes: {error['message']}",
            extra={"tool_name": row.name, "error_code": error["error_code"]},
        )
        raise DatabaseError(
            "Stored tool document is invalid", "decode",
            ErrorContext(tool_name=row.name),
        )
    return document
