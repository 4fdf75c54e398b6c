"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection
    - Tools are keyed by name; the collection is a mapping name -> stored document

Design Decisions:
    - Protocol over ABC: structural subtyping, no inheritance hierarchy (ADR: ExMA anti-pattern)
    - Async in Protocol: boundary methods are async because implementations do IO,
      but core pure functions are never async themselves — the shell orchestrates
      the async calls around the pure logic
    - put(replaces=...) makes rename-on-save a single call: delete old key and
      insert new key happen together from the caller's point of view
    - Explicit repository capability instead of one shared global key holding every tool
"""

from typing import Protocol

from app.core.tool_document import ToolDocument


class ToolRepository(Protocol):
    """Contract for client-side tool persistence — implemented by shell."""
    async def get(self, name: str) -> ToolDocument | None: ...
    async def list_all(self) -> list[ToolDocument]: ...
    async def put(
        self, document: ToolDocument, replaces: str | None = None,
    ) -> None: ...
    async def rename(self, old_name: str, new_name: str) -> None: ...
    async def delete(self, name: str) -> bool: ...
