"""Services Layer — editor operations and save/load orchestration.

Invariants:
    - Services translate core error dicts into ToolValidationError
    - Persistence goes through the ToolRepository protocol only

Design Decisions:
    - Draft operations are synchronous and stateless; only save/load touch IO (ADR: ExMA impureim sandwich)
"""
