"""Infrastructure Layer — database access, persistence adapters, and logging.

Invariants:
    - Infrastructure depends on core/ for codecs, never the other way round
    - SQLAlchemy errors are mapped to DatabaseError before leaving this layer

Design Decisions:
    - Repository adapter over raw sessions in services (ADR: ExMA single responsibility)
"""
