"""Database Infrastructure: SQLAlchemy declarative Base for the key-value store.

Invariants:
    - Single declarative Base; tables created by SqlKeyValueStore on construction

Design Decisions:
    - Synchronous engine: the puzzle cache persists a snapshot before each mutating call
      returns, so the store cannot sit behind an await
"""
