"""Core Layer: pure domain logic, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Randomness is injected (random.Random) so every function is reproducible under a seed

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
