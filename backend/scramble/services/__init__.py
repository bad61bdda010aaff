"""Services Layer: round timer, puzzle supply cascade, answer validation, session FSM.

Invariants:
    - Services orchestrate core logic around infrastructure calls; they own no IO themselves
    - SessionController is the only service exposed to callers outside this package

Design Decisions:
    - One file per component for locality (ADR: no god objects)
"""
