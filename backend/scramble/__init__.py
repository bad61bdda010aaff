"""Scramble Game Engine Package: timed anagram rounds over a layered word supply.

Invariants:
    - Package root contains no executable code (import side-effects prohibited)

Design Decisions:
    - Empty __init__.py: explicit imports only, no star exports
"""
