"""Infrastructure Layer - database, clock and logging plumbing.

Invariants:
    - Infrastructure never imports registry rules from core/ (errors and protocols only)
    - All database failures mapped to DatabaseError

Design Decisions:
    - Thin wrappers over raw libraries (ADR: single responsibility)
"""
