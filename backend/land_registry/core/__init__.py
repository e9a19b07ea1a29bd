"""Core Layer - registry state machine, no IO, no async, no DB.

Invariants:
    - No module in core/ imports from services/, api/, infrastructure/, or db/
    - Clock and event sink are reached only through Protocol types

Design Decisions:
    - Functional core separated from imperative shell (ADR: impureim sandwich)
"""
