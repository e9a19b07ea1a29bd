"""Services Layer - registry service and its SQLAlchemy store.

Invariants:
    - Services own transaction boundaries; the store never commits
    - Registry rules stay in core/; services only sequence and persist

Design Decisions:
    - One process-wide RegistryService (ADR: in-memory authoritative core)
"""
