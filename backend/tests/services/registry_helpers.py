"""Shared constants and header helpers for service and route tests."""

from land_registry.api.dependencies import CALLER_HEADER

REGISTRAR = "registrar-root"


def as_caller(identity: str) -> dict:
    return {CALLER_HEADER: identity}
