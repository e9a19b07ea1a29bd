"""API Dependencies - caller identity and registry service injection.

Invariants:
    - Every mutating endpoint receives the caller identity from X-Caller-Identity
    - Missing or blank identity is rejected with 401 before reaching the core

Design Decisions:
    - Authentication is external: the gateway in front of the service vouches
      for the header, the core only checks membership and equality
"""

from fastapi import Header, HTTPException, status

from land_registry.core.domain_types import Identity

CALLER_HEADER = "X-Caller-Identity"


async def get_caller_identity(
    x_caller_identity: str | None = Header(None, alias=CALLER_HEADER),
) -> Identity:
    """Caller identity supplied by the upstream identity provider."""
    if x_caller_identity is None or not x_caller_identity.strip():
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Missing {CALLER_HEADER} header",
        )
    return Identity(x_caller_identity.strip())
