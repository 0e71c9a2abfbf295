"""Principal extraction from already-validated bearer claims.

Token issuance and signature validation happen upstream. This dependency reads
the claims the gateway forwards as "Bearer <tenant_id>:<user_id>[:<role>]".
An empty tenant segment means the principal carries no tenant claim.
"""

from typing import Annotated

from fastapi import Header, HTTPException, status

from backend.app.tenancy.context import Principal


def parse_bearer_claims(token: str) -> Principal:
    """Parse "tenant_id:user_id[:role]" claims.

    Raises:
        ValueError: If the token does not carry a user id
    """
    parts = token.split(":")
    if len(parts) not in (2, 3):
        raise ValueError("expected tenant_id:user_id[:role]")

    tenant_id, user_id = parts[0].strip(), parts[1].strip()
    role = parts[2].strip() if len(parts) == 3 else ""

    if not user_id:
        raise ValueError("missing user id")

    return Principal(user_id=user_id, tenant_id=tenant_id or None, role=role or None)


async def get_current_principal(
    authorization: Annotated[str | None, Header()] = None,
) -> Principal:
    """Extract the authenticated principal from the authorization header.

    Args:
        authorization: Authorization header (e.g., "Bearer <claims>")

    Returns:
        Principal with tenant, user and role claims

    Raises:
        HTTPException: If the header is missing or malformed
    """
    if not authorization:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Missing authorization header",
            headers={"WWW-Authenticate": "Bearer"},
        )

    if not authorization.startswith("Bearer "):
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid authorization header format",
            headers={"WWW-Authenticate": "Bearer"},
        )

    try:
        return parse_bearer_claims(authorization[7:])
    except ValueError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Invalid token format (expected tenant_id:user_id[:role])",
            headers={"WWW-Authenticate": "Bearer"},
        ) from e
