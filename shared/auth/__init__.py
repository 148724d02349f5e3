"""
Authentication Module
=====================

JWT bearer authentication and role checks for the certificate registry.

Roles:
- issuer: issue certificates
- verifier: verify certificates and proofs
- admin: everything, including revoke/suspend/reinstate

Usage:
    from shared.auth import create_access_token, require_issuer

    token = create_access_token({"sub": "registrar-1", "roles": ["issuer"]})

    @router.post("/certificates")
    async def issue(user: User = Depends(require_issuer)):
        ...
"""

from shared.auth.dependencies import (
    User,
    bearer_scheme,
    get_current_user,
    require_admin,
    require_issuer,
    require_roles,
    require_verifier,
)
from shared.auth.jwt import (
    Role,
    TokenData,
    create_access_token,
    decode_token,
)


__all__ = [
    # JWT
    "create_access_token",
    "decode_token",
    "Role",
    "TokenData",
    # Dependencies
    "User",
    "bearer_scheme",
    "get_current_user",
    "require_roles",
    "require_admin",
    "require_issuer",
    "require_verifier",
]
