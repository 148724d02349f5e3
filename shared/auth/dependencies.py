"""
FastAPI Authentication Dependencies
===================================

Dependency injection for route protection.

Version: 0.1.0
"""

from collections.abc import Awaitable, Callable
from typing import Annotated

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, Field

from shared.auth.jwt import Role, decode_token
from shared.logging import get_logger


logger = get_logger(__name__)

# Bearer token extraction from the Authorization header
bearer_scheme = HTTPBearer(auto_error=False)


class User(BaseModel):
    """Authenticated principal for dependency injection."""

    id: str = Field(..., description="Principal ID")
    name: str | None = None
    organization: str | None = None
    roles: list[str] = Field(default_factory=list)

    @property
    def actor(self) -> str:
        """Identifier recorded on the ledger for this principal."""
        return self.organization or self.id

    def has_role(self, role: Role) -> bool:
        return role.value in self.roles


async def get_current_user(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(bearer_scheme)],
) -> User:
    """
    Extract and validate the principal from a bearer token.

    Raises:
        HTTPException: 401 if the token is missing or invalid
    """
    credentials_exception = HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail="Could not validate credentials",
        headers={"WWW-Authenticate": "Bearer"},
    )

    if credentials is None:
        logger.warning("auth_token_missing")
        raise credentials_exception

    token_data = decode_token(credentials.credentials)

    if token_data is None:
        logger.warning("auth_token_invalid")
        raise credentials_exception

    logger.debug("user_authenticated", user_id=token_data.sub, roles=token_data.roles)

    return User(
        id=token_data.sub,
        name=token_data.name,
        organization=token_data.organization,
        roles=token_data.roles,
    )


def require_roles(
    required_roles: list[Role],
) -> Callable[[User], Awaitable[User]]:
    """
    Create a dependency that requires any of the given roles.

    Usage:
        @router.post("/certificates")
        async def issue(user: User = Depends(require_roles([Role.ISSUER, Role.ADMIN]))):
            ...
    """

    async def role_checker(
        current_user: Annotated[User, Depends(get_current_user)],
    ) -> User:
        if not any(current_user.has_role(role) for role in required_roles):
            logger.warning(
                "insufficient_roles",
                user_id=current_user.id,
                user_roles=current_user.roles,
                required_roles=[r.value for r in required_roles],
            )
            raise HTTPException(
                status_code=status.HTTP_403_FORBIDDEN,
                detail="Insufficient permissions",
            )

        return current_user

    return role_checker


# Common role dependencies
require_admin = require_roles([Role.ADMIN])
require_issuer = require_roles([Role.ISSUER, Role.ADMIN])
require_verifier = require_roles([Role.VERIFIER, Role.ADMIN])
