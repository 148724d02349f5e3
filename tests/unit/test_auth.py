"""
Unit tests for authentication module.
"""

from datetime import UTC, datetime, timedelta

import pytest
from fastapi import HTTPException
from fastapi.security import HTTPAuthorizationCredentials

from shared.auth import (
    Role,
    User,
    create_access_token,
    decode_token,
    get_current_user,
    require_admin,
    require_issuer,
    require_verifier,
)
from shared.auth.jwt import TokenData


class TestJWTTokens:
    """Tests for JWT token functions."""

    def test_create_access_token(self) -> None:
        """Test access token creation."""
        token = create_access_token({"sub": "registrar-1", "roles": ["issuer"]})

        assert isinstance(token, str)
        assert len(token) > 50

    def test_decode_access_token(self) -> None:
        """Test access token decoding keeps the registry claims."""
        token = create_access_token(
            {
                "sub": "registrar-1",
                "roles": ["issuer"],
                "name": "Registrar",
                "organization": "state-university",
            }
        )

        decoded = decode_token(token)

        assert decoded is not None
        assert decoded.sub == "registrar-1"
        assert decoded.roles == ["issuer"]
        assert decoded.name == "Registrar"
        assert decoded.organization == "state-university"
        assert decoded.exp > decoded.iat

    def test_decode_invalid_token(self) -> None:
        """Test that invalid token returns None."""
        assert decode_token("invalid.token.string") is None

    def test_decode_expired_token(self) -> None:
        token = create_access_token({"sub": "hr-1"}, expires_delta=timedelta(seconds=-10))

        assert decode_token(token) is None

    def test_token_without_subject_rejected(self) -> None:
        token = create_access_token({"roles": ["admin"]})

        assert decode_token(token) is None

    def test_token_with_custom_expiry(self) -> None:
        """Test token with custom expiration."""
        token = create_access_token({"sub": "hr-1"}, expires_delta=timedelta(minutes=5))

        decoded = decode_token(token)

        assert decoded is not None
        assert decoded.exp - decoded.iat <= timedelta(minutes=5, seconds=1)


class TestTokenData:
    """Tests for TokenData model."""

    def test_token_data_defaults(self) -> None:
        token_data = TokenData(sub="jane", exp=datetime.now(UTC))

        assert token_data.roles == []
        assert token_data.organization is None


class TestCurrentUser:
    """Tests for bearer token resolution."""

    @pytest.mark.asyncio
    async def test_valid_token(self) -> None:
        token = create_access_token({"sub": "hr-1", "roles": ["verifier"], "organization": "acme-corp"})
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials=token)

        user = await get_current_user(credentials)

        assert user.id == "hr-1"
        assert user.actor == "acme-corp"
        assert user.has_role(Role.VERIFIER)
        assert not user.has_role(Role.ADMIN)

    @pytest.mark.asyncio
    async def test_missing_token(self) -> None:
        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(None)

        assert exc_info.value.status_code == 401

    @pytest.mark.asyncio
    async def test_bad_token(self) -> None:
        credentials = HTTPAuthorizationCredentials(scheme="Bearer", credentials="nope")

        with pytest.raises(HTTPException) as exc_info:
            await get_current_user(credentials)

        assert exc_info.value.status_code == 401

    def test_actor_falls_back_to_id(self) -> None:
        assert User(id="jane", roles=["holder"]).actor == "jane"


class TestRoleChecks:
    """Tests for role-gated dependencies."""

    @pytest.mark.asyncio
    async def test_admin_passes_every_gate(self) -> None:
        admin = User(id="admin-1", roles=["admin"])

        assert await require_admin(admin) is admin
        assert await require_issuer(admin) is admin
        assert await require_verifier(admin) is admin

    @pytest.mark.asyncio
    async def test_holder_cannot_issue(self) -> None:
        holder = User(id="jane", roles=["holder"])

        with pytest.raises(HTTPException) as exc_info:
            await require_issuer(holder)

        assert exc_info.value.status_code == 403

    @pytest.mark.asyncio
    async def test_issuer_cannot_verify(self) -> None:
        issuer = User(id="registrar-1", roles=["issuer"])

        with pytest.raises(HTTPException):
            await require_verifier(issuer)
