"""
Credential handling: bcrypt password hashing (passlib) and signed access
tokens (PyJWT).

Token claims are decoded exactly once, here, into a strict ``TokenClaims``
model; everything downstream works with the typed ``RequestContext``.
"""

from __future__ import annotations

import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from jwt import PyJWTError
from passlib.context import CryptContext
from pydantic import BaseModel, ConfigDict
from pydantic import ValidationError as PydanticValidationError

from ..config import AuthConfig
from ..domain.exceptions import AuthenticationError
from ..domain.models import RequestContext, User

logger = logging.getLogger(__name__)


class TokenClaims(BaseModel):
    """Schema of the access token payload."""

    model_config = ConfigDict(strict=True, extra="ignore")

    user_id: int
    email: str
    role: str
    business_id: Optional[int] = None
    exp: int


class PasswordHasher:
    """bcrypt hashing with a configurable cost factor."""

    def __init__(self, rounds: int = 12):
        self._context = CryptContext(schemes=["bcrypt"], deprecated="auto", bcrypt__rounds=rounds)

    def hash(self, password: str) -> str:
        return str(self._context.hash(password))

    def verify(self, password: str, hashed: str) -> bool:
        """Return False for mismatches and for unreadable hashes."""
        try:
            return bool(self._context.verify(password, hashed))
        except (ValueError, TypeError) as exc:
            logger.error("Error verifying password: %s", exc)
            return False


class TokenService:
    """Issues and verifies HS256 access tokens."""

    def __init__(self, config: AuthConfig):
        self._secret = config.jwt_secret
        self._algorithm = config.algorithm
        self._ttl = timedelta(hours=config.token_ttl_hours)

    def issue(self, user: User, now: datetime | None = None) -> str:
        """Create a signed token for ``user``."""
        issued_at = now or datetime.now(timezone.utc)
        claims = TokenClaims(
            user_id=user.id,
            email=user.email,
            role=user.role,
            business_id=user.business_id,
            exp=int((issued_at + self._ttl).timestamp()),
        )
        return jwt.encode(claims.model_dump(), self._secret, algorithm=self._algorithm)

    def decode(self, token: str) -> TokenClaims:
        """
        Verify the signature and expiry of ``token`` and validate its claims.

        Raises:
            AuthenticationError: If the token is invalid, expired or malformed
        """
        try:
            payload = jwt.decode(token, self._secret, algorithms=[self._algorithm])
        except PyJWTError as exc:
            raise AuthenticationError("Invalid or expired token") from exc

        try:
            return TokenClaims.model_validate(payload)
        except PydanticValidationError as exc:
            raise AuthenticationError("Invalid token claims") from exc

    def authenticate(self, token: str) -> RequestContext:
        claims = self.decode(token)
        return RequestContext(
            user_id=claims.user_id,
            email=claims.email,
            role=claims.role,
            business_id=claims.business_id,
        )
