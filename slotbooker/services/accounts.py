"""
Business registration and login.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass

from ..adapters.repositories import BusinessRepository, UserRepository
from ..adapters.security import PasswordHasher, TokenService
from ..domain.exceptions import AuthenticationError, NotFoundError, ValidationError
from ..domain.models import Business, User
from ..domain.time_parsing import is_valid_timezone

logger = logging.getLogger(__name__)

BUSINESS_ADMIN_ROLE = "business_admin"


@dataclass(frozen=True)
class Session:
    """A signed token together with the user it was issued to."""
    token: str
    user: User


class AccountService:
    """Registers businesses with their admin user and verifies credentials."""

    def __init__(
        self,
        users: UserRepository,
        businesses: BusinessRepository,
        hasher: PasswordHasher,
        tokens: TokenService,
    ) -> None:
        self._users = users
        self._businesses = businesses
        self._hasher = hasher
        self._tokens = tokens

    def register(
        self,
        *,
        business_name: str,
        email: str,
        full_name: str,
        password: str,
        timezone: str = "UTC",
    ) -> tuple[Session, Business]:
        """
        Create a business and its admin account, and sign the admin in.

        Raises:
            ValidationError: If the timezone is unknown
            ConflictError: If the email is already registered
        """
        if not is_valid_timezone(timezone):
            raise ValidationError(f"Unknown timezone: {timezone}")

        user, business = self._users.register_business(
            business_name=business_name,
            timezone=timezone,
            email=email.lower(),
            full_name=full_name,
            password_hash=self._hasher.hash(password),
            role=BUSINESS_ADMIN_ROLE,
        )
        logger.info("Registered business %s (%s)", business.id, business.name)

        return Session(token=self._tokens.issue(user), user=user), business

    def login(self, email: str, password: str) -> Session:
        """
        Verify credentials and issue a token.

        Raises:
            AuthenticationError: If the email is unknown or the password is wrong
        """
        found = self._users.get_with_password_hash(email.lower())
        if found is None:
            raise AuthenticationError("Invalid email or password")

        user, password_hash = found
        if not self._hasher.verify(password, password_hash):
            raise AuthenticationError("Invalid email or password")

        return Session(token=self._tokens.issue(user), user=user)

    def set_timezone(self, business_id: int, timezone: str) -> Business:
        """
        Change the timezone used to interpret the business's working hours.

        Raises:
            ValidationError: If the timezone is unknown
            NotFoundError: If the business does not exist
        """
        if not is_valid_timezone(timezone):
            raise ValidationError(f"Unknown timezone: {timezone}")

        if not self._businesses.set_timezone(business_id, timezone):
            raise NotFoundError("Business not found")

        business = self._businesses.get(business_id)
        if business is None:
            raise NotFoundError("Business not found")
        return business
