"""
User accounts: registration, login and lookup of the authenticated user.
"""
import hashlib
import logging
from urllib.parse import urlencode

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from devlink.config import Settings
from devlink.errors import DuplicateEmail, InvalidCredentials, Unauthorized
from devlink.models import User
from devlink.security import (
    Identity,
    create_access_token,
    hash_password,
    verify_password,
)
from devlink.services.base import commit

logger = logging.getLogger(__name__)


def gravatar_url(email: str) -> str:
    digest = hashlib.md5(email.strip().lower().encode("utf-8")).hexdigest()
    return f"https://www.gravatar.com/avatar/{digest}?" + urlencode(
        {"s": "200", "r": "pg", "d": "mm"}
    )


class UserService:
    def __init__(self, session: AsyncSession, settings: Settings) -> None:
        self.session = session
        self.settings = settings

    async def register(self, name: str, email: str, password: str) -> str:
        """Create the account and return a fresh access token."""
        email = email.lower()
        existing = await self.session.execute(select(User).where(User.email == email))
        if existing.scalar_one_or_none():
            raise DuplicateEmail()

        user = User(
            name=name,
            email=email,
            password=hash_password(password),
            avatar=gravatar_url(email),
        )
        self.session.add(user)
        try:
            await self.session.flush()
        except IntegrityError:
            # lost a race with a concurrent registration of the same email
            await self.session.rollback()
            raise DuplicateEmail()
        await commit(self.session, "user")

        logger.info("Registered user %s (id=%s)", user.email, user.id)
        return create_access_token(Identity(id=user.id, name=user.name), self.settings)

    async def authenticate(self, email: str, password: str) -> str:
        rows = await self.session.execute(select(User).where(User.email == email.lower()))
        user = rows.scalar_one_or_none()
        if user is None or not verify_password(password, user.password):
            logger.info("Failed login for %s", email)
            raise InvalidCredentials()
        return create_access_token(Identity(id=user.id, name=user.name), self.settings)

    async def get_user(self, identity: Identity) -> User:
        user = await self.session.get(User, identity.id)
        if user is None:
            # token outlived its account (cascade delete)
            raise Unauthorized("User no longer exists")
        return user
