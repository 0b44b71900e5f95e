"""User service for registration, lookup and credential checks."""

import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from verses.auth.passwords import DUMMY_HASH, hash_password, password_problems, verify_password
from verses.db.models import User

logger = logging.getLogger(__name__)


class RegistrationError(Exception):
    """Raised when an account cannot be created from the given details."""


def normalize_email(email: str) -> str:
    return email.strip().lower()


async def get_user_by_id(db_session: AsyncSession, user_id: str) -> User | None:
    result = await db_session.execute(select(User).where(User.id == user_id))
    return result.scalar_one_or_none()


async def get_user_by_email(db_session: AsyncSession, email: str) -> User | None:
    result = await db_session.execute(select(User).where(User.email == normalize_email(email)))
    return result.scalar_one_or_none()


async def register_user(
    db_session: AsyncSession,
    email: str,
    password: str,
    display_name: str,
) -> User:
    """Create an account.

    Raises:
        RegistrationError: If the email is taken or the password is too weak
    """
    if await get_user_by_email(db_session, email):
        raise RegistrationError("Email already registered")

    problems = password_problems(password)
    if problems:
        raise RegistrationError(" ".join(problems))

    user = User(
        email=normalize_email(email),
        display_name=display_name,
        password_hash=hash_password(password),
    )
    db_session.add(user)
    try:
        await db_session.commit()
    except IntegrityError as exc:
        await db_session.rollback()
        raise RegistrationError("Email already registered") from exc
    await db_session.refresh(user)

    logger.info("Registered user %s", user.id)
    return user


async def authenticate(db_session: AsyncSession, email: str, password: str) -> User | None:
    """Return the user if the credentials match, else None."""
    user = await get_user_by_email(db_session, email)
    if user is None:
        verify_password(password, DUMMY_HASH)
        return None
    if not verify_password(password, user.password_hash):
        return None
    return user
