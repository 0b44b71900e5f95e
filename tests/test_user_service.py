"""Tests for registration and credential checks."""

import pytest

from verses.auth.passwords import verify_password
from verses.db.services.user_service import (
    RegistrationError,
    authenticate,
    get_user_by_email,
    get_user_by_id,
    register_user,
)


class TestRegisterUser:
    async def test_creates_user_with_hashed_password(self, db_session):
        user = await register_user(db_session, "ada@verses.io", "lovelace1", "Ada")

        assert user.id
        assert user.display_name == "Ada"
        assert user.password_hash != "lovelace1"
        assert verify_password("lovelace1", user.password_hash)
        assert user.created_at is not None

    async def test_email_is_normalized(self, db_session):
        user = await register_user(db_session, "  Ada@Verses.IO ", "lovelace1", "Ada")
        assert user.email == "ada@verses.io"

    async def test_duplicate_email_rejected(self, db_session):
        await register_user(db_session, "ada@verses.io", "lovelace1", "Ada")

        with pytest.raises(RegistrationError, match="Email already registered"):
            await register_user(db_session, "ADA@verses.io", "another1", "Imposter")

    @pytest.mark.parametrize("password", ["short", "nodigits", "UPPER123"])
    async def test_weak_password_rejected(self, db_session, password):
        with pytest.raises(RegistrationError):
            await register_user(db_session, "ada@verses.io", password, "Ada")

        assert await get_user_by_email(db_session, "ada@verses.io") is None


class TestLookups:
    async def test_get_by_id(self, db_session, make_user):
        user = await make_user()
        found = await get_user_by_id(db_session, user.id)
        assert found.id == user.id

    async def test_get_by_id_missing(self, db_session):
        assert await get_user_by_id(db_session, "missing") is None

    async def test_get_by_email_case_insensitive(self, db_session, make_user):
        user = await make_user(email="bob@verses.io")
        found = await get_user_by_email(db_session, "BOB@verses.io")
        assert found.id == user.id


class TestAuthenticate:
    async def test_valid_credentials(self, db_session):
        user = await register_user(db_session, "ada@verses.io", "lovelace1", "Ada")
        assert (await authenticate(db_session, "ada@verses.io", "lovelace1")).id == user.id

    async def test_wrong_password(self, db_session):
        await register_user(db_session, "ada@verses.io", "lovelace1", "Ada")
        assert await authenticate(db_session, "ada@verses.io", "wrong1") is None

    async def test_unknown_email(self, db_session):
        assert await authenticate(db_session, "ghost@verses.io", "whatever1") is None
