import unittest
from unittest.mock import AsyncMock

from auth import errors
from auth.errors import AuthError
from auth.memory import MemoryAuthBackend
from auth.messages import login_message, signup_message
from auth.passwords import hash_password, verify_password
from auth.provider import AuthClient, Session


class TestPasswords(unittest.TestCase):
    def test_hash_and_verify(self):
        hashed = hash_password("secret1")
        assert hashed != "secret1"
        assert verify_password("secret1", hashed)
        assert not verify_password("secret2", hashed)

    def test_salted(self):
        assert hash_password("secret1") != hash_password("secret1")

    def test_unreadable_hash_fails(self):
        for stored in ("", "nohash", "zz$abcd", "$abcd"):
            assert not verify_password("secret1", stored)


class TestMessages(unittest.TestCase):
    def test_login_messages(self):
        assert login_message(AuthError(errors.WRONG_PASSWORD)) == "Incorrect password. Please try again."
        assert login_message(AuthError("auth/unknown")) == "Login failed. Please check your credentials."

    def test_signup_messages(self):
        assert (
            signup_message(AuthError(errors.EMAIL_IN_USE))
            == "This email is already registered. Please login instead."
        )
        assert (
            signup_message(AuthError("auth/internal", "boom"))
            == "Failed to create account. Please try again. Error: boom"
        )


class TestAuthClient(unittest.IsolatedAsyncioTestCase):
    def setUp(self):
        self.backend = MemoryAuthBackend()
        self.auth = AuthClient(self.backend)
        self.changes = AsyncMock()
        self.auth.on_session_changed(self.changes)

    async def test_create_signs_in(self):
        session = await self.auth.create_credential(" Ann@Web24.Agency ", "secret1")

        assert session.email == "ann@web24.agency"
        assert self.auth.current == session
        self.changes.assert_awaited_once_with(session)
        assert self.backend.has_user("ann@web24.agency")

    async def test_create_rejects_bad_input(self):
        for email, password, code in (
            ("nobody", "secret1", errors.INVALID_EMAIL),
            ("ann@web24.agency", "123", errors.WEAK_PASSWORD),
        ):
            with self.assertRaises(AuthError) as raised:
                await self.auth.create_credential(email, password)
            assert raised.exception.code == code
        self.changes.assert_not_awaited()

    async def test_sign_in_and_out(self):
        await self.auth.create_credential("ann@web24.agency", "secret1")
        await self.auth.sign_out()
        assert self.auth.current is None

        with self.assertRaises(AuthError) as raised:
            await self.auth.sign_in("ann@web24.agency", "wrong")
        assert raised.exception.code == errors.WRONG_PASSWORD

        session = await self.auth.sign_in("ann@web24.agency", "secret1")
        assert self.auth.current == session
        assert self.changes.await_count == 3

    async def test_sign_out_when_signed_out_is_silent(self):
        await self.auth.sign_out()
        self.changes.assert_not_awaited()

    async def test_email_in_use(self):
        await self.auth.create_credential("ann@web24.agency", "secret1")
        with self.assertRaises(AuthError) as raised:
            await self.auth.create_credential("ann@web24.agency", "secret2")
        assert raised.exception.code == errors.EMAIL_IN_USE

    async def test_delete_current_credential(self):
        await self.auth.create_credential("ann@web24.agency", "secret1")
        await self.auth.delete_current_credential()

        assert self.auth.current is None
        assert not self.backend.has_user("ann@web24.agency")
        with self.assertRaises(AuthError) as raised:
            await self.auth.delete_current_credential()
        assert raised.exception.code == errors.NO_CURRENT_USER

    async def test_removed_callback_is_not_called(self):
        other = AsyncMock()
        remove = self.auth.on_session_changed(other)
        remove()
        await self.auth.create_credential("ann@web24.agency", "secret1")
        other.assert_not_awaited()
        self.changes.assert_awaited_once_with(Session(uid=self.auth.current.uid, email="ann@web24.agency"))  # type: ignore
