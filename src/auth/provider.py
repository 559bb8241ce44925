import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Awaitable, Callable, List, Optional

from auth import errors
from auth.errors import AuthError

LOGGER = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

SessionCallback = Callable[[Optional["Session"]], Awaitable[None]]


@dataclass(frozen=True)
class Session:
    uid: str
    email: str


class AuthBackend(ABC):
    """Credential storage behind an `AuthClient`."""

    @abstractmethod
    async def create_user(self, email: str, password: str) -> str:
        pass

    @abstractmethod
    async def verify(self, email: str, password: str) -> str:
        pass

    @abstractmethod
    async def delete_user(self, uid: str) -> None:
        pass


def normalize_email(email: str) -> str:
    return email.strip().lower()


class AuthClient:
    """
    One signed-in (or signed-out) client of the authentication provider.
    Session changes are announced to every registered callback, in order,
    before the call that caused them returns.
    """

    backend: AuthBackend
    current: Optional[Session]
    callbacks: List[SessionCallback]

    def __init__(self, backend: AuthBackend):
        self.backend = backend
        self.current = None
        self.callbacks = []

    def on_session_changed(self, callback: SessionCallback) -> Callable[[], None]:
        self.callbacks.append(callback)

        def remove():
            if callback in self.callbacks:
                self.callbacks.remove(callback)

        return remove

    async def _change(self, session: Optional[Session]):
        self.current = session
        LOGGER.debug(f"Session changed: {session.email if session else 'No user'}")
        for callback in list(self.callbacks):
            await callback(session)

    async def create_credential(self, email: str, password: str) -> Session:
        email = normalize_email(email)
        if "@" not in email:
            raise AuthError(errors.INVALID_EMAIL)
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(errors.WEAK_PASSWORD)
        uid = await self.backend.create_user(email, password)
        session = Session(uid=uid, email=email)
        await self._change(session)
        return session

    async def sign_in(self, email: str, password: str) -> Session:
        email = normalize_email(email)
        uid = await self.backend.verify(email, password)
        session = Session(uid=uid, email=email)
        await self._change(session)
        return session

    async def sign_out(self) -> None:
        if self.current is None:
            return
        await self._change(None)

    async def delete_current_credential(self) -> None:
        if self.current is None:
            raise AuthError(errors.NO_CURRENT_USER)
        await self.backend.delete_user(self.current.uid)
        await self._change(None)
