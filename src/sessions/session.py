import logging
from typing import Dict, Hashable, Optional

from result import Err, Ok, Result

from auth.errors import AuthError
from auth.messages import login_message
from auth.provider import AuthBackend, AuthClient, Session
from config import Settings
from database.store import DocumentStore
from enrollment.client import ClientSignup
from enrollment.partner import PartnerEnrollment
from enrollment.validation import EnrollmentFailure
from identity.context import Identity, IdentityContext
from identity.resolver import IdentityResolver
from model.record import Role
from views.base import View

LOGGER = logging.getLogger(__name__)


class UserSession:
    """
    Everything one chat user has open: their auth client, the identity it
    resolved to and the live views bound to that identity. Any session change
    closes every view before the identity is replaced.
    """

    store: DocumentStore
    settings: Settings
    auth: AuthClient
    context: IdentityContext
    resolver: IdentityResolver
    views: Dict[str, View]

    def __init__(self, store: DocumentStore, backend: AuthBackend, settings: Settings):
        self.store = store
        self.settings = settings
        self.auth = AuthClient(backend)
        self.context = IdentityContext()
        self.resolver = IdentityResolver(store, fail_closed=settings.identity_fail_closed)
        self.views = {}
        self.auth.on_session_changed(self._session_changed)

    @property
    def identity(self) -> Optional[Identity]:
        return self.context.current

    async def _session_changed(self, session: Optional[Session]):
        await self.close_views()
        if session is None:
            self.context.clear()
            return
        self.context.set(await self.resolver.resolve(session))

    async def refresh_identity(self) -> Optional[Identity]:
        if self.auth.current is None:
            return None
        identity = await self.resolver.resolve(self.auth.current)
        if identity != self.context.current:
            await self.close_views()
            self.context.set(identity)
        return identity

    async def login(self, email: str, password: str) -> Result[Identity, str]:
        if not email or not password:
            return Err("Please enter both email and password")
        if self.identity is not None:
            return Err(f"You are already logged in as {self.identity.email}.")
        try:
            await self.auth.sign_in(email, password)
        except AuthError as e:
            LOGGER.warning(f"Login error: {e}")
            return Err(login_message(e))
        LOGGER.info(f"Logged in {email}")
        return Ok(self.identity)  # type: ignore

    async def logout(self) -> Result[None, str]:
        if self.identity is None:
            return Err("You are not logged in.")
        await self.auth.sign_out()
        return Ok(None)

    async def signup(self, name: str, email: str, password: str) -> Result[Role, EnrollmentFailure]:
        flow = ClientSignup(
            self.auth,
            self.store,
            self.settings.signup_domains,
            self.settings.admin_emails,
        )
        result = await flow.signup(name, email, password)
        if result.is_ok():
            await self.refresh_identity()
        return result

    async def enroll_partner(
        self, name: str, email: str, password: str, project: str
    ) -> Result[str, EnrollmentFailure]:
        flow = PartnerEnrollment(
            self.auth,
            self.store,
            self.settings.partner_domain,
            retries=self.settings.enrollment_retries,
            backoff=self.settings.enrollment_backoff,
        )
        return await flow.enroll(name, email, password, project)

    async def open_view(self, key: str, view: View) -> View:
        await self.close_view(key)
        self.views[key] = view
        await view.open()
        return view

    async def close_view(self, key: str):
        view = self.views.pop(key, None)
        if view is not None:
            await view.close()

    async def close_views(self):
        for key in list(self.views):
            await self.close_view(key)


class SessionRegistry:
    """One `UserSession` per chat user, created on first use."""

    def __init__(self, store: DocumentStore, backend: AuthBackend, settings: Settings):
        self.store = store
        self.backend = backend
        self.settings = settings
        self.sessions: Dict[Hashable, UserSession] = {}

    def get(self, user: Hashable) -> UserSession:
        if user not in self.sessions:
            self.sessions[user] = UserSession(self.store, self.backend, self.settings)
        return self.sessions[user]

    async def close(self):
        for session in self.sessions.values():
            await session.close_views()
            await session.auth.sign_out()
        self.sessions.clear()
