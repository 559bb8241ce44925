import logging
from typing import Optional

from pydantic import ValidationError

from auth.provider import Session
from database.errors import StoreError
from database.store import DocumentStore
from identity.context import Identity
from model import USERS
from model.record import Role
from model.user import User

LOGGER = logging.getLogger(__name__)


class IdentityResolver:
    """
    Loads the `users` document of a session. Without a readable document the
    identity falls back to the client role, or to no role when `fail_closed`.
    """

    store: DocumentStore
    fail_closed: bool

    def __init__(self, store: DocumentStore, fail_closed: bool = False):
        self.store = store
        self.fail_closed = fail_closed

    def _default(self, session: Session) -> Identity:
        role: Optional[Role] = None if self.fail_closed else "client"
        return Identity(user_id=session.uid, email=session.email, role=role)

    async def resolve(self, session: Session) -> Identity:
        try:
            document = await self.store.get(USERS, session.uid)
        except StoreError as e:
            LOGGER.error(f"Error fetching user data for {session.uid}: {e}")
            return self._default(session)

        if document is None:
            LOGGER.info(f"No user document found for {session.uid}, using default role")
            return self._default(session)

        try:
            user = User.model_validate(document)
        except ValidationError as e:
            LOGGER.error(f"Invalid user document {session.uid}: {e}")
            return self._default(session)

        LOGGER.debug(f"User data loaded: {user.role}")
        return Identity(
            user_id=session.uid,
            email=user.email or session.email,
            role=user.role,
            assigned_project_id=user.assigned_project_id if user.role == "partner" else None,
            name=user.name,
        )
