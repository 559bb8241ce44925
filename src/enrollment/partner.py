import asyncio
import logging
from typing import Awaitable, Callable

from result import Err, Ok, Result

from auth.errors import AuthError
from auth.messages import signup_message
from auth.provider import AuthClient, normalize_email
from database.errors import PermissionDenied, StoreError
from database.store import DocumentStore, Query
from enrollment.validation import (
    EnrollmentFailure,
    FailureKind,
    email_domain,
    validate_signup,
)
from model import PROJECTS, USERS
from model.user import User

LOGGER = logging.getLogger(__name__)

PROJECT_NOT_FOUND = "Project not found. Please check the Project Name/Code with the Admin."
UNABLE_TO_VALIDATE = "Unable to validate project. Please contact the Admin or try again later."
INCOMPLETE = "Failed to complete registration. Please try again or contact support."


class PartnerEnrollment:
    """
    Sign a partner up and link them to an existing project.

    The credential has to exist before the project can be looked up, so every
    failure after it is created deletes it again: an enrollment either ends
    with a credential, a `users` document and a project link, or with none of
    them. A successful enrollment leaves the client signed out.
    """

    auth: AuthClient
    store: DocumentStore
    partner_domain: str
    retries: int
    backoff: float

    def __init__(
        self,
        auth: AuthClient,
        store: DocumentStore,
        partner_domain: str,
        retries: int = 3,
        backoff: float = 2.0,
        sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
    ):
        self.auth = auth
        self.store = store
        self.partner_domain = partner_domain.lower()
        self.retries = retries
        self.backoff = backoff
        self.sleep = sleep

    async def enroll(
        self, name: str, email: str, password: str, project: str
    ) -> Result[str, EnrollmentFailure]:
        problem = validate_signup(name, email, password)
        if problem is None and not project.strip():
            problem = "Please enter the Project Name or Code provided by the Admin"
        if problem:
            return Err(EnrollmentFailure(FailureKind.INVALID_INPUT, problem))

        if email_domain(email) != self.partner_domain:
            return Err(
                EnrollmentFailure(
                    FailureKind.DOMAIN_NOT_ALLOWED,
                    f"Access denied. Please use a @{self.partner_domain} email address.",
                )
            )

        try:
            session = await self.auth.create_credential(email, password)
        except AuthError as e:
            LOGGER.warning(f"Partner credential creation failed: {e}")
            return Err(EnrollmentFailure(FailureKind.AUTHENTICATION, signup_message(e)))
        LOGGER.info(f"Credential created for {session.email}, validating project")

        lookup = await self._find_project(project.strip())
        if lookup.is_err():
            await self._rollback()
            return Err(lookup.unwrap_err())
        project_id = lookup.unwrap()

        user = User(
            name=name.strip(),
            email=normalize_email(email),
            role="partner",
            assigned_project_id=project_id,
        )
        try:
            await self.store.set(USERS, session.uid, user.to_document())
        except StoreError as e:
            LOGGER.error(f"Failed to create user document for {session.uid}: {e}")
            await self._rollback()
            return Err(EnrollmentFailure(FailureKind.REGISTRATION_INCOMPLETE, INCOMPLETE))

        LOGGER.info(f"Partner account created for project {project_id}")
        await self.auth.sign_out()
        return Ok(project_id)

    async def _find_project(self, name: str) -> Result[str, EnrollmentFailure]:
        query = Query(PROJECTS).filter("name", name)
        for attempt in range(1, self.retries + 1):
            try:
                documents = await self.store.query(query)
            except PermissionDenied:
                # The new credential may not be visible to access control yet.
                LOGGER.warning(f"Project lookup attempt {attempt} was denied")
                if attempt < self.retries:
                    await self.sleep(self.backoff)
                    continue
                break
            except StoreError as e:
                LOGGER.error(f"Project lookup attempt {attempt} failed: {e}")
                break

            if not documents:
                LOGGER.info(f"No project found with name: {name}")
                return Err(EnrollmentFailure(FailureKind.PROJECT_NOT_FOUND, PROJECT_NOT_FOUND))
            return Ok(documents[0]["id"])

        return Err(EnrollmentFailure(FailureKind.REGISTRATION_INCOMPLETE, UNABLE_TO_VALIDATE))

    async def _rollback(self):
        try:
            await self.auth.delete_current_credential()
        except AuthError as e:
            LOGGER.error(f"Failed to delete credential after failed enrollment: {e}")
