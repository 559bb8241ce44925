import logging
from typing import AbstractSet

from result import Err, Ok, Result

from auth.errors import AuthError
from auth.messages import signup_message
from auth.provider import AuthClient, normalize_email
from database.errors import StoreError
from database.store import DocumentStore
from enrollment.validation import (
    EnrollmentFailure,
    FailureKind,
    email_domain,
    validate_signup,
)
from model import USERS
from model.record import Role
from model.user import User

LOGGER = logging.getLogger(__name__)


class ClientSignup:
    """
    Self-service signup for company addresses. Addresses listed as admin
    emails may sign up from any domain and receive the admin role. The new
    session stays signed in.
    """

    def __init__(
        self,
        auth: AuthClient,
        store: DocumentStore,
        signup_domains: AbstractSet[str],
        admin_emails: AbstractSet[str] = frozenset(),
    ):
        self.auth = auth
        self.store = store
        self.signup_domains = {domain.lower() for domain in signup_domains}
        self.admin_emails = {normalize_email(email) for email in admin_emails}

    def allowed(self, email: str) -> bool:
        return (
            normalize_email(email) in self.admin_emails
            or email_domain(email) in self.signup_domains
        )

    async def signup(self, name: str, email: str, password: str) -> Result[Role, EnrollmentFailure]:
        problem = validate_signup(name, email, password)
        if problem:
            return Err(EnrollmentFailure(FailureKind.INVALID_INPUT, problem))
        if not self.allowed(email):
            return Err(
                EnrollmentFailure(
                    FailureKind.DOMAIN_NOT_ALLOWED,
                    "Access denied. Please use a company or partner email address.",
                )
            )

        try:
            session = await self.auth.create_credential(email, password)
        except AuthError as e:
            LOGGER.warning(f"Signup error: {e}")
            return Err(EnrollmentFailure(FailureKind.AUTHENTICATION, signup_message(e)))

        role: Role = "admin" if session.email in self.admin_emails else "client"
        user = User(name=name.strip(), email=session.email, role=role)
        try:
            await self.store.set(USERS, session.uid, user.to_document())
        except StoreError as e:
            LOGGER.error(f"Failed to create user document for {session.uid}: {e}")
            try:
                await self.auth.delete_current_credential()
            except AuthError as delete_error:
                LOGGER.error(f"Failed to delete credential after signup error: {delete_error}")
            return Err(
                EnrollmentFailure(
                    FailureKind.REGISTRATION_INCOMPLETE,
                    "Failed to complete registration. Please try again.",
                )
            )

        LOGGER.info(f"Created {role} account for {session.email}")
        return Ok(role)
