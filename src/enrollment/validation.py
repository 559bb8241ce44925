from dataclasses import dataclass
from enum import Enum
from typing import Optional

from auth.provider import MIN_PASSWORD_LENGTH, normalize_email


class FailureKind(Enum):
    INVALID_INPUT = "invalid-input"
    DOMAIN_NOT_ALLOWED = "domain-not-allowed"
    AUTHENTICATION = "authentication"
    PROJECT_NOT_FOUND = "project-not-found"
    REGISTRATION_INCOMPLETE = "registration-incomplete"


@dataclass(frozen=True)
class EnrollmentFailure:
    kind: FailureKind
    message: str

    def __str__(self) -> str:
        return self.message


def email_domain(email: str) -> str:
    return normalize_email(email).partition("@")[2]


def validate_signup(name: str, email: str, password: str) -> Optional[str]:
    """Return the first problem with the signup form, if any."""
    if len(password) < MIN_PASSWORD_LENGTH:
        return f"Password must be at least {MIN_PASSWORD_LENGTH} characters long"
    if "@" not in email or "." not in email:
        return "Please enter a valid email address"
    if not name.strip():
        return "Please enter your full name"
    return None
