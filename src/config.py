import os
from dataclasses import dataclass, field
from typing import FrozenSet, Optional

from dotenv import load_dotenv


def _split(value: Optional[str]) -> FrozenSet[str]:
    if not value:
        return frozenset()
    return frozenset(part.strip().lower() for part in value.split(",") if part.strip())


def _flag(value: Optional[str]) -> bool:
    return (value or "").strip().lower() in ("1", "true", "yes", "on")


@dataclass(frozen=True)
class Settings:
    environment: str = "local"
    discord_token: Optional[str] = None
    mongo_url: str = "mongodb://localhost:27017/?replicaSet=rs0"
    mongo_db: str = "taskboard"
    sentry_dsn: Optional[str] = None

    partner_domain: str = "web24partner.com"
    signup_domains: FrozenSet[str] = field(
        default_factory=lambda: frozenset({"web24.agency", "web24partner.com"})
    )
    admin_emails: FrozenSet[str] = frozenset()

    enrollment_retries: int = 3
    enrollment_backoff: float = 2.0

    # When set, a signed-in user without a readable `users` document gets no
    # role at all instead of the client role.
    identity_fail_closed: bool = False

    @property
    def development(self) -> bool:
        return self.environment == "development"

    @property
    def production(self) -> bool:
        return self.environment == "production"

    @classmethod
    def from_env(cls) -> "Settings":
        load_dotenv()
        defaults = cls()
        return cls(
            environment=os.getenv("ENVIRONMENT") or defaults.environment,
            discord_token=os.getenv("DISCORD_TOKEN"),
            mongo_url=os.getenv("MONGO_URL") or defaults.mongo_url,
            mongo_db=os.getenv("MONGO_DB") or defaults.mongo_db,
            sentry_dsn=os.getenv("SENTRY_DSN"),
            partner_domain=(os.getenv("PARTNER_DOMAIN") or defaults.partner_domain).lower(),
            signup_domains=_split(os.getenv("SIGNUP_DOMAINS")) or defaults.signup_domains,
            admin_emails=_split(os.getenv("ADMIN_EMAILS")),
            enrollment_retries=int(os.getenv("ENROLLMENT_RETRIES") or defaults.enrollment_retries),
            enrollment_backoff=float(os.getenv("ENROLLMENT_BACKOFF") or defaults.enrollment_backoff),
            identity_fail_closed=_flag(os.getenv("IDENTITY_FAIL_CLOSED")),
        )
