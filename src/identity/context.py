from dataclasses import dataclass
from typing import Optional

from model.record import Role


@dataclass(frozen=True)
class Identity:
    user_id: str
    email: str
    role: Optional[Role]
    assigned_project_id: Optional[str] = None
    name: str = ""

    @property
    def is_admin(self) -> bool:
        return self.role == "admin"

    @property
    def display_name(self) -> str:
        return self.name or self.email


class IdentityContext:
    """
    The identity of whoever is signed in on one client. It is set from the
    login callback and cleared from the logout callback; views receive it
    explicitly instead of reading a global.
    """

    current: Optional[Identity]

    def __init__(self):
        self.current = None

    def set(self, identity: Identity):
        self.current = identity

    def clear(self):
        self.current = None

    @property
    def signed_in(self) -> bool:
        return self.current is not None
