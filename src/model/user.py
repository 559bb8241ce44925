from typing import ClassVar, Optional
from model.record import Record, Role


class User(Record):
    name: str = ""
    email: str = ""
    role: Role = "client"
    assigned_project_id: Optional[str] = None

    collection: ClassVar[str] = "users"

    @property
    def display_name(self) -> str:
        return self.name or self.email or "Unknown User"
