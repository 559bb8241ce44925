from typing import ClassVar
from model.record import Record


class Target(Record):
    text: str
    completed: bool = False
    user_id: str

    collection: ClassVar[str] = "targets"
