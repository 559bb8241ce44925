from typing import ClassVar
from model.record import Record


class Note(Record):
    title: str
    content: str = ""
    user_id: str

    collection: ClassVar[str] = "notes"
