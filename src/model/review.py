from typing import ClassVar
from model.record import Record, Role


class Review(Record):
    project_id: str
    text: str
    author_id: str
    author_role: Role

    collection: ClassVar[str] = "reviews"
