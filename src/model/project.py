from typing import ClassVar
from model.record import Record


class Project(Record):
    name: str

    collection: ClassVar[str] = "projects"
