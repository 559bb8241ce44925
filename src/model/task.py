from datetime import datetime
from typing import ClassVar, Optional
from model.record import Record, TaskStatus


class Task(Record):
    title: str
    description: str = ""
    status: TaskStatus = "todo"
    assigned_to: str
    project_id: Optional[str] = None
    deadline: Optional[datetime] = None

    collection: ClassVar[str] = "tasks"
