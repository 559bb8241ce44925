import logging
from dataclasses import dataclass
from enum import Enum
from typing import Dict, Iterable, List, Optional, Sequence

from result import Err, Ok, Result

from database.store import DocumentStore
from model import TASKS
from model.record import TaskStatus
from model.task import Task
from policy.permissions import Viewer, can_move_task

LOGGER = logging.getLogger(__name__)


@dataclass(frozen=True)
class Column:
    id: TaskStatus
    title: str


COLUMNS: Sequence[Column] = (
    Column("todo", "To Do"),
    Column("inprogress", "In Progress"),
    Column("done", "Done"),
)
COLUMN_IDS = tuple(column.id for column in COLUMNS)
STATUS_RANK: Dict[str, int] = {"todo": 1, "inprogress": 2, "done": 3}


@dataclass(frozen=True)
class Location:
    column: str
    index: int = 0


@dataclass(frozen=True)
class DropEvent:
    task_id: str
    source: Location
    destination: Optional[Location]


@dataclass(frozen=True)
class StatusChange:
    task_id: str
    previous: TaskStatus
    status: TaskStatus


class BoardError(Enum):
    TASK_NOT_FOUND = "Could not update task. Please refresh and try again."
    PERMISSION_DENIED = "You do not have permission to update this task."
    INVALID_COLUMN = "Invalid task status."


def sort_tasks(tasks: Iterable[Task]) -> List[Task]:
    """Order tasks by status rank. The sort is stable within a status."""
    return sorted(tasks, key=lambda task: STATUS_RANK.get(task.status, len(STATUS_RANK) + 1))


def group_tasks(tasks: Iterable[Task]) -> Dict[str, List[Task]]:
    columns: Dict[str, List[Task]] = {column.id: [] for column in COLUMNS}
    for task in tasks:
        columns.setdefault(task.status, []).append(task)
    return columns


def column_for(name: str) -> Optional[str]:
    """Match a column by id or title, ignoring case and spacing."""
    wanted = name.replace(" ", "").replace("-", "").lower()
    for column in COLUMNS:
        if wanted in (column.id, column.title.replace(" ", "").lower()):
            return column.id
    return None


def plan_move(
    viewer: Viewer, tasks: Sequence[Task], event: DropEvent
) -> Result[Optional[StatusChange], BoardError]:
    """
    Decide what a drop does. `Ok(None)` means nothing is written: the task was
    dropped outside a column or within its own column, since positions inside
    a column are not stored.
    """
    if event.destination is None:
        return Ok(None)
    if (
        event.destination.column == event.source.column
        and event.destination.index == event.source.index
    ):
        return Ok(None)

    task = next((task for task in tasks if task.id == event.task_id), None)
    if task is None:
        LOGGER.error(f"Task {event.task_id} not found on board")
        return Err(BoardError.TASK_NOT_FOUND)

    if not can_move_task(viewer, task):
        LOGGER.warning(f"User {viewer.user_id} ({viewer.role}) may not move task {task.id}")
        return Err(BoardError.PERMISSION_DENIED)

    if event.destination.column not in COLUMN_IDS:
        LOGGER.error(f"Invalid destination status {event.destination.column}")
        return Err(BoardError.INVALID_COLUMN)

    if event.destination.column == task.status:
        return Ok(None)

    return Ok(StatusChange(task.id, task.status, event.destination.column))  # type: ignore


async def apply_move(store: DocumentStore, change: StatusChange) -> None:
    LOGGER.info(f"Updating task {change.task_id} status from {change.previous} to {change.status}")
    await store.update(TASKS, change.task_id, {"status": change.status})
