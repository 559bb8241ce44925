from datetime import date, datetime
import logging
from typing import ClassVar, List, Optional

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from actions.lookup import find_project, find_user, member_projects
from board.board import (
    COLUMNS,
    BoardError,
    DropEvent,
    Location,
    StatusChange,
    apply_move,
    column_for,
    plan_move,
    sort_tasks,
)
from database.errors import StoreError, describe_error
from database.store import Query
from model import TASKS
from model.task import Task
from policy.permissions import can_create_task, can_delete_task, can_view_task

LOGGER = logging.getLogger(__name__)

COLUMN_TITLES = {column.id: column.title for column in COLUMNS}


def format_task(task: Task, assignee: Optional[str] = None) -> str:
    deadline = f" *(due {task.deadline.strftime('%Y-%m-%d')})*" if task.deadline else ""
    who = f" - {assignee}" if assignee else ""
    return f"- `{task.id}` [{COLUMN_TITLES.get(task.status, task.status)}] {task.title}{who}{deadline}"


class TaskNew(Action):
    """
    Admins assign the task to any client and must name its project. Clients
    create tasks for themselves, optionally inside a project.
    """

    title: str
    project: Optional[str] = None
    assignee: Optional[str] = None

    description: str = ""
    deadline: Optional[datetime] = None

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if not self.title.strip():
            return Err("Task title is required")
        me = viewer(ctx)
        try:
            if me.role == "admin":
                if not self.assignee:
                    return Err("Please select a client to assign the task to")
                if not self.project:
                    return Err("Please select a project for the task")
                client = await find_user(ctx.store, self.assignee, role="client")
                if client is None:
                    return Err("Selected client is not valid. Please select a client from the list.")
                self._memo["assignee"] = client.id
            else:
                if not can_create_task(me):
                    return Err("Permission denied: you cannot add tasks.")
                if self.assignee:
                    other = await find_user(ctx.store, self.assignee)
                    if other is None or not can_create_task(me, other.id):
                        return Err("You can only create tasks for yourself.")
                self._memo["assignee"] = me.user_id

            self._memo["project"] = None
            if self.project:
                project = await find_project(ctx.store, self.project)
                if project is None:
                    return Err(f"Project {self.project} not found.")
                if me.role == "client" and project.id not in await member_projects(ctx.store, me.user_id):
                    LOGGER.warning(f"Client {me.user_id} tried to add a task to project {project.id}")
                    return Err("You can only add tasks to projects you are part of.")
                self._memo["project"] = project.id
        except StoreError as e:
            return Err(describe_error(e, "add tasks"))
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Task, StoreError]:
        task = Task(
            title=self.title.strip(),
            description=self.description,
            assigned_to=self._memo["assignee"],
            project_id=self._memo["project"],
            deadline=self.deadline,
        )
        try:
            task.id = await ctx.store.add(TASKS, task.to_document())
            return Ok(task)
        except StoreError as e:
            LOGGER.error(f"Error adding task: {e}")
            return Err(e)

    def execute_wrap(self, result: Result[Task, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "add tasks"))
        return Ok(f"Task {result.unwrap().title} created.")

    def __str__(self) -> str:
        return f"**New task**: {self.title}{f" - {self.description}" if self.description else ''}"


class TaskMove(Action):
    """Move a task to another column. Only the status is written."""

    task: str
    column: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Optional[StatusChange], str]:
        try:
            document = await ctx.store.get(TASKS, self.task)
        except StoreError as e:
            return Err(describe_error(e, "update this task"))
        if document is None:
            return Err(BoardError.TASK_NOT_FOUND.value)
        task = Task.model_validate(document)

        destination = column_for(self.column) or self.column
        event = DropEvent(task.id, Location(task.status), Location(destination))
        plan = plan_move(viewer(ctx), [task], event)
        if plan.is_err():
            error: BoardError = plan.unwrap_err()
            return Err(error.value)

        self._memo["task"] = task
        self._memo["change"] = plan.unwrap()
        return Ok(plan.unwrap())

    def preflight_wrap(self, result: Result[Optional[StatusChange], str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Optional[StatusChange], StoreError]:
        change: Optional[StatusChange] = self._memo["change"]
        if change is None:
            return Ok(None)
        try:
            await apply_move(ctx.store, change)
            return Ok(change)
        except StoreError as e:
            LOGGER.error(f"Error updating task status: {e}")
            return Err(e)

    def execute_wrap(self, result: Result[Optional[StatusChange], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "update this task"))
        task: Task = self._memo["task"]
        change = result.unwrap()
        if change is None:
            return Ok(f"Task {task.title} is already in {COLUMN_TITLES[task.status]}.")
        return Ok(f"Moved {task.title} to {COLUMN_TITLES[change.status]}.")

    def __str__(self) -> str:
        return f"**Move task** to {self.column}"


class TaskDelete(Action):
    task: str

    unsafe: ClassVar[bool] = True

    async def preflight(self, ctx: Context) -> Result[Task, str]:
        if not can_delete_task(viewer(ctx)):
            return Err("Permission denied: you cannot delete tasks.")
        try:
            document = await ctx.store.get(TASKS, self.task)
        except StoreError as e:
            return Err(describe_error(e, "delete this task"))
        if document is None:
            return Err(f"Task {self.task} not found.")
        self._memo["task"] = Task.model_validate(document)
        return Ok(self._memo["task"])

    def preflight_wrap(self, result: Result[Task, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Task, StoreError]:
        task = self._memo["task"]
        try:
            await ctx.store.delete(TASKS, task.id)
            return Ok(task)
        except StoreError as e:
            return Err(e)

    def execute_wrap(self, result: Result[Task, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "delete this task"))
        return Ok(f"Task {result.unwrap().title} deleted.")

    def __str__(self) -> str:
        return "**Delete task**"


class TaskList(Action):
    """Tasks the caller can see, optionally only the unfinished ones due on `due`."""

    project: Optional[str] = None
    due: Optional[date] = None

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        me = viewer(ctx)
        query = Query(TASKS)
        if me.role == "client":
            query = query.filter("assignedTo", me.user_id)
        elif me.role == "partner":
            if not me.assigned_project_id:
                return Err("No project has been assigned to you yet.")
            query = query.filter("projectId", me.assigned_project_id)
        elif me.role != "admin":
            return Err("Permission denied: you cannot view tasks.")

        self._memo["title"] = "Tasks due today" if self.due else "Tasks"
        if self.project:
            try:
                project = await find_project(ctx.store, self.project)
            except StoreError as e:
                return Err(describe_error(e, "load tasks"))
            if project is None:
                return Err(f"Project {self.project} not found.")
            query = query.filter("projectId", project.id)
            self._memo["title"] = f"Tasks for {project.name}"
        self._memo["query"] = query
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[Task], StoreError]:
        me = viewer(ctx)
        try:
            documents = await ctx.store.query(self._memo["query"])
        except StoreError as e:
            return Err(e)
        tasks = [Task.model_validate(document) for document in documents]
        if self.due is not None:
            tasks = [
                task
                for task in tasks
                if task.deadline and task.deadline.date() == self.due and task.status != "done"
            ]
        return Ok(sort_tasks(task for task in tasks if can_view_task(me, task)))

    def execute_wrap(self, result: Result[List[Task], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load tasks"))
        tasks = result.unwrap()
        if len(tasks) == 0:
            return Ok("No tasks due today." if self.due else "No tasks found.")
        return Ok(f"**{self._memo['title']}**:\n" + "\n".join(format_task(task) for task in tasks))

    def __str__(self) -> str:
        return f"**List tasks**{f" for {self.project}" if self.project else ''}"
