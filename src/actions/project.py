import logging
from dataclasses import dataclass
from typing import ClassVar, List

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from actions.lookup import find_project, member_projects
from database.errors import StoreError, describe_error
from database.store import Query
from model import PROJECTS, REVIEWS, TASKS, USERS
from model.project import Project

LOGGER = logging.getLogger(__name__)


@dataclass
class Cascade:
    project: Project
    tasks: int = 0
    reviews: int = 0
    partners: int = 0


class ProjectNew(Action):
    name: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if viewer(ctx).role != "admin":
            return Err("Permission denied: you cannot create projects.")
        if not self.name.strip():
            return Err("Project name is required")
        try:
            existing = await ctx.store.query(Query(PROJECTS).filter("name", self.name.strip()))
        except StoreError as e:
            return Err(describe_error(e, "create projects"))
        if existing:
            return Err(f"Project {self.name.strip()} already exists.")
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Project, StoreError]:
        project = Project(name=self.name.strip())
        try:
            project.id = await ctx.store.add(PROJECTS, project.to_document())
            return Ok(project)
        except StoreError as e:
            LOGGER.error(f"Error adding project: {e}")
            return Err(e)

    def execute_wrap(self, result: Result[Project, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "create projects"))
        return Ok(f"Project {result.unwrap().name} created.")

    def __str__(self) -> str:
        return f"**New project**: {self.name}"


class ProjectDelete(Action):
    """
    Delete a project together with its tasks and reviews. Partners assigned
    to it keep their account but lose the link.
    """

    project: str

    unsafe: ClassVar[bool] = True

    async def preflight(self, ctx: Context) -> Result[Project, str]:
        if viewer(ctx).role != "admin":
            return Err("Permission denied: you cannot delete projects.")
        try:
            project = await find_project(ctx.store, self.project)
        except StoreError as e:
            return Err(describe_error(e, "delete this project"))
        if project is None:
            return Err(f"Project {self.project} not found.")
        self._memo["project"] = project
        return Ok(project)

    def preflight_wrap(self, result: Result[Project, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Cascade, StoreError]:
        project: Project = self._memo["project"]
        cascade = Cascade(project)
        try:
            for task in await ctx.store.query(Query(TASKS).filter("projectId", project.id)):
                await ctx.store.delete(TASKS, task["id"])
                cascade.tasks += 1
            for review in await ctx.store.query(Query(REVIEWS).filter("projectId", project.id)):
                await ctx.store.delete(REVIEWS, review["id"])
                cascade.reviews += 1
            for user in await ctx.store.query(Query(USERS).filter("assignedProjectId", project.id)):
                await ctx.store.update(USERS, user["id"], {"assignedProjectId": None})
                cascade.partners += 1
            await ctx.store.delete(PROJECTS, project.id)
        except StoreError as e:
            LOGGER.error(f"Error deleting project {project.id}: {e}")
            return Err(e)
        LOGGER.info(
            f"Deleted project {project.id} with {cascade.tasks} tasks and {cascade.reviews} reviews"
        )
        return Ok(cascade)

    def execute_wrap(self, result: Result[Cascade, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "delete this project"))
        cascade = result.unwrap()
        return Ok(
            f"Project {cascade.project.name} deleted along with {cascade.tasks} tasks and {cascade.reviews} reviews."
        )

    def __str__(self) -> str:
        return f"**Delete project** {self.project} and all its tasks and reviews"


class ProjectList(Action):
    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if viewer(ctx).role is None:
            return Err("Permission denied: you cannot view projects.")
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[Project], StoreError]:
        me = viewer(ctx)
        try:
            projects = [
                Project.model_validate(document)
                for document in await ctx.store.query(Query(PROJECTS))
            ]
            if me.role == "client":
                members = await member_projects(ctx.store, me.user_id)
                projects = [project for project in projects if project.id in members]
            elif me.role == "partner":
                projects = [p for p in projects if p.id == me.assigned_project_id]
        except StoreError as e:
            return Err(e)
        return Ok(projects)

    def execute_wrap(self, result: Result[List[Project], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load projects"))
        projects = result.unwrap()
        if len(projects) == 0:
            return Ok("No projects found.")
        return Ok("**Projects**:\n" + "\n".join(f"- `{p.id}` {p.name}" for p in projects))

    def __str__(self) -> str:
        return "**List projects**"
