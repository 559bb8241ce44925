import logging
from typing import AbstractSet, ClassVar, List, Optional

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from actions.lookup import find_project, member_projects
from database.errors import StoreError, describe_error
from database.store import Query
from model import REVIEWS
from model.project import Project
from model.review import Review
from policy.permissions import can_add_review, can_delete_review, can_view_reviews

LOGGER = logging.getLogger(__name__)


async def resolve_project(ctx: Context, project: Optional[str]) -> Result[Project, str]:
    """The named project, or the partner's own project when none is named."""
    me = viewer(ctx)
    name = project or (me.assigned_project_id if me.role == "partner" else None)
    if not name:
        return Err("No project selected.")
    found = await find_project(ctx.store, name)
    if found is None:
        return Err(f"Project {name} not found.")
    return Ok(found)


class ReviewAdd(Action):
    text: str
    project: Optional[str] = None

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Project, str]:
        if not self.text.strip():
            return Err("Review text is required")
        try:
            project = await resolve_project(ctx, self.project)
        except StoreError as e:
            return Err(describe_error(e, "add reviews"))
        if project.is_err():
            return Err(project.unwrap_err())
        if not can_add_review(viewer(ctx), project.unwrap().id):
            LOGGER.warning(
                f"User {viewer(ctx).user_id} tried to review project {project.unwrap().id}"
            )
            return Err("Partners can only add reviews to their assigned projects")
        self._memo["project"] = project.unwrap()
        return Ok(project.unwrap())

    def preflight_wrap(self, result: Result[Project, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Review, StoreError]:
        me = viewer(ctx)
        review = Review(
            project_id=self._memo["project"].id,
            text=self.text.strip(),
            author_id=me.user_id,
            author_role="partner",
        )
        try:
            review.id = await ctx.store.add(REVIEWS, review.to_document())
        except StoreError as e:
            LOGGER.error(f"Error adding review: {e}")
            return Err(e)
        return Ok(review)

    def execute_wrap(self, result: Result[Review, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "add reviews"))
        return Ok("Review added successfully!")

    def __str__(self) -> str:
        return f"**Add review**: {self.text}"


class ReviewDelete(Action):
    review: str

    unsafe: ClassVar[bool] = True

    async def preflight(self, ctx: Context) -> Result[Review, str]:
        if not can_delete_review(viewer(ctx)):
            return Err("Permission denied: you cannot delete this review.")
        try:
            document = await ctx.store.get(REVIEWS, self.review)
        except StoreError as e:
            return Err(describe_error(e, "delete this review"))
        if document is None:
            return Err(f"Review {self.review} not found.")
        self._memo["review"] = Review.model_validate(document)
        return Ok(self._memo["review"])

    def preflight_wrap(self, result: Result[Review, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Review, StoreError]:
        review: Review = self._memo["review"]
        try:
            await ctx.store.delete(REVIEWS, review.id)
        except StoreError as e:
            return Err(e)
        return Ok(review)

    def execute_wrap(self, result: Result[Review, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "delete this review"))
        return Ok("Review deleted.")

    def __str__(self) -> str:
        return "**Delete review**"


class ReviewList(Action):
    project: Optional[str] = None

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Project, str]:
        me = viewer(ctx)
        try:
            project = await resolve_project(ctx, self.project)
            if project.is_err():
                return Err(project.unwrap_err())
            members: AbstractSet[str] = frozenset()
            if me.role == "client":
                members = await member_projects(ctx.store, me.user_id)
        except StoreError as e:
            return Err(describe_error(e, "load reviews"))
        if not can_view_reviews(me, project.unwrap().id, members):
            return Err("You do not have access to this project's reviews.")
        self._memo["project"] = project.unwrap()
        return Ok(project.unwrap())

    def preflight_wrap(self, result: Result[Project, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[Review], StoreError]:
        query = (
            Query(REVIEWS)
            .filter("projectId", self._memo["project"].id)
            .order("createdAt", descending=True)
        )
        try:
            return Ok([Review.model_validate(document) for document in await ctx.store.query(query)])
        except StoreError as e:
            return Err(e)

    def execute_wrap(self, result: Result[List[Review], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load reviews"))
        reviews = result.unwrap()
        name = self._memo["project"].name
        if not reviews:
            return Ok(f"No reviews for {name} yet.")
        return Ok(
            f"**Reviews for {name}**:\n"
            + "\n".join(f"- `{r.id}` {r.text} *({r.created_at.strftime('%Y-%m-%d')})*" for r in reviews)
        )

    def __str__(self) -> str:
        return f"**List reviews**{f" for {self.project}" if self.project else ''}"
