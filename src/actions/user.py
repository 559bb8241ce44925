from typing import ClassVar, List, Optional

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from actions.lookup import find_user, list_users
from database.errors import StoreError, describe_error
from model import USERS
from model.record import Role
from model.user import User


class UserRename(Action):
    user: str
    name: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[User, str]:
        if viewer(ctx).role != "admin":
            return Err("Permission denied: you cannot edit users.")
        if not self.name.strip():
            return Err("Name is required")
        try:
            user = await find_user(ctx.store, self.user)
        except StoreError as e:
            return Err(describe_error(e, "edit this user"))
        if user is None:
            return Err(f"User {self.user} not found.")
        self._memo["user"] = user
        return Ok(user)

    def preflight_wrap(self, result: Result[User, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[User, StoreError]:
        user: User = self._memo["user"]
        try:
            await ctx.store.update(USERS, user.id, {"name": self.name.strip()})
        except StoreError as e:
            return Err(e)
        return Ok(user)

    def execute_wrap(self, result: Result[User, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "edit this user"))
        return Ok(f"Renamed {result.unwrap().display_name} to {self.name.strip()}.")

    def __str__(self) -> str:
        return f"**Rename user** to {self.name}"


class UserRemove(Action):
    """Remove a user's document. The credential itself is left alone."""

    user: str

    unsafe: ClassVar[bool] = True

    async def preflight(self, ctx: Context) -> Result[User, str]:
        me = viewer(ctx)
        if me.role != "admin":
            return Err("Permission denied: you cannot remove users.")
        try:
            user = await find_user(ctx.store, self.user)
        except StoreError as e:
            return Err(describe_error(e, "remove this user"))
        if user is None:
            return Err(f"User {self.user} not found.")
        if user.id == me.user_id:
            return Err("You cannot remove your own account.")
        self._memo["user"] = user
        return Ok(user)

    def preflight_wrap(self, result: Result[User, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[User, StoreError]:
        user: User = self._memo["user"]
        try:
            await ctx.store.delete(USERS, user.id)
        except StoreError as e:
            return Err(e)
        return Ok(user)

    def execute_wrap(self, result: Result[User, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "remove this user"))
        return Ok(f"Removed {result.unwrap().display_name}.")

    def __str__(self) -> str:
        return f"**Remove user** {self.user}"


class UserList(Action):
    role: Optional[Role] = None

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if viewer(ctx).role != "admin":
            return Err("Permission denied: you cannot list users.")
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[User], StoreError]:
        try:
            return Ok(await list_users(ctx.store, self.role))
        except StoreError as e:
            return Err(e)

    def execute_wrap(self, result: Result[List[User], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load users"))
        users = result.unwrap()
        if not users:
            return Ok("No users found.")
        title = f"{self.role.capitalize()}s" if self.role else "Users"
        return Ok(
            f"**{title}**:\n"
            + "\n".join(f"- `{u.id}` {u.display_name} ({u.email}, {u.role})" for u in users)
        )

    def __str__(self) -> str:
        return f"**List {self.role or 'user'}s**"
