from typing import ClassVar, List, Optional

from result import Err, Ok, Result
from actions.action import Action, Context, viewer
from database.errors import StoreError, describe_error
from database.store import Query
from model import TARGETS
from model.target import Target


async def find_target(ctx: Context, target: str) -> Optional[Target]:
    uid = viewer(ctx).user_id
    wanted = target.strip().lower()
    for document in await ctx.store.query(Query(TARGETS).filter("userId", uid)):
        found = Target.model_validate(document)
        if wanted in (found.id.lower(), found.text.lower()):
            return found
    return None


class TargetNew(Action):
    text: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        if not self.text.strip():
            return Err("Target text is required")
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Target, StoreError]:
        target = Target(text=self.text.strip(), user_id=viewer(ctx).user_id)
        try:
            target.id = await ctx.store.add(TARGETS, target.to_document())
        except StoreError as e:
            return Err(e)
        return Ok(target)

    def execute_wrap(self, result: Result[Target, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "add targets"))
        return Ok(f"Target added: {result.unwrap().text}")

    def __str__(self) -> str:
        return f"**New target**: {self.text}"


class TargetToggle(Action):
    target: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Target, str]:
        try:
            target = await find_target(ctx, self.target)
        except StoreError as e:
            return Err(describe_error(e, "update this target"))
        if target is None:
            return Err(f"Target {self.target} not found.")
        self._memo["target"] = target
        return Ok(target)

    def preflight_wrap(self, result: Result[Target, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Target, StoreError]:
        target: Target = self._memo["target"]
        try:
            await ctx.store.update(TARGETS, target.id, {"completed": not target.completed})
        except StoreError as e:
            return Err(e)
        return Ok(target)

    def execute_wrap(self, result: Result[Target, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "update this target"))
        target = result.unwrap()
        return Ok(f"Target {target.text} marked as {'incomplete' if target.completed else 'completed'}.")

    def __str__(self) -> str:
        return "**Toggle target**"


class TargetDelete(Action):
    target: str

    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[Target, str]:
        try:
            target = await find_target(ctx, self.target)
        except StoreError as e:
            return Err(describe_error(e, "delete this target"))
        if target is None:
            return Err(f"Target {self.target} not found.")
        self._memo["target"] = target
        return Ok(target)

    def preflight_wrap(self, result: Result[Target, str]) -> Result[None, str]:
        if result.is_err():
            return Err(result.unwrap_err())
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[Target, StoreError]:
        target: Target = self._memo["target"]
        try:
            await ctx.store.delete(TARGETS, target.id)
        except StoreError as e:
            return Err(e)
        return Ok(target)

    def execute_wrap(self, result: Result[Target, StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "delete this target"))
        return Ok(f"Target {result.unwrap().text} deleted.")

    def __str__(self) -> str:
        return "**Delete target**"


class TargetList(Action):
    unsafe: ClassVar[bool] = False

    async def preflight(self, ctx: Context) -> Result[None, str]:
        return Ok(None)

    def preflight_wrap(self, result: Result[None, str]) -> Result[None, str]:
        return Ok(None)

    async def execute(self, ctx: Context) -> Result[List[Target], StoreError]:
        try:
            documents = await ctx.store.query(
                Query(TARGETS).filter("userId", viewer(ctx).user_id)
            )
        except StoreError as e:
            return Err(e)
        return Ok([Target.model_validate(document) for document in documents])

    def execute_wrap(self, result: Result[List[Target], StoreError]) -> Result[str, str]:
        if result.is_err():
            return Err(describe_error(result.unwrap_err(), "load targets"))
        targets = result.unwrap()
        if not targets:
            return Ok("No targets yet.")
        return Ok(
            "**Targets**:\n"
            + "\n".join(f"- {'✅' if t.completed else '⬜'} `{t.id}` {t.text}" for t in targets)
        )

    def __str__(self) -> str:
        return "**List targets**"
