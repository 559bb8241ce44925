from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Any, ClassVar, Dict, Union
from pydantic import BaseModel
from result import Result

from commands.command import CommandContext
from database.store import DocumentStore
from identity.context import Identity
from policy.permissions import Viewer


@dataclass
class ActionContext:
    identity: Identity
    store: DocumentStore


Context = Union[ActionContext, CommandContext]


def viewer(ctx: Context) -> Viewer:
    return Viewer.of(ctx.identity)  # type: ignore


class Action(ABC, BaseModel):
    _memo: Dict[str, Any] = {}
    _preflighted: bool = False

    def __init__(self, **data):
        super().__init__(**data)
        self._memo = {}

    def __init_subclass__(cls, **kwargs):
        preflight_func = cls.preflight

        def preflight(self, ctx: Context):
            self._preflighted = True
            return preflight_func(self, ctx)

        cls.preflight = preflight

        execute_func = cls.execute

        def execute(self, ctx: Context):
            if not self._preflighted:
                raise Exception("Preflight not run.")
            return execute_func(self, ctx)

        cls.execute = execute

    unsafe: ClassVar[bool]

    @abstractmethod
    async def preflight(self, ctx: Context) -> Result[Any, Any]:
        pass

    @abstractmethod
    def preflight_wrap(self, result: Result[Any, Any]) -> Result[None, str]:
        pass

    @abstractmethod
    async def execute(self, ctx: Context) -> Result[Any, Any]:
        pass

    @abstractmethod
    def execute_wrap(self, result: Result[Any, Any]) -> Result[str, str]:
        pass

    @abstractmethod
    def __str__(self) -> str:
        pass
