import logging
from typing import Any, Callable, List, Optional, Set, Tuple, Union

from discord.ext import commands

from database.store import DocumentStore
from identity.context import Identity
from navigation.routes import (
    DASHBOARD,
    LOGIN,
    UNAUTHORIZED,
    Match,
    Notice,
    Redirect,
    Resolution,
    resolve,
)
from sessions.session import UserSession

LOGGER = logging.getLogger(__name__)

Path = Union[str, Callable[[Optional[Identity]], str]]


class CommandContext(commands.Context):
    command_stack: List["Command"]
    session: UserSession
    identity: Optional[Identity]
    store: DocumentStore
    match: Optional[Match]


def command(
    name: str,
    help: Optional[str],
    *,
    subcommands: Optional[List["Command"]] = None,
    parent: Optional["Command"] = None,
    path: Optional[Path] = None,
):
    def decorator(callback):
        result = Command(name, help, callback, subcommands, path)
        if parent:
            parent.add_subcommand(result)
        return result

    return decorator


def gate_message(resolution: Resolution) -> str:
    if isinstance(resolution, Notice):
        return resolution.message
    if isinstance(resolution, Redirect):
        if resolution.path == LOGIN:
            return "Please log in first with `!login [email] [password]` (in a DM)."
        if resolution.path == UNAUTHORIZED:
            return "⚠️ Unauthorized: your account has no role assigned. Please contact your Admin."
        if resolution.path == DASHBOARD:
            return "You do not have access to that. Use `!dashboard` to see what you can do."
        return "You are already logged in. Use `!logout` first."
    return ""


class Command:
    name: str
    help: Optional[str]
    callback: Any
    path: Optional[Path]

    subcommands: List["Command"]
    names: Set[str]

    def __init__(
        self,
        name: str,
        help: Optional[str],
        callback,
        subcommands: Optional[List["Command"]] = None,
        path: Optional[Path] = None,
    ):
        self.name = name
        self.help = help
        self.callback = callback
        self.path = path

        self.subcommands = subcommands or []
        self.names = set(subcommand.name for subcommand in self.subcommands)

    async def entry(self, ctx: commands.Context, *args: str):
        action = self.parse(args)
        if action:
            LOGGER.debug(f"Command {self.name} entry {args} -> {action.name}")
        else:
            LOGGER.debug(f"Command {self.name} entry {args}")
        if "command_stack" not in ctx.__dict__:
            ctx.command_stack = []  # type: ignore
        if "session" not in ctx.__dict__:
            ctx.session = ctx.bot.sessions.get(ctx.author.id)  # type: ignore
            ctx.store = ctx.session.store  # type: ignore
            ctx.match = None  # type: ignore
        ctx.identity = ctx.session.identity  # type: ignore
        ctx.command_stack.append(self)  # type: ignore

        if self.path is not None and not (action is not None and action.name == "help"):
            path = self.path(ctx.identity) if callable(self.path) else self.path  # type: ignore
            resolution = resolve(path, ctx.identity)  # type: ignore
            if not isinstance(resolution, Match):
                LOGGER.info(f"Command {self.name} blocked for {ctx.author}: {resolution}")
                return await ctx.reply(gate_message(resolution))
            ctx.match = resolution  # type: ignore

        if action is None:
            return await self.callback(ctx, *args)
        return await action.entry(ctx, *args[1:])

    def parse(self, args: Tuple[str, ...]) -> Optional["Command"]:
        LOGGER.debug(f"Command {self.name} parsing {args}")
        if len(args) == 0:
            return None
        if len(args) == 1 and args[0] == "help" and "help" not in self.names:
            return Command("help", None, self._default_help)

        for subcommand in self.subcommands:
            if subcommand.name.lower() == args[0].lower():
                return subcommand
        return None

    def add_subcommand(self, subcommand: "Command"):
        self.subcommands.append(subcommand)
        self.names.add(subcommand.name)

    def helptext(self):
        return f"""
## {self.name}: {self.help}

**Usage:**
```
!{self.name.lower()} [subcommand] [args...]
```
**Subcommands:**
{"".join(f"`{subcommand.name.lower()}` - {subcommand.help}\n" for subcommand in self.subcommands)}
        """.strip()

    async def _default_help(self, ctx: commands.Context, *args: str):
        await ctx.reply(self.helptext())
