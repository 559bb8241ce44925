from datetime import datetime, timezone
from typing import Optional

from actions.task import TaskDelete, TaskList, TaskMove, TaskNew
from arguments.parser import ArgParser
from commands.command import CommandContext, command
from util.messages import live_message
from util.util import confirm_execute, preflight_execute
from views.kanban import KanbanView

BOARD = "board"


def parse_deadline(value: Optional[str]) -> Optional[datetime]:
    if not value:
        return None
    return datetime.strptime(value.strip(), "%Y-%m-%d").replace(tzinfo=timezone.utc)


@command("Board", "Open and manage the Kanban board", path="/kanban")
async def board_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!board help` to see a list of available commands."
        )
    message = await ctx.reply("Loading board...")
    view = KanbanView(ctx.store, ctx.identity, on_render=live_message(message))  # type: ignore
    await ctx.session.open_view(BOARD, view)


@command("Select", "Show another project on your board", parent=board_entry)
async def board_select(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!board select [project]`")
    view = ctx.session.views.get(BOARD)
    if not isinstance(view, KanbanView):
        return await ctx.reply("Open the board first with `!board`.")
    project = view.find_project(" ".join(args))
    if project is None:
        return await ctx.reply(f"Project {' '.join(args)} not found.")
    result = await view.select_project(project.id)
    if result.is_err():
        return await ctx.reply(result.unwrap_err())
    return await ctx.message.add_reaction("👍")


@command("Close", "Close your live board", parent=board_entry)
async def board_close(ctx: CommandContext, *args: str):
    if BOARD not in ctx.session.views:
        return await ctx.reply("Your board is not open.")
    await ctx.session.close_view(BOARD)
    return await ctx.reply("Board closed.")


@command("List", "List your tasks", parent=board_entry)
async def board_list(ctx: CommandContext, *args: str):
    parser = ArgParser()
    parser.add_argument("project", "p")
    rest = parser.parse(args)
    action = TaskList(project=parser.project or rest or None)
    return await ctx.reply(await preflight_execute(action, ctx))


@command("New", "Create a new task", parent=board_entry)
async def board_new(ctx: CommandContext, *args: str):
    usage = "Usage: `!board new [title] (-p <project>) (-a <client>) (-m <description>) (-d <YYYY-MM-DD>)`"
    if len(args) < 1:
        return await ctx.reply(usage)
    parser = ArgParser()
    parser.add_argument("project", "p")
    parser.add_argument("assignee", "a")
    parser.add_argument("description", "m")
    parser.add_argument("deadline", "d")
    title = parser.parse(args)

    project = parser.project
    view = ctx.session.views.get(BOARD)
    if project is None and isinstance(view, KanbanView) and view.selected_project:
        project = view.selected_project.name

    try:
        deadline = parse_deadline(parser.deadline)
    except ValueError:
        return await ctx.reply(usage)

    action = TaskNew(
        title=title,
        project=project,
        assignee=parser.assignee,
        description=parser.description or "",
        deadline=deadline,
    )
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Move", "Move a task to another column", parent=board_entry)
async def board_move(ctx: CommandContext, *args: str):
    if len(args) < 2:
        return await ctx.reply("Usage: `!board move [task id] [todo | inprogress | done]`")
    action = TaskMove(task=args[0], column=" ".join(args[1:]))
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Delete", "Delete a task", parent=board_entry)
async def board_delete(ctx: CommandContext, *args: str):
    if len(args) != 1:
        return await ctx.reply("Usage: `!board delete [task id]`")
    action = TaskDelete(task=args[0])
    return await confirm_execute(action, ctx, "Are you sure you want to delete this task?")


@command("Due", "List your unfinished tasks due today", parent=board_entry)
async def board_due(ctx: CommandContext, *args: str):
    action = TaskList(due=datetime.now(timezone.utc).date())
    return await ctx.reply(await preflight_execute(action, ctx))
