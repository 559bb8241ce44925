from actions.target import TargetDelete, TargetList, TargetNew, TargetToggle
from commands.command import CommandContext, command
from util.util import preflight_execute


@command("Target", "Set and track your personal goals", path="/targets")
async def target_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!target help` to see a list of available commands."
        )
    return await ctx.reply(await preflight_execute(TargetList(), ctx))


@command("New", "Add a target", parent=target_entry)
async def target_new(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!target new [text]`")
    return await ctx.reply(await preflight_execute(TargetNew(text=" ".join(args)), ctx))


@command("Toggle", "Mark a target as completed or not", parent=target_entry)
async def target_toggle(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!target toggle [target id or text]`")
    return await ctx.reply(await preflight_execute(TargetToggle(target=" ".join(args)), ctx))


@command("Delete", "Delete a target", parent=target_entry)
async def target_delete(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!target delete [target id or text]`")
    return await ctx.reply(await preflight_execute(TargetDelete(target=" ".join(args)), ctx))
