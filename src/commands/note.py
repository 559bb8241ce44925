from actions.note import NoteDelete, NoteEdit, NoteList, NoteNew
from arguments.parser import ArgParser
from commands.command import CommandContext, command
from util.util import preflight_execute


@command("Note", "Keep personal notes", path="/notes")
async def note_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!note help` to see a list of available commands."
        )
    return await ctx.reply(await preflight_execute(NoteList(), ctx))


@command("New", "Create a note", parent=note_entry)
async def note_new(ctx: CommandContext, *args: str):
    parser = ArgParser()
    parser.add_argument("content", "c")
    title = parser.parse(args)
    if not title:
        return await ctx.reply("Usage: `!note new [title] (-c <content>)`")
    action = NoteNew(title=title, content=parser.content or "")
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Edit", "Replace the content of a note", parent=note_entry)
async def note_edit(ctx: CommandContext, *args: str):
    parser = ArgParser()
    parser.add_argument("content", "c")
    note = parser.parse(args)
    if not note:
        return await ctx.reply("Usage: `!note edit [title] -c [content]`")
    action = NoteEdit(note=note, content=parser.content or "")
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Delete", "Delete a note", parent=note_entry)
async def note_delete(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!note delete [title]`")
    action = NoteDelete(note=" ".join(args))
    return await ctx.reply(await preflight_execute(action, ctx))
