from actions.review import ReviewAdd, ReviewDelete, ReviewList
from arguments.parser import ArgParser
from commands.command import CommandContext, command
from navigation.routes import DASHBOARD
from util.util import confirm_execute, preflight_execute


@command("Review", "Read and write project reviews", path=DASHBOARD)
async def review_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!review help` to see a list of available commands."
        )
    return await ctx.reply(ctx.command_stack[-1].helptext())


@command("List", "List the reviews of a project", parent=review_entry)
async def review_list(ctx: CommandContext, *args: str):
    action = ReviewList(project=" ".join(args) or None)
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Add", "Review your assigned project", parent=review_entry)
async def review_add(ctx: CommandContext, *args: str):
    parser = ArgParser()
    parser.add_argument("project", "p")
    text = parser.parse(args)
    if not text:
        return await ctx.reply("Usage: `!review add [text] (-p <project>)`")
    action = ReviewAdd(text=text, project=parser.project)
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Delete", "Delete a review", parent=review_entry)
async def review_delete(ctx: CommandContext, *args: str):
    if len(args) != 1:
        return await ctx.reply("Usage: `!review delete [review id]`")
    action = ReviewDelete(review=args[0])
    return await confirm_execute(action, ctx, "Are you sure you want to delete this review?")
