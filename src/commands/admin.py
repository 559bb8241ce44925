from actions.user import UserList, UserRemove, UserRename
from arguments.parser import ArgParser
from commands.command import CommandContext, command
from util.messages import live_message
from util.util import confirm_execute, preflight_execute
from views.admin import AdminView

ADMIN = "admin"


@command("Admin", "Manage clients, partners, projects and reviews", path="/admin")
async def admin_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!admin help` to see a list of available commands."
        )
    message = await ctx.reply("Loading admin panel...")
    view = AdminView(ctx.store, ctx.identity, on_render=live_message(message))  # type: ignore
    await ctx.session.open_view(ADMIN, view)


@command("Close", "Close the live admin panel", parent=admin_entry)
async def admin_close(ctx: CommandContext, *args: str):
    if ADMIN not in ctx.session.views:
        return await ctx.reply("The admin panel is not open.")
    await ctx.session.close_view(ADMIN)
    return await ctx.reply("Admin panel closed.")


@command("Clients", "List clients", parent=admin_entry)
async def admin_clients(ctx: CommandContext, *args: str):
    return await ctx.reply(await preflight_execute(UserList(role="client"), ctx))


@command("Partners", "List partners", parent=admin_entry)
async def admin_partners(ctx: CommandContext, *args: str):
    return await ctx.reply(await preflight_execute(UserList(role="partner"), ctx))


@command("Rename", "Change a user's name", parent=admin_entry)
async def admin_rename(ctx: CommandContext, *args: str):
    parser = ArgParser()
    parser.add_argument("name", "n", required=True)
    user = parser.parse(args)
    if not user or parser.missing():
        return await ctx.reply("Usage: `!admin rename [user id or email] -n [new name]`")
    action = UserRename(user=user, name=parser.name)
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Remove", "Remove a user", parent=admin_entry)
async def admin_remove(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!admin remove [user id or email]`")
    action = UserRemove(user=" ".join(args))
    return await confirm_execute(
        action, ctx, f"Are you sure you want to remove {' '.join(args)}?"
    )
