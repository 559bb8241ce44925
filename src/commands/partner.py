from typing import Optional

from actions.review import ReviewAdd
from commands.command import CommandContext, command
from identity.context import Identity
from navigation.routes import PARTNER, PARTNER_PROJECT
from util.messages import live_message
from util.util import preflight_execute
from views.partner import PartnerView

PARTNER_VIEW = "partner"


def partner_path(identity: Optional[Identity]) -> str:
    if identity is not None and identity.assigned_project_id:
        return PARTNER_PROJECT + identity.assigned_project_id
    return PARTNER


@command("Partner", "Your project dashboard", path=partner_path)
async def partner_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, I don't understand that command. Use `!partner help` to see a list of available commands."
        )
    project_id = ctx.match.project_id if ctx.match else None
    if project_id is None:
        return await ctx.reply("Project not specified.")
    message = await ctx.reply("Loading project...")
    view = PartnerView(ctx.store, ctx.identity, project_id, on_render=live_message(message))  # type: ignore
    await ctx.session.open_view(PARTNER_VIEW, view)


@command("Review", "Add a review to your project", parent=partner_entry)
async def partner_review(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!partner review [text]`")
    action = ReviewAdd(text=" ".join(args))
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Close", "Close your live dashboard", parent=partner_entry)
async def partner_close(ctx: CommandContext, *args: str):
    if PARTNER_VIEW not in ctx.session.views:
        return await ctx.reply("Your dashboard is not open.")
    await ctx.session.close_view(PARTNER_VIEW)
    return await ctx.reply("Dashboard closed.")
