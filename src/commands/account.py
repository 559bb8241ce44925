import logging

import discord

from arguments.parser import ArgParser
from commands.command import CommandContext, command
from navigation.routes import DASHBOARD
from util.messages import is_dm

LOGGER = logging.getLogger(__name__)


async def require_dm(ctx: CommandContext) -> bool:
    """Passwords are only accepted in direct messages."""
    if is_dm(ctx.message):
        return True
    try:
        await ctx.message.delete()
    except discord.HTTPException as e:
        LOGGER.warning(f"Could not delete message with credentials: {e}")
    await ctx.send(
        f"{ctx.author.mention} For your security, send commands with passwords to me in a direct message."
    )
    return False


@command("Login", "Log in with your email and password", path="/login")
async def login_entry(ctx: CommandContext, *args: str):
    if not await require_dm(ctx):
        return
    if len(args) != 2:
        return await ctx.reply("Usage: `!login [email] [password]`")
    result = await ctx.session.login(args[0], args[1])
    if result.is_err():
        return await ctx.reply(result.unwrap_err())
    identity = result.unwrap()
    home = "`!partner`" if identity.role == "partner" else "`!dashboard`"
    return await ctx.reply(f"Welcome, {identity.display_name}! Use {home} to get started.")


@command("Logout", "Log out", path=DASHBOARD)
async def logout_entry(ctx: CommandContext, *args: str):
    result = await ctx.session.logout()
    if result.is_err():
        return await ctx.reply(result.unwrap_err())
    return await ctx.reply("Logged out.")


@command("Signup", "Create a company account", path="/signup")
async def signup_entry(ctx: CommandContext, *args: str):
    if not await require_dm(ctx):
        return
    parser = ArgParser()
    parser.add_argument("email", "e", required=True)
    parser.add_argument("password", "p", required=True)
    name = parser.parse(args)
    if parser.missing():
        return await ctx.reply("Usage: `!signup [full name] -e [email] -p [password]`")

    result = await ctx.session.signup(name, parser.email, parser.password)
    if result.is_err():
        return await ctx.reply(result.unwrap_err().message)
    return await ctx.reply(
        f"Account created as {result.unwrap()}. You are now logged in, use `!dashboard` to get started."
    )


@command("PartnerSignup", "Create a partner account for an existing project", path="/partner-signup")
async def partner_signup_entry(ctx: CommandContext, *args: str):
    if not await require_dm(ctx):
        return
    parser = ArgParser()
    parser.add_argument("email", "e", required=True)
    parser.add_argument("password", "p", required=True)
    parser.add_argument("project", "c")
    name = parser.parse(args)
    if parser.missing():
        return await ctx.reply(
            "Usage: `!partnersignup [full name] -e [email] -p [password] -c [project name or code]`"
        )

    async with ctx.message.channel.typing():
        result = await ctx.session.enroll_partner(
            name, parser.email, parser.password, parser.project or ""
        )
    if result.is_err():
        return await ctx.reply(result.unwrap_err().message)
    return await ctx.reply(
        "Partner account created successfully! Please log in with `!login [email] [password]`."
    )


@command("Dashboard", "Show your account and what you can do", path=DASHBOARD)
async def dashboard_entry(ctx: CommandContext, *args: str):
    identity = ctx.identity
    assert identity is not None
    lines = [
        "## Web24 Dashboard",
        f"Welcome, {identity.email} (**{identity.role}**)",
        "",
    ]
    if identity.role == "partner":
        lines.append("- `!partner`: your project dashboard")
    else:
        lines += [
            "- `!board`: manage your tasks on the Kanban board",
            "- `!note`: keep track of important information and ideas",
            "- `!target`: set and track your personal goals",
        ]
    if identity.is_admin:
        lines.append("- `!admin`: manage clients, partners, projects and reviews")
    lines.append("- `!logout`: log out")
    return await ctx.reply("\n".join(lines))

