from discord.ext import commands
from commands.account import (
    dashboard_entry as Dashboard,
    login_entry as Login,
    logout_entry as Logout,
    partner_signup_entry as PartnerSignup,
    signup_entry as Signup,
)
from commands.admin import admin_entry as Admin
from commands.board import board_entry as Board
from commands.command import Command
from commands.note import note_entry as Note
from commands.partner import partner_entry as Partner
from commands.project import project_entry as Project
from commands.review import review_entry as Review
from commands.target import target_entry as Target

command_map = {
    command.name.lower(): command
    for command in (
        Login,
        Logout,
        Signup,
        PartnerSignup,
        Dashboard,
        Board,
        Note,
        Target,
        Project,
        Review,
        Admin,
        Partner,
    )
}


class Help(commands.HelpCommand):
    async def send_bot_help(self, mapping):
        await self.context.reply(
            f"""
Welcome to the Web24 task board! Log in with `!login` in a direct message to get started.
Use the `help` command to get help with a specific command (e.g. `!help board`).

**Available commands:**
{'\n'.join(f"- `{command.name.lower()}`: {command.help}" for command in command_map.values())}
            """.strip()
        )

    async def send_command_help(self, command):
        await self.context.reply(command_map[command.name.lower()].helptext())


def bind(bot: commands.Bot, target: Command):
    async def entry(ctx: commands.Context, *args: str):
        await target.entry(ctx, *args)

    bot.command(name=target.name.lower(), help=target.help)(entry)


def register(bot: commands.Bot):
    bot.help_command = Help()
    for target in command_map.values():
        bind(bot, target)
