from actions.project import ProjectDelete, ProjectList, ProjectNew
from commands.command import CommandContext, command
from navigation.routes import DASHBOARD
from util.util import confirm_execute, preflight_execute


@command("Project", "Manage projects", path=DASHBOARD)
async def project_entry(ctx: CommandContext, *args: str):
    if len(args) > 0:
        return await ctx.reply(
            "Sorry, no command exists with that name. Use `!project help` to see a list of available commands."
        )
    return await ctx.reply(await preflight_execute(ProjectList(), ctx))


@command("New", "Create a new project", parent=project_entry, path="/admin")
async def project_new(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!project new [name]`")
    action = ProjectNew(name=" ".join(args))
    return await ctx.reply(await preflight_execute(action, ctx))


@command("Delete", "Delete a project with its tasks and reviews", parent=project_entry, path="/admin")
async def project_delete(ctx: CommandContext, *args: str):
    if len(args) < 1:
        return await ctx.reply("Usage: `!project delete [name]`")
    name = " ".join(args)
    action = ProjectDelete(project=name)
    return await confirm_execute(
        action,
        ctx,
        f"Are you sure you want to delete project {name}? All its tasks and reviews will be deleted too.",
    )
