import discord
from result import Result

from actions.action import Action, Context
from commands.command import CommandContext
from response.ButtonResponse import binary_response


async def preflight_execute(action: Action, ctx: Context) -> str:
    preflight = await action.preflight(ctx)
    if preflight.is_err():
        return action.preflight_wrap(preflight).unwrap_err()

    execute = await action.execute(ctx)
    return result_collapse(action.execute_wrap(execute))


async def confirm_execute(action: Action, ctx: CommandContext, prompt: str):
    """
    Preflight now, execute once the author confirms with a button. The action
    is dropped if the author's session changed in between.
    """
    preflight = await action.preflight(ctx)
    if preflight.is_err():
        return await ctx.reply(action.preflight_wrap(preflight).unwrap_err())

    async def confirmed(interaction: discord.Interaction):
        if ctx.session.identity != ctx.identity:
            return await interaction.response.send_message(
                "Your session has changed. Please run the command again.", ephemeral=True
            )
        await interaction.response.defer(ephemeral=True, thinking=True)
        result = await action.execute(ctx)
        return await interaction.followup.send(
            result_collapse(action.execute_wrap(result)), ephemeral=True
        )

    view = binary_response(confirmed, user=ctx.author)
    view.message = await ctx.reply(prompt, view=view)
    return view.message


def result_collapse[T](result: Result[T, T]) -> T:
    if result.is_ok():
        return result.unwrap()
    return result.unwrap_err()
