import logging
from typing import Any, Callable, Coroutine, Optional, Union, override
from discord.ui import View, Button as DiscordButton
from discord import ButtonStyle, HTTPException, Interaction, Member, Message, User

LOGGER = logging.getLogger(__name__)

Callback = Callable[[Interaction], Coroutine[Any, Any, Any]]

CONFIRM_TIMEOUT = 120


class Button(DiscordButton["BinaryResponse"]):
    def __init__(self, label: str, style: ButtonStyle, callback: Callback):
        super().__init__(label=label, style=style)
        self._callback = callback

    @override
    async def callback(self, interaction: Interaction):
        view = self.view
        if view is None or view.answered:
            return
        view.answered = True
        view.stop()
        await self._callback(interaction)
        if interaction.message is not None:
            await interaction.message.edit(view=None)


class BinaryResponse(View):
    """
    A confirm/cancel pair that only `user` may answer, once. Buttons are
    removed when answered or when the prompt times out.
    """

    user: Optional[Union[User, Member]]
    answered: bool
    message: Optional[Message]

    def __init__(
        self,
        pos_callback: Callback,
        neg_callback: Callback,
        pos_text: str,
        neg_text: str,
        timeout: Optional[float],
        user: Optional[Union[User, Member]],
    ):
        super().__init__(timeout=timeout)
        self.user = user
        self.answered = False
        self.message = None
        self.add_item(Button(pos_text, ButtonStyle.danger, pos_callback))
        self.add_item(Button(neg_text, ButtonStyle.secondary, neg_callback))

    @override
    async def interaction_check(self, interaction: Interaction) -> bool:
        if self.user is None or interaction.user.id == self.user.id:
            return True
        await interaction.response.send_message(
            "Only the person who ran this command can answer it.", ephemeral=True
        )
        return False

    @override
    async def on_timeout(self):
        if self.message is None or self.answered:
            return
        try:
            await self.message.edit(
                content=f"{self.message.content}\n*No answer, nothing was changed.*", view=None
            )
        except HTTPException as e:
            LOGGER.warning(f"Could not expire confirmation {self.message.id}: {e}")


async def default_neg(interaction: Interaction):
    await interaction.response.send_message("Cancelled", ephemeral=True)


def binary_response(
    pos_callback: Callback,
    neg_callback: Callback = default_neg,
    pos_text: str = "Confirm",
    neg_text: str = "Cancel",
    timeout: Optional[float] = CONFIRM_TIMEOUT,
    user: Optional[Union[User, Member]] = None,
) -> BinaryResponse:
    """
    Create a binary response.
    """
    return BinaryResponse(pos_callback, neg_callback, pos_text, neg_text, timeout, user)
