import logging
from typing import List
import discord

from views.base import RenderCallback, View

LOGGER = logging.getLogger(__name__)


def is_dm(message: discord.Message) -> bool:
    """
    Check if the message was sent to the bot directly.
    """
    return isinstance(message.channel, discord.DMChannel)


def chunkify(content: str, max_length: int = 2000) -> List[str]:
    """
    Split content into chunks of at most `max_length` characters.
    """
    chunks = []
    while content:
        if len(content) <= max_length:
            chunks.append(content)
            break
        chunk = content[:max_length]
        if (pos := chunk.rfind("\n")) > 0:
            chunk = chunk[:pos]
        elif (pos := chunk.rfind(" ")) > 0:
            chunk = chunk[:pos]
        chunks.append(chunk)
        content = content[len(chunk) :]

    return chunks


def live_message(message: discord.Message) -> RenderCallback:
    """
    Render a view into an existing bot message. Only the first chunk fits in
    one message; the rest is cut off with a marker.
    """

    async def render(view: View):
        chunks = chunkify(view.render(), max_length=1980) or ["*Nothing to show.*"]
        content = chunks[0] if len(chunks) == 1 else chunks[0] + "\n*(truncated)*"
        try:
            await message.edit(content=content)
        except discord.NotFound:
            LOGGER.info(f"Live message {message.id} is gone, closing {view.title}")
            await view.close()
        except discord.HTTPException as e:
            LOGGER.warning(f"Failed to update live message {message.id}: {e}")

    return render
