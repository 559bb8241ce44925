import asyncio
import coloredlogs  # type: ignore
import discord
import logging
from discord.ext import commands

from auth.memory import MemoryAuthBackend
from auth.mongo import MongoAuthBackend
from auth.provider import AuthBackend
from commands.register import register
from config import Settings
from database.database import init_database
from database.memory import MemoryStore
from database.store import DocumentStore
from sessions.session import SessionRegistry

# Sentry for error tracking
import sentry_sdk
from sentry_sdk.integrations.logging import LoggingIntegration

settings = Settings.from_env()

if settings.sentry_dsn:
    sentry_sdk.init(
        dsn=settings.sentry_dsn,
        send_default_pii=False,
        integrations=[LoggingIntegration(level=logging.INFO, event_level=logging.ERROR)],
        environment=settings.environment,
    )

# Google Cloud Logging
if settings.production:
    import google.cloud.logging as cloud_logging

    client = cloud_logging.Client()
    client.setup_logging()
else:
    coloredlogs.install(
        level="DEBUG", fmt="%(asctime)s %(name)s %(levelname)s %(message)s"
    )

PREFIX = "!"

# Setup logging
LOGGER = logging.getLogger("taskboard")
logging.getLogger("asyncio").setLevel(logging.INFO)
logging.getLogger("discord").setLevel(logging.INFO)
logging.getLogger("pymongo").setLevel(logging.INFO)
LOGGER.info("Environment: %s", settings.environment)

# The message content intent must be enabled in the Discord Developer Portal for the bot to work.
intents = discord.Intents.default()
intents.message_content = True


class Bot(commands.Bot):
    sessions: SessionRegistry

    async def on_command_error(
        self, context: commands.Context, exception: commands.CommandError
    ) -> None:
        if isinstance(exception, commands.CommandNotFound):
            await context.reply(
                "Sorry, I don't recognize that command. Try `!help` for a list of commands."
            )
        else:
            LOGGER.error(f"Error processing {context.message.content!r}: {exception}")
            sentry_sdk.capture_exception(exception)
            await context.send(
                "Sorry, an error occurred while processing your command."
            )

    async def close(self) -> None:
        if hasattr(self, "sessions"):
            await self.sessions.close()
        await super().close()


bot = Bot(command_prefix=PREFIX, intents=intents)


@bot.event
async def on_ready():
    """
    Called when the client is done preparing the data received from Discord.

    https://discordpy.readthedocs.io/en/latest/api.html#discord.on_ready
    """
    LOGGER.info(f"{bot.user} has connected to Discord!")


@bot.event
async def on_message(message: discord.Message):
    """
    Called when a message is sent in any channel the bot can see.

    https://discordpy.readthedocs.io/en/latest/api.html#discord.on_message
    """
    if message.author.bot:
        return

    if message.content.startswith(PREFIX):
        # Never log the arguments, they may hold a password.
        LOGGER.info(f"Processing command from {message.author}: {message.content.split()[0]}")

    await bot.process_commands(message)


# Register commands
register(bot)


# Debugging command
@bot.command(name="ping", help="Pings the bot.")
async def ping(ctx, *, arg=None):
    if arg is None:
        await ctx.reply("Pong!")
    else:
        await ctx.reply(f"Pong! Your argument was {arg}")


async def backends() -> tuple[DocumentStore, AuthBackend]:
    if settings.development:
        LOGGER.warning("Using in-memory store and credentials, nothing will be persisted")
        return MemoryStore(), MemoryAuthBackend()
    store = await init_database(settings.mongo_url, settings.mongo_db)
    return store, MongoAuthBackend()


async def main():
    # Connect to MongoDB
    store, auth_backend = await backends()
    bot.sessions = SessionRegistry(store, auth_backend, settings)

    # Start the bot, connecting it to the gateway
    await bot.start(settings.discord_token)  # type: ignore


if __name__ == "__main__":
    asyncio.run(main())
