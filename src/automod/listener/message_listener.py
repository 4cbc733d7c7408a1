"""Message listener Cog for automod.

Feeds every guild message through the automod engine. py-cord dispatches
each ``on_message`` as its own task, so messages are checked concurrently;
nothing raised here ever reaches the event loop.
"""

import discord
from discord.ext import commands

from automod.datatypes.message_datatypes import InboundMessage
from automod.moderation.automod_engine import AutomodEngine
from automod.util.logger import get_logger

logger = get_logger("message_listener_cog")


class AutomodListenerCog(commands.Cog):
    """Cog responsible for running automod on new messages."""

    def __init__(self, discord_bot_instance: discord.Bot, engine: AutomodEngine):
        self.bot = discord_bot_instance
        self.engine = engine
        logger.info("[MESSAGE LISTENER] Automod listener cog loaded")

    @commands.Cog.listener(name='on_message')
    async def on_message(self, message: discord.Message):
        """Convert the message to an ``InboundMessage`` and let the engine handle it."""
        try:
            inbound = InboundMessage.from_discord(message)
            if inbound is None:
                return
            result = await self.engine.process_message(inbound)
        except Exception:
            logger.exception("[MESSAGE LISTENER] Failed to process message %s", getattr(message, "id", "?"))
            return

        if result is not None:
            logger.debug(
                "[MESSAGE LISTENER] Enforced %s on message %s: %s",
                result.rule_type.value, message.id, result.outcome,
            )


def setup(discord_bot_instance, engine: AutomodEngine):
    """Register the AutomodListenerCog with the bot."""
    discord_bot_instance.add_cog(AutomodListenerCog(discord_bot_instance, engine))
