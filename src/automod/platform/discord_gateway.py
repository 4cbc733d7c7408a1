"""
py-cord implementation of :class:`PlatformGateway`.

Each call catches the Discord errors a moderation bot routinely hits
(missing permissions, message already gone, rate limits) and reports them
as ``False``. The original ``discord.Message`` travels inside
``InboundMessage.source``.
"""

from __future__ import annotations

import datetime

import discord

from automod.datatypes.action_datatypes import AuditRecord
from automod.datatypes.message_datatypes import InboundMessage
from automod.moderation.audit_embed import build_audit_embed
from automod.util.logger import get_logger

logger = get_logger("discord_gateway")

# Bans also remove the last 24 hours of the user's messages
BAN_DELETE_MESSAGE_SECONDS = 86400


class DiscordGateway:
    """Executes automod side effects through a py-cord bot."""

    def __init__(self, bot: discord.Bot) -> None:
        self._bot = bot

    @staticmethod
    def _source(message: InboundMessage) -> discord.Message | None:
        source = message.source
        if source is None:
            logger.warning("[DISCORD GATEWAY] Message %s has no platform object attached", message.message_id)
        return source

    async def send_ephemeral_notice(self, message: InboundMessage, text: str, delete_after: float) -> bool:
        source = self._source(message)
        if source is None:
            return False
        try:
            await source.channel.send(text, delete_after=delete_after)
            return True
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to send warning in channel %s: %s", message.channel_id, exc)
            return False

    async def delete_message(self, message: InboundMessage) -> bool:
        source = self._source(message)
        if source is None:
            return False
        try:
            await source.delete()
            return True
        except discord.NotFound:
            logger.debug("[DISCORD GATEWAY] Message %s already deleted", message.message_id)
            return False
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to delete message %s: %s", message.message_id, exc)
            return False

    async def timeout_member(self, message: InboundMessage, seconds: int, reason: str) -> bool:
        source = self._source(message)
        if source is None or not isinstance(source.author, discord.Member):
            return False
        until = discord.utils.utcnow() + datetime.timedelta(seconds=seconds)
        try:
            await source.author.timeout(until, reason=reason)
            return True
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to timeout user %s: %s", message.author_id, exc)
            return False

    async def ban_member(self, message: InboundMessage, reason: str) -> bool:
        source = self._source(message)
        if source is None or source.guild is None:
            return False
        try:
            await source.guild.ban(
                source.author,
                reason=reason,
                delete_message_seconds=BAN_DELETE_MESSAGE_SECONDS,
            )
            return True
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to ban user %s: %s", message.author_id, exc)
            return False

    async def send_audit_embed(self, guild_id: int, channel_id: int, record: AuditRecord) -> bool:
        channel = self._bot.get_channel(channel_id)
        try:
            if channel is None:
                channel = await self._bot.fetch_channel(channel_id)
        except discord.HTTPException as exc:
            logger.warning("[DISCORD GATEWAY] Log channel %s in guild %s unavailable: %s", channel_id, guild_id, exc)
            return False

        if not isinstance(channel, discord.abc.Messageable):
            logger.warning("[DISCORD GATEWAY] Log channel %s in guild %s is not text-based", channel_id, guild_id)
            return False

        try:
            await channel.send(embed=build_audit_embed(record))
            return True
        except discord.HTTPException as exc:
            logger.error("[DISCORD GATEWAY] Failed to send audit embed to %s: %s", channel_id, exc)
            return False
