"""
Embed construction for automod audit records.
"""

import datetime

import discord

from automod.datatypes.action_datatypes import AuditRecord
from automod.util.format_utils import format_action, format_rule_name

AUDIT_COLOR = discord.Color(0xED4245)


def build_audit_embed(record: AuditRecord) -> discord.Embed:
    """
    Create the log-channel embed describing an automod enforcement.

    Args:
        record: Audit record produced by the enforcement executor.

    Returns:
        discord.Embed: Embed with rule, action, user, channel, and content.
    """
    embed = discord.Embed(
        title="Automod Violation",
        description=(
            f"**Rule:** {format_rule_name(record.rule_type)}\n"
            f"**Action:** {format_action(record.action)}\n"
            f"**Outcome:** {record.outcome}"
        ),
        color=AUDIT_COLOR,
        timestamp=datetime.datetime.fromtimestamp(record.timestamp, tz=datetime.timezone.utc),
    )
    embed.add_field(name="User", value=f"{record.user_mention} ({record.user_tag})", inline=True)
    embed.add_field(name="Channel", value=f"<#{record.channel_id}>", inline=True)
    embed.add_field(name="Message", value=record.content, inline=False)
    embed.set_footer(text=f"User ID: {record.user_id}")
    return embed
