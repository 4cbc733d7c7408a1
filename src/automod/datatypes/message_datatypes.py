"""
Platform-neutral description of an inbound chat message.

The automod engine never touches ``discord.Message`` directly; the listener
converts each message into an :class:`InboundMessage` and the platform
gateway uses the ``source`` field to act on the original object.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, FrozenSet, Optional, Tuple

import discord


@dataclass(frozen=True, slots=True)
class AttachmentInfo:
    content_type: Optional[str] = None
    spoiler: bool = False

    @property
    def is_image(self) -> bool:
        return bool(self.content_type) and self.content_type.startswith("image/")


@dataclass(frozen=True, slots=True)
class InboundMessage:
    """Immutable message descriptor consumed by the automod engine.

    Attributes:
        message_id: Platform message ID.
        guild_id: Community the message was posted in.
        guild_owner_id: Owner of that community (always exempt).
        channel_id: Channel the message was posted in.
        author_id: Author's user ID.
        author_mention: Mention string used in warnings and audit records.
        author_tag: Human-readable author name for audit records.
        author_is_bot: Bot authors are always exempt.
        author_is_admin: Authors with administrator are always exempt.
        author_role_ids: Roles held by the author.
        content: Raw message text.
        attachments: Attachment metadata (content type and spoiler flag).
        mentioned_user_ids: Users mentioned in the message.
        mentioned_role_ids: Roles mentioned in the message.
        sticker_ids: Stickers attached to the message.
        source: Opaque platform object; excluded from equality and repr.
    """

    message_id: int
    guild_id: int
    channel_id: int
    author_id: int
    content: str = ""
    guild_owner_id: Optional[int] = None
    author_mention: str = ""
    author_tag: str = ""
    author_is_bot: bool = False
    author_is_admin: bool = False
    author_role_ids: FrozenSet[int] = field(default_factory=frozenset)
    attachments: Tuple[AttachmentInfo, ...] = ()
    mentioned_user_ids: FrozenSet[int] = field(default_factory=frozenset)
    mentioned_role_ids: FrozenSet[int] = field(default_factory=frozenset)
    sticker_ids: Tuple[int, ...] = ()
    source: Any = field(default=None, compare=False, repr=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "author_role_ids", frozenset(self.author_role_ids))
        object.__setattr__(self, "mentioned_user_ids", frozenset(self.mentioned_user_ids))
        object.__setattr__(self, "mentioned_role_ids", frozenset(self.mentioned_role_ids))
        object.__setattr__(self, "attachments", tuple(self.attachments))
        object.__setattr__(self, "sticker_ids", tuple(self.sticker_ids))
        if not self.author_mention:
            object.__setattr__(self, "author_mention", f"<@{self.author_id}>")

    @property
    def mention_count(self) -> int:
        return len(self.mentioned_user_ids) + len(self.mentioned_role_ids)

    @property
    def image_count(self) -> int:
        return sum(1 for attachment in self.attachments if attachment.is_image)

    @classmethod
    def from_discord(cls, message: discord.Message) -> Optional["InboundMessage"]:
        """Build a descriptor from a py-cord message.

        Returns None for messages automod cannot act on: direct messages and
        messages whose author is not a guild member (webhooks, uncached
        partial members).
        """
        guild = message.guild
        author = message.author
        if guild is None or not isinstance(author, discord.Member):
            return None

        return cls(
            message_id=message.id,
            guild_id=guild.id,
            guild_owner_id=guild.owner_id,
            channel_id=message.channel.id,
            author_id=author.id,
            author_mention=author.mention,
            author_tag=str(author),
            author_is_bot=author.bot,
            author_is_admin=author.guild_permissions.administrator,
            author_role_ids=frozenset(role.id for role in author.roles),
            content=message.content or "",
            attachments=tuple(
                AttachmentInfo(content_type=attachment.content_type, spoiler=attachment.is_spoiler())
                for attachment in message.attachments
            ),
            mentioned_user_ids=frozenset(user.id for user in message.mentions),
            mentioned_role_ids=frozenset(role.id for role in message.role_mentions),
            sticker_ids=tuple(sticker.id for sticker in message.stickers),
            source=message,
        )
