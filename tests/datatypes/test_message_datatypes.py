"""Tests for converting py-cord messages into InboundMessage."""

from types import SimpleNamespace
from unittest.mock import MagicMock

import discord

from automod.datatypes.message_datatypes import AttachmentInfo, InboundMessage


def make_member(member_id=42, *, bot=False, admin=False, role_ids=(7, 8)):
    member = MagicMock(spec=discord.Member)
    member.id = member_id
    member.bot = bot
    member.mention = f"<@{member_id}>"
    member.guild_permissions = SimpleNamespace(administrator=admin)
    member.roles = [SimpleNamespace(id=role_id) for role_id in role_ids]
    member.__str__.return_value = "someone#0001"
    return member


def make_attachment(content_type, spoiler=False):
    attachment = MagicMock()
    attachment.content_type = content_type
    attachment.is_spoiler.return_value = spoiler
    return attachment


def make_discord_message(author=None, guild=True, content="hi there"):
    message = MagicMock()
    message.id = 99
    message.guild = SimpleNamespace(id=1000, owner_id=1) if guild else None
    message.channel = SimpleNamespace(id=500)
    message.author = author if author is not None else make_member()
    message.content = content
    message.attachments = [make_attachment("image/png", spoiler=True), make_attachment("text/plain")]
    message.mentions = [SimpleNamespace(id=5), SimpleNamespace(id=6)]
    message.role_mentions = [SimpleNamespace(id=9)]
    message.stickers = [SimpleNamespace(id=11)]
    return message


def test_from_discord_copies_fields():
    source = make_discord_message()
    inbound = InboundMessage.from_discord(source)

    assert inbound.message_id == 99
    assert inbound.guild_id == 1000
    assert inbound.guild_owner_id == 1
    assert inbound.channel_id == 500
    assert inbound.author_id == 42
    assert inbound.author_mention == "<@42>"
    assert inbound.author_tag == "someone#0001"
    assert inbound.author_is_bot is False
    assert inbound.author_is_admin is False
    assert inbound.author_role_ids == frozenset({7, 8})
    assert inbound.content == "hi there"
    assert inbound.attachments == (
        AttachmentInfo(content_type="image/png", spoiler=True),
        AttachmentInfo(content_type="text/plain", spoiler=False),
    )
    assert inbound.sticker_ids == (11,)
    assert inbound.source is source


def test_counts():
    inbound = InboundMessage.from_discord(make_discord_message())
    assert inbound.image_count == 1
    assert inbound.mention_count == 3


def test_admin_and_bot_flags():
    inbound = InboundMessage.from_discord(make_discord_message(author=make_member(bot=True, admin=True)))
    assert inbound.author_is_bot is True
    assert inbound.author_is_admin is True


def test_direct_messages_are_skipped():
    assert InboundMessage.from_discord(make_discord_message(guild=False)) is None


def test_non_member_authors_are_skipped():
    webhook_user = MagicMock(spec=discord.User)
    assert InboundMessage.from_discord(make_discord_message(author=webhook_user)) is None


def test_missing_content_becomes_empty_string():
    assert InboundMessage.from_discord(make_discord_message(content=None)).content == ""


def test_source_is_excluded_from_equality():
    first = InboundMessage(message_id=1, guild_id=2, channel_id=3, author_id=4, source=object())
    second = InboundMessage(message_id=1, guild_id=2, channel_id=3, author_id=4, source=object())
    assert first == second
    assert first.author_mention == "<@4>"


def test_attachment_without_content_type_is_not_an_image():
    assert AttachmentInfo().is_image is False
    assert AttachmentInfo(content_type="image/gif").is_image is True
