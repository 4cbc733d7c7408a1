"""Tests for the automod listener cog."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from automod.datatypes.action_datatypes import EnforcementResult
from automod.datatypes.automod_datatypes import ActionType, RuleType
from automod.datatypes.message_datatypes import InboundMessage
from automod.listener import message_listener
from automod.listener.message_listener import AutomodListenerCog


@pytest.fixture()
def engine():
    fake = MagicMock()
    fake.process_message = AsyncMock(return_value=None)
    return fake


@pytest.fixture()
def cog(engine):
    return AutomodListenerCog(MagicMock(), engine)


@pytest.mark.asyncio
async def test_messages_are_handed_to_engine(cog, engine, make_message):
    inbound = make_message("hello")
    engine.process_message.return_value = EnforcementResult(RuleType.ALL_CAPS, ActionType.DELETE, "Deleted")
    with patch.object(InboundMessage, "from_discord", return_value=inbound):
        await cog.on_message(MagicMock())
    engine.process_message.assert_awaited_once_with(inbound)


@pytest.mark.asyncio
async def test_unconvertible_messages_are_ignored(cog, engine):
    with patch.object(InboundMessage, "from_discord", return_value=None):
        await cog.on_message(MagicMock())
    engine.process_message.assert_not_awaited()


@pytest.mark.asyncio
async def test_engine_errors_do_not_escape(cog, engine, make_message):
    engine.process_message.side_effect = RuntimeError("boom")
    with patch.object(InboundMessage, "from_discord", return_value=make_message()):
        await cog.on_message(MagicMock())


def test_setup_registers_cog(engine):
    bot = MagicMock()
    message_listener.setup(bot, engine)
    cog = bot.add_cog.call_args.args[0]
    assert isinstance(cog, AutomodListenerCog)
    assert cog.engine is engine
