"""End-to-end tests for AutomodEngine over the in-memory store."""

from unittest.mock import AsyncMock

import pytest

from automod.configuration.app_configuration import AutomodConfig
from automod.database.store import StoreError
from automod.datatypes.automod_datatypes import (
    ActionType,
    AutomodSettings,
    EventKind,
    FilterType,
    Rule,
    RuleFilter,
    RuleType,
    TargetType,
)
from automod.moderation.automod_engine import AutomodEngine

GUILD_ID = 1000


@pytest.fixture()
def engine(store, gateway, clock):
    return AutomodEngine(store, gateway, clock=clock)


async def add_rule(store, rule_type, action=ActionType.DELETE, **kwargs):
    return await store.create_rule(Rule(guild_id=GUILD_ID, rule_type=rule_type, action=action, **kwargs))


class TestRuleSelection:
    @pytest.mark.asyncio
    async def test_clean_message(self, engine, store, gateway, make_message):
        await add_rule(store, RuleType.ALL_CAPS)
        assert await engine.process_message(make_message("a calm message")) is None
        gateway.delete_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_no_rules_means_nothing_to_do(self, engine, make_message):
        assert await engine.process_message(make_message("ANYTHING GOES")) is None

    @pytest.mark.asyncio
    async def test_first_matching_rule_wins(self, engine, store, gateway, make_message):
        await add_rule(store, RuleType.ALL_CAPS, ActionType.WARN)
        await add_rule(store, RuleType.CHARACTER_COUNT, ActionType.INSTANT_BAN, threshold=5)

        result = await engine.process_message(make_message("SHOUTING LOUDLY"))

        assert result.rule_type is RuleType.ALL_CAPS
        assert result.outcome == "Warned"
        gateway.send_ephemeral_notice.assert_awaited_once()
        gateway.ban_member.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_disabled_rules_are_skipped(self, engine, store, make_message):
        await add_rule(store, RuleType.ALL_CAPS, enabled=False)
        await add_rule(store, RuleType.CHARACTER_COUNT, threshold=5)

        result = await engine.process_message(make_message("SHOUTING LOUDLY"))
        assert result.rule_type is RuleType.CHARACTER_COUNT

    @pytest.mark.asyncio
    async def test_rule_filters_are_honoured(self, engine, store, make_message):
        caps = await add_rule(store, RuleType.ALL_CAPS)
        await store.add_filter(
            RuleFilter(rule_id=caps.id, filter_type=FilterType.AFFECTED, target_type=TargetType.CHANNEL, target_id=10)
        )
        assert await engine.process_message(make_message("SHOUTING LOUDLY", channel_id=11)) is None
        assert await engine.process_message(make_message("SHOUTING LOUDLY", channel_id=10)) is not None

    @pytest.mark.asyncio
    async def test_other_guilds_rules_do_not_apply(self, engine, store, make_message):
        await store.create_rule(Rule(guild_id=GUILD_ID + 1, rule_type=RuleType.ALL_CAPS, action=ActionType.DELETE))
        assert await engine.process_message(make_message("SHOUTING LOUDLY")) is None

    @pytest.mark.asyncio
    async def test_check_message_does_not_enforce(self, engine, store, gateway, make_message):
        caps = await add_rule(store, RuleType.ALL_CAPS)
        assert await engine.check_message(make_message("SHOUTING LOUDLY")) == caps
        gateway.delete_message.assert_not_awaited()


class TestExemptions:
    @pytest.mark.asyncio
    @pytest.mark.parametrize("overrides", [{"author_is_bot": True}, {"author_is_admin": True}, {"author_id": 1}])
    async def test_exempt_authors(self, engine, store, gateway, make_message, overrides):
        await add_rule(store, RuleType.ALL_CAPS)
        assert await engine.process_message(make_message("SHOUTING LOUDLY", **overrides)) is None
        gateway.delete_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_globally_ignored_channel(self, engine, store, make_message):
        await add_rule(store, RuleType.ALL_CAPS)
        await store.save_settings(AutomodSettings(guild_id=GUILD_ID, ignored_channels={500}))
        assert await engine.process_message(make_message("SHOUTING LOUDLY", channel_id=500)) is None

    @pytest.mark.asyncio
    async def test_exempt_messages_are_not_tracked(self, engine, store, clock, make_message):
        await add_rule(store, RuleType.FAST_MESSAGE_SPAM, threshold=1)
        await engine.process_message(make_message("hi", author_is_bot=True))
        assert await engine.tracker.count(GUILD_ID, 42, EventKind.MESSAGE, 5) == 0


class TestFailures:
    @pytest.mark.asyncio
    async def test_store_failure_fails_closed(self, store, gateway, clock, make_message):
        await add_rule(store, RuleType.ALL_CAPS)
        store.list_rules = AsyncMock(side_effect=StoreError("database is locked"))
        engine = AutomodEngine(store, gateway, clock=clock)

        assert await engine.process_message(make_message("SHOUTING LOUDLY")) is None
        assert await engine.check_message(make_message("SHOUTING LOUDLY")) is None
        gateway.delete_message.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_unexpected_errors_are_contained(self, store, gateway, clock, make_message):
        store.get_settings = AsyncMock(side_effect=KeyError("bad row"))
        engine = AutomodEngine(store, gateway, clock=clock)
        assert await engine.process_message(make_message("SHOUTING LOUDLY")) is None

    @pytest.mark.asyncio
    async def test_gateway_failures_only_change_outcome(self, engine, store, gateway, make_message):
        await add_rule(store, RuleType.ALL_CAPS)
        gateway.delete_message.return_value = False
        result = await engine.process_message(make_message("SHOUTING LOUDLY"))
        assert result.outcome == "Delete failed"


class TestEscalationFlow:
    @pytest.mark.asyncio
    async def test_auto_mute_over_repeated_messages(self, engine, store, gateway, clock, make_message):
        await add_rule(store, RuleType.ALL_CAPS, ActionType.AUTO_MUTE, violations_required=3)

        outcomes = []
        for _ in range(3):
            result = await engine.process_message(make_message("SHOUTING LOUDLY"))
            outcomes.append(result.outcome)
            clock.advance(10)

        assert outcomes == ["Violation 1 of 3", "Violation 2 of 3", "Auto-muted (3 violations)"]
        assert gateway.delete_message.await_count == 3
        gateway.timeout_member.assert_awaited_once()

    @pytest.mark.asyncio
    async def test_config_window_is_used(self, store, gateway, clock, make_message):
        engine = AutomodEngine(store, gateway, config=AutomodConfig(violation_window_seconds=5), clock=clock)
        await add_rule(store, RuleType.ALL_CAPS, ActionType.AUTO_MUTE, violations_required=2)

        await engine.process_message(make_message("SHOUTING LOUDLY"))
        clock.advance(6)
        result = await engine.process_message(make_message("SHOUTING LOUDLY"))
        assert result.outcome == "Violation 1 of 2"

    @pytest.mark.asyncio
    async def test_audit_routed_to_default_log_channel(self, engine, store, gateway, make_message):
        await add_rule(store, RuleType.ALL_CAPS)
        await store.save_settings(AutomodSettings(guild_id=GUILD_ID, default_log_channel_id=77))

        result = await engine.process_message(make_message("SHOUTING LOUDLY"))
        assert result.audit_target_id == 77
        gateway.send_audit_embed.assert_awaited_once()
