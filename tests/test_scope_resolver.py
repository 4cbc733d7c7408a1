"""Tests for global exemptions and per-rule filters."""

import pytest

from automod.datatypes.automod_datatypes import (
    ActionType,
    AutomodSettings,
    FilterType,
    Rule,
    RuleFilter,
    RuleType,
    TargetType,
)
from automod.moderation.scope_resolver import FilterGroups, ScopeResolver, is_globally_exempt

GUILD_ID = 1000
OWNER_ID = 1


@pytest.fixture()
def resolver(store):
    return ScopeResolver(store)


@pytest.fixture()
def settings():
    return AutomodSettings(guild_id=GUILD_ID)


async def stored_rule(store, *filters):
    rule = await store.create_rule(Rule(guild_id=GUILD_ID, rule_type=RuleType.ALL_CAPS, action=ActionType.DELETE))
    for filter_type, target_type, target_id in filters:
        await store.add_filter(
            RuleFilter(rule_id=rule.id, filter_type=filter_type, target_type=target_type, target_id=target_id)
        )
    return rule


class TestGlobalExemptions:
    def test_regular_member_is_not_exempt(self, make_message, settings):
        assert is_globally_exempt(make_message(), settings) is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"author_is_bot": True},
            {"author_id": OWNER_ID},
            {"author_is_admin": True},
        ],
    )
    def test_bots_owner_and_admins(self, make_message, settings, overrides):
        assert is_globally_exempt(make_message(**overrides), settings) is True

    def test_ignored_role_and_channel(self, make_message):
        settings = AutomodSettings(guild_id=GUILD_ID, ignored_roles={7}, ignored_channels={99})
        assert is_globally_exempt(make_message(author_role_ids={7}), settings) is True
        assert is_globally_exempt(make_message(channel_id=99), settings) is True
        assert is_globally_exempt(make_message(author_role_ids={8}, channel_id=98), settings) is False


class TestRuleFilters:
    @pytest.mark.asyncio
    async def test_no_filters_applies_everywhere(self, store, resolver, make_message, settings):
        rule = await stored_rule(store)
        assert await resolver.applies(rule, make_message(channel_id=1), settings) is True
        assert await resolver.applies(rule, make_message(channel_id=2), settings) is True

    @pytest.mark.asyncio
    async def test_affected_channel_limits_scope(self, store, resolver, make_message, settings):
        rule = await stored_rule(store, (FilterType.AFFECTED, TargetType.CHANNEL, 10))
        assert await resolver.applies(rule, make_message(channel_id=10), settings) is True
        assert await resolver.applies(rule, make_message(channel_id=11), settings) is False

    @pytest.mark.asyncio
    async def test_affected_role_requires_membership(self, store, resolver, make_message, settings):
        rule = await stored_rule(store, (FilterType.AFFECTED, TargetType.ROLE, 5))
        assert await resolver.applies(rule, make_message(author_role_ids={5, 6}), settings) is True
        assert await resolver.applies(rule, make_message(author_role_ids={6}), settings) is False

    @pytest.mark.asyncio
    async def test_ignored_role_beats_affected_role(self, store, resolver, make_message, settings):
        rule = await stored_rule(
            store,
            (FilterType.AFFECTED, TargetType.ROLE, 5),
            (FilterType.IGNORED, TargetType.ROLE, 6),
        )
        assert await resolver.applies(rule, make_message(author_role_ids={5}), settings) is True
        assert await resolver.applies(rule, make_message(author_role_ids={5, 6}), settings) is False

    @pytest.mark.asyncio
    async def test_ignored_channel(self, store, resolver, make_message, settings):
        rule = await stored_rule(store, (FilterType.IGNORED, TargetType.CHANNEL, 10))
        assert await resolver.applies(rule, make_message(channel_id=10), settings) is False
        assert await resolver.applies(rule, make_message(channel_id=11), settings) is True

    @pytest.mark.asyncio
    async def test_global_exemption_wins_over_filters(self, store, resolver, make_message, settings):
        rule = await stored_rule(store, (FilterType.AFFECTED, TargetType.CHANNEL, 10))
        assert await resolver.applies(rule, make_message(channel_id=10, author_is_admin=True), settings) is False

    @pytest.mark.asyncio
    async def test_resolution_is_idempotent(self, store, resolver, make_message, settings):
        rule = await stored_rule(
            store,
            (FilterType.AFFECTED, TargetType.CHANNEL, 10),
            (FilterType.IGNORED, TargetType.ROLE, 6),
        )
        message = make_message(channel_id=10, author_role_ids={3})
        first = await resolver.applies(rule, message, settings)
        second = await resolver.applies(rule, message, settings)
        assert first is second is True
        assert await store.list_filters(rule.id) == await store.list_filters(rule.id)

    @pytest.mark.asyncio
    async def test_unsaved_rule_has_no_filters(self, resolver):
        unsaved = Rule(guild_id=GUILD_ID, rule_type=RuleType.ZALGO, action=ActionType.WARN)
        assert await resolver.filter_groups(unsaved) == FilterGroups()


def test_filter_groups_partition():
    groups = FilterGroups.from_filters(
        [
            RuleFilter(rule_id=1, filter_type=FilterType.AFFECTED, target_type=TargetType.ROLE, target_id=1),
            RuleFilter(rule_id=1, filter_type="ignored", target_type="channel", target_id=2),
        ]
    )
    assert groups.affected_roles == frozenset({1})
    assert groups.ignored_channels == frozenset({2})
    assert groups.affected_channels == frozenset()
    assert groups.ignored_roles == frozenset()
