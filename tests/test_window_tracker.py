"""Tests for the sliding-window tracker and the violation accumulator."""

import asyncio

import pytest

from automod.datatypes.automod_datatypes import EventKind, RuleType
from automod.moderation.violation_accumulator import VIOLATION_WINDOW_SECONDS, ViolationAccumulator
from automod.moderation.window_tracker import SlidingWindowTracker

GUILD_ID = 1000
AUTHOR_ID = 42


class TestSlidingWindowTracker:
    @pytest.mark.asyncio
    async def test_count_includes_new_event(self, store, clock, make_message):
        tracker = SlidingWindowTracker(store, clock=clock)
        assert await tracker.record_and_count(make_message(), EventKind.LINK, 30) == 1
        assert await tracker.record_and_count(make_message(), EventKind.LINK, 30) == 2

    @pytest.mark.asyncio
    async def test_window_excludes_old_events(self, store, clock, make_message):
        tracker = SlidingWindowTracker(store, clock=clock)
        await tracker.record_and_count(make_message(), EventKind.MENTION, 30)
        clock.advance(31)
        assert await tracker.record_and_count(make_message(), EventKind.MENTION, 30) == 1

    @pytest.mark.asyncio
    async def test_kinds_and_users_are_separate(self, store, clock, make_message):
        tracker = SlidingWindowTracker(store, clock=clock)
        await tracker.record_and_count(make_message(), EventKind.LINK, 30)
        await tracker.record_and_count(make_message(author_id=7), EventKind.LINK, 30)
        assert await tracker.record_and_count(make_message(), EventKind.STICKER, 30) == 1
        assert await tracker.count(GUILD_ID, AUTHOR_ID, EventKind.LINK, 30) == 1

    @pytest.mark.asyncio
    async def test_same_channel_counting(self, store, clock, make_message):
        tracker = SlidingWindowTracker(store, clock=clock)
        await tracker.record_and_count(make_message(channel_id=1), EventKind.MESSAGE, 5)
        assert await tracker.record_and_count(make_message(channel_id=2), EventKind.MESSAGE, 5, same_channel=True) == 1
        assert await tracker.record_and_count(make_message(channel_id=2), EventKind.MESSAGE, 5) == 3

    @pytest.mark.asyncio
    async def test_concurrent_records_see_each_other(self, store, clock, make_message):
        tracker = SlidingWindowTracker(store, clock=clock)
        counts = await asyncio.gather(
            *(tracker.record_and_count(make_message(), EventKind.MESSAGE, 5) for _ in range(5))
        )
        assert sorted(counts) == [1, 2, 3, 4, 5]


class TestViolationAccumulator:
    @pytest.mark.asyncio
    async def test_counts_within_window(self, store, clock):
        accumulator = ViolationAccumulator(store, clock=clock)
        assert await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS) == 1
        clock.advance(100)
        assert await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS) == 2

    @pytest.mark.asyncio
    async def test_violations_decay_after_window(self, store, clock):
        accumulator = ViolationAccumulator(store, clock=clock)
        await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS)
        clock.advance(VIOLATION_WINDOW_SECONDS)
        assert await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS) == 1

    @pytest.mark.asyncio
    async def test_rule_types_are_counted_separately(self, store, clock):
        accumulator = ViolationAccumulator(store, clock=clock)
        await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS)
        assert await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ZALGO) == 1

    @pytest.mark.asyncio
    async def test_custom_window(self, store, clock):
        accumulator = ViolationAccumulator(store, clock=clock, window_seconds=10)
        assert accumulator.window_seconds == 10
        await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS)
        clock.advance(11)
        assert await accumulator.record_and_count(GUILD_ID, AUTHOR_ID, RuleType.ALL_CAPS) == 1
