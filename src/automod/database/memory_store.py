"""
In-memory implementation of :class:`AutomodStore`.

Nothing survives a restart. Useful for tests (deterministic, no files) and
for running the engine without a database. Each method body runs without
awaiting, so on a single event loop every operation is atomic.
"""

from __future__ import annotations

import itertools
from dataclasses import replace
from typing import Dict, List, Optional, Tuple

from automod.database.store import AutomodStore
from automod.datatypes.automod_datatypes import (
    AutomodSettings,
    EventKind,
    LinkEntry,
    ListKind,
    Rule,
    RuleFilter,
    RuleType,
    TrackedEvent,
    ViolationRecord,
    WordEntry,
    normalise_domain,
)


class InMemoryAutomodStore(AutomodStore):
    """Dictionary-backed automod store."""

    def __init__(self) -> None:
        self._rule_ids = itertools.count(1)
        self._filter_ids = itertools.count(1)
        self._rules: Dict[int, Rule] = {}
        self._filters: Dict[int, RuleFilter] = {}
        self._settings: Dict[int, AutomodSettings] = {}
        self._words: Dict[Tuple[int, str], WordEntry] = {}
        self._links: Dict[Tuple[int, str, ListKind], LinkEntry] = {}
        self._events: List[TrackedEvent] = []
        self._violations: List[ViolationRecord] = []

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    async def create_rule(self, rule: Rule) -> Rule:
        stored = replace(rule, id=next(self._rule_ids))
        self._rules[stored.id] = stored
        return stored

    async def get_rule(self, rule_id: int) -> Optional[Rule]:
        return self._rules.get(rule_id)

    async def list_rules(self, guild_id: int) -> List[Rule]:
        # dicts keep insertion order and ids only grow
        return [rule for rule in self._rules.values() if rule.guild_id == guild_id]

    async def update_rule(self, rule: Rule) -> bool:
        if rule.id not in self._rules:
            return False
        self._rules[rule.id] = rule
        return True

    async def delete_rule(self, rule_id: int) -> bool:
        if self._rules.pop(rule_id, None) is None:
            return False
        self._filters = {fid: f for fid, f in self._filters.items() if f.rule_id != rule_id}
        return True

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    async def add_filter(self, rule_filter: RuleFilter) -> RuleFilter:
        stored = replace(rule_filter, id=next(self._filter_ids))
        self._filters[stored.id] = stored
        return stored

    async def list_filters(self, rule_id: int) -> List[RuleFilter]:
        return [f for f in self._filters.values() if f.rule_id == rule_id]

    async def remove_filter(self, filter_id: int) -> bool:
        return self._filters.pop(filter_id, None) is not None

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self, guild_id: int) -> AutomodSettings:
        return self._settings.get(guild_id) or AutomodSettings(guild_id=guild_id)

    async def save_settings(self, settings: AutomodSettings) -> None:
        self._settings[settings.guild_id] = settings

    # ------------------------------------------------------------------
    # Word and link lists
    # ------------------------------------------------------------------

    async def add_word(self, entry: WordEntry) -> None:
        self._words[(entry.guild_id, entry.word)] = entry

    async def remove_word(self, guild_id: int, word: str) -> bool:
        return self._words.pop((guild_id, word.lower()), None) is not None

    async def list_words(self, guild_id: int) -> List[WordEntry]:
        return [entry for (gid, _), entry in self._words.items() if gid == guild_id]

    async def add_link(self, entry: LinkEntry) -> bool:
        key = (entry.guild_id, entry.domain, entry.list_kind)
        if key in self._links:
            return False
        self._links[key] = entry
        return True

    async def remove_link(self, guild_id: int, domain: str, list_kind: ListKind) -> bool:
        key = (guild_id, normalise_domain(domain), ListKind(list_kind))
        return self._links.pop(key, None) is not None

    async def list_links(self, guild_id: int, list_kind: ListKind) -> List[str]:
        kind = ListKind(list_kind)
        return [entry.domain for entry in self._links.values() if entry.guild_id == guild_id and entry.list_kind is kind]

    # ------------------------------------------------------------------
    # Tracked events
    # ------------------------------------------------------------------

    async def append_event(self, event: TrackedEvent) -> None:
        self._events.append(event)

    async def count_events_since(
        self,
        guild_id: int,
        user_id: int,
        event_kind: EventKind,
        since: float,
        channel_id: Optional[int] = None,
    ) -> int:
        return sum(
            1
            for event in self._events
            if event.guild_id == guild_id
            and event.user_id == user_id
            and event.event_kind == event_kind
            and event.timestamp > since
            and (channel_id is None or event.channel_id == channel_id)
        )

    async def purge_events_before(self, cutoff: float) -> int:
        kept = [event for event in self._events if event.timestamp >= cutoff]
        removed = len(self._events) - len(kept)
        self._events = kept
        return removed

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    async def append_violation(self, record: ViolationRecord) -> None:
        self._violations.append(record)

    async def count_violations_since(
        self,
        guild_id: int,
        user_id: int,
        rule_type: RuleType,
        since: float,
    ) -> int:
        return sum(
            1
            for record in self._violations
            if record.guild_id == guild_id
            and record.user_id == user_id
            and record.rule_type == rule_type
            and record.timestamp > since
        )

    async def purge_violations_before(self, cutoff: float) -> int:
        kept = [record for record in self._violations if record.timestamp >= cutoff]
        removed = len(self._violations) - len(kept)
        self._violations = kept
        return removed
