"""
Scope resolver: decides whether a rule applies to a message at all.

Two layers are checked:

- Global exemptions from the community settings (bots, the owner,
  administrators, ignored roles, ignored channels).
- The rule's own filters, partitioned into affected/ignored roles and
  channels. Affected groups must match when present; a matching ignored
  group always excludes, even if an affected group matched too.

The resolver only reads from the store, so resolving the same
(rule, message, settings) twice always gives the same answer.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import FrozenSet, Iterable

from automod.database.store import AutomodStore
from automod.datatypes.automod_datatypes import AutomodSettings, FilterType, Rule, RuleFilter, TargetType
from automod.datatypes.message_datatypes import InboundMessage


@dataclass(frozen=True, slots=True)
class FilterGroups:
    """A rule's filters split by (filter type, target type)."""

    affected_roles: FrozenSet[int] = field(default_factory=frozenset)
    affected_channels: FrozenSet[int] = field(default_factory=frozenset)
    ignored_roles: FrozenSet[int] = field(default_factory=frozenset)
    ignored_channels: FrozenSet[int] = field(default_factory=frozenset)

    @classmethod
    def from_filters(cls, filters: Iterable[RuleFilter]) -> "FilterGroups":
        groups = {
            (FilterType.AFFECTED, TargetType.ROLE): set(),
            (FilterType.AFFECTED, TargetType.CHANNEL): set(),
            (FilterType.IGNORED, TargetType.ROLE): set(),
            (FilterType.IGNORED, TargetType.CHANNEL): set(),
        }
        for rule_filter in filters:
            groups[(rule_filter.filter_type, rule_filter.target_type)].add(rule_filter.target_id)
        return cls(
            affected_roles=frozenset(groups[(FilterType.AFFECTED, TargetType.ROLE)]),
            affected_channels=frozenset(groups[(FilterType.AFFECTED, TargetType.CHANNEL)]),
            ignored_roles=frozenset(groups[(FilterType.IGNORED, TargetType.ROLE)]),
            ignored_channels=frozenset(groups[(FilterType.IGNORED, TargetType.CHANNEL)]),
        )

    def allows(self, message: InboundMessage) -> bool:
        if self.affected_roles and not (self.affected_roles & message.author_role_ids):
            return False
        if self.affected_channels and message.channel_id not in self.affected_channels:
            return False
        if self.ignored_roles & message.author_role_ids:
            return False
        if message.channel_id in self.ignored_channels:
            return False
        return True


def is_globally_exempt(message: InboundMessage, settings: AutomodSettings) -> bool:
    """True if no rule may ever apply to this message."""
    if message.author_is_bot:
        return True
    if message.guild_owner_id is not None and message.author_id == message.guild_owner_id:
        return True
    if message.author_is_admin:
        return True
    if settings.ignored_roles & message.author_role_ids:
        return True
    if message.channel_id in settings.ignored_channels:
        return True
    return False


class ScopeResolver:
    """Combines global exemptions with per-rule filters."""

    def __init__(self, store: AutomodStore) -> None:
        self._store = store

    def is_exempt(self, message: InboundMessage, settings: AutomodSettings) -> bool:
        return is_globally_exempt(message, settings)

    async def filter_groups(self, rule: Rule) -> FilterGroups:
        if rule.id is None:
            return FilterGroups()
        return FilterGroups.from_filters(await self._store.list_filters(rule.id))

    async def applies(self, rule: Rule, message: InboundMessage, settings: AutomodSettings) -> bool:
        """Return True if ``rule`` should be evaluated for ``message``."""
        if is_globally_exempt(message, settings):
            return False
        groups = await self.filter_groups(rule)
        return groups.allows(message)
