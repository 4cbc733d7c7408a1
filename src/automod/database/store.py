"""
Abstract storage interface for the automod engine.

The engine, the tracker, the accumulator, and the expiry sweeper only ever
talk to an :class:`AutomodStore`. Two implementations ship with the package:
``SQLiteAutomodStore`` for production and ``InMemoryAutomodStore`` for tests
and ephemeral deployments.

Time-window semantics shared by every implementation:

* ``count_*_since(..., since)`` counts records with ``timestamp > since``.
* ``purge_*_before(cutoff)`` deletes records with ``timestamp < cutoff``.

A count whose window starts at or after a purge cutoff is therefore never
affected by that purge.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import List, Optional

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
)


class AutomodError(Exception):
    """Base class for automod errors."""


class StoreError(AutomodError):
    """Raised when the backing store cannot complete an operation."""


class AutomodStore(ABC):
    """CRUD for rules, filters, settings, and lists, plus the append-only logs."""

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    @abstractmethod
    async def create_rule(self, rule: Rule) -> Rule:
        """Persist a new rule and return it with its assigned ``id``."""

    @abstractmethod
    async def get_rule(self, rule_id: int) -> Optional[Rule]:
        ...

    @abstractmethod
    async def list_rules(self, guild_id: int) -> List[Rule]:
        """Return a community's rules in insertion order."""

    @abstractmethod
    async def update_rule(self, rule: Rule) -> bool:
        """Replace a stored rule with ``rule`` (matched by id). False if missing."""

    @abstractmethod
    async def delete_rule(self, rule_id: int) -> bool:
        """Delete a rule and every filter attached to it."""

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    @abstractmethod
    async def add_filter(self, rule_filter: RuleFilter) -> RuleFilter:
        ...

    @abstractmethod
    async def list_filters(self, rule_id: int) -> List[RuleFilter]:
        ...

    @abstractmethod
    async def remove_filter(self, filter_id: int) -> bool:
        ...

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    @abstractmethod
    async def get_settings(self, guild_id: int) -> AutomodSettings:
        """Return stored settings, or empty settings if none were saved."""

    @abstractmethod
    async def save_settings(self, settings: AutomodSettings) -> None:
        """Upsert the full settings object for its community."""

    # ------------------------------------------------------------------
    # Word and link lists
    # ------------------------------------------------------------------

    @abstractmethod
    async def add_word(self, entry: WordEntry) -> None:
        """Insert a word, or update the match type of an existing one."""

    @abstractmethod
    async def remove_word(self, guild_id: int, word: str) -> bool:
        ...

    @abstractmethod
    async def list_words(self, guild_id: int) -> List[WordEntry]:
        ...

    @abstractmethod
    async def add_link(self, entry: LinkEntry) -> bool:
        """Insert a domain into a list. False if it was already present."""

    @abstractmethod
    async def remove_link(self, guild_id: int, domain: str, list_kind: ListKind) -> bool:
        ...

    @abstractmethod
    async def list_links(self, guild_id: int, list_kind: ListKind) -> List[str]:
        ...

    # ------------------------------------------------------------------
    # Tracked events
    # ------------------------------------------------------------------

    @abstractmethod
    async def append_event(self, event: TrackedEvent) -> None:
        ...

    @abstractmethod
    async def count_events_since(
        self,
        guild_id: int,
        user_id: int,
        event_kind: EventKind,
        since: float,
        channel_id: Optional[int] = None,
    ) -> int:
        """Count events newer than ``since``, optionally within one channel."""

    @abstractmethod
    async def purge_events_before(self, cutoff: float) -> int:
        ...

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    @abstractmethod
    async def append_violation(self, record: ViolationRecord) -> None:
        ...

    @abstractmethod
    async def count_violations_since(
        self,
        guild_id: int,
        user_id: int,
        rule_type: RuleType,
        since: float,
    ) -> int:
        ...

    @abstractmethod
    async def purge_violations_before(self, cutoff: float) -> int:
        ...
