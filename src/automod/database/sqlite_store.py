"""
SQLite implementation of :class:`AutomodStore`.

One :class:`ConnectionManager` backs the whole store. Reads go straight to
the shared connection; every write runs inside ``transaction()`` so writes
are serialised and committed atomically. Driver errors are re-raised as
:class:`StoreError` so the engine can fail closed on them.
"""

from __future__ import annotations

import sqlite3
from contextlib import contextmanager
from dataclasses import replace
from pathlib import Path
from typing import Iterator, List, Optional

from automod.database.db_connection import ConnectionManager
from automod.database.db_schema import SchemaManager
from automod.database.store import AutomodStore, StoreError
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
from automod.repositories.lists_repo import LinkListRepository, WordListRepository
from automod.repositories.rules_repo import RulesRepository
from automod.repositories.settings_repo import SettingsRepository
from automod.repositories.tracking_repo import TrackedEventsRepository, ViolationsRepository
from automod.util.logger import get_logger

logger = get_logger("sqlite_store")


@contextmanager
def _store_errors(operation: str) -> Iterator[None]:
    try:
        yield
    except (sqlite3.Error, RuntimeError, ValueError) as exc:
        raise StoreError(f"{operation} failed: {exc}") from exc


class SQLiteAutomodStore(AutomodStore):
    """Durable automod store on a single aiosqlite connection.

    Lifecycle:
        1. ``await store.initialize(path)`` at startup
        2. use the store
        3. ``await store.close()`` at shutdown
    """

    def __init__(self, connection: Optional[ConnectionManager] = None) -> None:
        self._connection = connection or ConnectionManager()
        self._rules = RulesRepository()
        self._settings = SettingsRepository()
        self._words = WordListRepository()
        self._links = LinkListRepository()
        self._events = TrackedEventsRepository()
        self._violations = ViolationsRepository()

    async def initialize(self, db_path: Path) -> None:
        """Open the connection and create the schema."""
        with _store_errors("initialize"):
            await self._connection.open(db_path)
            async with self._connection.transaction() as conn:
                await SchemaManager.initialize_schema(conn)
        logger.info("[SQLITE STORE] Store ready at %s", db_path)

    async def close(self) -> None:
        await self._connection.close()

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    async def create_rule(self, rule: Rule) -> Rule:
        with _store_errors("create_rule"):
            async with self._connection.transaction() as conn:
                rule_id = await self._rules.insert(conn, rule)
        logger.debug("[SQLITE STORE] Created rule %s (%s) for guild %s", rule_id, rule.rule_type, rule.guild_id)
        return replace(rule, id=rule_id)

    async def get_rule(self, rule_id: int) -> Optional[Rule]:
        with _store_errors("get_rule"):
            async with self._connection.read() as conn:
                return await self._rules.get(conn, rule_id)

    async def list_rules(self, guild_id: int) -> List[Rule]:
        with _store_errors("list_rules"):
            async with self._connection.read() as conn:
                return await self._rules.list_for_guild(conn, guild_id)

    async def update_rule(self, rule: Rule) -> bool:
        if rule.id is None:
            return False
        with _store_errors("update_rule"):
            async with self._connection.transaction() as conn:
                return await self._rules.update(conn, rule)

    async def delete_rule(self, rule_id: int) -> bool:
        with _store_errors("delete_rule"):
            async with self._connection.transaction() as conn:
                return await self._rules.delete(conn, rule_id)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    async def add_filter(self, rule_filter: RuleFilter) -> RuleFilter:
        with _store_errors("add_filter"):
            async with self._connection.transaction() as conn:
                filter_id = await self._rules.insert_filter(conn, rule_filter)
        return replace(rule_filter, id=filter_id)

    async def list_filters(self, rule_id: int) -> List[RuleFilter]:
        with _store_errors("list_filters"):
            async with self._connection.read() as conn:
                return await self._rules.list_filters(conn, rule_id)

    async def remove_filter(self, filter_id: int) -> bool:
        with _store_errors("remove_filter"):
            async with self._connection.transaction() as conn:
                return await self._rules.delete_filter(conn, filter_id)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def get_settings(self, guild_id: int) -> AutomodSettings:
        with _store_errors("get_settings"):
            async with self._connection.read() as conn:
                settings = await self._settings.get(conn, guild_id)
        return settings if settings is not None else AutomodSettings(guild_id=guild_id)

    async def save_settings(self, settings: AutomodSettings) -> None:
        with _store_errors("save_settings"):
            async with self._connection.transaction() as conn:
                await self._settings.upsert(conn, settings)

    # ------------------------------------------------------------------
    # Word and link lists
    # ------------------------------------------------------------------

    async def add_word(self, entry: WordEntry) -> None:
        with _store_errors("add_word"):
            async with self._connection.transaction() as conn:
                await self._words.upsert(conn, entry)

    async def remove_word(self, guild_id: int, word: str) -> bool:
        with _store_errors("remove_word"):
            async with self._connection.transaction() as conn:
                return await self._words.delete(conn, guild_id, word)

    async def list_words(self, guild_id: int) -> List[WordEntry]:
        with _store_errors("list_words"):
            async with self._connection.read() as conn:
                return await self._words.list_for_guild(conn, guild_id)

    async def add_link(self, entry: LinkEntry) -> bool:
        with _store_errors("add_link"):
            async with self._connection.transaction() as conn:
                return await self._links.insert(conn, entry)

    async def remove_link(self, guild_id: int, domain: str, list_kind: ListKind) -> bool:
        entry = LinkEntry(guild_id=guild_id, domain=domain, list_kind=list_kind)
        with _store_errors("remove_link"):
            async with self._connection.transaction() as conn:
                return await self._links.delete(conn, entry)

    async def list_links(self, guild_id: int, list_kind: ListKind) -> List[str]:
        with _store_errors("list_links"):
            async with self._connection.read() as conn:
                return await self._links.list_domains(conn, guild_id, list_kind)

    # ------------------------------------------------------------------
    # Tracked events
    # ------------------------------------------------------------------

    async def append_event(self, event: TrackedEvent) -> None:
        with _store_errors("append_event"):
            async with self._connection.transaction() as conn:
                await self._events.append(conn, event)

    async def count_events_since(
        self,
        guild_id: int,
        user_id: int,
        event_kind: EventKind,
        since: float,
        channel_id: Optional[int] = None,
    ) -> int:
        with _store_errors("count_events_since"):
            async with self._connection.read() as conn:
                return await self._events.count_since(conn, guild_id, user_id, event_kind, since, channel_id)

    async def purge_events_before(self, cutoff: float) -> int:
        with _store_errors("purge_events_before"):
            async with self._connection.transaction() as conn:
                return await self._events.purge_before(conn, cutoff)

    # ------------------------------------------------------------------
    # Violations
    # ------------------------------------------------------------------

    async def append_violation(self, record: ViolationRecord) -> None:
        with _store_errors("append_violation"):
            async with self._connection.transaction() as conn:
                await self._violations.append(conn, record)

    async def count_violations_since(
        self,
        guild_id: int,
        user_id: int,
        rule_type: RuleType,
        since: float,
    ) -> int:
        with _store_errors("count_violations_since"):
            async with self._connection.read() as conn:
                return await self._violations.count_since(conn, guild_id, user_id, rule_type, since)

    async def purge_violations_before(self, cutoff: float) -> int:
        with _store_errors("purge_violations_before"):
            async with self._connection.transaction() as conn:
                return await self._violations.purge_before(conn, cutoff)
