"""
Repository for the append-only tracked_events and automod_violations logs.
"""

from __future__ import annotations

from typing import Optional

import aiosqlite

from automod.datatypes.automod_datatypes import EventKind, RuleType, TrackedEvent, ViolationRecord


class TrackedEventsRepository:
    """Append, count, and purge per-user tracker events."""

    async def append(self, conn: aiosqlite.Connection, event: TrackedEvent) -> None:
        await conn.execute(
            """
            INSERT INTO tracked_events (guild_id, user_id, channel_id, event_kind, timestamp)
            VALUES (?, ?, ?, ?, ?)
            """,
            (event.guild_id, event.user_id, event.channel_id, EventKind(event.event_kind).value, event.timestamp),
        )

    async def count_since(
        self,
        conn: aiosqlite.Connection,
        guild_id: int,
        user_id: int,
        event_kind: EventKind,
        since: float,
        channel_id: Optional[int] = None,
    ) -> int:
        query = """
            SELECT COUNT(*) FROM tracked_events
            WHERE guild_id = ? AND user_id = ? AND event_kind = ? AND timestamp > ?
        """
        params = [guild_id, user_id, EventKind(event_kind).value, since]
        if channel_id is not None:
            query += " AND channel_id = ?"
            params.append(channel_id)

        async with conn.execute(query, params) as cursor:
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def purge_before(self, conn: aiosqlite.Connection, cutoff: float) -> int:
        cursor = await conn.execute("DELETE FROM tracked_events WHERE timestamp < ?", (cutoff,))
        return cursor.rowcount


class ViolationsRepository:
    """Append, count, and purge violation records."""

    async def append(self, conn: aiosqlite.Connection, record: ViolationRecord) -> None:
        await conn.execute(
            "INSERT INTO automod_violations (guild_id, user_id, rule_type, timestamp) VALUES (?, ?, ?, ?)",
            (record.guild_id, record.user_id, RuleType(record.rule_type).value, record.timestamp),
        )

    async def count_since(
        self,
        conn: aiosqlite.Connection,
        guild_id: int,
        user_id: int,
        rule_type: RuleType,
        since: float,
    ) -> int:
        async with conn.execute(
            """
            SELECT COUNT(*) FROM automod_violations
            WHERE guild_id = ? AND user_id = ? AND rule_type = ? AND timestamp > ?
            """,
            (guild_id, user_id, RuleType(rule_type).value, since),
        ) as cursor:
            row = await cursor.fetchone()
        return int(row[0]) if row else 0

    async def purge_before(self, conn: aiosqlite.Connection, cutoff: float) -> int:
        cursor = await conn.execute("DELETE FROM automod_violations WHERE timestamp < ?", (cutoff,))
        return cursor.rowcount
