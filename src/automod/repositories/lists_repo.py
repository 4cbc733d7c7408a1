"""
Repository for the bad-word list and the link allow/block lists.
"""

from __future__ import annotations

from typing import List

import aiosqlite

from automod.datatypes.automod_datatypes import LinkEntry, ListKind, WordEntry


class WordListRepository:
    """CRUD for automod_words."""

    async def upsert(self, conn: aiosqlite.Connection, entry: WordEntry) -> None:
        await conn.execute(
            """
            INSERT INTO automod_words (guild_id, word, match_type)
            VALUES (?, ?, ?)
            ON CONFLICT(guild_id, word) DO UPDATE SET match_type = excluded.match_type
            """,
            (entry.guild_id, entry.word, entry.match_type.value),
        )

    async def delete(self, conn: aiosqlite.Connection, guild_id: int, word: str) -> bool:
        cursor = await conn.execute(
            "DELETE FROM automod_words WHERE guild_id = ? AND word = ?",
            (guild_id, word.lower()),
        )
        return cursor.rowcount > 0

    async def list_for_guild(self, conn: aiosqlite.Connection, guild_id: int) -> List[WordEntry]:
        async with conn.execute(
            "SELECT guild_id, word, match_type FROM automod_words WHERE guild_id = ? ORDER BY rowid",
            (guild_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [WordEntry(guild_id=row[0], word=row[1], match_type=row[2]) for row in rows]


class LinkListRepository:
    """CRUD for automod_links (both allow and block lists)."""

    async def insert(self, conn: aiosqlite.Connection, entry: LinkEntry) -> bool:
        cursor = await conn.execute(
            "INSERT OR IGNORE INTO automod_links (guild_id, domain, list_kind) VALUES (?, ?, ?)",
            (entry.guild_id, entry.domain, entry.list_kind.value),
        )
        return cursor.rowcount > 0

    async def delete(self, conn: aiosqlite.Connection, entry: LinkEntry) -> bool:
        cursor = await conn.execute(
            "DELETE FROM automod_links WHERE guild_id = ? AND domain = ? AND list_kind = ?",
            (entry.guild_id, entry.domain, entry.list_kind.value),
        )
        return cursor.rowcount > 0

    async def list_domains(self, conn: aiosqlite.Connection, guild_id: int, list_kind: ListKind) -> List[str]:
        async with conn.execute(
            "SELECT domain FROM automod_links WHERE guild_id = ? AND list_kind = ? ORDER BY rowid",
            (guild_id, ListKind(list_kind).value),
        ) as cursor:
            rows = await cursor.fetchall()
        return [row[0] for row in rows]
