"""
Repository for the automod_settings table.

Ignored roles and channels are stored as comma-separated id lists.
"""

from __future__ import annotations

from typing import FrozenSet, Iterable, Optional

import aiosqlite

from automod.datatypes.automod_datatypes import AutomodSettings
from automod.util.logger import get_logger

logger = get_logger("settings_repo")


def _join_ids(ids: Iterable[int]) -> str:
    return ",".join(str(value) for value in sorted(ids))


def _split_ids(raw: Optional[str]) -> FrozenSet[int]:
    ids = set()
    for part in (raw or "").split(","):
        part = part.strip()
        if not part:
            continue
        try:
            ids.add(int(part))
        except ValueError:
            logger.warning("[SETTINGS REPO] Skipping malformed id %r", part)
    return frozenset(ids)


class SettingsRepository:
    """Get and upsert a guild's automod settings row."""

    async def get(self, conn: aiosqlite.Connection, guild_id: int) -> Optional[AutomodSettings]:
        async with conn.execute(
            """
            SELECT guild_id, default_log_channel_id, ignored_roles, ignored_channels
            FROM automod_settings
            WHERE guild_id = ?
            """,
            (guild_id,),
        ) as cursor:
            row = await cursor.fetchone()

        if row is None:
            return None

        return AutomodSettings(
            guild_id=row[0],
            default_log_channel_id=row[1],
            ignored_roles=_split_ids(row[2]),
            ignored_channels=_split_ids(row[3]),
        )

    async def upsert(self, conn: aiosqlite.Connection, settings: AutomodSettings) -> None:
        await conn.execute(
            """
            INSERT INTO automod_settings (guild_id, default_log_channel_id, ignored_roles, ignored_channels)
            VALUES (?, ?, ?, ?)
            ON CONFLICT(guild_id) DO UPDATE SET
                default_log_channel_id = excluded.default_log_channel_id,
                ignored_roles          = excluded.ignored_roles,
                ignored_channels       = excluded.ignored_channels,
                updated_at             = CURRENT_TIMESTAMP
            """,
            (
                settings.guild_id,
                settings.default_log_channel_id,
                _join_ids(settings.ignored_roles),
                _join_ids(settings.ignored_channels),
            ),
        )
