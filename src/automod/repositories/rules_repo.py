"""
Repository for the automod_rules and automod_filters tables.
"""

from __future__ import annotations

from typing import List, Optional

import aiosqlite

from automod.datatypes.automod_datatypes import Rule, RuleFilter
from automod.util.logger import get_logger

logger = get_logger("rules_repo")

_RULE_COLUMNS = """
    id, guild_id, rule_type, enabled, threshold, threshold_seconds, action,
    violations_required, mute_duration_seconds, custom_message, log_channel_id
"""


def _row_to_rule(row) -> Rule:
    return Rule(
        id=row[0],
        guild_id=row[1],
        rule_type=row[2],
        enabled=bool(row[3]),
        threshold=row[4],
        threshold_seconds=row[5],
        action=row[6],
        violations_required=row[7],
        mute_duration_seconds=row[8],
        custom_message=row[9],
        log_channel_id=row[10],
    )


def _row_to_filter(row) -> RuleFilter:
    return RuleFilter(
        id=row[0],
        rule_id=row[1],
        filter_type=row[2],
        target_type=row[3],
        target_id=row[4],
    )


class RulesRepository:
    """CRUD for rules and the filters attached to them."""

    async def insert(self, conn: aiosqlite.Connection, rule: Rule) -> int:
        """Insert a rule and return its new id."""
        cursor = await conn.execute(
            """
            INSERT INTO automod_rules (
                guild_id, rule_type, enabled, threshold, threshold_seconds, action,
                violations_required, mute_duration_seconds, custom_message, log_channel_id
            ) VALUES (?, ?, ?, ?, ?, ?, ?, ?, ?, ?)
            """,
            (
                rule.guild_id,
                rule.rule_type.value,
                1 if rule.enabled else 0,
                rule.threshold,
                rule.threshold_seconds,
                rule.action.value,
                rule.violations_required,
                rule.mute_duration_seconds,
                rule.custom_message,
                rule.log_channel_id,
            ),
        )
        return int(cursor.lastrowid)

    async def get(self, conn: aiosqlite.Connection, rule_id: int) -> Optional[Rule]:
        async with conn.execute(
            f"SELECT {_RULE_COLUMNS} FROM automod_rules WHERE id = ?",
            (rule_id,),
        ) as cursor:
            row = await cursor.fetchone()
        return _row_to_rule(row) if row is not None else None

    async def list_for_guild(self, conn: aiosqlite.Connection, guild_id: int) -> List[Rule]:
        """Fetch a guild's rules ordered by id, i.e. insertion order."""
        async with conn.execute(
            f"SELECT {_RULE_COLUMNS} FROM automod_rules WHERE guild_id = ? ORDER BY id",
            (guild_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_rule(row) for row in rows]

    async def update(self, conn: aiosqlite.Connection, rule: Rule) -> bool:
        cursor = await conn.execute(
            """
            UPDATE automod_rules SET
                rule_type             = ?,
                enabled               = ?,
                threshold             = ?,
                threshold_seconds     = ?,
                action                = ?,
                violations_required   = ?,
                mute_duration_seconds = ?,
                custom_message        = ?,
                log_channel_id        = ?,
                updated_at            = CURRENT_TIMESTAMP
            WHERE id = ?
            """,
            (
                rule.rule_type.value,
                1 if rule.enabled else 0,
                rule.threshold,
                rule.threshold_seconds,
                rule.action.value,
                rule.violations_required,
                rule.mute_duration_seconds,
                rule.custom_message,
                rule.log_channel_id,
                rule.id,
            ),
        )
        return cursor.rowcount > 0

    async def delete(self, conn: aiosqlite.Connection, rule_id: int) -> bool:
        """Delete a rule (ON DELETE CASCADE removes its filters)."""
        cursor = await conn.execute("DELETE FROM automod_rules WHERE id = ?", (rule_id,))
        return cursor.rowcount > 0

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    async def insert_filter(self, conn: aiosqlite.Connection, rule_filter: RuleFilter) -> int:
        cursor = await conn.execute(
            """
            INSERT INTO automod_filters (rule_id, filter_type, target_type, target_id)
            VALUES (?, ?, ?, ?)
            """,
            (
                rule_filter.rule_id,
                rule_filter.filter_type.value,
                rule_filter.target_type.value,
                rule_filter.target_id,
            ),
        )
        return int(cursor.lastrowid)

    async def list_filters(self, conn: aiosqlite.Connection, rule_id: int) -> List[RuleFilter]:
        async with conn.execute(
            """
            SELECT id, rule_id, filter_type, target_type, target_id
            FROM automod_filters
            WHERE rule_id = ?
            ORDER BY id
            """,
            (rule_id,),
        ) as cursor:
            rows = await cursor.fetchall()
        return [_row_to_filter(row) for row in rows]

    async def delete_filter(self, conn: aiosqlite.Connection, filter_id: int) -> bool:
        cursor = await conn.execute("DELETE FROM automod_filters WHERE id = ?", (filter_id,))
        return cursor.rowcount > 0
