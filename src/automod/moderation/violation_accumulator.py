"""
Violation accumulator for escalating actions (``auto_mute`` / ``auto_ban``).

Standing is never reset explicitly: a user's count only drops as records
age out of the accumulation window.
"""

from __future__ import annotations

import time
from typing import Callable

from automod.database.store import AutomodStore
from automod.datatypes.automod_datatypes import RuleType, ViolationRecord
from automod.util.keyed_lock import KeyedLock
from automod.util.logger import get_logger

logger = get_logger("violation_accumulator")

VIOLATION_WINDOW_SECONDS = 300


class ViolationAccumulator:
    """Appends violation records and counts them over a trailing window."""

    def __init__(
        self,
        store: AutomodStore,
        clock: Callable[[], float] = time.time,
        window_seconds: float = VIOLATION_WINDOW_SECONDS,
    ) -> None:
        self._store = store
        self._clock = clock
        self._window_seconds = window_seconds
        self._locks = KeyedLock()

    @property
    def window_seconds(self) -> float:
        return self._window_seconds

    async def record_and_count(self, guild_id: int, user_id: int, rule_type: RuleType) -> int:
        """Append a violation, then return the count inside the window (new one included)."""
        async with self._locks((guild_id, user_id, rule_type)):
            now = self._clock()
            await self._store.append_violation(
                ViolationRecord(guild_id=guild_id, user_id=user_id, rule_type=rule_type, timestamp=now)
            )
            count = await self._store.count_violations_since(
                guild_id, user_id, rule_type, since=now - self._window_seconds
            )

        logger.debug(
            "[ACCUMULATOR] User %s in guild %s has %d %s violation(s) in the last %ss",
            user_id, guild_id, count, rule_type.value, self._window_seconds,
        )
        return count
