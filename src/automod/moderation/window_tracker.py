"""
Sliding-window tracker for frequency-based detectors.

Each call records one event for the message author and returns how many
events of that kind the author produced inside the trailing window, the
new one included. Append and count run under a per-(guild, user, kind)
lock so two concurrent messages from the same user cannot both miss each
other's event.
"""

from __future__ import annotations

import time
from typing import Callable

from automod.database.store import AutomodStore
from automod.datatypes.automod_datatypes import EventKind, TrackedEvent
from automod.datatypes.message_datatypes import InboundMessage
from automod.util.keyed_lock import KeyedLock
from automod.util.logger import get_logger

logger = get_logger("window_tracker")

Clock = Callable[[], float]


class SlidingWindowTracker:
    """Records timestamped per-user events and counts them over a window."""

    def __init__(self, store: AutomodStore, clock: Clock = time.time) -> None:
        self._store = store
        self._clock = clock
        self._locks = KeyedLock()

    async def record_and_count(
        self,
        message: InboundMessage,
        event_kind: EventKind,
        window_seconds: float,
        *,
        same_channel: bool = False,
    ) -> int:
        """Append an event for ``message`` and count the author's recent events.

        Args:
            message: Message whose author and channel the event belongs to.
            event_kind: Kind of event to record and count.
            window_seconds: Length of the trailing window.
            same_channel: Only count events from the message's channel.

        Returns:
            int: Events of ``event_kind`` newer than ``now - window_seconds``.
        """
        key = (message.guild_id, message.author_id, event_kind)
        async with self._locks(key):
            now = self._clock()
            await self._store.append_event(
                TrackedEvent(
                    guild_id=message.guild_id,
                    user_id=message.author_id,
                    channel_id=message.channel_id,
                    event_kind=event_kind,
                    timestamp=now,
                )
            )
            count = await self._store.count_events_since(
                message.guild_id,
                message.author_id,
                event_kind,
                since=now - window_seconds,
                channel_id=message.channel_id if same_channel else None,
            )

        logger.debug(
            "[TRACKER] %s events for user %s in guild %s over %ss: %d",
            event_kind.value, message.author_id, message.guild_id, window_seconds, count,
        )
        return count

    async def count(
        self,
        guild_id: int,
        user_id: int,
        event_kind: EventKind,
        window_seconds: float,
        channel_id: int | None = None,
    ) -> int:
        """Count recent events without recording a new one."""
        return await self._store.count_events_since(
            guild_id, user_id, event_kind, since=self._clock() - window_seconds, channel_id=channel_id
        )
