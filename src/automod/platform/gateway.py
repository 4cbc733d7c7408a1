"""
Outbound interface the enforcement executor uses to act on the platform.

Every call is fallible and reports success as a bool instead of raising;
the executor turns failures into its outcome string.
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

from automod.datatypes.action_datatypes import AuditRecord
from automod.datatypes.message_datatypes import InboundMessage


@runtime_checkable
class PlatformGateway(Protocol):
    async def send_ephemeral_notice(self, message: InboundMessage, text: str, delete_after: float) -> bool:
        """Post ``text`` in the message's channel and retract it after ``delete_after`` seconds."""
        ...

    async def delete_message(self, message: InboundMessage) -> bool:
        ...

    async def timeout_member(self, message: InboundMessage, seconds: int, reason: str) -> bool:
        """Time out the message author for ``seconds``."""
        ...

    async def ban_member(self, message: InboundMessage, reason: str) -> bool:
        ...

    async def send_audit_embed(self, guild_id: int, channel_id: int, record: AuditRecord) -> bool:
        """Send ``record`` to the given log channel."""
        ...
