"""
Pytest configuration and fixtures for automod tests.
"""

import sys
from pathlib import Path
from unittest.mock import AsyncMock

import pytest

# Add src directory to path so imports work
src_path = Path(__file__).parent.parent / "src"
sys.path.insert(0, str(src_path))

from automod.database.memory_store import InMemoryAutomodStore  # noqa: E402
from automod.datatypes.message_datatypes import InboundMessage  # noqa: E402


GUILD_ID = 1000
OWNER_ID = 1
AUTHOR_ID = 42
CHANNEL_ID = 500


class FakeClock:
    """Manually advanced replacement for ``time.time``."""

    def __init__(self, start: float = 1_700_000_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def store() -> InMemoryAutomodStore:
    return InMemoryAutomodStore()


@pytest.fixture()
def make_message():
    """Factory for ``InboundMessage`` with sensible defaults for one guild."""
    counter = iter(range(1, 1_000_000))

    def _make(content: str = "hello there", **overrides) -> InboundMessage:
        fields = {
            "message_id": next(counter),
            "guild_id": GUILD_ID,
            "guild_owner_id": OWNER_ID,
            "channel_id": CHANNEL_ID,
            "author_id": AUTHOR_ID,
            "author_tag": "someone",
            "content": content,
        }
        fields.update(overrides)
        return InboundMessage(**fields)

    return _make


@pytest.fixture()
def gateway() -> AsyncMock:
    """Platform gateway whose every call succeeds."""
    fake = AsyncMock()
    fake.send_ephemeral_notice.return_value = True
    fake.delete_message.return_value = True
    fake.timeout_member.return_value = True
    fake.ban_member.return_value = True
    fake.send_audit_embed.return_value = True
    return fake
