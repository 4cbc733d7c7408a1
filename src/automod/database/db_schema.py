"""
Database schema initialization.

Handles creation of the automod tables, indexes, and schema version tracking.
"""

import aiosqlite
from automod.util.logger import get_logger

logger = get_logger("database_schema")

SCHEMA_VERSION = 1


class SchemaManager:
    """Creates the automod tables and indexes if they do not exist."""

    @staticmethod
    async def initialize_schema(db: aiosqlite.Connection) -> None:
        """
        Create or update all database tables and indexes.

        Args:
            db: Open database connection
        """
        await SchemaManager._create_tables(db)
        await SchemaManager._create_indexes(db)
        await SchemaManager._update_schema_version(db)
        await db.commit()
        logger.info("[SCHEMA] Database schema initialized")

    @staticmethod
    async def _create_tables(db: aiosqlite.Connection) -> None:
        """Create all required database tables."""
        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_rules (
                id                    INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id              INTEGER NOT NULL,
                rule_type             TEXT    NOT NULL,
                enabled               INTEGER NOT NULL DEFAULT 1,
                threshold             INTEGER,
                threshold_seconds     INTEGER,
                action                TEXT    NOT NULL,
                violations_required   INTEGER CHECK (violations_required IS NULL OR violations_required >= 1),
                mute_duration_seconds INTEGER,
                custom_message        TEXT,
                log_channel_id        INTEGER,
                created_at            TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                updated_at            TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_filters (
                id          INTEGER PRIMARY KEY AUTOINCREMENT,
                rule_id     INTEGER NOT NULL REFERENCES automod_rules(id) ON DELETE CASCADE,
                filter_type TEXT    NOT NULL,
                target_type TEXT    NOT NULL,
                target_id   INTEGER NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_settings (
                guild_id               INTEGER PRIMARY KEY,
                default_log_channel_id INTEGER,
                ignored_roles          TEXT NOT NULL DEFAULT '',
                ignored_channels       TEXT NOT NULL DEFAULT '',
                updated_at             TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_words (
                guild_id   INTEGER NOT NULL,
                word       TEXT    NOT NULL,
                match_type TEXT    NOT NULL DEFAULT 'contains',
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, word)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_links (
                guild_id   INTEGER NOT NULL,
                domain     TEXT    NOT NULL,
                list_kind  TEXT    NOT NULL,
                created_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP,
                PRIMARY KEY (guild_id, domain, list_kind)
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS tracked_events (
                id         INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id   INTEGER NOT NULL,
                user_id    INTEGER NOT NULL,
                channel_id INTEGER NOT NULL,
                event_kind TEXT    NOT NULL,
                timestamp  REAL    NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS automod_violations (
                id        INTEGER PRIMARY KEY AUTOINCREMENT,
                guild_id  INTEGER NOT NULL,
                user_id   INTEGER NOT NULL,
                rule_type TEXT    NOT NULL,
                timestamp REAL    NOT NULL
            )
        """)

        await db.execute("""
            CREATE TABLE IF NOT EXISTS schema_version (
                version INTEGER PRIMARY KEY,
                applied_at TIMESTAMP DEFAULT CURRENT_TIMESTAMP
            )
        """)

    @staticmethod
    async def _create_indexes(db: aiosqlite.Connection) -> None:
        """Create indexes for the per-guild and per-window lookups."""
        await db.execute("CREATE INDEX IF NOT EXISTS idx_rules_guild ON automod_rules(guild_id, id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_filters_rule ON automod_filters(rule_id)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_tracked_events_lookup ON tracked_events(guild_id, user_id, event_kind, timestamp)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_tracked_events_timestamp ON tracked_events(timestamp)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_violations_lookup ON automod_violations(guild_id, user_id, rule_type, timestamp)")
        await db.execute("CREATE INDEX IF NOT EXISTS idx_violations_timestamp ON automod_violations(timestamp)")

    @staticmethod
    async def _update_schema_version(db: aiosqlite.Connection) -> None:
        """Update schema version tracking."""
        await db.execute("INSERT OR IGNORE INTO schema_version (version) VALUES (?)", (SCHEMA_VERSION,))
