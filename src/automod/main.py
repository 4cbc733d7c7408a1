"""
Automod Discord Bot
===================

A Discord bot that checks every guild message against per-guild automod
rules (spam, caps, links, mentions, bad words, ...) and enforces them with
warnings, deletions, timeouts and bans.
"""

import os
import sys
from pathlib import Path

def resolve_base_dir() -> Path:
    """Determine the base directory of the project.

    Resolution order:
    1. AUTOMOD_HOME environment variable, if set.
    2. If running in a frozen/compiled context (e.g., PyInstaller, Nuitka), use the executable's directory.
    3. Otherwise, assume running from source and use the grandparent of this file's directory.
    """
    if env_home := os.getenv("AUTOMOD_HOME"):
        return Path(env_home).resolve()

    if getattr(sys, "frozen", False) or getattr(sys, "compiled", False):
        return Path(sys.argv[0]).resolve().parent

    return Path(__file__).resolve().parents[2]

BASE_DIR = resolve_base_dir()
os.chdir(BASE_DIR)

import asyncio
import discord
from dotenv import load_dotenv

from automod.configuration.app_configuration import app_config
from automod.database.sqlite_store import SQLiteAutomodStore
from automod.listener import message_listener
from automod.moderation.automod_engine import AutomodEngine
from automod.platform.discord_gateway import DiscordGateway
from automod.scheduler.expiry_sweeper import ExpirySweeper
from automod.util.logger import get_logger, handle_exception


logger = get_logger("main")


def load_environment() -> str:
    """Load environment variables and return the Discord bot token.

    Raises:
        SystemExit: If the required ``DISCORD_BOT_TOKEN`` variable is missing.
    """
    load_dotenv(dotenv_path=BASE_DIR / ".env")
    token = os.getenv("DISCORD_BOT_TOKEN")
    if not token:
        logger.critical("'DISCORD_BOT_TOKEN' environment variable not set. Bot cannot start.")
        sys.exit(1)
    return token


def build_intents() -> discord.Intents:
    """Intents needed to read message content and resolve member roles."""
    intents = discord.Intents.default()
    intents.message_content = True
    intents.guilds = True
    intents.messages = True
    intents.members = True
    return intents


def create_bot(store: SQLiteAutomodStore) -> discord.Bot:
    """Instantiate the Discord bot and register the automod listener."""
    bot = discord.Bot(intents=build_intents())
    engine = AutomodEngine(store, DiscordGateway(bot), config=app_config.automod)
    message_listener.setup(bot, engine)
    logger.info("Automod listener registered.")
    return bot


async def start_bot(bot: discord.Bot, token: str) -> None:
    logger.info("Attempting to connect to Discord…")
    try:
        await bot.start(token)
    except asyncio.CancelledError:
        logger.info("Discord bot start cancelled; shutting down")
    finally:
        logger.info("Discord bot start routine finished.")


async def shutdown_runtime(
    bot: discord.Bot | None,
    sweeper: ExpirySweeper | None,
    store: SQLiteAutomodStore,
) -> None:
    """Stop the sweeper, close the bot, then close the database."""
    if sweeper is not None:
        try:
            await sweeper.shutdown()
        except Exception as exc:
            logger.exception("Error during sweeper shutdown: %s", exc)

    if bot is not None and not bot.is_closed():
        try:
            await bot.close()
        except Exception as exc:
            logger.exception("Error while closing Discord bot: %s", exc)

    try:
        await store.close()
    except Exception as exc:
        logger.exception("Error during database shutdown: %s", exc)

    logger.info("Shutdown complete.")


async def async_main() -> int:
    """Bootstrap the database, bot and sweeper, returning an exit code."""
    token = load_environment()
    store = SQLiteAutomodStore()

    try:
        logger.info("Initializing automod database...")
        await store.initialize(app_config.database_path)
    except Exception as exc:
        logger.critical("Failed to initialize database: %s", exc)
        return 1

    try:
        bot = create_bot(store)
    except Exception as exc:
        logger.critical("Failed to initialize Discord bot: %s", exc)
        await store.close()
        return 1

    sweeper = ExpirySweeper(store, config=app_config.automod)
    sweeper.start()

    exit_code = 0
    try:
        await start_bot(bot, token)
    except Exception as exc:
        logger.critical("Discord bot runtime error: %s", exc)
        exit_code = 1
    finally:
        await shutdown_runtime(bot, sweeper, store)

    return exit_code


def main() -> int:
    """Entrypoint that runs the async runtime and returns the process exit code."""
    sys.excepthook = handle_exception
    logger.info("Starting Automod Bot…")
    try:
        return asyncio.run(async_main())
    except KeyboardInterrupt:
        logger.info("Shutdown requested by user.")
        return 0
    except SystemExit as exit_exc:
        code = exit_exc.code
        if isinstance(code, int):
            return code
        return 1
    except Exception as exc:
        logger.critical("An unexpected error occurred while running the bot: %s", exc)
        return 1


if __name__ == "__main__":
    print(f"Exited with code: {main()}")
