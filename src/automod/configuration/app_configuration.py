from __future__ import annotations
from dataclasses import dataclass, field
from pathlib import Path
import fcntl
from typing import Any, Dict, Tuple
import yaml

from automod.util.logger import get_logger

logger = get_logger("app_configuration")


CONFIG_PATH = Path("./config/app_config.yml").resolve()
DEFAULT_DATABASE_PATH = "./data/automod.db"


@dataclass(frozen=True, slots=True)
class AutomodConfig:
    """Immutable snapshot of the ``automod`` section of the app config.

    The engine and the expiry sweeper receive one of these at construction
    time, so a config reload never changes window sizes under a running check.
    """

    sweep_interval_seconds: float = 300.0
    violation_window_seconds: int = 300
    tracking_retention_seconds: int = 3600
    warning_delete_after_seconds: float = 5.0
    audit_content_limit: int = 1000
    phishing_domains: Tuple[str, ...] = field(default_factory=tuple)


class AppConfig:
    """File-lock based accessor around the YAML-based application configuration.

    The class caches contents of ``./config/app_config.yml`` and exposes
    dictionary-like access helpers plus typed shortcuts for the automod
    settings. Uses fcntl file locks for safe concurrent access across processes.
    """

    def __init__(self, config_path: Path) -> None:
        self.config_path = config_path
        self._data: Dict[str, Any] = {}
        self.reload()

    # --------------------------
    # Private helpers
    # --------------------------
    def load_from_disk(self) -> Dict[str, Any]:
        try:
            with self.config_path.open("r", encoding="utf-8") as f:
                # Acquire a shared lock for reading
                fcntl.flock(f.fileno(), fcntl.LOCK_SH)
                data = yaml.safe_load(f)

                # Release the lock
                fcntl.flock(f.fileno(), fcntl.LOCK_UN)
        except FileNotFoundError:
            logger.error("[APP CONFIGURATION] Config file %s not found.", self.config_path)
            return {}
        except Exception as exc:
            logger.error("[APP CONFIGURATION] Failed to load config %s: %s", self.config_path, exc)
            return {}

        if not isinstance(data, dict):
            logger.warning("[APP CONFIGURATION] Config %s is not a mapping; ignoring it.", self.config_path)
            return {}
        return data

    def _automod_section(self) -> Dict[str, Any]:
        section = self._data.get("automod", {})
        return section if isinstance(section, dict) else {}

    # --------------------------
    # Public API
    # --------------------------
    def reload(self) -> Dict[str, Any]:
        """Reload configuration from disk and return the loaded mapping.

        Returns the raw mapping that was loaded (an empty dict on error).
        """
        self._data = self.load_from_disk()
        return self._data

    @property
    def data(self) -> Dict[str, Any]:
        """Return the current cached configuration mapping.

        The returned dict is the internal cache (shallow reference). Callers
        should not mutate it.
        """
        return self._data

    def get(self, key: str, default: Any = None) -> Any:
        """Safe lookup for top-level configuration keys."""
        return self._data.get(key, default)

    # --------------------------
    # High-level shortcuts
    # --------------------------
    @property
    def database_path(self) -> Path:
        """Return the SQLite database path, resolved against the working directory."""
        return Path(str(self._data.get("database_path") or DEFAULT_DATABASE_PATH)).resolve()

    @property
    def automod(self) -> AutomodConfig:
        """Return the automod settings as an :class:`AutomodConfig` snapshot.

        Missing or malformed keys fall back to the dataclass defaults.
        """
        section = self._automod_section()
        defaults = AutomodConfig()

        def number(key: str, default: float, cast=float):
            value = section.get(key, default)
            try:
                parsed = cast(value)
            except (TypeError, ValueError):
                logger.warning("[APP CONFIGURATION] Invalid value %r for automod.%s; using %s", value, key, default)
                return default
            if parsed <= 0:
                logger.warning("[APP CONFIGURATION] automod.%s must be positive; using %s", key, default)
                return default
            return parsed

        domains = section.get("phishing_domains") or []
        if not isinstance(domains, list):
            logger.warning("[APP CONFIGURATION] automod.phishing_domains must be a list; ignoring it")
            domains = []

        return AutomodConfig(
            sweep_interval_seconds=number("sweep_interval_seconds", defaults.sweep_interval_seconds),
            violation_window_seconds=number("violation_window_seconds", defaults.violation_window_seconds, int),
            tracking_retention_seconds=number("tracking_retention_seconds", defaults.tracking_retention_seconds, int),
            warning_delete_after_seconds=number("warning_delete_after_seconds", defaults.warning_delete_after_seconds),
            audit_content_limit=number("audit_content_limit", defaults.audit_content_limit, int),
            phishing_domains=tuple(str(domain).strip().lower() for domain in domains if str(domain).strip()),
        )


# Shared application-wide configuration instance
app_config = AppConfig(CONFIG_PATH)
