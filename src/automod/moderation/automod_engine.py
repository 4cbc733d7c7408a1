"""
Automod engine: the per-message entry point.

For each inbound message the engine loads the community settings, checks
global exemptions once, then walks the enabled rules in insertion order.
The first rule whose filters admit the message and whose detector
triggers is enforced; later rules are not evaluated, so a message is
never punished twice.

Store failures while checking fail closed: the message is treated as
clean and the error is logged with its traceback.
"""

from __future__ import annotations

import time
from typing import Callable, Optional, Tuple

from automod.configuration.app_configuration import AutomodConfig
from automod.database.store import AutomodStore, StoreError
from automod.datatypes.action_datatypes import EnforcementResult
from automod.datatypes.automod_datatypes import AutomodSettings, Rule
from automod.datatypes.message_datatypes import InboundMessage
from automod.moderation.detectors import DetectorSet
from automod.moderation.enforcement import EnforcementExecutor
from automod.moderation.scope_resolver import ScopeResolver
from automod.moderation.violation_accumulator import ViolationAccumulator
from automod.moderation.window_tracker import SlidingWindowTracker
from automod.platform.gateway import PlatformGateway
from automod.util.logger import get_logger

logger = get_logger("automod_engine")


class AutomodEngine:
    """Wires the resolver, detectors, accumulator and executor around one store."""

    def __init__(
        self,
        store: AutomodStore,
        gateway: PlatformGateway,
        config: AutomodConfig | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.store = store
        self.config = config or AutomodConfig()
        self.resolver = ScopeResolver(store)
        self.tracker = SlidingWindowTracker(store, clock=clock)
        self.detectors = DetectorSet(store, self.tracker, extra_phishing_domains=self.config.phishing_domains)
        self.accumulator = ViolationAccumulator(
            store, clock=clock, window_seconds=self.config.violation_window_seconds
        )
        self.executor = EnforcementExecutor(gateway, self.accumulator, config=self.config, clock=clock)

    async def _find_violation(self, message: InboundMessage) -> Optional[Tuple[Rule, AutomodSettings]]:
        settings = await self.store.get_settings(message.guild_id)
        if self.resolver.is_exempt(message, settings):
            return None

        for rule in await self.store.list_rules(message.guild_id):
            if not rule.enabled:
                continue
            groups = await self.resolver.filter_groups(rule)
            if not groups.allows(message):
                continue
            if await self.detectors.evaluate(rule, message):
                return rule, settings
        return None

    async def check_message(self, message: InboundMessage) -> Optional[Rule]:
        """Return the first rule ``message`` violates, or None when it is clean.

        Nothing is enforced. Frequency detectors still record their events.
        """
        try:
            found = await self._find_violation(message)
        except StoreError:
            logger.exception("[AUTOMOD ENGINE] Store failure while checking message %s; treating as clean", message.message_id)
            return None
        except Exception:
            logger.exception("[AUTOMOD ENGINE] Unexpected error while checking message %s", message.message_id)
            return None
        return found[0] if found else None

    async def process_message(self, message: InboundMessage) -> Optional[EnforcementResult]:
        """
        Check ``message`` and enforce the first violated rule.

        Args:
            message: Inbound message snapshot.

        Returns:
            Optional[EnforcementResult]: What was done, or None when the
            message was clean, exempt, or could not be checked.
        """
        try:
            found = await self._find_violation(message)
        except StoreError:
            logger.exception("[AUTOMOD ENGINE] Store failure while checking message %s; treating as clean", message.message_id)
            return None
        except Exception:
            logger.exception("[AUTOMOD ENGINE] Unexpected error while checking message %s", message.message_id)
            return None

        if found is None:
            return None

        rule, settings = found
        logger.debug(
            "[AUTOMOD ENGINE] Message %s from user %s violated rule %s (%s)",
            message.message_id, message.author_id, rule.id, rule.rule_type.value,
        )
        try:
            return await self.executor.execute(message, rule, settings)
        except Exception:
            logger.exception("[AUTOMOD ENGINE] Enforcement of rule %s failed for message %s", rule.id, message.message_id)
            return None
