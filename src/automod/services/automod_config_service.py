"""
Operator-facing mutations of automod configuration.

Command handlers call this service instead of the store directly. It
applies the per-rule-type defaults at creation time, keeps every
mutation scoped to one community, and funnels settings changes through
``merge_settings`` so stored settings are only ever replaced whole.
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Iterable, List, Optional

from automod.database.store import AutomodError, AutomodStore
from automod.datatypes.automod_datatypes import (
    DEFAULT_THRESHOLDS,
    DEFAULT_VIOLATIONS_REQUIRED,
    ActionType,
    AutomodSettings,
    FilterType,
    LinkEntry,
    ListKind,
    MatchType,
    Rule,
    RuleFilter,
    RuleType,
    TargetType,
    WordEntry,
    merge_settings,
)
from automod.util.logger import get_logger

logger = get_logger("automod_config_service")

# Fields an operator may change on an existing rule
EDITABLE_RULE_FIELDS = frozenset({
    "enabled",
    "threshold",
    "threshold_seconds",
    "action",
    "violations_required",
    "mute_duration_seconds",
    "custom_message",
    "log_channel_id",
})


class RuleNotFoundError(AutomodError):
    """Raised when a rule id does not exist in the given community."""


class AutomodConfigService:
    """Validated create/update/delete operations over an :class:`AutomodStore`."""

    def __init__(self, store: AutomodStore) -> None:
        self._store = store

    # ------------------------------------------------------------------
    # Rules
    # ------------------------------------------------------------------

    async def create_rule(
        self,
        guild_id: int,
        rule_type: RuleType | str,
        action: ActionType | str,
        *,
        threshold: Optional[int] = None,
        threshold_seconds: Optional[int] = None,
        violations_required: Optional[int] = None,
        mute_duration_seconds: Optional[int] = None,
        custom_message: Optional[str] = None,
        log_channel_id: Optional[int] = None,
    ) -> Rule:
        """
        Create a rule, filling in the default threshold and violation count.

        Returns:
            Rule: The stored rule, including its assigned id.
        """
        rule_type = RuleType(rule_type)
        action = ActionType(action)
        if threshold is None:
            threshold = DEFAULT_THRESHOLDS.get(rule_type)
        if violations_required is None:
            violations_required = DEFAULT_VIOLATIONS_REQUIRED.get(action, 1)

        rule = await self._store.create_rule(
            Rule(
                guild_id=guild_id,
                rule_type=rule_type,
                action=action,
                threshold=threshold,
                threshold_seconds=threshold_seconds,
                violations_required=violations_required,
                mute_duration_seconds=mute_duration_seconds,
                custom_message=custom_message,
                log_channel_id=log_channel_id,
            )
        )
        logger.info(
            "[AUTOMOD CONFIG] Created rule %s (%s -> %s) in guild %s",
            rule.id, rule_type.value, action.value, guild_id,
        )
        return rule

    async def get_rule(self, guild_id: int, rule_id: int) -> Rule:
        rule = await self._store.get_rule(rule_id)
        if rule is None or rule.guild_id != guild_id:
            raise RuleNotFoundError(f"Rule {rule_id} not found in guild {guild_id}")
        return rule

    async def list_rules(self, guild_id: int) -> List[Rule]:
        return await self._store.list_rules(guild_id)

    async def update_rule(self, guild_id: int, rule_id: int, **changes: Any) -> Rule:
        """Apply a partial update; unknown fields raise ``ValueError``."""
        unknown = set(changes) - EDITABLE_RULE_FIELDS
        if unknown:
            raise ValueError(f"Cannot update rule field(s): {', '.join(sorted(unknown))}")

        updated = replace(await self.get_rule(guild_id, rule_id), **changes)
        if not await self._store.update_rule(updated):
            raise RuleNotFoundError(f"Rule {rule_id} not found in guild {guild_id}")
        logger.info("[AUTOMOD CONFIG] Updated rule %s in guild %s: %s", rule_id, guild_id, sorted(changes))
        return updated

    async def set_rule_enabled(self, guild_id: int, rule_id: int, enabled: bool) -> Rule:
        return await self.update_rule(guild_id, rule_id, enabled=enabled)

    async def delete_rule(self, guild_id: int, rule_id: int) -> None:
        """Delete a rule and, through the store's cascade, its filters."""
        await self.get_rule(guild_id, rule_id)
        await self._store.delete_rule(rule_id)
        logger.info("[AUTOMOD CONFIG] Deleted rule %s in guild %s", rule_id, guild_id)

    # ------------------------------------------------------------------
    # Filters
    # ------------------------------------------------------------------

    async def add_filter(
        self,
        guild_id: int,
        rule_id: int,
        filter_type: FilterType | str,
        target_type: TargetType | str,
        target_id: int,
    ) -> Optional[RuleFilter]:
        """Attach a filter to a rule. Returns None if the same filter already exists."""
        await self.get_rule(guild_id, rule_id)
        candidate = RuleFilter(rule_id=rule_id, filter_type=filter_type, target_type=target_type, target_id=target_id)

        for existing in await self._store.list_filters(rule_id):
            if (existing.filter_type, existing.target_type, existing.target_id) == (
                candidate.filter_type, candidate.target_type, candidate.target_id
            ):
                return None
        return await self._store.add_filter(candidate)

    async def remove_filter(self, guild_id: int, rule_id: int, filter_id: int) -> bool:
        await self.get_rule(guild_id, rule_id)
        if not any(f.id == filter_id for f in await self._store.list_filters(rule_id)):
            return False
        return await self._store.remove_filter(filter_id)

    # ------------------------------------------------------------------
    # Settings
    # ------------------------------------------------------------------

    async def update_settings(self, guild_id: int, **changes: Any) -> AutomodSettings:
        """Merge ``changes`` (see ``merge_settings``) into the stored settings."""
        merged = merge_settings(await self._store.get_settings(guild_id), **changes)
        await self._store.save_settings(merged)
        return merged

    async def ignore_roles(self, guild_id: int, role_ids: Iterable[int]) -> AutomodSettings:
        return await self.update_settings(guild_id, add_ignored_roles=role_ids)

    async def ignore_channels(self, guild_id: int, channel_ids: Iterable[int]) -> AutomodSettings:
        return await self.update_settings(guild_id, add_ignored_channels=channel_ids)

    async def set_log_channel(self, guild_id: int, channel_id: Optional[int]) -> AutomodSettings:
        return await self.update_settings(guild_id, default_log_channel_id=channel_id)

    # ------------------------------------------------------------------
    # Word and link lists
    # ------------------------------------------------------------------

    async def add_bad_word(self, guild_id: int, word: str, match_type: MatchType | str = MatchType.CONTAINS) -> WordEntry:
        word = word.strip()
        if not word:
            raise ValueError("Word must not be empty")
        entry = WordEntry(guild_id=guild_id, word=word, match_type=match_type)
        await self._store.add_word(entry)
        return entry

    async def remove_bad_word(self, guild_id: int, word: str) -> bool:
        return await self._store.remove_word(guild_id, word.strip())

    async def add_link(self, guild_id: int, domain: str, list_kind: ListKind | str) -> bool:
        """Add a domain to the allow or block list. Returns False if already listed."""
        entry = LinkEntry(guild_id=guild_id, domain=domain, list_kind=list_kind)
        if not entry.domain:
            raise ValueError("Domain must not be empty")
        return await self._store.add_link(entry)

    async def remove_link(self, guild_id: int, domain: str, list_kind: ListKind | str) -> bool:
        return await self._store.remove_link(guild_id, domain, ListKind(list_kind))
