"""
Detector set: one evaluator per rule type.

Content detectors are pure. Frequency detectors (fast messages, image,
link, mention and sticker cooldowns) record one tracker event whenever
they evaluate a message that carries the tracked thing, whether or not the
rule ends up triggering, so later messages see an accurate history.
"""

from __future__ import annotations

from typing import Iterable, Tuple

from automod.database.store import AutomodStore
from automod.datatypes.automod_datatypes import (
    DEFAULT_LINKS_COOLDOWN_SECONDS,
    EventKind,
    ListKind,
    Rule,
    RuleType,
)
from automod.datatypes.message_datatypes import InboundMessage
from automod.moderation import content_checks
from automod.moderation.window_tracker import SlidingWindowTracker
from automod.util.logger import get_logger

logger = get_logger("detectors")

FAST_MESSAGE_WINDOW_SECONDS = 5
IMAGE_WINDOW_SECONDS = 10
MENTIONS_WINDOW_SECONDS = 30
STICKER_WINDOW_SECONDS = 60

# A ``links`` rule with this threshold runs in allow-list mode
LINKS_ALLOWLIST_MODE = 1


class DetectorSet:
    """Evaluates a rule's detector against a message."""

    def __init__(
        self,
        store: AutomodStore,
        tracker: SlidingWindowTracker,
        extra_phishing_domains: Iterable[str] = (),
    ) -> None:
        self._store = store
        self._tracker = tracker
        self._phishing_domains: Tuple[str, ...] = content_checks.PHISHING_DOMAINS + tuple(extra_phishing_domains)

    async def evaluate(self, rule: Rule, message: InboundMessage) -> bool:
        """Return True when ``message`` violates ``rule``.

        Thresholds fall back to the rule type's built-in default when the
        rule stores none.
        """
        threshold = rule.resolved_threshold()
        content = message.content

        match rule.rule_type:
            case RuleType.ALL_CAPS:
                return content_checks.is_all_caps(content, threshold)
            case RuleType.BAD_WORDS:
                return await self._check_bad_words(message)
            case RuleType.NEWLINES:
                return content_checks.count_newlines(content) >= threshold
            case RuleType.DUPLICATE_TEXT:
                return content_checks.has_duplicate_text(content)
            case RuleType.CHARACTER_COUNT:
                return len(content) > threshold
            case RuleType.EMOJI_SPAM:
                return content_checks.count_emoji(content) >= threshold
            case RuleType.FAST_MESSAGE_SPAM:
                return await self._check_fast_messages(message, threshold)
            case RuleType.IMAGE_SPAM:
                return await self._check_image_spam(message, threshold)
            case RuleType.INVITE_LINKS:
                return content_checks.has_invite_link(content)
            case RuleType.PHISHING_LINKS:
                return self._check_phishing_links(content)
            case RuleType.LINKS:
                return await self._check_links(message, allowlist_mode=rule.threshold == LINKS_ALLOWLIST_MODE)
            case RuleType.LINKS_COOLDOWN:
                seconds = rule.threshold_seconds if rule.threshold_seconds is not None else DEFAULT_LINKS_COOLDOWN_SECONDS
                return await self._check_links_cooldown(message, threshold, seconds)
            case RuleType.MASS_MENTIONS:
                return message.mention_count >= threshold
            case RuleType.MENTIONS_COOLDOWN:
                return await self._check_mentions_cooldown(message, threshold)
            case RuleType.SPOILERS:
                return "||" in content or any(attachment.spoiler for attachment in message.attachments)
            case RuleType.MASKED_LINKS:
                return content_checks.has_masked_link(content)
            case RuleType.STICKERS:
                return bool(message.sticker_ids)
            case RuleType.STICKER_COOLDOWN:
                return await self._check_sticker_cooldown(message, threshold)
            case RuleType.ZALGO:
                return content_checks.is_zalgo(content)

        logger.warning("[DETECTORS] Unknown rule type: %s", rule.rule_type)
        return False

    # ------------------------------------------------------------------
    # List-backed detectors
    # ------------------------------------------------------------------

    async def _check_bad_words(self, message: InboundMessage) -> bool:
        words = await self._store.list_words(message.guild_id)
        if not words:
            return False
        return content_checks.matches_any_word(message.content, words)

    def _check_phishing_links(self, content: str) -> bool:
        return any(
            content_checks.host_matches(host, self._phishing_domains)
            for host in content_checks.extract_hostnames(content)
        )

    async def _check_links(self, message: InboundMessage, allowlist_mode: bool) -> bool:
        hosts = content_checks.extract_hostnames(message.content)
        if not hosts:
            return False

        blocked = await self._store.list_links(message.guild_id, ListKind.BLOCK)
        allowed = await self._store.list_links(message.guild_id, ListKind.ALLOW) if allowlist_mode else []

        for host in hosts:
            if content_checks.host_matches(host, blocked):
                return True
            # an empty allow list never blocks anything
            if allowlist_mode and allowed and not content_checks.host_matches(host, allowed):
                return True
        return False

    # ------------------------------------------------------------------
    # Frequency detectors
    # ------------------------------------------------------------------

    async def _check_fast_messages(self, message: InboundMessage, threshold: int) -> bool:
        recent = await self._tracker.record_and_count(
            message, EventKind.MESSAGE, FAST_MESSAGE_WINDOW_SECONDS, same_channel=True
        )
        return recent >= threshold

    async def _check_image_spam(self, message: InboundMessage, threshold: int) -> bool:
        images = message.image_count
        if not images:
            return False
        recent = await self._tracker.record_and_count(message, EventKind.IMAGE, IMAGE_WINDOW_SECONDS)
        return images >= threshold or recent >= threshold

    async def _check_links_cooldown(self, message: InboundMessage, threshold: int, seconds: int) -> bool:
        if not content_checks.has_url(message.content):
            return False
        recent = await self._tracker.record_and_count(message, EventKind.LINK, seconds)
        return recent >= threshold

    async def _check_mentions_cooldown(self, message: InboundMessage, threshold: int) -> bool:
        if not message.mention_count:
            return False
        recent = await self._tracker.record_and_count(message, EventKind.MENTION, MENTIONS_WINDOW_SECONDS)
        return recent >= threshold

    async def _check_sticker_cooldown(self, message: InboundMessage, threshold: int) -> bool:
        if not message.sticker_ids:
            return False
        recent = await self._tracker.record_and_count(message, EventKind.STICKER, STICKER_WINDOW_SECONDS)
        return recent >= threshold
