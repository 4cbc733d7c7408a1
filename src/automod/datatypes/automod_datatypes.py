"""
Rule, filter, and list data structures for the automod engine.

Everything a community configures lives here: the closed set of rule types
and actions, the rules themselves, the scoping filters attached to them,
per-community settings, and the word/link list entries. All records are
immutable; updates go through :func:`dataclasses.replace` or
:func:`merge_settings`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import FrozenSet, Iterable, Optional


class RuleType(str, Enum):
    """Enumeration of supported automod detectors."""

    ALL_CAPS = "all_caps"
    BAD_WORDS = "bad_words"
    NEWLINES = "newlines"
    DUPLICATE_TEXT = "duplicate_text"
    CHARACTER_COUNT = "character_count"
    EMOJI_SPAM = "emoji_spam"
    FAST_MESSAGE_SPAM = "fast_message_spam"
    IMAGE_SPAM = "image_spam"
    INVITE_LINKS = "invite_links"
    PHISHING_LINKS = "phishing_links"
    LINKS = "links"
    LINKS_COOLDOWN = "links_cooldown"
    MASS_MENTIONS = "mass_mentions"
    MENTIONS_COOLDOWN = "mentions_cooldown"
    SPOILERS = "spoilers"
    MASKED_LINKS = "masked_links"
    STICKERS = "stickers"
    STICKER_COOLDOWN = "sticker_cooldown"
    ZALGO = "zalgo"

    def __str__(self) -> str:
        return self.value


class ActionType(str, Enum):
    """Enumeration of enforcement actions a rule can carry."""

    WARN = "warn"
    DELETE = "delete"
    WARN_DELETE = "warn_delete"
    AUTO_MUTE = "auto_mute"
    AUTO_BAN = "auto_ban"
    INSTANT_MUTE = "instant_mute"
    INSTANT_BAN = "instant_ban"

    def __str__(self) -> str:
        return self.value

    @property
    def is_escalating(self) -> bool:
        """True for actions that only fire after accumulated violations."""
        return self in (ActionType.AUTO_MUTE, ActionType.AUTO_BAN)


class FilterType(str, Enum):
    AFFECTED = "affected"
    IGNORED = "ignored"


class TargetType(str, Enum):
    ROLE = "role"
    CHANNEL = "channel"


class MatchType(str, Enum):
    CONTAINS = "contains"
    EXACT = "exact"
    WILDCARD = "wildcard"


class ListKind(str, Enum):
    ALLOW = "allow"
    BLOCK = "block"


class EventKind(str, Enum):
    """Kinds of per-user events recorded by the sliding-window tracker."""

    MESSAGE = "message"
    IMAGE = "image"
    LINK = "link"
    MENTION = "mention"
    STICKER = "sticker"


# Built-in thresholds used when a rule has none stored
DEFAULT_THRESHOLDS = {
    RuleType.ALL_CAPS: 70,
    RuleType.NEWLINES: 10,
    RuleType.CHARACTER_COUNT: 2000,
    RuleType.EMOJI_SPAM: 10,
    RuleType.FAST_MESSAGE_SPAM: 5,
    RuleType.IMAGE_SPAM: 3,
    RuleType.MASS_MENTIONS: 5,
    RuleType.MENTIONS_COOLDOWN: 5,
    RuleType.LINKS_COOLDOWN: 3,
    RuleType.STICKER_COOLDOWN: 3,
}

# Violations needed before an escalating action fires, when the rule stores none
DEFAULT_VIOLATIONS_REQUIRED = {
    ActionType.AUTO_MUTE: 3,
    ActionType.AUTO_BAN: 5,
}

DEFAULT_MUTE_DURATION_SECONDS = 300
DEFAULT_LINKS_COOLDOWN_SECONDS = 30


@dataclass(frozen=True, slots=True)
class Rule:
    """A configured detector + action pairing for one community.

    Attributes:
        id: Store-assigned identifier (None until the rule is persisted).
        guild_id: Community the rule belongs to.
        rule_type: Detector evaluated for each message.
        action: Enforcement carried out when the detector triggers.
        enabled: Disabled rules are skipped entirely.
        threshold: Detector threshold; None means the built-in default.
        threshold_seconds: Window for ``links_cooldown``; None means 30s.
        violations_required: Violations within the accumulation window before
            ``auto_mute``/``auto_ban`` fire; None means 3 (mute) or 5 (ban).
        mute_duration_seconds: Timeout length; None means 300s.
        custom_message: Overrides the default warning text.
        log_channel_id: Audit target overriding the community default.
    """

    guild_id: int
    rule_type: RuleType
    action: ActionType
    id: Optional[int] = None
    enabled: bool = True
    threshold: Optional[int] = None
    threshold_seconds: Optional[int] = None
    violations_required: Optional[int] = None
    mute_duration_seconds: Optional[int] = None
    custom_message: Optional[str] = None
    log_channel_id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "rule_type", RuleType(self.rule_type))
        object.__setattr__(self, "action", ActionType(self.action))
        if self.violations_required is not None and self.violations_required < 1:
            raise ValueError(f"violations_required must be >= 1, got {self.violations_required}")

    def resolved_threshold(self) -> Optional[int]:
        """Return the stored threshold, or the rule type's built-in default."""
        if self.threshold is not None:
            return self.threshold
        return DEFAULT_THRESHOLDS.get(self.rule_type)

    def resolved_violations_required(self) -> int:
        if self.violations_required is not None:
            return self.violations_required
        return DEFAULT_VIOLATIONS_REQUIRED.get(self.action, 1)

    def resolved_mute_duration(self) -> int:
        if self.mute_duration_seconds is not None:
            return self.mute_duration_seconds
        return DEFAULT_MUTE_DURATION_SECONDS


@dataclass(frozen=True, slots=True)
class RuleFilter:
    """A scoping clause restricting where or to whom a rule applies."""

    rule_id: int
    filter_type: FilterType
    target_type: TargetType
    target_id: int
    id: Optional[int] = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "filter_type", FilterType(self.filter_type))
        object.__setattr__(self, "target_type", TargetType(self.target_type))


@dataclass(frozen=True, slots=True)
class AutomodSettings:
    """Community-wide automod settings.

    A community without a stored row reads as ``AutomodSettings(guild_id)``.
    """

    guild_id: int
    default_log_channel_id: Optional[int] = None
    ignored_roles: FrozenSet[int] = field(default_factory=frozenset)
    ignored_channels: FrozenSet[int] = field(default_factory=frozenset)

    def __post_init__(self) -> None:
        object.__setattr__(self, "ignored_roles", frozenset(self.ignored_roles))
        object.__setattr__(self, "ignored_channels", frozenset(self.ignored_channels))


_UNSET = object()


def merge_settings(
    current: AutomodSettings,
    *,
    default_log_channel_id=_UNSET,
    add_ignored_roles: Iterable[int] = (),
    remove_ignored_roles: Iterable[int] = (),
    add_ignored_channels: Iterable[int] = (),
    remove_ignored_channels: Iterable[int] = (),
) -> AutomodSettings:
    """Return a new settings object with the requested changes applied.

    ``current`` is never modified. Passing ``default_log_channel_id=None``
    clears the default log channel; omitting it keeps the current one.
    Removals are applied after additions.
    """
    log_channel = current.default_log_channel_id if default_log_channel_id is _UNSET else default_log_channel_id
    roles = (current.ignored_roles | frozenset(add_ignored_roles)) - frozenset(remove_ignored_roles)
    channels = (current.ignored_channels | frozenset(add_ignored_channels)) - frozenset(remove_ignored_channels)
    return AutomodSettings(
        guild_id=current.guild_id,
        default_log_channel_id=log_channel,
        ignored_roles=roles,
        ignored_channels=channels,
    )


@dataclass(frozen=True, slots=True)
class WordEntry:
    guild_id: int
    word: str
    match_type: MatchType = MatchType.CONTAINS

    def __post_init__(self) -> None:
        object.__setattr__(self, "word", self.word.lower())
        object.__setattr__(self, "match_type", MatchType(self.match_type))


@dataclass(frozen=True, slots=True)
class LinkEntry:
    guild_id: int
    domain: str
    list_kind: ListKind

    def __post_init__(self) -> None:
        object.__setattr__(self, "domain", normalise_domain(self.domain))
        object.__setattr__(self, "list_kind", ListKind(self.list_kind))


@dataclass(frozen=True, slots=True)
class TrackedEvent:
    guild_id: int
    user_id: int
    channel_id: int
    event_kind: EventKind
    timestamp: float


@dataclass(frozen=True, slots=True)
class ViolationRecord:
    guild_id: int
    user_id: int
    rule_type: RuleType
    timestamp: float


def normalise_domain(value: str) -> str:
    """Reduce a domain or URL to a bare lower-case host.

    ``https://youtube.com/watch?v=x`` and ``youtube.com`` both become
    ``youtube.com``.
    """
    domain = value.strip().lower()
    for scheme in ("https://", "http://"):
        if domain.startswith(scheme):
            domain = domain[len(scheme):]
            break
    return domain.split("/", 1)[0].strip()
