"""
Pure text checks used by the detector set.

Nothing here touches the store or the platform; every function is a
deterministic predicate or counter over message text.
"""

from __future__ import annotations

import re
from functools import lru_cache
from typing import Iterable, List, Pattern
from urllib.parse import urlsplit

from automod.datatypes.automod_datatypes import MatchType, WordEntry
from automod.util.logger import get_logger

logger = get_logger("content_checks")

# Known phishing domains; the app config may append more.
PHISHING_DOMAINS = (
    "discord-nitro.com",
    "discord-gift.com",
    "discordgift.site",
    "steamcommunity.ru",
    "steamcommunlty.com",
    "discordapp.ru",
)

ALL_CAPS_MIN_LENGTH = 5
REPEATED_CHAR_RUN = 8
REPEATED_WORD_RUN = 5
ZALGO_MAX_MARKS = 15
ZALGO_MAX_RATIO = 0.2

URL_PATTERN = re.compile(r"https?://[^\s]+", re.IGNORECASE)
INVITE_PATTERN = re.compile(r"(discord\.gg|discord\.com/invite|discordapp\.com/invite)/[a-zA-Z0-9]+", re.IGNORECASE)
MASKED_LINK_PATTERN = re.compile(r"\[.+?\]\(https?://.+?\)", re.IGNORECASE)
REPEATED_CHAR_PATTERN = re.compile(r"(.)\1{%d,}" % (REPEATED_CHAR_RUN - 1), re.IGNORECASE)
CUSTOM_EMOJI_PATTERN = re.compile(r"<a?:\w+:\d+>")
COMBINING_MARK_PATTERN = re.compile("[\u0300-\u036f\u1ab0-\u1aff\u1dc0-\u1dff\u20d0-\u20ff\ufe20-\ufe2f]")

# Emoji that render as emoji by default, plus text-style symbols forced to
# emoji presentation by a trailing variation selector.
UNICODE_EMOJI_PATTERN = re.compile(
    "[#*0-9\u00a9\u00ae\u203c-\u3299]\ufe0f"
    "|[\U0001f000-\U0001faff]"
    "|[\u231a\u231b\u23e9-\u23ec\u23f0\u23f3\u25fd\u25fe\u2614\u2615\u2648-\u2653\u267f\u2693"
    "\u26a1\u26aa\u26ab\u26bd\u26be\u26c4\u26c5\u26ce\u26d4\u26ea\u26f2\u26f3\u26f5\u26fa\u26fd"
    "\u2705\u270a\u270b\u2728\u274c\u274e\u2753-\u2755\u2757\u2795-\u2797\u27b0\u27bf"
    "\u2b1b\u2b1c\u2b50\u2b55]"
)


def is_all_caps(content: str, threshold_percent: float) -> bool:
    """True when at least ``threshold_percent`` of the ASCII letters are upper case.

    Messages shorter than five characters never count.
    """
    if len(content) < ALL_CAPS_MIN_LENGTH:
        return False
    letters = [char for char in content if char.isascii() and char.isalpha()]
    if not letters:
        return False
    upper = sum(1 for char in letters if char.isupper())
    return upper / len(letters) * 100 >= threshold_percent


def count_newlines(content: str) -> int:
    return content.count("\n")


def has_duplicate_text(content: str) -> bool:
    """Detect a run of 8 identical characters or 5 identical consecutive words."""
    if REPEATED_CHAR_PATTERN.search(content):
        return True
    words = content.split()
    for start in range(len(words) - REPEATED_WORD_RUN + 1):
        window = words[start:start + REPEATED_WORD_RUN]
        if all(word == window[0] for word in window):
            return True
    return False


def count_emoji(content: str) -> int:
    """Count unicode emoji plus custom ``<:name:id>`` / ``<a:name:id>`` emoji."""
    return len(UNICODE_EMOJI_PATTERN.findall(content)) + len(CUSTOM_EMOJI_PATTERN.findall(content))


def has_invite_link(content: str) -> bool:
    return INVITE_PATTERN.search(content) is not None


def has_masked_link(content: str) -> bool:
    return MASKED_LINK_PATTERN.search(content) is not None


def has_url(content: str) -> bool:
    return URL_PATTERN.search(content) is not None


def extract_hostnames(content: str) -> List[str]:
    """Return the lower-cased host of every http(s) URL; malformed URLs are skipped."""
    hosts = []
    for url in URL_PATTERN.findall(content):
        try:
            host = urlsplit(url).hostname
        except ValueError:
            logger.debug("Skipping malformed URL %r", url)
            continue
        if host:
            hosts.append(host.lower())
    return hosts


def host_matches(host: str, domains: Iterable[str]) -> bool:
    """True if any listed domain occurs inside ``host``."""
    return any(domain and domain in host for domain in domains)


def is_zalgo(content: str) -> bool:
    marks = len(COMBINING_MARK_PATTERN.findall(content))
    if not marks:
        return False
    return marks > ZALGO_MAX_MARKS or marks / len(content) > ZALGO_MAX_RATIO


@lru_cache(maxsize=1024)
def compile_wildcard(word: str) -> Pattern[str] | None:
    """Compile a ``*`` wildcard word into a case-insensitive pattern.

    Returns None when the pattern cannot be compiled.
    """
    pattern = re.escape(word).replace(r"\*", ".*")
    try:
        return re.compile(pattern, re.IGNORECASE)
    except re.error as exc:
        logger.warning("Invalid wildcard pattern %r: %s", word, exc)
        return None


def matches_word(content: str, entry: WordEntry) -> bool:
    """Match one word-list entry against message content."""
    lowered = content.lower()
    word = entry.word.lower()
    match entry.match_type:
        case MatchType.EXACT:
            return word in lowered.split()
        case MatchType.WILDCARD:
            pattern = compile_wildcard(word)
            if pattern is None:
                return word.replace("*", "") in lowered
            return pattern.search(content) is not None
        case MatchType.CONTAINS:
            return word in lowered
    return False


def matches_any_word(content: str, entries: Iterable[WordEntry]) -> bool:
    return any(matches_word(content, entry) for entry in entries)
