"""Tests for the pure text checks behind the detectors."""

import pytest

from automod.datatypes.automod_datatypes import MatchType, WordEntry
from automod.moderation import content_checks


class TestAllCaps:
    def test_short_messages_never_trigger(self):
        assert content_checks.is_all_caps("HEY", 70) is False
        assert content_checks.is_all_caps("HEYY", 70) is False

    def test_threshold_is_inclusive(self):
        # 7 of 10 letters upper case
        assert content_checks.is_all_caps("ABCDEFGhij", 70) is True
        assert content_checks.is_all_caps("ABCDEFghij", 70) is False

    def test_only_ascii_letters_count(self):
        assert content_checks.is_all_caps("HELLO 12345 !!!", 70) is True
        assert content_checks.is_all_caps("12345 !!!", 70) is False


class TestDuplicateText:
    def test_eight_repeated_characters(self):
        assert content_checks.has_duplicate_text("aaaaaaaa") is True
        assert content_checks.has_duplicate_text("aaaaaaa") is False

    def test_repeated_characters_are_case_insensitive(self):
        assert content_checks.has_duplicate_text("aAaAaAaA") is True

    def test_five_identical_words(self):
        assert content_checks.has_duplicate_text("spam spam spam spam spam") is True
        assert content_checks.has_duplicate_text("spam spam spam spam eggs") is False


def test_count_newlines():
    assert content_checks.count_newlines("a\nb\nc") == 2


def test_count_emoji_unicode_and_custom():
    text = chr(0x1F600) + " hi " + chr(0x1F44D) + " <:pog:123456> <a:dance:987654>"
    assert content_checks.count_emoji(text) == 4


def test_count_emoji_ignores_plain_text():
    assert content_checks.count_emoji("no emoji here: 1, 2, 3") == 0


@pytest.mark.parametrize(
    "text",
    [
        "join discord.gg/abc123",
        "https://discord.com/invite/xyz",
        "discordapp.com/invite/Code42",
    ],
)
def test_invite_links(text):
    assert content_checks.has_invite_link(text) is True


def test_invite_link_requires_code():
    assert content_checks.has_invite_link("talk about discord.gg/ later") is False


def test_masked_links():
    assert content_checks.has_masked_link("[free nitro](https://evil.example)") is True
    assert content_checks.has_masked_link("[docs] (https://ok.example)") is False


def test_extract_hostnames_lowercases_and_skips_malformed():
    hosts = content_checks.extract_hostnames("see HTTPS://Example.COM/path and http://[::1 broken")
    assert hosts == ["example.com"]


def test_host_matches_substring():
    assert content_checks.host_matches("free.discord-nitro.com", ["discord-nitro.com"]) is True
    assert content_checks.host_matches("youtube.com", ["discord-nitro.com"]) is False


class TestZalgo:
    def test_many_marks(self):
        text = "hello world, this is a long sentence" + chr(0x0300) * 16
        assert content_checks.is_zalgo(text) is True

    def test_high_ratio(self):
        text = "ab" + chr(0x0301)
        assert content_checks.is_zalgo(text) is True

    def test_plain_text(self):
        assert content_checks.is_zalgo("perfectly normal text") is False

    def test_few_marks_in_long_text(self):
        text = "cafe" + chr(0x0301) + " is a nice place to sit and read for a while"
        assert content_checks.is_zalgo(text) is False


class TestWordMatching:
    def test_contains(self):
        entry = WordEntry(guild_id=1, word="bad", match_type=MatchType.CONTAINS)
        assert content_checks.matches_word("that is BADly done", entry) is True

    def test_exact_matches_whole_tokens_only(self):
        entry = WordEntry(guild_id=1, word="bad", match_type=MatchType.EXACT)
        assert content_checks.matches_word("that is bad", entry) is True
        assert content_checks.matches_word("that is badly done", entry) is False

    def test_wildcard(self):
        entry = WordEntry(guild_id=1, word="f*ck", match_type=MatchType.WILDCARD)
        assert content_checks.matches_word("oh fork no", entry) is False
        assert content_checks.matches_word("oh FUCK no", entry) is True

    def test_wildcard_escapes_metacharacters(self):
        entry = WordEntry(guild_id=1, word="a.b*", match_type=MatchType.WILDCARD)
        assert content_checks.matches_word("axb", entry) is False
        assert content_checks.matches_word("a.bc", entry) is True

    def test_wildcard_falls_back_to_substring_when_compile_fails(self, monkeypatch):
        monkeypatch.setattr(content_checks, "compile_wildcard", lambda word: None)
        entry = WordEntry(guild_id=1, word="sp*am", match_type=MatchType.WILDCARD)
        assert content_checks.matches_word("this is spam", entry) is True

    def test_matches_any_word(self):
        entries = [
            WordEntry(guild_id=1, word="foo", match_type=MatchType.EXACT),
            WordEntry(guild_id=1, word="bar"),
        ]
        assert content_checks.matches_any_word("crowbar", entries) is True
        assert content_checks.matches_any_word("food", entries) is False
