from __future__ import annotations

import pytest

from core.codec.escaper import (
    EscapeRuleset,
    escape,
    find_unescaped,
    is_escaped_at,
    reserved_characters,
    split_unescaped,
    unescape,
)


@pytest.mark.parametrize("ruleset", list(EscapeRuleset))
@pytest.mark.parametrize(
    "raw",
    ["plain", "", 'a;b,c:d"e\\f', "line1\nline2", "\\;\\", "Café ☕ 東京", ";;;", "a\ud800b"],
)
def test_unescape_reverses_escape(ruleset: EscapeRuleset, raw: str) -> None:
    assert unescape(escape(raw, ruleset), ruleset) == raw


def test_card_escape_prefixes_reserved_and_encodes_newline() -> None:
    assert escape("a;b,c:d\\e\nf", EscapeRuleset.CARD) == "a\\;b\\,c\\:d\\\\e\\nf"


def test_wifi_escape_covers_quote_and_colon() -> None:
    assert escape('Caf;e "x":y', EscapeRuleset.WIFI) == 'Caf\\;e \\"x\\"\\:y'


def test_wifi_does_not_escape_newline() -> None:
    assert escape("a\nb", EscapeRuleset.WIFI) == "a\nb"


def test_reserved_only_input_doubles_in_length() -> None:
    raw = "\\;,:"
    encoded = escape(raw, EscapeRuleset.WIFI)

    assert len(encoded) == 2 * len(raw)
    assert unescape(encoded, EscapeRuleset.WIFI) == raw


def test_percent_escape_uses_uppercase_hex_and_keeps_unreserved() -> None:
    assert escape("a b/ü", EscapeRuleset.PERCENT) == "a%20b%2F%C3%BC"
    assert escape("AZaz09-_.~", EscapeRuleset.PERCENT) == "AZaz09-_.~"


def test_percent_unescape_does_not_treat_plus_as_space() -> None:
    assert unescape("a+b%20c", EscapeRuleset.PERCENT) == "a+b c"


def test_percent_escape_carries_lone_surrogates() -> None:
    assert escape("a\ud800b", EscapeRuleset.PERCENT) == "a%ED%A0%80b"


def test_percent_unescape_replaces_invalid_utf8() -> None:
    assert unescape("%FF", EscapeRuleset.PERCENT) == "\ufffd"


def test_unescape_keeps_trailing_backslash() -> None:
    assert unescape("abc\\", EscapeRuleset.CARD) == "abc\\"


def test_unescape_keeps_backslash_before_unreserved_char() -> None:
    assert unescape("\\q", EscapeRuleset.WIFI) == "\\q"


def test_card_unescape_accepts_upper_case_newline_escape() -> None:
    assert unescape("a\\Nb", EscapeRuleset.CARD) == "a\nb"


def test_unescape_does_not_double_unescape() -> None:
    assert unescape("\\\\;", EscapeRuleset.WIFI) == "\\;"


def test_reserved_characters_rejects_percent_ruleset() -> None:
    assert "\n" in reserved_characters(EscapeRuleset.CARD)
    with pytest.raises(ValueError, match="percent"):
        reserved_characters(EscapeRuleset.PERCENT)


def test_is_escaped_at_counts_backslash_runs() -> None:
    assert is_escaped_at("a\\;", 2) is True
    assert is_escaped_at("a\\\\;", 3) is False


def test_find_unescaped_skips_escaped_delimiters() -> None:
    assert find_unescaped("N\\:x:y", ":") == 4
    assert find_unescaped("abc", ":") == -1


def test_split_unescaped_keeps_segments_escaped() -> None:
    assert split_unescaped("T:WPA;S:Caf\\;e;P:p\\\\;;", ";") == [
        "T:WPA",
        "S:Caf\\;e",
        "P:p\\\\",
        "",
        "",
    ]
