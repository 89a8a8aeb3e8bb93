"""Reserved-character escaping for barcode micro-format field values.

Three rulesets are supported:

- ``CARD``: MECARD and vCard/iCalendar text values. Reserved characters are
  backslash, semicolon, comma, colon and newline. Newline is written as ``\\n``
  so escaped values never break line-oriented records.
- ``WIFI``: ``WIFI:`` URI segment values. Reserved characters are backslash,
  semicolon, comma, double quote and colon.
- ``PERCENT``: URL query components. Every UTF-8 byte outside the unreserved
  set (ASCII letters, digits and ``-_.~``) becomes ``%XX`` with uppercase hex.
  Lone surrogates are carried through as their surrogate-pass byte sequence.

Unescaping never fails. A trailing backslash, or a backslash before a
character that is not reserved, is kept literally.
"""

from __future__ import annotations

from enum import Enum
from urllib.parse import quote, unquote

_ESCAPE_CHAR = "\\"


class EscapeRuleset(str, Enum):
    """Closed set of escaping grammars, one per micro-format family."""

    CARD = "card"
    WIFI = "wifi"
    PERCENT = "percent"


_RESERVED: dict[EscapeRuleset, frozenset[str]] = {
    EscapeRuleset.CARD: frozenset({"\\", ";", ",", ":", "\n"}),
    EscapeRuleset.WIFI: frozenset({"\\", ";", ",", '"', ":"}),
}

# Characters written after the backslash when they differ from the raw one.
_CARD_ENCODED = {"\n": "n"}
_CARD_DECODED = {"n": "\n", "N": "\n"}


def reserved_characters(ruleset: EscapeRuleset) -> frozenset[str]:
    """Return the characters a backslash ruleset escapes."""

    try:
        return _RESERVED[ruleset]
    except KeyError as exc:
        raise ValueError(f"Ruleset has no backslash reserved set: {ruleset.value}") from exc


def escape(raw: str, ruleset: EscapeRuleset) -> str:
    """Escape ``raw`` for embedding as a field value of ``ruleset``'s format."""

    if ruleset is EscapeRuleset.PERCENT:
        return quote(raw.encode("utf-8", "surrogatepass"), safe="")

    reserved = _RESERVED[ruleset]
    chunks: list[str] = []
    for char in raw:
        if char in reserved:
            encoded = _CARD_ENCODED.get(char, char) if ruleset is EscapeRuleset.CARD else char
            chunks.append(_ESCAPE_CHAR + encoded)
        else:
            chunks.append(char)
    return "".join(chunks)


def unescape(encoded: str, ruleset: EscapeRuleset) -> str:
    """Reverse :func:`escape`, scanning left to right without double-unescaping."""

    if ruleset is EscapeRuleset.PERCENT:
        try:
            return unquote(encoded, errors="surrogatepass")
        except UnicodeDecodeError:
            return unquote(encoded, errors="replace")

    reserved = _RESERVED[ruleset]
    chunks: list[str] = []
    index = 0
    length = len(encoded)
    while index < length:
        char = encoded[index]
        if char != _ESCAPE_CHAR or index + 1 == length:
            chunks.append(char)
            index += 1
            continue

        following = encoded[index + 1]
        if ruleset is EscapeRuleset.CARD and following in _CARD_DECODED:
            chunks.append(_CARD_DECODED[following])
        elif following in reserved:
            chunks.append(following)
        else:
            chunks.append(char + following)
        index += 2
    return "".join(chunks)


def is_escaped_at(text: str, position: int) -> bool:
    """Return True when ``text[position]`` is preceded by an odd run of backslashes."""

    count = 0
    cursor = position - 1
    while cursor >= 0 and text[cursor] == _ESCAPE_CHAR:
        count += 1
        cursor -= 1
    return count % 2 == 1


def find_unescaped(text: str, delimiter: str, start: int = 0) -> int:
    """Return the index of the first unescaped ``delimiter`` at or after ``start``, or -1."""

    position = text.find(delimiter, start)
    while position != -1 and is_escaped_at(text, position):
        position = text.find(delimiter, position + 1)
    return position


def split_unescaped(text: str, delimiter: str) -> list[str]:
    """Split ``text`` on delimiters that are not backslash-escaped.

    Segments are returned still escaped; callers unescape each one.
    """

    segments: list[str] = []
    start = 0
    while True:
        position = find_unescaped(text, delimiter, start)
        if position == -1:
            segments.append(text[start:])
            return segments
        segments.append(text[start:position])
        start = position + len(delimiter)
