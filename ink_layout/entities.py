"""Character reference decoding."""

from __future__ import annotations

import re

NAMED_ENTITIES = {
    "lt": "<",
    "gt": ">",
    "amp": "&",
    "quot": '"',
    "apos": "'",
}

MAX_CODEPOINT = 0x10FFFF
# Digits beyond these counts always exceed MAX_CODEPOINT
MAX_DECIMAL_DIGITS = 7
MAX_HEX_DIGITS = 6
SURROGATE_RANGE = range(0xD800, 0xE000)

_ENTITY_PATTERN = re.compile(
    r"&(?:(?P<named>lt|gt|amp|quot|apos)|#(?P<decimal>[0-9]+)|#[xX](?P<hex>[0-9a-fA-F]+));"
)


def safe_char(codepoint: int | None, ascii_only: bool = False) -> str:
    """Convert a numeric character reference value into a string.

    Values outside the Unicode scalar range and surrogates decode to the
    empty string instead of failing.

    Args:
        codepoint: Numeric value of the reference.
        ascii_only: Only decode 7-bit values; anything above 127 becomes
            the empty string.

    Returns:
        str: The decoded character, or ``""`` when the value is rejected.

    Examples:
        safe_char(65)  # "A"
        safe_char(0xD800)  # ""
        safe_char(233, ascii_only=True)  # ""
    """
    if codepoint is None or codepoint < 0 or codepoint > MAX_CODEPOINT:
        return ""
    if codepoint in SURROGATE_RANGE:
        return ""
    if ascii_only and codepoint > 127:
        return ""
    return chr(codepoint)


def _parse_codepoint(digits: str, base: int, max_digits: int) -> int | None:
    significant = digits.lstrip("0") or "0"
    if len(significant) > max_digits:
        return None
    return int(significant, base)


def decode_entities(text: str, ascii_only: bool = False) -> str:
    """Replace recognized character references with literal characters.

    Handles ``&lt;``, ``&gt;``, ``&amp;``, ``&quot;``, ``&apos;`` and decimal
    or hexadecimal numeric references. Decoding is a single pass, so
    ``&amp;#65;`` yields the literal text ``&#65;``. Unknown references are
    left untouched.

    Args:
        text: Markup text fragment.
        ascii_only: Forwarded to `safe_char` for numeric references.

    Returns:
        str: The decoded text.

    Examples:
        decode_entities("a &lt; b")  # "a < b"
        decode_entities("&#65;&#x42;")  # "AB"
    """
    if "&" not in text:
        return text

    def _replace(match: re.Match[str]) -> str:
        named = match.group("named")
        if named is not None:
            return NAMED_ENTITIES[named]
        decimal = match.group("decimal")
        if decimal is not None:
            return safe_char(_parse_codepoint(decimal, 10, MAX_DECIMAL_DIGITS), ascii_only)
        return safe_char(_parse_codepoint(match.group("hex"), 16, MAX_HEX_DIGITS), ascii_only)

    return _ENTITY_PATTERN.sub(_replace, text)
