"""Platform matching for variant selection and feature exclusion.

Variant keys are written as regex literals, e.g. ``/N7/`` or ``/N(3|9)/``,
optionally followed by flags (``/n7k/i``). Matching is an unanchored
search against the full platform identifier. Order is exactly the order of
declaration: the first pattern that matches wins, even if a later one is
more specific.
"""
import re
from typing import Optional, Sequence

# /body/flags
_REGEX_LITERAL = re.compile(r"^/(?P<body>.*)/(?P<flags>[imx]*)$", re.DOTALL)

_FLAGS = {
    "i": re.IGNORECASE,
    "m": re.MULTILINE,
    "x": re.VERBOSE,
}


def is_platform_key(key: object) -> bool:
    """Check whether a document key is a /regex/ platform pattern."""
    return isinstance(key, str) and _REGEX_LITERAL.match(key) is not None


def split_regex_literal(text: str) -> tuple[str, int]:
    """Split ``/body/flags`` into (body, re flags).

    Raises:
        ValueError: If text is not a regex literal
    """
    match = _REGEX_LITERAL.match(text)
    if not match:
        raise ValueError(f"Not a /regex/ literal: {text!r}")

    flags = 0
    for char in match.group("flags"):
        flags |= _FLAGS[char]
    return match.group("body"), flags


def parse_pattern(text: str) -> re.Pattern:
    """Compile a /regex/ literal.

    Raises:
        ValueError: If text is not a regex literal
        re.error: If the body is not a valid regex
    """
    body, flags = split_regex_literal(text)
    return re.compile(body, flags)


def match_variant(platform: str, patterns: Sequence[re.Pattern]) -> Optional[int]:
    """Return the index of the first pattern matching platform, or None."""
    for index, pattern in enumerate(patterns):
        if pattern.search(platform):
            return index
    return None


def is_excluded(platform: str, patterns: Sequence[re.Pattern]) -> bool:
    """Check whether any exclusion pattern matches platform."""
    return match_variant(platform, patterns) is not None
