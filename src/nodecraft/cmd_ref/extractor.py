"""Response extractor: parses query output back into typed values.

With several patterns, all but the last narrow the search region: the
first line matching a parent pattern is located and its indented children
(dedented) become the new region. This follows the nesting of running
config output::

    vlan 100
      vn-segment 5000

    ['/^vlan <vlan>$/', '/^vn-segment (\\d+)$/']  ->  5000 (for vlan=100)
"""
import logging
import re
import textwrap
from typing import Any, Optional

from .errors import ValueUnavailableError
from .platform import is_platform_key, parse_pattern
from .schema import ResolvedRule, ValueKind
from .synthesizer import RuntimeArgs, render_patterns

logger = logging.getLogger(__name__)


def compile_token(token: str) -> re.Pattern:
    """Compile a /regex/ token; anything else is matched literally."""
    if is_platform_key(token):
        return parse_pattern(token)
    return re.compile(re.escape(token))


def _indent(line: str) -> int:
    return len(line) - len(line.lstrip())


def find_subconfig(text: str, pattern: re.Pattern) -> Optional[str]:
    """
    Return the dedented children of the first line matching pattern.

    Children are the following lines indented deeper than the parent;
    blank lines are skipped. Returns None when no line matches.
    """
    lines = text.splitlines()
    for index, line in enumerate(lines):
        if not pattern.search(line):
            continue

        parent_indent = _indent(line)
        children = []
        for child in lines[index + 1:]:
            if not child.strip():
                continue
            if _indent(child) <= parent_indent:
                break
            children.append(child)
        return textwrap.dedent("\n".join(children))

    return None


def _coerce(rule: ResolvedRule, text: Optional[str]) -> Any:
    """Convert captured text according to the rule's kind."""
    if text is None:
        # Optional group that did not participate
        return None
    if rule.kind == ValueKind.INT:
        try:
            return int(text)
        except ValueError:
            raise ValueUnavailableError(
                rule.feature, rule.name, f"cannot convert {text!r} to int"
            ) from None
    if rule.kind == ValueKind.ARRAY:
        return text.split()
    return text.strip()


def _value(rule: ResolvedRule, match: re.Match) -> Any:
    """Value of one match: whole text, single group, or tuple of groups."""
    groups = match.groups()
    if not groups:
        return _coerce(rule, match.group(0))
    if len(groups) == 1:
        return _coerce(rule, groups[0])
    return tuple(_coerce(rule, g) for g in groups)


def _miss(rule: ResolvedRule, reason: str) -> Any:
    """Outcome when nothing matched."""
    if rule.multiple:
        return []
    if rule.kind == ValueKind.BOOLEAN:
        return False
    if rule.has_default:
        logger.debug(f"{rule.feature}.{rule.name}: {reason}, using default")
        return rule.default()
    raise ValueUnavailableError(rule.feature, rule.name, reason)


def extract(rule: ResolvedRule, raw_text: str, args: RuntimeArgs = None) -> Any:
    """
    Extract the property value from raw query output.

    Args:
        rule: Resolved rule for the property
        raw_text: Multi-line output of the rule's query command(s)
        args: Values for placeholders in the patterns

    Returns:
        - boolean kind: True if any line matches, else False
        - multiple: list with one value per matching line, in order
        - otherwise the first match: text, coerced value, or tuple of
          values when the pattern has several groups

    Raises:
        ValueUnavailableError: If nothing matched and no default is declared
    """
    patterns = render_patterns(rule, args)
    if patterns is None:
        return _miss(rule, "no query pattern")

    compiled = [compile_token(p) for p in patterns]
    region = raw_text or ""

    for parent in compiled[:-1]:
        region = find_subconfig(region, parent)
        if region is None:
            return _miss(rule, f"no match for {parent.pattern!r}")

    final = compiled[-1]
    matches = [m for m in (final.search(line) for line in region.splitlines()) if m]

    if rule.multiple:
        return [_value(rule, m) for m in matches]
    if rule.kind == ValueKind.BOOLEAN:
        return bool(matches)
    if not matches:
        return _miss(rule, f"no match for {final.pattern!r}")
    return _value(rule, matches[0])
