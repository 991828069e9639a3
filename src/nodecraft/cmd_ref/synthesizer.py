"""Command synthesizer: turns resolved templates into CLI text.

Two argument styles are supported:

- a mapping fills named placeholders such as ``<vni>`` or ``<state>``
- a list or tuple fills printf-style ``%s``/``%d`` slots in order, across
  the whole command list

A template is filled by one style only: slots of the other style left in
it are missing arguments, not literal text.

An entry starting with ``(?)`` is optional: it is dropped when one of its
named placeholders has no value (absent or None), so one document can
describe both the default and a nested context::

    ['router bgp <asnum>', '(?)vrf <vrf>']  +  {asnum: 1}
    -> ['router bgp 1']

The ``<state>`` placeholder is not special-cased here. Callers pass ``""``
to configure and ``"no"`` to negate; the gap an empty argument leaves is
closed and the command is stripped, so an empty trailing argument simply
disappears. Spaces inside argument values are kept as given::

    '<state> maxas-limit <limit>'  +  {state: 'no', limit: ''}
    -> 'no maxas-limit'
"""
import logging
import re
from typing import Any, Iterable, Mapping, Optional, Sequence, Union

from .errors import MissingArgumentError, UnsupportedOperationError
from .schema import ResolvedRule

logger = logging.getLogger(__name__)

# <name>, but not the (?P<name>...) of a named regex group
PLACEHOLDER = re.compile(r"(?<!\?P)<([A-Za-z_]\w*)>")
PRINTF_SLOT = re.compile(r"%[sd]")
OPTIONAL_PREFIX = "(?)"

# Stands in for an empty argument until tidy() closes the gap
GAP = "\x00"
_GAP_RUN = re.compile(r" *\x00[ \x00]*")

RuntimeArgs = Union[Mapping[str, Any], Sequence[Any], None]


def format_value(value: Any) -> str:
    """Render one argument value as CLI text."""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, (list, tuple)):
        return " ".join(format_value(v) for v in value)
    return str(value)


def placeholders(template: str) -> list[str]:
    """List the named placeholders of a template, in order."""
    return PLACEHOLDER.findall(template)


def _fill(value: Any, escape: bool, blank: str) -> str:
    text = format_value(value)
    if not text:
        return blank
    return re.escape(text) if escape else text


def substitute(
    template: str,
    args: Mapping[str, Any],
    escape: bool = False,
    blank: str = ""
) -> str:
    """
    Replace every ``<name>`` placeholder with its value from args.

    Args:
        template: Command or pattern template
        args: Placeholder values
        escape: Regex-escape values (for query patterns)
        blank: Text put in place of an empty value

    Raises:
        MissingArgumentError: If a placeholder has no value in args
    """
    def replace(match: re.Match) -> str:
        key = match.group(1)
        if key not in args:
            raise MissingArgumentError(key, template)
        return _fill(args[key], escape, blank)

    return PLACEHOLDER.sub(replace, template)


def _substitute_positional(
    templates: Iterable[str],
    values: Sequence[Any],
    escape: bool,
    blank: str
) -> list[str]:
    """Fill %s/%d slots across templates, consuming values in order."""
    remaining = iter(values)
    consumed = 0
    result = []

    for template in templates:
        def replace(match: re.Match, template: str = template) -> str:
            nonlocal consumed
            try:
                value = next(remaining)
            except StopIteration:
                raise MissingArgumentError(f"#{consumed + 1}", template) from None
            consumed += 1
            return _fill(value, escape, blank)

        result.append(PRINTF_SLOT.sub(replace, template))

    if consumed < len(values):
        logger.debug(f"Ignoring {len(values) - consumed} unused positional arguments")

    return result


def _select_optional(templates: Iterable[str], args: RuntimeArgs) -> list[str]:
    """Drop optional entries without values; unmark the others."""
    named = args if isinstance(args, Mapping) else {}
    selected = []
    for template in templates:
        if template.startswith(OPTIONAL_PREFIX):
            template = template[len(OPTIONAL_PREFIX):]
            if any(named.get(name) is None for name in placeholders(template)):
                continue
        selected.append(template)
    return selected


def _check_unfilled(templates: list[str], other_style: re.Pattern) -> None:
    """Raise for a slot the chosen argument style cannot fill."""
    for template in templates:
        match = other_style.search(template)
        if match:
            slot = match.group(1) if match.groups() else match.group(0)
            raise MissingArgumentError(slot, template)


def render(
    templates: Iterable[str],
    args: RuntimeArgs = None,
    escape: bool = False,
    blank: str = ""
) -> list[str]:
    """
    Substitute args into a list of templates.

    Raises:
        MissingArgumentError: If a placeholder or slot has no value, including
            slots of the style args does not provide
        TypeError: If args is neither a mapping nor a list
    """
    templates = _select_optional(templates, args)
    if args is None:
        args = {}

    if isinstance(args, Mapping):
        _check_unfilled(templates, PRINTF_SLOT)
        return [substitute(t, args, escape=escape, blank=blank) for t in templates]
    if isinstance(args, (list, tuple)):
        _check_unfilled(templates, PLACEHOLDER)
        return _substitute_positional(templates, args, escape, blank)

    raise TypeError(
        f"Arguments must be a mapping or a list, not {type(args).__name__}"
    )


def tidy(command: str) -> str:
    """Close the gaps left by empty arguments and strip."""
    return _GAP_RUN.sub(" ", command).strip()


def synthesize_set(rule: ResolvedRule, args: RuntimeArgs = None) -> list[str]:
    """
    Produce the ordered commands for a "set" of a property.

    Args:
        rule: Resolved rule for the property
        args: Placeholder values (mapping) or positional values (list)

    Returns:
        Commands to send, in order; empty results are dropped

    Raises:
        UnsupportedOperationError: If the rule has no set commands
        MissingArgumentError: If a placeholder has no value
    """
    if not rule.settable:
        raise UnsupportedOperationError(rule.feature, rule.name, "set", rule.platform)

    commands = [tidy(c) for c in render(rule.set_commands, args, blank=GAP)]
    commands = [c for c in commands if c]
    logger.debug(f"{rule.feature}.{rule.name} set -> {commands}")
    return commands


def synthesize_get(rule: ResolvedRule, args: RuntimeArgs = None) -> list[str]:
    """Produce the query commands for a "get"; empty if not queryable."""
    commands = [tidy(c) for c in render(rule.query_command, args, blank=GAP)]
    return [c for c in commands if c]


def render_patterns(
    rule: ResolvedRule,
    args: RuntimeArgs = None
) -> Optional[list[str]]:
    """Substitute args into the query patterns, regex-escaping values."""
    if rule.query_pattern is None:
        return None
    return render(rule.query_pattern, args, escape=True)
