#!/usr/bin/env python3
"""Command reference inspection CLI.

Usage:
    nodecraft list [--feature FEATURE] [--platform PLATFORM]
    nodecraft resolve FEATURE PROPERTY --platform PLATFORM [--arg KEY=VALUE ...]
    nodecraft extract FEATURE PROPERTY --platform PLATFORM [--input FILE] [--arg KEY=VALUE ...]

Environment variables:
    NODECRAFT_CMD_REF_PATH    Extra command reference directories
    NODECRAFT_PLATFORM        Default platform identifier
"""
import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Any, Optional

from .cmd_ref import (
    CmdRefError,
    CommandReference,
    CommandRegistry,
    PlatformExcludedError,
    UnsupportedOperationError,
)
from .config import Settings

logging.basicConfig(
    level=logging.WARNING,
    format="%(asctime)s | %(levelname)-5s | %(name)s | %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger(__name__)


def parse_args_option(pairs: list[str], positional: list[str]) -> Any:
    """Build runtime arguments from --arg KEY=VALUE or --pos VALUE options."""
    if pairs and positional:
        raise ValueError("--arg and --pos cannot be combined")
    if positional:
        return list(positional)

    args = {}
    for pair in pairs:
        key, sep, value = pair.partition("=")
        if not sep or not key:
            raise ValueError(f"Expected KEY=VALUE, got {pair!r}")
        args[key] = value
    return args


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="nodecraft",
        description="Inspect the platform-aware command reference",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
    # Features and their properties
    nodecraft list --feature vni

    # Effective rule and commands on a platform
    nodecraft resolve vni mapped_vlan --platform N9K-C9396PX --arg vlan=100 --arg vni=5000 --arg state=

    # Parse saved show output
    nodecraft extract vni mapped_vlan --platform N9K-C9396PX --arg vlan=100 --input running.txt
""",
    )
    parser.add_argument(
        "--cmd-ref",
        type=Path,
        action="append",
        default=[],
        metavar="DIR",
        help="Extra command reference directory (repeatable)",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Enable debug logging",
    )

    sub = parser.add_subparsers(dest="command", required=True)

    list_parser = sub.add_parser("list", help="List features or properties")
    list_parser.add_argument("--feature", help="List the properties of this feature")
    list_parser.add_argument("--platform", help="Only show features supported on platform")

    for name, help_text in (
        ("resolve", "Show the effective rule for a property"),
        ("extract", "Extract a property value from query output"),
    ):
        cmd = sub.add_parser(name, help=help_text)
        cmd.add_argument("feature")
        cmd.add_argument("property")
        cmd.add_argument("--platform", help="Platform identifier (default: NODECRAFT_PLATFORM)")
        cmd.add_argument(
            "--arg",
            action="append",
            default=[],
            metavar="KEY=VALUE",
            help="Named placeholder value (repeatable)",
        )
        cmd.add_argument(
            "--pos",
            action="append",
            default=[],
            metavar="VALUE",
            help="Positional %%s/%%d value (repeatable)",
        )
        if name == "extract":
            cmd.add_argument(
                "--input",
                type=Path,
                help="File holding the query output (default: stdin)",
            )

    return parser


def _list(registry: CommandRegistry, feature: Optional[str], platform: Optional[str]) -> Any:
    if feature:
        return registry.feature(feature).property_names()
    names = registry.features()
    if platform:
        ref = CommandReference(registry, platform)
        names = [name for name in names if ref.supports(name)]
    return names


def _resolve(ref: CommandReference, feature: str, prop: str, args: Any) -> dict:
    rule = ref.lookup(feature, prop)
    result = rule.to_dict()
    result["get_commands"] = ref.get_commands(feature, prop, args)
    try:
        result["commands"] = ref.set_commands(feature, prop, args)
    except UnsupportedOperationError:
        result["commands"] = None
    return result


def main(argv: Optional[list[str]] = None) -> int:
    """Main entry point for the nodecraft CLI."""
    parser = build_parser()
    opts = parser.parse_args(argv)

    if opts.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    settings = Settings.from_env()
    settings.cmd_ref_paths.extend(opts.cmd_ref)

    try:
        registry = CommandRegistry.from_settings(settings)

        if opts.command == "list":
            output = _list(registry, opts.feature, opts.platform or settings.platform)
        else:
            platform = opts.platform or settings.platform
            if not platform:
                logger.error("No platform given (use --platform or NODECRAFT_PLATFORM)")
                return 2
            args = parse_args_option(opts.arg, opts.pos)
            ref = CommandReference(registry, platform)

            if opts.command == "resolve":
                output = _resolve(ref, opts.feature, opts.property, args)
            else:
                if opts.input:
                    raw_text = opts.input.read_text(encoding="utf-8")
                else:
                    raw_text = sys.stdin.read()
                output = {"value": ref.extract(opts.feature, opts.property, raw_text, args)}
    except PlatformExcludedError as e:
        logger.error(str(e))
        return 3
    except (CmdRefError, ValueError, OSError) as e:
        logger.error(str(e))
        return 1

    print(json.dumps(output, indent=2))
    return 0


if __name__ == "__main__":
    sys.exit(main())
