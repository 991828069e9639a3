"""Command Reference - platform-aware CLI templates for node features.

Each feature (vni, vdc, vpc, bgp, ...) is described by one YAML document
mapping property names to query commands, extraction patterns and set
commands, with /regex/-keyed overrides per platform family:
- Resolve the effective rule for (feature, property, platform)
- Synthesize set commands from templates and runtime arguments
- Extract typed values from query output

Usage:
    from nodecraft.cmd_ref import CommandRegistry, CommandReference

    registry = CommandRegistry.default()
    ref = CommandReference(registry, "N3K-C3064PQ")
    ref.set_commands("vni", "feature")
    # ['feature vn-segment-vlan-based']
"""

from .engine import CommandReference
from .errors import (
    CmdRefError,
    SpecLoadError,
    UnknownFeatureError,
    UnknownPropertyError,
    PlatformExcludedError,
    MissingArgumentError,
    ValueUnavailableError,
    UnsupportedOperationError,
)
from .schema import (
    UNSET,
    ValueKind,
    RuleLayer,
    PlatformPattern,
    PlatformVariant,
    PropertySpec,
    FeatureSpec,
    ResolvedRule,
)
from .platform import match_variant, is_excluded, parse_pattern, is_platform_key
from .loader import FeatureLoader, load_feature, load_feature_file, read_document
from .registry import CommandRegistry
from .resolver import resolve, merge_layers
from .synthesizer import synthesize_set, synthesize_get, substitute
from .extractor import extract, find_subconfig

__all__ = [
    # Main entry points
    "CommandRegistry",
    "CommandReference",
    # Errors
    "CmdRefError",
    "SpecLoadError",
    "UnknownFeatureError",
    "UnknownPropertyError",
    "PlatformExcludedError",
    "MissingArgumentError",
    "ValueUnavailableError",
    "UnsupportedOperationError",
    # Schema classes
    "UNSET",
    "ValueKind",
    "RuleLayer",
    "PlatformPattern",
    "PlatformVariant",
    "PropertySpec",
    "FeatureSpec",
    "ResolvedRule",
    # Components (for advanced use)
    "match_variant",
    "is_excluded",
    "parse_pattern",
    "is_platform_key",
    "FeatureLoader",
    "load_feature",
    "load_feature_file",
    "read_document",
    "resolve",
    "merge_layers",
    "synthesize_set",
    "synthesize_get",
    "substitute",
    "extract",
    "find_subconfig",
]
