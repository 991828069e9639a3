"""CommandReference - the command reference bound to one platform.

Provides a single entry point for feature code:
1. Resolving a property's rule for the platform
2. Synthesizing "set" commands
3. Synthesizing "get" query commands
4. Extracting typed values from query output
5. Looking up platform defaults for idempotence checks
"""
from typing import Any

from .extractor import extract
from .platform import is_excluded
from .registry import CommandRegistry
from .schema import ResolvedRule
from .synthesizer import RuntimeArgs, synthesize_get, synthesize_set


class CommandReference:
    """
    Command reference for a single platform.

    Usage:
        ref = CommandReference(CommandRegistry.default(), "N7K-C7010")
        ref.set_commands("vni", "feature")          # ['feature vni']
        ref.extract("vni", "feature", "feature vni")  # True
    """

    def __init__(self, registry: CommandRegistry, platform: str):
        """
        Args:
            registry: Loaded feature specs
            platform: Platform identifier of the device, e.g. "N9K-C9396PX"
        """
        self.registry = registry
        self.platform = platform

    def lookup(self, feature: str, prop: str) -> ResolvedRule:
        """Resolve feature.prop for this platform."""
        return self.registry.resolve(feature, prop, self.platform)

    def set_commands(self, feature: str, prop: str, args: RuntimeArgs = None) -> list[str]:
        """Commands to send to set feature.prop."""
        return synthesize_set(self.lookup(feature, prop), args)

    def get_commands(self, feature: str, prop: str, args: RuntimeArgs = None) -> list[str]:
        """Query commands whose output feeds extract()."""
        return synthesize_get(self.lookup(feature, prop), args)

    def extract(
        self,
        feature: str,
        prop: str,
        raw_text: str,
        args: RuntimeArgs = None
    ) -> Any:
        """Typed value of feature.prop parsed from raw query output."""
        return extract(self.lookup(feature, prop), raw_text, args)

    def default_value(self, feature: str, prop: str) -> Any:
        """Declared default of feature.prop (UNSET if none)."""
        return self.lookup(feature, prop).default()

    def supports(self, feature: str) -> bool:
        """Check whether feature is loaded and not excluded on this platform."""
        if feature not in self.registry:
            return False
        spec = self.registry.feature(feature)
        return not is_excluded(self.platform, [p.pattern for p in spec.exclude])
