"""Node session and the base class of feature utilities.

A Node ties one transport to the command reference for the transport's
platform. Feature classes never build CLI text themselves: they ask the
node to get or set a (feature, property) pair with runtime arguments.
"""
import logging
from typing import Any, Optional

from ..cmd_ref import (
    CommandReference,
    CommandRegistry,
    ResolvedRule,
    ValueUnavailableError,
    extract,
    synthesize_get,
    synthesize_set,
)
from ..cmd_ref.synthesizer import RuntimeArgs
from ..transport.base import Transport
from ..utils.logging_config import timed

logger = logging.getLogger(__name__)


class Node:
    """A device session: transport plus platform-bound command reference."""

    def __init__(
        self,
        transport: Transport,
        registry: Optional[CommandRegistry] = None,
        platform: Optional[str] = None,
    ):
        """
        Args:
            transport: Connection to the device
            registry: Loaded command reference (bundled documents if None)
            platform: Platform identifier overriding transport.platform
        """
        self.transport = transport
        self.registry = registry if registry is not None else CommandRegistry.default()
        self.platform = platform or transport.platform
        self.ref = CommandReference(self.registry, self.platform)

    @property
    def name(self) -> str:
        return self.transport.name

    def lookup(self, feature: str, prop: str) -> ResolvedRule:
        return self.ref.lookup(feature, prop)

    @timed("config_get")
    def config_get(self, feature: str, prop: str, args: RuntimeArgs = None) -> Any:
        """
        Query the device and extract the value of feature.prop.

        Every query command is run and the outputs are searched as one text.
        A property without query commands yields its default.
        """
        rule = self.lookup(feature, prop)
        outputs = [self.transport.query(cmd) for cmd in synthesize_get(rule, args)]
        return extract(rule, "\n".join(outputs), args)

    def config_get_default(self, feature: str, prop: str) -> Any:
        """
        Declared default of feature.prop on this platform.

        Raises:
            ValueUnavailableError: If no default is declared
        """
        rule = self.lookup(feature, prop)
        if not rule.has_default:
            raise ValueUnavailableError(feature, prop, "no default value declared")
        return rule.default()

    @timed("config_set")
    def config_set(self, feature: str, prop: str, args: RuntimeArgs = None) -> list[str]:
        """Synthesize and send the set commands of feature.prop.

        Returns:
            The commands that were sent
        """
        commands = synthesize_set(self.lookup(feature, prop), args)
        logger.info(f"{self.name}: {feature}.{prop} -> {commands}")
        self.transport.send_config(commands)
        return commands


class NodeUtil:
    """Base class of feature utilities; subclasses name their feature."""

    feature: str = ""

    def __init__(self, node: Node):
        self.node = node

    def config_get(self, prop: str, args: RuntimeArgs = None) -> Any:
        return self.node.config_get(self.feature, prop, args)

    def config_get_default(self, prop: str) -> Any:
        return self.node.config_get_default(self.feature, prop)

    def config_set(self, prop: str, args: RuntimeArgs = None) -> list[str]:
        return self.node.config_set(self.feature, prop, args)

    @staticmethod
    def state(enable: bool) -> str:
        """The <state> argument for a boolean: configure or negate."""
        return "" if enable else "no"
