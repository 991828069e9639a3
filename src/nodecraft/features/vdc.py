"""Virtual device context management (N7K only).

Assumes no admin vdc, with the default vdc using id 1.
"""
import logging
from typing import Optional

from ..cmd_ref import PlatformExcludedError
from .node_util import Node, NodeUtil

logger = logging.getLogger(__name__)


class Vdc(NodeUtil):
    """A virtual device context."""

    feature = "vdc"

    def __init__(self, node: Node, name: str):
        super().__init__(node)
        self.name = name
        self._args = {"vdc": name}

    @classmethod
    def vdcs(cls, node: Node) -> dict[str, "Vdc"]:
        return {name: cls(node, name) for name in node.config_get("vdc", "all_vdcs")}

    @staticmethod
    def default_vdc_name(node: Node) -> Optional[str]:
        return node.config_get("vdc", "default_vdc_name")

    @staticmethod
    def vdc_support(node: Node) -> bool:
        """True unless the platform has no vdcs."""
        try:
            node.lookup("vdc", "all_vdcs")
        except PlatformExcludedError as e:
            logger.debug(f"{node.name}: {e}")
            return False
        return True

    @property
    def limit_resource_module_type(self) -> str:
        """Module types the vdc is limited to.

        Raises:
            ValueUnavailableError: If no limit is configured
        """
        return self.config_get("limit_resource_module_type", self._args)

    @limit_resource_module_type.setter
    def limit_resource_module_type(self, mods: str) -> None:
        # No declared default: the module list differs on every device
        state = "" if mods else "no"
        self.config_set(
            "limit_resource_module_type",
            {"vdc": self.name, "state": state, "mods": mods or ""},
        )

    def allocate_interface_unallocated(self) -> None:
        self.config_set("allocate_interface_unallocated", self._args)
