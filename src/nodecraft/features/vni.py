"""VNI management.

N7K configures standalone vni objects attached to bridge domains; N3K and
N9K map a vn-segment onto a vlan instead. The command reference hides the
difference for create/destroy and the feature toggle.
"""
import logging
from typing import Optional

from ..transport.base import CliError
from .node_util import Node, NodeUtil

logger = logging.getLogger(__name__)


class Vni(NodeUtil):
    """A VXLAN network identifier."""

    feature = "vni"

    def __init__(self, node: Node, vni: int, instantiate: bool = True):
        super().__init__(node)
        self.vni = int(vni)
        if instantiate:
            self.create()

    @classmethod
    def vnis(cls, node: Node) -> dict[int, "Vni"]:
        """Configured vnis keyed by id."""
        return {
            vni: cls(node, vni, instantiate=False)
            for vni in node.config_get("vni", "all_vnis")
        }

    @staticmethod
    def supported(node: Node) -> bool:
        return node.ref.supports("vni")

    @staticmethod
    def feature_enabled(node: Node) -> bool:
        try:
            return node.config_get("vni", "feature")
        except CliError as e:
            # Rejected when the feature is not enabled
            if not e.is_syntax_error:
                raise
            return False

    @staticmethod
    def enable(node: Node) -> None:
        node.config_set("vni", "feature")

    @staticmethod
    def nv_overlay_enabled(node: Node) -> bool:
        return node.config_get("vni", "feature_nv_overlay")

    @staticmethod
    def enable_nv_overlay(node: Node) -> None:
        node.config_set("vni", "feature_nv_overlay")

    def create(self) -> None:
        if not self.feature_enabled(self.node):
            self.enable(self.node)
        self.config_set("create", {"vni": self.vni})

    def destroy(self, vlan: Optional[int] = None) -> None:
        """Remove the vni; vlan-based platforms need the vlan it is mapped to."""
        args = {"vni": self.vni}
        if vlan is not None:
            args["vlan"] = vlan
        self.config_set("destroy", args)

    # Shutdown (N7K)

    @property
    def shutdown(self) -> bool:
        return self.config_get("shutdown", {"vni": self.vni})

    @shutdown.setter
    def shutdown(self, enable: bool) -> None:
        self.config_set("shutdown", {"vni": self.vni, "state": self.state(enable)})

    @property
    def default_shutdown(self) -> bool:
        return self.config_get_default("shutdown")

    # Vlan mapping (N3K/N9K)

    @staticmethod
    def vlan_segment(node: Node, vlan: int) -> Optional[int]:
        """The vni mapped onto vlan, or None."""
        return node.config_get("vni", "mapped_vlan", {"vlan": vlan})

    def map_vlan(self, vlan: int, enable: bool = True) -> None:
        self.config_set(
            "mapped_vlan",
            {"vlan": vlan, "vni": self.vni, "state": self.state(enable)},
        )

    # Bridge domain (N7K)

    @property
    def bridge_domain(self) -> Optional[int]:
        """Bridge domain the vni is a member of, or None."""
        return self.config_get("bridge_domain", [self.vni])

    def bridge_domain_set(self, domain: int, enable: bool = True) -> None:
        self.config_set(
            "bridge_domain",
            {"domain": domain, "vni": self.vni, "state": self.state(enable)},
        )

    def bridge_domain_activate(self, domain: int, enable: bool = True) -> None:
        self.config_set(
            "bridge_domain_activate",
            {"domain": domain, "state": self.state(enable)},
        )

    def encap_dot1q_set(self, profile: str, vlan: int, enable: bool = True) -> None:
        """Map vlan to this vni in an encapsulation profile."""
        logger.debug(f"vni {self.vni}: encapsulation profile {profile} vlan {vlan}")
        self.config_set("encap_dot1q", [profile, self.state(enable), vlan, self.vni])
