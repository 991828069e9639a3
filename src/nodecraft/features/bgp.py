"""BGP router management.

A RouterBgp is the default vrf of an autonomous system, or one of its
vrfs; commands of a vrf router are nested under ``vrf <vrf>``.

Properties with a boolean value toggle a child command of
``router bgp <asnum>``; properties with a value are reset by negating the
command. Commands that cannot be negated without an argument (router-id,
cluster-id, confederation identifier) are sent with a dummy value, which
the device ignores once the command is negated.
"""
import logging
import re
from typing import Any, Optional, Union

from ..transport.base import CliError
from .node_util import Node, NodeUtil

logger = logging.getLogger(__name__)

ASN_PATTERN = re.compile(r"^(\d+|\d+\.\d+)$")

DEFAULT_VRF = "default"
DUMMY_ROUTER_ID = "1.2.3.4"
DUMMY_ID = 1


def _flag(prop: str, doc: str) -> property:
    """Boolean property backed by one bgp command."""
    def getter(self) -> bool:
        return self.config_get(prop, self._args)

    def setter(self, enable: bool) -> None:
        self.config_set(prop, {**self._args, "state": self.state(enable)})

    return property(getter, setter, doc=doc)


def _number(prop: str, key: str, doc: str) -> property:
    """Integer property; setting the default negates the command."""
    def getter(self) -> Optional[int]:
        return self.config_get(prop, self._args)

    def setter(self, value: Optional[int]) -> None:
        self._set_value(prop, key, value, dummy="")

    return property(getter, setter, doc=doc)


class RouterBgp(NodeUtil):
    """The bgp router of one autonomous system and vrf."""

    feature = "bgp"

    def __init__(
        self,
        node: Node,
        asnum: Union[int, str],
        vrf: str = DEFAULT_VRF,
        instantiate: bool = True,
    ):
        super().__init__(node)
        if not isinstance(vrf, str):
            raise TypeError("BGP vrf must be a 'str'")
        if not vrf:
            raise ValueError("BGP vrf must not be empty")
        self.asnum = self.process_asnum(asnum)
        self.vrf = vrf
        self._args = {"asnum": self.asnum}
        if vrf != DEFAULT_VRF:
            self._args["vrf"] = vrf
        if instantiate:
            self.create()

    @staticmethod
    def process_asnum(asnum: Union[int, str]) -> int:
        """Normalize an ASPLAIN ("55", 55) or ASDOT ("1.5") number."""
        if isinstance(asnum, bool) or not isinstance(asnum, (int, str)):
            raise TypeError("BGP asnum must be either a 'str' or an 'int'")
        if isinstance(asnum, str):
            if not ASN_PATTERN.match(asnum):
                raise ValueError(f"Invalid BGP asnum: {asnum!r}")
            return RouterBgp.dot_to_big(asnum)
        return asnum

    @staticmethod
    def dot_to_big(dot_str: str) -> int:
        """Convert an ASDOT+ number to ASPLAIN."""
        if "." not in dot_str:
            return int(dot_str)
        high, low = dot_str.split(".", 1)
        return ((int(high) & 0xFFFF) << 16) + (int(low) & 0xFFFF)

    @classmethod
    def routers(cls, node: Node) -> dict[int, dict[str, "RouterBgp"]]:
        """Configured routers: {asnum: {vrf: router}}, default vrf included."""
        try:
            asnum = node.config_get("bgp", "router")
            if asnum is None:
                return {}
            asnum = cls.process_asnum(asnum)
            vrfs = node.config_get("bgp", "vrf", {"asnum": asnum})
        except CliError as e:
            # Rejected when the feature is not enabled
            if not e.is_syntax_error:
                raise
            return {}
        names = [DEFAULT_VRF] + vrfs
        return {asnum: {vrf: cls(node, asnum, vrf, instantiate=False) for vrf in names}}

    @staticmethod
    def enabled(node: Node) -> bool:
        try:
            return node.config_get("bgp", "feature")
        except CliError as e:
            if not e.is_syntax_error:
                raise
            return False

    @staticmethod
    def enable(node: Node, state: str = "") -> None:
        node.config_set("bgp", "feature", {"state": state})

    @property
    def is_default_vrf(self) -> bool:
        return self.vrf == DEFAULT_VRF

    def _router_set(self, state: str) -> None:
        if self.is_default_vrf:
            self.config_set("router", {"asnum": self.asnum, "state": state})
        else:
            self.vrf_set(self.vrf, enable=(state == ""))

    def create(self) -> None:
        if not self.enabled(self.node):
            self.enable(self.node)
        self._router_set("")

    def destroy(self) -> None:
        """Remove the vrf, or the whole router when nothing else is left.

        The feature is disabled for the default vrf and for the last
        remaining vrf.
        """
        try:
            if not self.is_default_vrf and len(self.vrfs) > 1:
                self._router_set("no")
            else:
                self.enable(self.node, "no")
        except CliError as e:
            if not e.is_syntax_error:
                raise
            logger.debug(f"{self.node.name}: bgp already disabled")

    def default(self, prop: str) -> Any:
        """Declared default of a bgp property."""
        return self.config_get_default(prop)

    def _set_value(self, prop: str, key: str, value: Any, dummy: Any) -> None:
        """Configure value, or negate the command when value is the default."""
        if value == self.default(prop):
            args = {**self._args, "state": "no", key: dummy}
        else:
            args = {**self._args, "state": "", key: value}
        self.config_set(prop, args)

    # Vrfs

    @property
    def vrfs(self) -> list[str]:
        """Non-default vrfs of the autonomous system."""
        return self.config_get("vrf", {"asnum": self.asnum})

    def vrf_set(self, vrf: str, enable: bool = True) -> None:
        self.config_set("vrf", {"asnum": self.asnum, "vrf": vrf, "state": self.state(enable)})

    # Flags

    bestpath_always_compare_med = _flag(
        "bestpath_always_compare_med", "Compare MED on paths from different ASes")
    bestpath_aspath_multipath_relax = _flag(
        "bestpath_aspath_multipath_relax", "Load share across paths of equal AS-path length")
    bestpath_compare_routerid = _flag(
        "bestpath_compare_routerid", "Compare router-id for identical eBGP paths")
    bestpath_cost_community_ignore = _flag(
        "bestpath_cost_community_ignore", "Ignore cost communities in bestpath selection")
    bestpath_med_confed = _flag(
        "bestpath_med_confed", "Compare MED among confederation paths")
    bestpath_med_missing_as_worst = _flag(
        "bestpath_med_missing_as_worst", "Treat a missing MED as the worst")
    bestpath_med_non_deterministic = _flag(
        "bestpath_med_non_deterministic", "Do not always pick the best MED path")
    enforce_first_as = _flag(
        "enforce_first_as", "Require the neighbor AS first in eBGP AS paths")
    fast_external_fallover = _flag(
        "fast_external_fallover", "Reset eBGP sessions as soon as the link goes down")
    flush_routes = _flag("flush_routes", "Flush routes in the RIB on a restart")
    graceful_restart = _flag("graceful_restart", "Graceful restart")
    graceful_restart_helper = _flag(
        "graceful_restart_helper", "Graceful restart helper mode only")
    isolate = _flag("isolate", "Isolate this router from bgp")
    log_neighbor_changes = _flag("log_neighbor_changes", "Log neighbor up/down events")
    neighbor_down_fib_accelerate = _flag(
        "neighbor_down_fib_accelerate", "Withdraw routes as soon as a neighbor goes down")
    shutdown = _flag("shutdown", "Administratively shut down bgp")
    suppress_fib_pending = _flag(
        "suppress_fib_pending", "Advertise only routes programmed in hardware")

    # Values

    graceful_restart_timers_restart = _number(
        "graceful_restart_timers_restart", "seconds", "Graceful restart time")
    graceful_restart_timers_stalepath_time = _number(
        "graceful_restart_timers_stalepath_time", "seconds", "Stale path hold time")
    maxas_limit = _number("maxas_limit", "limit", "Maximum AS-path length")
    reconnect_interval = _number("reconnect_interval", "seconds", "Reconnect interval")

    @property
    def router_id(self) -> str:
        return self.config_get("router_id", self._args)

    @router_id.setter
    def router_id(self, router_id: str) -> None:
        self._set_value("router_id", "id", router_id, dummy=DUMMY_ROUTER_ID)

    @staticmethod
    def evpn_enabled(node: Node) -> bool:
        return node.config_get("bgp", "feature_nv_overlay_evpn")

    @staticmethod
    def enable_evpn(node: Node) -> None:
        node.config_set("bgp", "feature_nv_overlay_evpn", {"state": ""})

    @property
    def route_distinguisher(self) -> Union[str, bool]:
        """Route distinguisher of a vrf; False while evpn is not enabled."""
        if not self.evpn_enabled(self.node):
            return False
        return self.config_get("route_distinguisher", self._args)

    @route_distinguisher.setter
    def route_distinguisher(self, rd: str) -> None:
        if not self.evpn_enabled(self.node):
            self.enable_evpn(self.node)
        self._set_value("route_distinguisher", "rd", rd, dummy="")

    @property
    def cluster_id(self) -> str:
        return self.config_get("cluster_id", self._args)

    @cluster_id.setter
    def cluster_id(self, cluster_id: Union[int, str]) -> None:
        self._set_value("cluster_id", "id", cluster_id, dummy=DUMMY_ID)

    @property
    def confederation_id(self) -> str:
        return self.config_get("confederation_id", self._args)

    @confederation_id.setter
    def confederation_id(self, confederation_id: Union[int, str]) -> None:
        self._set_value("confederation_id", "id", confederation_id, dummy=DUMMY_ID)

    @property
    def confederation_peers(self) -> list[str]:
        return self.config_get("confederation_peers", self._args)

    def confederation_peers_set(self, peers: list[str]) -> None:
        """Replace the peer list; the command adds to any existing peers."""
        current = self.confederation_peers
        if current:
            self.config_set(
                "confederation_peers",
                {**self._args, "state": "no", "peer_list": current},
            )
        if list(peers) != self.default("confederation_peers"):
            self.config_set(
                "confederation_peers",
                {**self._args, "state": "", "peer_list": list(peers)},
            )

    # Timers

    @property
    def timer_bgp_keepalive_hold(self) -> tuple[int, int]:
        """(keepalive, hold); each falls back to its own default."""
        match = self.config_get("timer_bgp_keepalive_hold", self._args)
        if match is None:
            return self.default("timer_bgp_keepalive"), self.default("timer_bgp_hold")
        keepalive, hold = match
        if keepalive is None:
            keepalive = self.default("timer_bgp_keepalive")
        if hold is None:
            hold = self.default("timer_bgp_hold")
        return keepalive, hold

    @property
    def timer_bgp_keepalive(self) -> int:
        return self.timer_bgp_keepalive_hold[0]

    @property
    def timer_bgp_holdtime(self) -> int:
        return self.timer_bgp_keepalive_hold[1]

    def timer_bgp_keepalive_hold_set(self, keepalive: int, hold: int) -> None:
        is_default = (
            keepalive == self.default("timer_bgp_keepalive")
            and hold == self.default("timer_bgp_hold")
        )
        self.config_set(
            "timer_bgp_keepalive_hold",
            {
                **self._args,
                "state": "no" if is_default else "",
                "keepalive": keepalive,
                "hold": hold,
            },
        )

    @property
    def timer_bestpath_limit(self) -> int:
        return self.config_get("timer_bestpath_limit", self._args)

    @property
    def timer_bestpath_limit_always(self) -> bool:
        return self.config_get("timer_bestpath_limit_always", self._args)

    def timer_bestpath_limit_set(self, seconds: int, always: bool = False) -> None:
        prop = "timer_bestpath_limit_always" if always else "timer_bestpath_limit"
        if seconds == self.default("timer_bestpath_limit"):
            args = {**self._args, "state": "no", "seconds": ""}
        else:
            args = {**self._args, "state": "", "seconds": seconds}
        self.config_set(prop, args)
