"""Tests for feature utilities against an in-memory device."""
import pytest
from nodecraft.cmd_ref import (
    CommandRegistry,
    UnsupportedOperationError,
    ValueUnavailableError,
)
from nodecraft.features import Node, RouterBgp, Vdc, Vni, Vpc
from nodecraft.transport import InMemoryTransport

FEATURES = "show running | i ^feature"
RUNNING_BGP = "show running bgp all"
EVPN = "show running | i ^nv overlay evpn"

BGP_CONFIG = """\
router bgp 65000
  router-id 10.0.0.1
  log-neighbor-changes
  confederation peers 65001 65002
  timers bgp 30 90
  graceful-restart
  vrf blue
    router-id 10.0.0.2
    rd 65000:1
"""


@pytest.fixture(scope="module")
def registry():
    return CommandRegistry.default()


def make_node(registry, platform="N9K-C9396PX", outputs=None) -> Node:
    transport = InMemoryTransport(platform=platform, outputs=outputs)
    return Node(transport, registry)


class TestNode:
    """Tests for the node session."""

    def test_platform_from_transport(self, registry):
        """The platform defaults to the transport's."""
        node = make_node(registry, platform="N7K-C7010")
        assert node.platform == "N7K-C7010"
        assert node.ref.platform == "N7K-C7010"

    def test_platform_override(self, registry):
        """An explicit platform wins."""
        node = Node(InMemoryTransport(platform="N9K-C9396PX"), registry, platform="N3K-C3064PQ")
        assert node.lookup("vni", "feature").set_commands == ("feature vn-segment-vlan-based",)

    def test_config_get_queries_device(self, registry):
        """Getting a value runs the query commands."""
        node = make_node(registry, outputs={"show running vpc": "vpc domain 5"})
        assert node.config_get("vpc", "domain") == 5
        assert node.transport.queries == ["show running vpc"]

    def test_config_get_without_query(self, registry):
        """Properties without queries return their default without touching the device."""
        node = make_node(registry)
        assert node.config_get("bgp", "timer_bgp_keepalive", {"asnum": 1}) == 60
        assert node.transport.queries == []

    def test_config_set_sends_batch(self, registry):
        """Setting a value sends one batch of commands."""
        node = make_node(registry)
        commands = node.config_set("vpc", "feature", {"state": ""})
        assert commands == ["feature vpc"]
        assert node.transport.config_log == [["feature vpc"]]

    def test_config_get_default(self, registry):
        """Defaults are looked up without touching the device."""
        node = make_node(registry, platform="N7K-C7010")
        assert node.config_get_default("vpc", "feature") is False
        with pytest.raises(ValueUnavailableError):
            node.config_get_default("vdc", "limit_resource_module_type")
        assert node.transport.queries == []


class TestVpc:
    """Tests for vPC domains."""

    def test_create_enables_feature(self, registry):
        """Creating a domain enables the feature first."""
        node = make_node(registry)
        Vpc(node, 100)
        assert node.transport.config_log == [["feature vpc"], ["vpc domain 100", "end"]]

    def test_create_when_enabled(self, registry):
        """An enabled feature is not enabled again."""
        node = make_node(registry, outputs={FEATURES: "feature lacp\nfeature vpc"})
        Vpc(node, 100)
        assert node.transport.config_log == [["vpc domain 100", "end"]]

    def test_domains(self, registry):
        """The configured domain is discovered."""
        node = make_node(registry, outputs={"show running vpc": "feature vpc\nvpc domain 42"})
        domains = Vpc.domains(node)
        assert list(domains) == [42]
        assert domains[42].domain == 42
        assert node.transport.config_log == []

    def test_no_domains(self, registry):
        """No domain gives an empty dict."""
        assert Vpc.domains(make_node(registry)) == {}

    def test_destroy(self, registry):
        """Destroying disables the feature."""
        node = make_node(registry)
        Vpc(node, 1, instantiate=False).destroy()
        assert node.transport.sent == ["no feature vpc"]

    def test_domain_type(self, registry):
        """Domain ids are integers."""
        with pytest.raises(TypeError):
            Vpc(make_node(registry), "100")


class TestVni:
    """Tests for VNIs on both implementations."""

    def test_create_on_n9k(self, registry):
        """N9K enables the vlan-based feature first."""
        node = make_node(registry)
        Vni(node, 5000)
        assert node.transport.config_log == [
            ["feature vn-segment-vlan-based"],
            ["vni 5000", "end"],
        ]

    def test_create_on_n7k_enabled(self, registry):
        """N7K with the feature on only creates the vni."""
        node = make_node(registry, platform="N7K-C7010", outputs={FEATURES: "feature vni"})
        Vni(node, 5000)
        assert node.transport.config_log == [["vni 5000", "end"]]

    def test_feature_rejected(self, registry):
        """A syntax rejection means the feature is off."""
        node = make_node(registry)
        node.transport.reject(FEATURES)
        assert Vni.feature_enabled(node) is False

    def test_vnis(self, registry):
        """All mapped segments are listed."""
        output = "vlan 100\n  vn-segment 5000\nvlan 200\n  vn-segment 6000\n"
        node = make_node(registry, outputs={"show running vlan": output})
        assert sorted(Vni.vnis(node)) == [5000, 6000]
        assert Vni.vlan_segment(node, 200) == 6000
        assert Vni.vlan_segment(node, 300) is None

    def test_map_vlan(self, registry):
        """Mapping puts the segment under the vlan."""
        node = make_node(registry)
        Vni(node, 5000, instantiate=False).map_vlan(100)
        assert node.transport.sent == ["vlan 100", "vn-segment 5000 ; end"]

    def test_destroy_needs_vlan_on_n9k(self, registry):
        """Vlan-based platforms remove the segment from its vlan."""
        node = make_node(registry)
        Vni(node, 5000, instantiate=False).destroy(vlan=100)
        assert node.transport.sent == ["vlan 100", "no vn-segment 5000 ; end"]

    def test_shutdown_on_n7k(self, registry):
        """Shutdown state is read from 'show vni'."""
        output = "5000  Down  100\n6000  Up    200\n"
        node = make_node(registry, platform="N7K-C7010", outputs={"show vni": output})
        assert Vni(node, 5000, instantiate=False).shutdown is True
        vni = Vni(node, 6000, instantiate=False)
        assert vni.shutdown is False
        assert vni.default_shutdown is False
        assert vni.bridge_domain == 200

        vni.shutdown = False
        assert node.transport.sent == ["vni 6000", "no shutdown", "end"]

    def test_encap_dot1q(self, registry):
        """Positional arguments fill the encapsulation profile."""
        node = make_node(registry, platform="N7K-C7010")
        Vni(node, 5000, instantiate=False).encap_dot1q_set("cisco", 100)
        assert node.transport.sent == [
            "encapsulation profile vni cisco",
            "dot1q 100 vni 5000",
            "end",
        ]

    def test_unsupported_platform(self, registry):
        """vni is excluded on N5K."""
        assert Vni.supported(make_node(registry, platform="N5K-C5672UP")) is False
        assert Vni.supported(make_node(registry)) is True


class TestVdc:
    """Tests for vdcs."""

    OUTPUT = "vdc switch id 1\n  limit-resource module-type f3\nvdc blue id 2\n"

    def test_vdc_support(self, registry):
        """Only N7K has vdcs."""
        assert Vdc.vdc_support(make_node(registry, platform="N7K-C7010")) is True
        assert Vdc.vdc_support(make_node(registry)) is False

    def test_vdcs(self, registry):
        """Every vdc is listed."""
        node = make_node(registry, platform="N7K-C7010", outputs={"show run vdc all": self.OUTPUT})
        assert list(Vdc.vdcs(node)) == ["switch", "blue"]
        assert Vdc.default_vdc_name(node) == "switch"

    def test_limit_resource_module_type(self, registry):
        """The module limit is read inside the vdc block."""
        node = make_node(registry, platform="N7K-C7010", outputs={"show run vdc all": self.OUTPUT})
        assert Vdc(node, "switch").limit_resource_module_type == "f3"
        with pytest.raises(ValueUnavailableError):
            Vdc(node, "blue").limit_resource_module_type

    def test_set_module_type(self, registry):
        """Setting appends to the vdc prompt step; clearing negates."""
        node = make_node(registry, platform="N7K-C7010")
        vdc = Vdc(node, "switch")
        vdc.limit_resource_module_type = "f3 m2xl"
        vdc.limit_resource_module_type = ""
        assert node.transport.config_log == [
            ["terminal dont-ask ; vdc switch", "limit-resource module-type f3 m2xl"],
            ["terminal dont-ask ; vdc switch", "no limit-resource module-type"],
        ]

    def test_allocate_interface_unallocated(self, registry):
        """Allocation is one appended command."""
        node = make_node(registry, platform="N7K-C7010")
        Vdc(node, "switch").allocate_interface_unallocated()
        assert node.transport.sent == [
            "terminal dont-ask ; vdc switch",
            "allocate interface unallocated-interfaces",
        ]


class TestRouterBgpAsnum:
    """Tests for AS number handling."""

    def test_asplain(self):
        """Plain numbers pass through."""
        assert RouterBgp.process_asnum(55) == 55
        assert RouterBgp.process_asnum("55") == 55

    def test_asdot(self):
        """ASDOT is converted to ASPLAIN."""
        assert RouterBgp.process_asnum("1.5") == 65541
        assert RouterBgp.dot_to_big("0.65535") == 65535

    def test_invalid(self):
        """Other values are rejected."""
        with pytest.raises(ValueError):
            RouterBgp.process_asnum("as100")
        with pytest.raises(TypeError):
            RouterBgp.process_asnum(1.5)


class TestRouterBgp:
    """Tests for the bgp router."""

    @pytest.fixture
    def node(self, registry):
        return make_node(registry, outputs={FEATURES: "feature bgp", RUNNING_BGP: BGP_CONFIG})

    @pytest.fixture
    def router(self, node):
        return RouterBgp(node, 65000, instantiate=False)

    def test_create_enables_feature(self, registry):
        """A disabled feature is enabled before the router is created."""
        node = make_node(registry)
        RouterBgp(node, 65000)
        assert node.transport.config_log == [["feature bgp"], ["router bgp 65000"]]

    def test_create_when_enabled(self, node):
        """An enabled feature only gets the router command."""
        RouterBgp(node, "1.5")
        assert node.transport.config_log == [["router bgp 65541"]]

    def test_routers(self, node):
        """The configured router is found with each of its vrfs."""
        routers = RouterBgp.routers(node)
        assert list(routers) == [65000]
        assert list(routers[65000]) == ["default", "blue"]
        assert routers[65000]["blue"].vrf == "blue"
        assert node.transport.config_log == []

    def test_routers_feature_disabled(self, registry):
        """Rejected show commands mean no routers."""
        node = make_node(registry)
        node.transport.reject(RUNNING_BGP)
        node.transport.reject(FEATURES)
        assert RouterBgp.routers(node) == {}
        assert RouterBgp.enabled(node) is False

    def test_destroy(self, router, node):
        """Destroying disables the feature."""
        router.destroy()
        assert node.transport.sent == ["no feature bgp"]

    def test_flags(self, router, node):
        """Flags read presence and toggle the command."""
        assert router.log_neighbor_changes is True
        assert router.shutdown is False

        router.log_neighbor_changes = False
        router.shutdown = True
        assert node.transport.config_log == [
            ["router bgp 65000", "no log-neighbor-changes"],
            ["router bgp 65000", "shutdown"],
        ]

    def test_router_id(self, router, node):
        """Removing the router-id uses a dummy value."""
        assert router.router_id == "10.0.0.1"
        router.router_id = "192.168.0.1"
        router.router_id = router.default("router_id")
        assert node.transport.config_log == [
            ["router bgp 65000", "router-id 192.168.0.1"],
            ["router bgp 65000", "no router-id 1.2.3.4"],
        ]

    def test_cluster_and_confederation_id(self, router, node):
        """Ids missing from the config read as ''."""
        assert router.cluster_id == ""
        router.cluster_id = ""
        router.confederation_id = 77
        assert node.transport.config_log == [
            ["router bgp 65000", "no cluster-id 1"],
            ["router bgp 65000", "confederation identifier 77"],
        ]

    def test_numbers(self, router, node):
        """Setting the default negates without a value."""
        assert router.maxas_limit is None
        assert router.reconnect_interval == 60

        router.maxas_limit = 50
        router.maxas_limit = None
        router.reconnect_interval = 60
        assert node.transport.config_log == [
            ["router bgp 65000", "maxas-limit 50"],
            ["router bgp 65000", "no maxas-limit"],
            ["router bgp 65000", "no reconnect-interval"],
        ]

    def test_confederation_peers_replaced(self, router, node):
        """Existing peers are removed before the new list is set."""
        assert router.confederation_peers == ["65001", "65002"]
        router.confederation_peers_set(["65003"])
        assert node.transport.config_log == [
            ["router bgp 65000", "no confederation peers 65001 65002"],
            ["router bgp 65000", "confederation peers 65003"],
        ]

    def test_timers_from_config(self, router):
        """Keepalive and hold come from one line."""
        assert router.timer_bgp_keepalive_hold == (30, 90)
        assert router.timer_bgp_keepalive == 30
        assert router.timer_bgp_holdtime == 90

    def test_timers_default(self, registry):
        """Without the line each timer takes its own default."""
        node = make_node(registry, outputs={RUNNING_BGP: "router bgp 65000\n"})
        router = RouterBgp(node, 65000, instantiate=False)
        assert router.timer_bgp_keepalive_hold == (60, 180)
        assert router.timer_bestpath_limit == 300
        assert router.timer_bestpath_limit_always is False

    def test_timer_set(self, router, node):
        """Default timers negate the command."""
        router.timer_bgp_keepalive_hold_set(60, 180)
        router.timer_bestpath_limit_set(100, always=True)
        router.timer_bestpath_limit_set(300)
        assert node.transport.config_log == [
            ["router bgp 65000", "no timers bgp 60 180"],
            ["router bgp 65000", "timers bestpath-limit 100 always"],
            ["router bgp 65000", "no timers bestpath-limit"],
        ]

    def test_vrfs(self, router, node):
        """Vrfs are listed and added under the router."""
        assert router.vrfs == ["blue"]
        router.vrf_set("red")
        assert node.transport.sent == ["router bgp 65000", "vrf red"]

    def test_isolate_on_n5k(self, registry):
        """isolate reads False and cannot be set on N5K."""
        node = make_node(registry, platform="N5K-C5672UP", outputs={RUNNING_BGP: BGP_CONFIG})
        router = RouterBgp(node, 65000, instantiate=False)
        assert router.isolate is False
        with pytest.raises(UnsupportedOperationError):
            router.isolate = True

    def test_session_flags(self, router, node):
        """Flags defaulting to enabled are read and negated like the others."""
        assert router.graceful_restart is True
        assert router.graceful_restart_helper is False
        assert router.default("enforce_first_as") is True
        assert router.default("fast_external_fallover") is True
        assert router.default("flush_routes") is False

        router.fast_external_fallover = False
        router.flush_routes = True
        router.enforce_first_as = True
        assert node.transport.config_log == [
            ["router bgp 65000", "no fast-external-fallover"],
            ["router bgp 65000", "flush-routes"],
            ["router bgp 65000", "enforce-first-as"],
        ]


class TestRouterBgpVrf:
    """Tests for the router of a non-default vrf."""

    @pytest.fixture
    def node(self, registry):
        return make_node(registry, outputs={
            FEATURES: "feature bgp",
            RUNNING_BGP: BGP_CONFIG,
            EVPN: "nv overlay evpn",
        })

    @pytest.fixture
    def router(self, node):
        return RouterBgp(node, 65000, "blue", instantiate=False)

    def test_invalid_vrf(self, node):
        """The vrf is a non-empty name."""
        with pytest.raises(ValueError):
            RouterBgp(node, 65000, "", instantiate=False)
        with pytest.raises(TypeError):
            RouterBgp(node, 65000, 5, instantiate=False)

    def test_create(self, node):
        """Creating adds the vrf under the router."""
        RouterBgp(node, 65000, "red")
        assert node.transport.config_log == [["router bgp 65000", "vrf red"]]

    def test_values_scoped_to_vrf(self, router, node):
        """Reads and writes happen inside the vrf block."""
        assert router.router_id == "10.0.0.2"
        router.router_id = "10.0.0.3"
        router.maxas_limit = 20
        assert node.transport.config_log == [
            ["router bgp 65000", "vrf blue", "router-id 10.0.0.3"],
            ["router bgp 65000", "vrf blue", "maxas-limit 20"],
        ]

    def test_route_distinguisher(self, router, node):
        """The route distinguisher is read and reset in the vrf."""
        assert router.route_distinguisher == "65000:1"
        router.route_distinguisher = ""
        assert node.transport.config_log == [
            ["router bgp 65000", "vrf blue", "no rd"],
        ]

    def test_route_distinguisher_enables_evpn(self, registry):
        """Without evpn nothing is read and setting enables it first."""
        node = make_node(registry, outputs={RUNNING_BGP: BGP_CONFIG})
        router = RouterBgp(node, 65000, "blue", instantiate=False)
        assert router.route_distinguisher is False
        router.route_distinguisher = "65000:7"
        assert node.transport.config_log == [
            ["nv overlay evpn"],
            ["router bgp 65000", "vrf blue", "rd 65000:7"],
        ]

    def test_destroy_keeps_other_vrfs(self, node):
        """With other vrfs left only this vrf is removed."""
        node.transport.set_output(RUNNING_BGP, BGP_CONFIG + "  vrf red\n")
        RouterBgp(node, 65000, "blue", instantiate=False).destroy()
        assert node.transport.config_log == [["router bgp 65000", "no vrf blue"]]

    def test_destroy_last_vrf(self, router, node):
        """Removing the only vrf disables the feature."""
        router.destroy()
        assert node.transport.config_log == [["no feature bgp"]]
