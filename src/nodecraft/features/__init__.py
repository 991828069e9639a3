"""Feature utilities built on the command reference."""
from .node_util import Node, NodeUtil
from .bgp import RouterBgp
from .vdc import Vdc
from .vni import Vni
from .vpc import Vpc

__all__ = [
    "Node",
    "NodeUtil",
    "RouterBgp",
    "Vdc",
    "Vni",
    "Vpc",
]
