"""vPC domain management."""
from .node_util import Node, NodeUtil


class Vpc(NodeUtil):
    """A vPC domain. Only one domain can exist per node."""

    feature = "vpc"

    def __init__(self, node: Node, domain: int, instantiate: bool = True):
        if not isinstance(domain, int) or isinstance(domain, bool):
            raise TypeError(f"vPC domain must be an int, not {type(domain).__name__}")
        super().__init__(node)
        self.domain = domain
        if instantiate:
            self.create()

    @classmethod
    def domains(cls, node: Node) -> dict[int, "Vpc"]:
        """Configured domains keyed by id."""
        domain = node.config_get("vpc", "domain")
        if domain is None:
            return {}
        return {domain: cls(node, domain, instantiate=False)}

    @staticmethod
    def enabled(node: Node) -> bool:
        return node.config_get("vpc", "feature")

    def enable(self) -> None:
        self.config_set("feature", {"state": ""})

    def create(self) -> None:
        if not self.enabled(self.node):
            self.enable()
        self.config_set("domain", {"state": "", "domain": self.domain})

    def destroy(self) -> None:
        """Disable the feature, which removes the domain with it."""
        self.config_set("feature", {"state": "no"})
