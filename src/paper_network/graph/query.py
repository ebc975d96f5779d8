from __future__ import annotations

from dataclasses import dataclass, field

from paper_network.models import NetworkEdge, NetworkNode, PaperCluster, PaperNetwork


@dataclass(slots=True)
class GraphQueryEngine:
    """Read-only adjacency and membership lookups over one `PaperNetwork`.

    Indexes are built once at construction. The network is immutable, so an
    engine never goes stale; build a new one for each new network. Safe to
    share between concurrent readers.
    """

    network: PaperNetwork
    _nodes: dict[str, NetworkNode] = field(init=False, repr=False)
    _edges_by_node: dict[str, list[NetworkEdge]] = field(init=False, repr=False)
    _cluster_by_node: dict[str, PaperCluster] = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self._nodes = {n.id: n for n in self.network.nodes}

        self._edges_by_node = {}
        for e in self.network.edges:
            self._edges_by_node.setdefault(e.source_id, []).append(e)
            if e.target_id != e.source_id:
                self._edges_by_node.setdefault(e.target_id, []).append(e)

        self._cluster_by_node = {}
        for c in self.network.clusters:
            for node_id in c.node_ids:
                # first cluster wins, like a linear scan would
                self._cluster_by_node.setdefault(node_id, c)

    def find_node(self, node_id: str) -> NetworkNode | None:
        return self._nodes.get(node_id)

    def edges_of(self, node_id: str) -> list[NetworkEdge]:
        return list(self._edges_by_node.get(node_id, ()))

    def cluster_of(self, node_id: str) -> PaperCluster | None:
        return self._cluster_by_node.get(node_id)

    def neighbors_of(self, node_id: str) -> list[NetworkNode]:
        """Distinct nodes sharing an edge with `node_id`, in edge order."""
        seen: set[str] = {node_id}
        out: list[NetworkNode] = []
        for e in self._edges_by_node.get(node_id, ()):
            other = e.other_end(node_id)
            if other is None or other in seen:
                continue
            node = self._nodes.get(other)
            if node is None:
                continue
            seen.add(other)
            out.append(node)
        return out

    def members_of(self, cluster_id: str) -> list[NetworkNode]:
        for c in self.network.clusters:
            if c.id == cluster_id:
                return [self._nodes[n] for n in c.node_ids if n in self._nodes]
        return []


def find_node(network: PaperNetwork, node_id: str) -> NetworkNode | None:
    return GraphQueryEngine(network).find_node(node_id)


def edges_of(network: PaperNetwork, node_id: str) -> list[NetworkEdge]:
    return GraphQueryEngine(network).edges_of(node_id)


def cluster_of(network: PaperNetwork, node_id: str) -> PaperCluster | None:
    return GraphQueryEngine(network).cluster_of(node_id)


def neighbors_of(network: PaperNetwork, node_id: str) -> list[NetworkNode]:
    return GraphQueryEngine(network).neighbors_of(node_id)
