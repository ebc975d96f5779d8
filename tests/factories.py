"""Small builders for graph values used across the test suite."""

from __future__ import annotations

from paper_network.models import (
    EdgeType,
    NetworkEdge,
    NetworkNode,
    NetworkSubgraph,
    PaperCluster,
    PaperInput,
    PaperNetwork,
)

INPUT = PaperInput(text="graph neural networks for citation analysis", input_type="topic")


def node(node_id: str, **kw) -> NetworkNode:
    kw.setdefault("title", f"Paper {node_id}")
    return NetworkNode(id=node_id, **kw)


def edge(source: str, target: str, edge_id: str | None = None, **kw) -> NetworkEdge:
    kw.setdefault("weight", 0.5)
    return NetworkEdge(id=edge_id or f"{source}-{target}", source_id=source, target_id=target, **kw)


def cluster(cluster_id: str, *members: str, **kw) -> PaperCluster:
    kw.setdefault("label", f"Topic {cluster_id}")
    kw.setdefault("size", len(members))
    return PaperCluster(id=cluster_id, node_ids=members, **kw)


def network(nodes=(), edges=(), clusters=(), **kw) -> PaperNetwork:
    return PaperNetwork(
        input_paper=INPUT, nodes=tuple(nodes), edges=tuple(edges), clusters=tuple(clusters), **kw
    )


def subgraph(nodes=(), edges=(), clusters=(), **kw) -> NetworkSubgraph:
    return NetworkSubgraph(nodes=tuple(nodes), edges=tuple(edges), clusters=tuple(clusters), **kw)


def scenario() -> PaperNetwork:
    """A(2020, C1) -- B(2023, C2), one semantic edge."""
    return network(
        nodes=[
            node("A", publication_date="2020-01-01", cluster_id="C1"),
            node("B", publication_date="2023-01-01", cluster_id="C2"),
        ],
        edges=[edge("A", "B", edge_type=EdgeType.SEMANTIC)],
        clusters=[cluster("C1", "A"), cluster("C2", "B")],
    )


class FakeBackend:
    """In-memory stand-in for the similarity backend.

    Set `gate` to an `asyncio.Event` to hold expansion fetches open until the
    test releases them.
    """

    def __init__(self, network=None, subgraph=None, error=None):
        self.network = network
        self.subgraph = subgraph
        self.error = error
        self.gate = None
        self.calls = []

    async def fetch_initial_graph(self, paper_input):
        if self.error is not None:
            raise self.error
        return self.network

    async def fetch_expansion_subgraph(self, origin_id, node_summaries, limit):
        self.calls.append((origin_id, [s.id for s in node_summaries], limit))
        if self.gate is not None:
            await self.gate.wait()
        if self.error is not None:
            raise self.error
        return self.subgraph
