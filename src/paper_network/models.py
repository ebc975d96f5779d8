from __future__ import annotations

from collections import Counter
from datetime import datetime, timezone
from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, model_validator

_FROZEN = ConfigDict(frozen=True, extra="ignore")


class InputType(str, Enum):
    TITLE = "title"
    ABSTRACT = "abstract"
    KEYWORDS = "keywords"
    TOPIC = "topic"

    @property
    def display_name(self) -> str:
        return _INPUT_TYPE_NAMES[self]


_INPUT_TYPE_NAMES = {
    InputType.TITLE: "Paper Title",
    InputType.ABSTRACT: "Abstract",
    InputType.KEYWORDS: "Keywords",
    InputType.TOPIC: "Research Topic",
}


class PaperInput(BaseModel):
    """What the user asked the network to be built around."""

    model_config = _FROZEN

    text: str
    input_type: InputType = InputType.TITLE
    timestamp: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))


class EdgeType(str, Enum):
    SEMANTIC = "semantic_similarity"
    AUTHOR_CONNECTION = "author_connection"
    CITATION_LINK = "citation_link"
    TOPIC_SIMILARITY = "topic_similarity"
    KEYWORD = "keyword_match"

    @property
    def display_name(self) -> str:
        return _EDGE_PRESENTATION[self][0]

    @property
    def color(self) -> str:
        return _EDGE_PRESENTATION[self][1]


# Presentation hints only; graph logic never looks at these.
_EDGE_PRESENTATION = {
    EdgeType.SEMANTIC: ("Semantic Similarity", "blue"),
    EdgeType.AUTHOR_CONNECTION: ("Author Connection", "green"),
    EdgeType.CITATION_LINK: ("Citation Link", "orange"),
    EdgeType.TOPIC_SIMILARITY: ("Topic Similarity", "purple"),
    EdgeType.KEYWORD: ("Keyword Match", "red"),
}


class ClusterColor(str, Enum):
    BLUE = "blue"
    RED = "red"
    GREEN = "green"
    ORANGE = "orange"
    PURPLE = "purple"
    PINK = "pink"
    CYAN = "cyan"
    YELLOW = "yellow"


class NodePosition(BaseModel):
    model_config = _FROZEN

    x: float
    y: float


class NetworkNode(BaseModel):
    """A paper (or the user's input) as a graph vertex.

    `position` and `similarity` come pre-computed from the backend and are
    opaque here.
    """

    model_config = _FROZEN

    id: str
    paper_id: int | None = None
    title: str
    abstract: str | None = None
    authors: str | None = None
    publication_date: str | None = None
    source: str | None = None
    cluster_id: str | None = None
    position: NodePosition = Field(default_factory=lambda: NodePosition(x=0.0, y=0.0))
    similarity: float | None = Field(default=None, ge=0.0, le=1.0)
    is_input_node: bool = False


class NetworkEdge(BaseModel):
    """A typed, weighted relationship. Stored ordered, treated as undirected."""

    model_config = _FROZEN

    id: str
    source_id: str
    target_id: str
    weight: float = Field(ge=0.0, le=1.0)
    edge_type: EdgeType = EdgeType.SEMANTIC

    def other_end(self, node_id: str) -> str | None:
        if self.source_id == node_id:
            return self.target_id
        if self.target_id == node_id:
            return self.source_id
        return None


class PaperCluster(BaseModel):
    model_config = _FROZEN

    id: str
    label: str
    description: str | None = None
    node_ids: tuple[str, ...] = ()
    centroid: tuple[float, ...] = ()
    size: int = 0
    color: ClusterColor = ClusterColor.BLUE

    def with_members(self, node_ids: tuple[str, ...]) -> PaperCluster:
        """Copy of this cluster restricted/extended to `node_ids`, size recomputed."""
        return self.model_copy(update={"node_ids": node_ids, "size": len(node_ids)})


class NodeSummary(BaseModel):
    """Compact view of a node sent to the backend when asking for an expansion."""

    model_config = _FROZEN

    id: str
    paper_id: int | None = None
    title: str
    cluster_id: str | None = None

    @classmethod
    def of(cls, node: NetworkNode) -> NodeSummary:
        return cls(id=node.id, paper_id=node.paper_id, title=node.title, cluster_id=node.cluster_id)


class NetworkSubgraph(BaseModel):
    """Loose container for backend payloads.

    No invariants are checked here: this is what arrives over the wire before
    `graph.integrity.build_network` or `graph.merge.merge_expansion` turn it
    into a `PaperNetwork`.
    """

    model_config = _FROZEN

    input_paper: PaperInput | None = None
    nodes: tuple[NetworkNode, ...] = ()
    edges: tuple[NetworkEdge, ...] = ()
    clusters: tuple[PaperCluster, ...] = ()
    similarities: dict[str, dict[str, float]] = Field(default_factory=dict)
    embeddings: dict[str, list[float]] = Field(default_factory=dict)


class PaperNetwork(BaseModel):
    """The paper similarity graph.

    Construction validates every structural invariant, so any instance you
    hold is consistent:

    - node, edge and cluster ids are unique
    - every edge endpoint names a node of this graph
    - every cluster has at least one member and all members are nodes of this graph

    `similarities` and `embeddings` are passed through as received and may
    mention ids that are no longer present (for instance after filtering).
    Treat them as read-only. Every graph derived through `replace` gets its own
    copies, so an edit to one graph never leaks into another.
    """

    model_config = _FROZEN

    input_paper: PaperInput
    nodes: tuple[NetworkNode, ...] = ()
    edges: tuple[NetworkEdge, ...] = ()
    clusters: tuple[PaperCluster, ...] = ()
    similarities: dict[str, dict[str, float]] = Field(default_factory=dict)
    embeddings: dict[str, list[float]] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _check_invariants(self) -> PaperNetwork:
        for kind, items in (("node", self.nodes), ("edge", self.edges), ("cluster", self.clusters)):
            dupes = [i for i, n in Counter(x.id for x in items).items() if n > 1]
            if dupes:
                raise ValueError(f"duplicate {kind} ids: {sorted(dupes)}")

        node_ids = {n.id for n in self.nodes}
        for e in self.edges:
            if e.source_id not in node_ids or e.target_id not in node_ids:
                raise ValueError(f"edge {e.id} references a missing node")
        for c in self.clusters:
            if not c.node_ids:
                raise ValueError(f"cluster {c.id} has no members")
            missing = set(c.node_ids) - node_ids
            if missing:
                raise ValueError(f"cluster {c.id} references missing nodes: {sorted(missing)}")
        return self

    @property
    def node_ids(self) -> frozenset[str]:
        return frozenset(n.id for n in self.nodes)

    @property
    def edge_ids(self) -> frozenset[str]:
        return frozenset(e.id for e in self.edges)

    @property
    def cluster_ids(self) -> frozenset[str]:
        return frozenset(c.id for c in self.clusters)

    @property
    def input_node(self) -> NetworkNode | None:
        return next((n for n in self.nodes if n.is_input_node), None)

    @property
    def available_sources(self) -> list[str]:
        return sorted({n.source for n in self.nodes if n.source})

    def replace(self, **changes: Any) -> PaperNetwork:
        """Build a new, re-validated graph from this one with `changes` applied."""
        data = {
            "input_paper": self.input_paper,
            "nodes": self.nodes,
            "edges": self.edges,
            "clusters": self.clusters,
            "similarities": {k: dict(row) for k, row in self.similarities.items()},
            "embeddings": {k: list(vec) for k, vec in self.embeddings.items()},
        }
        data.update(changes)
        return PaperNetwork(**data)
