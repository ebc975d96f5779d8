"""Filter engine: independent, toggleable criteria composed into one view.

Node criteria are ANDed; sub-conditions inside a criterion (author terms)
are ORed. Missing numeric/date data never excludes a node, missing
categorical data (cluster, source, authors) does.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import date, datetime

from pydantic import BaseModel, ConfigDict, Field

from paper_network.graph.integrity import restrict_clusters
from paper_network.models import EdgeType, NetworkEdge, NetworkNode, PaperNetwork

DATE_FORMAT = "%Y-%m-%d"

NodePredicate = Callable[[NetworkNode], bool]


def _years_ago(years: int) -> date:
    today = date.today()
    try:
        return today.replace(year=today.year - years)
    except ValueError:  # Feb 29
        return today.replace(year=today.year - years, day=28)


def parse_publication_date(value: str | None) -> date | None:
    if not value:
        return None
    try:
        return datetime.strptime(value, DATE_FORMAT).date()
    except ValueError:
        return None


def author_terms(query: str) -> list[str]:
    """Trimmed, lower-cased comma-separated terms. Blank terms are kept and match any author."""
    return [p.strip().lower() for p in query.split(",")]


class NetworkFilters(BaseModel):
    model_config = ConfigDict(frozen=True, extra="ignore")

    filter_by_date: bool = False
    date_from: date = Field(default_factory=lambda: _years_ago(5))
    date_to: date = Field(default_factory=date.today)

    filter_by_clusters: bool = False
    selected_clusters: frozenset[str] = frozenset()

    filter_by_authors: bool = False
    author_query: str = ""

    filter_by_sources: bool = False
    selected_sources: frozenset[str] = frozenset()

    filter_by_similarity: bool = False
    similarity_threshold: float = Field(default=0.3, ge=0.0, le=1.0)

    filter_by_edge_types: bool = False
    selected_edge_types: frozenset[EdgeType] = frozenset()

    def node_predicates(self) -> list[NodePredicate]:
        """The node criteria that actually constrain anything."""
        preds: list[NodePredicate] = []

        if self.filter_by_date:
            lo, hi = self.date_from, self.date_to

            def in_range(node: NetworkNode) -> bool:
                d = parse_publication_date(node.publication_date)
                return d is None or lo <= d <= hi

            preds.append(in_range)

        if self.filter_by_clusters and self.selected_clusters:
            clusters = self.selected_clusters
            preds.append(lambda node: node.cluster_id is not None and node.cluster_id in clusters)

        if self.filter_by_authors and self.author_query:
            terms = author_terms(self.author_query)

            def by_author(node: NetworkNode) -> bool:
                if node.authors is None:
                    return False
                authors = node.authors.lower()
                return any(t in authors for t in terms)

            preds.append(by_author)

        if self.filter_by_sources and self.selected_sources:
            sources = self.selected_sources
            preds.append(lambda node: node.source is not None and node.source in sources)

        if self.filter_by_similarity:
            threshold = self.similarity_threshold
            preds.append(lambda node: node.similarity is None or node.similarity >= threshold)

        return preds

    def edge_kind_allowed(self, edge: NetworkEdge) -> bool:
        if self.filter_by_edge_types and self.selected_edge_types:
            return edge.edge_type in self.selected_edge_types
        return True

    def apply(self, network: PaperNetwork) -> PaperNetwork:
        preds = self.node_predicates()
        nodes = tuple(n for n in network.nodes if all(p(n) for p in preds))
        keep = {n.id for n in nodes}

        # endpoint check is unconditional: it is what keeps the output consistent
        edges = tuple(
            e
            for e in network.edges
            if e.source_id in keep and e.target_id in keep and self.edge_kind_allowed(e)
        )
        clusters, _ = restrict_clusters(network.clusters, keep, quiet=True)

        return network.replace(nodes=nodes, edges=edges, clusters=tuple(clusters))


def apply_filters(network: PaperNetwork, filters: NetworkFilters) -> PaperNetwork:
    return filters.apply(network)
