"""Graph operations over `PaperNetwork` values.

This package provides:
- Invariant repair for backend payloads (initial build)
- A query engine for adjacency and cluster membership
- A filter engine composing toggleable criteria
- The expansion merger

Every operation returns a new network; none mutates its input.
"""

from .filters import NetworkFilters, apply_filters
from .integrity import build_network
from .merge import MergeResult, MergeStats, merge_expansion
from .query import GraphQueryEngine, cluster_of, edges_of, find_node, neighbors_of

__all__ = [
    "NetworkFilters",
    "apply_filters",
    "build_network",
    "MergeResult",
    "MergeStats",
    "merge_expansion",
    "GraphQueryEngine",
    "find_node",
    "edges_of",
    "cluster_of",
    "neighbors_of",
]
