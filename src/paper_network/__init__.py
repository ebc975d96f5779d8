"""Paper similarity network subsystem.

This package provides:
- The graph model (papers, typed relationships, topic clusters)
- Read-only queries, a composable filter engine and an expansion merger
- A session type that owns the current graph and serializes expansions
- An HTTP client for the similarity backend that produces the graphs
"""

from .graph import GraphQueryEngine, NetworkFilters, build_network, merge_expansion
from .models import (
    ClusterColor,
    EdgeType,
    InputType,
    NetworkEdge,
    NetworkNode,
    NetworkSubgraph,
    NodePosition,
    PaperCluster,
    PaperInput,
    PaperNetwork,
)
from .session import ExpansionOutcome, ExpansionStatus, NetworkSession

__version__ = "0.1.0"

__all__ = [
    "ClusterColor",
    "EdgeType",
    "InputType",
    "NetworkEdge",
    "NetworkNode",
    "NetworkSubgraph",
    "NodePosition",
    "PaperCluster",
    "PaperInput",
    "PaperNetwork",
    "GraphQueryEngine",
    "NetworkFilters",
    "build_network",
    "merge_expansion",
    "ExpansionOutcome",
    "ExpansionStatus",
    "NetworkSession",
]
