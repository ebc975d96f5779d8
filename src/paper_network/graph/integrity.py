"""Repair of backend payloads into invariant-consistent graphs.

The backend is trusted for content (scores, layout, labels) but not for
structure: a partial graph is still useful, so dangling references are
dropped with a warning instead of failing the whole response.
"""

from __future__ import annotations

import logging
from collections.abc import Collection, Iterable
from typing import Any, Protocol, TypeVar

from pydantic import ValidationError

from paper_network.errors import DecodingError
from paper_network.models import NetworkEdge, NetworkSubgraph, PaperCluster, PaperNetwork

logger = logging.getLogger(__name__)

class _HasId(Protocol):
    id: str


T = TypeVar("T", bound=_HasId)


def first_by_id(items: Iterable[T], kind: str) -> list[T]:
    seen: set[str] = set()
    out: list[T] = []
    for item in items:
        if item.id in seen:
            logger.warning(f"Duplicate {kind} id {item.id!r} in backend payload; keeping first")
            continue
        seen.add(item.id)
        out.append(item)
    return out


def drop_dangling_edges(
    edges: Iterable[NetworkEdge], node_ids: Collection[str]
) -> tuple[list[NetworkEdge], int]:
    kept: list[NetworkEdge] = []
    dropped = 0
    for e in edges:
        if e.source_id in node_ids and e.target_id in node_ids:
            kept.append(e)
            continue
        dropped += 1
        logger.warning(
            f"Dropping edge {e.id!r}: endpoint missing ({e.source_id!r} -> {e.target_id!r})"
        )
    return kept, dropped


def restrict_clusters(
    clusters: Iterable[PaperCluster], node_ids: Collection[str], *, quiet: bool = False
) -> tuple[list[PaperCluster], int]:
    """Restrict cluster members to `node_ids`; drop clusters left empty.

    Returns the surviving clusters and the number of members removed. With
    `quiet` the removals are expected (filtering) and not logged.
    """
    kept: list[PaperCluster] = []
    removed = 0
    for c in clusters:
        members = tuple(n for n in c.node_ids if n in node_ids)
        lost = len(c.node_ids) - len(members)
        removed += lost
        if lost and not quiet:
            logger.warning(f"Cluster {c.id!r}: dropping {lost} member(s) not in graph")
        if not members:
            if not quiet:
                logger.warning(f"Dropping cluster {c.id!r}: no remaining members")
            continue
        kept.append(c if not lost else c.with_members(members))
    return kept, removed


def build_network(payload: dict[str, Any] | NetworkSubgraph) -> PaperNetwork:
    """Turn an initial-graph response into a valid `PaperNetwork`."""
    if isinstance(payload, NetworkSubgraph):
        raw = payload
    else:
        try:
            raw = NetworkSubgraph.model_validate(payload)
        except ValidationError as e:
            raise DecodingError(f"Malformed network payload: {e}") from e

    if raw.input_paper is None:
        raise DecodingError("Malformed network payload: missing input_paper")

    nodes = first_by_id(raw.nodes, "node")
    node_ids = {n.id for n in nodes}
    edges, _ = drop_dangling_edges(first_by_id(raw.edges, "edge"), node_ids)
    clusters, _ = restrict_clusters(first_by_id(raw.clusters, "cluster"), node_ids)

    return PaperNetwork(
        input_paper=raw.input_paper,
        nodes=tuple(nodes),
        edges=tuple(edges),
        clusters=tuple(clusters),
        similarities=raw.similarities,
        embeddings=raw.embeddings,
    )
