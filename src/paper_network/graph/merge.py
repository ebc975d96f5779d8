from __future__ import annotations

import logging
from dataclasses import asdict, dataclass

from paper_network.graph.integrity import drop_dangling_edges, first_by_id, restrict_clusters
from paper_network.models import (
    NetworkEdge,
    NetworkNode,
    NetworkSubgraph,
    PaperCluster,
    PaperNetwork,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class MergeStats:
    nodes_added: int = 0
    nodes_updated: int = 0
    edges_added: int = 0
    edges_skipped: int = 0
    edges_dropped: int = 0
    clusters_added: int = 0
    clusters_merged: int = 0
    members_dropped: int = 0
    members_moved: int = 0

    def as_dict(self) -> dict[str, int]:
        return asdict(self)


@dataclass(frozen=True, slots=True)
class MergeResult:
    network: PaperNetwork
    stats: MergeStats


def _merge_nodes(
    current: tuple[NetworkNode, ...], incoming: list[NetworkNode]
) -> tuple[list[NetworkNode], int, int, dict[str, str | None]]:
    merged = {n.id: n for n in current}
    order = [n.id for n in current]
    added = updated = 0
    moved: dict[str, str | None] = {}
    for node in incoming:
        existing = merged.get(node.id)
        if existing is None:
            merged[node.id] = node
            order.append(node.id)
            added += 1
        elif existing.is_input_node:
            # the user's own input is never rewritten by an expansion
            continue
        elif existing != node:
            merged[node.id] = node
            updated += 1
            if node.cluster_id != existing.cluster_id:
                moved[node.id] = node.cluster_id
    return [merged[i] for i in order], added, updated, moved


def _merge_edges(
    current: tuple[NetworkEdge, ...], incoming: list[NetworkEdge]
) -> tuple[list[NetworkEdge], int, int]:
    known = {e.id for e in current}
    fresh: list[NetworkEdge] = []
    skipped = 0
    for edge in incoming:
        if edge.id in known:
            skipped += 1
            continue
        known.add(edge.id)
        fresh.append(edge)
    return [*current, *fresh], len(fresh), skipped


def _merge_clusters(
    current: tuple[PaperCluster, ...], incoming: list[PaperCluster]
) -> tuple[list[PaperCluster], int, int]:
    merged = {c.id: c for c in current}
    order = [c.id for c in current]
    added = unioned = 0
    for cluster in incoming:
        existing = merged.get(cluster.id)
        if existing is None:
            members = tuple(dict.fromkeys(cluster.node_ids))
            if members != cluster.node_ids:
                cluster = cluster.with_members(members)
            merged[cluster.id] = cluster
            order.append(cluster.id)
            added += 1
            continue
        members = tuple(dict.fromkeys((*existing.node_ids, *cluster.node_ids)))
        merged[cluster.id] = existing.with_members(members)
        unioned += 1
    return [merged[i] for i in order], added, unioned


def _single_membership(
    clusters: list[PaperCluster], nodes: list[NetworkNode], moved: dict[str, str | None]
) -> tuple[list[PaperCluster], int]:
    """Leave every node in at most one cluster.

    A node that changed cluster stays only in its new one. Otherwise a node
    listed by several clusters stays in the one its `cluster_id` names, or
    the first that lists it.
    """
    declared = {n.id: n.cluster_id for n in nodes}
    holders: dict[str, list[str]] = {}
    for c in clusters:
        for n in c.node_ids:
            holders.setdefault(n, []).append(c.id)

    home: dict[str, str | None] = {}
    for n, ids in holders.items():
        if n in moved:
            home[n] = moved[n]
        elif len(ids) == 1:
            home[n] = ids[0]
        else:
            home[n] = declared.get(n) if declared.get(n) in ids else ids[0]

    out: list[PaperCluster] = []
    evicted = 0
    for c in clusters:
        members = tuple(n for n in c.node_ids if home[n] == c.id)
        lost = len(c.node_ids) - len(members)
        if lost:
            evicted += lost
            logger.info(f"Cluster {c.id!r}: {lost} member(s) belong to another cluster")
            c = c.with_members(members)
        out.append(c)
    return out, evicted


def _union_nested(
    current: dict[str, dict[str, float]], incoming: dict[str, dict[str, float]]
) -> dict[str, dict[str, float]]:
    out = {k: dict(v) for k, v in current.items()}
    for k, row in incoming.items():
        target = out.setdefault(k, {})
        for other, score in row.items():
            target.setdefault(other, score)
    return out


def merge_expansion(
    current: PaperNetwork, subgraph: NetworkSubgraph, origin_id: str | None = None
) -> MergeResult:
    """Merge a fetched expansion subgraph into `current`, returning a new graph.

    - nodes: deduplicated by id; incoming attributes win unless the existing
      node is the input node
    - edges: deduplicated by id; the existing edge always wins
    - clusters: unioned by id; colliding clusters union their members, and a
      node ends up in at most one cluster (its new one, if it moved)
    - references to nodes absent from the merged graph are dropped

    `current` is never modified.
    """
    nodes, nodes_added, nodes_updated, moved = _merge_nodes(
        current.nodes, first_by_id(subgraph.nodes, "node")
    )
    node_ids = {n.id for n in nodes}

    edges, edges_added, edges_skipped = _merge_edges(
        current.edges, first_by_id(subgraph.edges, "edge")
    )
    edges, edges_dropped = drop_dangling_edges(edges, node_ids)
    edges_added -= edges_dropped

    clusters, clusters_added, clusters_merged = _merge_clusters(
        current.clusters, first_by_id(subgraph.clusters, "cluster")
    )
    clusters, members_moved = _single_membership(clusters, nodes, moved)
    clusters, members_dropped = restrict_clusters(clusters, node_ids)

    embeddings = {k: list(vec) for k, vec in current.embeddings.items()}
    for k, vec in subgraph.embeddings.items():
        embeddings.setdefault(k, list(vec))

    network = current.replace(
        nodes=tuple(nodes),
        edges=tuple(edges),
        clusters=tuple(clusters),
        similarities=_union_nested(current.similarities, subgraph.similarities),
        embeddings=embeddings,
    )
    stats = MergeStats(
        nodes_added=nodes_added,
        nodes_updated=nodes_updated,
        edges_added=edges_added,
        edges_skipped=edges_skipped,
        edges_dropped=edges_dropped,
        clusters_added=clusters_added,
        clusters_merged=clusters_merged,
        members_dropped=members_dropped,
        members_moved=members_moved,
    )
    logger.info(f"Merged expansion from {origin_id or '<unknown>'}: {stats.as_dict()}")
    return MergeResult(network=network, stats=stats)
