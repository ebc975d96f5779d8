"""
Paper Network CLI - inspect, filter and grow network JSON files
"""

from __future__ import annotations

import asyncio
import json
import logging
from collections import Counter
from datetime import datetime
from pathlib import Path

import click
from rich.console import Console
from rich.panel import Panel
from rich.table import Table

from paper_network.backend import HttpSimilarityBackend
from paper_network.graph import GraphQueryEngine, NetworkFilters, build_network, merge_expansion
from paper_network.models import EdgeType, NetworkSubgraph, PaperNetwork
from paper_network.session import NetworkSession
from paper_network.settings import settings

console = Console()


def _configure_logging() -> None:
    level = (settings.log_level or "INFO").upper()
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")


def _load_network(path: str) -> PaperNetwork:
    return build_network(json.loads(Path(path).read_text(encoding="utf-8")))


def _write_network(network: PaperNetwork, output: str | None) -> None:
    if output is None:
        _print_summary(network)
        return
    Path(output).write_text(network.model_dump_json(indent=2), encoding="utf-8")
    console.print(f"[green]Saved[/green] {len(network.nodes)} nodes to {output}")


def _print_summary(network: PaperNetwork) -> None:
    input_node = network.input_node
    console.print(
        Panel(
            f"[bold]{network.input_paper.text}[/bold]\n"
            f"Input type: {network.input_paper.input_type.display_name}\n"
            f"Input node: {input_node.id if input_node else '-'}\n"
            f"Nodes: {len(network.nodes)}  Edges: {len(network.edges)}  "
            f"Clusters: {len(network.clusters)}",
            title="Paper Network",
        )
    )


def _parse_date(_ctx, _param, value):
    if value is None:
        return None
    try:
        return datetime.strptime(value, "%Y-%m-%d").date()
    except ValueError:
        raise click.BadParameter("expected YYYY-MM-DD")


@click.group()
def cli():
    """Paper Network - explore paper similarity graphs"""
    _configure_logging()


@cli.command()
def version():
    """Print the package version"""
    from paper_network import __version__

    click.echo(__version__)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
def inspect(path):
    """Summarize a network file"""
    network = _load_network(path)
    _print_summary(network)

    table = Table(title="Topic Clusters")
    table.add_column("Cluster", style="cyan")
    table.add_column("Label", style="white")
    table.add_column("Color", style="magenta")
    table.add_column("Size", justify="right", style="green")
    for c in network.clusters:
        table.add_row(c.id, c.label, c.color.value, str(c.size))
    console.print(table)

    kinds = Counter(e.edge_type for e in network.edges)
    table = Table(title="Connection Types")
    table.add_column("Type", style="cyan")
    table.add_column("Edges", justify="right", style="green")
    for kind in EdgeType:
        table.add_row(kind.display_name, str(kinds.get(kind, 0)))
    console.print(table)

    if network.available_sources:
        console.print(f"Sources: {', '.join(network.available_sources)}")


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("node_id")
def neighbors(path, node_id):
    """List the papers connected to NODE_ID"""
    q = GraphQueryEngine(_load_network(path))
    node = q.find_node(node_id)
    if node is None:
        console.print(f"[red]Unknown node {node_id}[/red]")
        raise SystemExit(1)

    cluster = q.cluster_of(node_id)
    console.print(
        Panel(
            f"[bold]{node.title}[/bold]\n"
            f"Authors: {node.authors or '-'}\n"
            f"Cluster: {cluster.label if cluster else '-'}",
            title=node.id,
        )
    )

    weights = {}
    for e in q.edges_of(node_id):
        other = e.other_end(node_id)
        weights[other] = max(weights.get(other, 0.0), e.weight)

    table = Table(title=f"{len(weights)} connections")
    table.add_column("Node", style="cyan")
    table.add_column("Title", style="white", overflow="fold")
    table.add_column("Weight", justify="right", style="green")
    for n in q.neighbors_of(node_id):
        table.add_row(n.id, n.title, f"{weights.get(n.id, 0.0):.2f}")
    console.print(table)


@cli.command(name="filter")
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.option("--date-from", callback=_parse_date, help="Earliest publication date (YYYY-MM-DD)")
@click.option("--date-to", callback=_parse_date, help="Latest publication date (YYYY-MM-DD)")
@click.option("--cluster", "clusters", multiple=True, help="Keep only these clusters")
@click.option("--authors", default=None, help="Comma-separated author names")
@click.option("--source", "sources", multiple=True, help="Keep only these sources")
@click.option("--min-similarity", type=click.FloatRange(0.0, 1.0), default=None)
@click.option(
    "--edge-type",
    "edge_types",
    multiple=True,
    type=click.Choice([t.value for t in EdgeType]),
    help="Keep only these connection types",
)
@click.option("-o", "--output", default=None, help="Write the filtered network here")
def filter_cmd(path, date_from, date_to, clusters, authors, sources, min_similarity, edge_types, output):
    """Apply filters to a network file"""
    network = _load_network(path)
    defaults = NetworkFilters()
    filters = NetworkFilters(
        filter_by_date=bool(date_from or date_to),
        date_from=date_from or defaults.date_from,
        date_to=date_to or defaults.date_to,
        filter_by_clusters=bool(clusters),
        selected_clusters=frozenset(clusters),
        filter_by_authors=authors is not None,
        author_query=authors or "",
        filter_by_sources=bool(sources),
        selected_sources=frozenset(sources),
        filter_by_similarity=min_similarity is not None,
        similarity_threshold=min_similarity if min_similarity is not None else defaults.similarity_threshold,
        filter_by_edge_types=bool(edge_types),
        selected_edge_types=frozenset(EdgeType(t) for t in edge_types),
    )
    _write_network(filters.apply(network), output)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("subgraph_path", type=click.Path(exists=True, dir_okay=False))
@click.option("--origin", default=None, help="Node the subgraph was expanded from")
@click.option("-o", "--output", default=None, help="Write the merged network here")
def merge(path, subgraph_path, origin, output):
    """Merge an expansion subgraph file into a network file"""
    network = _load_network(path)
    subgraph = NetworkSubgraph.model_validate_json(Path(subgraph_path).read_text(encoding="utf-8"))
    result = merge_expansion(network, subgraph, origin_id=origin)
    console.print(result.stats.as_dict())
    _write_network(result.network, output)


@cli.command()
@click.argument("path", type=click.Path(exists=True, dir_okay=False))
@click.argument("node_id")
@click.option("--backend-url", default=None, help="Similarity backend base URL")
@click.option("--limit", default=None, type=int, help="Max papers to fetch")
@click.option("-o", "--output", default=None, help="Write the expanded network here")
def expand(path, node_id, backend_url, limit, output):
    """Ask the similarity backend to expand the network around NODE_ID"""

    async def _run():
        backend = HttpSimilarityBackend(base_url=backend_url)
        try:
            async with NetworkSession(
                backend, network=_load_network(path), expansion_limit=limit
            ) as session:
                return await session.request_expansion(node_id)
        finally:
            await backend.aclose()

    outcome = asyncio.run(_run())
    if not outcome.ok:
        console.print(f"[red]Expansion {outcome.status.value}: {outcome.error or ''}[/red]")
        raise SystemExit(1)
    console.print(outcome.stats.as_dict())
    _write_network(outcome.network, output)


def main():
    cli()


if __name__ == "__main__":
    main()
