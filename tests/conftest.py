import pytest

from factories import cluster, edge, network, node, scenario
from paper_network.models import EdgeType


@pytest.fixture
def scenario_network():
    return scenario()


@pytest.fixture
def library():
    """Six papers, an input node, three clusters, mixed edge kinds."""
    return network(
        nodes=[
            node("in", title="My idea", is_input_node=True, similarity=1.0, cluster_id="ml"),
            node(
                "p1",
                authors="Ada Lovelace, Alan Turing",
                publication_date="2019-05-02",
                source="arxiv",
                cluster_id="ml",
                similarity=0.91,
            ),
            node(
                "p2",
                authors="Grace Hopper",
                publication_date="2021-11-30",
                source="core",
                cluster_id="ml",
                similarity=0.42,
            ),
            node(
                "p3",
                authors="Claude Shannon",
                publication_date="not a date",
                source="arxiv",
                cluster_id="info",
                similarity=0.2,
            ),
            node("p4", publication_date="2023-03-14", cluster_id="info"),
            node(
                "p5",
                authors="Edsger Dijkstra",
                source="crossref",
                publication_date="2024-02-29",
                cluster_id="algo",
            ),
        ],
        edges=[
            edge("in", "p1", weight=0.9),
            edge("in", "p2", weight=0.6, edge_type=EdgeType.TOPIC_SIMILARITY),
            edge("p1", "p2", weight=0.7, edge_type=EdgeType.AUTHOR_CONNECTION),
            edge("p2", "p3", weight=0.3, edge_type=EdgeType.CITATION_LINK),
            edge("p3", "p4", weight=0.8, edge_type=EdgeType.KEYWORD),
            edge("p4", "p5", weight=0.4),
        ],
        clusters=[
            cluster("ml", "in", "p1", "p2", color="blue"),
            cluster("info", "p3", "p4", color="green"),
            cluster("algo", "p5", color="red"),
        ],
        similarities={"in": {"p1": 0.91, "p2": 0.42}},
        embeddings={"in": [0.1, 0.2], "p1": [0.3, 0.4]},
    )
