from datetime import date

import pytest

from factories import network, node

from paper_network.graph.filters import NetworkFilters, apply_filters, author_terms, parse_publication_date
from paper_network.models import EdgeType


def ids(net):
    return [n.id for n in net.nodes]


def test_default_filters_keep_everything(library):
    assert apply_filters(library, NetworkFilters()) == library


def test_defaults():
    f = NetworkFilters()
    assert f.similarity_threshold == 0.3
    assert f.date_to == date.today()
    assert f.date_to.year - f.date_from.year == 5
    assert not any(
        [
            f.filter_by_date,
            f.filter_by_clusters,
            f.filter_by_authors,
            f.filter_by_sources,
            f.filter_by_similarity,
            f.filter_by_edge_types,
        ]
    )


def test_scenario_date_range_drops_edge_and_empty_cluster(scenario_network):
    f = NetworkFilters(filter_by_date=True, date_from=date(2022, 1, 1), date_to=date(2024, 1, 1))
    out = f.apply(scenario_network)
    assert ids(out) == ["B"]
    assert out.edges == ()
    assert [c.id for c in out.clusters] == ["C2"]


def test_date_range_is_permissive_for_missing_or_bad_dates(library):
    f = NetworkFilters(filter_by_date=True, date_from=date(2021, 1, 1), date_to=date(2023, 12, 31))
    out = f.apply(library)
    assert ids(out) == ["in", "p2", "p3", "p4"]
    assert {e.id for e in out.edges} == {"in-p2", "p2-p3", "p3-p4"}
    clusters = {c.id: c for c in out.clusters}
    assert set(clusters) == {"ml", "info"}
    assert clusters["ml"].node_ids == ("in", "p2")
    assert clusters["ml"].size == 2


def test_date_bounds_are_inclusive(library):
    day = date(2019, 5, 2)
    out = NetworkFilters(filter_by_date=True, date_from=day, date_to=day).apply(library)
    assert "p1" in ids(out)


def test_cluster_filter_fails_nodes_outside_selection(library):
    out = NetworkFilters(filter_by_clusters=True, selected_clusters={"info"}).apply(library)
    assert ids(out) == ["p3", "p4"]
    assert [c.id for c in out.clusters] == ["info"]


def test_author_filter_matches_any_term_case_insensitively(library):
    out = NetworkFilters(filter_by_authors=True, author_query="turing,  HOPPER ").apply(library)
    assert ids(out) == ["p1", "p2"]


def test_author_filter_fails_nodes_without_authors(library):
    out = NetworkFilters(filter_by_authors=True, author_query="a").apply(library)
    assert "in" not in ids(out)
    assert "p4" not in ids(out)


def test_blank_author_query_keeps_only_papers_with_authors(library):
    out = NetworkFilters(filter_by_authors=True, author_query="  ").apply(library)
    assert ids(out) == ["p1", "p2", "p3", "p5"]


def test_blank_author_term_matches_any_author():
    net = network(nodes=[node("a", authors="Jones"), node("b")])
    out = NetworkFilters(filter_by_authors=True, author_query="smith, ").apply(net)
    assert ids(out) == ["a"]


def test_source_filter(library):
    out = NetworkFilters(filter_by_sources=True, selected_sources={"arxiv"}).apply(library)
    assert ids(out) == ["p1", "p3"]


def test_similarity_threshold_keeps_unscored_nodes(library):
    out = NetworkFilters(filter_by_similarity=True, similarity_threshold=0.5).apply(library)
    assert ids(out) == ["in", "p1", "p4", "p5"]


def test_similarity_threshold_is_inclusive(library):
    out = NetworkFilters(filter_by_similarity=True, similarity_threshold=0.42).apply(library)
    assert "p2" in ids(out)


def test_edge_kind_filter_only_touches_edges(library):
    f = NetworkFilters(
        filter_by_edge_types=True,
        selected_edge_types={EdgeType.CITATION_LINK, EdgeType.KEYWORD},
    )
    out = f.apply(library)
    assert out.nodes == library.nodes
    assert out.clusters == library.clusters
    assert {e.id for e in out.edges} == {"p2-p3", "p3-p4"}


def test_criteria_are_anded(library):
    f = NetworkFilters(
        filter_by_similarity=True,
        similarity_threshold=0.3,
        filter_by_sources=True,
        selected_sources={"arxiv"},
    )
    out = f.apply(library)
    assert ids(out) == ["p1"]
    assert out.edges == ()
    assert [(c.id, c.node_ids) for c in out.clusters] == [("ml", ("p1",))]


@pytest.mark.parametrize(
    "filters",
    [
        NetworkFilters(filter_by_clusters=True),
        NetworkFilters(filter_by_sources=True),
        NetworkFilters(filter_by_edge_types=True),
        NetworkFilters(filter_by_authors=True, author_query=""),
    ],
)
def test_enabled_criterion_with_empty_selection_is_a_no_op(library, filters):
    assert filters.apply(library) == library


def test_disabled_criteria_ignore_their_values(library):
    f = NetworkFilters(selected_clusters={"nope"}, author_query="nobody", selected_sources={"nope"})
    assert f.apply(library) == library


def test_everything_filtered_out_is_a_valid_empty_graph(library):
    out = NetworkFilters(filter_by_clusters=True, selected_clusters={"nope"}).apply(library)
    assert out.nodes == () and out.edges == () and out.clusters == ()
    assert out.input_paper == library.input_paper


def test_similarities_and_embeddings_pass_through(library):
    out = NetworkFilters(filter_by_sources=True, selected_sources={"core"}).apply(library)
    assert out.similarities == library.similarities
    assert out.embeddings == library.embeddings


def test_input_graph_is_untouched(library):
    before = library.model_copy(deep=True)
    NetworkFilters(filter_by_sources=True, selected_sources={"core"}).apply(library)
    assert library == before


def test_filters_parse_from_json():
    f = NetworkFilters.model_validate(
        {
            "filter_by_edge_types": True,
            "selected_edge_types": ["citation_link"],
            "filter_by_date": True,
            "date_from": "2020-01-01",
            "date_to": "2020-12-31",
        }
    )
    assert f.selected_edge_types == frozenset({EdgeType.CITATION_LINK})
    assert f.date_from == date(2020, 1, 1)


def test_parse_publication_date():
    assert parse_publication_date("2024-02-29") == date(2024, 2, 29)
    assert parse_publication_date("2023-02-29") is None
    assert parse_publication_date("12/01/2020") is None
    assert parse_publication_date(None) is None


def test_author_terms_keep_blank_entries():
    assert author_terms(" Ada ,TURING,, ") == ["ada", "turing", "", ""]
    assert author_terms("  ") == [""]
