import json

import pytest
from click.testing import CliRunner

from factories import edge, node, subgraph
from paper_network import __version__
from paper_network.cli import cli


@pytest.fixture
def graph_file(tmp_path, library):
    path = tmp_path / "graph.json"
    path.write_text(library.model_dump_json(), encoding="utf-8")
    return path


def test_version():
    result = CliRunner().invoke(cli, ["version"])
    assert result.exit_code == 0
    assert result.output.strip() == __version__


def test_inspect(graph_file):
    result = CliRunner().invoke(cli, ["inspect", str(graph_file)])
    assert result.exit_code == 0, result.output
    assert "Topic Clusters" in result.output
    assert "Citation Link" in result.output


def test_neighbors(graph_file):
    result = CliRunner().invoke(cli, ["neighbors", str(graph_file), "p2"])
    assert result.exit_code == 0, result.output
    assert "3 connections" in result.output


def test_neighbors_unknown_node(graph_file):
    result = CliRunner().invoke(cli, ["neighbors", str(graph_file), "nope"])
    assert result.exit_code == 1


def test_filter_writes_output(graph_file, tmp_path):
    out = tmp_path / "filtered.json"
    result = CliRunner().invoke(
        cli,
        ["filter", str(graph_file), "--source", "arxiv", "--min-similarity", "0.5", "-o", str(out)],
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert [n["id"] for n in data["nodes"]] == ["p1"]


def test_filter_rejects_bad_date(graph_file):
    result = CliRunner().invoke(cli, ["filter", str(graph_file), "--date-from", "yesterday"])
    assert result.exit_code != 0


def test_merge(graph_file, tmp_path):
    sub_path = tmp_path / "sub.json"
    sub_path.write_text(
        subgraph(nodes=[node("p9")], edges=[edge("p1", "p9")]).model_dump_json(), encoding="utf-8"
    )
    out = tmp_path / "merged.json"
    result = CliRunner().invoke(
        cli, ["merge", str(graph_file), str(sub_path), "--origin", "p1", "-o", str(out)]
    )
    assert result.exit_code == 0, result.output
    data = json.loads(out.read_text())
    assert "p9" in {n["id"] for n in data["nodes"]}
    assert "p1-p9" in {e["id"] for e in data["edges"]}
