"""Tests for payload coercion, metadata join and coordinate normalization."""

import pytest

from graph_utils import (
    build_pyvis_html,
    join_metadata,
    normalize_coordinates,
    normalize_graph,
    parse_metadata,
    parse_pre_edges,
    positioned_nodes,
)
from graph_builder import build_graph_index
from schemas import Metadata, Node


def _nodes(*coords):
    return [Node(id=f"n{i}", x=x, y=y) for i, (x, y) in enumerate(coords)]


def test_normalize_graph_accepts_product_ids() -> None:
    raw = {"nodes": [{"productId": "p1", "x": 1, "y": 2}, "junk", {"x": 3}], "edges": [{"source": "p1", "target": "p2"}, 7]}
    data = normalize_graph(raw)
    assert [n["id"] for n in data["nodes"]] == ["p1"]
    assert data["edges"] == [{"source": "p1", "target": "p2"}]


def test_normalize_graph_unknown_shape_is_empty() -> None:
    assert normalize_graph(None) == {"nodes": [], "edges": []}
    assert normalize_graph([1, 2, 3]) == {"nodes": [], "edges": []}


def test_positioned_nodes_keeps_zero_coordinates() -> None:
    raw = [
        {"id": "a", "x": 0, "y": 0},
        {"id": "b", "x": None, "y": 4},
        {"id": "c", "y": 1},
        {"id": "d", "x": "not-a-number", "y": 1},
    ]
    kept, dropped = positioned_nodes(raw)
    assert [n.id for n in kept] == ["a"]
    assert dropped == 3


def test_parse_metadata_product_space_shape() -> None:
    raw = {
        "productHs92": [
            {
                "productId": "product-HS92-52",
                "productName": "Cotton",
                "productCode": "52",
                "productSector": {"productId": "product-HS92-1"},
            }
        ]
    }
    [m], bad = parse_metadata(raw)
    assert bad == 0
    assert m == Metadata(id="product-HS92-52", name="Cotton", code="52", category_id="product-HS92-1")


def test_parse_metadata_generic_list() -> None:
    [m], _ = parse_metadata([{"id": "a", "name": "Alpha", "code": "A", "categoryId": "s1"}])
    assert (m.name, m.code, m.category_id) == ("Alpha", "A", "s1")


def test_parse_metadata_skips_invalid_records() -> None:
    raw = {
        "productHs92": [
            {"productId": "p1", "productName": "Cotton", "productCode": 101},
            {"productId": "p2", "productName": "Coffee", "productCode": "0901"},
            "junk",
            {"productName": "no id"},
        ]
    }
    metadata, bad = parse_metadata(raw)
    assert [m.id for m in metadata] == ["p2"]
    assert bad == 3


def test_join_metadata_leaves_unmatched_nodes_empty() -> None:
    nodes = [Node(id="a", x=1, y=1), Node(id="b", x=2, y=2)]
    joined = join_metadata(nodes, [Metadata(id="a", name="Alpha", code="A", category_id="s1")])
    assert joined[0].name == "Alpha"
    assert joined[0].category_id == "s1"
    assert joined[1].name is None and joined[1].code is None and joined[1].category_id is None
    # originais intactos
    assert nodes[0].name is None


def test_positioned_nodes_drops_non_finite_coordinates() -> None:
    raw = [
        {"id": "a", "x": float("nan"), "y": 1},
        {"id": "b", "x": 1, "y": float("inf")},
        {"id": "c", "x": float("-inf"), "y": 0},
        {"id": "d", "x": 2, "y": 3},
    ]
    kept, dropped = positioned_nodes(raw)
    assert [n.id for n in kept] == ["d"]
    assert dropped == 3
    for n in normalize_coordinates(kept):
        assert 20 <= n.x <= 1180 and 20 <= n.y <= 780


def test_parse_pre_edges_tags_endpoints() -> None:
    pre, bad = parse_pre_edges([
        {"source": "a", "target": {"id": "b", "x": 1, "y": 2}},
        {"source": None, "target": "a"},
        {"source": ["x"], "target": "a"},
    ])
    assert bad == 2
    assert pre[0].source.kind == "id"
    assert pre[0].target.kind == "inline"
    assert pre[0].target.node_id == "b"


def test_normalize_bounds_and_extremes() -> None:
    nodes = _nodes((-5, 3), (0, 10), (15, -7), (2.5, 0))
    out = normalize_coordinates(nodes, width=1200, height=800, padding=20)
    for n in out:
        assert 20 <= n.x <= 1180
        assert 20 <= n.y <= 780
    assert out[0].x == pytest.approx(20)
    assert out[2].x == pytest.approx(1180)
    assert out[2].y == pytest.approx(20)
    assert out[1].y == pytest.approx(780)


def test_normalize_degenerate_axis_uses_midpoint() -> None:
    out = normalize_coordinates(_nodes((0, 0), (10, 0)), width=1200, height=800, padding=20)
    assert [n.x for n in out] == [20, 1180]
    assert [n.y for n in out] == [400, 400]


def test_normalize_single_node_and_empty() -> None:
    [only] = normalize_coordinates(_nodes((7, 7)))
    assert (only.x, only.y) == (600, 400)
    assert normalize_coordinates([]) == []


def test_normalize_does_not_mutate_input() -> None:
    nodes = _nodes((0, 0), (10, 10))
    normalize_coordinates(nodes)
    assert (nodes[1].x, nodes[1].y) == (10, 10)


def test_pyvis_html_marks_highlighted_items() -> None:
    nodes = normalize_coordinates([Node(id="A", x=0, y=0), Node(id="B", x=10, y=0), Node(id="C", x=5, y=5)])
    pre, _ = parse_pre_edges([{"source": "A", "target": "B"}])
    index = build_graph_index(nodes, pre)
    html = build_pyvis_html(index.nodes, index.edges, highlight=index.highlight("A"))
    assert "<html" in html.lower()
    assert "#CCCCCC" in html
    assert "#ef4444" in html


def test_pyvis_html_without_highlight() -> None:
    nodes = [Node(id="A", x=20, y=400)]
    html = build_pyvis_html(nodes, [], highlight=None, theme="dark")
    assert "#ef4444" not in html
