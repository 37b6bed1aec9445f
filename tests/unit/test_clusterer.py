import pytest

from tutormark.config import get_settings
from tutormark.errors import ClusterInvariantError
from tutormark.markup.clusterer import (
    clusterize,
    clusterize_content,
    is_non_breaking_segment,
    tokenize_math_text,
)
from tutormark.markup.models import MarkupNode, NodeKind, TokenKind
from tutormark.markup.parser import parse
from tutormark.markup.render import cluster_text


def texts(clusters):
    return [cluster_text(c) for c in clusters]


def test_highlight_pulls_in_following_fraction():
    clusters = clusterize(parse("Multiply by [blue:8 ×] {1/8}(x-2)"))
    assert texts(clusters) == ["Multiply by ", "8 × 1/8", "(x-2)"]
    assert [n.kind for n in clusters[1].nodes] == [NodeKind.HIGHLIGHTED, NodeKind.TEXT, NodeKind.FRACTION]


def test_adjacent_highlights_stay_together():
    clusters = clusterize(parse("[red:a][blue:b] rest"))
    assert texts(clusters) == ["ab", " rest"]


def test_fraction_joins_preceding_text_and_short_suffix():
    clusters = clusterize(parse("x = {1/2} m, then"))
    assert len(clusters) == 1
    assert [n.kind for n in clusters[0].nodes] == [NodeKind.TEXT, NodeKind.FRACTION, NodeKind.TEXT]


def test_long_suffix_is_not_absorbed():
    clusters = clusterize(parse("{1/2} of the remaining amount"))
    assert texts(clusters) == ["1/2", " of the remaining amount"]


def test_image_takes_suffix():
    clusters = clusterize(parse("(IMAGE: d](u) here"))
    assert len(clusters) == 1
    assert [n.kind for n in clusters[0].nodes] == [NodeKind.IMAGE, NodeKind.TEXT]


def test_text_breaks_on_punctuation_and_length():
    nodes = [
        MarkupNode(kind=NodeKind.TEXT, content="a, "),
        MarkupNode(kind=NodeKind.ITALIC, content="b"),
        MarkupNode(kind=NodeKind.TEXT, content="x" * 31),
        MarkupNode(kind=NodeKind.TEXT, content="end"),
    ]
    assert texts(clusterize(nodes)) == ["a, ", "b" + "x" * 31, "end"]


def test_every_node_lands_in_exactly_one_cluster():
    nodes = parse("Start [green:{1/3}] and {2/3}, then x_1_ -> ++y++ (IMAGE: d](u).")
    clusters = clusterize(nodes)
    assert [n for c in clusters for n in c.nodes] == nodes
    assert all(c.nodes for c in clusters)
    assert all(c.can_break_after for c in clusters)


def test_empty_input():
    assert clusterize([]) == []


def test_invalid_items(monkeypatch, caplog):
    assert clusterize(["x"]) == []
    assert "expects MarkupNode" in caplog.text

    monkeypatch.setenv("TUTORMARK_STRICT", "true")
    get_settings.cache_clear()
    with pytest.raises(ClusterInvariantError):
        clusterize([MarkupNode(kind=NodeKind.TEXT, content="a"), "b"])


def test_tokenize():
    tokens = tokenize_math_text("v(t) = 3.5t")
    assert [t.value for t in tokens] == ["v", "(", "t", ")", " ", "=", " ", "3.5", "t"]
    assert tokens[0].kind == TokenKind.IDENTIFIER
    assert tokens[5].kind == TokenKind.OPERATOR and tokens[5].sticky
    assert tokens[7].kind == TokenKind.NUMBER


@pytest.mark.parametrize(
    "src,expected",
    [
        ("v(t) = 12t", ["v(t) = 12t"]),
        ("a, b, c", ["a,", " b,", " c"]),
        ("x y", ["x ", "y"]),
        ("(0, 1/2) and", ["(0, 1/2) ", "and"]),
    ],
)
def test_clusterize_content(src, expected):
    assert clusterize_content(src) == expected


def test_clusterize_content_keeps_all_text():
    src = "f(x) = 2x + 1, so f(3) = 7"
    assert "".join(clusterize_content(src)) == src


@pytest.mark.parametrize(
    "src,expected",
    [
        ("f(x)", True),
        ("t = {1/2}", True),
        ("t = 1/2", True),
        ("[blue:x]", True),
        ("(0, 1/2)", True),
        ("hello world", False),
    ],
)
def test_non_breaking_segment(src, expected):
    assert is_non_breaking_segment(src) is expected
