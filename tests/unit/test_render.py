from tutormark.markup.clusterer import clusterize
from tutormark.markup.models import Cluster, MarkupNode, NodeKind
from tutormark.markup.parser import parse
from tutormark.markup.render import DEFAULT_TEXT_COLOR, highlight_hex, node_text, nodes_text, wrap_clusters


def text_node(s):
    return MarkupNode(kind=NodeKind.TEXT, content=s)


def test_node_text():
    assert node_text(MarkupNode.fraction("1", "2")) == "1/2"
    assert node_text(MarkupNode.fraction("x + 1", "2")) == "(x + 1)/2"
    assert node_text(MarkupNode(kind=NodeKind.SUPERSCRIPT, content="2")) == "²"
    assert node_text(MarkupNode(kind=NodeKind.SUBSCRIPT, content="10")) == "₁₀"
    assert node_text(MarkupNode(kind=NodeKind.ARROW, content="->")) == " → "
    assert node_text(MarkupNode(kind=NodeKind.IMAGE, content="plot", url="u")) == "[image: plot]"
    assert node_text(MarkupNode(kind=NodeKind.IMAGE, url="u")) == "[image]"


def test_nodes_text():
    assert nodes_text(parse("x^2^ = {1/4}")) == "x² = 1/4"


def test_highlight_hex():
    assert highlight_hex("Blue") == "#3b82f6"
    assert highlight_hex("mauve") == DEFAULT_TEXT_COLOR
    assert highlight_hex(None) == DEFAULT_TEXT_COLOR


def test_wrap_breaks_between_clusters():
    clusters = clusterize(parse("x = {1/2}, y = {3/4}, z = {5/6}"))
    assert wrap_clusters(clusters, 15) == ["x = 1/2, y =", "3/4, z = 5/6"]


def test_wide_cluster_gets_its_own_line():
    clusters = [Cluster(nodes=[text_node("abcdefgh")]), Cluster(nodes=[text_node(" ij")])]
    assert wrap_clusters(clusters, 4) == ["abcdefgh", "ij"]


def test_no_break_after_sticky_cluster():
    clusters = [
        Cluster(nodes=[text_node("aaaa")], can_break_after=False),
        Cluster(nodes=[text_node("bbbb")]),
    ]
    assert wrap_clusters(clusters, 5) == ["aaaabbbb"]


def test_wrap_empty():
    assert wrap_clusters([], 10) == []
