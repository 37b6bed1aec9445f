from __future__ import annotations

from typing import Iterable, Sequence

from .models import PALETTE, Cluster, MarkupNode, NodeKind

DEFAULT_TEXT_COLOR = "#1f2937"

SUPERSCRIPT_MAP: dict[str, str] = {
    "0": "⁰", "1": "¹", "2": "²", "3": "³", "4": "⁴",
    "5": "⁵", "6": "⁶", "7": "⁷", "8": "⁸", "9": "⁹",
    "+": "⁺", "-": "⁻", "=": "⁼", "(": "⁽", ")": "⁾",
}

SUBSCRIPT_MAP: dict[str, str] = {
    "0": "₀", "1": "₁", "2": "₂", "3": "₃", "4": "₄",
    "5": "₅", "6": "₆", "7": "₇", "8": "₈", "9": "₉",
    "+": "₊", "-": "₋", "=": "₌", "(": "₍", ")": "₎",
}


def highlight_hex(color: str | None) -> str:
    return PALETTE.get((color or "").strip().lower(), DEFAULT_TEXT_COLOR)


def _map_chars(s: str, table: dict[str, str]) -> str:
    return "".join(table.get(ch, ch) for ch in s)


def _fraction_side(side: str | None) -> str:
    side = side or ""
    if len(side) > 1 and any(c in side for c in "+- "):
        return f"({side})"
    return side


def node_text(node: MarkupNode) -> str:
    """Plain-text stand-in for one node (what a terminal can show)."""
    if node.kind == NodeKind.FRACTION:
        return f"{_fraction_side(node.numerator)}/{_fraction_side(node.denominator)}"
    if node.kind == NodeKind.ARROW:
        return " → "
    if node.kind == NodeKind.SUPERSCRIPT:
        return _map_chars(node.content, SUPERSCRIPT_MAP)
    if node.kind == NodeKind.SUBSCRIPT:
        return _map_chars(node.content, SUBSCRIPT_MAP)
    if node.kind == NodeKind.IMAGE:
        return f"[image: {node.content}]" if node.content else "[image]"
    return node.content


def nodes_text(nodes: Iterable[MarkupNode]) -> str:
    return "".join(node_text(n) for n in nodes)


def cluster_text(cluster: Cluster) -> str:
    return nodes_text(cluster.nodes)


def wrap_clusters(clusters: Sequence[Cluster], width: int = 80) -> list[str]:
    """
    Greedy line filling that only breaks between clusters.

    A cluster wider than ``width`` gets a line of its own instead of being split.
    """
    lines: list[str] = []
    line = ""
    may_break = True
    for cluster in clusters:
        piece = cluster_text(cluster)
        if may_break and line and len(line) + len(piece.rstrip()) > width:
            lines.append(line.rstrip())
            piece = piece.lstrip()
            line = ""
        line += piece
        may_break = cluster.can_break_after
    if line.strip():
        lines.append(line.rstrip())
    return lines
