from __future__ import annotations

from typing import Optional

from ..config import get_settings
from .models import PALETTE, MarkupNode, NodeKind
from .text_utils import (
    ensure_text,
    image_ends,
    matching_pairs,
    next_positions,
    split_fraction,
    split_image,
)

HANDWRITTEN_TAG = "handwritten"

_PAIRED_MARKERS = {
    "_": NodeKind.SUBSCRIPT,
    "^": NodeKind.SUPERSCRIPT,
}


def _tag_pairs(content: str, images: dict[int, int]) -> dict[int, int]:
    """``[`` -> matching ``]``; image tags inside count as opaque."""
    pairs: dict[int, int] = {}
    stack: list[int] = []
    j = 0
    while j < len(content):
        if j in images:
            j = images[j] + 1
            continue
        ch = content[j]
        if ch == "[":
            stack.append(j)
        elif ch == "]" and stack:
            pairs[stack.pop()] = j
        j += 1
    return pairs


class _Marks:
    """Bracket and image positions of one scanned string, found once up front."""

    def __init__(self, content: str) -> None:
        self.images = image_ends(content)
        self.tags = _tag_pairs(content, self.images)
        self.braces = matching_pairs(content, "{", "}")
        self.next_open = next_positions(content, "{")
        self.next_close = next_positions(content, "}")

    def brace_end(self, start: int) -> int:
        first = self.next_close[start + 1]
        if first < 0:
            return -1
        if 0 <= self.next_open[start + 1] < first:
            nested = self.braces.get(start, -1)
            if nested > 0:
                return nested
        return first

    def tag_end(self, start: int) -> int:
        return self.tags.get(start, -1)


def _split_tag(content: str, start: int, end: int) -> Optional[tuple[str, str]]:
    colon = content.find(":", start + 1, end)
    if colon < 0:
        return None
    name = content[start + 1:colon].strip().lower()
    if name != HANDWRITTEN_TAG and name not in PALETTE:
        return None
    return name, content[colon + 1:end].strip()


class _Scanner:
    """One parse call: recursion limit plus the two scanning modes."""

    def __init__(self, max_depth: int) -> None:
        self.max_depth = max_depth

    def braces(
        self,
        inner: str,
        *,
        color: Optional[str],
        handwritten: bool,
        depth: int,
    ) -> list[MarkupNode]:
        frac = split_fraction(inner)
        if frac:
            return [MarkupNode.fraction(frac[0], frac[1], color=color, is_handwritten=handwritten)]
        # Not a fraction: the braces only group what is inside them.
        if color:
            return self.highlighted(inner, color=color, handwritten=handwritten, depth=depth + 1)
        return self.plain(inner, handwritten=handwritten, depth=depth + 1)

    def plain(self, content: str, *, handwritten: bool, depth: int) -> list[MarkupNode]:
        marks = _Marks(content)
        nodes: list[MarkupNode] = []
        buf: list[str] = []

        def flush() -> None:
            if buf:
                nodes.append(MarkupNode(kind=NodeKind.TEXT, content="".join(buf), is_handwritten=handwritten))
                buf.clear()

        i = 0
        n = len(content)
        while i < n:
            ch = content[i]

            if ch == "{":
                end = marks.brace_end(i)
                if end > i and content[i + 1:end].strip():
                    if depth >= self.max_depth:
                        buf.append(content[i:end + 1])
                    else:
                        flush()
                        nodes.extend(self.braces(content[i + 1:end], color=None, handwritten=handwritten, depth=depth))
                    i = end + 1
                    continue

            elif ch == "[":
                end = marks.tag_end(i)
                tag = _split_tag(content, i, end) if end > i else None
                if tag:
                    name, body = tag
                    if depth >= self.max_depth:
                        buf.append(content[i:end + 1])
                    elif name == HANDWRITTEN_TAG:
                        flush()
                        nodes.extend(self.plain(body, handwritten=True, depth=depth + 1))
                    else:
                        flush()
                        nodes.extend(self.highlighted(body, color=name, handwritten=handwritten, depth=depth + 1))
                    i = end + 1
                    continue

            elif content.startswith(("->", "=>"), i):
                flush()
                nodes.append(MarkupNode(kind=NodeKind.ARROW, content=content[i:i + 2], is_handwritten=handwritten))
                i += 2
                continue

            elif i in marks.images:
                end = marks.images[i]
                if end > i:
                    flush()
                    nodes.append(self._image(content, i, end, handwritten))
                    i = end + 1
                    continue

            elif ch in _PAIRED_MARKERS:
                end = content.find(ch, i + 1)
                if end > i + 1:
                    flush()
                    nodes.append(
                        MarkupNode(kind=_PAIRED_MARKERS[ch], content=content[i + 1:end], is_handwritten=handwritten)
                    )
                    i = end + 1
                    continue

            elif content.startswith("++", i):
                end = content.find("++", i + 2)
                if end > i + 2:
                    flush()
                    nodes.append(MarkupNode(kind=NodeKind.ITALIC, content=content[i + 2:end], is_handwritten=handwritten))
                    i = end + 2
                    continue

            buf.append(ch)
            i += 1

        flush()
        return nodes

    def highlighted(self, content: str, *, color: str, handwritten: bool, depth: int) -> list[MarkupNode]:
        """Body of a color tag: fractions keep the color, everything else is colored text."""
        marks = _Marks(content)
        nodes: list[MarkupNode] = []
        buf: list[str] = []

        def flush() -> None:
            if buf:
                nodes.append(
                    MarkupNode(
                        kind=NodeKind.HIGHLIGHTED,
                        content="".join(buf),
                        color=color,
                        is_handwritten=handwritten,
                    )
                )
                buf.clear()

        i = 0
        n = len(content)
        while i < n:
            ch = content[i]

            if ch == "{":
                end = marks.brace_end(i)
                if end > i and content[i + 1:end].strip():
                    if depth >= self.max_depth:
                        buf.append(content[i:end + 1])
                    else:
                        flush()
                        nodes.extend(self.braces(content[i + 1:end], color=color, handwritten=handwritten, depth=depth))
                    i = end + 1
                    continue

            elif ch == "[":
                end = marks.tag_end(i)
                tag = _split_tag(content, i, end) if end > i else None
                if tag:
                    name, body = tag
                    if depth >= self.max_depth:
                        buf.append(content[i:end + 1])
                    else:
                        flush()
                        if name == HANDWRITTEN_TAG:
                            nodes.extend(self.highlighted(body, color=color, handwritten=True, depth=depth + 1))
                        else:
                            nodes.extend(self.highlighted(body, color=name, handwritten=handwritten, depth=depth + 1))
                    i = end + 1
                    continue

            elif i in marks.images:
                end = marks.images[i]
                if end > i:
                    flush()
                    nodes.append(self._image(content, i, end, handwritten))
                    i = end + 1
                    continue

            buf.append(ch)
            i += 1

        flush()
        return nodes

    @staticmethod
    def _image(content: str, start: int, end: int, handwritten: bool) -> MarkupNode:
        desc, url = split_image(content, start, end)
        return MarkupNode(kind=NodeKind.IMAGE, content=desc, url=url, is_handwritten=handwritten)


def parse(block_text: str, *, max_depth: Optional[int] = None) -> list[MarkupNode]:
    """
    Parse one block of tutoring markup into a flat list of nodes.

    Recognized constructs: ``{a/b}``, ``[color:...]``, ``[handwritten:...]``, ``->``/``=>``,
    ``(IMAGE: desc](url)``, ``_sub_``, ``^sup^`` and ``++italic++``. Anything malformed or
    unterminated is kept as literal text.
    """
    text = ensure_text(block_text, "parse")
    if not text:
        return []
    limit = max_depth if max_depth is not None else get_settings().max_depth
    return _Scanner(limit).plain(text, handwritten=False, depth=0)
