from __future__ import annotations

import re

from .models import ContentBlock
from .text_utils import ensure_text

_LABEL = r"[a-z]\)|\([a-z]\)|\d+\)|\(\d+\)"

_LABEL_RE = re.compile(r"(?:^|(?<=\s))(" + _LABEL + r")(?=\s)", re.IGNORECASE)
# Whitespace in front of a mid-line label becomes a hard break.
_MIDLINE_LABEL_RE = re.compile(r"(?<!\s)\s+(?=(?:" + _LABEL + r")\s)", re.IGNORECASE)
_LEADING_LABEL_RE = re.compile(r"^(" + _LABEL + r")\s*", re.IGNORECASE)


def count_labels(text: str) -> int:
    return len(_LABEL_RE.findall(text))


def segment(text: str) -> list[ContentBlock]:
    """
    Split a (normalized) answer into labeled parts.

    ``"a) 5  b) 7"`` -> ``[ContentBlock(label="a)", content="5"),
    ContentBlock(label="b)", content="7")]``. Text with fewer than two part labels is a
    single unlabeled block.
    """
    text = ensure_text(text, "segment")
    if not text or not text.strip():
        return []

    content = text.replace("\r\n", "\n").strip()
    if count_labels(content) < 2:
        return [ContentBlock(content=content)]

    prepared = _MIDLINE_LABEL_RE.sub("\n", content)

    blocks: list[ContentBlock] = []
    for raw_line in prepared.split("\n"):
        line = raw_line.strip()
        if not line:
            continue
        m = _LEADING_LABEL_RE.match(line)
        if m:
            blocks.append(ContentBlock(label=m.group(1), content=line[m.end():].strip()))
        elif blocks:
            # Continuation of the previous part; blocks are frozen, so rebuild it.
            prev = blocks[-1]
            blocks[-1] = ContentBlock(label=prev.label, content=f"{prev.content} {line}".strip())
        else:
            blocks.append(ContentBlock(content=line))
    return blocks


def is_multi_part(blocks: list[ContentBlock]) -> bool:
    """Render as a labeled list rather than a single paragraph."""
    return len(blocks) > 1 and any(b.label for b in blocks)
