from __future__ import annotations

import logging
import re
from typing import Optional, Sequence

from ..config import get_settings
from ..errors import ClusterInvariantError
from .models import Cluster, MarkupNode, MathToken, NodeKind, TokenCluster, TokenKind

logger = logging.getLogger(__name__)

# Short text allowed to trail a fraction or image in the same cluster.
_SUFFIX_RE = re.compile(r"^[-–—a-z\s)\]},;:]", re.IGNORECASE)
_MAX_SUFFIX_LEN = 10
_LONG_TEXT_LEN = 30

_STICKY_OPERATORS = "=+-×÷→≤≥±"
_DELIMITERS = "()[]{},.;:"

NON_BREAKING_PATTERNS: list[re.Pattern] = [
    re.compile(r"\b[a-zA-Z]\([^)]+\)"),           # f(x), v(t)
    re.compile(r"[(\[][\s\d/.,{}+-]+[)\]]"),       # (0, 1/2), [1, 3)
    re.compile(r"[=±×÷→≤≥]"),
    re.compile(r"\w+\s*=\s*\{[^}]+\}"),            # t = {1/2}
    re.compile(r"\w+\s*=\s*\d+/\d+"),              # t = 1/2
    re.compile(r"\[(?:red|blue|green|purple|orange|pink|yellow|teal|indigo):[^\]]+\]", re.IGNORECASE),
    re.compile(r"\{\d+/\d+\}"),
]


def _is_suffix(node: Optional[MarkupNode]) -> bool:
    return (
        node is not None
        and node.kind == NodeKind.TEXT
        and len(node.content) < _MAX_SUFFIX_LEN
        and bool(_SUFFIX_RE.match(node.content))
    )


def _is_blank_text(node: Optional[MarkupNode]) -> bool:
    return node is not None and node.kind == NodeKind.TEXT and not node.content.strip()


def _joins_highlight(node: Optional[MarkupNode]) -> bool:
    return node is not None and node.kind in (NodeKind.HIGHLIGHTED, NodeKind.FRACTION)


def _valid_nodes(nodes: Sequence[MarkupNode]) -> bool:
    bad = [type(n).__name__ for n in nodes if not isinstance(n, MarkupNode)]
    if not bad:
        return True
    message = f"clusterize() expects MarkupNode items, got {sorted(set(bad))}"
    if get_settings().strict:
        raise ClusterInvariantError(message)
    logger.warning(message)
    return False


def clusterize(nodes: Sequence[MarkupNode]) -> list[Cluster]:
    """
    Group parsed nodes into runs that must not be split across rendered lines.

    - a highlighted span is its own cluster and pulls in a highlighted span or fraction
      right after it (``[blue:8 ×] {1/8}`` stays on one line);
    - a fraction or image joins whatever precedes it, plus a short trailing suffix;
    - other nodes accumulate until a comma, a period or a long run of text.
    """
    if not nodes or not _valid_nodes(nodes):
        return []

    clusters: list[Cluster] = []
    current: list[MarkupNode] = []

    def flush() -> None:
        if current:
            clusters.append(Cluster(nodes=list(current), can_break_after=True))
            current.clear()

    i = 0
    n = len(nodes)
    while i < n:
        node = nodes[i]
        nxt = nodes[i + 1] if i + 1 < n else None

        if node.kind == NodeKind.HIGHLIGHTED:
            flush()
            current.append(node)
            if _joins_highlight(nxt):
                current.append(nxt)
                i += 1
            elif _is_blank_text(nxt) and i + 2 < n and _joins_highlight(nodes[i + 2]):
                current.extend(nodes[i + 1:i + 3])
                i += 2
            flush()

        elif node.kind in (NodeKind.FRACTION, NodeKind.IMAGE):
            current.append(node)
            if _is_suffix(nxt):
                current.append(nxt)
                i += 1
            flush()

        else:
            current.append(node)
            content = node.content or ""
            if "," in content or "." in content or len(content) > _LONG_TEXT_LEN:
                flush()

        i += 1

    flush()
    return clusters


def tokenize_math_text(text: str) -> list[MathToken]:
    """Split ``"v(t) = 12t^2 - 30t"`` into numbers, identifiers, operators and delimiters."""
    tokens: list[MathToken] = []
    i = 0
    n = len(text or "")
    while i < n:
        ch = text[i]
        if ch.isspace():
            tokens.append(MathToken(kind=TokenKind.WHITESPACE, value=ch))
            i += 1
        elif ch.isdigit():
            j = i
            while j < n and (text[j].isdigit() or text[j] == "."):
                j += 1
            tokens.append(MathToken(kind=TokenKind.NUMBER, value=text[i:j]))
            i = j
        elif ch in _STICKY_OPERATORS:
            tokens.append(MathToken(kind=TokenKind.OPERATOR, value=ch, sticky=True))
            i += 1
        elif ch in _DELIMITERS:
            tokens.append(MathToken(kind=TokenKind.DELIMITER, value=ch, sticky=ch in "(,"))
            i += 1
        elif ch.isascii() and ch.isalpha():
            j = i
            while j < n and text[j].isascii() and text[j].isalpha():
                j += 1
            tokens.append(MathToken(kind=TokenKind.IDENTIFIER, value=text[i:j]))
            i = j
        else:
            tokens.append(MathToken(kind=TokenKind.TEXT, value=ch))
            i += 1
    return tokens


def _take_group(tokens: Sequence[MathToken], start: int, into: list[MathToken]) -> int:
    """Append tokens from the ``(`` at ``start`` through its matching ``)``; return the next index."""
    depth = 0
    i = start
    while i < len(tokens):
        tok = tokens[i]
        into.append(tok)
        i += 1
        if tok.value == "(":
            depth += 1
        elif tok.value == ")":
            depth -= 1
            if depth == 0:
                break
    return i


def clusterize_tokens(tokens: Sequence[MathToken]) -> list[TokenCluster]:
    clusters: list[TokenCluster] = []
    current: list[MathToken] = []

    def flush() -> None:
        if current:
            clusters.append(TokenCluster(tokens=list(current), can_break_after=True))
            current.clear()

    i = 0
    n = len(tokens)
    while i < n:
        tok = tokens[i]
        prev = tokens[i - 1] if i > 0 else None
        nxt = tokens[i + 1] if i + 1 < n else None

        # f(x), and bare (0, 1/2) groups, stay whole.
        if tok.kind == TokenKind.IDENTIFIER and nxt is not None and nxt.value == "(":
            current.append(tok)
            i = _take_group(tokens, i + 1, current)
            continue
        if tok.kind == TokenKind.DELIMITER and tok.value == "(":
            i = _take_group(tokens, i, current)
            continue

        if tok.sticky and tok.value != ",":
            current.append(tok)
        elif tok.value == ",":
            current.append(tok)
            after = tokens[i + 2] if i + 2 < n else None
            if (
                nxt is not None
                and nxt.kind == TokenKind.WHITESPACE
                and after is not None
                and after.kind in (TokenKind.IDENTIFIER, TokenKind.NUMBER)
            ):
                flush()
        elif tok.kind == TokenKind.WHITESPACE:
            current.append(tok)
            if not ((prev is not None and prev.sticky) or (nxt is not None and nxt.sticky)):
                flush()
        else:
            current.append(tok)
        i += 1

    flush()
    return clusters


def clusterize_content(content: str) -> list[str]:
    return [c.text for c in clusterize_tokens(tokenize_math_text(content))]


def is_non_breaking_segment(text: str) -> bool:
    return any(p.search(text or "") for p in NON_BREAKING_PATTERNS)
