from __future__ import annotations

import logging
import re
from bisect import bisect_left
from typing import Any, Callable, Optional, Union

from ..config import get_settings
from ..errors import MarkupInputError

logger = logging.getLogger(__name__)

IMAGE_PREFIX = "(IMAGE:"
_IMAGE_SEPARATOR = "]("
_IMAGE_PREFIX_RE = re.compile(re.escape(IMAGE_PREFIX))
_IMAGE_SEPARATOR_RE = re.compile(re.escape(_IMAGE_SEPARATOR))

_Repl = Union[str, Callable[[re.Match], str]]


def has_digit(s: str) -> bool:
    return any(ch.isdigit() for ch in s or "")


def is_unit_like_slash(numerator: str, denominator: str) -> bool:
    """`m/s`, `km/h`: both sides are letters only."""
    num = (numerator or "").strip()
    den = (denominator or "").strip()
    if not num or not den:
        return False
    return num.isalpha() and den.isalpha()


def find_matching(text: str, start: int, open_ch: str, close_ch: str) -> int:
    """Index of the closer matching ``text[start]``, or -1."""
    depth = 0
    for i in range(start, len(text)):
        ch = text[i]
        if ch == open_ch:
            depth += 1
        elif ch == close_ch:
            depth -= 1
            if depth == 0:
                return i
    return -1


def matching_pairs(text: str, open_ch: str, close_ch: str) -> dict[int, int]:
    """Opener index -> matching closer index for the whole text in one pass; unmatched openers are absent."""
    pairs: dict[int, int] = {}
    stack: list[int] = []
    for i, ch in enumerate(text):
        if ch == open_ch:
            stack.append(i)
        elif ch == close_ch and stack:
            pairs[stack.pop()] = i
    return pairs


def next_positions(text: str, ch: str) -> list[int]:
    """``out[i]`` is the first index >= i holding ``ch``, or -1; ``len(out) == len(text) + 1``."""
    out = [-1] * (len(text) + 1)
    nxt = -1
    for i in range(len(text) - 1, -1, -1):
        if text[i] == ch:
            nxt = i
        out[i] = nxt
    return out


def find_image_end(text: str, start: int) -> int:
    """
    Index of the ``)`` that closes an ``(IMAGE: desc](url)`` tag starting at ``start``, or -1.

    The description may contain balanced parentheses; so may the URL, which ends at the
    ``)`` matching the ``(`` of ``](``.
    """
    if not text.startswith(IMAGE_PREFIX, start):
        return -1
    body_start = start + len(IMAGE_PREFIX)
    sep = text.find(_IMAGE_SEPARATOR, body_start)
    if sep < 0:
        return -1
    desc = text[body_start:sep]
    if desc.count("(") != desc.count(")") or IMAGE_PREFIX in desc:
        return -1
    return find_matching(text, sep + 1, "(", ")")


def image_ends(text: str) -> dict[int, int]:
    """``find_image_end`` for every image prefix in ``text``, computed in one sweep."""
    starts = [m.start() for m in _IMAGE_PREFIX_RE.finditer(text)]
    if not starts:
        return {}
    seps = [m.start() for m in _IMAGE_SEPARATOR_RE.finditer(text)]
    parens = matching_pairs(text, "(", ")")
    opens = _running_count(text, "(")
    closes = _running_count(text, ")")

    ends: dict[int, int] = {}
    for k, start in enumerate(starts):
        body_start = start + len(IMAGE_PREFIX)
        s = bisect_left(seps, body_start)
        if s == len(seps):
            break
        sep = seps[s]
        # Prefixes never overlap, so only the next one can sit inside the description.
        if k + 1 < len(starts) and starts[k + 1] + len(IMAGE_PREFIX) <= sep:
            continue
        if opens[sep] - opens[body_start] != closes[sep] - closes[body_start]:
            continue
        end = parens.get(sep + 1, -1)
        if end > 0:
            ends[start] = end
    return ends


def _running_count(text: str, ch: str) -> list[int]:
    out = [0] * (len(text) + 1)
    for i, c in enumerate(text):
        out[i + 1] = out[i] + (c == ch)
    return out


def split_image(text: str, start: int, end: int) -> tuple[str, str]:
    inner = text[start + len(IMAGE_PREFIX):end]
    desc, _, url = inner.partition("](")
    return desc.strip(), url.strip()


def top_level_indexes(text: str, ch: str) -> list[int]:
    """Positions of ``ch`` outside any ``{...}`` group."""
    out: list[int] = []
    depth = 0
    for i, c in enumerate(text):
        if c == "{":
            depth += 1
        elif c == "}":
            depth = max(0, depth - 1)
        elif c == ch and depth == 0:
            out.append(i)
    return out


def unwrap_group(s: str) -> str:
    s = s.strip()
    if s.startswith("{") and find_matching(s, 0, "{", "}") == len(s) - 1:
        return s[1:-1].strip()
    return s


def split_fraction(inner: str) -> Optional[tuple[str, str]]:
    """``"a/{b + 1}"`` -> ``("a", "b + 1")``: exactly one top-level ``/`` and two non-empty sides."""
    slashes = top_level_indexes(inner, "/")
    if len(slashes) != 1:
        return None
    num = unwrap_group(inner[:slashes[0]])
    den = unwrap_group(inner[slashes[0] + 1:])
    if not num or not den:
        return None
    return num, den


def sub_outside_braces(text: str, pattern: re.Pattern, repl: _Repl) -> str:
    """``pattern.sub`` applied only to the stretches of ``text`` at brace depth 0."""
    pairs = matching_pairs(text, "{", "}")
    out: list[str] = []
    plain_start = 0
    i = 0
    while i < len(text):
        # An unterminated brace is plain text.
        end = pairs.get(i, -1) if text[i] == "{" else -1
        if end > i:
            out.append(pattern.sub(repl, text[plain_start:i]))
            out.append(text[i:end + 1])
            i = end + 1
            plain_start = i
            continue
        i += 1
    out.append(pattern.sub(repl, text[plain_start:]))
    return "".join(out)


def ensure_text(value: Any, where: str) -> Optional[str]:
    """
    Guard the stage entry points against caller bugs.

    Strict settings raise ``MarkupInputError``; otherwise the defect is logged and the
    caller gets None so it can return an empty result.
    """
    if isinstance(value, str):
        return value
    if value is None:
        return ""
    message = f"{where}() expects str, got {type(value).__name__}"
    if get_settings().strict:
        raise MarkupInputError(message)
    logger.warning(message)
    return None
