from __future__ import annotations

import logging
import re

from .latex import latex_to_markup
from .models import PALETTE
from .text_utils import (
    ensure_text,
    has_digit,
    image_ends,
    is_unit_like_slash,
    sub_outside_braces,
)

logger = logging.getLogger(__name__)

_IMAGE_SLOT = "\ue000"

_IMAGE_SLOT_RE = re.compile(_IMAGE_SLOT + r"(\d+)" + _IMAGE_SLOT)

# Chained rewrites (a removed command exposing another one) settle within a few passes.
_MAX_PASSES = 8

# Canonical decimals, longest spellings first. Each only converts when it stands alone.
DECIMAL_FRACTIONS: list[tuple[str, str]] = [
    (r"0\.1666*7?", "{1/6}"),
    (r"0\.8333*", "{5/6}"),
    (r"0\.3333*", "{1/3}"),
    (r"0\.6666*7?", "{2/3}"),
    (r"0\.667", "{2/3}"),
    (r"0\.125", "{1/8}"),
    (r"0\.375", "{3/8}"),
    (r"0\.625", "{5/8}"),
    (r"0\.875", "{7/8}"),
    (r"0\.25", "{1/4}"),
    (r"0\.75", "{3/4}"),
    (r"0\.5", "{1/2}"),
    (r"0\.2", "{1/5}"),
    (r"0\.4", "{2/5}"),
    (r"0\.6", "{3/5}"),
    (r"0\.8", "{4/5}"),
]

_DECIMAL_RES: list[tuple[re.Pattern, str]] = [
    (re.compile(r"(?<![\d.])" + pat + r"(?!\d|\.\d)"), repl) for pat, repl in DECIMAL_FRACTIONS
]

# `12/5` but not `19.6/5.0`, `1/2/3` or `{1/2}`.
_BARE_SLASH_RE = re.compile(r"(?<![\d/])(?<!\d\.)(\d+)/(\d+)(?![\d/])(?!\.\d)")

# Inside a color tag the sides may carry letters (`x/2`, `2x/3`, `12/5h`).
_TAG_SLASH_RE = re.compile(r"(?<![\w/])(?<!\d\.)([A-Za-z\d]+)/([A-Za-z\d]+)(?![\w/])(?!\.\d)")

_NUMBER_WITH_UNIT_RE = re.compile(r"\d+[A-Za-z]+")

_COLOR_TAG_RE = re.compile(r"\[(" + "|".join(PALETTE) + r"):([^\[\]]+)\]", re.IGNORECASE)

_LINE_END_RE = re.compile(r"\r\n|\r|[\u2028\u2029]")
_ZERO_WIDTH_RE = re.compile(r"[\u200B-\u200D\uFEFF]")
_LABEL_LINE_RE = re.compile(r"\s*(?:[a-z]\)|\d+\.|\d+\))", re.IGNORECASE)
_HSPACE_RE = re.compile(r"[ \t\u00A0\u202F]+")
_SPACE_BEFORE_PUNCT_RE = re.compile(r"[ \t\u00A0\u202F]+([.,!?;:])")


def _protect_images(text: str) -> tuple[str, list[str]]:
    ends = image_ends(text)
    images: list[str] = []
    out: list[str] = []
    pos = 0
    for start in sorted(ends):
        if start < pos:
            continue
        end = ends[start]
        out.append(text[pos:start])
        out.append(f"{_IMAGE_SLOT}{len(images)}{_IMAGE_SLOT}")
        images.append(text[start:end + 1])
        pos = end + 1
    out.append(text[pos:])
    return "".join(out), images


def _restore_images(text: str, images: list[str]) -> str:
    return _IMAGE_SLOT_RE.sub(lambda m: images[int(m.group(1))], text)


def convert_decimals(text: str) -> str:
    for pat, repl in _DECIMAL_RES:
        text = sub_outside_braces(text, pat, repl)
    return text


def _split_trailing_letters(side: str) -> tuple[str, str]:
    """`5h` -> (`5`, `h`); a denominator's unit letters stay outside the fraction."""
    m = re.fullmatch(r"(\d+)([A-Za-z]+)", side)
    if m:
        return m.group(1), m.group(2)
    return side, ""


def _tag_slash_repl(m: re.Match) -> str:
    num, den = m.group(1), m.group(2)
    if is_unit_like_slash(num, den) or not (has_digit(num) or has_digit(den)):
        return m.group(0)
    # `15m/s` is a rate with units, not a fraction.
    if den.isalpha() and _NUMBER_WITH_UNIT_RE.fullmatch(num):
        return m.group(0)
    den, tail = _split_trailing_letters(den)
    return f"{{{num}/{den}}}{tail}"


def convert_slash_fractions(text: str) -> str:
    def in_tag(m: re.Match) -> str:
        body = sub_outside_braces(m.group(2), _TAG_SLASH_RE, _tag_slash_repl)
        return f"[{m.group(1)}:{body}]"

    text = _COLOR_TAG_RE.sub(in_tag, text)
    return sub_outside_braces(text, _BARE_SLASH_RE, r"{\1/\2}")


def normalize_whitespace(text: str) -> str:
    text = _LINE_END_RE.sub("\n", text)
    text = _ZERO_WIDTH_RE.sub("", text)
    # Newlines collapse to spaces except in front of a part label.
    out: list[str] = []
    for line in text.split("\n"):
        if not line.strip():
            continue
        if out:
            out.append("\n" if _LABEL_LINE_RE.match(line) else " ")
        out.append(line)
    text = _HSPACE_RE.sub(" ", "".join(out))
    text = _SPACE_BEFORE_PUNCT_RE.sub(r"\1", text)
    return "\n".join(line.strip() for line in text.split("\n")).strip()


def _normalize_once(text: str, decimals: bool) -> str:
    text, images = _protect_images(text)
    text = latex_to_markup(text)
    if decimals:
        text = convert_decimals(text)
    before = text
    text = convert_slash_fractions(text)
    if text != before:
        logger.debug("Fraction conversion: %r -> %r", before[:100], text[:100])
    text = _restore_images(text, images)
    return normalize_whitespace(text)


def normalize(raw: str, *, decimals: bool = False) -> str:
    """
    Turn raw model output into canonical tutoring markup.

    LaTeX leftovers become markup (``\\frac{a}{b}`` -> ``{a/b}``), bare ``1/8`` becomes
    ``{1/8}``, and newlines collapse to spaces except the ones that introduce a part
    label (``a)``, ``2.``, ``3)``). With ``decimals=True`` canonical decimals such as
    ``0.25`` are also rewritten as fractions.

    The passes are repeated until the text stops changing, so normalized text is
    returned unchanged by a second call.
    """
    raw = ensure_text(raw, "normalize")
    if not raw:
        return ""

    text = _normalize_once(raw, decimals)
    for attempt in range(_MAX_PASSES):
        again = _normalize_once(text, decimals)
        if again == text:
            break
        logger.debug("Normalization pass %d changed %r -> %r", attempt + 2, text[:100], again[:100])
        text = again
    return text
