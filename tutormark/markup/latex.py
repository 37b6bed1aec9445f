from __future__ import annotations

import logging
import re
from typing import Callable, NamedTuple, Optional

from .text_utils import find_matching, matching_pairs, split_fraction

logger = logging.getLogger(__name__)

_FRAC_RE = re.compile(r"\\[dt]?frac")

_MATH_DELIMITERS = ("\\(", "\\)", "\\[", "\\]", "$$", "$")

_TEXT_COMMAND_RE = re.compile(
    r"\\(?:text|textbf|textit|textrm|mathrm|mathbf|mathit|operatorname|mbox|boxed)\s*\{([^{}]*)\}"
)

_BRACED_SUPERSCRIPT_RE = re.compile(r"\^\{([^{}]*)\}")
_BRACED_SUBSCRIPT_RE = re.compile(r"_\{([^{}]*)\}")

# Spacing/punctuation macros first, then word macros (matched on a word boundary).
_SYMBOL_TABLE: list[tuple[str, str]] = [
    ("\\,", " "),
    ("\\;", " "),
    ("\\:", " "),
    ("\\!", ""),
    ("\\ ", " "),
    ("\\times", "×"),
    ("\\cdot", "·"),
    ("\\Delta", "Δ"),
    ("\\alpha", "α"),
    ("\\beta", "β"),
    ("\\theta", "θ"),
    ("\\pi", "π"),
    ("\\pm", "±"),
    ("\\div", "÷"),
    ("\\leq", "≤"),
    ("\\le", "≤"),
    ("\\geq", "≥"),
    ("\\ge", "≥"),
    ("\\neq", "≠"),
    ("\\approx", "≈"),
    ("\\infty", "∞"),
    ("\\sqrt", "√"),
    ("\\rightarrow", "->"),
    ("\\Rightarrow", "=>"),
    ("\\to", "->"),
]

_SYMBOL_RES: list[tuple[re.Pattern, str]] = [
    (re.compile(re.escape(cmd) + (r"(?![A-Za-z])" if cmd[-1].isalpha() else "")), repl)
    for cmd, repl in _SYMBOL_TABLE
]

_BARE_COMMAND_RE = re.compile(r"\\[A-Za-z]+")
_CARET_RUN_RE = re.compile(r"\^{2,}")


class TexToken(NamedTuple):
    token: str
    next_index: int
    grouped: bool


def extract_tex_token(text: str, start: int, braces: Optional[dict[int, int]] = None) -> TexToken:
    i = start
    while i < len(text) and text[i].isspace():
        i += 1
    if i >= len(text):
        return TexToken("", i, False)

    if text[i] == "{":
        end = braces.get(i, -1) if braces is not None else find_matching(text, i, "{", "}")
        if end < 0:
            return TexToken("", len(text), True)
        return TexToken(text[i + 1:end], end + 1, True)

    if text[i] == "\\":
        j = i + 1
        while j < len(text) and text[j].isalpha():
            j += 1
        if j == i + 1 and j < len(text):
            j += 1
        return TexToken(text[i:j], j, True)

    return TexToken(text[i], i + 1, False)


def _invalid_component(value: str) -> bool:
    return not value or value == "="


def try_convert_fraction(
    text: str,
    start: int,
    braces: Optional[dict[int, int]] = None,
) -> Optional[tuple[str, int]]:
    """
    Convert a ``\\frac``/``\\dfrac``/``\\tfrac`` macro starting at ``start``.

    Returns ``("{num/den}", next_index)`` or None when the macro is not a usable fraction.
    An ungrouped single-digit denominator swallows the digits that follow it, so
    ``\\frac112`` reads as one over twelve.
    """
    if not text.startswith("\\", start):
        return None
    m = _FRAC_RE.match(text, start)
    if not m:
        return None

    numerator = extract_tex_token(text, m.end(), braces)
    if _invalid_component(numerator.token):
        return None
    denominator = extract_tex_token(text, numerator.next_index, braces)
    if _invalid_component(denominator.token):
        return None

    num = numerator.token.strip()
    den = denominator.token.strip()
    next_index = denominator.next_index
    if not denominator.grouped and len(den) == 1 and den.isdigit():
        while next_index < len(text) and text[next_index].isdigit():
            den += text[next_index]
            next_index += 1

    if _invalid_component(num) or _invalid_component(den):
        return None
    return f"{{{num}/{den}}}", next_index


def convert_latex_fractions(text: str) -> str:
    braces = matching_pairs(text, "{", "}")
    out: list[str] = []
    i = 0
    while i < len(text):
        converted = try_convert_fraction(text, i, braces) if text[i] == "\\" else None
        if converted:
            value, i = converted
            out.append(value)
            continue
        out.append(text[i])
        i += 1
    return "".join(out)


def strip_math_delimiters(text: str) -> str:
    for delim in _MATH_DELIMITERS:
        text = text.replace(delim, "")
    return text


def _script_repl(marker: str) -> Callable[[re.Match], str]:
    def repl(m: re.Match) -> str:
        body = m.group(1)
        if not body.strip():
            return ""
        # `^{1/2}` is a fraction after a caret, not a braced superscript.
        if split_fraction(body):
            return m.group(0)
        return f"{marker}{body}{marker}"

    return repl


def convert_braced_scripts(text: str) -> str:
    text = _BRACED_SUPERSCRIPT_RE.sub(_script_repl("^"), text)
    return _BRACED_SUBSCRIPT_RE.sub(_script_repl("_"), text)


def strip_text_commands(text: str) -> str:
    while True:
        stripped = _TEXT_COMMAND_RE.sub(r"\1", text)
        if stripped == text:
            return text
        text = stripped


def replace_symbols(text: str) -> str:
    for pat, repl in _SYMBOL_RES:
        text = pat.sub(repl, text)
    dropped = _BARE_COMMAND_RE.findall(text)
    if dropped:
        logger.debug("Dropping unsupported LaTeX commands: %s", sorted(set(dropped)))
    return _BARE_COMMAND_RE.sub("", text)


def collapse_carets(text: str) -> str:
    return _CARET_RUN_RE.sub("^", text)


def latex_to_markup(text: str) -> str:
    """Rewrite the LaTeX a model leaked into its answer as tutoring markup."""
    if "\\" not in text and "$" not in text and "^{" not in text and "_{" not in text:
        return collapse_carets(text)
    text = strip_math_delimiters(text)
    text = convert_latex_fractions(text)
    text = convert_braced_scripts(text)
    text = strip_text_commands(text)
    text = replace_symbols(text)
    return collapse_carets(text)
