from tutormark.markup.latex import (
    collapse_carets,
    convert_braced_scripts,
    convert_latex_fractions,
    extract_tex_token,
    latex_to_markup,
    replace_symbols,
    strip_math_delimiters,
    strip_text_commands,
    try_convert_fraction,
)


def test_grouped_fraction():
    assert convert_latex_fractions(r"\dfrac{11}{5}x") == "{11/5}x"


def test_ungrouped_denominator_takes_digit_run():
    out = convert_latex_fractions(r"\frac112 + \frac38y = \frac512 + \frac58y")
    assert out == "{1/12} + {3/8}y = {5/12} + {5/8}y"


def test_grouped_denominator_does_not_extend():
    assert convert_latex_fractions(r"\frac{1}{2}3") == "{1/2}3"


def test_command_tokens():
    assert convert_latex_fractions(r"\tfrac\pi2") == r"{\pi/2}"
    tok = extract_tex_token(r"  \alpha+1", 0)
    assert tok.token == r"\alpha"
    assert tok.grouped


def test_nested_group_token():
    assert convert_latex_fractions(r"\frac{x^{2}}{3}") == "{x^{2}/3}"


def test_rejected_fractions_are_left_alone():
    assert try_convert_fraction(r"\frac{}{2}", 0) is None
    assert try_convert_fraction(r"\frac{=}{2}", 0) is None
    assert try_convert_fraction(r"\frac{1}{2", 0) is None
    assert try_convert_fraction(r"\frac", 0) is None
    assert try_convert_fraction(r"\alpha", 0) is None


def test_strip_math_delimiters():
    assert strip_math_delimiters(r"\(x\) and \[y\] and $$z$$ and $w$") == "x and y and z and w"


def test_strip_nested_text_commands():
    assert strip_text_commands(r"\text{\textbf{m}} per \mathrm{s}") == "m per s"


def test_symbol_table_and_bare_commands():
    assert replace_symbols(r"a \times b \cdot c") == "a × b · c"
    assert replace_symbols(r"\Delta x \leq \pi") == "Δ x ≤ π"
    assert replace_symbols(r"\left( x \right)") == "( x )"
    assert replace_symbols(r"x\,y") == "x y"


def test_symbols_respect_word_boundaries():
    # \le must not eat the start of \left
    assert replace_symbols(r"\left[") == "["


def test_braced_scripts():
    assert convert_braced_scripts("x^{2} + a_{1}") == "x^2^ + a_1_"
    assert convert_braced_scripts("x^{}") == "x"


def test_collapse_carets():
    assert collapse_carets("x^^2") == "x^2"
    assert collapse_carets("x^2^^") == "x^2^"


def test_latex_to_markup_end_to_end():
    assert latex_to_markup(r"\(\frac{1}{2}\text{ m} \times 3\)") == "{1/2} m × 3"
    assert latex_to_markup("plain 1/2") == "plain 1/2"
