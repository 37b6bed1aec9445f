import pytest

from tutormark.markup.models import ContentBlock
from tutormark.markup.segmenter import count_labels, is_multi_part, segment


def test_single_line_parts_split():
    blocks = segment("a) 5  b) 7")
    assert blocks == [ContentBlock(label="a)", content="5"), ContentBlock(label="b)", content="7")]


def test_parenthesized_labels():
    blocks = segment("(1) x = 2 (2) y = 3")
    assert [(b.label, b.content) for b in blocks] == [("(1)", "x = 2"), ("(2)", "y = 3")]


def test_one_part_per_line():
    blocks = segment("a) {1/2}\nb) {3/4}\nc) 1")
    assert [b.label for b in blocks] == ["a)", "b)", "c)"]
    assert blocks[2].content == "1"


def test_continuation_lines_join_previous_part():
    blocks = segment("a) first\nmore words\nb) second")
    assert blocks[0] == ContentBlock(label="a)", content="first more words")
    assert blocks[1].content == "second"


def test_intro_before_first_label_is_unlabeled():
    blocks = segment("Intro text a) 5 b) 7")
    assert blocks[0] == ContentBlock(content="Intro text")
    assert [b.label for b in blocks[1:]] == ["a)", "b)"]


def test_label_with_empty_content():
    blocks = segment("a) b) 7")
    assert blocks == [ContentBlock(label="a)", content=""), ContentBlock(label="b)", content="7")]


def test_single_label_is_not_split():
    assert segment("a) only this") == [ContentBlock(content="a) only this")]


def test_function_calls_are_not_labels():
    src = "f(x) = 2 and g(x) = 3"
    assert count_labels(src) == 0
    assert segment(src) == [ContentBlock(content=src)]


@pytest.mark.parametrize("src", ["", "   ", "\n\n", None])
def test_blank_input(src):
    assert segment(src) == []


def test_is_multi_part():
    assert is_multi_part(segment("a) 5 b) 7"))
    assert not is_multi_part(segment("just one answer"))
    assert not is_multi_part([ContentBlock(content="x"), ContentBlock(content="y")])
    assert not is_multi_part([])
