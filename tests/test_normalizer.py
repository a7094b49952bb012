import pytest

from buildgrader.normalizer import escape_line_endings, normalize

SAMPLES = [
    "",
    "   ",
    "5\n",
    "5 \r\n",
    "abc\r\ndef",
    "  hello  \n\n\n  world \n",
    "a\n\rb\rc\r\n\r\nd",
    "col1\\tcol2",
    "\\t\n\\T\nx",
    "mixed Case\tTabs\n   \n",
]


def test_case_and_line_endings_are_ignored():
    assert normalize("abc\r\ndef") == normalize("ABC\ndef")


@pytest.mark.parametrize("text", SAMPLES)
def test_idempotent(text):
    assert normalize(normalize(text)) == normalize(text)


def test_surrounding_whitespace_and_blank_lines_dropped():
    assert normalize("\n\n  first  \n   \n\nsecond\n\n") == "FIRST\nSECOND"


def test_all_line_ending_variants_collapse():
    assert normalize("a\r\nb\n\rc\rd\ne") == "A\nB\nC\nD\nE"


def test_tab_escape_expanded():
    assert normalize("a\\tb") == "A    B"


def test_inner_spacing_preserved():
    assert normalize("1  2 3") == "1  2 3"


def test_output_with_trailing_space_and_crlf_matches():
    assert normalize("5 \r\n") == normalize("5")


def test_escape_line_endings():
    assert escape_line_endings("a\r\nb\nc") == "a\\r\\nb\\nc"
