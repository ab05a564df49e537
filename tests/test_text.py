import pytest

from docs_translator.utils import content_hash, normalize_for_display, safe_truncate, split_by_lines


@pytest.mark.parametrize(
    "text, max_chars",
    [
        ("short", 100),
        ("a\nbb\nccc\ndddd\n", 5),
        ("one very long line without breaks", 5),
        ("x\r\ny\r\n\r\nz", 3),
    ],
)
def test_split_by_lines_rejoins_to_input(text, max_chars):
    assert "".join(split_by_lines(text, max_chars)) == text


def test_split_by_lines_respects_limit_on_line_boundaries():
    chunks = split_by_lines("aa\nbb\ncc\n", 6)

    assert chunks == ["aa\nbb\n", "cc\n"]


def test_content_hash_is_stable_and_separated():
    assert content_hash("a", "b") == content_hash("a", "b")
    assert content_hash("a", "b") != content_hash("ab")


def test_safe_truncate_prefers_word_boundary():
    assert safe_truncate("hello brave new world", 14) == "hello..."
    assert safe_truncate("short", 10) == "short"


def test_normalize_for_display_collapses_whitespace():
    assert normalize_for_display("a\n\tb\x00  c") == "a b c"
