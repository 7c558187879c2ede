import pytest

from app.services.search.matching import (
    build_context,
    edit_distance,
    fold,
    highlight,
    is_exact_word_match,
    resolve_page,
    within_distance,
)
from app.services.search.records import Page


@pytest.mark.parametrize(
    "a,b,expected",
    [
        ("world", "wrold", 2),
        ("kitten", "sitting", 3),
        ("", "abc", 3),
        ("same", "same", 0),
        ("flaw", "lawn", 2),
    ],
)
def test_edit_distance(a, b, expected):
    assert edit_distance(a, b) == expected
    assert edit_distance(b, a) == expected


def test_within_distance_skips_long_length_gaps():
    assert within_distance("cat", "cats", 2)
    assert not within_distance("cat", "category", 2)


def test_fold_preserves_length():
    s = "İstanbul Report"
    assert len(fold(s)) == len(s)
    assert fold("MiXeD") == "mixed"


def test_word_boundaries():
    assert not is_exact_word_match("concatenate cats", "cat", 3)
    assert is_exact_word_match("the cat sat", "cat", 4)
    assert is_exact_word_match("cat", "cat", 0)
    assert is_exact_word_match("(cat).", "cat", 1)
    # underscore is a word character
    assert not is_exact_word_match("my_cat", "cat", 3)


def test_highlight_is_case_insensitive_and_keeps_original_case():
    out = highlight("Cat and cat and CAT", ["cat"], "<mark>", "</mark>")
    assert out == "<mark>Cat</mark> and <mark>cat</mark> and <mark>CAT</mark>"


def test_highlight_prefers_longer_needle_at_same_position():
    out = highlight("budget budgeting", ["budget", "budgeting"], "[", "]")
    assert out == "[budget] [budgeting]"


def test_highlight_without_needles_returns_text():
    assert highlight("plain", [], "<mark>", "</mark>") == "plain"


def test_context_short_line_has_no_ellipsis():
    line = "The project timeline starts in March"
    ctx = build_context(
        line,
        anchor=4,
        anchor_len=len("project timeline"),
        needles=["project timeline"],
        radius=50,
        open_tag="<mark>",
        close_tag="</mark>",
    )
    assert ctx == "The <mark>project timeline</mark> starts in March"


def test_context_long_line_is_clipped_with_ellipsis():
    line = "a" * 60 + "needle" + "b" * 60
    ctx = build_context(
        line,
        anchor=60,
        anchor_len=6,
        needles=["needle"],
        radius=50,
        open_tag="<mark>",
        close_tag="</mark>",
    )
    assert ctx == "..." + "a" * 50 + "<mark>needle</mark>" + "b" * 50 + "..."


def test_context_ellipsis_never_highlighted():
    line = "x" * 80 + " ... end"
    ctx = build_context(
        line,
        anchor=81,
        anchor_len=3,
        needles=["..."],
        radius=10,
        open_tag="<mark>",
        close_tag="</mark>",
    )
    assert ctx.startswith("...x")
    assert ctx.count("<mark>") == 1


def test_resolve_page():
    pages = [
        Page(page_number=1, content="", start_line=1, end_line=25),
        Page(page_number=2, content="", start_line=26, end_line=30),
    ]
    assert resolve_page(pages, 1) == 1
    assert resolve_page(pages, 27) == 2
    # not covered by any page
    assert resolve_page(pages, 99) == 1
    assert resolve_page([], 5) == 1
