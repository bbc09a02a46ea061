import pytest

from gitmarks.application.view_filter import SHOW_ALL, apply_filter, languages_in
from fakes import make_row

ROWS = (
    make_row(1, "Python"),
    make_row(2, "Go"),
    make_row(3, None),
    make_row(4, "Python"),
    make_row(5, "python"),
)


@pytest.mark.parametrize("value", [SHOW_ALL, None, ""])
def test_show_all_returns_rows_unchanged(value):
    assert apply_filter(ROWS, value) == ROWS


def test_filter_keeps_order_and_is_case_sensitive():
    assert apply_filter(ROWS, "Python") == (ROWS[0], ROWS[3])
    assert apply_filter(ROWS, "python") == (ROWS[4],)


def test_filter_is_idempotent():
    once = apply_filter(ROWS, "Go")
    assert apply_filter(once, "Go") == once
    assert apply_filter(ROWS, "Go") == once


def test_null_language_never_matches():
    assert apply_filter(ROWS, "None") == ()
    assert all(r.language is not None for r in apply_filter(ROWS, "Python"))


def test_unknown_language_gives_empty_view():
    assert apply_filter(ROWS, "COBOL") == ()


def test_languages_in_lists_distinct_non_null_languages():
    assert languages_in(ROWS) == ["Go", "Python", "python"]
