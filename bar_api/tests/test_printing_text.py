import pytest

from bar_api.app.printing.text import (
    center_line,
    format_money,
    left_right_line,
    to_latin1_safe,
    wrap_text,
)


def test_to_latin1_safe():
    assert to_latin1_safe("Caipiri\u00f1a \u201cdoble\u201d \u2014 ok\u2026") == (
        'Caipiri\u00f1a "doble" - ok...'
    )
    assert to_latin1_safe("Cerveza 🍺") == "Cerveza ?"
    assert to_latin1_safe("a\tb\nc\x07") == "a\tb\nc?"


def test_decomposed_accents_are_composed():
    assert to_latin1_safe("Jose\u0301") == "Jos\xe9"


def test_wrap_breaks_at_late_space():
    assert wrap_text("Gin tonic with cucumber", 14) == ["Gin tonic", "with cucumber"]


def test_wrap_cuts_hard_when_space_is_early():
    assert wrap_text("Gin Tonicwithcucumber", 10) == ["Gin Tonicw", "ithcucumbe", "r"]


def test_wrap_splits_short_word_after_early_space():
    assert wrap_text("ab cdef", 5) == ["ab cd", "ef"]
    assert wrap_text("ab " + "c" * 31, 32) == ["ab " + "c" * 29, "cc"]


def test_wrap_keeps_explicit_lines():
    assert wrap_text("one\r\n\ntwo", 10) == ["one", "", "two"]


def test_wrap_non_positive_width():
    assert wrap_text("anything", 0) == ["anything"]


@pytest.mark.parametrize(
    "left,right,expected",
    [
        ("TOTAL", "$ 9.90", "TOTAL     $ 9.90"),
        ("A very long drink name", "$ 9.90", "A very lo $ 9.90"),
        ("X", "$ 1,000,000.00", "X $ 1,000,000.00"),
    ],
)
def test_left_right_line(left, right, expected):
    assert left_right_line(left, right, 16) == expected


def test_center_line():
    assert center_line("ORDER", 11) == "   ORDER"
    assert center_line("TOO LONG FOR IT", 8) == "TOO LONG"


@pytest.mark.parametrize(
    "value,expected",
    [(0, "$ 0.00"), (42.9, "$ 42.90"), (1234.5, "$ 1,234.50"), (-3.2, "-$ 3.20")],
)
def test_format_money(value, expected):
    assert format_money(value) == expected


def test_format_money_symbol():
    assert format_money(10, "R$") == "R$ 10.00"
