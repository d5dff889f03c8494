import pytest

import gon_parser as gp
from gon_errors import LexError


def test_simple_escapes_are_resolved():
    root = gp.parse(r's "a\"b\\c\/d\te\nf\b\f\r"')
    assert root["s"].get() == 'a"b\\c/d\te\nf\b\f\r'


def test_unicode_escapes_and_surrogate_pairs():
    root = gp.parse(r'x "\u00e9 \uD83D\uDC7D"')
    assert root["x"].get() == "é \U0001F47D"


def test_non_ascii_text_passes_through():
    root = gp.parse('city "Zürich" emoji 👽')
    assert root["city"].get() == "Zürich"
    assert root["emoji"].get() == "👽"


def test_strings_may_span_lines():
    root = gp.parse('note "line one\nline two"')
    assert root["note"].get() == "line one\nline two"


def test_structural_characters_inside_quotes_are_text():
    root = gp.parse('k "{not: [an, object]}"')
    assert root["k"].get() == "{not: [an, object]}"


def test_quoted_keys_may_contain_spaces():
    root = gp.parse('"my key" value')
    assert root["my key"].get() == "value"


def test_invalid_single_escape_reports_position():
    with pytest.raises(LexError) as ei:
        gp.parse(r'x "\q"')
    assert "invalid escape \\q" in str(ei.value)
    assert ei.value.position == (1, 4)


def test_escape_position_on_later_line():
    with pytest.raises(LexError) as ei:
        gp.parse('a 1\nb "ok \\q"')
    assert ei.value.position == (2, 7)


def test_short_unicode_escape():
    with pytest.raises(LexError) as ei:
        gp.parse(r'["\u12"]')
    assert "short unicode escape" in str(ei.value)


def test_invalid_hex_escape():
    with pytest.raises(LexError) as ei:
        gp.parse(r'["\u123g"]')
    assert "invalid hex escape \\u123g" in str(ei.value)


def test_unpaired_high_surrogate():
    with pytest.raises(LexError) as ei:
        gp.parse(r'["\uD800"]')
    assert "unpaired surrogate" in str(ei.value)


def test_unpaired_low_surrogate():
    with pytest.raises(LexError) as ei:
        gp.parse(r'["\uDC00x"]')
    assert "unpaired surrogate" in str(ei.value)


def test_lex_errors_are_value_errors():
    with pytest.raises(ValueError):
        gp.parse('a "unterminated')
