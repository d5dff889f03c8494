import pytest

import gon_lexer as gl
from gon_errors import LexError


def pairs(text):
    return [(t.kind, t.value) for t in gl.lex(text)]


def test_structural_punctuation_kinds():
    assert [k for k, _ in pairs("{ } [ ] : ,")] == ["BRACE", "BRACE", "BRACKET", "BRACKET", "COLON", "COMMA"]


def test_bare_word_stops_at_structural_characters():
    assert pairs('a{b]c:d,e"f"') == [
        ("WORD", "a"),
        ("BRACE", "{"),
        ("WORD", "b"),
        ("BRACKET", "]"),
        ("WORD", "c"),
        ("COLON", ":"),
        ("WORD", "d"),
        ("COMMA", ","),
        ("WORD", "e"),
        ("STRING", "f"),
    ]


def test_numbers_and_literals_stay_bare_words():
    assert pairs("-1.5e3 true null") == [("WORD", "-1.5e3"), ("WORD", "true"), ("WORD", "null")]


def test_whitespace_only_input_yields_no_tokens():
    assert list(gl.lex(" \n\t\r\n ")) == []


def test_positions_are_one_based():
    toks = list(gl.lex('a 1\n  b "x\ny" c'))
    assert [(t.value, t.line, t.column) for t in toks] == [
        ("a", 1, 1),
        ("1", 1, 3),
        ("b", 2, 3),
        ("x\ny", 2, 5),
        ("c", 3, 4),
    ]


def test_offsets_point_into_source():
    text = 'key  "value"'
    toks = list(gl.lex(text))
    assert [text[t.offset] for t in toks] == ["k", '"']


def test_lexing_is_lazy():
    it = gl.lex('a b "oops')
    assert next(it).value == "a"
    assert next(it).value == "b"
    with pytest.raises(LexError):
        next(it)


def test_unterminated_string_reports_opening_quote():
    with pytest.raises(LexError) as ei:
        list(gl.lex('key\n  "abc'))
    assert ei.value.position == (2, 3)
    assert str(ei.value) == "unterminated string at line 2, column 3"


def test_escaped_quote_does_not_close_string():
    with pytest.raises(LexError) as ei:
        list(gl.lex(r'"abc\"'))
    assert "unterminated string" in str(ei.value)


def test_describe_tokens():
    assert gl.describe(None) == "end of input"
    assert gl.describe(gl.Token("BRACE", "}", 1, 1, 0)) == "'}'"
    assert gl.describe(gl.Token("WORD", "count", 1, 1, 0)) == "word 'count'"
    assert gl.describe(gl.Token("STRING", "x y", 1, 1, 0)) == "string 'x y'"
