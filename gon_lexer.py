# gon_lexer.py
# Regex-driven scanner turning GON (and JSON) text into positioned tokens.
#
# =============================================================================
#  LEXER IMPLEMENTATION
# =============================================================================
#
# One compiled regex with named groups classifies every token on match. The
# token classes partition the input: whatever is not whitespace, a quoted
# string or one of the six structural characters is part of a bare word, so
# the scanner never meets an unclassifiable character.
#
# Quoted strings are decoded here, so STRING tokens already carry the final
# text. Bare words (keys, numbers, booleans, unquoted text) are forwarded
# verbatim; interpreting them is left to the accessor layer.
#
# Lines and columns are 1-based and tracked incrementally while scanning.
# =============================================================================

import re
from typing import Iterator, NamedTuple, Optional

from gon_errors import LexError

# ---------------------------------------------------------------------------
# REGEX BLUEPRINT
# ---------------------------------------------------------------------------
_WHITESPACE = r"\s+"
_ESCAPE     = r"\\."
_STRING     = r'"(?:[^"\\]|' + _ESCAPE + r')*"'
_WORD       = r'[^\s{}\[\]:,"]+'

_TOKEN_RE = re.compile(
    rf"(?P<STRING>{_STRING})|"
    r'(?P<UNTERMINATED>")|'      # an opening quote the STRING group could not close
    r"(?P<BRACE>[{}])|"          # { or }
    r"(?P<BRACKET>[\[\]])|"      # [ or ]
    r"(?P<COMMA>,)|"
    r"(?P<COLON>:)|"
    rf"(?P<WHITESPACE>{_WHITESPACE})|"
    rf"(?P<WORD>{_WORD})",
    re.DOTALL,
)

_SIMPLE_ESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}

_HEX_DIGITS = frozenset("0123456789abcdefABCDEF")

# ---------------------------------------------------------------------------
# TOKEN RECORD
# ---------------------------------------------------------------------------
class Token(NamedTuple):
    """
    Immutable token record.

    kind is one of STRING, WORD, BRACE, BRACKET, COMMA, COLON. For STRING the
    value is the decoded text; for every other kind it is the source text.
    """
    kind: str
    value: str
    line: int
    column: int
    offset: int


def describe(token: Optional[Token]) -> str:
    """Human-readable name of a token for "expected X, found Y" messages."""
    if token is None:
        return "end of input"
    if token.kind == "STRING":
        return f"string {token.value!r}"
    if token.kind == "WORD":
        return f"word {token.value!r}"
    return f"'{token.value}'"


def _locate(text: str, offset: int):
    line = text.count("\n", 0, offset) + 1
    return line, offset - (text.rfind("\n", 0, offset) + 1) + 1


def _lex_error(message: str, text: str, offset: int) -> LexError:
    line, column = _locate(text, offset)
    return LexError(message, line, column)

# ---------------------------------------------------------------------------
# STRING DECODING
# ---------------------------------------------------------------------------
def _read_hex4(text: str, at: int, stop: int) -> int:
    """Read the four hex digits of a \\u escape whose backslash sits at text[at]."""
    digits = text[at + 2:min(at + 6, stop)]
    if len(digits) < 4:
        raise _lex_error("short unicode escape", text, at)
    if not all(c in _HEX_DIGITS for c in digits):
        raise _lex_error(f"invalid hex escape \\u{digits}", text, at)
    return int(digits, 16)


def _decode_string(text: str, start: int, end: int) -> str:
    """
    Decode the quoted string occupying text[start:end], quotes included.

    Offsets are kept relative to the whole document so every error points at
    the exact backslash that caused it.
    """
    out = []
    i = start + 1
    stop = end - 1
    while i < stop:
        ch = text[i]
        if ch != "\\":
            j = text.find("\\", i, stop)
            if j == -1:
                j = stop
            out.append(text[i:j])
            i = j
            continue
        esc = text[i + 1]
        if esc in _SIMPLE_ESCAPES:
            out.append(_SIMPLE_ESCAPES[esc])
            i += 2
            continue
        if esc != "u":
            raise _lex_error(f"invalid escape \\{esc}", text, i)
        code = _read_hex4(text, i, stop)
        if 0xDC00 <= code <= 0xDFFF:
            raise _lex_error("unpaired surrogate in string", text, i)
        if 0xD800 <= code <= 0xDBFF:
            if text[i + 6:i + 8] != "\\u":
                raise _lex_error("unpaired surrogate in string", text, i)
            low = _read_hex4(text, i + 6, stop)
            if not 0xDC00 <= low <= 0xDFFF:
                raise _lex_error("unpaired surrogate in string", text, i)
            code = 0x10000 + ((code - 0xD800) << 10) + (low - 0xDC00)
            i += 6
        out.append(chr(code))
        i += 6
    return "".join(out)

# ---------------------------------------------------------------------------
# SCANNER
# ---------------------------------------------------------------------------
def lex(text: str) -> Iterator[Token]:
    """
    Single-pass generator producing positioned tokens.

    Whitespace is dropped. Raises LexError on an unterminated string or a
    malformed escape sequence; tokens already yielded stay valid.
    """
    line = 1
    line_start = 0
    for m in _TOKEN_RE.finditer(text):
        kind  = m.lastgroup
        value = m.group()
        start = m.start()
        column = start - line_start + 1

        if kind == "UNTERMINATED":
            raise LexError("unterminated string", line, column)

        if kind == "STRING":
            token = Token(kind, _decode_string(text, start, m.end()), line, column, start)
        elif kind != "WHITESPACE":
            token = Token(kind, value, line, column, start)
        else:
            token = None

        newlines = value.count("\n")
        if newlines:
            line += newlines
            line_start = start + value.rfind("\n") + 1

        if token is not None:
            yield token
