# gon_errors.py
# Error taxonomy shared by the GON lexer, parser and accessor layer.
#
# Every failure is raised as a GonError subclass. Lex and parse errors always
# carry the 1-based line/column of the offending input; accessor errors carry
# the offending key, index or target type instead.

from typing import Optional


class GonError(ValueError):
    """
    Base class for every GON failure.

    Subclasses ValueError so callers that treat malformed input generically
    (the way json.JSONDecodeError is handled) keep working.
    """
    kind = "error"

    def __init__(self, message: str, line: Optional[int] = None, column: Optional[int] = None):
        self.message = message
        self.line = line
        self.column = column
        super().__init__(self._format())

    def _format(self) -> str:
        if self.line is None:
            return self.message
        return f"{self.message} at line {self.line}, column {self.column}"

    @property
    def position(self):
        return (self.line, self.column)


class LexError(GonError):
    """Malformed token: unterminated string or bad escape sequence."""
    kind = "lex"


class ParseError(GonError):
    """
    Grammar violation. The message always reads "expected X, found Y" so the
    user can see what the parser was looking for at the reported position.
    """
    kind = "parse"

    def __init__(self, expected: str, found: str, line: Optional[int] = None, column: Optional[int] = None):
        self.expected = expected
        self.found = found
        super().__init__(f"expected {expected}, found {found}", line, column)


class GonLookupError(GonError, LookupError):
    """Missing key, index out of range, or indexing into the wrong node kind."""
    kind = "lookup"

    def __init__(self, message: str, key=None):
        self.key = key
        super().__init__(message)


class ConversionError(GonError):
    """A node could not be read as the requested Python type."""
    kind = "conversion"

    def __init__(self, type_name: str, text: str, reason: Optional[str] = None):
        self.type_name = type_name
        self.text = text
        message = f"cannot convert {text!r} to {type_name}"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message)
