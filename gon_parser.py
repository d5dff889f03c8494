# gon_parser.py
# Recursive-descent parser for GON (Glaiel Object Notation), accepting JSON
# as a subset, plus the file loader and the command-line validator.
#
# =============================================================================
#  PARSER IMPLEMENTATION: RECURSIVE DESCENT FOR STRUCTURE
# =============================================================================
#
# Grammar:
#
#   document := member*                 (implicit top-level object)
#   object   := '{' member* '}'
#   member   := key value
#   key      := bare-word | quoted-string
#   value    := object | array | scalar
#   array    := '[' value* ']'
#   scalar   := bare-word | quoted-string
#
# JSON punctuation is optional: one ':' may follow a key and one ',' may
# follow a member or array element. Anywhere else they are errors.
#
# One function per production; a LookAhead iterator gives the single token of
# lookahead needed to pick object / array / scalar. The first error aborts the
# parse, there is no recovery and no partial tree.
#
# Root forms, tried in order:
#   '{' ... '}'    explicit braces around the whole document, same tree as
#                  the brace-less form
#   '[' ... ']'    array root, so every JSON document parses
#   one scalar     a document holding a single bare word or string
#   member*        the usual brace-less GON document
# =============================================================================

import argparse
import json
import logging
import sys
from typing import Iterator, List, NamedTuple, Optional, Tuple

from gon_errors import GonError, ParseError
from gon_lexer import Token, describe, lex
from gon_value import Array, Object, Scalar, Value

logger = logging.getLogger(__name__)

# ---------------------------------------------------------------------------
# CONSTANTS AND TUNABLES
# ---------------------------------------------------------------------------
DEPTH_LIMIT_DEFAULT = 256     # keeps recursion inside Python's default stack; None lifts it
ALLOW_DUP_DEFAULT   = True    # duplicate keys kept, lookup returns the first

_SCALAR_KINDS = ("WORD", "STRING")


class ParseOptions(NamedTuple):
    max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT
    allow_dup: bool = ALLOW_DUP_DEFAULT

# ---------------------------------------------------------------------------
# LOOKAHEAD RING
# ---------------------------------------------------------------------------
class LookAhead:
    """
    Token iterator with pushback.

    peek() returns None at end of input instead of raising, and `eof` holds
    the line/column just past the last character so truncated input can be
    reported at a real position.
    """
    def __init__(self, iterable: Iterator[Token], eof: Tuple[int, int]):
        self._iter = iter(iterable)
        self._buf: List[Token] = []
        self.eof = eof
        self.last: Optional[Token] = None

    def __iter__(self):
        return self

    def __next__(self) -> Token:
        token = self._buf.pop() if self._buf else next(self._iter)
        self.last = token
        return token

    def peek(self) -> Optional[Token]:
        if not self._buf:
            try:
                self._buf.append(next(self._iter))
            except StopIteration:
                return None
        return self._buf[-1]

    def push(self, token: Token) -> None:
        self._buf.append(token)


def _end_position(text: str) -> Tuple[int, int]:
    last_nl = text.rfind("\n")
    return text.count("\n") + 1, len(text) - (last_nl + 1) + 1

# ---------------------------------------------------------------------------
# PARSER UTILITY
# ---------------------------------------------------------------------------
def _fail(expected: str, token: Optional[Token], tokens: LookAhead) -> ParseError:
    """Build an "expected X, found Y" error positioned at `token` (or at EOF)."""
    if token is None:
        line, column = tokens.eof
    else:
        line, column = token.line, token.column
    return ParseError(expected, describe(token), line, column)


def _is(token: Optional[Token], kind: str, value: str) -> bool:
    return token is not None and token.kind == kind and token.value == value


def _skip_separator(tokens: LookAhead, kind: str) -> None:
    """Consume one optional ':' or ',' if it is next."""
    token = tokens.peek()
    if token is not None and token.kind == kind:
        next(tokens)


def _opened_at(opener: Token) -> str:
    return f"opened at line {opener.line}, column {opener.column}"


def _check_depth(opener: Token, depth: int, options: ParseOptions) -> None:
    if options.max_depth is not None and depth > options.max_depth:
        raise ParseError(
            f"at most {options.max_depth} levels of nesting",
            f"'{opener.value}' opening level {depth}",
            opener.line,
            opener.column,
        )

# ---------------------------------------------------------------------------
# CORE VALUE PARSER
# ---------------------------------------------------------------------------
def _parse_value(tokens: LookAhead, depth: int, options: ParseOptions, expected: str = "value") -> Value:
    """
    Dispatch on the next token: '{' object, '[' array, word/string scalar.
    `depth` is the nesting level of the container holding this value.
    """
    token = tokens.peek()
    if token is None or (token.kind not in _SCALAR_KINDS and token.value not in ("{", "[")):
        raise _fail(expected, token, tokens)
    next(tokens)

    if token.kind in _SCALAR_KINDS:
        return Scalar(token.value)
    _check_depth(token, depth + 1, options)
    if token.value == "{":
        return _parse_members(tokens, depth + 1, options, token)
    return _parse_array(tokens, depth + 1, options, token)

# ---------------------------------------------------------------------------
# ARRAY PARSER
# ---------------------------------------------------------------------------
def _parse_array(tokens: LookAhead, depth: int, options: ParseOptions, opener: Token) -> Array:
    """Parse array elements after an already consumed '['; consumes the ']'."""
    items: List[Value] = []
    while True:
        token = tokens.peek()
        if token is None:
            raise _fail(f"']' to close array {_opened_at(opener)}", None, tokens)
        if _is(token, "BRACKET", "]"):
            next(tokens)
            break
        items.append(_parse_value(tokens, depth, options, "value or ']'"))
        _skip_separator(tokens, "COMMA")
    return Array(tuple(items))

# ---------------------------------------------------------------------------
# OBJECT PARSER
# ---------------------------------------------------------------------------
def _parse_members(tokens: LookAhead, depth: int, options: ParseOptions, opener: Optional[Token]) -> Object:
    """
    Parse key/value members.

    With an opener ('{' already consumed) the members end at the matching
    '}', which is consumed here. Without one they run to end of input, which
    is how a brace-less document is read. Duplicate keys are rejected here
    when options.allow_dup is off.
    """
    pairs = []
    seen = set()
    while True:
        token = tokens.peek()
        if token is None:
            if opener is None:
                break
            raise _fail(f"'}}' to close object {_opened_at(opener)}", None, tokens)
        if opener is not None and _is(token, "BRACE", "}"):
            next(tokens)
            break
        if token.kind not in _SCALAR_KINDS:
            raise _fail("key" if opener is None else "key or '}'", token, tokens)
        next(tokens)

        key = token.value
        if not options.allow_dup and key in seen:
            raise ParseError("unique key", f"duplicate key {key!r}", token.line, token.column)
        seen.add(key)

        _skip_separator(tokens, "COLON")
        pairs.append((key, _parse_value(tokens, depth, options, f"value for key {key!r}")))
        _skip_separator(tokens, "COMMA")
    return Object(tuple(pairs))

# ---------------------------------------------------------------------------
# PUBLIC API
# ---------------------------------------------------------------------------
def _parse_root(tokens: LookAhead, options: ParseOptions):
    first = tokens.peek()
    if _is(first, "BRACE", "{"):
        next(tokens)
        return _parse_members(tokens, 0, options, first), "braced object"
    if _is(first, "BRACKET", "["):
        next(tokens)
        return _parse_array(tokens, 0, options, first), "array"
    if first is not None and first.kind in _SCALAR_KINDS:
        next(tokens)
        if tokens.peek() is None:
            return Scalar(first.value), "single value"
        tokens.push(first)
    return _parse_members(tokens, 0, options, None), "object"


def parse(text: str, *, max_depth: Optional[int] = DEPTH_LIMIT_DEFAULT, allow_dup: bool = ALLOW_DUP_DEFAULT) -> Value:
    """
    Parse a complete GON or JSON document into a Value tree.

    Raises LexError or ParseError, both carrying line and column. The whole
    input must be consumed: anything after the root construct is an error.
    With max_depth=None, nesting too deep for the interpreter stack is
    reported as a ParseError at the innermost opener reached.
    """
    options = ParseOptions(max_depth, allow_dup)
    tokens = LookAhead(lex(text), _end_position(text))

    try:
        root, form = _parse_root(tokens, options)
    except RecursionError:
        deepest = tokens.last
        line, column = (deepest.line, deepest.column) if deepest else tokens.eof
        found = f"'{deepest.value}' nested too deep" if deepest else "nesting too deep"
        raise ParseError("nesting that fits the interpreter stack", found, line, column) from None

    trailing = tokens.peek()
    if trailing is not None:
        raise _fail("end of input after root value", trailing, tokens)

    logger.debug("parsed %s root", form)
    return root


def read_source(path, encoding: str = "utf-8") -> str:
    """Read a whole document. Raises OSError, or UnicodeDecodeError on bad bytes."""
    with open(path, "r", encoding=encoding) as fh:
        text = fh.read()
    logger.debug("loaded %s (%d characters)", path, len(text))
    return text


def load(path, *, encoding: str = "utf-8", **options) -> Value:
    """
    Read a whole file and parse it. OSError and UnicodeDecodeError from
    reading propagate unchanged; malformed content raises GonError.
    """
    return parse(read_source(path, encoding), **options)

# ---------------------------------------------------------------------------
# CLI ENTRYPOINT
# ---------------------------------------------------------------------------
_CLI_TYPES = {
    "str": str,
    "int": int,
    "float": float,
    "bool": bool,
}


def _split_path(path: str):
    """'weekdays.2' -> ('weekdays', 2)."""
    return tuple(int(step) if step.isdigit() else step for step in path.split("."))


def _cli(argv: List[str]) -> int:
    """
    Validate a GON/JSON file. Exit status 0 on success, 1 on any GON or I/O
    error, with the error written to stderr.
    """
    ap = argparse.ArgumentParser(description="GON / JSON validator")
    ap.add_argument("file", help="GON or JSON file to verify")
    ap.add_argument("--debug", action="store_true", help="dump token stream and exit")
    ap.add_argument("--dump", action="store_true", help="print the parsed tree")
    ap.add_argument("--get", metavar="PATH", help=(
        "print one value, e.g. little_factory.twirly_widgets or weekdays.2; "
        "steps are split on '.' and all-digit steps are array indices, so keys "
        "containing '.' or made only of digits cannot be reached"
    ))
    ap.add_argument("--type", choices=sorted(_CLI_TYPES), default="str", help="type to read --get as")
    ap.add_argument("--max-depth", type=int, default=DEPTH_LIMIT_DEFAULT, help=f"nesting limit (default {DEPTH_LIMIT_DEFAULT})")
    ap.add_argument("--reject-dup-keys", action="store_true")
    ap.add_argument("--log-level", default="WARNING", choices=["DEBUG", "INFO", "WARNING", "ERROR"])
    args = ap.parse_args(argv)

    logging.basicConfig(level=args.log_level, format="%(asctime)s - %(levelname)s - %(message)s")

    try:
        data = read_source(args.file)
    except OSError as exc:
        print(f"error: cannot read {args.file}: {exc.strerror or exc}", file=sys.stderr)
        return 1
    except UnicodeDecodeError as exc:
        print(f"error: cannot decode {args.file}: {exc}", file=sys.stderr)
        return 1

    try:
        if args.debug:
            for tok in lex(data):
                print(tok)
            return 0

        root = parse(data, max_depth=args.max_depth, allow_dup=not args.reject_dup_keys)
        if args.get:
            print(root.at(*_split_path(args.get)).get(_CLI_TYPES[args.type]))
        elif args.dump:
            print(json.dumps(root.to_python(), indent=2, ensure_ascii=False))
        else:
            print("OK")
        return 0
    except GonError as exc:
        print(f"{type(exc).__name__}: {exc}", file=sys.stderr)
        return 1


def main() -> int:
    return _cli(sys.argv[1:])

# ---------------------------------------------------------------------------
# MAIN GUARD
# ---------------------------------------------------------------------------
if __name__ == "__main__":
    sys.exit(main())
