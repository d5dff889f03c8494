# gon_value.py
# Value tree produced by the GON parser, plus the accessor layer that
# navigates it and reads scalars as Python types on demand.
#
# =============================================================================
#  DATA MODEL
# =============================================================================
#
# A parsed document is a tree of three node kinds:
#
#   Object  ordered (key, Value) pairs; keys may repeat, lookup takes the first
#   Array   ordered Values
#   Scalar  the token text, quotes stripped and escapes resolved
#
# Scalars never store a converted number or boolean. Conversion happens at
# the call site (`node.get(int)`), so the same scalar can be read as int,
# float, Decimal or str without one reading constraining another.
#
# Nodes are frozen dataclasses: equality is structural, and a tree can be
# shared freely once built.
#
# Two access styles report identical errors:
#   raising     node["key"], node[0], node.at(...), node.get(T)
#   Result      node.find(key), node.try_get(T)
# =============================================================================

import dataclasses
import re
import types
from dataclasses import dataclass, field
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Iterator, Tuple, Union, get_args, get_origin, get_type_hints

from gon_errors import ConversionError, GonError, GonLookupError

# ---------------------------------------------------------------------------
# RESULT CARRIER
# ---------------------------------------------------------------------------
class Result:
    """
    Outcome of a fallible accessor call: either a value or the GonError the
    raising accessor would have thrown.
    """
    __slots__ = ("is_error", "_value", "_error")

    def __init__(self, is_error: bool, value: Any = None, error: GonError = None):
        self.is_error = is_error
        self._value = value
        self._error = error

    @staticmethod
    def from_value(value: Any) -> "Result":
        return Result(False, value=value)

    @staticmethod
    def from_error(error: GonError) -> "Result":
        return Result(True, error=error)

    def value(self) -> Any:
        """Return the value, re-raising the stored error if there is none."""
        if self.is_error:
            raise self._error
        return self._value

    def value_or(self, default: Any) -> Any:
        return default if self.is_error else self._value

    def error(self) -> GonError:
        if not self.is_error:
            raise RuntimeError(f"Result was value: {self._value!r}")
        return self._error

    def __repr__(self) -> str:
        if self.is_error:
            return f"error ({self._error!r})"
        return f"value ({self._value!r})"

# ---------------------------------------------------------------------------
# NODES
# ---------------------------------------------------------------------------
def _path_repr(path) -> str:
    out = []
    for step in path:
        if isinstance(step, int):
            out.append(f"[{step}]")
        else:
            out.append(f".{step}" if out else str(step))
    return "".join(out)


class Value:
    """Common accessor surface of Object, Array and Scalar."""
    __slots__ = ()
    kind = "value"

    # -- navigation -------------------------------------------------------

    def __getitem__(self, key):
        raise GonLookupError(f"cannot index {self.kind} with {key!r}", key)

    def find(self, key) -> Result:
        """Like node[key], but returns a Result instead of raising."""
        try:
            return Result.from_value(self[key])
        except GonLookupError as exc:
            return Result.from_error(exc)

    def at(self, *path) -> "Value":
        """
        Walk a chain of keys and indices, e.g. root.at("weekdays", 2).

        The lookup error names the path walked up to the failing step.
        """
        node = self
        for depth, step in enumerate(path):
            try:
                node = node[step]
            except GonLookupError as exc:
                where = _path_repr(path[:depth + 1])
                raise GonLookupError(f"{exc.message} (path {where})", step) from None
        return node

    def get_all(self, key: str) -> Tuple["Value", ...]:
        raise GonLookupError(f"cannot look up key {key!r} in {self.kind}", key)

    # -- typed extraction -------------------------------------------------

    def get(self, target=str):
        """
        Read this node as `target`.

        Scalars convert to str, int, float, Decimal, bool and Enum members;
        Arrays to list/tuple; Objects to dict and dataclasses. Raises
        ConversionError when the node does not fit the target.
        """
        return _convert(self, target)

    def try_get(self, target=str) -> Result:
        try:
            return Result.from_value(_convert(self, target))
        except ConversionError as exc:
            return Result.from_error(exc)

    def to_python(self):
        raise NotImplementedError


@dataclass(frozen=True)
class Object(Value):
    pairs: Tuple[Tuple[str, Value], ...] = ()
    _index: Dict[str, int] = field(init=False, repr=False, compare=False)

    kind = "object"

    def __post_init__(self):
        index = {}
        for position, (key, _) in enumerate(self.pairs):
            index.setdefault(key, position)
        object.__setattr__(self, "_index", index)

    def __getitem__(self, key):
        if not isinstance(key, str):
            raise GonLookupError(f"cannot index object by position {key!r}", key)
        position = self._index.get(key)
        if position is None:
            raise GonLookupError(f"key {key!r} not found in object", key)
        return self.pairs[position][1]

    def get_all(self, key: str) -> Tuple[Value, ...]:
        return tuple(v for k, v in self.pairs if k == key)

    def __contains__(self, key) -> bool:
        return key in self._index

    def __iter__(self) -> Iterator[str]:
        return (k for k, _ in self.pairs)

    def __len__(self) -> int:
        return len(self.pairs)

    def keys(self) -> Tuple[str, ...]:
        return tuple(k for k, _ in self.pairs)

    def values(self) -> Tuple[Value, ...]:
        return tuple(v for _, v in self.pairs)

    def items(self) -> Tuple[Tuple[str, Value], ...]:
        return self.pairs

    def to_python(self) -> Dict[str, Any]:
        out = {}
        for key, value in self.pairs:
            if key not in out:
                out[key] = value.to_python()
        return out


@dataclass(frozen=True)
class Array(Value):
    items: Tuple[Value, ...] = ()

    kind = "array"

    def __getitem__(self, index):
        if not isinstance(index, int) or isinstance(index, bool):
            raise GonLookupError(f"cannot index array by key {index!r}", index)
        if not 0 <= index < len(self.items):
            raise GonLookupError(f"index {index} out of range for array of length {len(self.items)}", index)
        return self.items[index]

    def __iter__(self) -> Iterator[Value]:
        return iter(self.items)

    def __len__(self) -> int:
        return len(self.items)

    def to_python(self):
        return [item.to_python() for item in self.items]


@dataclass(frozen=True)
class Scalar(Value):
    text: str

    kind = "scalar"

    def __str__(self) -> str:
        return self.text

    def to_python(self) -> str:
        return self.text

# ---------------------------------------------------------------------------
# SCALAR PARSE RULES
# ---------------------------------------------------------------------------
# Each rule raises ValueError (or ArithmeticError for Decimal) on bad text.
_INT_RE = re.compile(r"[+-]?[0-9]+")

_BOOL_LITERALS = {"true": True, "false": False}

_NULL = Scalar("null")


def _parse_int(text: str) -> int:
    if not _INT_RE.fullmatch(text):
        raise ValueError(text)
    return int(text)


def _reject_loose_numbers(text: str) -> None:
    # float() and Decimal() tolerate padding and digit separators; GON does not
    if text != text.strip() or "_" in text:
        raise ValueError(text)


def _parse_float(text: str) -> float:
    _reject_loose_numbers(text)
    return float(text)


def _parse_decimal(text: str) -> Decimal:
    _reject_loose_numbers(text)
    return Decimal(text)


def _parse_bool(text: str) -> bool:
    if text not in _BOOL_LITERALS:
        raise ValueError(text)
    return _BOOL_LITERALS[text]


_SCALAR_RULES = {
    str: str,
    int: _parse_int,
    float: _parse_float,
    Decimal: _parse_decimal,
    bool: _parse_bool,
}

# ---------------------------------------------------------------------------
# CONVERSION DISPATCH
# ---------------------------------------------------------------------------
def _type_name(target) -> str:
    if get_origin(target) is not None:
        return str(target).replace("typing.", "")
    return getattr(target, "__name__", repr(target))


def _mismatch(node: Value, target, wanted: str) -> ConversionError:
    return ConversionError(_type_name(target), f"<{node.kind}>", f"expected {wanted}, found {node.kind}")


def _convert(node: Value, target):
    origin = get_origin(target)
    if origin is not None:
        return _convert_generic(node, target, origin, get_args(target))

    if isinstance(target, str):
        raise TypeError(f"get() takes a target type, not a key; use node[{target!r}] or node.find({target!r})")
    if not isinstance(target, type):
        raise TypeError(f"unsupported conversion target: {target!r}")

    if issubclass(target, Value):
        if not isinstance(node, target):
            raise _mismatch(node, target, target.kind)
        return node
    if issubclass(target, Enum):
        return _convert_enum(node, target)
    if dataclasses.is_dataclass(target):
        return _convert_dataclass(node, target)
    if target is list:
        return _convert_generic(node, target, list, ())
    if target is tuple:
        return _convert_generic(node, target, tuple, ())
    if target is dict:
        return _convert_generic(node, target, dict, ())

    rule = _SCALAR_RULES.get(target)
    if rule is None:
        raise TypeError(f"unsupported conversion target: {target!r}")
    if not isinstance(node, Scalar):
        raise _mismatch(node, target, "scalar")
    try:
        return rule(node.text)
    except (ValueError, ArithmeticError):
        raise ConversionError(target.__name__, node.text) from None


def _convert_enum(node: Value, target):
    if not isinstance(node, Scalar):
        raise _mismatch(node, target, "scalar")
    member = target.__members__.get(node.text)
    if member is None:
        choices = ", ".join(target.__members__)
        raise ConversionError(target.__name__, node.text, f"expected one of {choices}")
    return member


def _convert_dataclass(node: Value, target):
    if not isinstance(node, Object):
        raise _mismatch(node, target, "object")
    hints = get_type_hints(target)
    kwargs = {}
    for f in dataclasses.fields(target):
        if not f.init:
            continue
        if f.name not in node:
            if f.default is dataclasses.MISSING and f.default_factory is dataclasses.MISSING:
                raise ConversionError(target.__name__, "<object>", f"missing field {f.name!r}")
            continue
        kwargs[f.name] = _convert(node[f.name], hints.get(f.name, Value))
    return target(**kwargs)


def _convert_generic(node: Value, target, origin, args):
    if origin is Union or origin is types.UnionType:
        return _convert_union(node, target, args)

    if origin is list:
        if not isinstance(node, Array):
            raise _mismatch(node, target, "array")
        item_type = args[0] if args else Value
        return [_convert(item, item_type) for item in node.items]

    if origin is tuple:
        if not isinstance(node, Array):
            raise _mismatch(node, target, "array")
        if not args or (len(args) == 2 and args[1] is Ellipsis):
            item_type = args[0] if args else Value
            return tuple(_convert(item, item_type) for item in node.items)
        if len(args) != len(node.items):
            raise ConversionError(
                _type_name(target),
                f"<array of {len(node.items)}>",
                f"expected {len(args)} elements, found {len(node.items)}",
            )
        return tuple(_convert(item, t) for item, t in zip(node.items, args))

    if origin is dict:
        if args and args[0] is not str:
            raise TypeError(f"object keys are strings, cannot convert to {_type_name(target)}")
        if not isinstance(node, Object):
            raise _mismatch(node, target, "object")
        value_type = args[1] if args else Value
        out = {}
        for key, value in node.pairs:
            if key not in out:
                out[key] = _convert(value, value_type)
        return out

    raise TypeError(f"unsupported conversion target: {target!r}")


def _convert_union(node: Value, target, args):
    candidates = [a for a in args if a is not type(None)]
    # JSON null; a quoted "null" reads the same, the token kind is not kept
    if len(candidates) < len(args) and node == _NULL:
        return None
    for candidate in candidates:
        try:
            return _convert(node, candidate)
        except ConversionError:
            continue
    text = node.text if isinstance(node, Scalar) else f"<{node.kind}>"
    raise ConversionError(_type_name(target), text, "no alternative matched")
