"""Expression value model for exprlang.

An Expression is a closed tagged union over booleans, integers of several wire
widths, single and double precision floats, byte strings, strings, Symbols and
ExprLists. Each Expression knows its wire kind (the key it occupies in a wire
message) and its native Python value; the wire message is regenerated from the
two on demand so the value model and the wire form cannot drift apart.

Integer widths all read back as Python `int`. Single precision floats read back
as `numpy.float32` so that their rounding is kept; doubles read back as `float`.
"""

from __future__ import annotations

import math
from decimal import Decimal
from typing import Iterable, Iterator, Optional

import numpy as np

from exprlang import NativeValue, WireMessage
from exprlang.errors import WireFormatError
from exprlang.types.symbol import Symbol

# Wire kinds for integers and the numpy dtype that bounds each of them.
INTEGER_KINDS: dict[str, type] = {
    "int32": np.int32,
    "int64": np.int64,
    "uint32": np.uint32,
    "uint64": np.uint64,
    "sint32": np.int32,
    "sint64": np.int64,
    "fixed32": np.uint32,
    "fixed64": np.uint64,
    "sfixed32": np.int32,
    "sfixed64": np.int64,
}
FLOAT_KINDS = ("float", "double")
SCALAR_KINDS = ("bool", *INTEGER_KINDS, *FLOAT_KINDS, "bytes", "string")
COMPOSITE_KINDS = ("symbol", "list")
EXPRESSION_KINDS = SCALAR_KINDS + COMPOSITE_KINDS

SOURCE_CONTEXT_KEY = "source_context"

# numpy dtype -> wire kind used by from_value for fixed-width numpy scalars.
_NUMPY_INTEGER_KINDS: dict[type, str] = {
    np.int8: "int32",
    np.int16: "int32",
    np.int32: "int32",
    np.int64: "int64",
    np.uint8: "uint32",
    np.uint16: "uint32",
    np.uint32: "uint32",
    np.uint64: "uint64",
}

_STRING_ESCAPES = {
    "\\": "\\\\",
    '"': '\\"',
    "\n": "\\n",
    "\t": "\\t",
    "\r": "\\r",
}


class ExprList:
    """An immutable, ordered sequence of Expressions."""

    __slots__ = ("_elems",)

    def __init__(self, elems: Iterable[Expression] = ()):
        elems = tuple(elems)
        for i, e in enumerate(elems):
            if not isinstance(e, Expression):
                raise TypeError(f"list element [{i}] must be an Expression, got {type(e).__name__}")
        self._elems = elems

    def __len__(self) -> int:
        return len(self._elems)

    def __iter__(self) -> Iterator[Expression]:
        return iter(self._elems)

    def __getitem__(self, index):
        if isinstance(index, slice):
            return ExprList(self._elems[index])
        return self._elems[index]

    def __eq__(self, other: object) -> bool:
        return isinstance(other, ExprList) and self._elems == other._elems

    def __repr__(self):
        return f"ExprList({self.expression_string()})"

    def __str__(self):
        return self.expression_string()

    def nth(self, n: int) -> Expression:
        return self._elems[n]

    def expression_string(self) -> str:
        return "(" + " ".join(e.expression_string() for e in self._elems) + ")"

    def to_wire(self, include_source: bool = True) -> WireMessage:
        return {"elements": [e.to_wire(include_source) for e in self._elems]}


class Expression:
    """A single expression value; see the module docstring."""

    __slots__ = ("_kind", "_value", "_source")

    def __init__(self, kind: str, value: NativeValue, source_context: Optional[str] = None):
        if kind not in EXPRESSION_KINDS:
            raise WireFormatError(f"unsupported expression kind {kind!r}")
        _check_value(kind, value)
        self._kind = kind
        self._value = value
        self._source = source_context

    # --- inspection ---
    @property
    def kind(self) -> str:
        return self._kind

    @property
    def value(self) -> NativeValue:
        return self._value

    @property
    def source_context(self) -> Optional[str]:
        return self._source

    def symbol(self) -> Optional[Symbol]:
        """Return the Symbol when this is a symbol expression, else None."""
        return self._value if self._kind == "symbol" else None

    def as_list(self) -> Optional[ExprList]:
        return self._value if self._kind == "list" else None

    def is_scalar(self) -> bool:
        return self._kind in SCALAR_KINDS

    def with_source_context(self, source_context: Optional[str]) -> Expression:
        return Expression(self._kind, self._value, source_context)

    # --- printing ---
    def expression_string(self) -> str:
        kind, v = self._kind, self._value
        if kind in COMPOSITE_KINDS:
            return v.expression_string()
        if kind == "string":
            return quote_string(v)
        if kind == "bool":
            return "true" if v else "false"
        if kind in FLOAT_KINDS:
            return format_float(v)
        return str(v)

    def __str__(self):
        return self.expression_string()

    def __repr__(self):
        return f"Expression({self.expression_string()})"

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, Expression):
            return NotImplemented
        return self.to_wire(include_source=False) == other.to_wire(include_source=False)

    __hash__ = None

    # --- wire form ---
    def to_wire(self, include_source: bool = True) -> WireMessage:
        kind, v = self._kind, self._value
        if kind == "symbol":
            payload = v.to_wire()
        elif kind == "list":
            payload = v.to_wire(include_source)
        elif kind == "float":
            payload = float(v)
        else:
            payload = v
        msg: WireMessage = {kind: payload}
        if include_source and self._source is not None:
            msg[SOURCE_CONTEXT_KEY] = self._source
        return msg

    @classmethod
    def from_wire(cls, msg: WireMessage) -> Expression:
        """Build an Expression from a wire message, validating the variant."""
        if not isinstance(msg, dict):
            raise WireFormatError(f"expression message must be a mapping, got {msg!r}")
        keys = [k for k in msg if k != SOURCE_CONTEXT_KEY]
        if len(keys) != 1 or keys[0] not in EXPRESSION_KINDS:
            raise WireFormatError(f"unsupported expression message {msg!r}")
        kind = keys[0]
        return cls(kind, _parse_wire_value(kind, msg[kind]), msg.get(SOURCE_CONTEXT_KEY))


def _parse_wire_value(kind: str, raw) -> NativeValue:
    if kind == "bool":
        if not isinstance(raw, bool):
            raise WireFormatError(f"bool value must be a boolean, got {raw!r}")
        return raw
    if kind in INTEGER_KINDS:
        if isinstance(raw, bool) or not isinstance(raw, (int, np.integer)):
            raise WireFormatError(f"{kind} value must be an integer, got {raw!r}")
        return _check_integer_range(kind, int(raw), WireFormatError)
    if kind in FLOAT_KINDS:
        if isinstance(raw, bool) or not isinstance(raw, (int, float, np.floating)):
            raise WireFormatError(f"{kind} value must be a number, got {raw!r}")
        return np.float32(raw) if kind == "float" else float(raw)
    if kind == "bytes":
        if not isinstance(raw, (bytes, bytearray)):
            raise WireFormatError(f"bytes value must be bytes, got {raw!r}")
        return bytes(raw)
    if kind == "string":
        if not isinstance(raw, str):
            raise WireFormatError(f"string value must be a str, got {raw!r}")
        return raw
    if kind == "symbol":
        return Symbol.from_wire(raw)
    # list
    if not isinstance(raw, dict):
        raise WireFormatError(f"list message must be a mapping, got {raw!r}")
    raw_elems = raw.get("elements", [])
    if not isinstance(raw_elems, list):
        raise WireFormatError(f"list elements must be a list, got {raw_elems!r}")
    elems = []
    for i, sub in enumerate(raw_elems):
        try:
            elems.append(Expression.from_wire(sub))
        except WireFormatError as err:
            raise WireFormatError(f"error parsing list[{i}]: {err}") from err
    return ExprList(elems)


def _check_integer_range(kind: str, v: int, error=OverflowError) -> int:
    info = np.iinfo(INTEGER_KINDS[kind])
    if v < info.min or v > info.max:
        raise error(f"{v} out of range for {kind} [{info.min}, {info.max}]")
    return v


# Native value type held by each non-integer kind.
_KIND_VALUE_TYPES: dict[str, type] = {
    "bool": bool,
    "float": np.float32,
    "double": float,
    "bytes": bytes,
    "string": str,
    "symbol": Symbol,
    "list": ExprList,
}


def _check_value(kind: str, value: NativeValue) -> None:
    """Reject a native value that does not belong to `kind`; use the from_* constructors."""
    if kind in INTEGER_KINDS:
        if isinstance(value, bool) or not isinstance(value, int):
            raise TypeError(f"{kind} expression requires an int value, got {value!r}")
        _check_integer_range(kind, value)
        return
    expected = _KIND_VALUE_TYPES[kind]
    if not isinstance(value, expected):
        raise TypeError(f"{kind} expression requires a {expected.__name__} value, got {value!r}")


# -------------------------------
# Printing helpers
# -------------------------------
def quote_string(s: str) -> str:
    out = []
    for ch in s:
        esc = _STRING_ESCAPES.get(ch)
        if esc is not None:
            out.append(esc)
        elif ord(ch) < 0x20 or ord(ch) == 0x7F:
            out.append(f"\\x{ord(ch):02x}")
        else:
            out.append(ch)
    return '"' + "".join(out) + '"'


def format_float(v) -> str:
    """Shortest round-trip text; exponent form only below 1e-4 or from 1e21."""
    x = float(v)
    if math.isnan(x):
        return "NaN"
    if math.isinf(x):
        return "+Inf" if x > 0 else "-Inf"
    # numpy prints the shortest digits for the scalar's own width.
    digits = str(v) if isinstance(v, np.floating) else repr(x)
    d = Decimal(digits).normalize()
    exp = d.adjusted()
    if -4 <= exp < 21:
        return format(d, "f")
    sign, ds, _ = d.as_tuple()
    mantissa = str(ds[0])
    if len(ds) > 1:
        mantissa += "." + "".join(str(n) for n in ds[1:])
    return f"{'-' if sign else ''}{mantissa}e{'-' if exp < 0 else '+'}{abs(exp):02d}"


# -------------------------------
# Constructors
# -------------------------------
def _from_integer(kind: str, v) -> Expression:
    if isinstance(v, bool) or not isinstance(v, (int, np.integer)):
        raise TypeError(f"{kind} expression requires an integer, got {v!r}")
    return Expression(kind, _check_integer_range(kind, int(v)))


def from_bool(v: bool) -> Expression:
    return Expression("bool", bool(v))


def from_int(v: int) -> Expression:
    return _from_integer("int64", v)


def from_int32(v: int) -> Expression:
    return _from_integer("int32", v)


def from_int64(v: int) -> Expression:
    return _from_integer("int64", v)


def from_uint32(v: int) -> Expression:
    return _from_integer("uint32", v)


def from_uint64(v: int) -> Expression:
    return _from_integer("uint64", v)


def from_sint32(v: int) -> Expression:
    return _from_integer("sint32", v)


def from_sint64(v: int) -> Expression:
    return _from_integer("sint64", v)


def from_fixed32(v: int) -> Expression:
    return _from_integer("fixed32", v)


def from_fixed64(v: int) -> Expression:
    return _from_integer("fixed64", v)


def from_sfixed32(v: int) -> Expression:
    return _from_integer("sfixed32", v)


def from_sfixed64(v: int) -> Expression:
    return _from_integer("sfixed64", v)


def from_float32(v: float) -> Expression:
    return Expression("float", np.float32(v))


def from_float64(v: float) -> Expression:
    return Expression("double", float(v))


def from_bytes(v: bytes) -> Expression:
    return Expression("bytes", bytes(v))


def from_string(v: str) -> Expression:
    return Expression("string", str(v))


def from_symbol(v: Symbol) -> Expression:
    return Expression("symbol", v)


def from_list(v: ExprList | Iterable[Expression]) -> Expression:
    if not isinstance(v, ExprList):
        v = ExprList(v)
    return Expression("list", v)


def from_value(v: NativeValue) -> Expression:
    """Construct an Expression from any supported native Python value."""
    if isinstance(v, Expression):
        return v
    if isinstance(v, (bool, np.bool_)):
        return from_bool(bool(v))
    if isinstance(v, np.integer):
        return _from_integer(_NUMPY_INTEGER_KINDS.get(type(v), "int64"), v)
    if isinstance(v, int):
        return from_int(v)
    if isinstance(v, np.float32):
        return from_float32(v)
    if isinstance(v, (float, np.floating)):
        return from_float64(v)
    if isinstance(v, str):
        return from_string(v)
    if isinstance(v, (bytes, bytearray)):
        return from_bytes(v)
    if isinstance(v, Symbol):
        return from_symbol(v)
    if isinstance(v, ExprList):
        return from_list(v)
    if isinstance(v, (list, tuple)):
        return from_list(from_value(x) for x in v)
    raise TypeError(f"cannot construct an expression from {type(v).__name__}: {v!r}")
