"""Built-in functions for the formula language.

Numeric arguments of every width are normalized first: all integer widths
(Python int, numpy integers) become `int`, both float widths become `float`.
"""
from __future__ import annotations

import numpy as np

from exprlang import Value
from exprlang.errors import ExprTypeError
from exprlang.formula.environment import FnDef, sym


def normalize_number(v: Value) -> Value:
    """Collapse numeric widths to int or float; other values pass through."""
    if isinstance(v, (bool, np.bool_)):
        return v
    if isinstance(v, (int, np.integer)):
        return int(v)
    if isinstance(v, (float, np.floating)):
        return float(v)
    return v


def _is_number(v: Value) -> bool:
    return isinstance(v, (int, float)) and not isinstance(v, bool)


def _sum(ctx, name: str, args: list[Value]) -> Value:
    i_sum = 0
    f_sum = 0.0
    output_float = False
    for a in args:
        n = normalize_number(a)
        if isinstance(n, float):
            f_sum += n
            output_float = True
        elif _is_number(n):
            i_sum += n
        else:
            raise ctx.error(ExprTypeError, f"invalid type for argument to {name}: {a!r}")
    if output_float:
        return float(i_sum) + f_sum
    return i_sum


# -------------------------------
# Arithmetic
# -------------------------------
def add(ctx, args: list[Value]) -> Value:
    """(+ a b ...): sum; float if any argument is a float; 0 with no arguments."""
    return _sum(ctx, "+", args)


def sub(ctx, args: list[Value]) -> Value:
    """(- a): negation; (- a b ...): a minus the sum of the rest; 0 with no arguments."""
    if not args:
        return 0
    first = normalize_number(args[0])
    if not _is_number(first):
        raise ctx.error(ExprTypeError, f"invalid type for argument to -: {args[0]!r}")
    if len(args) == 1:
        return -first
    rest = _sum(ctx, "-", args[1:])
    if isinstance(first, float) or isinstance(rest, float):
        return float(first) - float(rest)
    return first - rest


BUILTIN_FUNCTIONS: tuple[FnDef, ...] = (
    FnDef(sym("+"), add),
    FnDef(sym("-"), sub),
)
