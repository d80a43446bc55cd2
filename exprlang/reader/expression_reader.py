"""Conversion from reader forms to Expressions.

This is the boundary between the generic reader and the value model: strings
stay strings, exact integers become int64 expressions, floating literals become
doubles, symbol literals go through the symbol grammar, and lists convert each
child in turn.
"""

from __future__ import annotations

from typing import Iterator

import numpy as np

from exprlang.errors import ExprError, ExprParseError
from exprlang.reader.forms import Form, ListForm, NumberForm, NumberKind, StringForm, SymbolForm
from exprlang.reader.parser import FormReader
from exprlang.types.expression import (
    Expression,
    from_float64,
    from_int,
    from_list,
    from_string,
    from_symbol,
)
from exprlang.types.symbol import parse_symbol

_INT64 = np.iinfo(np.int64)


def parse_form(form: Form) -> Expression:
    """Convert a single form (recursively) into an Expression."""
    source = str(form.position)
    if isinstance(form, StringForm):
        return from_string(form.value).with_source_context(source)
    if isinstance(form, NumberForm):
        return _parse_number(form).with_source_context(source)
    if isinstance(form, SymbolForm):
        return from_symbol(parse_symbol(form.literal)).with_source_context(source)
    if isinstance(form, ListForm):
        exprs = []
        for i, subform in enumerate(form.subforms):
            try:
                exprs.append(parse_form(subform))
            except ExprError as err:
                raise ExprParseError(f"{subform.position}: error parsing form[{i}]: {err}") from err
        return from_list(exprs).with_source_context(source)
    raise ExprParseError(f"unsupported form {form!r}")


def _parse_number(form: NumberForm) -> Expression:
    if form.kind is NumberKind.INT:
        v = form.number()
        if v < _INT64.min or v > _INT64.max:
            raise ExprParseError(f"integer constant {form.literal} overflows int64")
        return from_int(v)
    if form.kind is NumberKind.FLOAT:
        return from_float64(form.number())
    raise ExprParseError(f"unsupported number value: {form.literal}")


def parse_sexpression(text: str, filename: str = "") -> Expression:
    """Parse exactly one S-expression from `text`."""
    reader = FormReader(text, filename)
    try:
        form = reader.read_form()
        if form is None:
            raise ExprParseError("error reading S-expression: no form found")
        extra = reader.peek()
    except ExprParseError:
        raise
    except ExprError as err:
        raise ExprParseError(f"error reading S-expression: {err}") from err
    if extra is not None:
        raise ExprParseError(
            f"error reading S-expression: unexpected content after first form at {reader.lines.position(extra.offset)}"
        )
    return parse_form(form)


def parse_all(text: str, filename: str = "") -> Iterator[Expression]:
    """Yield every top-level form in `text` as an Expression."""
    for form in FormReader(text, filename).read_all():
        yield parse_form(form)


def must_parse(text: str) -> Expression:
    """Parse a trusted literal, raising ValueError on failure.

    Only for literals written in code (tests, bootstrapping); never use this on
    untrusted input.
    """
    try:
        return parse_sexpression(text)
    except ExprError as err:
        raise ValueError(f"must_parse({text!r}): {err}") from err
