from __future__ import annotations

from dataclasses import dataclass

from exprlang.binding.binder import bind, sexpr_field
from exprlang.errors import ArityError, CompileError, ExprError
from exprlang.formula.ast import IfElse, Node
from exprlang.formula.compiler import CompileContext, compile_expr
from exprlang.formula.environment import SpecialFormDef, sym
from exprlang.types.expression import Expression
from exprlang.types.symbol import Symbol


@dataclass(frozen=True)
class IfElseForm:
    op: Symbol
    test: Expression
    rest: list[Expression] = sexpr_field("&rest")


def compile_if_else(cctx: CompileContext, form: Expression) -> Node:
    """(if TEST THEN [ELSE])"""
    try:
        parsed: IfElseForm = bind(form, IfElseForm)
    except ExprError as err:
        raise cctx.error(CompileError, f"error parsing if/else: {err}") from err
    if len(parsed.rest) == 0:
        raise cctx.error(ArityError, "error parsing if/else: must have a THEN form")
    if len(parsed.rest) > 2:
        raise cctx.error(ArityError, "error parsing if/else: must have only a THEN and ELSE form")

    def clause(name: str, exp: Expression) -> Node:
        try:
            return compile_expr(cctx, exp)
        except ExprError as err:
            raise cctx.error(type(err), f"error parsing if/else {name} clause: {err}") from err

    test = clause("TEST", parsed.test)
    then = clause("THEN", parsed.rest[0])
    else_ = clause("ELSE", parsed.rest[1]) if len(parsed.rest) == 2 else None
    return IfElse(test, then, else_, source_context=form.source_context)


if_form = SpecialFormDef(sym("if"), compile_if_else)
