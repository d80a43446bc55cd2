"""Compiler from Expressions to the formula AST.

Compilation is a single pass over the expression tree. Literals become
Constants, symbols become VariableRefs, and lists are dispatched on their
operator: special forms compile themselves, anything else bound as a function
becomes a FunctionCall.
"""

from __future__ import annotations

import logging
from typing import Optional

from exprlang.errors import CompileError, ExprError, ResolutionError
from exprlang.formula.ast import CompiledExpression, Constant, FunctionCall, Node, VariableRef
from exprlang.formula.environment import (
    FUNCTION_OR_SPECIAL_FORM,
    BindingKind,
    LexicalEnvironment,
)
from exprlang.types.expression import (
    INTEGER_KINDS,
    Expression,
    ExprList,
    from_bool,
    from_bytes,
    from_float32,
    from_float64,
    from_int,
    from_string,
)
from exprlang.types.symbol import Symbol

logger = logging.getLogger(__name__)


class CompileContext:
    """State carried down the tree while compiling."""

    __slots__ = ("lex_env",)

    def __init__(self, lex_env: LexicalEnvironment):
        self.lex_env = lex_env

    def error(self, cls: type[ExprError], message: str) -> ExprError:
        return cls(message)


def compile(exp: Expression, env: Optional[LexicalEnvironment] = None) -> CompiledExpression:
    """Compile `exp` into an AST; env defaults to the builtin environment."""
    if env is None:
        # Lazy import to avoid circular imports
        from exprlang.formula.defaults import default_environment
        env = default_environment()
    return CompiledExpression(compile_expr(CompileContext(env), exp))


def compile_expr(cctx: CompileContext, exp: Expression) -> Node:
    if exp.is_scalar():
        return compile_const(cctx, exp)

    sym = exp.symbol()
    if sym is not None:
        return compiled_variable_ref(cctx, exp, sym)

    lst = exp.as_list()
    if lst is None:
        raise cctx.error(CompileError, f"unsupported form: {exp}")
    if len(lst) == 0:
        raise cctx.error(CompileError, "unsupported form: empty list")
    operator = lst[0].symbol()
    if operator is None:
        raise cctx.error(CompileError, f"first argument in an s-expression must be a symbol, got {lst[0]}")

    binding = cctx.lex_env.resolve_binding(operator, FUNCTION_OR_SPECIAL_FORM)
    if binding is None:
        raise cctx.error(ResolutionError, f"unsupported operator {operator} in form {exp}")
    if binding.kind is BindingKind.SPECIAL_FORM:
        logger.debug("compiling special form %s", binding.symbol)
        return binding.payload.compile(cctx, exp)
    fn = compiled_variable_ref(cctx, lst[0], operator)
    return compile_funcall(cctx, exp, fn, lst[1:])


def compile_funcall(cctx: CompileContext, form: Expression, fn: Node, args: ExprList) -> Node:
    arg_exprs = []
    for i, arg in enumerate(args):
        try:
            arg_exprs.append(compile_expr(cctx, arg))
        except ExprError as err:
            raise cctx.error(type(err), f"error compiling funcall argument {i}: {err}") from err
    return FunctionCall(fn, tuple(arg_exprs), source_context=form.source_context)


def compiled_variable_ref(cctx: CompileContext, form: Expression, sym: Symbol) -> Node:
    return VariableRef(sym, source_context=form.source_context)


def compile_const(cctx: CompileContext, form: Expression) -> Node:
    kind, v = form.kind, form.value
    try:
        if kind in INTEGER_KINDS:
            const = from_int(v)
        elif kind == "float":
            const = from_float32(v)
        elif kind == "double":
            const = from_float64(v)
        elif kind == "string":
            const = from_string(v)
        elif kind == "bytes":
            const = from_bytes(v)
        elif kind == "bool":
            const = from_bool(v)
        else:
            raise cctx.error(CompileError, f"unsupported type encountered while compiling constant: {v!r}")
    except OverflowError as err:
        raise cctx.error(CompileError, f"unsupported constant {form}: {err}") from err
    return Constant(const, source_context=form.source_context)
