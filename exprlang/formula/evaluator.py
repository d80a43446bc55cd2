"""Tree-walking evaluator for the formula language.

Literals evaluate to their native values. A non-empty list must name a function
bound in the lexical environment; its arguments are evaluated eagerly, left to
right, and passed to the function's implementation.
"""

from __future__ import annotations

from typing import Optional

from exprlang import Value
from exprlang.errors import EvalError, ExprError, ResolutionError
from exprlang.formula.environment import LexicalEnvironment
from exprlang.types.expression import Expression


class EvalContext:
    """Passed to builtin implementations during evaluation."""

    __slots__ = ("lex_env", "source_location")

    def __init__(self, lex_env: LexicalEnvironment, source_location: str = ""):
        self.lex_env = lex_env
        # Description of the source location relevant to the current evaluation.
        self.source_location = source_location

    def at(self, exp: Expression) -> EvalContext:
        return EvalContext(self.lex_env, exp.source_context or self.source_location)

    def error(self, cls: type[ExprError], message: str) -> ExprError:
        """Return an error of type `cls`, prefixed with the source location if known."""
        if self.source_location:
            message = f"{self.source_location}: {message}"
        return cls(message)

    def __str__(self):
        return f"EvalContext({self.source_location or '<unknown>'})"


def evaluate(exp: Expression, env: Optional[LexicalEnvironment] = None) -> Value:
    """Evaluate `exp`; env defaults to the builtin environment."""
    if env is None:
        # Lazy import to avoid circular imports
        from exprlang.formula.defaults import default_environment
        env = default_environment()
    return evaluate_in(EvalContext(env), exp)


def evaluate_in(ctx: EvalContext, exp: Expression) -> Value:
    if exp.is_scalar():
        return exp.value

    lst = exp.as_list()
    if lst is None:
        raise ctx.at(exp).error(EvalError, f"unsupported expression: {exp}")
    ctx = ctx.at(exp)
    if len(lst) == 0:
        raise ctx.error(EvalError, "unsupported form: empty list")
    operator = lst[0].symbol()
    if operator is None:
        raise ctx.error(EvalError, f"first argument in an s-expression must be a symbol, got {lst[0]}")
    fn = ctx.lex_env.resolve_fn_def(operator)
    if fn is None:
        raise ctx.error(ResolutionError, f"failed to resolve function {operator}")

    args = [evaluate_in(ctx, arg) for arg in lst[1:]]
    return fn.impl(ctx, args)
