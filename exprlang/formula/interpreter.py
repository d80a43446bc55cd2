from __future__ import annotations

from typing import Any, Callable, Optional

from exprlang import Value
from exprlang.formula.ast import CompiledExpression
from exprlang.formula.compiler import compile
from exprlang.formula.defaults import default_environment
from exprlang.formula.environment import FnDef, LexicalEnvironment
from exprlang.formula.evaluator import evaluate
from exprlang.reader.expression_reader import parse_all


class Formula:
    """
    Reads formula source text and evaluates or compiles every top-level form
    against one lexical environment.
    """

    def __init__(self, env: Optional[LexicalEnvironment] = None, filename: str = ""):
        self.env: LexicalEnvironment = env if env is not None else default_environment()
        self.filename = filename

    def define_function(self, fn: FnDef) -> None:
        """Extend this session's environment; other sessions are unaffected."""
        self.env = self.env.with_function_def(fn)

    def _run(self, code: str, step: Callable[[Any, LexicalEnvironment], Any]):
        results = [step(exp, self.env) for exp in parse_all(code, self.filename)]
        if not results:
            return None
        if len(results) == 1:
            return results[0]
        return results

    def eval(self, code: str) -> Value:
        """Evaluate each form; a single result is returned unwrapped."""
        return self._run(code, evaluate)

    def compile(self, code: str) -> CompiledExpression | list[CompiledExpression] | None:
        return self._run(code, compile)
