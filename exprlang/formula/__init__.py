"""Formula: a small Lisp-like language with an evaluator and an AST compiler.

Formulas are simple expressions intended to be compiled into several target
languages. The same parsed Expression can be evaluated directly with `evaluate`
or lowered into an AST with `compile`.
"""

from __future__ import annotations

from .environment import NAMESPACE, BindingKind, FnDef, LexicalEnvironment, SpecialFormDef, sym
from .defaults import default_environment
from .ast import CompiledExpression, Constant, FunctionCall, IfElse, Node, VariableRef
from .compiler import compile
from .evaluator import EvalContext, evaluate
from .interpreter import Formula

__all__ = [
    "NAMESPACE",
    "BindingKind",
    "FnDef",
    "LexicalEnvironment",
    "SpecialFormDef",
    "sym",
    "default_environment",
    "CompiledExpression",
    "Constant",
    "FunctionCall",
    "IfElse",
    "Node",
    "VariableRef",
    "compile",
    "EvalContext",
    "evaluate",
    "Formula",
]
