"""Lexical environment for the formula language.

A LexicalEnvironment is an immutable chain of bindings. Each node holds one
binding of a Symbol to a function or special form, plus a link to the node it
extends. Extending never mutates: `with_binding` returns a new node, so many
environments may share the same prefix, and they may be shared across threads.
Resolution walks from the newest binding outward, so later bindings shadow
earlier ones.
"""

from __future__ import annotations

import enum
import logging
from io import StringIO
from typing import Any, Callable, Iterable, Iterator, NamedTuple, Optional

from exprlang import Value
from exprlang.types.symbol import Namespace, Symbol

logger = logging.getLogger(__name__)

# Unqualified symbols resolve in this namespace.
NAMESPACE: Namespace = "formula"


def sym(name: str) -> Symbol:
    """A symbol in the formula namespace."""
    return Symbol(name, NAMESPACE)


def normalize_symbol(s: Symbol) -> Symbol:
    if s.namespace == "":
        return s.with_namespace(NAMESPACE)
    return s


class BindingKind(enum.Flag):
    FUNCTION = enum.auto()
    SPECIAL_FORM = enum.auto()


# Special forms and functions share one resolution namespace when compiling.
FUNCTION_OR_SPECIAL_FORM = BindingKind.FUNCTION | BindingKind.SPECIAL_FORM


class FnDef(NamedTuple):
    """A function binding: impl(ctx, args) -> value."""
    name: Symbol
    impl: Callable[[Any, list[Value]], Value]


class SpecialFormDef(NamedTuple):
    """A special form binding: compile(cctx, form) -> AST node."""
    name: Symbol
    compile: Callable[[Any, Any], Any]


class Binding(NamedTuple):
    symbol: Symbol
    kind: BindingKind
    payload: Any


class LexicalEnvironment:
    """One link in an append-only chain of bindings."""

    __slots__ = ("binding", "parent", "_depth")

    def __init__(self, binding: Optional[Binding] = None, parent: Optional[LexicalEnvironment] = None):
        self.binding = binding
        self.parent = parent
        self._depth = 0 if parent is None else parent._depth + (binding is not None)

    def with_binding(self, binding: Binding) -> LexicalEnvironment:
        b = binding._replace(symbol=normalize_symbol(binding.symbol))
        return LexicalEnvironment(b, self)

    def with_bindings(self, bindings: Iterable[Binding]) -> LexicalEnvironment:
        env = self
        for b in bindings:
            env = env.with_binding(b)
        return env

    def with_function_def(self, fn: FnDef) -> LexicalEnvironment:
        return self.with_binding(Binding(fn.name, BindingKind.FUNCTION, fn))

    def with_special_form(self, sf: SpecialFormDef) -> LexicalEnvironment:
        return self.with_binding(Binding(sf.name, BindingKind.SPECIAL_FORM, sf))

    def bindings(self) -> Iterator[Binding]:
        """Iterate bindings newest first."""
        env: Optional[LexicalEnvironment] = self
        while env is not None:
            if env.binding is not None:
                yield env.binding
            env = env.parent

    def resolve_binding(self, symbol: Symbol, kind: BindingKind) -> Optional[Binding]:
        target = normalize_symbol(symbol)
        for b in self.bindings():
            if b.symbol == target and b.kind & kind:
                return b
        return None

    def resolve(self, symbol: Symbol, kind: BindingKind) -> Optional[Any]:
        """Return the payload (FnDef or SpecialFormDef) bound to `symbol`, or None."""
        b = self.resolve_binding(symbol, kind)
        return None if b is None else b.payload

    def resolve_fn_def(self, symbol: Symbol) -> Optional[FnDef]:
        return self.resolve(symbol, BindingKind.FUNCTION)

    def __len__(self) -> int:
        return self._depth

    def __str__(self) -> str:
        with StringIO() as buffer:
            buffer.write("{")
            first = True
            for b in self.bindings():
                if not first:
                    buffer.write(", ")
                buffer.write(f"{b.symbol}: {b.kind.name.lower()}")
                first = False
            buffer.write("}")
            return buffer.getvalue()

    def __repr__(self) -> str:
        return f"<LexicalEnvironment {len(self)} bindings>"


EMPTY_ENVIRONMENT = LexicalEnvironment()


def new_environment(functions: Iterable[FnDef], special_forms: Iterable[SpecialFormDef]) -> LexicalEnvironment:
    """Seed an environment: functions first, then special forms (later wins)."""
    env = EMPTY_ENVIRONMENT
    env = env.with_bindings(Binding(f.name, BindingKind.FUNCTION, f) for f in functions)
    env = env.with_bindings(Binding(s.name, BindingKind.SPECIAL_FORM, s) for s in special_forms)
    logger.debug("created lexical environment with %d bindings", len(env))
    return env
