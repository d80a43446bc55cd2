"""Abstract syntax tree produced by the formula compiler.

Nodes are immutable. Every node may carry the source context of the form it was
compiled from; source context never takes part in node equality.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from exprlang import WireMessage
from exprlang.errors import WireFormatError
from exprlang.types import wire
from exprlang.types.expression import Expression
from exprlang.types.symbol import Symbol


@dataclass(frozen=True)
class Node:
    source_context: Optional[str] = field(default=None, compare=False, kw_only=True)

    def to_wire(self, include_source: bool = True) -> WireMessage:
        msg: WireMessage = {}
        if include_source and self.source_context is not None:
            msg["source_context"] = {"context": self.source_context}
        return msg


@dataclass(frozen=True)
class Constant(Node):
    value: Expression

    def to_wire(self, include_source: bool = True) -> WireMessage:
        msg = super().to_wire(include_source)
        msg["constant"] = {"value": self.value.to_wire(include_source=False)}
        return msg


@dataclass(frozen=True)
class VariableRef(Node):
    symbol: Symbol

    def to_wire(self, include_source: bool = True) -> WireMessage:
        msg = super().to_wire(include_source)
        msg["variable"] = {"symbol": self.symbol.to_wire()}
        return msg


@dataclass(frozen=True)
class FunctionCall(Node):
    function: Node
    args: tuple[Node, ...] = ()

    def to_wire(self, include_source: bool = True) -> WireMessage:
        msg = super().to_wire(include_source)
        msg["funcall"] = {
            "function": self.function.to_wire(include_source),
            "positional_args": [a.to_wire(include_source) for a in self.args],
        }
        return msg


@dataclass(frozen=True)
class IfElse(Node):
    test: Node
    then: Node
    else_: Optional[Node] = None

    def to_wire(self, include_source: bool = True) -> WireMessage:
        msg = super().to_wire(include_source)
        body: WireMessage = {
            "test": self.test.to_wire(include_source),
            "then_expression": self.then.to_wire(include_source),
        }
        if self.else_ is not None:
            body["else_expression"] = self.else_.to_wire(include_source)
        msg["if_else"] = body
        return msg


_NODE_KEYS = ("constant", "variable", "funcall", "if_else")


def node_from_wire(msg: WireMessage) -> Node:
    """Rebuild an AST node from its wire message."""
    if not isinstance(msg, dict):
        raise WireFormatError(f"AST message must be a mapping, got {msg!r}")
    keys = [k for k in msg if k != "source_context"]
    if len(keys) != 1 or keys[0] not in _NODE_KEYS:
        raise WireFormatError(f"unsupported AST message {msg!r}")
    src = (msg.get("source_context") or {}).get("context")
    kind, body = keys[0], msg[keys[0]]
    try:
        match kind:
            case "constant":
                return Constant(Expression.from_wire(body["value"]), source_context=src)
            case "variable":
                return VariableRef(Symbol.from_wire(body["symbol"]), source_context=src)
            case "funcall":
                args = tuple(node_from_wire(a) for a in body.get("positional_args", []))
                return FunctionCall(node_from_wire(body["function"]), args, source_context=src)
            case _:
                else_msg = body.get("else_expression")
                return IfElse(
                    node_from_wire(body["test"]),
                    node_from_wire(body["then_expression"]),
                    None if else_msg is None else node_from_wire(else_msg),
                    source_context=src,
                )
    except (KeyError, TypeError, AttributeError) as err:
        raise WireFormatError(f"malformed {kind} message {body!r}: {err}") from err


class CompiledExpression:
    """Handle owning the AST built by one compile call."""

    __slots__ = ("_expr",)

    def __init__(self, expr: Node):
        self._expr = expr

    @property
    def expr(self) -> Node:
        return self._expr

    def ast_wire(self, include_source: bool = True) -> WireMessage:
        return self._expr.to_wire(include_source)

    def __eq__(self, other: object) -> bool:
        return isinstance(other, CompiledExpression) and self._expr == other._expr

    __hash__ = None

    def __repr__(self):
        return f"CompiledExpression({self._expr!r})"

    def __str__(self):
        return wire.dumps(self.ast_wire())
