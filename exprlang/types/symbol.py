from __future__ import annotations

import re
import sys

from exprlang import WireMessage
from exprlang.errors import ExprParseError, WireFormatError

# Symbol namespaces are plain strings.
Namespace = str

# Symbols written with an empty package name but an explicit leading colon are
# put into the "keyword" namespace, as is done in Common Lisp.
KEYWORD_NAMESPACE: Namespace = "keyword"

# symbols are of the form "a:b" "a::b" "a".
SYMBOL_RE = re.compile(r"^([^:]*)(::?)?(.*)$", re.DOTALL)


class Symbol:
    __slots__ = ("name", "namespace")

    def __init__(self, name: str, namespace: Namespace = ""):
        # Intern to ensure fast equality/hash and reduce memory
        self.name = sys.intern(name)
        self.namespace = sys.intern(namespace)

    def __eq__(self, other: object) -> bool:
        return (
            isinstance(other, Symbol)
            and self.name == other.name
            and self.namespace == other.namespace
        )

    def __hash__(self) -> int:
        return hash((self.name, self.namespace))

    def __repr__(self):
        if self.namespace:
            return f"Symbol({self.name!r}, {self.namespace!r})"
        return f"Symbol({self.name!r})"

    def __str__(self):
        return self.expression_string()

    def with_namespace(self, namespace: Namespace) -> Symbol:
        return Symbol(self.name, namespace)

    def expression_string(self) -> str:
        """Canonical text: `name`, `ns:name`, or `:name` for keywords."""
        ns = self.namespace
        if not ns:
            return self.name
        if ns == KEYWORD_NAMESPACE:
            ns = ""
        return f"{ns}:{self.name}"

    def to_wire(self) -> WireMessage:
        msg: WireMessage = {"name": self.name}
        if self.namespace:
            msg["namespace"] = self.namespace
        return msg

    @classmethod
    def from_wire(cls, msg: WireMessage) -> Symbol:
        if not isinstance(msg, dict):
            raise WireFormatError(f"symbol message must be a mapping, got {msg!r}")
        name, namespace = msg.get("name", ""), msg.get("namespace", "")
        if not isinstance(name, str) or not isinstance(namespace, str):
            raise WireFormatError(f"symbol name and namespace must be strings, got {msg!r}")
        return cls(name, namespace)


def parse_symbol(literal: str) -> Symbol:
    """Parse a symbol literal: `a`, `ns:a`, `ns::a`, or the keyword `:a`."""
    m = SYMBOL_RE.match(literal)
    if m is None:
        raise ExprParseError(f"bad symbol {literal!r}")
    namespace, sep, name = m.group(1), m.group(2), m.group(3)
    if not sep:
        return Symbol(namespace)
    if namespace == "":
        if sep != ":":
            raise ExprParseError(f"invalid symbol begins with two colons: {literal!r}")
        namespace = KEYWORD_NAMESPACE
    return Symbol(name, namespace)


def keyword(name: str) -> Symbol:
    return Symbol(name, KEYWORD_NAMESPACE)
