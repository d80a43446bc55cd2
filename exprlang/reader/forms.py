"""Generic form nodes produced by the reader.

Forms are untyped syntax: a string, a number, a symbol literal or a list of
forms. Each one remembers where it started in the source text.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


@dataclass(frozen=True)
class SourcePosition:
    filename: str = ""
    line: int = 1
    column: int = 1

    def __str__(self):
        return f"{self.filename}:{self.line}:{self.column}"


class NumberKind(Enum):
    INT = "int"
    FLOAT = "float"


@dataclass(frozen=True)
class Form:
    position: SourcePosition


@dataclass(frozen=True)
class StringForm(Form):
    value: str


@dataclass(frozen=True)
class NumberForm(Form):
    # The literal text as written; `kind` classifies it.
    literal: str
    kind: NumberKind

    def number(self) -> int | float:
        if self.kind is NumberKind.INT:
            return int(self.literal)
        return float(self.literal)


@dataclass(frozen=True)
class SymbolForm(Form):
    literal: str


@dataclass(frozen=True)
class ListForm(Form):
    subforms: tuple[Form, ...] = field(default_factory=tuple)
