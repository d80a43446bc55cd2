"""
  S-expression Lexer and Reader

- Streaming, lazy reading
- Emits generic Form nodes (see exprlang.reader.forms) rather than values:

    - "..."          -> StringForm (escapes resolved)
    - 12, -3         -> NumberForm, kind INT
    - 2.5, -3e5, .5  -> NumberForm, kind FLOAT
    - (a b c)        -> ListForm
    - anything else  -> SymbolForm (the literal text; the symbol grammar is
                        applied later by the expression reader)

  Comments: `; to end of line` and `/* block */` are skipped between tokens.
"""

from __future__ import annotations

import re
from bisect import bisect_right
from typing import Iterator, NamedTuple, Optional

from exprlang.errors import ExprSyntaxError
from exprlang.reader.forms import (
    Form,
    ListForm,
    NumberForm,
    NumberKind,
    SourcePosition,
    StringForm,
    SymbolForm,
)


TOKEN_RE = re.compile(
    r"\s*("
    r"(?P<comment>;[^\n]*)"  # single-line comment
    r"|(?P<block_comment>/\*)"  # block comment start
    r"|(?P<lparen>\()"  # (
    r"|(?P<rparen>\))"  # )
    r'|(?P<string>"(?:\\.|[^\\"])*")'  # double-quoted strings
    r'|(?P<atom>[^\s()";]+)'  # numbers and symbols
    r")",
    re.DOTALL,
)

NUMBER_RE = re.compile(r"^[+-]?(?:\d+(?:\.\d*)?|\.\d+)(?:[eE][+-]?\d+)?$")

ESCAPES: dict[str, str] = {
    "n": "\n",
    "t": "\t",
    "r": "\r",
    "\\": "\\",
    '"': '"',
    "'": "'",
    "0": "\0",
}


class Token(NamedTuple):
    kind: str
    text: str
    offset: int


class _LineIndex:
    """Maps character offsets to 1-based (line, column) pairs."""

    def __init__(self, source: str, filename: str):
        self.filename = filename
        self.starts = [0] + [m.end() for m in re.finditer(r"\n", source)]

    def position(self, offset: int) -> SourcePosition:
        line = bisect_right(self.starts, offset)
        return SourcePosition(self.filename, line, offset - self.starts[line - 1] + 1)


def lex(source: str, filename: str = "") -> Iterator[Token]:
    """Token generator: yields Token(kind, text, offset) tuples."""
    pos = 0
    n = len(source)
    lines = _LineIndex(source, filename)

    while pos < n:
        m = TOKEN_RE.match(source, pos)
        if not m:
            rest = source[pos:]
            if rest.strip() == "":
                break
            bad = pos + (len(rest) - len(rest.lstrip()))
            if source[bad] == '"':
                raise ExprSyntaxError(f"{lines.position(bad)}: unterminated string literal")
            raise ExprSyntaxError(f"{lines.position(bad)}: unexpected character {source[bad]!r}")
        kind = next(nm for nm in TOKEN_RE.groupindex if m.group(nm) is not None)
        start = m.start(kind)
        if kind == "comment":
            pos = m.end()
            continue
        if kind == "block_comment":
            end = source.find("*/", m.end())
            if end < 0:
                raise ExprSyntaxError(f"{lines.position(start)}: unterminated block comment")
            pos = end + 2
            continue
        pos = m.end()
        yield Token(kind, m.group(kind), start)


def unescape_string(literal: str) -> str:
    """Resolve backslash escapes in a quoted string token (quotes included)."""
    body = literal[1:-1]
    out: list[str] = []
    i = 0
    while i < len(body):
        ch = body[i]
        if ch != "\\":
            out.append(ch)
            i += 1
            continue
        esc = body[i + 1]
        if esc in ESCAPES:
            out.append(ESCAPES[esc])
            i += 2
        elif esc in "xuU":
            width = {"x": 2, "u": 4, "U": 8}[esc]
            digits = body[i + 2:i + 2 + width]
            if len(digits) != width or not all(c in "0123456789abcdefABCDEF" for c in digits):
                raise ExprSyntaxError(f"invalid \\{esc} escape in string {literal}")
            out.append(chr(int(digits, 16)))
            i += 2 + width
        else:
            raise ExprSyntaxError(f"unknown escape sequence \\{esc} in string {literal}")
    return "".join(out)


class FormReader:
    """Reads forms from source text, one top-level form at a time."""

    def __init__(self, source: str, filename: str = ""):
        self.lines = _LineIndex(source, filename)
        self.tokens = iter(lex(source, filename))
        self.buffer: list[Token] = []

    def peek(self) -> Optional[Token]:
        if not self.buffer:
            try:
                self.buffer.append(next(self.tokens))
            except StopIteration:
                return None
        return self.buffer[0]

    def advance(self) -> Optional[Token]:
        if self.buffer:
            return self.buffer.pop(0)
        return next(self.tokens, None)

    def read_form(self) -> Optional[Form]:
        """Read the next form, or return None at end of input."""
        tok = self.peek()
        if tok is None:
            return None
        self.advance()
        pos = self.lines.position(tok.offset)

        if tok.kind == "lparen":
            items: list[Form] = []
            while True:
                nxt = self.peek()
                if nxt is None:
                    raise ExprSyntaxError(f"{pos}: unmatched '('")
                if nxt.kind == "rparen":
                    self.advance()
                    break
                items.append(self.read_form())
            return ListForm(pos, tuple(items))

        if tok.kind == "rparen":
            raise ExprSyntaxError(f"{pos}: unexpected ')'")

        if tok.kind == "string":
            try:
                return StringForm(pos, unescape_string(tok.text))
            except ExprSyntaxError as err:
                raise ExprSyntaxError(f"{pos}: {err}") from err

        # Atoms: numbers first, then symbols
        if NUMBER_RE.match(tok.text):
            is_float = any(c in tok.text for c in ".eE")
            return NumberForm(pos, tok.text, NumberKind.FLOAT if is_float else NumberKind.INT)
        return SymbolForm(pos, tok.text)

    def read_all(self) -> Iterator[Form]:
        while (form := self.read_form()) is not None:
            yield form


def read_forms(source: str, filename: str = "") -> list[Form]:
    return list(FormReader(source, filename).read_all())
