from __future__ import annotations

from .parser import FormReader, lex, read_forms
from .expression_reader import must_parse, parse_all, parse_form, parse_sexpression

__all__ = [
    "FormReader",
    "lex",
    "read_forms",
    "must_parse",
    "parse_all",
    "parse_form",
    "parse_sexpression",
]
