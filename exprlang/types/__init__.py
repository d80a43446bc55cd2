from __future__ import annotations

# Public surface for the value model
from .symbol import KEYWORD_NAMESPACE, Namespace, Symbol, keyword, parse_symbol
from .expression import (
    Expression,
    ExprList,
    from_bool,
    from_bytes,
    from_fixed32,
    from_fixed64,
    from_float32,
    from_float64,
    from_int,
    from_int32,
    from_int64,
    from_list,
    from_sfixed32,
    from_sfixed64,
    from_sint32,
    from_sint64,
    from_string,
    from_symbol,
    from_uint32,
    from_uint64,
    from_value,
)

__all__ = [
    "KEYWORD_NAMESPACE",
    "Namespace",
    "Symbol",
    "keyword",
    "parse_symbol",
    "Expression",
    "ExprList",
    "from_bool",
    "from_bytes",
    "from_fixed32",
    "from_fixed64",
    "from_float32",
    "from_float64",
    "from_int",
    "from_int32",
    "from_int64",
    "from_list",
    "from_sfixed32",
    "from_sfixed64",
    "from_sint32",
    "from_sint64",
    "from_string",
    "from_symbol",
    "from_uint32",
    "from_uint64",
    "from_value",
]
