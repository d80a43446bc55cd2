# Core type aliases for the exprlang data model.
#
# Naming guidance:
# - NativeValue: the Python value held inside an Expression (int, float, str, bytes,
#   bool, numpy.float32, Symbol or ExprList).
# - Value: an evaluated formula value, as returned by builtins and the evaluator.
# Both aliases resolve to `Any`; they exist to document intent in signatures.

from typing import Any

NativeValue = Any
Value = Any

# Wire messages are plain dicts shaped like the JSON mapping of a protocol message.
WireMessage = dict
