from __future__ import annotations

from typing import Any, Callable, Optional

from exprlang.errors import BindError
from exprlang.types.expression import Expression

# A custom binder receives the source expression and the destination type and
# returns the bound value.
CustomBinder = Callable[[Expression, Any], Any]


class BinderRegistry:
    """Explicit table of destination types that bypass the generic rules."""

    __slots__ = ("_binders",)

    def __init__(self, binders: Optional[dict[Any, CustomBinder]] = None):
        self._binders: dict[Any, CustomBinder] = dict(binders or {})

    def register(self, dst_type: Any, binder: CustomBinder) -> None:
        self._binders[dst_type] = binder

    def get(self, dst_type: Any) -> Optional[CustomBinder]:
        try:
            return self._binders.get(dst_type)
        except TypeError:
            # unhashable type expressions never have a custom binder
            return None

    def __contains__(self, dst_type: Any) -> bool:
        return self.get(dst_type) is not None

    def copy(self) -> BinderRegistry:
        return BinderRegistry(self._binders)


def bind_opaque_expression(exp: Expression, dst_type: Any) -> Expression:
    """Store the expression handle itself, sub-lists included."""
    if exp is None:
        raise BindError(f"cannot assign a missing expression to {dst_type!r}")
    return exp


def default_registry() -> BinderRegistry:
    """Registry with the opaque Expression destination, direct and optional."""
    return BinderRegistry({
        Expression: bind_opaque_expression,
        Optional[Expression]: bind_opaque_expression,
    })
