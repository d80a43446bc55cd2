from __future__ import annotations

from .registry import BinderRegistry, default_registry
from .binder import Binder, FieldSpec, bind, record_binder_for, sexpr_field

__all__ = [
    "BinderRegistry",
    "default_registry",
    "Binder",
    "FieldSpec",
    "bind",
    "record_binder_for",
    "sexpr_field",
]
