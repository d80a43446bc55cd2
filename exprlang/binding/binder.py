"""Generic binder: destructure an Expression into typed Python values.

bind(expression, dst_type) assigns components of the expression according to
the following rules, in order:

1. If dst_type has a custom binder in the registry, it is used. The default
   registry maps `Expression` (and `Optional[Expression]`) to a binder that
   returns the expression handle unchanged.

2. If the native value of the expression is assignable to dst_type, it is
   returned (`int` accepts any integer width but never a bool; `float`
   accepts doubles and numpy.float32; `Any`/`object` accept everything).

3. If dst_type is `Optional[T]`, a fresh `T` is bound and returned.

4. If dst_type is a dataclass, its compiled record binder is used. If dst_type
   is `list[T]`, `tuple[T, ...]` or `Sequence[T]`, the expression must be a
   list and each element is bound into a `T`.

5. Otherwise a BindError naming dst_type and the native value type is raised.

Record fields are bound positionally. The position defaults to the field's
declaration order and may be overridden with a "sexpr" metadata tag holding an
integer literal, or the marker `&rest`, which collects every element from the
field's position to the end of the list:

    @dataclass
    class IfForm:
        op: Symbol
        test: Expression
        rest: list[Expression] = sexpr_field("&rest")
"""

from __future__ import annotations

import collections.abc
import dataclasses
import logging
import threading
import types
import typing
from typing import Any, NamedTuple, Optional, Union

import numpy as np

from exprlang.binding.registry import BinderRegistry, default_registry
from exprlang.errors import BindError, BindShapeError, ExprError
from exprlang.reader.expression_reader import parse_sexpression
from exprlang.types.expression import Expression, from_list
from exprlang.types.symbol import Symbol

logger = logging.getLogger(__name__)

SEXPR_TAG = "sexpr"
REST_MARKER = Symbol("&rest")

_NOT_ASSIGNABLE = object()
_SEQUENCE_ORIGINS = (list, tuple, collections.abc.Sequence)


def sexpr_field(tag: str | int, **kwargs) -> Any:
    """dataclasses.field() carrying a "sexpr" binding tag (e.g. 2 or "&rest")."""
    metadata = dict(kwargs.pop("metadata", None) or {})
    metadata[SEXPR_TAG] = str(tag)
    return dataclasses.field(metadata=metadata, **kwargs)


class FieldSpec(NamedTuple):
    """Where a record field comes from in the source list."""
    position: int
    is_rest: bool = False


class FieldBinding(NamedTuple):
    name: str
    dst_type: Any
    spec: FieldSpec


class RecordBinder:
    """Field-by-field binder compiled once per dataclass."""

    __slots__ = ("record_type", "fields", "min_length", "max_length")

    def __init__(self, record_type: type, fields: list[FieldBinding]):
        self.record_type = record_type
        self.fields = tuple(fields)
        min_length = 0
        has_rest = False
        for fb in self.fields:
            if fb.spec.is_rest:
                has_rest = True
                needed = fb.spec.position
            else:
                needed = fb.spec.position + 1
            min_length = max(min_length, needed)
        self.min_length = min_length
        # None means unbounded
        self.max_length: Optional[int] = None if has_rest else min_length

    def __repr__(self):
        return (
            f"<RecordBinder {self.record_type.__name__} "
            f"len=[{self.min_length}, {'inf' if self.max_length is None else self.max_length}]>"
        )

    def bind(self, binder: Binder, exp: Expression) -> Any:
        lst = exp.as_list()
        if lst is None:
            raise BindError(
                f"cannot bind expression into {self.record_type.__name__} unless it is a list, got {exp}"
            )
        got = len(lst)
        if got < self.min_length:
            raise BindError(f"cannot destructure expression: got length {got}, want >={self.min_length}: {exp}")
        if self.max_length is not None and got > self.max_length:
            raise BindError(f"cannot destructure expression: got length {got}, want <={self.max_length}: {exp}")

        values: dict[str, Any] = {}
        for fb in self.fields:
            pos = fb.spec.position
            if fb.spec.is_rest:
                try:
                    values[fb.name] = binder.bind(from_list(lst[pos:]), fb.dst_type)
                except ExprError as err:
                    raise BindError(f"cannot set field {fb.name!r} from list[{pos}:]: {err}") from err
                continue
            if pos >= got:
                raise BindError(f"cannot set field {fb.name!r}; index {pos} out of bounds for expression {exp}")
            try:
                values[fb.name] = binder.bind(lst[pos], fb.dst_type)
            except ExprError as err:
                raise BindError(f"cannot set field {fb.name!r} from value[{pos}] of list: {err}") from err
        return self.record_type(**values)


def parse_field_annotation(f: dataclasses.Field, default_position: int, already_has_rest: bool) -> FieldSpec:
    raw_tag = f.metadata.get(SEXPR_TAG) if f.metadata else None
    if not raw_tag:
        return FieldSpec(default_position)
    try:
        tag = parse_sexpression(str(raw_tag))
    except ExprError as err:
        raise BindShapeError(f'bad "{SEXPR_TAG}" tag for field {f.name!r}: {err}') from err

    if tag.kind in ("int32", "int64") and tag.value >= 0:
        return FieldSpec(tag.value)
    if tag.symbol() == REST_MARKER:
        if already_has_rest:
            raise BindShapeError(
                f"field {f.name} cannot have &rest designator; there is already a &rest field in the record"
            )
        return FieldSpec(default_position, is_rest=True)
    raise BindShapeError(
        f'bad "{SEXPR_TAG}" tag for field {f.name!r}: want a non-negative integer or &rest, got {tag}'
    )


def compile_record_binder(record_type: type) -> RecordBinder:
    try:
        hints = typing.get_type_hints(record_type)
    except (NameError, TypeError) as err:
        raise BindShapeError(f"cannot resolve field types of {record_type.__name__}: {err}") from err

    bindings: list[FieldBinding] = []
    has_rest = False
    visible = [f for f in dataclasses.fields(record_type) if f.init]
    for index, f in enumerate(visible):
        try:
            spec = parse_field_annotation(f, index, has_rest)
        except BindShapeError as err:
            raise BindShapeError(f"field tag parse failed for {record_type.__name__}: {err}") from err
        has_rest = has_rest or spec.is_rest
        bindings.append(FieldBinding(f.name, hints.get(f.name, Any), spec))

    rb = RecordBinder(record_type, bindings)
    logger.debug("compiled %r", rb)
    return rb


_record_binders: dict[type, RecordBinder] = {}
_record_binders_lock = threading.Lock()


def record_binder_for(record_type: type) -> RecordBinder:
    """Return the cached record binder for a dataclass, compiling it on first use."""
    rb = _record_binders.get(record_type)
    if rb is not None:
        return rb
    with _record_binders_lock:
        rb = _record_binders.get(record_type)
        if rb is None:
            rb = compile_record_binder(record_type)
            _record_binders[record_type] = rb
    return rb


def _type_name(t: Any) -> str:
    if isinstance(t, type):
        return t.__name__
    return repr(t)


def _optional_target(dst_type: Any) -> Optional[Any]:
    origin = typing.get_origin(dst_type)
    if origin is Union or origin is types.UnionType:
        args = [a for a in typing.get_args(dst_type) if a is not type(None)]
        if len(args) == 1 and len(typing.get_args(dst_type)) == 2:
            return args[0]
    return None


def _assign(value: Any, dst_type: Any) -> Any:
    """Return `value` converted for dst_type, or _NOT_ASSIGNABLE."""
    if dst_type is Any or dst_type is object:
        return value
    if not isinstance(dst_type, type) or typing.get_origin(dst_type) is not None:
        return _NOT_ASSIGNABLE
    if dst_type is bool:
        return value if isinstance(value, bool) else _NOT_ASSIGNABLE
    if dst_type is int:
        if isinstance(value, (int, np.integer)) and not isinstance(value, (bool, np.bool_)):
            return int(value)
        return _NOT_ASSIGNABLE
    if dst_type is float:
        if isinstance(value, (float, np.floating)):
            return float(value)
        return _NOT_ASSIGNABLE
    return value if isinstance(value, dst_type) else _NOT_ASSIGNABLE


class Binder:
    """Binds expressions using an explicit custom-binder registry."""

    def __init__(self, registry: Optional[BinderRegistry] = None):
        self.registry = registry if registry is not None else default_registry()

    def bind(self, exp: Expression, dst_type: Any) -> Any:
        custom = self.registry.get(dst_type)
        if custom is not None:
            return custom(exp, dst_type)

        value = exp.value
        assigned = _assign(value, dst_type)
        if assigned is not _NOT_ASSIGNABLE:
            return assigned

        target = _optional_target(dst_type)
        if target is not None:
            return self.bind(exp, target)

        if isinstance(dst_type, type) and dataclasses.is_dataclass(dst_type):
            return record_binder_for(dst_type).bind(self, exp)

        origin = typing.get_origin(dst_type)
        if origin in _SEQUENCE_ORIGINS:
            return self._bind_sequence(exp, dst_type, origin)

        raise BindError(
            f"dst type {_type_name(dst_type)!r} cannot be bound by expression {exp} "
            f"(with value type {type(value).__name__!r})"
        )

    def _bind_sequence(self, exp: Expression, dst_type: Any, origin: Any) -> Any:
        args = typing.get_args(dst_type)
        if origin is tuple:
            if len(args) != 2 or args[1] is not Ellipsis:
                raise BindError(f"binding {_type_name(dst_type)!r} not yet supported")
        elem_type = args[0] if args else Any

        lst = exp.as_list()
        if lst is None:
            raise BindError(f"cannot bind {_type_name(dst_type)} from a non-list expression, got {exp}")
        out = []
        for i, elem in enumerate(lst):
            try:
                out.append(self.bind(elem, elem_type))
            except ExprError as err:
                raise BindError(f"failed to bind to element [{i}] of {_type_name(dst_type)}: {err}") from err
        return tuple(out) if origin is tuple else out


_default_binder = Binder()


def bind(exp: Expression, dst_type: Any, registry: Optional[BinderRegistry] = None) -> Any:
    """Bind `exp` into a new value of `dst_type`; see the module docstring."""
    if registry is None:
        return _default_binder.bind(exp, dst_type)
    return Binder(registry).bind(exp, dst_type)
