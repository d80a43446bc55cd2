import pytest

from exprlang.formula.environment import (
    EMPTY_ENVIRONMENT,
    FUNCTION_OR_SPECIAL_FORM,
    Binding,
    BindingKind,
    FnDef,
    LexicalEnvironment,
    NAMESPACE,
    SpecialFormDef,
    new_environment,
    normalize_symbol,
    sym,
)
from exprlang.types.symbol import Symbol


def _const(value):
    return lambda ctx, args: value


@pytest.fixture
def base():
    return new_environment([FnDef(sym("f"), _const("outer"))], [])


def test_unqualified_symbols_resolve_in_formula_namespace(base):
    assert normalize_symbol(Symbol("f")) == Symbol("f", NAMESPACE)
    assert normalize_symbol(Symbol("f", "other")) == Symbol("f", "other")
    assert base.resolve_fn_def(Symbol("f")) is not None
    assert base.resolve_fn_def(Symbol("f", NAMESPACE)) is base.resolve_fn_def(Symbol("f"))
    assert base.resolve_fn_def(Symbol("f", "other")) is None


def test_binding_symbol_is_normalized():
    env = EMPTY_ENVIRONMENT.with_function_def(FnDef(Symbol("g"), _const(1)))
    (b,) = list(env.bindings())
    assert b.symbol == Symbol("g", NAMESPACE)


def test_later_bindings_shadow_earlier_ones(base):
    inner = base.with_function_def(FnDef(sym("f"), _const("inner")))
    assert inner.resolve_fn_def(Symbol("f")).impl(None, []) == "inner"
    # the extended environment is untouched
    assert base.resolve_fn_def(Symbol("f")).impl(None, []) == "outer"


def test_extension_shares_the_parent(base):
    a = base.with_function_def(FnDef(sym("a"), _const(1)))
    b = base.with_function_def(FnDef(sym("b"), _const(2)))
    assert a.parent is base and b.parent is base
    assert a.resolve_fn_def(Symbol("b")) is None
    assert b.resolve_fn_def(Symbol("a")) is None
    assert (len(base), len(a), len(b)) == (1, 2, 2)


def test_resolution_filters_on_kind():
    sf = SpecialFormDef(sym("when"), lambda cctx, form: None)
    env = EMPTY_ENVIRONMENT.with_special_form(sf)
    assert env.resolve_fn_def(Symbol("when")) is None
    assert env.resolve(Symbol("when"), BindingKind.SPECIAL_FORM) is sf
    assert env.resolve(Symbol("when"), FUNCTION_OR_SPECIAL_FORM) is sf


def test_special_form_shadows_function_of_same_name():
    fn = FnDef(sym("if"), _const("fn"))
    sf = SpecialFormDef(sym("if"), lambda cctx, form: None)
    env = new_environment([fn], [sf])
    b = env.resolve_binding(Symbol("if"), FUNCTION_OR_SPECIAL_FORM)
    assert b.kind is BindingKind.SPECIAL_FORM
    # a function-only lookup still walks past the special form
    assert env.resolve_fn_def(Symbol("if")) is fn


def test_bindings_iterate_newest_first():
    env = EMPTY_ENVIRONMENT.with_bindings(
        Binding(sym(n), BindingKind.FUNCTION, FnDef(sym(n), _const(n))) for n in "abc"
    )
    assert [b.symbol.name for b in env.bindings()] == ["c", "b", "a"]
    assert str(env) == "{formula:c: function, formula:b: function, formula:a: function}"


def test_empty_environment():
    assert len(EMPTY_ENVIRONMENT) == 0
    assert list(EMPTY_ENVIRONMENT.bindings()) == []
    assert EMPTY_ENVIRONMENT.resolve_fn_def(Symbol("+")) is None
    assert isinstance(LexicalEnvironment(), LexicalEnvironment)


def test_default_environment_has_builtins(env):
    assert env.resolve_fn_def(Symbol("+")) is not None
    assert env.resolve_fn_def(Symbol("-")) is not None
    assert env.resolve(Symbol("if"), BindingKind.SPECIAL_FORM) is not None
