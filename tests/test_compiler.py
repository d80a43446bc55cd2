import pytest

from exprlang.errors import ArityError, CompileError, ExprError, ResolutionError, WireFormatError
from exprlang.formula.ast import (
    CompiledExpression,
    Constant,
    FunctionCall,
    IfElse,
    VariableRef,
    node_from_wire,
)
from exprlang.formula.compiler import compile
from exprlang.formula.environment import EMPTY_ENVIRONMENT, FnDef, SpecialFormDef, sym
from exprlang.types.expression import (
    Expression,
    from_bool,
    from_bytes,
    from_float32,
    from_float64,
    from_int,
    from_int32,
    from_string,
    from_uint64,
)
from exprlang.types.symbol import Symbol


def _c(exp):
    return Constant(exp)


@pytest.mark.parametrize(
    "source, expected",
    [
        ("1", _c(from_int(1))),
        ("2.5", _c(from_float64(2.5))),
        ('"s"', _c(from_string("s"))),
        ("x", VariableRef(Symbol("x"))),
        ("ns:x", VariableRef(Symbol("x", "ns"))),
        (
            "(+ 1 2)",
            FunctionCall(VariableRef(Symbol("+")), (_c(from_int(1)), _c(from_int(2)))),
        ),
        ("(-)", FunctionCall(VariableRef(Symbol("-")))),
        (
            "(+ 1 (- x 2))",
            FunctionCall(
                VariableRef(Symbol("+")),
                (
                    _c(from_int(1)),
                    FunctionCall(VariableRef(Symbol("-")), (VariableRef(Symbol("x")), _c(from_int(2)))),
                ),
            ),
        ),
        (
            "(if true 1 0)",
            IfElse(VariableRef(Symbol("true")), _c(from_int(1)), _c(from_int(0))),
        ),
        ("(if true 1)", IfElse(VariableRef(Symbol("true")), _c(from_int(1)))),
        (
            "(if (+ 1 0) \"then\" (if x 2 3))",
            IfElse(
                FunctionCall(VariableRef(Symbol("+")), (_c(from_int(1)), _c(from_int(0)))),
                _c(from_string("then")),
                IfElse(VariableRef(Symbol("x")), _c(from_int(2)), _c(from_int(3))),
            ),
        ),
    ]
)
def test_compile(env, parse, source, expected):
    compiled = compile(parse(source), env)
    assert isinstance(compiled, CompiledExpression)
    assert compiled.expr == expected


def test_compile_defaults_to_builtin_environment(parse):
    assert compile(parse("(+ 1 2)")) == compile(parse("(+ 1 2)"))


@pytest.mark.parametrize(
    "source, error, message",
    [
        ("()", CompileError, "empty list"),
        ("(1 2)", CompileError, "must be a symbol"),
        ("(nope 1)", ResolutionError, "unsupported operator nope"),
        ("(if true)", ArityError, "must have a THEN form"),
        ("(if true 1 2 3)", ArityError, "must have only a THEN and ELSE form"),
        ("(if)", CompileError, "error parsing if/else"),
        ("(if (nope) 1 2)", ResolutionError, "TEST clause"),
        ("(if x 1 ())", CompileError, "ELSE clause"),
        ("(+ 1 (missing))", ResolutionError, "funcall argument 1"),
    ]
)
def test_compile_errors(env, parse, source, error, message):
    with pytest.raises(error, match=message):
        compile(parse(source), env)
    with pytest.raises(ExprError):
        compile(parse(source), env)


def test_constants_are_renormalized():
    assert compile(from_int32(5)).expr == _c(from_int(5))
    assert compile(from_float32(0.5)).expr == _c(from_float32(0.5))
    assert compile(from_bool(False)).expr == _c(from_bool(False))
    assert compile(from_bytes(b"b")).expr == _c(from_bytes(b"b"))


def test_unsigned_constant_out_of_int64_range():
    with pytest.raises(CompileError, match="unsupported constant"):
        compile(from_uint64(2**64 - 1))


def test_operator_resolution_ignores_function_namespace_when_unqualified(parse):
    env = EMPTY_ENVIRONMENT.with_function_def(FnDef(sym("f"), lambda ctx, args: None))
    assert compile(parse("(formula:f 1)"), env).expr == FunctionCall(
        VariableRef(Symbol("f", "formula")), (_c(from_int(1)),)
    )
    with pytest.raises(ResolutionError):
        compile(parse("(other:f 1)"), env)


def test_custom_special_form(parse):
    def compile_quote(cctx, form):
        return Constant(form.as_list()[1], source_context=form.source_context)

    env = EMPTY_ENVIRONMENT.with_special_form(SpecialFormDef(sym("quote"), compile_quote))
    compiled = compile(parse("(quote (a b))"), env)
    assert compiled.expr == Constant(parse("(a b)"))


def test_source_context_is_recorded_but_not_compared(env, parse):
    compiled = compile(parse("(+ 1\n 2)"), env)
    call = compiled.expr
    assert call.source_context == ":1:1"
    assert call.args[1].source_context == ":2:2"
    assert call == FunctionCall(VariableRef(Symbol("+")), (_c(from_int(1)), _c(from_int(2))))


def test_ast_wire_form(env, parse):
    compiled = compile(parse("(if true (+ 1 2))"), env)
    assert compiled.ast_wire(include_source=False) == {
        "if_else": {
            "test": {"variable": {"symbol": {"name": "true"}}},
            "then_expression": {
                "funcall": {
                    "function": {"variable": {"symbol": {"name": "+"}}},
                    "positional_args": [
                        {"constant": {"value": {"int64": 1}}},
                        {"constant": {"value": {"int64": 2}}},
                    ],
                }
            },
        }
    }
    with_source = compiled.ast_wire()
    assert with_source["source_context"] == {"context": ":1:1"}
    assert with_source["if_else"]["test"]["source_context"] == {"context": ":1:5"}


def test_ast_wire_round_trip(env, parse):
    compiled = compile(parse('(if (- x 1) "a" (+ 2.5 y))'), env)
    rebuilt = node_from_wire(compiled.ast_wire())
    assert rebuilt == compiled.expr
    assert rebuilt.source_context == ":1:1"


@pytest.mark.parametrize(
    "msg",
    [
        {},
        {"lambda": {}},
        {"constant": {}},
        {"funcall": {"positional_args": []}},
        [],
    ]
)
def test_node_from_wire_errors(msg):
    with pytest.raises(WireFormatError):
        node_from_wire(msg)


def test_compiled_expression_str_is_json(env, parse):
    text = str(compile(parse("1"), env))
    assert '"constant"' in text
    assert '"int64": 1' in text


def test_constant_holds_an_expression(env, parse):
    node = compile(parse('"s"'), env).expr
    assert isinstance(node.value, Expression)
    assert node.value.source_context is None
