import numpy as np
import pytest
from hypothesis import given, strategies as st

from exprlang.errors import ExprTypeError
from exprlang.formula.builtins import add, normalize_number, sub
from exprlang.formula.environment import EMPTY_ENVIRONMENT
from exprlang.formula.evaluator import EvalContext, evaluate


@pytest.fixture
def ctx():
    return EvalContext(EMPTY_ENVIRONMENT)


@pytest.mark.parametrize(
    "source,expected",
    [
        ("(+)", 0),
        ("(+ 5)", 5),
        ("(+ 1 2 3)", 6),
        ("(+ -1 5 -3)", 1),
        ("(+ 1 2.5 3)", 6.5),
        ("(+ 0.5 0.25)", 0.75),
        ("(-)", 0),
        ("(- 4)", -4),
        ("(- 2.5)", -2.5),
        ("(- 10 3 2)", 5),
        ("(- -10 -5)", -5),
        ("(- 10 2.5)", 7.5),
        ("(- 10.5 1 2)", 7.5),
        ("(+ 1 (- 10 (+ 2 3)))", 6),
    ]
)
def test_arithmetic(env, parse, source, expected):
    result = evaluate(parse(source), env)
    assert result == expected
    assert type(result) is type(expected)


@pytest.mark.parametrize(
    "source",
    [
        '(+ 1 "two")',
        '(+ "a")',
        '(+ 1 (+ 2 "c"))',
        '(- "a")',
        '(- 1 "b")',
        '(- 1 2 "c")',
    ]
)
def test_arithmetic_type_errors(env, parse, source):
    with pytest.raises(ExprTypeError, match="invalid type for argument"):
        evaluate(parse(source), env)


def test_numeric_widths_are_normalized(ctx):
    assert add(ctx, [np.int32(2), np.uint64(3)]) == 5
    assert type(add(ctx, [np.int32(2), np.uint64(3)])) is int
    assert add(ctx, [np.float32(0.5), 1]) == 1.5
    assert type(add(ctx, [np.float32(0.5), 1])) is float
    assert sub(ctx, [np.int64(9), np.int32(4)]) == 5


def test_bool_is_not_a_number(ctx):
    with pytest.raises(ExprTypeError):
        add(ctx, [True, 1])
    with pytest.raises(ExprTypeError):
        sub(ctx, [False])


def test_normalize_number():
    assert type(normalize_number(np.int8(1))) is int
    assert type(normalize_number(np.float64(1))) is float
    assert normalize_number("s") == "s"
    assert normalize_number(True) is True


@given(st.lists(st.integers(min_value=-(2**40), max_value=2**40), max_size=8))
def test_integer_sum_matches_builtin(values):
    ctx = EvalContext(EMPTY_ENVIRONMENT)
    assert add(ctx, values) == sum(values)
    if values:
        assert sub(ctx, values) == (values[0] - sum(values[1:]) if len(values) > 1 else -values[0])
