import pytest

from exprlang.formula.defaults import default_environment
from exprlang.reader.expression_reader import must_parse


@pytest.fixture
def env():
    """Builtin environment with every function and special form."""
    return default_environment()


@pytest.fixture
def parse():
    return must_parse
