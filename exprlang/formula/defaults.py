from __future__ import annotations

from functools import lru_cache

from exprlang.formula.builtins import BUILTIN_FUNCTIONS
from exprlang.formula.environment import LexicalEnvironment, new_environment
from exprlang.formula.special_forms import SPECIAL_FORMS


@lru_cache(maxsize=None)
def default_environment() -> LexicalEnvironment:
    """Builtins first, then special forms. Shared; environments are immutable."""
    return new_environment(BUILTIN_FUNCTIONS, SPECIAL_FORMS)
