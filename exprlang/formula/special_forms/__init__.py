"""Registry of special forms for the formula compiler.

Special forms are bound into the lexical environment after the builtin
functions, so a special form shadows a function of the same name.
"""

from exprlang.formula.special_forms.if_form import if_form

SPECIAL_FORMS = (
    if_form,
)
