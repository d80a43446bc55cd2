

class ExprError(Exception):
    """ Base class for all exprlang errors"""
    pass

class ExprSyntaxError(ExprError):
    """ Raised when source text cannot be tokenized into forms"""

class ExprParseError(ExprError):
    """ Raised when a form cannot be converted into an expression"""

class WireFormatError(ExprError):
    """ Raised when a wire message does not describe a known expression or AST node"""

class BindError(ExprError):
    """ Raised when an expression cannot be bound into a destination"""

class BindShapeError(BindError):
    """ Raised when a record shape cannot be compiled into a binder"""

class ResolutionError(ExprError):
    """ Raised when an operator symbol has no binding in the lexical environment"""

class CompileError(ExprError):
    """ Raised when an expression cannot be lowered into an AST"""

class ArityError(CompileError):
    """ Raised when a special form receives the wrong number of operands"""

class EvalError(ExprError):
    """ Raised when an expression cannot be evaluated"""

class ExprTypeError(EvalError):
    """ Raised when the types of arguments passed to a builtin are incorrect"""
