"""Error types raised by the ptbr parser and interpreter.

Every failure a user program can trigger is a subclass of `PtbrError`.
The classes are grouped by the layer that raises them: the parser front
end, the value model (type errors) and the evaluator. Each error keeps its
structured fields as attributes next to the formatted message.
"""

from typing import Any


class PtbrError(Exception):
    """Base class for all ptbr errors."""


###############################################################################
# Parser layer
###############################################################################


class ParserError(PtbrError):
    """Raised when program text cannot be turned into an AST."""


class GrammarError(ParserError):
    def __init__(self, reason: str):
        super().__init__(f"Parsing failed, reason:\n{reason}")
        self.reason = reason


class NotAnExpression(ParserError):
    def __init__(self, text: str):
        super().__init__(f"Not an expression:\n{text}")
        self.text = text


class NotAST(ParserError):
    def __init__(self, text: str):
        super().__init__(f"Incorrect syntax:\n{text}")
        self.text = text


class IncompleteExpr(ParserError):
    """A binary expression is missing one of its operands."""
    def __init__(self, text: str, missing: str):
        super().__init__(f"Incomplete expression, missing {missing}:\n{text}")
        self.text = text
        self.missing = missing


class IncompleteFnCall(ParserError):
    def __init__(self, text: str, missing: str):
        super().__init__(f"Incomplete function call, missing {missing}:\n{text}")
        self.text = text
        self.missing = missing


class UnsupportedOperator(ParserError):
    def __init__(self, op: str):
        super().__init__(f"Unsupported operator: {op}")
        self.op = op


###############################################################################
# Type layer
###############################################################################


class RuntimeTypeError(PtbrError):
    """Raised when an operation is applied to values of the wrong kind."""


class IllegalOperation(RuntimeTypeError):
    def __init__(self, op: str, left: str, right: str):
        super().__init__(f"Cannot perform {op}, between types {left} and {right}")
        self.op = op
        self.left = left
        self.right = right


class ToBoolError(RuntimeTypeError):
    def __init__(self, value: Any):
        super().__init__(f"Couldn't convert {value!r} to bool")
        self.value = value


###############################################################################
# Interpreter layer
###############################################################################


class InterpreterError(PtbrError):
    """Raised by the evaluator while running a program."""


class UndefinedVariable(InterpreterError):
    def __init__(self, name: str):
        super().__init__(f'Variable "{name}" not defined')
        self.name = name


class UndefinedFunction(InterpreterError):
    def __init__(self, name: str):
        super().__init__(f'Function "{name}" not defined')
        self.name = name


class ParseError(InterpreterError):
    """Text (program literal or user input) could not be read as a number."""
    def __init__(self, text: str, target: str):
        super().__init__(f"Couldn't parse {text} as a {target}")
        self.text = text
        self.target = target


class WrongNumberOfArgs(InterpreterError):
    def __init__(self, name: str, expected: int, actual: int, verb: str):
        super().__init__(
            f"Function {name} expected {expected} arguments but {actual} {verb} supplied"
        )
        self.name = name
        self.expected = expected
        self.actual = actual
        self.verb = verb


class InputError(InterpreterError):
    def __init__(self):
        super().__init__("Failed to read input")


class RecursionLimit(InterpreterError):
    def __init__(self, limit: int):
        super().__init__(f"recursion limit reached: can't go more than {limit} levels deep")
        self.limit = limit


class DivideByZero(InterpreterError):
    def __init__(self):
        super().__init__("attempt to divide by zero")


class ShadowVar(InterpreterError):
    """Same-scope redefinition while redefinition is disabled."""
    def __init__(self, name: str):
        super().__init__(f"can't shadow variable from the same scope: {name!r}")
        self.name = name


class ReturnSignal:
    """Block outcome carrying the value of a `return` statement.

    Returned (not raised) by statement execution so that enclosing blocks
    can stop early and hand the value to the nearest function call.
    """
    __slots__ = ('value',)

    def __init__(self, value: Any):
        self.value = value

    def __repr__(self) -> str:
        return f"ReturnSignal({self.value!r})"
