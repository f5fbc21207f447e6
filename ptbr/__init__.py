# ptbr language package
# This package provides a parser and tree-walking interpreter for ptbr.
from .config import InterpreterConfig
from .errors import PtbrError
from .interpreter import Interpreter, run
from .parser import parse_program
from .types import Value

__all__ = [
    'run',
    'parse_program',
    'Interpreter',
    'InterpreterConfig',
    'Value',
    'PtbrError',
]
