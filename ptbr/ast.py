"""Abstract Syntax Tree (AST) definitions for the ptbr language.

The parser produces these nodes and the interpreter walks them. Nodes are
frozen dataclasses holding tuples, so a tree is read-only once built and a
function body captured at declaration time cannot change afterwards.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Optional, Tuple

from .types import Value


# Binary operator names
SUM = 'Sum'
SUB = 'Sub'
MULT = 'Mult'
DIV = 'Div'
IS = 'Is'
IS_NOT = 'IsNot'
SMLR = 'Smlr'
BIGR = 'Bigr'
SMLR_EQ = 'SmlrEq'
BIGR_EQ = 'BigrEq'
AND = 'And'
OR = 'Or'

ARITHMETIC_OPS = (SUM, SUB, MULT, DIV)
COMPARISON_OPS = (IS, IS_NOT, SMLR, BIGR, SMLR_EQ, BIGR_EQ)
BOOLEAN_OPS = (AND, OR)

# Input kinds
NUMBER = 'Number'
TEXT = 'String'


@dataclass(frozen=True)
class Node:
    """Base class for all AST nodes."""
    pass


@dataclass(frozen=True)
class Expression(Node):
    pass


@dataclass(frozen=True)
class Statement(Node):
    pass


###############################################################################
# Expressions
###############################################################################


@dataclass(frozen=True)
class Variable(Expression):
    name: str


@dataclass(frozen=True)
class Literal(Expression):
    value: Value


@dataclass(frozen=True)
class BinaryOp(Expression):
    op: str  # one of ARITHMETIC_OPS, COMPARISON_OPS or BOOLEAN_OPS
    left: Expression
    right: Expression


@dataclass(frozen=True)
class FnCall(Expression):
    name: str
    args: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Input(Expression):
    kind: str  # NUMBER or TEXT


###############################################################################
# Statements
###############################################################################


@dataclass(frozen=True)
class Block(Node):
    statements: Tuple[Statement, ...] = ()


@dataclass(frozen=True)
class Program(Node):
    body: Tuple[Statement, ...] = ()


@dataclass(frozen=True)
class Print(Statement):
    expressions: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class Definition(Statement):
    name: str
    expr: Expression


@dataclass(frozen=True)
class Assignment(Statement):
    name: str
    expr: Expression


@dataclass(frozen=True)
class IfStmt(Statement):
    condition: Expression
    then_block: Block
    else_block: Optional[Block] = None


@dataclass(frozen=True)
class WhileStmt(Statement):
    condition: Expression
    body: Block


@dataclass(frozen=True)
class FuncDecl(Statement):
    name: str
    params: Tuple[str, ...]
    body: Block


@dataclass(frozen=True)
class CallStmt(Statement):
    name: str
    args: Tuple[Expression, ...] = ()


@dataclass(frozen=True)
class ReturnStmt(Statement):
    value: Expression


@dataclass(frozen=True)
class ExprStmt(Statement):
    expr: Expression


@dataclass(frozen=True)
class ValueStmt(Statement):
    """Bare value in statement position; executing it does nothing."""
    value: Value
