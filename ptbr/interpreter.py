"""Interpreter for the ptbr language.

This module walks the AST produced by `ptbr.parser` against a chain of
lexical scopes. Statements are executed by `Interpreter.execute`, which
returns a `ReturnSignal` when a `return` statement finishes the enclosing
function (or, at top level, the whole program) and None otherwise.
Expressions are evaluated by `Interpreter.evaluate` into `Value` objects.

Errors are raised as `PtbrError` subclasses and abort the run; the language
has no way to catch them.
"""

from __future__ import annotations

import operator
import sys
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, TextIO, Union

from .ast import (
    Program, Block, Statement, Expression,
    Print, Definition, Assignment, IfStmt, WhileStmt, FuncDecl, CallStmt,
    ReturnStmt, ExprStmt, ValueStmt,
    Variable, Literal, BinaryOp, FnCall, Input,
    SUM, SUB, MULT, DIV, IS, IS_NOT, SMLR, BIGR, SMLR_EQ, BIGR_EQ, AND, OR,
    NUMBER,
)
from .builtin_function import BuiltinFunction
from .config import InterpreterConfig
from .environment import Scope
from .errors import (
    PtbrError, ReturnSignal, UndefinedVariable, UndefinedFunction,
    WrongNumberOfArgs, RecursionLimit, InputError, ParseError,
)
from .parser import parse_program
from .types import Value


# Free Python frames kept above the current depth whenever a ptbr function is
# entered, enough for the nested blocks and expressions of one function body.
STACK_MARGIN = 1000

ARITHMETIC = {
    SUM: operator.add,
    SUB: operator.sub,
    MULT: operator.mul,
    DIV: operator.truediv,
}

ORDERING = {
    SMLR: operator.lt,
    BIGR: operator.gt,
    SMLR_EQ: operator.le,
    BIGR_EQ: operator.ge,
}


def _frame_depth() -> int:
    depth = 0
    frame = sys._getframe()
    while frame is not None:
        depth += 1
        frame = frame.f_back
    return depth


@dataclass
class RuntimeState:
    """Mutable state shared by every call made during a run."""
    recursion_limit: int
    depth: int = 0

    def enter_call(self):
        self.depth += 1
        if self.depth > self.recursion_limit:
            self.depth = 0
            raise RecursionLimit(self.recursion_limit)

    def leave_call(self):
        self.depth -= 1

    def reset(self):
        self.depth = 0


class Interpreter:
    """Core interpreter that executes ptbr ASTs.

    Definitions made by one `run` stay visible to the next one on the same
    instance, which lets a host feed a program in pieces.
    """
    def __init__(self, config: Optional[InterpreterConfig] = None,
                 output: Optional[TextIO] = None, input: Optional[TextIO] = None):
        self.config = config if config is not None else InterpreterConfig()
        self.output = output
        self.input = input
        self.state = RuntimeState(recursion_limit=self.config.recursion_limit)
        self.builtins: Dict[str, BuiltinFunction] = {}
        self.global_scope = Scope(allow_redefinition=self.config.allow_redefinition)
        self.debug_level = self.config.debug_level
        self.debug_fp: Optional[TextIO] = None

    def debug(self, msg: str):
        if self.debug_level > 0:
            if self.debug_fp:
                self.debug_fp.write(msg + '\n')
                self.debug_fp.flush()
            else:
                print(msg, file=sys.stderr)

    def bind_function(self, name: str, arity: Optional[int],
                      fn: Callable[[List[Value]], Optional[Value]]) -> BuiltinFunction:
        """Expose a Python callable to ptbr code under `name`.

        Bound functions take precedence over functions declared in the
        program and do not count toward the recursion limit.
        """
        builtin = BuiltinFunction(name, arity, fn)
        self.builtins[name] = builtin
        return builtin

    # Public API
    def run(self, program: Program) -> Optional[Value]:
        """Execute a program; return the value of a top-level `return`, if any."""
        saved_limit = sys.getrecursionlimit()
        if self.debug_level > 0 and self.config.debug_file:
            self.debug_fp = open(self.config.debug_file, 'a', encoding='utf-8')
        try:
            self._reserve_stack()
            result = self.execute_block(program.body, self.global_scope)
        except PtbrError:
            self.state.reset()
            raise
        except RecursionError:
            self.state.reset()
            raise RecursionLimit(self.state.recursion_limit) from None
        finally:
            sys.setrecursionlimit(saved_limit)
            if self.debug_fp:
                self.debug_fp.close()
                self.debug_fp = None
        if isinstance(result, ReturnSignal):
            return result.value
        return None

    def _reserve_stack(self):
        """Grow Python's recursion limit so STACK_MARGIN frames stay free."""
        needed = _frame_depth() + STACK_MARGIN
        if sys.getrecursionlimit() < needed:
            sys.setrecursionlimit(needed * 2)

    def write(self, text: str):
        out = self.output if self.output is not None else sys.stdout
        out.write(text)

    def execute_block(self, statements: Union[Block, tuple, list], scope: Scope) -> Optional[ReturnSignal]:
        if isinstance(statements, Block):
            statements = statements.statements
        for stmt in statements:
            result = self.execute(stmt, scope)
            # propagate return signals
            if isinstance(result, ReturnSignal):
                return result
        return None

    def execute(self, node: Statement, scope: Scope) -> Optional[ReturnSignal]:
        if isinstance(node, Print):
            values = [self.evaluate(expr, scope) for expr in node.expressions]
            self.write(' '.join(str(v) for v in values) + '\n')
            return None
        if isinstance(node, Definition):
            value = self.evaluate(node.expr, scope)
            scope.define(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"define {node.name} = {value!r}")
            return None
        if isinstance(node, Assignment):
            value = self.evaluate(node.expr, scope)
            scope.assign(node.name, value)
            if self.debug_level >= 2:
                self.debug(f"assign {node.name} = {value!r}")
            return None
        if isinstance(node, IfStmt):
            truthy = self.evaluate(node.condition, scope).to_bool()
            if self.debug_level >= 3:
                self.debug(f"if condition -> {truthy}")
            if truthy:
                return self.execute_block(node.then_block, scope.child())
            if node.else_block is not None:
                return self.execute_block(node.else_block, scope.child())
            return None
        if isinstance(node, WhileStmt):
            while True:
                truthy = self.evaluate(node.condition, scope).to_bool()
                if self.debug_level >= 3:
                    self.debug(f"while condition -> {truthy}")
                if not truthy:
                    break
                # each iteration starts from a fresh scope
                res = self.execute_block(node.body, scope.child())
                if isinstance(res, ReturnSignal):
                    return res
            return None
        if isinstance(node, FuncDecl):
            scope.declare_function(node.name, node.params, node.body)
            if self.debug_level >= 2:
                self.debug(f"define function {node.name}({', '.join(node.params)})")
            return None
        if isinstance(node, CallStmt):
            args = [self.evaluate(arg, scope) for arg in node.args]
            self.call_function(node.name, args, scope)
            return None
        if isinstance(node, ReturnStmt):
            return ReturnSignal(self.evaluate(node.value, scope))
        if isinstance(node, ExprStmt):
            self.evaluate(node.expr, scope)
            return None
        if isinstance(node, ValueStmt):
            return None
        raise NotImplementedError(f"execute: unexpected node type {type(node)}")

    def evaluate(self, node: Expression, scope: Scope) -> Value:
        if isinstance(node, Literal):
            return node.value
        if isinstance(node, Variable):
            value = scope.lookup(node.name)
            if value is None:
                raise UndefinedVariable(node.name)
            return value
        if isinstance(node, BinaryOp):
            # Left-nested chains (a + b + c ...) are walked down the left
            # spine instead of recursing. Both operands are always
            # evaluated, left first.
            spine = []
            while isinstance(node, BinaryOp):
                spine.append(node)
                node = node.left
            value = self.evaluate(node, scope)
            for op_node in reversed(spine):
                right = self.evaluate(op_node.right, scope)
                value = self.apply_binary_op(op_node.op, value, right)
            return value
        if isinstance(node, FnCall):
            args = [self.evaluate(arg, scope) for arg in node.args]
            return self.call_function(node.name, args, scope)
        if isinstance(node, Input):
            return self.read_input(node.kind)
        raise NotImplementedError(f"evaluate: unexpected node type {type(node)}")

    def apply_binary_op(self, op: str, left: Value, right: Value) -> Value:
        if op in ARITHMETIC:
            return ARITHMETIC[op](left, right)
        if op == IS:
            return Value.boolean(left.equals(right))
        if op == IS_NOT:
            return Value.boolean(not left.equals(right))
        if op in ORDERING:
            a, b = left.ordered(right)
            return Value.boolean(ORDERING[op](a, b))
        if op == AND:
            a = left.to_bool()
            return Value.boolean(right.to_bool() and a)
        if op == OR:
            a = left.to_bool()
            return Value.boolean(right.to_bool() or a)
        raise NotImplementedError(f"unknown operator {op}")

    def call_function(self, name: str, args: List[Value], scope: Scope) -> Value:
        builtin = self.builtins.get(name)
        if builtin is not None:
            if self.debug_level >= 1:
                self.debug(f"call builtin {name}{tuple(str(a) for a in args)}")
            return builtin(args)
        owner = scope.function_scope(name)
        if owner is None:
            raise UndefinedFunction(name)
        func = owner.functions[name]
        if len(args) != len(func.params):
            verb = 'was' if len(args) == 1 else 'were'
            raise WrongNumberOfArgs(name, len(func.params), len(args), verb)
        self.state.enter_call()
        self._reserve_stack()
        if self.debug_level >= 1:
            self.debug(f"call {name}{tuple(str(a) for a in args)} depth={self.state.depth}")
        # parameters live in a child of the scope that declared the function
        call_scope = owner.child()
        for param, arg in zip(func.params, args):
            call_scope.define(param, arg)
        res = self.execute_block(func.body, call_scope)
        ret_val = res.value if isinstance(res, ReturnSignal) else Value.void()
        self.state.leave_call()
        if self.debug_level >= 1:
            self.debug(f"return {name} -> {ret_val!r}")
        return ret_val

    def read_input(self, kind: str) -> Value:
        port = self.input if self.input is not None else sys.stdin
        try:
            line = port.readline()
        except (OSError, ValueError) as e:
            raise InputError() from e
        text = line.strip()
        if kind == NUMBER:
            # float() also accepts digit separators, which ptbr does not
            if '_' in text:
                raise ParseError(text, 'float')
            try:
                return Value.float32(float(text))
            except ValueError:
                raise ParseError(text, 'float') from None
        return Value.string(text)


def run(program_text: str, output: Optional[TextIO] = None, input: Optional[TextIO] = None,
        config: Optional[InterpreterConfig] = None) -> Optional[Value]:
    """Parse and run a ptbr program with a fresh interpreter."""
    program = parse_program(program_text)
    interpreter = Interpreter(config=config, output=output, input=input)
    return interpreter.run(program)
