"""Parser for the ptbr language.

This module implements a two-stage parsing pipeline:

1. **Preprocessing**: comments are stripped and newlines that logically
   terminate statements are turned into semicolons. A semicolon is also
   inserted before a closing brace and at the end of the input when the
   last statement has none, so one-line blocks such as
   `if x { print 1 }` need no explicit terminator. Newlines are kept so
   that parser diagnostics report line numbers of the source text.

2. **Parsing**: the preprocessed source is fed into a Lark LALR parser and
   the resulting parse tree is transformed into the AST defined in
   `ptbr.ast`.

Every failure is reported as a `ParserError` subclass (or `ParseError` for
integer literals that do not fit in 32 bits). `parse_program` is the public
entry point.
"""

from __future__ import annotations

from typing import Any, List
import ast as py_ast

from lark import Lark, Transformer_NonRecursive, Token, v_args
from lark.exceptions import UnexpectedInput, VisitError

from .ast import (
    Program, Block, Print, Definition, Assignment, IfStmt, WhileStmt,
    FuncDecl, CallStmt, ReturnStmt, ExprStmt, Expression,
    Variable, Literal, BinaryOp, FnCall, Input,
    SUM, SUB, MULT, DIV, IS, IS_NOT, SMLR, BIGR, SMLR_EQ, BIGR_EQ, AND, OR,
    NUMBER, TEXT,
)
from .errors import (
    PtbrError, GrammarError, NotAnExpression, NotAST, IncompleteExpr,
    IncompleteFnCall, UnsupportedOperator, ParseError,
)
from .types import Value, INTEGER, FLOAT, I32_MAX


def preprocess(source: str) -> str:
    """Insert semicolons at statement boundaries and strip comments.

    Newlines outside parentheses and brackets terminate statements.
    Comments (`# ...`, `// ...` and `/* ... */`) are removed but the
    newlines they contain are kept. Strings are copied untouched.
    """
    result: List[str] = []
    depth = 0  # nesting depth for () and []
    i = 0
    length = len(source)
    in_string = False
    escape = False

    def needs_terminator() -> bool:
        j = len(result) - 1
        while j >= 0 and result[j].isspace():
            j -= 1
        prev = result[j] if j >= 0 else ''
        return prev not in ('', ';', '{', '}')

    while i < length:
        c = source[i]
        if in_string:
            result.append(c)
            if escape:
                escape = False
            elif c == '\\':
                escape = True
            elif c == '"':
                in_string = False
            i += 1
            continue
        # Block comments
        if c == '/' and source.startswith('/*', i):
            end = source.find('*/', i + 2)
            end = length if end == -1 else end + 2
            newlines = source.count('\n', i, end)
            if newlines:
                if depth == 0 and needs_terminator():
                    result.append(';')
                result.append('\n' * newlines)
            i = end
            continue
        # Line comments run up to (not including) the newline
        if c == '#' or (c == '/' and source.startswith('//', i)):
            end = source.find('\n', i)
            i = length if end == -1 else end
            continue
        if c == '"':
            in_string = True
            result.append(c)
            i += 1
            continue
        if c in '([':
            depth += 1
        elif c in ')]':
            if depth > 0:
                depth -= 1
        elif c == '}':
            if needs_terminator():
                result.append(';')
        elif c == '\n':
            if depth == 0 and needs_terminator():
                result.append(';')
        result.append(c)
        i += 1
    if needs_terminator():
        result.append(';')
    return ''.join(result)


PTBR_GRAMMAR = r"""
    ?start: program
    program: _statement*

    // Statements
    _statement: print_stmt
              | definition
              | assignment
              | if_stmt
              | while_stmt
              | function_decl
              | return_stmt
              | expr_stmt
              | empty_stmt

    print_stmt: "print" [expression ("," expression)*] ";"
    definition: IDENT ":=" expression ";"
    assignment: IDENT "=" expression ";"
    if_stmt: "if" expression block ["else" (block | if_stmt)]
    while_stmt: "while" expression block
    function_decl: ("fn" | "function") IDENT "(" [parameters] ")" block
    parameters: IDENT ("," IDENT)*
    return_stmt: "return" [expression] ";"
    expr_stmt: expression ";"
    empty_stmt: ";"

    block: "{" _statement* "}"

    // Expressions with precedence, loosest first
    ?expression: or_expr
    ?or_expr: and_expr
            | or_expr ("or" | "||") and_expr   -> or_op
    ?and_expr: comparison
             | and_expr ("and" | "&&") comparison  -> and_op
    ?comparison: sum
               | sum COMP_OP sum   -> compare
    ?sum: product
        | sum "+" product   -> add
        | sum "-" product   -> sub
    ?product: unary
            | product "*" unary   -> mul
            | product "/" unary   -> div
    ?unary: atom
          | "-" unary   -> neg
    ?atom: INT              -> int_lit
         | FLOAT            -> float_lit
         | ESCAPED_STRING   -> string_lit
         | "true"           -> true_lit
         | "false"          -> false_lit
         | IDENT            -> variable
         | function_call
         | "read_number" "(" ")"  -> read_number
         | "read_text" "(" ")"    -> read_text
         | "(" expression ")"
    function_call: IDENT "(" [arguments] ")"
    arguments: expression ("," expression)*

    // Tokens
    COMP_OP: /==|!=|<=|>=|<>|<|>/
    FLOAT.2: /\d+\.\d+/
    INT: /\d+/
    %import common.CNAME -> IDENT
    %import common.ESCAPED_STRING
    %import common.WS
    %ignore WS
"""


PTBR_PARSER = Lark(
    PTBR_GRAMMAR,
    parser='lalr',
    propagate_positions=True,
    maybe_placeholders=False,
)


COMPARISON_TOKENS = {
    '==': IS,
    '!=': IS_NOT,
    '<': SMLR,
    '>': BIGR,
    '<=': SMLR_EQ,
    '>=': BIGR_EQ,
}


class ASTTransformer(Transformer_NonRecursive):
    """Transforms the raw parse tree into an AST.

    `source` is the text the tree was parsed from; it is only used to quote
    the offending fragment in error messages.
    """

    def __init__(self, source: str = ''):
        super().__init__()
        self.source = source

    def _text(self, meta) -> str:
        if meta is None or getattr(meta, 'empty', True) or not self.source:
            return ''
        return self.source[meta.start_pos:meta.end_pos].strip()

    def _expr(self, item: Any) -> Expression:
        if not isinstance(item, Expression):
            raise NotAnExpression(str(item))
        return item

    def program(self, items):
        return Program(body=tuple(s for s in items if s is not None))

    def block(self, items):
        return Block(statements=tuple(s for s in items if s is not None))

    def print_stmt(self, items):
        return Print(tuple(self._expr(item) for item in items))

    def definition(self, items):
        return Definition(name=str(items[0]), expr=self._expr(items[1]))

    def assignment(self, items):
        return Assignment(name=str(items[0]), expr=self._expr(items[1]))

    def if_stmt(self, items):
        condition = self._expr(items[0])
        then_block = items[1]
        else_block = items[2] if len(items) > 2 else None
        if isinstance(else_block, IfStmt):
            # else if ...
            else_block = Block((else_block,))
        return IfStmt(condition, then_block, else_block)

    def while_stmt(self, items):
        return WhileStmt(self._expr(items[0]), items[1])

    def function_decl(self, items):
        name = str(items[0])
        params = items[1] if len(items) > 2 else ()
        body = items[-1]
        return FuncDecl(name=name, params=tuple(params), body=body)

    def parameters(self, items):
        return tuple(str(item) for item in items)

    def return_stmt(self, items):
        if items:
            return ReturnStmt(self._expr(items[0]))
        return ReturnStmt(Literal(Value.void()))

    def expr_stmt(self, items):
        expr = self._expr(items[0])
        if isinstance(expr, FnCall):
            return CallStmt(expr.name, expr.args)
        return ExprStmt(expr)

    def empty_stmt(self, items):
        return None

    # Expressions
    def _binary(self, op: str, meta, items) -> BinaryOp:
        if len(items) < 1:
            raise IncompleteExpr(self._text(meta), 'left')
        if len(items) < 2:
            raise IncompleteExpr(self._text(meta), 'right')
        return BinaryOp(op, self._expr(items[0]), self._expr(items[-1]))

    @v_args(meta=True)
    def or_op(self, meta, items):
        return self._binary(OR, meta, items)

    @v_args(meta=True)
    def and_op(self, meta, items):
        return self._binary(AND, meta, items)

    @v_args(meta=True)
    def add(self, meta, items):
        return self._binary(SUM, meta, items)

    @v_args(meta=True)
    def sub(self, meta, items):
        return self._binary(SUB, meta, items)

    @v_args(meta=True)
    def mul(self, meta, items):
        return self._binary(MULT, meta, items)

    @v_args(meta=True)
    def div(self, meta, items):
        return self._binary(DIV, meta, items)

    @v_args(meta=True)
    def compare(self, meta, items):
        if len(items) < 2:
            raise IncompleteExpr(self._text(meta), 'operator')
        token = str(items[1])
        op = COMPARISON_TOKENS.get(token)
        if op is None:
            raise UnsupportedOperator(token)
        return self._binary(op, meta, [items[0], items[2]] if len(items) > 2 else [items[0]])

    def neg(self, items):
        operand = self._expr(items[0])
        if isinstance(operand, Literal) and operand.value.kind == INTEGER:
            return Literal(Value.integer(-operand.value.data))
        if isinstance(operand, Literal) and operand.value.kind == FLOAT:
            return Literal(Value.float32(-operand.value.data))
        return BinaryOp(SUB, Literal(Value.integer(0)), operand)

    def int_lit(self, items):
        text = str(items[0])
        number = int(text)
        if number > I32_MAX:
            raise ParseError(text, 'integer')
        return Literal(Value.integer(number))

    def float_lit(self, items):
        return Literal(Value.float32(float(str(items[0]))))

    @v_args(meta=True)
    def string_lit(self, meta, items):
        # ESCAPED_STRING follows Python's escape rules closely enough
        text = str(items[0])
        try:
            return Literal(Value.string(py_ast.literal_eval(text)))
        except (SyntaxError, ValueError):
            raise NotAST(self._text(meta) or text) from None

    def true_lit(self, items):
        return Literal(Value.boolean(True))

    def false_lit(self, items):
        return Literal(Value.boolean(False))

    def variable(self, items):
        return Variable(str(items[0]))

    @v_args(meta=True)
    def function_call(self, meta, items):
        if not items or not isinstance(items[0], Token):
            raise IncompleteFnCall(self._text(meta), 'identifier')
        args = items[1] if len(items) > 1 else ()
        return FnCall(str(items[0]), tuple(args))

    def arguments(self, items):
        return tuple(self._expr(item) for item in items)

    def read_number(self, items):
        return Input(NUMBER)

    def read_text(self, items):
        return Input(TEXT)

    def __default__(self, data, children, meta):
        raise NotAST(self._text(meta) or str(data))


def build_ast(tree, source: str = '') -> Any:
    """Transform a Lark parse tree into AST nodes.

    Errors raised inside transformer callbacks are unwrapped from Lark's
    VisitError so callers see the ptbr error itself.
    """
    try:
        return ASTTransformer(source).transform(tree)
    except VisitError as e:
        if isinstance(e.orig_exc, PtbrError):
            raise e.orig_exc from None
        raise


def parse_program(source: str) -> Program:
    """Parse ptbr source code into an AST Program."""
    pre = preprocess(source)
    try:
        tree = PTBR_PARSER.parse(pre)
    except UnexpectedInput as e:
        raise GrammarError(str(e)) from None
    return build_ast(tree, pre)
