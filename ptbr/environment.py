from dataclasses import dataclass
from typing import Dict, Iterable, Optional, Tuple

from ptbr.ast import Block
from ptbr.errors import ShadowVar, UndefinedVariable
from ptbr.types import Value


@dataclass(frozen=True)
class Function:
    """A user-defined function as registered in a scope."""
    name: str
    params: Tuple[str, ...]
    body: Block

    def __repr__(self) -> str:
        return f"<function {self.name}({', '.join(self.params)})>"


class Scope:
    """One link of the lexical scope chain.

    Holds the variables and functions defined directly in this scope and
    delegates every lookup it cannot answer to its parent.
    """
    def __init__(self, parent: Optional['Scope'] = None, allow_redefinition: bool = True):
        self.parent = parent
        self.variables: Dict[str, Value] = {}
        self.functions: Dict[str, Function] = {}
        self.allow_redefinition = allow_redefinition

    def child(self) -> 'Scope':
        return Scope(parent=self, allow_redefinition=self.allow_redefinition)

    def define(self, name: str, value: Value):
        if not self.allow_redefinition and name in self.variables:
            raise ShadowVar(name)
        self.variables[name] = value

    def lookup(self, name: str) -> Optional[Value]:
        scope = self
        while scope is not None:
            if name in scope.variables:
                return scope.variables[name]
            scope = scope.parent
        return None

    def assign(self, name: str, value: Value):
        # Update the innermost scope that already binds the name
        scope = self
        while scope is not None:
            if name in scope.variables:
                scope.variables[name] = value
                return
            scope = scope.parent
        raise UndefinedVariable(name)

    def declare_function(self, name: str, params: Iterable[str], body: Block) -> Function:
        func = Function(name, tuple(params), body)
        self.functions[name] = func
        return func

    def function_scope(self, name: str) -> Optional['Scope']:
        """Return the nearest scope in the chain that declares `name`."""
        scope = self
        while scope is not None:
            if name in scope.functions:
                return scope
            scope = scope.parent
        return None

    def resolve_function(self, name: str) -> Optional[Function]:
        scope = self.function_scope(name)
        if scope is None:
            return None
        return scope.functions[name]

    def __repr__(self) -> str:
        depth = 0
        scope = self.parent
        while scope is not None:
            depth += 1
            scope = scope.parent
        return f"<Scope depth={depth} vars={sorted(self.variables)} fns={sorted(self.functions)}>"
