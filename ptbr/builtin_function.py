from dataclasses import dataclass
from typing import Callable, List, Optional

from ptbr.errors import WrongNumberOfArgs
from ptbr.types import Value


@dataclass
class BuiltinFunction:
    """A host function callable from ptbr code.

    `arity` of None accepts any number of arguments. A `None` result from
    `fn` is treated as Void.
    """
    name: str
    arity: Optional[int]
    fn: Callable[[List[Value]], Optional[Value]]

    def __call__(self, args: List[Value]) -> Value:
        if self.arity is not None and len(args) != self.arity:
            raise WrongNumberOfArgs(self.name, self.arity, len(args), 'was' if len(args) == 1 else 'were')
        result = self.fn(args)
        if result is None:
            return Value.void()
        return result

    def __repr__(self) -> str:
        return f"<builtin {self.name}>"
