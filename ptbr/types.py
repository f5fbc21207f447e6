"""Runtime value model for ptbr.

A `Value` is a small immutable tagged union over the five kinds the
language knows about: Void, String, Integer, Float and Bool. Integers are
32-bit two's complement and wrap on overflow; floats are IEEE single
precision. Both are stored as plain Python numbers and narrowed with numpy
after every operation so results match a native 32-bit implementation.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Tuple
import math
import operator

import numpy as np

from .errors import IllegalOperation, DivideByZero, ToBoolError


VOID = 'Void'
STRING = 'String'
INTEGER = 'Integer'
FLOAT = 'Float'
BOOL = 'Bool'

KINDS = (VOID, STRING, INTEGER, FLOAT, BOOL)

I32_MIN = -2 ** 31
I32_MAX = 2 ** 31 - 1


def wrap_i32(n: int) -> int:
    """Wrap an arbitrary Python int into the signed 32-bit range."""
    return (n - I32_MIN) % 2 ** 32 + I32_MIN


def to_f32(x: float) -> float:
    """Round a Python float to the nearest single precision value."""
    with np.errstate(over='ignore'):
        return float(np.float32(x))


def format_f32(x: float) -> str:
    """Shortest text that reads back as the same single precision value.

    Integral values are printed without a fractional part (`25`, not
    `25.0`).
    """
    if math.isnan(x):
        return 'NaN'
    return np.format_float_positional(np.float32(x), unique=True, trim='-')


def trunc_div(a: int, b: int) -> int:
    """Integer division rounding toward zero."""
    q = abs(a) // abs(b)
    return q if (a < 0) == (b < 0) else -q


@dataclass(frozen=True)
class Value:
    """A ptbr runtime value.

    `kind` is one of `KINDS`; `data` holds the Python payload (`None` for
    Void, `str`, `int`, `float` or `bool`). Use the static constructors
    rather than building instances by hand so payloads are normalised.
    """
    kind: str
    data: Any = None

    # Convenience constructors
    @staticmethod
    def void() -> 'Value':
        return _VOID

    @staticmethod
    def string(s: str) -> 'Value':
        return Value(STRING, str(s))

    @staticmethod
    def integer(n: int) -> 'Value':
        return Value(INTEGER, wrap_i32(int(n)))

    @staticmethod
    def float32(x: float) -> 'Value':
        return Value(FLOAT, to_f32(float(x)))

    @staticmethod
    def boolean(b: bool) -> 'Value':
        return _TRUE if b else _FALSE

    @property
    def type_name(self) -> str:
        """Lower-case kind name used in error messages."""
        return self.kind.lower()

    def is_numeric(self) -> bool:
        return self.kind in (INTEGER, FLOAT)

    def __str__(self) -> str:
        if self.kind == BOOL:
            return 'true' if self.data else 'false'
        if self.kind == FLOAT:
            return format_f32(self.data)
        if self.kind == INTEGER:
            return str(self.data)
        if self.kind == STRING:
            return self.data
        return ''

    def to_bool(self) -> bool:
        """Return the payload of a Bool value; any other kind is an error."""
        if self.kind != BOOL:
            raise ToBoolError(self)
        return self.data

    # Arithmetic
    def __add__(self, other: 'Value') -> 'Value':
        return _arith('addition', self, other, operator.add)

    def __sub__(self, other: 'Value') -> 'Value':
        return _arith('subtraction', self, other, operator.sub)

    def __mul__(self, other: 'Value') -> 'Value':
        return _arith('multiplication', self, other, operator.mul)

    def __truediv__(self, other: 'Value') -> 'Value':
        return _arith('division', self, other, None)

    # Comparison
    def equals(self, other: 'Value') -> bool:
        """Language-level equality.

        Integer and Float compare numerically; other kinds compare
        structurally, and two values of incompatible kinds are unequal.
        """
        if self.is_numeric() and other.is_numeric():
            a, b = _promote(self, other)
            return a == b
        return self.kind == other.kind and self.data == other.data

    def ordered(self, other: 'Value') -> Tuple[Any, Any]:
        """Return a pair of Python values that order like `self` and `other`.

        Raises IllegalOperation when the two kinds have no ordering.
        """
        if self.is_numeric() and other.is_numeric():
            return _promote(self, other)
        if self.kind == other.kind and self.kind in (STRING, BOOL):
            return self.data, other.data
        raise IllegalOperation('comparison', self.type_name, other.type_name)


_VOID = Value(VOID)
_TRUE = Value(BOOL, True)
_FALSE = Value(BOOL, False)


def _promote(a: Value, b: Value) -> Tuple[Any, Any]:
    if a.kind == FLOAT or b.kind == FLOAT:
        return to_f32(a.data), to_f32(b.data)
    return a.data, b.data


def _arith(op_name: str, a: Value, b: Value, fn: Callable[[Any, Any], Any]) -> Value:
    # Void is absorbed by any other operand
    if a.kind == VOID:
        return b
    if b.kind == VOID:
        return a
    if a.kind == BOOL or b.kind == BOOL:
        raise IllegalOperation(op_name, 'any', 'bool')
    if a.kind == STRING or b.kind == STRING:
        if op_name != 'addition':
            raise IllegalOperation(op_name, 'any', 'string')
        return Value.string(str(a) + str(b))
    if fn is None:
        if b.data == 0:
            raise DivideByZero()
        if a.kind == INTEGER and b.kind == INTEGER:
            return Value.integer(trunc_div(a.data, b.data))
        x, y = _promote(a, b)
        return Value.float32(x / y)
    if a.kind == INTEGER and b.kind == INTEGER:
        return Value.integer(fn(a.data, b.data))
    x, y = _promote(a, b)
    return Value.float32(fn(x, y))
