import math

import numpy as np
import pytest

from ptbr.errors import IllegalOperation, DivideByZero, ToBoolError
from ptbr.types import Value, I32_MAX, I32_MIN, INTEGER, FLOAT, STRING, VOID, format_f32


def test_integer_wraps_to_32_bits():
    assert (Value.integer(I32_MAX) + Value.integer(1)).data == I32_MIN
    assert (Value.integer(I32_MIN) - Value.integer(1)).data == I32_MAX
    assert Value.integer(2 ** 31).data == I32_MIN
    assert (Value.integer(65536) * Value.integer(65536)).data == 0


def test_integer_division_truncates_toward_zero():
    assert (Value.integer(7) / Value.integer(2)).data == 3
    assert (Value.integer(-7) / Value.integer(2)).data == -3
    assert (Value.integer(7) / Value.integer(-2)).data == -3
    assert (Value.integer(I32_MIN) / Value.integer(-1)).data == I32_MIN


def test_mixed_arithmetic_promotes_to_float():
    result = Value.integer(10) / Value.float32(2.5)
    assert result.kind == FLOAT
    assert result.data == 4.0
    result = Value.float32(0.5) + Value.integer(1)
    assert result.kind == FLOAT
    assert str(result) == '1.5'


def test_float_is_single_precision():
    v = Value.float32(0.1)
    assert v.data == float(np.float32(0.1))
    assert v.data != 0.1
    assert str(v) == '0.1'


def test_float_display():
    assert str(Value.float32(25.0)) == '25'
    assert str(Value.float32(12.5)) == '12.5'
    assert str(Value.float32(1e39)) == 'inf'
    assert format_f32(math.nan) == 'NaN'


def test_display_of_other_kinds():
    assert str(Value.boolean(True)) == 'true'
    assert str(Value.boolean(False)) == 'false'
    assert str(Value.integer(-42)) == '-42'
    assert str(Value.string('hi there')) == 'hi there'
    assert str(Value.void()) == ''


def test_string_concatenation_keeps_operand_order():
    assert str(Value.string('x') + Value.integer(1)) == 'x1'
    assert str(Value.integer(1) + Value.string('x')) == '1x'
    assert str(Value.float32(2.5) + Value.string('x')) == '2.5x'
    with pytest.raises(IllegalOperation):
        Value.boolean(True) + Value.string('x')


def test_void_absorbs_arithmetic():
    five = Value.integer(5)
    assert Value.void() + five == five
    assert five - Value.void() == five
    assert Value.void() * Value.string('s') == Value.string('s')
    assert five / Value.void() == five
    assert (Value.void() + Value.void()).kind == VOID


@pytest.mark.parametrize('op, name', [
    (lambda a, b: a + b, 'addition'),
    (lambda a, b: a - b, 'subtraction'),
    (lambda a, b: a * b, 'multiplication'),
    (lambda a, b: a / b, 'division'),
])
def test_bool_arithmetic_is_illegal(op, name):
    with pytest.raises(IllegalOperation) as exc:
        op(Value.integer(1), Value.boolean(True))
    assert (exc.value.op, exc.value.left, exc.value.right) == (name, 'any', 'bool')
    assert str(exc.value) == f"Cannot perform {name}, between types any and bool"


def test_string_only_supports_addition():
    with pytest.raises(IllegalOperation) as exc:
        Value.string('a') - Value.integer(1)
    assert (exc.value.op, exc.value.right) == ('subtraction', 'string')
    with pytest.raises(IllegalOperation):
        Value.integer(2) * Value.string('a')


def test_divide_by_zero():
    with pytest.raises(DivideByZero):
        Value.integer(1) / Value.integer(0)
    with pytest.raises(DivideByZero):
        Value.float32(1.5) / Value.integer(0)
    with pytest.raises(DivideByZero):
        Value.integer(1) / Value.float32(0.0)


def test_equality():
    assert Value.integer(1).equals(Value.float32(1.0))
    assert Value.string('a').equals(Value.string('a'))
    assert not Value.integer(1).equals(Value.string('1'))
    assert not Value.boolean(True).equals(Value.integer(1))
    assert Value.void().equals(Value.void())


def test_ordering():
    assert Value.integer(1).ordered(Value.float32(1.5)) == (1.0, 1.5)
    a, b = Value.string('abc').ordered(Value.string('abd'))
    assert a < b
    a, b = Value.boolean(False).ordered(Value.boolean(True))
    assert a < b
    with pytest.raises(IllegalOperation) as exc:
        Value.string('a').ordered(Value.integer(1))
    assert (exc.value.op, exc.value.left, exc.value.right) == ('comparison', 'string', 'integer')


def test_to_bool():
    assert Value.boolean(True).to_bool() is True
    with pytest.raises(ToBoolError):
        Value.integer(1).to_bool()
    with pytest.raises(ToBoolError):
        Value.void().to_bool()


def test_constructors_normalise_payloads():
    assert Value.integer(3.0).kind == INTEGER
    assert Value.string(12).data == '12'
    assert Value.string('x').kind == STRING
    assert Value.boolean(1) is Value.boolean(True)
