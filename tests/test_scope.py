import pytest

from ptbr.ast import Block
from ptbr.environment import Scope
from ptbr.errors import ShadowVar, UndefinedVariable
from ptbr.types import Value


def test_lookup_walks_outward():
    root = Scope()
    root.define('x', Value.integer(1))
    inner = root.child().child()
    assert inner.lookup('x') == Value.integer(1)
    assert inner.lookup('missing') is None


def test_inner_definition_shadows_without_mutating_parent():
    root = Scope()
    root.define('x', Value.integer(1))
    inner = root.child()
    inner.define('x', Value.integer(2))
    assert inner.lookup('x') == Value.integer(2)
    assert root.lookup('x') == Value.integer(1)


def test_siblings_do_not_see_each_other():
    root = Scope()
    left = root.child()
    right = root.child()
    left.define('x', Value.integer(1))
    assert right.lookup('x') is None


def test_assign_updates_nearest_binding():
    root = Scope()
    root.define('x', Value.integer(1))
    inner = root.child()
    inner.assign('x', Value.integer(5))
    assert root.lookup('x') == Value.integer(5)
    assert 'x' not in inner.variables


def test_assign_never_creates_binding():
    with pytest.raises(UndefinedVariable) as exc:
        Scope().child().assign('y', Value.integer(1))
    assert exc.value.name == 'y'


def test_redefinition_overwrites_by_default():
    scope = Scope()
    scope.define('x', Value.integer(1))
    scope.define('x', Value.string('now a string'))
    assert scope.lookup('x') == Value.string('now a string')


def test_strict_mode_rejects_same_scope_redefinition():
    root = Scope(allow_redefinition=False)
    root.define('x', Value.integer(1))
    with pytest.raises(ShadowVar) as exc:
        root.define('x', Value.integer(2))
    assert exc.value.name == 'x'
    # shadowing from a child scope is still allowed
    child = root.child()
    child.define('x', Value.integer(3))
    assert child.lookup('x') == Value.integer(3)


def test_functions_resolve_through_the_chain():
    root = Scope()
    body = Block(())
    func = root.declare_function('f', ['a', 'b'], body)
    inner = root.child()
    assert inner.resolve_function('f') is func
    assert inner.function_scope('f') is root
    assert func.params == ('a', 'b')
    assert inner.resolve_function('g') is None
    assert inner.function_scope('g') is None


def test_function_redeclaration_replaces():
    root = Scope()
    root.declare_function('f', [], Block(()))
    second = root.declare_function('f', ['x'], Block(()))
    assert root.resolve_function('f') is second
