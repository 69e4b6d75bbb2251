"""Shared fixtures: common symbols and a sympy oracle for value checks."""

from fractions import Fraction

import pytest
import sympy

from symtree import Kind, symbol


def to_sympy(node):
    """Translate a Node into the equivalent sympy expression."""
    if node.kind is Kind.NUMBER:
        value = node.value
        if isinstance(value, Fraction):
            return sympy.Rational(value.numerator, value.denominator)
        if isinstance(value, int):
            return sympy.Integer(value)
        return sympy.Float(value)
    if node.kind is Kind.SYMBOL:
        return sympy.Symbol(node.value)
    children = [to_sympy(child) for child in node.children]
    if node.kind is Kind.SUM:
        return sympy.Add(*children)
    if node.kind is Kind.PRODUCT:
        return sympy.Mul(*children)
    return sympy.Pow(children[0], children[1])


def same_value(a, b) -> bool:
    """True if two nodes denote the same rational function."""
    return sympy.simplify(sympy.expand(to_sympy(a) - to_sympy(b))) == 0


@pytest.fixture
def x():
    return symbol("x")


@pytest.fixture
def y():
    return symbol("y")


@pytest.fixture
def z():
    return symbol("z")


@pytest.fixture
def oracle():
    """The sympy value check, as a fixture so tests need no imports from here."""
    return same_value
