"""Expression builder for symtree."""

from typing import Tuple

from .node import (
    Kind, Node, NodeBuilder, NumericType, ValueType, convert, number, symbol,
)


class _ExprBuilder:
    """
    Expression builder for symtree.

    Provides convenient ways to construct expression trees without
    reaching for the node constructors.

    Examples:
        from symtree import E

        # Convert raw values
        E("x")            -> Symbol('x')
        E(3)              -> Number(3)

        # Build n-ary nodes directly (no simplification happens)
        E.sum("x", E.prod(2, "y"))    -> Sum(Symbol('x'), Product(Number(2), Symbol('y')))

        # Create symbols for use with the arithmetic operators
        x, y = E.syms("x", "y")
        expr = x + 2 * y
    """

    def __call__(self, value: ValueType) -> Node:
        """
        Convert a Node, number or symbol name to a Node.

        Examples:
            E("x") -> Symbol('x')
            E(2)   -> Number(2)
        """
        return convert(value)

    def sym(self, name: str) -> Node:
        """
        Create a symbol.

        Example:
            E.sym("x") -> Symbol('x')
        """
        return symbol(name)

    def syms(self, *names: str) -> Tuple[Node, ...]:
        """
        Create multiple symbols for unpacking.

        Example:
            x, y, z = E.syms("x", "y", "z")
        """
        return tuple(symbol(name) for name in names)

    def num(self, value: NumericType) -> Node:
        """
        Create a number.

        Example:
            E.num(5) -> Number(5)
        """
        return number(value)

    def sum(self, *args: ValueType) -> Node:
        """
        Build a flattened sum of any number of operands.

        Examples:
            E.sum("x", 1)             -> Sum(Symbol('x'), Number(1))
            E.sum("x", E.sum(1, 2))   -> Sum(Symbol('x'), Number(1), Number(2))
            E.sum("x")                -> Symbol('x')
        """
        return NodeBuilder(Kind.SUM, [convert(arg) for arg in args]).build()

    def prod(self, *args: ValueType) -> Node:
        """
        Build a flattened product of any number of operands.

        Example:
            E.prod(2, "x") -> Product(Number(2), Symbol('x'))
        """
        return NodeBuilder(Kind.PRODUCT, [convert(arg) for arg in args]).build()

    def pow(self, base: ValueType, exponent: ValueType) -> Node:
        """
        Build a power.

        Example:
            E.pow("x", 2) -> Power(Symbol('x'), Number(2))
        """
        return Node(Kind.POWER, children=(convert(base), convert(exponent)))

    def __repr__(self) -> str:
        return "E (expression builder)"


# Singleton instance
E = _ExprBuilder()
