"""
Node model for symtree.

An expression is a tree of immutable Node values. Each node is tagged with a
Kind from a closed set:

    Number(value)           - integer, rational or float literal
    Symbol(name)            - symbolic variable
    Sum(children...)        - n-ary addition
    Product(children...)    - n-ary multiplication
    Power(base, exponent)   - binary exponentiation

Sums and products are kept flat: adding a Sum into a Sum splices its
children instead of nesting it, and a Sum or Product with a single child is
never built (the child is returned instead). Mutation only happens inside a
NodeBuilder, before the finished node is handed out.

The arithmetic operators on Node build structure and never simplify:

    x, y = symbol("x"), symbol("y")
    expr = 2 * x + y ** 2        # Sum(Product(2, x), Power(y, 2))
    expr.reduce()                # see symtree.rewriter
"""

import numbers
from enum import Enum
from fractions import Fraction
from typing import Iterable, List, Optional, Sequence, Tuple, Union

from .config import EngineConfig, resolve
from .errors import ConversionError, PrecondError


# Type aliases
NumericType = Union[int, Fraction, float]
ValueType = Union["Node", int, Fraction, float, str]


class Kind(Enum):
    """The closed set of node kinds."""

    NUMBER = "number"
    SYMBOL = "symbol"
    SUM = "sum"
    PRODUCT = "product"
    POWER = "power"

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_KINDS

    @property
    def label(self) -> str:
        """Constructor-style name used by repr: 'Sum', 'Power', ..."""
        return self.value.capitalize()


TERMINAL_KINDS = frozenset({Kind.NUMBER, Kind.SYMBOL})
NARY_KINDS = frozenset({Kind.SUM, Kind.PRODUCT})
COMPOSITE_KINDS = frozenset({Kind.SUM, Kind.PRODUCT, Kind.POWER})

# Value of an empty sum or product
IDENTITY = {Kind.SUM: 0, Kind.PRODUCT: 1}


# ============================================================
# Node
# ============================================================

class Node:
    """
    An immutable expression tree node.

    Build nodes with make_node(), convert(), number() and symbol(), or with
    the arithmetic operators. The constructor does not enforce the flatness
    and collapse invariants; NodeBuilder and make_node do.

    Equality with == is exact and ordered: Sum(x, y) != Sum(y, x). Use
    is_equal() for equality up to commutativity and simplification.
    """

    __slots__ = ("_kind", "_value", "_children", "_hash")

    def __init__(self, kind: Kind, value=None, children: Sequence["Node"] = ()):
        self._kind = kind
        self._value = value
        self._children = tuple(children)
        self._hash = None

    @property
    def kind(self) -> Kind:
        return self._kind

    @property
    def value(self):
        """The literal of a terminal node; None for composites."""
        return self._value

    @property
    def children(self) -> Tuple["Node", ...]:
        return self._children

    def is_terminal(self) -> bool:
        """True iff the node is a Number or a Symbol."""
        return self._kind in TERMINAL_KINDS

    def copy(self) -> "Node":
        """Return a deep copy sharing no sub-structure with this node."""
        if self.is_terminal():
            return Node(self._kind, self._value)
        return Node(self._kind, children=[child.copy() for child in self._children])

    def size(self, config: Optional[EngineConfig] = None) -> int:
        """Cost metric used to accept or reject rewrites. See size()."""
        return size(self, config)

    def reduce(self, config: Optional[EngineConfig] = None) -> "Node":
        from .rewriter import reduce
        return reduce(self, config)

    def expand(self, config: Optional[EngineConfig] = None) -> "Node":
        from .rewriter import expand
        return expand(self, config)

    def is_equal(self, other: ValueType, config: Optional[EngineConfig] = None) -> bool:
        from .rewriter import is_equal
        return is_equal(self, other, config)

    # ----- arithmetic construction -----

    def __add__(self, other):
        return _dunder(add, self, other)

    def __radd__(self, other):
        return _dunder(add, other, self)

    def __sub__(self, other):
        return _dunder(sub, self, other)

    def __rsub__(self, other):
        return _dunder(sub, other, self)

    def __mul__(self, other):
        return _dunder(mul, self, other)

    def __rmul__(self, other):
        return _dunder(mul, other, self)

    def __truediv__(self, other):
        return _dunder(div, self, other)

    def __rtruediv__(self, other):
        return _dunder(div, other, self)

    def __pow__(self, other):
        return _dunder(power, self, other)

    def __rpow__(self, other):
        return _dunder(power, other, self)

    def __neg__(self):
        return neg(self)

    def __pos__(self):
        return self.copy()

    # ----- structural identity -----

    def __eq__(self, other):
        if not isinstance(other, Node):
            return NotImplemented
        if self is other:
            return True
        # 1 and 1.0 are distinct literals
        return (self._kind is other._kind
                and type(self._value) is type(other._value)
                and self._value == other._value
                and self._children == other._children)

    def __ne__(self, other):
        result = self.__eq__(other)
        if result is NotImplemented:
            return result
        return not result

    def __hash__(self) -> int:
        if self._hash is None:
            self._hash = hash((self._kind, type(self._value), self._value, self._children))
        return self._hash

    def __str__(self) -> str:
        from .render import to_string
        return to_string(self)

    def __repr__(self) -> str:
        if self._kind is Kind.NUMBER:
            return f"Number({self._value!r})"
        if self._kind is Kind.SYMBOL:
            return f"Symbol({self._value!r})"
        inner = ", ".join(repr(child) for child in self._children)
        return f"{self._kind.label}({inner})"


# ============================================================
# NodeBuilder - the only place nodes are mutated
# ============================================================

class NodeBuilder:
    """
    Mutable assembly area for a Sum or Product.

    Appending or prepending a node of the builder's own kind splices that
    node's children instead of nesting it. build() publishes the result once;
    the builder cannot be used afterwards.

        builder = NodeBuilder(Kind.SUM)
        builder.append(x)
        builder.extend([y, z])
        node = builder.build()
    """

    __slots__ = ("_kind", "_children", "_built")

    def __init__(self, kind: Kind, children: Iterable[Node] = ()):
        kind = Kind(kind)
        if kind not in NARY_KINDS:
            raise PrecondError(f"NodeBuilder only assembles sums and products, not {kind.value}")
        self._kind = kind
        self._children: List[Node] = []
        self._built = False
        self.extend(children)

    @property
    def kind(self) -> Kind:
        return self._kind

    def _check_open(self):
        if self._built:
            raise PrecondError("NodeBuilder was already built")

    def append(self, node: Node) -> "NodeBuilder":
        """Add node at the end, splicing it if it has the builder's kind."""
        self._check_open()
        if not isinstance(node, Node):
            raise ConversionError(node)
        if node.kind is self._kind:
            self._children.extend(node.children)
        else:
            self._children.append(node)
        return self

    def prepend(self, node: Node) -> "NodeBuilder":
        """Add node at the front, splicing it if it has the builder's kind."""
        self._check_open()
        if not isinstance(node, Node):
            raise ConversionError(node)
        if node.kind is self._kind:
            self._children[0:0] = node.children
        else:
            self._children.insert(0, node)
        return self

    def extend(self, nodes: Iterable[Node]) -> "NodeBuilder":
        """Append every node in order."""
        for node in nodes:
            self.append(node)
        return self

    def __len__(self) -> int:
        return len(self._children)

    def build(self) -> Node:
        """
        Publish the assembled node.

        One child collapses to that child. No children yields the identity
        of the operation (0 for a sum, 1 for a product).
        """
        self._check_open()
        self._built = True
        if not self._children:
            return Node(Kind.NUMBER, IDENTITY[self._kind])
        if len(self._children) == 1:
            return self._children[0]
        return Node(self._kind, children=self._children)

    def __repr__(self) -> str:
        state = "built" if self._built else "open"
        return f"NodeBuilder({self._kind.value}, {len(self._children)} children, {state})"


# ============================================================
# Construction
# ============================================================

def _normalize_number(value) -> NumericType:
    if isinstance(value, bool):
        raise ConversionError(value)
    if isinstance(value, numbers.Integral):
        return int(value)
    if isinstance(value, numbers.Rational):
        value = Fraction(value)
        if value.denominator == 1:
            return int(value.numerator)
        return value
    if isinstance(value, numbers.Real):
        return float(value)
    raise ConversionError(value)


def number(value: NumericType) -> Node:
    """Create a Number leaf. Integral fractions are stored as int."""
    return Node(Kind.NUMBER, _normalize_number(value))


def symbol(name: str) -> Node:
    """Create a Symbol leaf."""
    if not isinstance(name, str) or not name:
        raise ConversionError(name)
    return Node(Kind.SYMBOL, name)


def is_node(value) -> bool:
    """Check if a value is a Node."""
    return isinstance(value, Node)


def convert(value: ValueType) -> Node:
    """
    Convert a value into a Node.

    Args:
        value: A Node (deep-copied), a real number (Number) or a
            non-empty string (Symbol)

    Returns:
        A new Node

    Raises:
        ConversionError: If the value has any other kind (a TypeError)
    """
    if isinstance(value, Node):
        return value.copy()
    if isinstance(value, str):
        return symbol(value)
    if isinstance(value, numbers.Number):
        return number(value)
    raise ConversionError(value)


def make_node(kind: Union[Kind, str], payload) -> Node:
    """
    Create a node of the given kind.

    Args:
        kind: A Kind or its name ("sum", "product", ...)
        payload: The literal for terminals, a sequence of Nodes for sums and
            products, or the pair (base, exponent) for powers

    Examples:
        make_node("sum", [x, make_node("sum", [y, z])])  # Sum(x, y, z)
        make_node(Kind.PRODUCT, [x])                     # x
        make_node(Kind.POWER, (x, number(2)))            # Power(x, 2)
    """
    kind = Kind(kind)
    if kind is Kind.NUMBER:
        return number(payload)
    if kind is Kind.SYMBOL:
        return symbol(payload)
    if kind is Kind.POWER:
        payload = tuple(payload)
        if len(payload) != 2:
            raise PrecondError(f"Power takes exactly (base, exponent), got {len(payload)} nodes")
        for part in payload:
            if not isinstance(part, Node):
                raise ConversionError(part)
        return Node(Kind.POWER, children=payload)
    return NodeBuilder(kind, payload).build()


def size(node: Node, config: Optional[EngineConfig] = None) -> int:
    """
    Cost of a tree.

    A Symbol costs 1000, a Number 1, and a composite 1 plus the cost of its
    children (weights come from the config). The heavy symbol weight makes
    reduction favour folding numbers over duplicating symbolic terms.
    """
    config = resolve(config)
    if node.kind is Kind.SYMBOL:
        return config.symbol_size
    if node.kind is Kind.NUMBER:
        return config.number_size
    return config.node_size + sum(size(child, config) for child in node.children)


# ============================================================
# Combination operators (structural, no simplification)
# ============================================================

def _dunder(func, x, y):
    # Unsupported operand types defer to Python's own TypeError
    try:
        return func(x, y)
    except ConversionError:
        return NotImplemented


def add(x: ValueType, y: ValueType) -> Node:
    """Sum of x and y: Sum(x, y), flattened."""
    return NodeBuilder(Kind.SUM, [convert(x), convert(y)]).build()


def sub(x: ValueType, y: ValueType) -> Node:
    """Difference of x and y: Sum(x, -y)."""
    return NodeBuilder(Kind.SUM, [convert(x), neg(y)]).build()


def mul(x: ValueType, y: ValueType) -> Node:
    """Product of x and y: Product(x, y), flattened."""
    return NodeBuilder(Kind.PRODUCT, [convert(x), convert(y)]).build()


def div(x: ValueType, y: ValueType) -> Node:
    """Quotient of x and y: Product(x, Power(y, -1))."""
    inverse = Node(Kind.POWER, children=(convert(y), number(-1)))
    return NodeBuilder(Kind.PRODUCT, [convert(x), inverse]).build()


def neg(x: ValueType) -> Node:
    """Negation: a Number flips sign, anything else becomes Product(-1, x)."""
    x = convert(x)
    if x.kind is Kind.NUMBER:
        return number(-x.value)
    return NodeBuilder(Kind.PRODUCT, [number(-1), x]).build()


def power(x: ValueType, y: ValueType) -> Node:
    """Power of x to y: Power(x, y). Powers are never flattened."""
    return Node(Kind.POWER, children=(convert(x), convert(y)))
