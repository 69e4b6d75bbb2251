"""
Core rewriting module for symtree.

This module combines two operands under an operator, extracts common
factors, reduces trees by greedy pairwise merging, expands products over
sums and decides equality up to commutativity.

Every function here is a pure tree transform: arguments are never mutated
and a new tree is returned. The reducer is a local heuristic. It scans
children left to right, keeps any merge that makes the tree smaller by
size(), and never backtracks, so its output depends on child order:

    reduce(x + 1 + 1)   -> x + 2
    reduce(x + 1 - 1)   -> x + 0    (x is never revisited after 1 - 1 folds)
"""

import logging
from fractions import Fraction
from functools import lru_cache
from typing import List, Optional, Tuple

from .config import EngineConfig, resolve
from .errors import PrecondError
from .node import (
    COMPOSITE_KINDS, Kind, Node, NodeBuilder, ValueType, convert, number, size,
)
from .trace import MergeStep, ReductionTrace

logger = logging.getLogger(__name__)

ZERO = number(0)
ONE = number(1)
TWO = number(2)

CommonType = Tuple[List[Node], List[Node], List[Node]]


def _as_node(value: ValueType) -> Node:
    return value if isinstance(value, Node) else convert(value)


def _is_integral(value) -> bool:
    if isinstance(value, int):
        return True
    if isinstance(value, Fraction):
        return value.denominator == 1
    return float(value).is_integer()


def _plain(kind: Kind, x: Node, y: Node) -> Node:
    """Build kind(x, y) with no simplification."""
    if kind is Kind.POWER:
        return Node(Kind.POWER, children=(x, y))
    return NodeBuilder(kind, [x, y]).build()


def _rebuild(kind: Kind, children: List[Node]) -> Node:
    if kind is Kind.POWER:
        return Node(Kind.POWER, children=children)
    return NodeBuilder(kind, children).build()


# ============================================================
# Arithmetic Combiner
# ============================================================

def _fold_numbers(kind: Kind, x: Node, y: Node, config: EngineConfig) -> Optional[Node]:
    """Evaluate kind(x, y) for two Number leaves, or None if it must stay symbolic."""
    if kind is Kind.SUM:
        return number(x.value + y.value)
    if kind is Kind.PRODUCT:
        return number(x.value * y.value)

    # Powers fold only for integer exponents, and 0 to a negative power
    # is left to the 0^x = 0 rule
    exponent = y.value
    if not _is_integral(exponent):
        return None
    exponent = int(exponent)
    if x.value == 0 and exponent < 0:
        return None
    if abs(exponent) > config.max_fold_exponent:
        logger.debug("not folding %s^%s: exponent exceeds max_fold_exponent=%d",
                     x.value, exponent, config.max_fold_exponent)
        return None
    base = Fraction(x.value) if isinstance(x.value, int) else x.value
    try:
        return number(base ** exponent)
    except OverflowError:
        logger.debug("not folding %s^%s: float overflow", x.value, exponent)
        return None


def _is_literal(node: Node, value: int, config: EngineConfig) -> bool:
    """Check node against the literal 0 or 1 using is_equal."""
    if node.is_terminal():
        return node.kind is Kind.NUMBER and node.value == value
    return is_equal(node, number(value), config)


def combine(
    kind: Kind, x: ValueType, y: ValueType, config: Optional[EngineConfig] = None
) -> Node:
    """
    Combine two operands under an operator, simplifying where possible.

    In order:
        1. two Numbers fold to a Number
        2. identity and absorbing elements: x*0 = 0*y = 0, x+0 = x,
           0+y = y, x^0 = 1 (0^0 included), 0^x = 0, 1^x = 1, x^1 = x,
           1*x = x*1 = x
        3. a sum tries to pull out a common multiplicative factor,
           a product tries to merge powers of a common base
        4. otherwise the plain node kind(x, y)

    Args:
        kind: Kind.SUM, Kind.PRODUCT or Kind.POWER (or their names)
        x: Left operand
        y: Right operand

    Returns:
        A new Node; x and y are not modified
    """
    kind = Kind(kind)
    if kind not in COMPOSITE_KINDS:
        raise PrecondError(f"combine needs an operator kind, got {kind.value}")
    config = resolve(config)
    x = _as_node(x)
    y = _as_node(y)

    if x.kind is Kind.NUMBER and y.kind is Kind.NUMBER:
        folded = _fold_numbers(kind, x, y, config)
        if folded is not None:
            return folded

    if kind is Kind.PRODUCT:
        if _is_literal(x, 0, config) or _is_literal(y, 0, config):
            return ZERO
    elif kind is Kind.SUM:
        if _is_literal(x, 0, config):
            return y
        if _is_literal(y, 0, config):
            return x
    else:
        if _is_literal(y, 0, config):
            return ONE
        if _is_literal(x, 0, config):
            return ZERO
        if _is_literal(x, 1, config):
            return ONE
        if _is_literal(y, 1, config):
            return x

    if kind is Kind.PRODUCT:
        if _is_literal(x, 1, config):
            return y
        if _is_literal(y, 1, config):
            return x

    if kind is Kind.SUM:
        factored = _factorize(Kind.PRODUCT, x, y, config)
    elif kind is Kind.PRODUCT:
        factored = _factorize(Kind.POWER, x, y, config)
    else:
        factored = None
    if factored is not None:
        return factored

    return _plain(kind, x, y)


# ============================================================
# Factorization Engine
# ============================================================

def find_common(x: Node, y: Node, config: Optional[EngineConfig] = None) -> CommonType:
    """
    Split the children of two same-kind composites into shared and unshared.

    Children are compared with is_equal and the first match wins. After a
    match the scan over y continues from the same position for the next
    child of x; it restarts from the beginning of y only once it runs off
    the end. A different scan order can therefore find more common factors.

    Args:
        x: A Sum, Product or Power
        y: A node of the same kind

    Returns:
        (common, rest_of_x, rest_of_y) as lists of copied nodes

    Raises:
        PrecondError: If either node is terminal or the kinds differ
    """
    if x.is_terminal() or y.is_terminal():
        raise PrecondError("find_common requires two non-terminal nodes")
    if x.kind is not y.kind:
        raise PrecondError(
            f"find_common requires nodes of one kind, got {x.kind.value} and {y.kind.value}"
        )
    config = resolve(config)

    common: List[Node] = []
    diffx = list(x.copy().children)
    diffy = list(y.copy().children)
    xpos = 0
    ypos = 0

    while xpos < len(diffx) and diffy:
        if is_equal(diffx[xpos], diffy[ypos], config):
            common.append(diffx.pop(xpos))
            diffy.pop(ypos)
        else:
            ypos += 1

        if ypos >= len(diffy):
            xpos += 1
            ypos = 0

    return common, diffx, diffy


def _product_of(nodes: List[Node]) -> Node:
    # An emptied side stands for the multiplicative identity
    if not nodes:
        return ONE
    return NodeBuilder(Kind.PRODUCT, nodes).build()


def factor_out_sum(x: Node, y: Node, config: Optional[EngineConfig] = None) -> Optional[Node]:
    """
    Rewrite x + y as (rest_x + rest_y) * common for two Products.

    The rewrite is kept only if reducing rest_x + rest_y makes it strictly
    smaller; otherwise None is returned and the caller keeps the plain sum.

    Examples:
        2*x + 3*x  -> 5 * x
        2*x + 3*y  -> None
    """
    config = resolve(config)
    common, diffx, diffy = find_common(x, y, config)
    if not common:
        return None

    candidate = NodeBuilder(Kind.SUM, [_product_of(diffx), _product_of(diffy)]).build()
    reduced = reduce(candidate, config)
    if size(reduced, config) >= size(candidate, config):
        return None

    logger.debug("factored %s out of (%s) + (%s)", _product_of(common), x, y)
    factored = NodeBuilder(Kind.PRODUCT, [reduced, _product_of(common)]).build()
    return reduce(factored, config)


def factor_out_power(x: Node, y: Node, config: Optional[EngineConfig] = None) -> Optional[Node]:
    """
    Rewrite b^e1 * b^e2 as b^(e1 + e2) for two Powers with equal bases.

    Returns None when the bases differ or when e1 + e2 does not reduce to
    something smaller. The merged Power itself is not reduced, so x * x^-1
    gives x^0 and (xy)^2 * (xy)^-1 gives (xy)^1; a further reduce() or
    is_equal() collapses them to 1 and xy.
    """
    if x.kind is not Kind.POWER or y.kind is not Kind.POWER:
        raise PrecondError("factor_out_power requires two Power nodes")
    config = resolve(config)
    base, e1 = x.children
    other_base, e2 = y.children
    if not is_equal(base, other_base, config):
        return None

    exponent = NodeBuilder(Kind.SUM, [e1, e2]).build()
    reduced = reduce(exponent, config)
    if size(reduced, config) >= size(exponent, config):
        return None

    logger.debug("merged powers of %s into exponent %s", base, reduced)
    return Node(Kind.POWER, children=(base, reduced))


def _wrap(kind: Kind, node: Node) -> Node:
    """View a node as a Product(node, 1) or Power(node, 1)."""
    if kind is Kind.PRODUCT:
        return NodeBuilder(Kind.PRODUCT, [node, ONE]).build()
    return Node(Kind.POWER, children=(node, ONE))


def _factorize(kind: Kind, x: Node, y: Node, config: EngineConfig) -> Optional[Node]:
    """
    Look for a shared factor of x and y, viewing both as nodes of `kind`.

    kind is PRODUCT when the caller is adding and POWER when multiplying.
    """
    if x.kind is not kind and y.kind is not kind:
        if not is_equal(x, y, config):
            return None
        if kind is Kind.PRODUCT:
            return NodeBuilder(Kind.PRODUCT, [TWO, x]).build()
        return Node(Kind.POWER, children=(x, TWO))

    if x.kind is not kind:
        x = _wrap(kind, x)
    elif y.kind is not kind:
        y = _wrap(kind, y)

    if kind is Kind.PRODUCT:
        return factor_out_sum(x, y, config)
    return factor_out_power(x, y, config)


# ============================================================
# Reduction Engine
# ============================================================

def reduce(node: ValueType, config: Optional[EngineConfig] = None) -> Node:
    """
    Simplify a tree by greedy pairwise merging.

    Children are reduced first. Then, for positions i < j, combine() is
    tried on children i and j; a result smaller than the plain two-child
    node replaces child i and child j is dropped, and the scan continues
    with the new neighbour at j. When j runs off the end, i advances.

    Terminals are returned unchanged. Results are memoized per
    (node, config); see clear_cache().
    """
    node = _as_node(node)
    config = resolve(config)
    if node.is_terminal():
        return node
    return _reduce_cached(node, config)


@lru_cache(maxsize=4096)
def _reduce_cached(node: Node, config: EngineConfig) -> Node:
    return _reduce_pass(node, config, None)


def _reduce_child(node: Node, config: EngineConfig, trace: Optional[ReductionTrace]) -> Node:
    if node.is_terminal():
        return node
    if trace is None:
        return _reduce_cached(node, config)
    return _reduce_pass(node, config, trace)


def _reduce_pass(node: Node, config: EngineConfig, trace: Optional[ReductionTrace]) -> Node:
    kind = node.kind
    children = [_reduce_child(child, config, trace) for child in node.children]

    first = 0
    second = 1
    while second < len(children):
        x = children[first]
        y = children[second]

        plain = _plain(kind, x, y)
        merged = combine(kind, x, y, config)

        if size(merged, config) < size(plain, config):
            logger.debug("merged %s: %s", kind.value, merged)
            if trace is not None:
                trace.add_step(MergeStep(kind, x, y, merged))
            children[first] = merged
            del children[second]
        else:
            second += 1

        if second >= len(children):
            first += 1
            second = first + 1

    # A power whose base and exponent merged is just the merged node
    if kind is Kind.POWER and len(children) == 1:
        return children[0]
    return _rebuild(kind, children)


def reduce_with_trace(
    node: ValueType, config: Optional[EngineConfig] = None
) -> Tuple[Node, ReductionTrace]:
    """
    Reduce a tree and record every merge of its greedy passes.

    Gives the same result as reduce(). Merges performed inside factor
    search are not recorded, only those of the passes over the tree itself.

    Returns:
        (reduced node, ReductionTrace)
    """
    node = _as_node(node)
    config = resolve(config)
    trace_obj = ReductionTrace()
    trace_obj.initial = node
    result = _reduce_child(node, config, trace_obj)
    trace_obj.final = result
    return result, trace_obj


def clear_cache():
    """Drop all memoized reductions."""
    _reduce_cached.cache_clear()


# ============================================================
# Expansion Engine
# ============================================================

def _distribute(node: Node, config: EngineConfig) -> Node:
    """Distribute a Product over its first Sum child: a*(b+c) = a*b + a*c."""
    if node.kind is not Kind.PRODUCT:
        return node

    sum_child = None
    others: List[Node] = []
    for child in node.children:
        if sum_child is None and child.kind is Kind.SUM:
            sum_child = child
        else:
            others.append(child)

    if sum_child is None:
        return node

    result = NodeBuilder(Kind.SUM)
    for term in sum_child.children:
        term_product = NodeBuilder(Kind.PRODUCT, others).append(term).build()
        result.append(expand(term_product, config))
    logger.debug("distributed %d factors over %d terms", len(others), len(sum_child.children))
    return result.build()


def _unroll(node: Node, config: EngineConfig) -> Node:
    """Rewrite b^n, n a non-negative integer Number, as b * b * ... * b."""
    base, exponent = node.children
    if exponent.kind is not Kind.NUMBER or not _is_integral(exponent.value):
        return node
    count = int(exponent.value)
    if count < 0:
        return node
    if config.max_unroll is not None and count > config.max_unroll:
        logger.debug("not unrolling %s: exponent exceeds max_unroll=%d", node, config.max_unroll)
        return node

    product = NodeBuilder(Kind.PRODUCT, [base.copy() for _ in range(count)]).build()
    return _distribute(product, config)


def expand(node: ValueType, config: Optional[EngineConfig] = None) -> Node:
    """
    Apply the distributive law and unroll integer powers.

    Children are expanded first. A Product is then distributed over its
    first Sum child (each resulting term is expanded again, so further sums
    are handled too) and a Power with a non-negative integer exponent is
    unrolled into a Product before distributing. The result is not reduced:

        expand(2 * (x + 2))  -> 2x + 2 * 2
    """
    node = _as_node(node)
    config = resolve(config)
    if node.is_terminal():
        return node

    children = [expand(child, config) for child in node.children]
    rebuilt = _rebuild(node.kind, children)

    if rebuilt.kind is Kind.PRODUCT:
        return _distribute(rebuilt, config)
    if rebuilt.kind is Kind.POWER:
        return _unroll(rebuilt, config)
    return rebuilt


# ============================================================
# Equality
# ============================================================

def _settled(node: Node, config: EngineConfig) -> Node:
    """Reduce until the tree stops shrinking."""
    current = reduce(node, config)
    while True:
        again = reduce(current, config)
        if again == current or size(again, config) >= size(current, config):
            return current
        current = again


def is_equal(x: ValueType, y: ValueType, config: Optional[EngineConfig] = None) -> bool:
    """
    Check if two trees are equal up to reduction and commutativity.

    Both sides are reduced first, repeatedly, until reduction leaves them
    unchanged (a single pass can leave x + 0 behind). Terminals compare
    by kind and literal.
    Sums and products match their children as multisets: the first
    remaining child of x must equal some remaining child of y, both are
    removed, and the search restarts. Powers compare base with base and
    exponent with exponent.

    Examples:
        is_equal(x + y, y + x)      -> True
        is_equal(x + x, 2 * x)      -> True
        is_equal(x ** 2, 2 ** x)    -> False
    """
    config = resolve(config)
    x = _settled(_as_node(x), config)
    y = _settled(_as_node(y), config)

    if x.kind is not y.kind:
        return False

    if x.is_terminal() and y.is_terminal():
        return x.value == y.value

    if x.kind is Kind.POWER:
        return all(is_equal(a, b, config) for a, b in zip(x.children, y.children))

    xs = list(x.children)
    ys = list(y.children)
    ypos = 0
    while xs and ys:
        if is_equal(xs[0], ys[ypos], config):
            del xs[0]
            del ys[ypos]
            ypos = 0
        else:
            ypos += 1
            if ypos >= len(ys):
                return False

    return not xs and not ys
