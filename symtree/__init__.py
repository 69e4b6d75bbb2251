"""
SYMTREE - symbolic expression trees with greedy simplification

A small engine for arithmetic expressions built from numbers, symbols,
sums, products and powers.

Quick Start:
    from symtree import E, reduce, expand, is_equal

    x, y = E.syms("x", "y")

    str(reduce(x + x))                  # => "2x"
    str(reduce(1 + x + 1))              # => "2 + x"
    str(reduce(2 * x - x * 3))          # => "-x"
    str(expand(2 * (x + 2)))            # => "2x + 2 * 2"
    str(reduce(expand((x + y) ** 2)))   # => "x^2 + 2yx + y^2"
    is_equal(x + y, y + x)              # => True

Operators on nodes only build structure:
    x + 1 - 1           Sum(x, 1, -1)
    x / 2               Product(x, Power(2, -1))
    -x                  Product(-1, x)

Rewriting:
    reduce(node)        greedy pairwise merging, never larger by size()
    expand(node)        distribute products over sums, unroll integer powers
    is_equal(a, b)      equality up to reduction and commutativity

Library code logs to the "symtree" logger hierarchy and installs no handlers.
"""

__version__ = "0.1.0"
__author__ = "spinoza"

# Errors
from .errors import SymtreeError, ConversionError, PrecondError

# Configuration
from .config import EngineConfig, DEFAULT_CONFIG

# Node model
from .node import (
    Kind,
    Node,
    NodeBuilder,
    NumericType,
    ValueType,
    convert,
    is_node,
    make_node,
    number,
    symbol,
    size,
    # Combination operators
    add,
    sub,
    mul,
    div,
    neg,
    power,
)

# Core rewriter components
from .rewriter import (
    combine,
    find_common,
    factor_out_sum,
    factor_out_power,
    reduce,
    reduce_with_trace,
    clear_cache,
    expand,
    is_equal,
)

# Rendering and tracing
from .render import to_string, inspect, to_sexpr
from .trace import MergeStep, ReductionTrace

# Expression builder
from .builder import E

# Public API
__all__ = [
    # Version
    "__version__",
    # Errors
    "SymtreeError",
    "ConversionError",
    "PrecondError",
    # Configuration
    "EngineConfig",
    "DEFAULT_CONFIG",
    # Node model
    "Kind",
    "Node",
    "NodeBuilder",
    "NumericType",
    "ValueType",
    "convert",
    "is_node",
    "make_node",
    "number",
    "symbol",
    "size",
    # Combination operators
    "add",
    "sub",
    "mul",
    "div",
    "neg",
    "power",
    # Core
    "combine",
    "find_common",
    "factor_out_sum",
    "factor_out_power",
    "reduce",
    "reduce_with_trace",
    "clear_cache",
    "expand",
    "is_equal",
    # Rendering and tracing
    "to_string",
    "inspect",
    "to_sexpr",
    "MergeStep",
    "ReductionTrace",
    # Expression builder
    "E",
]
