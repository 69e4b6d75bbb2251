"""
Text forms of symtree expressions.

to_string() is the human-readable infix form:

    Sum(Product(2, x), Number(1))        -> "2x + 1"
    Sum(Symbol(x), Product(-3, y))       -> "x - 3y"
    Product(-1, Sum(x, 1))               -> "-(x + 1)"
    Power(Sum(a, b), 2)                  -> "(a + b)^2"

inspect() is an indented debug dump and to_sexpr() a compact prefix form.
Neither is meant to be parsed back.
"""

from typing import List

from .node import Kind, Node
from .rewriter import is_equal

SEPARATORS = {Kind.SUM: " + ", Kind.PRODUCT: " * ", Kind.POWER: "^"}
PREFIX_OPERATORS = {Kind.SUM: "+", Kind.PRODUCT: "*", Kind.POWER: "^"}


def _literal(node: Node) -> str:
    return str(node.value)


def _is_negative_number(node: Node) -> bool:
    return node.kind is Kind.NUMBER and node.value < 0


def _is_negative_term(node: Node) -> bool:
    """A negative Number, or a Product led by one."""
    if _is_negative_number(node):
        return True
    return node.kind is Kind.PRODUCT and _is_negative_number(node.children[0])


def _needs_parens(parent: Node, child: Node, index: int) -> bool:
    if parent.kind is Kind.PRODUCT and child.kind is Kind.SUM:
        return True
    if parent.kind is Kind.POWER and not child.is_terminal():
        return True
    if parent.kind is Kind.PRODUCT and index > 0 and _is_negative_number(child):
        return True
    return False


def to_string(node: Node) -> str:
    """
    Render a node as infix text.

    Within a product a numeric coefficient is written directly before the
    factor it scales ("2x", a coefficient of -1 as "-x"), and distinct
    non-numeric factors are juxtaposed ("ba"); other neighbours are joined
    with " * ". Within a sum a negative term is written with " - ".
    """
    if node.is_terminal():
        return _literal(node)

    children = node.children
    separator = SEPARATORS[node.kind]
    parts: List[str] = []

    for i, child in enumerate(children):
        text = to_string(child)
        if _needs_parens(node, child, i):
            text = f"({text})"

        join = separator
        insert_join = i < len(children) - 1
        if insert_join:
            following = children[i + 1]
            if node.kind is Kind.PRODUCT:
                if (child.kind is Kind.NUMBER and following.kind is not Kind.NUMBER
                        and child.value != 1):
                    insert_join = False
                    if child.value == -1:
                        text = "-"
                elif (child.kind is not Kind.NUMBER and following.kind is not Kind.NUMBER
                        and not is_equal(child, following)):
                    insert_join = False
            elif node.kind is Kind.SUM and _is_negative_term(following):
                join = " - "

        # The " - " join already carries the sign
        if i > 0 and node.kind is Kind.SUM and _is_negative_term(child):
            text = text.replace("-", "", 1)

        parts.append(text)
        if insert_join:
            parts.append(join)

    return "".join(parts)


def inspect(node: Node, indent: str = "") -> str:
    """
    Dump a tree one node per line, children indented by a tab.

    Example:
        inspect(x + 2) ->
            sum :
            \tsymbol :  x
            \tnumber :  2
    """
    result = [indent, node.kind.value, " :"]
    if node.is_terminal():
        result.append("  ")
        result.append(_literal(node))
    else:
        for child in node.children:
            result.append("\n")
            result.append(inspect(child, "\t" + indent))
    return "".join(result)


def to_sexpr(node: Node) -> str:
    """
    Format a tree as an S-expression string.

    Examples:
        x + 2 * y -> "(+ x (* 2 y))"
        x ** 2    -> "(^ x 2)"
    """
    if node.is_terminal():
        return _literal(node)
    parts = [PREFIX_OPERATORS[node.kind]] + [to_sexpr(child) for child in node.children]
    return "(" + " ".join(parts) + ")"
