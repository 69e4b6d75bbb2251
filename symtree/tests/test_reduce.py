"""Tests for greedy pairwise reduction."""

from fractions import Fraction

import pytest
from symtree import (
    Kind, EngineConfig, make_node, number, symbol, mul, reduce, expand,
    is_equal, size, to_string, clear_cache,
)
from symtree.rewriter import _reduce_cached


def prod(*children):
    return make_node(Kind.PRODUCT, list(children))


def pw(base, exponent):
    return make_node(Kind.POWER, (base, exponent))


class TestNumericCollapse:
    """Sums of numbers fold in scan order."""

    def test_trailing_numbers(self, x):
        """x + 1 + 1 -> x + 2."""
        assert to_string(reduce(x + 1 + 1)) == "x + 2"

    def test_surrounding_numbers(self, x):
        """1 + x + 1 -> 2 + x, the merge landing in the first slot."""
        result = reduce(1 + x + 1)
        assert result == make_node(Kind.SUM, [number(2), x])
        assert to_string(result) == "2 + x"

    def test_nested_sum_flattens_first(self, x):
        """1 + (x + 1) is built flat, so it reduces like 1 + x + 1."""
        assert to_string(reduce(1 + (x + 1))) == "2 + x"

    def test_several_numbers(self, x, y, z):
        """1 + x + y + 2 - z - 4 -> -1 + x + y - z."""
        assert to_string(reduce(1 + x + y + 2 - z - 4)) == "-1 + x + y - z"

    def test_products_of_numbers(self, x):
        """Numeric products fold before the sum is scanned."""
        expr = number(-2) * 3 + x + 5 * number(-2)
        assert to_string(reduce(expr)) == "-16 + x"

    def test_inner_sum_kept_when_nothing_factors(self, x):
        """1 + 2(1 + x + 1) -> 1 + 2(2 + x)."""
        assert to_string(reduce(1 + 2 * (1 + x + 1))) == "1 + 2(2 + x)"


class TestCollectTerms:
    """Like terms collect through the factorization engine."""

    def test_double(self, x):
        """x + x -> 2x."""
        result = reduce(x + x)
        assert result == prod(number(2), x)
        assert to_string(result) == "2x"

    def test_coefficients(self, x):
        """x + 2x and 2x + x both give 3x."""
        assert to_string(reduce(x + 2 * x)) == "3x"
        assert to_string(reduce(2 * x + x)) == "3x"

    def test_negative_coefficient(self, x):
        """2x - 3x -> -x."""
        result = reduce(2 * x - x * 3)
        assert result == prod(number(-1), x)
        assert to_string(result) == "-x"

    def test_with_unrelated_term(self, x, y):
        """2x + y - 3x -> -x + y."""
        assert to_string(reduce(2 * x + y - x * 3)) == "-x + y"

    def test_common_sum_factor(self, x):
        """2(x + 1) - 3(x + 1) -> -(x + 1)."""
        assert to_string(reduce(2 * (x + 1) - 3 * (x + 1))) == "-(x + 1)"

    def test_two_symbols(self, x, y):
        """5x + y - 3y - 2x -> 3x - 2y."""
        assert to_string(reduce(5 * x + y - 3 * y + x * (-2))) == "3x - 2y"

    def test_cancellation(self, x):
        """2x^3 - 2x^3 -> 0."""
        assert reduce(2 * x ** 3 - 2 * x ** 3) == number(0)

    def test_square(self, x):
        """x * x -> x^2."""
        assert reduce(x * x) == pw(x, number(2))

    def test_expanded_binomial_square(self):
        """(a + b)^2 expanded and reduced keeps the greedy term order."""
        a, b = symbol("a"), symbol("b")
        result = reduce(expand((a + b) ** 2))
        assert result == make_node(Kind.SUM, [
            pw(a, number(2)),
            prod(number(2), b, a),
            pw(b, number(2)),
        ])
        assert to_string(result) == "a^2 + 2ba + b^2"


class TestOrderDependence:
    """The reducer is greedy and never backtracks."""

    def test_leftover_zero(self, x):
        """x + 1 - 1 leaves x + 0: x is never revisited."""
        result = reduce(x + 1 - 1)
        assert result == make_node(Kind.SUM, [x, number(0)])
        assert to_string(result) == "x + 0"

    def test_second_pass_finishes(self, x):
        """Reducing again removes the leftover zero."""
        assert reduce(reduce(x + 1 - 1)) == x

    def test_leftover_zero_still_equal(self, x):
        """is_equal sees through the leftover."""
        assert is_equal(x + 1 - 1, x)

    def test_other_order_fully_reduces(self, x):
        """1 - 1 + x reduces completely in one pass."""
        assert reduce(number(1) - 1 + x) == x


class TestPowers:
    """Powers reduce base and exponent, then combine them."""

    def test_power_of_one(self, x):
        """x^1 collapses to x."""
        assert reduce(x ** 1) == x

    def test_power_of_zero(self, x):
        """x^0 collapses to 1."""
        assert reduce(x ** 0) == number(1)

    def test_numeric_power(self):
        """2^3 folds to 8."""
        assert reduce(number(2) ** 3) == number(8)

    def test_exponent_reduced(self, x):
        """The exponent is reduced before the power is considered."""
        assert reduce(x ** (number(1) + 1)) == pw(x, number(2))

    def test_division_by_zero(self, x):
        """x / 0 follows 0^x = 0 instead of raising."""
        assert reduce(x / 0) == number(0)

    def test_symbolic_power_kept(self, x, y):
        """x^y stays as it is."""
        assert reduce(x ** y) == pw(x, y)


class TestReduceContract:
    """General properties of reduce()."""

    def test_terminals_unchanged(self, x):
        """Terminals come back as they are."""
        assert reduce(x) is x
        assert reduce(number(3)) == number(3)

    def test_accepts_raw_values(self):
        """Raw numbers and names are converted first."""
        assert reduce(5) == number(5)
        assert reduce("x") == symbol("x")

    def test_input_not_mutated(self, x, y):
        """reduce returns a new tree."""
        expr = x + x + y
        before = repr(expr)
        reduce(expr)
        assert repr(expr) == before

    def test_never_grows(self, x, y, z):
        """The result is never larger than the input."""
        samples = [
            x + 1 - 1,
            2 * (x + 1) - 3 * (x + 1),
            x * y * x * y,
            (x + y) * (x + y) * z,
            x ** 2 * x ** 3 * y,
            expand((x + y + 1) ** 3),
        ]
        for expr in samples:
            assert size(reduce(expr)) <= size(expr)

    def test_deterministic(self, x, y):
        """Equal inputs give equal outputs."""
        expr = 3 * x * y + y * x - 2 * x
        assert reduce(expr) == reduce(expr.copy())

    def test_method_form(self, x):
        """Node.reduce() is the same operation."""
        assert (x + x).reduce() == reduce(x + x)


class TestConfig:
    """Size weights steer which merges are accepted."""

    def test_cheap_symbols_block_collection(self, x):
        """With symbols weighing 1, x + x -> 2x is not a size win."""
        config = EngineConfig(symbol_size=1)
        assert reduce(x + x, config) == x + x

    def test_numeric_folding_unaffected(self, x):
        """Number folding always shrinks the tree."""
        config = EngineConfig(symbol_size=1)
        assert to_string(reduce(x + 1 + 1, config)) == "x + 2"

    def test_config_is_hashable(self):
        """Configs key the memo cache, so they must hash."""
        assert hash(EngineConfig()) == hash(EngineConfig())

    def test_negative_max_unroll_rejected(self):
        """max_unroll must be non-negative."""
        with pytest.raises(ValueError):
            EngineConfig(max_unroll=-1)


class TestCache:
    """Tests for the reduction memo."""

    def test_clear_cache(self, x):
        """clear_cache empties the memo and reduction still works."""
        reduce(x + x)
        assert _reduce_cached.cache_info().currsize > 0
        clear_cache()
        assert _reduce_cached.cache_info().currsize == 0
        assert to_string(reduce(x + x)) == "2x"

    def test_cached_result_reused(self, x):
        """A second reduction of an equal tree hits the memo."""
        clear_cache()
        reduce(x + x + 1)
        hits = _reduce_cached.cache_info().hits
        reduce(x + x + 1)
        assert _reduce_cached.cache_info().hits > hits

    def test_literal_types_kept_apart(self, x):
        """1/2 and 0.5 are different memo keys, so each keeps its own literal."""
        clear_cache()
        exact = reduce(mul(Fraction(1, 2), x))
        approx = reduce(mul(0.5, x))
        assert isinstance(exact.children[0].value, Fraction)
        assert isinstance(approx.children[0].value, float)
        assert to_string(approx) == "0.5x"
        assert to_string(exact) == "1/2x"


class TestMergedPowers:
    """Merged powers are returned as built, not reduced again."""

    def test_quotient_of_equal_terms(self, x):
        """x / x leaves x^0, which a second pass turns into 1."""
        result = reduce(x / x)
        assert result == pw(x, number(0))
        assert reduce(result) == number(1)
        assert is_equal(x / x, 1)

    def test_unit_exponent_left(self, x, y):
        """(xy)^2 / (xy) leaves (xy)^1."""
        result = reduce((x * y) ** 2 / (x * y))
        assert result == pw(x * y, number(1))
        assert to_string(result) == "(xy)^1"
        assert is_equal(result, x * y)
