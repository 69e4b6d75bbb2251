"""Configuration for the size metric and rewriting safeguards."""

from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class EngineConfig:
    """Weights and limits used by reduction and expansion.

    Attributes:
        symbol_size: Cost of a Symbol leaf in the size metric.
        number_size: Cost of a Number leaf in the size metric.
        node_size: Cost added by every composite node on top of its children.
        max_unroll: Largest exponent expansion unrolls into a product.
            None means no limit.
        max_fold_exponent: Largest absolute exponent for which a power of
            two Numbers is evaluated. Larger powers stay symbolic.
    """

    symbol_size: int = 1000
    number_size: int = 1
    node_size: int = 1
    max_unroll: Optional[int] = None
    max_fold_exponent: int = 1024

    def __post_init__(self):
        if self.max_unroll is not None and self.max_unroll < 0:
            raise ValueError("max_unroll must be non-negative or None")
        if self.max_fold_exponent < 0:
            raise ValueError("max_fold_exponent must be non-negative")


DEFAULT_CONFIG = EngineConfig()


def resolve(config: Optional[EngineConfig]) -> EngineConfig:
    """Return config, or the default configuration when it is None."""
    return DEFAULT_CONFIG if config is None else config
