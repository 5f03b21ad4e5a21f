# src/bigfib/compute.py
from __future__ import annotations

from functools import lru_cache

from bigfib.bigint import BigInt
from bigfib.fmt import to_decimal
from bigfib.registry import Index, discover

DEFAULT_ALGORITHM = "fast-doubling"


@lru_cache(maxsize=1)
def strategy_index() -> Index:
    return discover()


def compute_fibonacci_value(selector: int | str, k: int) -> BigInt:
    """Run one registered strategy for F(k). Timing is left to the caller."""
    return strategy_index().get(selector)(k)


def compute_fibonacci_decimal(k: int, algorithm: int | str = DEFAULT_ALGORITHM) -> str:
    """F(k) as a canonical decimal string."""
    return to_decimal(compute_fibonacci_value(algorithm, k))
