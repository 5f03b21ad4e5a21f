from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("bigfib")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .additive import add, sub
from .bigint import BigInt, bit_length, compare_magnitude, deep_copy
from .compute import compute_fibonacci_decimal, compute_fibonacci_value
from .engines import fib_fast_doubling, fib_linear
from .fmt import parse_decimal, to_decimal
from .limbs import LIMB_BITS, AllocationError, BigIntError
from .multiplicative import left_shift, multiply

__all__ = [
    "LIMB_BITS",
    "AllocationError",
    "BigInt",
    "BigIntError",
    "__version__",
    "add",
    "bit_length",
    "compare_magnitude",
    "compute_fibonacci_decimal",
    "compute_fibonacci_value",
    "deep_copy",
    "fib_fast_doubling",
    "fib_linear",
    "left_shift",
    "multiply",
    "parse_decimal",
    "sub",
    "to_decimal",
]
