# tests/test_fibonacci.py
"""
Fibonacci engines, decimal formatting and the core entry points.

sympy.fibonacci and gmpy2.fib serve as independent oracles.

Run: pytest -v
"""

from __future__ import annotations

import gmpy2
import pytest
import sympy
from conftest import EDGE_VALUES, big, random_value

from bigfib.bigint import BigInt
from bigfib.compute import compute_fibonacci_decimal, compute_fibonacci_value, strategy_index
from bigfib.engines import (
    MAX_INDEX,
    fib_fast_doubling,
    fib_fast_doubling_smear,
    fib_linear,
    fib_linear_table,
)
from bigfib.fmt import abbreviate, parse_decimal, to_decimal
from bigfib.registry import UnknownStrategyError
from bigfib.utility import estimate_fib_digits

ENGINES = [fib_linear_table, fib_linear, fib_fast_doubling_smear, fib_fast_doubling]

KNOWN_VALUES = [
    (0, "0"),
    (1, "1"),
    (2, "1"),
    (3, "2"),
    (10, "55"),
    (50, "12586269025"),
    (92, "7540113804746346429"),
    (93, "12200160415121876738"),     # first one past a signed 64-bit integer
    (94, "19740274219868223167"),     # first one past an unsigned 64-bit integer
    (100, "354224848179261915075"),
]


# ---------- decimal formatter ---------------------------------------------------


@pytest.mark.parametrize("v", EDGE_VALUES + [10 ** 19, 10 ** 19 - 1, 10 ** 40, 999_999_999_999])
def test_to_decimal_matches_str(v):
    assert to_decimal(big(v)) == str(v)
    if v:
        assert to_decimal(big(-v)) == "-" + str(v)


def test_zero_formats_as_zero():
    assert to_decimal(BigInt()) == "0"
    z = BigInt()
    z.sign = True  # non-canonical, still no "-0"
    assert to_decimal(z) == "0"


def test_to_decimal_random(rng):
    for _ in range(100):
        v = random_value(rng, max_limbs=6)
        assert to_decimal(big(v)) == str(v)


def test_to_decimal_ignores_untrimmed_high_limbs():
    x = big(12345)
    x.limbs.resize(3)
    assert to_decimal(x) == "12345"


def test_decimal_round_trip(rng):
    for _ in range(60):
        v = random_value(rng, max_limbs=4)
        x = big(v)
        back = parse_decimal(to_decimal(x))
        assert back == x
        assert int(back) == v


@pytest.mark.parametrize(("text", "value"), [
    ("0", 0),
    ("-0", 0),
    ("+17", 17),
    ("  42  ", 42),
    ("1_000_000", 1_000_000),
    ("-18446744073709551616", -(1 << 64)),
    ("000123", 123),
])
def test_parse_decimal(text, value):
    x = parse_decimal(text)
    assert int(x) == value
    assert not (x.is_zero() and x.sign)


@pytest.mark.parametrize("text", ["", "-", "12a", "1__0", "_1", "0x10", "1.5", "--1"])
def test_parse_decimal_rejects_garbage(text):
    with pytest.raises(ValueError):
        parse_decimal(text)


def test_abbreviate():
    digits = "1234567890" * 5
    assert abbreviate(digits, head=3, tail=2, threshold=10) == "123…90"
    assert abbreviate("-" + digits, head=3, tail=2, threshold=10) == "-123…90"
    assert abbreviate("12345", head=3, tail=2, threshold=10) == "12345"


# ---------- engines -------------------------------------------------------------


@pytest.mark.parametrize("engine", ENGINES)
@pytest.mark.parametrize(("k", "expected"), KNOWN_VALUES)
def test_known_values(engine, k, expected):
    assert to_decimal(engine(k)) == expected


@pytest.mark.parametrize("engine", ENGINES)
@pytest.mark.parametrize("k", [-1, -100])
def test_negative_index_is_zero(engine, k):
    x = engine(k)
    assert x.is_zero() and x.sign is False


@pytest.mark.parametrize("engine", ENGINES)
def test_index_must_fit_64_bits(engine):
    with pytest.raises(OverflowError):
        engine(MAX_INDEX + 1)


def test_linear_and_fast_doubling_agree_up_to_500():
    for k in range(501):
        lin = fib_linear(k)
        fd = fib_fast_doubling(k)
        assert int(lin) == int(fd) == int(sympy.fibonacci(k)), k
        assert len(fd.limbs) == 1 or fd.limbs[-1] != 0


def test_decimal_results_agree_on_a_stride():
    for k in list(range(0, 501, 7)) + [499, 500]:
        lin = compute_fibonacci_decimal(k, "linear")
        fd = compute_fibonacci_decimal(k, "fast-doubling")
        assert lin == fd == str(sympy.fibonacci(k)), k


def test_all_strategies_agree():
    for k in (0, 1, 2, 3, 4, 5, 31, 32, 33, 63, 64, 65, 127, 128, 255, 300):
        values = {int(e(k)) for e in ENGINES}
        assert values == {int(gmpy2.fib(k))}, k


@pytest.mark.parametrize("k", [1000, 1234, 2048, 3001])
def test_fast_doubling_large(k):
    x = fib_fast_doubling(k)
    assert int(x) == int(gmpy2.fib(k))
    assert int(fib_fast_doubling_smear(k)) == int(x)


@pytest.mark.parametrize("k", [700, 1500, 2500])
def test_digit_count_matches_golden_ratio_estimate(k):
    digits = to_decimal(fib_fast_doubling(k))
    assert abs(len(digits) - estimate_fib_digits(k)) <= 1
    assert digits == str(gmpy2.fib(k))


def test_digit_estimate_small():
    for k in range(0, 300):
        assert estimate_fib_digits(k) == len(str(sympy.fibonacci(k))), k


# ---------- registry / entry points ---------------------------------------------


def test_registry_selectors_follow_driver_order():
    index = strategy_index()
    assert index.labels == {
        0: "linear-table",
        1: "linear",
        2: "fast-doubling-smear",
        3: "fast-doubling",
    }
    assert index.funcs[3] is fib_fast_doubling


@pytest.mark.parametrize("key", [3, "3", "fast-doubling", "Fast Doubling", " fast_doubling "])
def test_registry_resolves_labels_and_selectors(key):
    assert strategy_index().resolve(key) == 3


@pytest.mark.parametrize("key", [4, -1, "quadratic", "9"])
def test_registry_unknown_strategy(key):
    with pytest.raises(UnknownStrategyError):
        strategy_index().resolve(key)


@pytest.mark.parametrize("selector", [0, 1, 2, 3])
def test_compute_fibonacci_value(selector):
    x = compute_fibonacci_value(selector, 200)
    assert isinstance(x, BigInt)
    assert int(x) == int(sympy.fibonacci(200))


def test_compute_fibonacci_decimal_default():
    assert compute_fibonacci_decimal(100) == "354224848179261915075"
    assert compute_fibonacci_decimal(100, algorithm=1) == "354224848179261915075"
