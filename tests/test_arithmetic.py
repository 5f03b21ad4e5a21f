# tests/test_arithmetic.py
"""
Additive and multiplicative cores, checked against Python's own integers.

Run: pytest -v
"""

from __future__ import annotations

import pytest
from conftest import EDGE_VALUES, big

from bigfib.additive import add, sub, unsigned_add, unsigned_sub
from bigfib.bigint import BigInt, compare_magnitude
from bigfib.limbs import LIMB_BITS, LIMB_MASK
from bigfib.multiplicative import left_shift, multiply

# ---------- helpers -----------------------------------------------------------


def _is_canonical(x: BigInt) -> bool:
    trimmed = len(x.limbs) == 1 or x.limbs[-1] != 0
    zero_ok = not (x.is_zero() and x.sign)
    return trimmed and zero_ok


def _add(a: int, b: int) -> BigInt:
    c = BigInt()
    add(c, big(a), big(b))
    return c


def _sub(a: int, b: int) -> BigInt:
    c = BigInt()
    sub(c, big(a), big(b))
    return c


def _mul(a: int, b: int) -> BigInt:
    c = BigInt()
    multiply(c, big(a), big(b))
    return c


# ---------- unsigned core -----------------------------------------------------


def test_unsigned_add_carries_across_limbs():
    c = BigInt()
    unsigned_add(c, big(LIMB_MASK), big(1))
    assert list(c.limbs) == [0, 1]

    unsigned_add(c, big((1 << 128) - 1), big(1))
    assert list(c.limbs) == [0, 0, 1]


def test_unsigned_add_ignores_sign_and_keeps_result_sign():
    c = BigInt()
    c.sign = True
    unsigned_add(c, big(-5), big(7))
    assert list(c.limbs) == [12]
    assert c.sign is True


def test_unsigned_add_no_spare_limb_without_carry():
    c = BigInt()
    unsigned_add(c, big(1 << 63), big(1))
    assert list(c.limbs) == [(1 << 63) + 1]


def test_unsigned_sub_borrows_across_limbs():
    c = BigInt()
    unsigned_sub(c, big(1 << 128), big(1))
    assert list(c.limbs) == [LIMB_MASK, LIMB_MASK]


def test_unsigned_sub_trims_to_single_zero_limb():
    c = BigInt()
    v = (5 << 128) | 9
    unsigned_sub(c, big(v), big(v))
    assert list(c.limbs) == [0]


def test_unsigned_sub_trims_leading_zero_limbs():
    c = BigInt()
    unsigned_sub(c, big((1 << 128) + 3), big(1 << 128))
    assert list(c.limbs) == [3]


# ---------- signed add / sub --------------------------------------------------

SIGN_CASES = [
    (5, 3), (3, 5), (-5, 3), (3, -5), (-5, -3), (5, -5), (-5, 5), (0, 0),
    (0, -7), (-7, 0), (1 << 64, -1), (-(1 << 64), 1), (LIMB_MASK, 1), (-LIMB_MASK, -1),
]


@pytest.mark.parametrize(("a", "b"), SIGN_CASES)
def test_add_sign_resolution(a, b):
    c = _add(a, b)
    assert int(c) == a + b
    assert _is_canonical(c)


@pytest.mark.parametrize(("a", "b"), SIGN_CASES)
def test_sub_sign_resolution(a, b):
    c = _sub(a, b)
    assert int(c) == a - b
    assert _is_canonical(c)


def test_equal_magnitudes_give_canonical_zero():
    c = _add(-(1 << 200), 1 << 200)
    assert c.sign is False
    assert list(c.limbs) == [0]


def test_sub_never_touches_subtrahend():
    a, b = big(10), big(-(1 << 90))
    before = (b.sign, list(b.limbs))
    c = BigInt()
    sub(c, a, b)
    assert (b.sign, list(b.limbs)) == before
    assert int(c) == 10 + (1 << 90)


def test_add_sub_round_trip(pairs):
    for a, b in pairs:
        x, y = big(a), big(b)
        s, back = BigInt(), BigInt()

        sub(s, x, y)
        add(back, s, y)
        assert int(back) == a, (a, b)

        add(s, x, y)
        sub(back, s, y)
        assert int(back) == a, (a, b)
        assert _is_canonical(back)


def test_add_sub_match_python(pairs):
    for a, b in pairs:
        assert int(_add(a, b)) == a + b
        assert int(_sub(a, b)) == a - b


@pytest.mark.parametrize("op", [add, sub])
def test_add_sub_output_aliasing(op, pairs):
    expect = {add: lambda a, b: a + b, sub: lambda a, b: a - b}[op]
    for a, b in pairs[:60]:
        x, y = big(a), big(b)
        op(x, x, y)
        assert int(x) == expect(a, b)

        x, y = big(a), big(b)
        op(y, x, y)
        assert int(y) == expect(a, b)

        x = big(a)
        op(x, x, x)
        assert int(x) == expect(a, a)


# ---------- multiply ------------------------------------------------------------


def test_multiply_matches_python(pairs):
    for a, b in pairs:
        c = _mul(a, b)
        assert int(c) == a * b, (a, b)
        assert _is_canonical(c)


def test_multiply_commutes_and_signs_xor(pairs):
    for a, b in pairs:
        ab, ba = _mul(a, b), _mul(b, a)
        assert int(ab) == int(ba)
        if a and b:
            assert ab.sign is ((a < 0) != (b < 0))
        else:
            assert ab.sign is False


def test_multiply_result_length():
    c = _mul(LIMB_MASK, LIMB_MASK)
    assert len(c.limbs) == 2
    c = _mul(1, 1 << 64)
    assert len(c.limbs) == 2
    c = _mul(0, (1 << 256) - 1)
    assert list(c.limbs) == [0]


def test_multiply_overwrites_stale_output():
    c = big((1 << 300) - 1)
    multiply(c, big(3), big(4))
    assert int(c) == 12
    assert len(c.limbs) == 1


@pytest.mark.parametrize("v", EDGE_VALUES[1:])
def test_multiply_aliasing_matches_fresh_output(v):
    other = -(v * 3 + 7)

    fresh = _mul(v, other)

    a, b = big(v), big(other)
    multiply(a, a, b)
    assert int(a) == int(fresh)
    assert int(b) == other

    a, b = big(v), big(other)
    multiply(b, a, b)
    assert int(b) == int(fresh)
    assert int(a) == v

    sq = big(v)
    multiply(sq, sq, sq)
    assert int(sq) == v * v


def test_multiply_aliasing_random(pairs):
    for a, b in pairs[:80]:
        x, y = big(a), big(b)
        multiply(x, x, y)
        assert int(x) == a * b


# ---------- left shift ------------------------------------------------------------


def test_shift_by_one_equals_doubling(pairs):
    for a, _ in pairs:
        x = big(a)
        doubled = BigInt()
        add(doubled, x, x)
        left_shift(x, 1)
        assert compare_magnitude(x, doubled) == 0
        assert int(x) == 2 * a


def test_shift_grows_only_on_overflow():
    x = big(1 << 62)
    left_shift(x, 1)
    assert len(x.limbs) == 1
    left_shift(x, 1)
    assert list(x.limbs) == [0, 1]


@pytest.mark.parametrize("amount", [1, 7, 33, 63])
def test_shift_sub_limb_amounts(amount):
    v = (0xDEADBEEF << 100) | 0xABCDEF
    x = big(v)
    left_shift(x, amount)
    assert int(x) == v << amount


@pytest.mark.parametrize("amount", [0, LIMB_BITS, 2 * LIMB_BITS])
def test_shift_by_limb_multiple_is_noop(amount):
    x = big(12345)
    left_shift(x, amount)
    assert int(x) == 12345


def test_shift_amount_taken_modulo_limb_width():
    x = big(3)
    left_shift(x, LIMB_BITS + 2)
    assert int(x) == 12


def test_shift_keeps_sign():
    x = big(-5)
    left_shift(x, 1)
    assert int(x) == -10


# ---------- operator conveniences ----------------------------------------------


def test_operators_return_fresh_values():
    a, b = big(1 << 70), big(-3)
    assert int(a + b) == (1 << 70) - 3
    assert int(a - b) == (1 << 70) + 3
    assert int(a * b) == -3 * (1 << 70)
    assert int(-a) == -(1 << 70)
    assert int(abs(b)) == 3
    assert int(a + 1) == (1 << 70) + 1
    assert int(2 * b) == -6
    assert int(a) == 1 << 70
    assert (-BigInt()).sign is False

    c = big(3)
    assert int(c << 1) == 6
    assert int(big(-(1 << 63)) << 1) == -(1 << 64)
    assert int(c << (LIMB_BITS + 2)) == 12
    assert int(c) == 3
