# src/bigfib/additive.py
"""
Addition and subtraction on BigInt.

Every function writes its result into the first argument, which may be the
same object as either operand: limb i of the output is only written after
limb i of both inputs has been read.
"""

from __future__ import annotations

from bigfib.bigint import BigInt, bit_length, compare_magnitude, leading_zero_bits
from bigfib.limbs import LIMB_BASE, LIMB_BITS, LIMB_MASK


def unsigned_add(c: BigInt, a: BigInt, b: BigInt) -> None:
    """|c| = |a| + |b|. Leaves c.sign alone."""
    digits = max(bit_length(a), bit_length(b)) + 1
    size = max(1, -(-digits // LIMB_BITS))
    la, lb = len(a.limbs), len(b.limbs)
    c.limbs.resize(size)

    carry = 0
    for i in range(size):
        carry += (a.limbs[i] if i < la else 0) + (b.limbs[i] if i < lb else 0)
        c.limbs[i] = carry & LIMB_MASK
        carry >>= LIMB_BITS

    # the spare limb reserved for a carry-out stays zero when none happened
    if size > 1 and c.limbs[size - 1] == 0:
        c.limbs.resize(size - 1)


def unsigned_sub(c: BigInt, a: BigInt, b: BigInt) -> None:
    """|c| = |a| - |b|. The caller guarantees |a| >= |b|."""
    la, lb = len(a.limbs), len(b.limbs)
    size = max(la, lb)
    c.limbs.resize(size)

    borrow = 0
    for i in range(size):
        diff = (a.limbs[i] if i < la else 0) - (b.limbs[i] if i < lb else 0) - borrow
        if diff < 0:
            diff += LIMB_BASE
            borrow = 1
        else:
            borrow = 0
        c.limbs[i] = diff

    # leading zero limbs; an all-zero result keeps one
    drop = leading_zero_bits(c) // LIMB_BITS
    if drop == len(c.limbs):
        drop -= 1
    c.limbs.resize(len(c.limbs) - drop)


def _signed_add(c: BigInt, a: BigInt, a_sign: bool, b: BigInt, b_sign: bool) -> None:
    if a_sign == b_sign:
        unsigned_add(c, a, b)
        c.sign = a_sign
        if len(c.limbs) == 1 and c.limbs[0] == 0:
            c.sign = False
        return

    # p is the non-negative operand, n the negative one
    p, n = (b, a) if a_sign else (a, b)
    cmp = compare_magnitude(p, n)
    if cmp > 0:
        unsigned_sub(c, p, n)
        c.sign = False
    elif cmp < 0:
        unsigned_sub(c, n, p)
        c.sign = True
    else:
        c.set_word(0)


def add(c: BigInt, a: BigInt, b: BigInt) -> None:
    """c = a + b"""
    _signed_add(c, a, a.sign, b, b.sign)


def sub(c: BigInt, a: BigInt, b: BigInt) -> None:
    """c = a - b, by adding b with its sign flipped. b itself is never touched."""
    _signed_add(c, a, a.sign, b, not b.sign)
