# src/bigfib/multiplicative.py
from __future__ import annotations

from bigfib.bigint import BigInt, leading_zero_bits
from bigfib.limbs import LIMB_BITS, LIMB_MASK


def multiply(c: BigInt, a: BigInt, b: BigInt) -> None:
    """
    c = a * b (schoolbook).

    If c is one of the operands the product is built in a temporary and
    moved into c afterwards, so the operand is never overwritten while it
    is still being read.
    """
    if len(a.limbs) < len(b.limbs):
        a, b = b, a

    out = BigInt() if (c is a or c is b) else c
    la, lb = len(a.limbs), len(b.limbs)
    size = la + lb
    out.limbs.clear()
    out.limbs.resize(size)

    res = out.limbs
    for i in range(la):
        ai = a.limbs[i]
        if not ai:
            continue
        carry = 0
        for j in range(lb):
            t = res[i + j] + ai * b.limbs[j] + carry
            res[i + j] = t & LIMB_MASK
            carry = t >> LIMB_BITS
        # slot i+lb has not been written by any earlier pass
        res[i + lb] = carry

    out.sign = a.sign != b.sign
    out.trim()

    if out is not c:
        c.take(out)


def left_shift(x: BigInt, amount: int) -> None:
    """
    Shift |x| left by `amount` mod LIMB_BITS bits, in place.
    Grows by one limb only when bits would fall off the top.
    """
    amount %= LIMB_BITS
    if not amount:
        return

    if amount > leading_zero_bits(x):
        x.limbs.resize(len(x.limbs) + 1)

    limbs = x.limbs
    back = LIMB_BITS - amount
    for i in range(len(limbs) - 1, 0, -1):
        limbs[i] = ((limbs[i] << amount) | (limbs[i - 1] >> back)) & LIMB_MASK
    limbs[0] = (limbs[0] << amount) & LIMB_MASK
