# -----------------------------------------------------------------------------
#  engines.py
#  Fibonacci strategies over BigInt (F0=0, F1=1, Fₙ=Fₙ₋₁+Fₙ₋₂)
# -----------------------------------------------------------------------------

from __future__ import annotations

from bigfib.additive import add, sub
from bigfib.bigint import BigInt, clz, deep_copy
from bigfib.multiplicative import left_shift, multiply
from bigfib.registry import strategy

# the index is a signed 64-bit machine integer
INDEX_BITS = 64
MAX_INDEX = (1 << (INDEX_BITS - 1)) - 1


def _check_index(k: int) -> int:
    k = int(k)
    if k > MAX_INDEX:
        raise OverflowError(f"index {k} does not fit a signed {INDEX_BITS}-bit integer")
    return k


def _base_case(k: int) -> BigInt:
    return BigInt(1 if k > 0 else 0)


@strategy(
    selector=0,
    label="linear-table",
    description="Linear recurrence keeping the whole table F(0..k).",
)
def fib_linear_table(k: int) -> BigInt:
    k = _check_index(k)
    if k <= 2:
        return _base_case(k)

    table = [BigInt(0), BigInt(1)]
    for i in range(2, k + 1):
        nxt = BigInt()
        add(nxt, table[i - 1], table[i - 2])
        table.append(nxt)
    return table[k]


@strategy(
    selector=1,
    label="linear",
    description="Linear recurrence with two accumulators (O(1) extra values).",
)
def fib_linear(k: int) -> BigInt:
    k = _check_index(k)
    if k <= 2:
        return _base_case(k)

    a, b = BigInt(0), BigInt(1)
    p = BigInt()
    for _ in range(2, k):
        add(p, a, b)
        deep_copy(a, p)
        a, b = b, a
    add(p, a, b)
    return p


def _fast_doubling(k: int, top: int) -> BigInt:
    """
    Walk the bits of k from `top` (a single set bit) down to bit 0 keeping
    (a, b) = (F(m), F(m+1)) for the prefix m read so far:

        F(2m)   = F(m) * (2 F(m+1) - F(m))
        F(2m+1) = F(m)^2 + F(m+1)^2
    """
    a, b = BigInt(0), BigInt(1)
    c, d = BigInt(), BigInt()

    h = top
    while h:
        deep_copy(c, b)
        left_shift(c, 1)          # 2b
        sub(c, c, a)              # 2b - a
        multiply(c, c, a)         # c = F(2m)

        multiply(d, b, b)
        multiply(a, a, a)
        add(d, d, a)              # d = F(2m+1)

        if k & h:
            add(b, c, d)          # F(2m+2) = F(2m) + F(2m+1)
            a, d = d, a
        else:
            a, c = c, a
            b, d = d, b
        h >>= 1
    return a


@strategy(
    selector=2,
    label="fast-doubling-smear",
    description="Fast doubling; highest index bit found by OR-smearing.",
)
def fib_fast_doubling_smear(k: int) -> BigInt:
    k = _check_index(k)
    if k <= 2:
        return _base_case(k)

    h = k >> 32 | k
    h |= h >> 16
    h |= h >> 8
    h |= h >> 4
    h |= h >> 2
    h |= h >> 1
    h ^= h >> 1
    return _fast_doubling(k, h)


@strategy(
    selector=3,
    label="fast-doubling",
    description="Fast doubling; highest index bit found by counting leading zeros.",
)
def fib_fast_doubling(k: int) -> BigInt:
    k = _check_index(k)
    if k <= 2:
        return _base_case(k)
    return _fast_doubling(k, 1 << (INDEX_BITS - 1 - clz(k, INDEX_BITS)))
