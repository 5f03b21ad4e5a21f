# src/bigfib/bigint.py
"""
Sign-magnitude arbitrary precision integer and magnitude comparisons.

A BigInt is mutated in place by the core operations in additive.py and
multiplicative.py (output argument first, like ``add(c, a, b)``). The
operator overloads below are conveniences that allocate a fresh result and
delegate to those same functions.
"""

from __future__ import annotations

from functools import total_ordering

from bigfib.limbs import LIMB_BITS, LIMB_MASK, LimbBuffer


@total_ordering
class BigInt:
    __slots__ = ("limbs", "sign")

    def __init__(self, value: int = 0):
        self.sign = False
        self.limbs = LimbBuffer(1)
        if value:
            self._load(value)

    # --- construction / ownership ---------------------------------------------

    @classmethod
    def from_int(cls, value: int) -> BigInt:
        return cls(value)

    def _load(self, value: int) -> None:
        mag = -value if value < 0 else value
        count = max(1, (mag.bit_length() + LIMB_BITS - 1) // LIMB_BITS)
        self.limbs.resize(count)
        for i in range(count):
            self.limbs[i] = mag & LIMB_MASK
            mag >>= LIMB_BITS
        self.sign = value < 0

    def set_word(self, word: int) -> None:
        """Become the non-negative single-limb value `word`."""
        self.limbs.resize(1)
        self.limbs[0] = word & LIMB_MASK
        self.sign = False

    def copy(self) -> BigInt:
        out = BigInt.__new__(BigInt)
        out.limbs = self.limbs.copy()
        out.sign = self.sign
        return out

    def take(self, other: BigInt) -> None:
        """Move other's buffer into self; other is left as a fresh zero."""
        if other is self:
            return
        self.limbs, self.sign = other.limbs, other.sign
        other.limbs = LimbBuffer(1)
        other.sign = False

    def trim(self) -> None:
        """Drop zero high limbs (keeping one) and canonicalise zero's sign."""
        n = len(self.limbs)
        while n > 1 and self.limbs[n - 1] == 0:
            n -= 1
        self.limbs.resize(n)
        if n == 1 and self.limbs[0] == 0:
            self.sign = False

    def is_zero(self) -> bool:
        return all(limb == 0 for limb in self.limbs)

    # --- conversions ----------------------------------------------------------

    def __int__(self) -> int:
        value = 0
        for i in range(len(self.limbs) - 1, -1, -1):
            value = (value << LIMB_BITS) | self.limbs[i]
        return -value if self.sign else value

    def __bool__(self) -> bool:
        return not self.is_zero()

    def __str__(self) -> str:
        from bigfib.fmt import to_decimal  # fmt imports this module
        return to_decimal(self)

    def __repr__(self) -> str:
        return f"BigInt(sign={self.sign}, limbs={list(self.limbs)})"

    # --- comparisons ----------------------------------------------------------

    def __eq__(self, other: object) -> bool:
        if isinstance(other, int):
            other = BigInt(other)
        if not isinstance(other, BigInt):
            return NotImplemented
        if self.is_zero() and other.is_zero():
            return True
        return self.sign == other.sign and compare_magnitude(_trimmed(self), _trimmed(other)) == 0

    __hash__ = None  # mutable

    def __lt__(self, other: object) -> bool:
        if isinstance(other, int):
            other = BigInt(other)
        if not isinstance(other, BigInt):
            return NotImplemented
        return compare(self, other) < 0

    # --- arithmetic conveniences ----------------------------------------------

    def __neg__(self) -> BigInt:
        out = self.copy()
        out.sign = not out.sign
        out.trim()
        return out

    def __abs__(self) -> BigInt:
        out = self.copy()
        out.sign = False
        return out

    def __add__(self, other: BigInt | int) -> BigInt:
        from bigfib.additive import add
        out = BigInt()
        add(out, self, _coerce(other))
        return out

    def __sub__(self, other: BigInt | int) -> BigInt:
        from bigfib.additive import sub
        out = BigInt()
        sub(out, self, _coerce(other))
        return out

    def __mul__(self, other: BigInt | int) -> BigInt:
        from bigfib.multiplicative import multiply
        out = BigInt()
        multiply(out, self, _coerce(other))
        return out

    def __lshift__(self, amount: int) -> BigInt:
        """Shift by `amount` mod LIMB_BITS, like left_shift()."""
        from bigfib.multiplicative import left_shift
        out = self.copy()
        left_shift(out, amount)
        return out

    __radd__ = __add__
    __rmul__ = __mul__


def _coerce(value: BigInt | int) -> BigInt:
    return value if isinstance(value, BigInt) else BigInt(value)


def _trimmed(x: BigInt) -> BigInt:
    if len(x.limbs) == 1 or x.limbs[-1] != 0:
        return x
    y = x.copy()
    y.trim()
    return y


def deep_copy(dst: BigInt, src: BigInt) -> None:
    """Replace dst's buffer and sign with copies of src's."""
    if dst is src:
        return
    dst.limbs = src.limbs.copy()
    dst.sign = src.sign


# --- Magnitude comparator -----------------------------------------------------

def clz(word: int, width: int = LIMB_BITS) -> int:
    """Leading zero bits of one `width`-bit machine word."""
    return width - word.bit_length() if word else width


def leading_zero_bits(x: BigInt) -> int:
    count = 0
    for i in range(len(x.limbs) - 1, -1, -1):
        limb = x.limbs[i]
        if limb:
            return count + clz(limb)
        count += LIMB_BITS
    return count


def bit_length(x: BigInt) -> int:
    return LIMB_BITS * len(x.limbs) - leading_zero_bits(x)


def compare_magnitude(a: BigInt, b: BigInt) -> int:
    """Three-way compare of |a| and |b|: limb count first, then limbs top-down."""
    la, lb = len(a.limbs), len(b.limbs)
    if la > lb:
        return 1
    if la < lb:
        return -1
    for i in range(la - 1, -1, -1):
        x, y = a.limbs[i], b.limbs[i]
        if x > y:
            return 1
        if x < y:
            return -1
    return 0


def compare(a: BigInt, b: BigInt) -> int:
    """Signed three-way compare."""
    a, b = _trimmed(a), _trimmed(b)
    az, bz = a.is_zero(), b.is_zero()
    sa = False if az else a.sign
    sb = False if bz else b.sign
    if sa != sb:
        return -1 if sa else 1
    cmp = compare_magnitude(a, b)
    return -cmp if sa else cmp
