# src/bigfib/fmt.py
from __future__ import annotations

import re

from bigfib.additive import add
from bigfib.bigint import BigInt
from bigfib.limbs import LIMB_BITS
from bigfib.multiplicative import multiply

# Single source of truth for ANSI stripping
ANSI_RE = re.compile(r"\x1b\[[0-9;]*m")

_ZERO = ord("0")
_DIGITS_RE = re.compile(r"[+-]?[0-9](?:_?[0-9])*")


def to_decimal(x: BigInt) -> str:
    """
    Decimal string of x by double dabble.

    One ASCII digit per slot, every slot starting at '0'. The magnitude is
    scanned bit by bit from the top; each bit doubles the decimal number
    held in the buffer and is fed in as the carry into the last digit.
    log10(x) = log2(x) / log2(10) ~= log2(x) / 3.32, so LIMB_BITS * limbs / 3
    slots always suffice.
    """
    limbs = x.limbs
    width = LIMB_BITS * len(limbs) // 3 + 2
    buf = bytearray(b"0" * (width - 1))
    last = width - 2
    top = last  # leftmost slot that can be nonzero

    for i in range(len(limbs) - 1, -1, -1):
        word = limbs[i]
        mask = 1 << (LIMB_BITS - 1)
        while mask:
            carry = 1 if word & mask else 0
            for j in range(last, top - 1, -1):
                d = ((buf[j] - _ZERO) << 1) + carry
                if d > 9:
                    d -= 10
                    carry = 1
                else:
                    carry = 0
                buf[j] = _ZERO + d
            if carry:
                top -= 1
                buf[top] = _ZERO + 1
            mask >>= 1

    start = 0
    while start < last and buf[start] == _ZERO:
        start += 1
    digits = buf[start:].decode("ascii")
    if x.sign and digits != "0":
        return "-" + digits
    return digits


def parse_decimal(text: str) -> BigInt:
    """Inverse of to_decimal. Accepts an optional sign and '_' separators."""
    s = str(text).strip()
    if not _DIGITS_RE.fullmatch(s):
        raise ValueError(f"invalid decimal literal: {text!r}")
    negative = s.startswith("-")
    digits = s.lstrip("+-").replace("_", "")

    ten = BigInt(10)
    digit = BigInt()
    out = BigInt()
    for ch in digits:
        multiply(out, out, ten)
        digit.set_word(ord(ch) - _ZERO)
        add(out, out, digit)
    out.sign = negative and not out.is_zero()
    return out


def abbreviate(digits: str, head: int = 10, tail: int = 10, threshold: int = 35, ellipsis: str = "…") -> str:
    """Shorten a long decimal string to first<head>…last<tail>."""
    sign = "-" if digits.startswith("-") else ""
    body = digits[1:] if sign else digits
    if len(body) <= threshold or head + tail >= len(body):
        return digits
    return f"{sign}{body[:head]}{ellipsis}{body[-tail:]}"


def strip_ansi(s: str | None) -> str:
    """Return s with ANSI escape sequences removed."""
    return "" if s is None else ANSI_RE.sub("", s)
