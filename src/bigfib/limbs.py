# src/bigfib/limbs.py
from __future__ import annotations

from array import array
from collections.abc import Iterator

LIMB_BITS = 64
LIMB_BASE = 1 << LIMB_BITS
LIMB_MASK = LIMB_BASE - 1
_TYPECODE = "Q"


class BigIntError(Exception):
    pass


class AllocationError(BigIntError, MemoryError):
    """Limb storage could not be grown."""


def _zeros(n: int) -> array:
    try:
        return array(_TYPECODE, bytes(n * (LIMB_BITS // 8)))
    except MemoryError as e:
        raise AllocationError(f"cannot allocate {n} limbs") from e


class LimbBuffer:
    """
    Growable sequence of unsigned 64-bit limbs, least significant first.

    The logical length (len()) and the allocated capacity are tracked
    separately. Only resize() changes the length:
      - growing zero-fills the new high limbs and keeps the low ones
      - shrinking drops the high limbs without looking at them
    """

    __slots__ = ("_data", "_len")

    def __init__(self, length: int = 1):
        if length < 1:
            raise ValueError("a limb buffer holds at least one limb")
        self._data = _zeros(length)
        self._len = length

    @property
    def capacity(self) -> int:
        return len(self._data)

    def __len__(self) -> int:
        return self._len

    def _check(self, i: int) -> int:
        if i < 0:
            i += self._len
        if not 0 <= i < self._len:
            raise IndexError(f"limb index {i} out of range (len={self._len})")
        return i

    def __getitem__(self, i: int) -> int:
        return self._data[self._check(i)]

    def __setitem__(self, i: int, value: int) -> None:
        self._data[self._check(i)] = value

    def __iter__(self) -> Iterator[int]:
        data = self._data
        for i in range(self._len):
            yield data[i]

    def __repr__(self) -> str:
        return f"LimbBuffer({list(self)!r})"

    def resize(self, new_len: int) -> None:
        if new_len < 1:
            raise ValueError("a limb buffer holds at least one limb")
        old = self._len
        if new_len == old:
            return
        if new_len > old:
            cap = len(self._data)
            if new_len > cap:
                # amortised growth, never less than what was asked for
                extra = _zeros(max(new_len, cap + cap // 2) - cap)
                try:
                    self._data.extend(extra)
                except MemoryError as e:
                    raise AllocationError(f"cannot grow to {new_len} limbs") from e
            data = self._data
            for i in range(old, min(new_len, cap)):
                data[i] = 0
        self._len = new_len

    def clear(self) -> None:
        data = self._data
        for i in range(self._len):
            data[i] = 0

    def copy(self) -> LimbBuffer:
        out = LimbBuffer.__new__(LimbBuffer)
        try:
            out._data = self._data[: self._len]
        except MemoryError as e:
            raise AllocationError(f"cannot allocate {self._len} limbs") from e
        out._len = self._len
        return out
