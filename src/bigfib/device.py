# src/bigfib/device.py
"""
Session boundary around the Fibonacci engines.

A FibDevice admits one open session at a time. A session has a position
(the Fibonacci index) that is moved with seek() and clamped to
[0, max_index]; read() returns F(position) in decimal and write(selector)
times one strategy at the current position.
"""

from __future__ import annotations

import os
import threading
import time

from colorama import Fore, Style

from bigfib.bigint import BigInt
from bigfib.compute import compute_fibonacci_decimal, strategy_index
from bigfib.runtime import CFG, debug_line

MAX_LENGTH = 10000

SEEK_SET = os.SEEK_SET
SEEK_CUR = os.SEEK_CUR
SEEK_END = os.SEEK_END


class DeviceBusyError(RuntimeError):
    pass


class DeviceClosedError(RuntimeError):
    pass


class FibDevice:
    def __init__(self, max_index: int | None = None):
        if max_index is None:
            max_index = int(CFG("DEVICE.MAX_INDEX", MAX_LENGTH))
        if max_index < 0:
            raise ValueError("max_index must be >= 0")
        self.max_index = max_index
        self._gate = threading.Lock()

    @property
    def busy(self) -> bool:
        return self._gate.locked()

    def open(self) -> FibSession:
        if not self._gate.acquire(blocking=False):
            debug_line("device", f"{Fore.RED}open refused{Style.RESET_ALL}: device is in use")
            raise DeviceBusyError("fibonacci device is in use")
        debug_line("device", f"session opened (max index {self.max_index})")
        return FibSession(self)

    def _release(self) -> None:
        self._gate.release()
        debug_line("device", "session closed")


class FibSession:
    def __init__(self, device: FibDevice):
        self._device = device
        self._pos = 0
        self._closed = False
        self.last_result: BigInt | None = None
        self.last_selector: int | None = None

    def __enter__(self) -> FibSession:
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        self.close()

    @property
    def closed(self) -> bool:
        return self._closed

    @property
    def position(self) -> int:
        return self._pos

    def _ensure_open(self) -> None:
        if self._closed:
            raise DeviceClosedError("session is closed")

    def close(self) -> None:
        if not self._closed:
            self._closed = True
            self._device._release()

    def seek(self, offset: int, whence: int = SEEK_SET) -> int:
        self._ensure_open()
        limit = self._device.max_index
        if whence == SEEK_SET:
            pos = offset
        elif whence == SEEK_CUR:
            pos = self._pos + offset
        elif whence == SEEK_END:
            pos = limit - offset
        else:
            raise ValueError(f"invalid whence {whence!r}")
        self._pos = min(max(pos, 0), limit)
        return self._pos

    def read(self, algorithm: int | str | None = None) -> str:
        """F(position) in decimal."""
        self._ensure_open()
        algo = algorithm if algorithm is not None else CFG("ENGINE.ALGORITHM", "fast-doubling")
        return compute_fibonacci_decimal(self._pos, algo)

    def write(self, selector: int | str) -> int:
        """Run strategy `selector` at the current position; return elapsed nanoseconds."""
        self._ensure_open()
        index = strategy_index()
        sel = index.resolve(selector)
        fn = index.funcs[sel]

        t0 = time.perf_counter_ns()
        result = fn(self._pos)
        elapsed = time.perf_counter_ns() - t0

        self.last_result = result
        self.last_selector = sel
        debug_line("device", f"{index.labels[sel]}({self._pos}) {elapsed} ns")
        return elapsed
