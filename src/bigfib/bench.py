# src/bigfib/bench.py
from __future__ import annotations

import math
from collections.abc import Iterable, Iterator
from dataclasses import dataclass

from bigfib.device import FibSession
from bigfib.runtime import CFG, debug_line

DEFAULT_SIGMA = 2.0


@dataclass(frozen=True)
class Measurement:
    selector: int
    offset: int
    samples: int
    mean: float          # ns, all samples
    std: float           # ns, sample standard deviation
    filtered_mean: float  # ns, samples within sigma * std of the mean
    kept: int


def summarize(times: list[int], sigma: float = DEFAULT_SIGMA) -> tuple[float, float, float, int]:
    """(mean, std, filtered_mean, kept) for a list of timings."""
    n = len(times)
    if n == 0:
        raise ValueError("no samples")
    mean = sum(times) / n
    std = math.sqrt(sum((t - mean) ** 2 for t in times) / (n - 1)) if n > 1 else 0.0

    lo, hi = mean - sigma * std, mean + sigma * std
    kept = [t for t in times if lo <= t <= hi]
    # a band narrower than the spread (sigma < 1) can drop every sample
    if not kept:
        kept = times
    filtered = sum(kept) / len(kept)
    return mean, std, filtered, len(kept)


def measure(session: FibSession, selector: int | str, samples: int | None = None,
            sigma: float | None = None) -> Measurement:
    """Time `samples` runs of one strategy at the session's current position."""
    if samples is None:
        samples = int(CFG("BENCH.SAMPLES", 1000))
    if sigma is None:
        sigma = float(CFG("BENCH.OUTLIER_SIGMA", DEFAULT_SIGMA))
    if samples < 1:
        raise ValueError("samples must be >= 1")

    times = [session.write(selector) for _ in range(samples)]
    mean, std, filtered, kept = summarize(times, sigma)
    sel = session.last_selector if session.last_selector is not None else int(selector)
    return Measurement(
        selector=sel,
        offset=session.position,
        samples=samples,
        mean=mean,
        std=std,
        filtered_mean=filtered,
        kept=kept,
    )


def sweep(session: FibSession, max_offset: int, selectors: Iterable[int | str], *,
          samples: int | None = None, sigma: float | None = None) -> Iterator[tuple[int, list[Measurement]]]:
    """Yield (offset, [measurement per selector]) for offsets 0..max_offset."""
    sels = list(selectors)
    for i in range(max_offset + 1):
        pos = session.seek(i)
        row = [measure(session, s, samples, sigma) for s in sels]
        debug_line("bench", f"offset {pos}: " + " ".join(f"{m.filtered_mean:.0f}" for m in row))
        yield pos, row
