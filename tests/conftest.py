# tests/conftest.py
from __future__ import annotations

import random

import pytest

from bigfib.bigint import BigInt
from bigfib.limbs import LIMB_BITS
from bigfib.runtime import Runtime, _current_runtime

# magnitudes that sit on or next to limb boundaries
EDGE_VALUES = [
    0, 1, 2, 3,
    (1 << 32) - 1, 1 << 32,
    (1 << 63) - 1, 1 << 63,
    (1 << 64) - 1, 1 << 64, (1 << 64) + 1,
    (1 << 128) - 1, 1 << 128,
    (1 << 192) - 1,
]


def random_value(rng: random.Random, max_limbs: int = 5) -> int:
    """Signed int of a random width, biased towards limb boundaries."""
    if rng.random() < 0.2:
        v = rng.choice(EDGE_VALUES)
    else:
        bits = rng.randint(1, max_limbs * LIMB_BITS)
        v = rng.getrandbits(bits)
    return -v if rng.random() < 0.5 else v


@pytest.fixture
def rng() -> random.Random:
    return random.Random(0xF1B)


@pytest.fixture
def pairs(rng) -> list[tuple[int, int]]:
    return [(random_value(rng), random_value(rng)) for _ in range(200)]


@pytest.fixture(autouse=True)
def isolated_workspace(tmp_path, monkeypatch):
    """Every test gets its own workspace and a fresh runtime."""
    monkeypatch.setenv("BIGFIB_HOME", str(tmp_path / "ws"))
    token = _current_runtime.set(Runtime())
    yield tmp_path / "ws"
    _current_runtime.reset(token)


def big(v: int) -> BigInt:
    return BigInt.from_int(v)
