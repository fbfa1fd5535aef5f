"""Seedable 32-bit pseudorandom source (Mulberry32) and seed derivation.

All arithmetic is carried out modulo 2**32 so the stream is a pure
function of the initial state. Nothing here reads host entropy except
``generate_seed``, which is only used when a caller omits the seed.
"""

import time
from typing import Tuple

MASK32 = 0xFFFFFFFF
MULBERRY_INCREMENT = 0x6D2B79F5
GOLDEN_MULTIPLIER = 2654435761
AVALANCHE_1 = 2246822507
AVALANCHE_2 = 3266489909
TWO_POW_32 = 4294967296.0


def _imul(a: int, b: int) -> int:
    """Low 32 bits of a 32x32-bit product."""
    return (a * b) & MASK32


def normalize_seed(seed: int) -> int:
    """Reduce an arbitrary integer seed to an unsigned 32-bit word."""
    return int(seed) & MASK32


def generate_seed() -> int:
    """Derive a run seed from the clock when the caller supplies none."""
    return (time.time_ns() // 1_000_000) & 0x7FFFFFFF


def mulberry32_next(state: int) -> Tuple[float, int]:
    """Advance the generator one step.

    Returns:
        (value in [0, 1), new state)
    """
    state = (state + MULBERRY_INCREMENT) & MASK32
    t = _imul(state ^ (state >> 15), state | 1)
    t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
    value = ((t ^ (t >> 14)) & MASK32) / TWO_POW_32
    return value, state


def derive_path_seed(run_seed: int, path_index: int) -> int:
    """Map (run seed, path index) to an independent per-path state."""
    h = (normalize_seed(run_seed) ^ ((path_index * GOLDEN_MULTIPLIER) & MASK32)) & MASK32
    h = _imul(h ^ (h >> 16), AVALANCHE_1)
    h = _imul(h ^ (h >> 13), AVALANCHE_2)
    return (h ^ (h >> 16)) & MASK32


class DeterministicRNG:
    """Stateful wrapper around ``mulberry32_next``."""

    def __init__(self, seed: int = 0):
        self._state = normalize_seed(seed)

    @property
    def state(self) -> int:
        return self._state

    def random(self) -> float:
        value, self._state = mulberry32_next(self._state)
        return value

    def choice_index(self, n: int) -> int:
        """Uniform index in [0, n) from a single draw."""
        if n <= 0:
            raise ValueError("choice_index requires n > 0")
        return min(int(self.random() * n), n - 1)

    @classmethod
    def for_path(cls, run_seed: int, path_index: int) -> "DeterministicRNG":
        return cls(derive_path_seed(run_seed, path_index))

    def __repr__(self) -> str:
        return f"DeterministicRNG(state=0x{self._state:08x})"
