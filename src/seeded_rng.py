"""
Seeded PRNG (Mulberry32).

Same 32-bit seed, same float stream, no matter who calls it or when.
Python ints are unbounded so every step is masked back to 32 bits.
"""

MASK32 = 0xFFFFFFFF


def _imul(a: int, b: int) -> int:
    """32-bit wrapping multiply."""
    return (a * b) & MASK32


class SeededRandom:
    """Mulberry32 generator producing floats in [0, 1)."""

    def __init__(self, seed: int):
        self.seed = seed & MASK32
        self._state = self.seed

    def next(self) -> float:
        # The mixed value is carried over as the next state, not just the
        # incremented counter.
        t = (self._state + 0x6D2B79F5) & MASK32
        t = _imul(t ^ (t >> 15), t | 1)
        t ^= (t + _imul(t ^ (t >> 7), t | 61)) & MASK32
        self._state = t
        return (t ^ (t >> 14)) / 4294967296

    def reset(self):
        """Rewind to the start of the sequence."""
        self._state = self.seed
