"""Seeded uniform samplers used to draw tokens, entry counts and values.

A run owns exactly one sampler. Given the same seed and the same sequence of
calls, :class:`UniformSampler` returns bit-identical results, which is what
makes two fixture files generated from one seed byte-identical.

Algorithm
---------
The bit source is numpy's ``PCG64``, seeded with the run seed reduced to an
unsigned 64-bit integer. Ranges are sampled over the span ``hi - lo`` and
offset by ``lo``:

* spans below ``2**63 - 1`` (every index pick, every 32-bit value and most
  entry counts) use numpy's bounded ``Generator.integers``, which applies
  Lemire's multiply-shift method with rejection and has no modulo bias;
* wider spans, up to the full unsigned 64-bit domain, use rejection on raw
  64-bit draws: a draw larger than the span is discarded and redrawn, so
  every accepted value is equally likely;
* an empty span (``lo == hi``) returns ``lo`` without consuming randomness.

Other implementations only reproduce these streams if they use the same
bit generator and the same reduction.
"""
from abc import ABC, abstractmethod

import numpy as np

INT63_MAX = (1 << 63) - 1
UINT64_MASK = (1 << 64) - 1


class Sampler(ABC):
    """Source of uniform draws for one generation run."""

    @abstractmethod
    def pick_index(self, n: int) -> int:
        """Return an index in ``[0, n-1]``."""
        pass

    @abstractmethod
    def pick_count(self, lo: int, hi: int) -> int:
        """Return an entry count in the inclusive unsigned range."""
        pass

    @abstractmethod
    def pick_value(self, lo: int, hi: int) -> int:
        """Return a value in the inclusive signed 32-bit range."""
        pass


class UniformSampler(Sampler):
    """Unbiased sampler backed by a numpy PCG64 generator."""

    algorithm = "pcg64; bounded integers below 2**63-1, uint64 rejection above"

    def __init__(self, seed: int):
        self.seed = seed
        self.bit_generator = np.random.PCG64(seed & UINT64_MASK)
        self.rng = np.random.Generator(self.bit_generator)

    def pick_index(self, n: int) -> int:
        if n < 1:
            raise ValueError(f"cannot pick an index from {n} items")
        return int(self.rng.integers(0, n))

    def pick_count(self, lo: int, hi: int) -> int:
        return self._pick_range(lo, hi)

    def pick_value(self, lo: int, hi: int) -> int:
        return self._pick_range(lo, hi)

    def _pick_range(self, lo: int, hi: int) -> int:
        if hi < lo:
            raise ValueError(f"empty range [{lo}, {hi}]")
        if lo == hi:
            return lo

        span = hi - lo
        if span < INT63_MAX:
            return lo + int(self.rng.integers(0, span + 1, dtype=np.int64))

        # Near full width: redraw until the raw value falls inside the span
        x = self._raw64()
        while x > span:
            x = self._raw64()
        return lo + x

    def _raw64(self) -> int:
        """Return one raw 64-bit draw from the bit generator."""
        return int(self.bit_generator.random_raw())


def create_sampler(seed: int) -> Sampler:
    """Factory for the default sampler of a run."""
    return UniformSampler(seed)
