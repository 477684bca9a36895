"""
Random displacement sources for horizon simulation.

The engine draws exactly one factor in [-1, 1] per moving entity per turn.
Sources are passed in explicitly so a test can pin every draw; the default
source uses numpy.random.Generator(PCG64) seeded from SHA256-derived seeds
for reproducible cross-session results.
"""

import hashlib
import os
import numpy as np
from abc import ABC, abstractmethod
from typing import Any, Iterable, Optional

from .constants import FACTOR_MIN, FACTOR_MAX
from .errors import InvalidArgumentError


def make_seed(*components: Any) -> int:
    """
    Generate deterministic 64-bit seed from hierarchical components.

    Uses SHA256 to hash components into stable seed value.

    Args:
        *components: Seed components (world_seed, run label, run index, etc.)

    Returns:
        64-bit integer seed for numpy RNG

    Example:
        run_seed = make_seed(world_seed, "run", 3)
    """
    hash_input = ":".join(str(c) for c in components)

    hash_bytes = hashlib.sha256(hash_input.encode('utf-8')).digest()
    seed = int.from_bytes(hash_bytes[:8], byteorder='big')

    return seed


def check_factor(factor: float) -> float:
    """
    Validate a displacement factor.

    Raises:
        InvalidArgumentError: if factor is NaN or outside [-1, 1]
    """
    factor = float(factor)
    if np.isnan(factor) or factor < FACTOR_MIN or factor > FACTOR_MAX:
        raise InvalidArgumentError(
            f"Random factor must be within [{FACTOR_MIN}, {FACTOR_MAX}], got {factor}"
        )
    return factor


class RandomSource(ABC):
    """Supplies one displacement factor per call, uniform over [-1, 1]."""

    @abstractmethod
    def next_factor(self) -> float:
        """Draw the next factor in [-1, 1]."""
        pass


class UniformRandomSource(RandomSource):
    """
    Default random source backed by numpy PCG64.

    Attributes:
        seed: 64-bit seed the generator was built from
    """

    def __init__(self, seed: Optional[int] = None):
        if seed is None:
            seed = int.from_bytes(os.urandom(8), byteorder='big')
        self.seed = seed
        self._rng = np.random.Generator(np.random.PCG64(seed))

    @classmethod
    def from_components(cls, *components: Any) -> 'UniformRandomSource':
        """Build a source seeded with make_seed(*components)."""
        return cls(make_seed(*components))

    def next_factor(self) -> float:
        # Generator.uniform samples [low, high); nudge high to the next float
        # so FACTOR_MAX itself is reachable, then clamp back into range.
        value = self._rng.uniform(FACTOR_MIN, np.nextafter(FACTOR_MAX, np.inf))
        return float(min(value, FACTOR_MAX))


class FixedRandomSource(RandomSource):
    """Returns the same factor on every call."""

    def __init__(self, value: float = 0.0):
        self.value = check_factor(value)
        self.calls = 0

    def next_factor(self) -> float:
        self.calls += 1
        return self.value


class SequenceRandomSource(RandomSource):
    """
    Replays a scripted list of factors.

    Args:
        values: Factors to return in order
        cycle: If True, restart from the beginning when exhausted;
               otherwise raise IndexError once the script runs out
    """

    def __init__(self, values: Iterable[float], cycle: bool = False):
        self.values = [check_factor(v) for v in values]
        if not self.values:
            raise InvalidArgumentError("SequenceRandomSource needs at least one value")
        self.cycle = cycle
        self.calls = 0

    def next_factor(self) -> float:
        if self.calls >= len(self.values) and not self.cycle:
            raise IndexError(f"Scripted random source exhausted after {self.calls} draws")
        value = self.values[self.calls % len(self.values)]
        self.calls += 1
        return value
