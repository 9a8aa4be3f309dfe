from typing import List, Sequence, TypeVar

import numpy as np

T = TypeVar("T")


class DRNG:
    """Deterministic Random Number Generator wrapper."""

    def __init__(self, seed: int):
        self.g = np.random.Generator(np.random.PCG64(seed))

    def uniform(self, a: float, b: float) -> float:
        """Return a random float in [a, b)."""
        return float(self.g.uniform(a, b))

    def shuffled(self, items: Sequence[T]) -> List[T]:
        """Return a new list with the items in random order."""
        return [items[i] for i in self.g.permutation(len(items))]
