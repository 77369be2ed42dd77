"""Weighted random index picker over prefix sums.

Each index k is chosen with probability weights[k] / total. Construction is
O(n); each pick is an O(log n) binary search and does not mutate the
sampler, so one instance can serve any number of independent draws.

    sampler = WeightedSampler([10, 20, 30, 40], rng=random.Random(7))
    sampler.pick_index()  # 3 about 40% of the time

Index k owns the half-open range [prefix[k-1], prefix[k]) of the draw space
[0, total), so zero-weight indices are never picked while total > 0.
"""

from __future__ import annotations

import random
from bisect import bisect_right
from typing import Iterable, Optional, Tuple

from recallforge.core.exceptions import EmptyInputError, InvalidWeightError

_default_rng = random.Random()


class WeightedSampler:
    """Immutable weighted sampler.

    Attributes:
        prefix_sums: Cumulative weights, prefix_sums[i] = sum(weights[:i + 1])
        total: Sum of all weights (0 when empty)
    """

    __slots__ = ("_prefix_sums", "_rng")

    def __init__(
        self, weights: Iterable[int], rng: Optional[random.Random] = None
    ) -> None:
        """Build the prefix-sum table.

        Args:
            weights: Non-negative integer weights
            rng: Default random source for pick_index()

        Raises:
            InvalidWeightError: If a weight is negative or not an integer
        """
        prefix = []
        running = 0
        for index, weight in enumerate(weights):
            if isinstance(weight, bool) or not isinstance(weight, int) or weight < 0:
                raise InvalidWeightError(index, weight)
            running += weight
            prefix.append(running)

        self._prefix_sums: Tuple[int, ...] = tuple(prefix)
        self._rng = rng

    @property
    def prefix_sums(self) -> Tuple[int, ...]:
        return self._prefix_sums

    @property
    def total(self) -> int:
        return self._prefix_sums[-1] if self._prefix_sums else 0

    def __len__(self) -> int:
        return len(self._prefix_sums)

    def pick_index(self, rng: Optional[random.Random] = None) -> int:
        """Draw one index with probability proportional to its weight.

        Args:
            rng: Random source for this draw; falls back to the sampler's
                own source, then to a shared module-level generator

        Returns:
            Index in [0, len(self)); 0 when every weight is zero

        Raises:
            EmptyInputError: If the sampler was built from no weights
        """
        if not self._prefix_sums:
            raise EmptyInputError("Cannot pick an index from an empty weight list")

        total = self.total
        if total == 0:
            return 0

        source = rng or self._rng or _default_rng
        target = source.randrange(total)
        # Smallest i with prefix_sums[i] > target
        return bisect_right(self._prefix_sums, target)

    def __repr__(self) -> str:
        return f"WeightedSampler(n={len(self)}, total={self.total})"
