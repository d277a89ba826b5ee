from typing import Tuple
import random


def pick_distinct_pair(count: int, rng: random.Random) -> Tuple[int, int]:
    """Two different indices in range(count), in random order."""
    if count < 2:
        raise ValueError(f"Need at least two items to pick a pair, got {count}")
    idx_a, idx_b = rng.sample(range(count), 2)
    return idx_a, idx_b
