import random
from typing import Optional


def get_seeded_rng(seed: Optional[int] = None) -> random.Random:
    """Returns a new random.Random instance seeded with the given integer."""
    return random.Random(seed)
