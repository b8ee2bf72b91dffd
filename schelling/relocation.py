"""
schelling/relocation.py - Relocation Engine

Moves one unhappy agent to random places on the ring until it is happy
or the retry budget runs out.
"""

import random

from .constants import RETRY_BUDGET_FACTOR
from .happiness import is_happy
from .lattice import Lattice


def move(lattice: Lattice, position: int, vision: int, tolerance: float,
         rng: random.Random) -> int:
    """
    Relocate the agent at position, in place.

    Each try removes the agent and reinserts it at a uniformly random index
    of the one-shorter ring, so every other agent keeps its relative order.
    Stops at the first happy placement; after RETRY_BUDGET_FACTOR * len
    tries the agent stays where it last landed.

    Args:
        lattice: Ring to mutate
        position: Index of the agent to move
        vision: Positions examined on each side
        tolerance: Minimum same-type fraction
        rng: Random source owned by the calling trial

    Returns:
        int: Final index of the agent
    """
    max_tries = RETRY_BUDGET_FACTOR * len(lattice)
    tries = 0
    unhappy = True

    while unhappy and tries < max_tries:
        value = lattice.remove(position)
        position = rng.randrange(len(lattice))
        lattice.insert_at(position, value)

        tries += 1
        unhappy = not is_happy(lattice, position, vision, tolerance)

    return position
