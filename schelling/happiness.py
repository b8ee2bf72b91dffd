"""
schelling/happiness.py - Happiness Oracle

Pure predicates over a lattice. No mutation.
"""

from .lattice import Lattice


def is_happy(lattice: Lattice, position: int, vision: int, tolerance: float) -> bool:
    """
    True if the share of same-type neighbors within vision meets tolerance.

    Looks at the 2 * vision ring neighbors around position. The count is
    taken over type-1 neighbors and inverted for a type-0 agent, so the
    predicate is unchanged by swapping every 0 and 1 on the ring.

    Args:
        lattice: Ring to inspect
        position: Agent index
        vision: Positions examined on each side
        tolerance: Minimum same-type fraction in (0, 1)

    Returns:
        bool: fraction >= tolerance
    """
    count = 0
    for d in range(1, vision + 1):
        count += lattice.type_at(position - d)
        count += lattice.type_at(position + d)

    if lattice.type_at(position) == 0:
        count = 2 * vision - count

    return count / (2 * vision) >= tolerance


def is_converged(lattice: Lattice, vision: int, tolerance: float) -> bool:
    """True if every agent on the ring is happy."""
    return all(is_happy(lattice, idx, vision, tolerance) for idx in range(len(lattice)))
