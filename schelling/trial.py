"""
schelling/trial.py - Trial Driver

One full run of the model: random ring, relocate unhappy agents until
every agent is happy or the tick budget is spent.
"""

import random
from typing import Callable, Optional

from .constants import NON_CONVERGENT, TICK_BUDGET_FACTOR
from .happiness import is_converged, is_happy
from .lattice import Lattice
from .relocation import move
from .types_config import SimConfig
from .types_result import TrialResult


def count_distinct(lattice: Lattice) -> int:
    """
    Count maximal same-type runs around the ring ("firewalls" in Brandt et al.).

    Boundaries are the transitions inside the sequence plus one more when
    the first and last agents differ. A ring with no boundary is one group.

    Args:
        lattice: Ring to inspect

    Returns:
        int: Number of distinct groups
    """
    cells = lattice.cells
    boundaries = sum(1 for left, right in zip(cells, cells[1:]) if left != right)

    if cells[0] != cells[-1]:  # wrap around
        boundaries += 1

    return max(boundaries, 1)


def step(lattice: Lattice, vision: int, tolerance: float, rng: random.Random) -> int:
    """
    Pick an unhappy agent at random and move it.

    Only call on a ring that is not converged, otherwise the resampling
    never finds an unhappy agent.

    Returns:
        int: Index the agent ended up at
    """
    idx = rng.randrange(len(lattice))

    while is_happy(lattice, idx, vision, tolerance):
        idx = rng.randrange(len(lattice))

    return move(lattice, idx, vision, tolerance, rng)


def run_trial(
    config: SimConfig,
    rng: Optional[random.Random] = None,
    run_number: int = 1,
    trace: Optional[Callable[[str], None]] = None
) -> TrialResult:
    """
    Run one trial from random initialization to convergence or abandonment.

    Args:
        config: SimConfig with size, vision and tolerance
        rng: Random source for this trial only (fresh one if omitted)
        run_number: 1-based identity of the trial within its batch
        trace: Optional sink for per-tick lines (single worker only)

    Returns:
        TrialResult: ticks and final_groups are -1 if the trial was abandoned
    """
    if rng is None:
        rng = random.Random()

    vision, tolerance = config.vision, config.tolerance
    lattice = Lattice.random(config.size, rng)
    init_groups = count_distinct(lattice)
    budget = TICK_BUDGET_FACTOR * len(lattice)

    if trace:
        trace(f"Run number {run_number}")
        trace(f"{init_groups} distinct groups at start")
        trace(lattice.render())

    ticks = 0
    while not is_converged(lattice, vision, tolerance):
        if ticks > budget:
            if trace:
                trace("Model failed to stabilize")
            return TrialResult(
                run_number=run_number,
                size=config.size,
                vision=vision,
                tolerance=tolerance,
                init_groups=init_groups,
                final_groups=NON_CONVERGENT,
                ticks=NON_CONVERGENT
            )

        step(lattice, vision, tolerance, rng)
        ticks += 1
        if trace:
            trace(lattice.render())

    final_groups = count_distinct(lattice)
    if trace:
        trace(f"{final_groups} distinct groups at end after {ticks} moves")
        trace("")

    return TrialResult(
        run_number=run_number,
        size=config.size,
        vision=vision,
        tolerance=tolerance,
        init_groups=init_groups,
        final_groups=final_groups,
        ticks=ticks
    )
