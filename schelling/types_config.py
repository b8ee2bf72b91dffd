"""
schelling/types_config.py - SimConfig Dataclass and Scenario Presets

Immutable configuration for simulation batches.
Frozen dataclass; an invalid config cannot be constructed.
"""

from dataclasses import dataclass
from typing import Dict, Optional


@dataclass(frozen=True)
class SimConfig:
    """Simulation configuration (immutable)."""
    size: int
    n_runs: int
    vision: int
    tolerance: float
    workers: int = 1
    verbose: bool = False
    output_path: Optional[str] = None
    random_seed: Optional[int] = None
    scenario_name: str = "CUSTOM"

    def __post_init__(self):
        validate_config(self)

    @property
    def parallel(self) -> bool:
        return self.workers > 1


def validate_config(config: SimConfig) -> None:
    """
    Reject configurations no trial can run under.

    Args:
        config: SimConfig to check

    Raises:
        ValueError: with a user-facing message for the first problem found
    """
    if config.size <= 0:
        raise ValueError("Please enter the number of agents to simulate.")
    if config.n_runs <= 0:
        raise ValueError("Please enter the number of model runs to be performed.")
    if config.vision <= 0:
        raise ValueError("Please enter the desired neighborhood size.")
    if not 0 < config.tolerance < 1:
        raise ValueError(
            "Error: tolerance must be a decimal greater than zero and less than one."
        )
    if config.vision >= config.size:
        raise ValueError(
            "Error: vision must be less than the number of agents."
        )
    if config.workers <= 0:
        raise ValueError("Error: worker count must be at least one.")
    if config.verbose and config.workers > 1:
        raise ValueError(
            "Error: verbose and parallel cannot be enabled at the same time."
        )


# =============================================================================
# SCENARIO PRESETS
# =============================================================================

SCENARIO_BASELINE = SimConfig(
    size=100,
    n_runs=50,
    vision=3,
    tolerance=0.5,
    random_seed=42,
    scenario_name="BASELINE"
)

SCENARIO_WIDE_VISION = SimConfig(
    size=500,
    n_runs=50,
    vision=10,
    tolerance=0.5,
    random_seed=43,
    scenario_name="WIDE_VISION"
)

# Above 0.5 the ring often cannot settle inside the tick budget
SCENARIO_INTOLERANT = SimConfig(
    size=100,
    n_runs=50,
    vision=3,
    tolerance=0.7,
    random_seed=44,
    scenario_name="INTOLERANT"
)

SCENARIOS: Dict[str, SimConfig] = {
    "BASELINE": SCENARIO_BASELINE,
    "WIDE_VISION": SCENARIO_WIDE_VISION,
    "INTOLERANT": SCENARIO_INTOLERANT,
}
