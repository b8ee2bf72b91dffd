"""
schelling/types_result.py - TrialResult and BatchSummary Dataclasses

Immutable result containers.
"""

from dataclasses import dataclass
from typing import Tuple

from .constants import NON_CONVERGENT


@dataclass(frozen=True)
class TrialResult:
    """Outcome of one trial. Sentinels of -1 mark an abandoned trial."""
    run_number: int
    size: int
    vision: int
    tolerance: float
    init_groups: int
    final_groups: int = NON_CONVERGENT
    ticks: int = NON_CONVERGENT

    @property
    def converged(self) -> bool:
        return self.ticks != NON_CONVERGENT

    def to_row(self) -> list:
        """Result log row, in CSV_HEADER order."""
        return [
            self.run_number,
            self.size,
            self.vision,
            f"{self.tolerance:f}",
            self.init_groups,
            self.final_groups,
            self.ticks,
        ]

    def to_dict(self) -> dict:
        return {
            "run_number": self.run_number,
            "size": self.size,
            "vision": self.vision,
            "tolerance": self.tolerance,
            "init_groups": self.init_groups,
            "final_groups": self.final_groups,
            "ticks": self.ticks,
        }

    def __str__(self) -> str:
        return ",".join(str(field) for field in self.to_row())


@dataclass(frozen=True)
class BatchSummary:
    """Immutable batch statistics."""
    n_runs: int
    successes: int
    success_pct: float
    ticks_mean: float
    ticks_sd: float
    init_groups_mean: float
    init_groups_sd: float
    final_groups_mean: float
    final_groups_sd: float
    results: Tuple[TrialResult, ...]
    trial_receipts: Tuple[dict, ...]
    receipt: dict
