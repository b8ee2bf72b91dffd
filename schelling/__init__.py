"""
schelling - One-Dimensional Schelling Segregation Model

Public API for the simulation engine.
Flat, focused files. One file = one responsibility.
"""

# =============================================================================
# TYPES (Dataclasses)
# =============================================================================
from .types_config import (
    SimConfig,
    validate_config,
    SCENARIO_BASELINE,
    SCENARIO_WIDE_VISION,
    SCENARIO_INTOLERANT,
    SCENARIOS,
)
from .types_result import TrialResult, BatchSummary

# =============================================================================
# CONSTANTS
# =============================================================================
from .constants import (
    AGENT_TYPES,
    CSV_HEADER,
    NON_CONVERGENT,
    RETRY_BUDGET_FACTOR,
    TICK_BUDGET_FACTOR,
)

# =============================================================================
# ENGINE
# =============================================================================
from .lattice import Lattice
from .happiness import is_happy, is_converged
from .relocation import move
from .trial import count_distinct, step, run_trial

# =============================================================================
# BATCH
# =============================================================================
from .batch import (
    Aggregator,
    default_workers,
    partition_runs,
    run_batch,
    summarize,
    trial_seeds,
)

# =============================================================================
# EXPORT
# =============================================================================
from .export import (
    ResultLog,
    generate_report,
    open_result_log,
    write_receipts,
)

# =============================================================================
# PUBLIC API
# =============================================================================
__all__ = [
    # Types
    "SimConfig",
    "TrialResult",
    "BatchSummary",
    "validate_config",
    # Scenario presets
    "SCENARIO_BASELINE",
    "SCENARIO_WIDE_VISION",
    "SCENARIO_INTOLERANT",
    "SCENARIOS",
    # Constants
    "AGENT_TYPES",
    "CSV_HEADER",
    "NON_CONVERGENT",
    "RETRY_BUDGET_FACTOR",
    "TICK_BUDGET_FACTOR",
    # Engine
    "Lattice",
    "is_happy",
    "is_converged",
    "move",
    "count_distinct",
    "step",
    "run_trial",
    # Batch
    "Aggregator",
    "default_workers",
    "partition_runs",
    "run_batch",
    "summarize",
    "trial_seeds",
    # Export
    "ResultLog",
    "generate_report",
    "open_result_log",
    "write_receipts",
]
