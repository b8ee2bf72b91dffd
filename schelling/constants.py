"""
schelling/constants.py - Model Constants

All constants for the one-dimensional Schelling model. Centralized for tuning.
Pure data, no behavior.
"""

# =============================================================================
# AGENT TYPES
# =============================================================================

AGENT_TYPES = (0, 1)
AGENT_SYMBOLS = {0: "X", 1: "O"}

# =============================================================================
# RUN BUDGETS
# =============================================================================

TICK_BUDGET_FACTOR = 500   # Trial abandoned after 500 * size ticks
RETRY_BUDGET_FACTOR = 2    # Relocation gives up after 2 * size placements

# =============================================================================
# SENTINELS
# =============================================================================

NON_CONVERGENT = -1  # ticks / final_groups of an abandoned trial

# =============================================================================
# RESULT LOG
# =============================================================================

CSV_HEADER = (
    "run",
    "size",
    "vision",
    "tolerance",
    "init.blocks",
    "final.blocks",
    "ticks",
)

# =============================================================================
# BATCH
# =============================================================================

QUEUE_POLL_SECONDS = 0.5  # Aggregator wakes to check for dead workers
PROFILE_FILENAME = "schelling.prof"
