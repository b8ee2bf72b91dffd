"""
schelling/batch.py - Batch Orchestrator

Runs many independent trials, serially or across a process pool, and
folds their results through a single aggregator.

Fan-in: workers put each TrialResult on one shared manager queue and a
None sentinel when their chunk is done. The calling thread is the only
consumer, so the statistics, the result log and the receipts are written
by exactly one task.
"""

import os
import random
from multiprocessing import Manager, Pool
from multiprocessing.pool import AsyncResult
from queue import Empty
from typing import Callable, List, Optional, Sequence, Tuple

import numpy as np
from tqdm import tqdm

from receipts import emit_receipt, merkle

from .constants import QUEUE_POLL_SECONDS
from .export import ResultLog
from .trial import run_trial
from .types_config import SimConfig
from .types_result import BatchSummary, TrialResult


def default_workers() -> int:
    return os.cpu_count() or 1


# =============================================================================
# PARTITIONING AND SEEDING
# =============================================================================

def partition_runs(n_runs: int, workers: int) -> List[range]:
    """
    Split run numbers 1..n_runs into at most `workers` contiguous chunks.

    The first n_runs % workers chunks take one extra run, so every run is
    assigned. Empty chunks (more workers than runs) are dropped.

    Args:
        n_runs: Total trials in the batch
        workers: Pool size

    Returns:
        List of ranges of 1-based run numbers
    """
    chunk_size, remainder = divmod(n_runs, workers)
    chunks = []
    start = 1
    for i in range(workers):
        length = chunk_size + (1 if i < remainder else 0)
        if length:
            chunks.append(range(start, start + length))
        start += length
    return chunks


def trial_seeds(random_seed: Optional[int], n_runs: int) -> List[int]:
    """
    One independent seed per trial, spawned from a single SeedSequence.

    The seed of a trial depends only on random_seed and its run number, so
    serial and parallel batches replay the same trials.
    """
    sequence = np.random.SeedSequence(random_seed)
    return [int(child.generate_state(1)[0]) for child in sequence.spawn(n_runs)]


# =============================================================================
# AGGREGATION
# =============================================================================

class Aggregator:
    """Single consumer of trial results. Owned by the calling thread."""

    def __init__(self, result_log: Optional[ResultLog] = None):
        self.result_log = result_log
        self.successes = 0
        self.results: List[TrialResult] = []
        self.receipts: List[dict] = []

    def add(self, result: TrialResult) -> None:
        if result.converged:
            self.successes += 1
        self.results.append(result)

        if self.result_log is not None:
            self.result_log.append(result)

        self.receipts.append(emit_receipt("trial_result", result.to_dict()))


def _mean_sd(values: Sequence[int]) -> Tuple[float, float]:
    """Mean and sample standard deviation (0.0 below two values)."""
    arr = np.asarray(values, dtype=np.float64)
    if arr.size == 0:
        return 0.0, 0.0
    sd = float(np.std(arr, ddof=1)) if arr.size > 1 else 0.0
    return float(np.mean(arr)), sd


def summarize(config: SimConfig, aggregator: Aggregator) -> BatchSummary:
    """
    Compute batch statistics once every worker has finished.

    Abandoned trials stay in the averages with their -1 sentinels, so
    non-convergence shows up in the reported ticks and final groups.

    Args:
        config: SimConfig the batch ran under
        aggregator: Aggregator holding every collected result

    Returns:
        BatchSummary
    """
    # Run-number order keeps the floating point sums identical across modes
    ordered = tuple(sorted(aggregator.results, key=lambda r: r.run_number))

    ticks_mean, ticks_sd = _mean_sd([r.ticks for r in ordered])
    init_mean, init_sd = _mean_sd([r.init_groups for r in ordered])
    final_mean, final_sd = _mean_sd([r.final_groups for r in ordered])
    success_pct = 100 * aggregator.successes / config.n_runs

    receipt = emit_receipt("batch_summary", {
        "scenario": config.scenario_name,
        "size": config.size,
        "vision": config.vision,
        "tolerance": config.tolerance,
        "n_runs": config.n_runs,
        "workers": config.workers,
        "random_seed": config.random_seed,
        "successes": aggregator.successes,
        "success_pct": success_pct,
        "ticks_mean": ticks_mean,
        "ticks_sd": ticks_sd,
        "init_groups_mean": init_mean,
        "init_groups_sd": init_sd,
        "final_groups_mean": final_mean,
        "final_groups_sd": final_sd,
        "results_merkle_root": merkle([r.to_dict() for r in ordered])
    })

    return BatchSummary(
        n_runs=config.n_runs,
        successes=aggregator.successes,
        success_pct=success_pct,
        ticks_mean=ticks_mean,
        ticks_sd=ticks_sd,
        init_groups_mean=init_mean,
        init_groups_sd=init_sd,
        final_groups_mean=final_mean,
        final_groups_sd=final_sd,
        results=ordered,
        trial_receipts=tuple(aggregator.receipts),
        receipt=receipt
    )


# =============================================================================
# WORKERS
# =============================================================================

def _run_chunk(config: SimConfig, run_numbers: range, seeds: List[int], queue) -> int:
    """Worker body: run a chunk sequentially, one queue item per trial."""
    try:
        for run_number, seed in zip(run_numbers, seeds):
            queue.put(run_trial(config, random.Random(seed), run_number))
    finally:
        queue.put(None)
    return len(run_numbers)


def _drain(queue, chunks: List[AsyncResult], aggregator: Aggregator, bar) -> None:
    """Consume results until every chunk has sent its sentinel."""
    pending = len(chunks)
    while pending:
        try:
            item = queue.get(timeout=QUEUE_POLL_SECONDS)
        except Empty:
            # A chunk that failed before it could send its sentinel
            for chunk in chunks:
                if chunk.ready() and not chunk.successful():
                    chunk.get()
            continue

        if item is None:
            pending -= 1
            continue

        aggregator.add(item)
        bar.update(1)


# =============================================================================
# ENTRY POINT
# =============================================================================

def run_batch(
    config: SimConfig,
    result_log: Optional[ResultLog] = None,
    trace: Optional[Callable[[str], None]] = None,
    progress: bool = False
) -> BatchSummary:
    """
    Run config.n_runs trials and summarize them.

    Args:
        config: SimConfig (workers == 1 runs on the calling thread)
        result_log: Open ResultLog to append one row per trial, if any
        trace: Sink for verbose lines; defaults to print when config.verbose
        progress: Show a progress bar over completed trials

    Returns:
        BatchSummary
    """
    seeds = trial_seeds(config.random_seed, config.n_runs)
    aggregator = Aggregator(result_log)

    if config.verbose:
        trace = trace or print
        progress = False
    else:
        trace = None

    with tqdm(total=config.n_runs, unit="trial", disable=not progress) as bar:
        if not config.parallel:
            for run_number, seed in enumerate(seeds, start=1):
                aggregator.add(run_trial(config, random.Random(seed), run_number, trace))
                bar.update(1)
        else:
            chunks = partition_runs(config.n_runs, config.workers)
            with Manager() as manager:
                queue = manager.Queue()
                # Leaving the pool terminates its workers, so a fatal error in
                # the aggregator stops the batch without finishing the chunks
                with Pool(processes=config.workers) as pool:
                    pending = [
                        pool.apply_async(
                            _run_chunk,
                            (config, chunk, seeds[chunk.start - 1:chunk.stop - 1], queue),
                        )
                        for chunk in chunks
                    ]
                    _drain(queue, pending, aggregator, bar)
                    # Barrier; re-raises any worker exception
                    for result in pending:
                        result.get()

    return summarize(config, aggregator)
