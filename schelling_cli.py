"""
Schelling 1D CLI Harness

Runs a batch of one-dimensional Schelling segregation trials and prints
summary statistics. Optionally writes one CSV row per trial and the
batch receipts as JSONL.

Model follows:
    Brandt, C., Immorlica, N., Kamath, G., & Kleinberg, R. (2012).
    An analysis of one-dimensional Schelling segregation. STOC '12, p. 789.
"""

from __future__ import annotations

import argparse
import cProfile
import sys
from typing import List, Optional

from rich.console import Console
from rich.markup import escape

from receipts import StopRule
from schelling.batch import default_workers, run_batch
from schelling.constants import PROFILE_FILENAME
from schelling.export import generate_report, open_result_log, write_receipts
from schelling.types_config import SCENARIOS, SimConfig
from schelling.types_result import BatchSummary

console = Console()


def print_success(message: str) -> None:
    """Print a success message with green checkmark."""
    console.print(f"[green]✓[/green] {escape(message)}")


def print_error(message: str) -> None:
    """Print an error message with red X."""
    console.print(f"[red]✗[/red] {escape(message)}")


def _pick(value, base: Optional[SimConfig], field: str, fallback):
    """Flag value, else the scenario preset's value, else fallback."""
    if value is not None:
        return value
    if base is not None:
        return getattr(base, field)
    return fallback


def build_config(args: argparse.Namespace) -> SimConfig:
    """
    Merge command-line flags over an optional scenario preset.

    Raises:
        ValueError: if the merged configuration is invalid
    """
    base = SCENARIOS[args.scenario] if args.scenario else None
    verbose = args.verbose

    workers = args.workers
    if workers is None:
        workers = 1 if verbose else default_workers()

    return SimConfig(
        size=_pick(args.size, base, "size", 0),
        n_runs=_pick(args.runs, base, "n_runs", 0),
        vision=_pick(args.vision, base, "vision", 0),
        tolerance=_pick(args.tolerance, base, "tolerance", 0.0),
        workers=workers,
        verbose=verbose,
        output_path=args.output or None,
        random_seed=_pick(args.seed, base, "random_seed", None),
        scenario_name=base.scenario_name if base else "CUSTOM",
    )


def execute(config: SimConfig, progress: bool = False,
            profile: bool = False) -> BatchSummary:
    """Run the batch with the result log open for its whole duration."""
    result_log = open_result_log(config.output_path)
    profiler = cProfile.Profile() if profile else None
    try:
        if profiler:
            profiler.enable()
        summary = run_batch(config, result_log=result_log, progress=progress)
    finally:
        if profiler:
            profiler.disable()
            profiler.dump_stats(PROFILE_FILENAME)
        if result_log is not None:
            result_log.close()
    return summary


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        description="One-dimensional Schelling segregation model",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  python schelling_cli.py -s 100 -n 50 -w 3 -t 0.5          # All CPUs
  python schelling_cli.py -s 100 -n 50 -w 3 -t 0.5 -j 1 -o runs.csv
  python schelling_cli.py -s 20 -n 1 -w 2 -t 0.5 -v         # Trace every tick
  python schelling_cli.py --scenario BASELINE --receipts receipts.jsonl
        """,
    )
    parser.add_argument(
        "-s", "--size",
        type=int,
        help="Number of agents in the model",
    )
    parser.add_argument(
        "-n", "--runs",
        type=int,
        help="Number of model runs",
    )
    parser.add_argument(
        "-w", "--vision",
        type=int,
        help="Neighborhood size on each side of an agent",
    )
    parser.add_argument(
        "-t", "--tolerance",
        type=float,
        help="Agent tolerance, strictly between 0 and 1",
    )
    parser.add_argument(
        "-v", "--verbose",
        action="store_true",
        help="Print the lattice after every tick (single worker only)",
    )
    parser.add_argument(
        "-o", "--output",
        type=str,
        default="",
        help="CSV file to write one row per run to",
    )
    parser.add_argument(
        "-j", "--workers",
        type=int,
        help="Worker processes (default: 1 with --verbose, else CPU count)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        help="Random seed; fixed seeds replay the same trials in any mode",
    )
    parser.add_argument(
        "--scenario",
        choices=sorted(SCENARIOS),
        help="Preset whose values fill in any flag not given",
    )
    parser.add_argument(
        "--receipts",
        type=str,
        help="JSONL file for trial and batch receipts",
    )
    parser.add_argument(
        "--progress",
        action="store_true",
        help="Show a progress bar",
    )
    parser.add_argument(
        "--profile",
        action="store_true",
        help=f"Profile the batch and write {PROFILE_FILENAME}",
    )
    return parser


def main(argv: Optional[List[str]] = None) -> int:
    """Main CLI entry point."""
    args = build_parser().parse_args(argv)

    try:
        config = build_config(args)
    except ValueError as e:
        print_error(str(e))
        return 1

    if config.parallel:
        console.print(f"workers = {config.workers}")

    try:
        summary = execute(config, progress=args.progress, profile=args.profile)
        if args.receipts:
            write_receipts(args.receipts, [*summary.trial_receipts, summary.receipt])
    except StopRule as e:
        print_error(str(e))
        return 1

    console.print(generate_report(summary), markup=False, highlight=False)
    if config.output_path:
        print_success(f"Results written to {config.output_path}")
    if args.receipts:
        print_success(f"Receipts written to {args.receipts}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
