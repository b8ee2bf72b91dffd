"""
tests/test_trial.py - Trial Driver Tests

Validates group counting, the tick budget and the TrialResult contract.
"""

import random

import pytest

from schelling import trial
from schelling.constants import NON_CONVERGENT
from schelling.happiness import is_converged
from schelling.lattice import Lattice
from schelling.trial import count_distinct, run_trial, step
from schelling.types_config import SimConfig


def _alternating(cls, size, rng):
    return cls([0, 1] * (size // 2))


def _uniform(cls, size, rng):
    return cls([0] * size)


class TestCountDistinct:
    """Test count_distinct on the ring."""

    @pytest.mark.parametrize("size", [2, 3, 10, 101])
    def test_uniform_ring_is_one_group(self, size):
        """All-identical ring is a single group."""
        assert count_distinct(Lattice([1] * size)) == 1
        assert count_distinct(Lattice([0] * size)) == 1

    @pytest.mark.parametrize("size", [4, 6, 10, 50])
    def test_alternating_ring_counts_every_agent(self, size):
        """Alternating even ring has size groups, the seam closing the last one."""
        assert count_distinct(Lattice([0, 1] * (size // 2))) == size

    def test_runs_touching_the_seam_merge(self):
        """Equal endpoints join the first and last runs."""
        assert count_distinct(Lattice([0, 1, 1, 0])) == 2
        assert count_distinct(Lattice([1, 1, 0, 0, 0, 1, 1])) == 2

    def test_differing_endpoints_add_a_boundary(self):
        """Differing endpoints count the seam as a boundary."""
        assert count_distinct(Lattice([0, 1, 1])) == 2
        assert count_distinct(Lattice([0, 0, 1, 1, 0, 1])) == 4

    @pytest.mark.parametrize("seed", range(20))
    def test_random_ring_group_count_is_one_or_even(self, seed):
        """On a ring the boundaries pair up, so the count is 1 or even."""
        groups = count_distinct(Lattice.random(37, random.Random(seed)))
        assert groups == 1 or groups % 2 == 0


class TestStep:
    """Test step."""

    def test_moves_an_unhappy_agent(self, rng):
        """step only moves agents that are unhappy and keeps the size."""
        lattice = Lattice([0] * 8 + [1] + [0] * 3 + [1] * 8)
        position = step(lattice, 1, 0.5, rng)
        assert len(lattice) == 20
        assert lattice.type_at(position) == 1


class TestRunTrial:
    """Test run_trial."""

    @pytest.mark.parametrize("seed", range(8))
    def test_converged_trial_fields(self, seed):
        """A converged trial carries non-negative ticks and a valid group count."""
        config = SimConfig(size=20, n_runs=1, vision=2, tolerance=0.5)
        result = run_trial(config, random.Random(seed), run_number=4)
        assert result.run_number == 4
        assert result.size == 20
        assert result.vision == 2
        assert result.tolerance == 0.5
        if result.converged:
            assert result.ticks >= 0
            assert result.final_groups == 1 or result.final_groups % 2 == 0
        else:
            assert result.final_groups == NON_CONVERGENT

    def test_same_seed_same_result(self):
        """Trials are reproducible from their random source."""
        config = SimConfig(size=30, n_runs=1, vision=2, tolerance=0.5)
        a = run_trial(config, random.Random(77))
        b = run_trial(config, random.Random(77))
        assert a == b

    def test_converged_start_takes_zero_ticks(self, monkeypatch):
        """A ring that starts converged finishes without moving anyone."""
        monkeypatch.setattr(Lattice, "random", classmethod(_uniform))
        config = SimConfig(size=12, n_runs=1, vision=3, tolerance=0.9)
        result = run_trial(config, random.Random(0))
        assert result.ticks == 0
        assert result.init_groups == 1
        assert result.final_groups == 1

    def test_abandoned_after_budget(self, monkeypatch):
        """Exceeding TICK_BUDGET_FACTOR * size ticks yields the -1 sentinels."""
        calls = []
        monkeypatch.setattr(Lattice, "random", classmethod(_alternating))
        monkeypatch.setattr(trial, "TICK_BUDGET_FACTOR", 1)
        monkeypatch.setattr(trial, "step", lambda lattice, v, t, rng: calls.append(1))
        config = SimConfig(size=6, n_runs=1, vision=1, tolerance=0.5)

        result = run_trial(config, random.Random(0))

        assert result.ticks == NON_CONVERGENT
        assert result.final_groups == NON_CONVERGENT
        assert result.init_groups == 6
        assert not result.converged
        assert len(calls) == 7  # budget of 6, abandoned once the counter exceeds it

    def test_convergence_on_last_tick_is_a_success(self, monkeypatch):
        """Converging on the tick that crosses the budget still counts."""
        calls = []

        def fake_step(lattice, vision, tolerance, rng):
            calls.append(1)
            if len(calls) == 7:
                for idx in range(len(lattice)):
                    lattice.remove(idx)
                    lattice.insert_at(idx, 0)

        monkeypatch.setattr(Lattice, "random", classmethod(_alternating))
        monkeypatch.setattr(trial, "TICK_BUDGET_FACTOR", 1)
        monkeypatch.setattr(trial, "step", fake_step)
        config = SimConfig(size=6, n_runs=1, vision=1, tolerance=0.5)

        result = run_trial(config, random.Random(0))

        assert result.converged
        assert result.ticks == 7
        assert result.final_groups == 1

    def test_trace_lines(self):
        """Verbose trace reports start, every tick and the outcome."""
        lines = []
        config = SimConfig(size=16, n_runs=1, vision=1, tolerance=0.5, verbose=True)
        result = run_trial(config, random.Random(5), run_number=3, trace=lines.append)

        assert lines[0] == "Run number 3"
        assert lines[1] == f"{result.init_groups} distinct groups at start"
        assert set(lines[2]) <= {"X", "O"}
        if result.converged:
            assert f"{result.final_groups} distinct groups at end after {result.ticks} moves" in lines
            # start ring + one ring per tick
            assert len([line for line in lines if line and set(line) <= {"X", "O"}]) == result.ticks + 1
        else:
            assert "Model failed to stabilize" in lines


class TestConvergenceProperty:
    """ticks == -1 exactly when the trial did not reach a converged ring."""

    @pytest.mark.parametrize("seed", range(5))
    def test_final_ring_converged_iff_ticks_set(self, seed, monkeypatch):
        """Capture the final ring and compare it with the reported outcome."""
        rings = []
        original = Lattice.random.__func__

        def capture(cls, size, rng):
            lattice = original(cls, size, rng)
            rings.append(lattice)
            return lattice

        monkeypatch.setattr(Lattice, "random", classmethod(capture))
        config = SimConfig(size=24, n_runs=1, vision=2, tolerance=0.6)
        result = run_trial(config, random.Random(seed))

        assert result.converged == is_converged(rings[0], 2, 0.6)
