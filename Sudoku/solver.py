"""
Solve drivers for Sudoku puzzles

Two phases, used separately or one after the other:
1. SolveController: runs the deduction techniques in a fixed pass order until
   the grid is solved, a pass makes no change, or the pass limit is hit.
2. BacktrackingSolver: depth-first search over the cells deduction left
   open, one cloned GridState per trial, first valid grid wins.

Outcomes are reported as SolveResult values; nothing here raises for an
unsolvable or stalled puzzle.
"""

import time
from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from .grid import GridState, Coord
from . import techniques
from .techniques import (
    Technique, DIRECT_TECHNIQUES, LOCKED_TECHNIQUES, SUBSET_TECHNIQUES,
)


MAX_PASSES = 50


class SolveOutcome(Enum):
    SOLVED = 'solved'
    STALLED = 'stalled'                  # a pass made no change
    ITERATION_LIMIT = 'iteration_limit'  # more passes might still help
    INVALID = 'invalid'                  # grid breaks row/column/box uniqueness
    UNSOLVABLE = 'unsolvable'            # search exhausted every branch
    TIMEOUT = 'timeout'


@dataclass
class SolveResult:
    success: bool
    outcome: SolveOutcome
    passes: int = 0
    changes: int = 0
    remaining: int = 0

    def __repr__(self):
        return (f"SolveResult({self.outcome.value}, passes={self.passes}, "
                f"changes={self.changes}, remaining={self.remaining})")


@dataclass
class TechniqueRecord:
    """One line of the activity log: a technique call and how much it changed"""
    pass_index: Optional[int]  # None for manual single steps
    technique: Technique
    changes: int

    def format(self) -> str:
        return f"{self.technique.label:<27s}{self.technique.sign} {self.changes}"


# -----------------------------------------------------------------------------
# Logical solving
# -----------------------------------------------------------------------------
class SolveController:
    def __init__(self, state: GridState, verbose: bool = False, max_passes: int = MAX_PASSES,
                 use_locked_candidates: bool = True, use_subsets: bool = True):
        self.state = state
        self.verbose = verbose
        self.max_passes = max_passes
        self.use_locked_candidates = use_locked_candidates
        self.use_subsets = use_subsets
        self.history: List[TechniqueRecord] = []
        self.stats = {
            'passes': 0,
            'value_changes': 0,
            'candidate_changes': 0,
        }

    def _apply(self, technique: Technique, pass_index: Optional[int], **params) -> int:
        changes = techniques.run(technique, self.state, **params)
        record = TechniqueRecord(pass_index, technique, changes)
        self.history.append(record)
        if technique.assigns:
            self.stats['value_changes'] += changes
        else:
            self.stats['candidate_changes'] += changes
        if self.verbose:
            print(f"  {record.format()}")
        return changes

    def run_logical_solve(self) -> SolveResult:
        """
        Apply the full technique sequence pass after pass.

        Pass order: propagation, the four singles (stopping as soon as the
        grid is full), propagation, locked candidates, n-sets for rows,
        columns and boxes. Ends on a full grid, a pass with zero changes or
        the pass limit.
        """
        state = self.state
        if self.verbose:
            print(f"\n=== Logical solve: {state.remaining()} cells open ===")

        total = 0
        passes = 0
        stalled = False
        for pass_index in range(1, self.max_passes + 1):
            passes = pass_index
            if self.verbose:
                print(f"\nIteration {pass_index}")

            changes = self._apply(Technique.ELIMINATE_BY_VALUE, pass_index)
            for tech in DIRECT_TECHNIQUES:
                changes += self._apply(tech, pass_index)
                if state.remaining() == 0:
                    break
            if state.remaining() == 0:
                total += changes
                break

            changes += self._apply(Technique.ELIMINATE_BY_VALUE, pass_index)
            if self.use_locked_candidates:
                for tech in LOCKED_TECHNIQUES:
                    changes += self._apply(tech, pass_index)
            if self.use_subsets:
                for tech in SUBSET_TECHNIQUES:
                    changes += self._apply(tech, pass_index, size=None)

            state.check_invariants()
            total += changes
            if self.verbose:
                print(f"Updates: {changes}")
            if changes == 0:
                stalled = True
                break

        self.stats['passes'] += passes

        # Age the last pass into "prev", then clear it, so a renderer settles
        state.cycle_iteration()
        state.cycle_iteration()

        result = self._result(passes, total, stalled)
        if self.verbose:
            self._print_outcome(result)
        return result

    def _result(self, passes: int, changes: int, stalled: bool) -> SolveResult:
        remaining = self.state.remaining()
        if remaining == 0:
            outcome = SolveOutcome.SOLVED if self.state.validate() else SolveOutcome.INVALID
        elif stalled:
            outcome = SolveOutcome.STALLED
        else:
            outcome = SolveOutcome.ITERATION_LIMIT
        return SolveResult(outcome is SolveOutcome.SOLVED, outcome, passes, changes, remaining)

    def run_technique(self, name, **params) -> int:
        """Run one technique once (manual stepping) and close the iteration"""
        tech = Technique.from_name(name)
        changes = self._apply(tech, None, **params)
        self.state.cycle_iteration()
        return changes

    def solve_recursive(self, timeout_seconds: Optional[float] = None) -> SolveResult:
        """Backtracking search on this controller's state, then settle the change flags"""
        searcher = BacktrackingSolver(self.state, verbose=self.verbose, timeout_seconds=timeout_seconds)
        result = searcher.solve()
        self.state.cycle_iteration()
        self.state.cycle_iteration()
        return result

    def technique_totals(self) -> Dict[Technique, int]:
        totals = {tech: 0 for tech in Technique}
        for record in self.history:
            totals[record.technique] += record.changes
        return totals

    def _print_outcome(self, result: SolveResult) -> None:
        if result.outcome is SolveOutcome.SOLVED:
            print("Success")
        elif result.outcome is SolveOutcome.STALLED:
            print("Failed - no updates this iteration.")
        elif result.outcome is SolveOutcome.ITERATION_LIMIT:
            print("Failed - max iterations reached.")
        else:
            print("Failed - grid is invalid.")
        self._print_stats()

    def _print_stats(self) -> None:
        print("\nSolving Statistics:")
        print(f"  Passes: {self.stats['passes']}")
        print(f"  Values set: {self.stats['value_changes']}")
        print(f"  Candidates removed: {self.stats['candidate_changes']}")
        print(f"  Cells remaining: {self.state.remaining()}")


# -----------------------------------------------------------------------------
# Backtracking search
# -----------------------------------------------------------------------------
class BacktrackingSolver:
    """
    Exhaustive depth-first search over the cells still open.

    Cells are visited in row-major order as of the start of the search and
    values in ascending order; each trial works on its own clone, pruned by
    propagating the trial value to that cell's peers only. The grid is
    validated once the last cell is assigned. The first valid grid found is
    committed to the caller's state with copy_from(); a puzzle with several
    solutions silently yields only the first.
    """

    def __init__(self, state: GridState, verbose: bool = False, timeout_seconds: Optional[float] = None):
        self.state = state
        self.verbose = verbose
        self.timeout = timeout_seconds
        self.solved_state: Optional[GridState] = None
        self._timed_out = False
        self.stats = {
            'nodes': 0,
            'backtracks': 0,
            'max_depth': 0,
        }

    def solve(self) -> SolveResult:
        self.start_time = time.time()
        self._timed_out = False
        self.solved_state = None

        if not self.state.validate():
            return self._finish(SolveOutcome.INVALID)

        techniques.eliminate_by_value(self.state)
        cells = self.state.unsolved_cells()

        if self.verbose:
            print(f"\n=== Backtracking: {len(cells)} open cells ===")

        if not cells:
            return self._finish(SolveOutcome.SOLVED)

        if self._search(0, cells, self.state):
            self.state.copy_from(self.solved_state)
            return self._finish(SolveOutcome.SOLVED, changes=len(cells))
        if self._timed_out:
            return self._finish(SolveOutcome.TIMEOUT)
        return self._finish(SolveOutcome.UNSOLVABLE)

    def _finish(self, outcome: SolveOutcome, changes: int = 0) -> SolveResult:
        result = SolveResult(
            success=outcome is SolveOutcome.SOLVED,
            outcome=outcome,
            changes=changes,
            remaining=self.state.remaining(),
        )
        if self.verbose:
            print("\n✓ Recursive solution successful" if result.success
                  else f"\n✗ Recursive solution failed ({outcome.value})")
            self._print_stats()
        return result

    def _search(self, index: int, cells: List[Coord], current: GridState) -> bool:
        if self.timeout is not None and time.time() - self.start_time > self.timeout:
            self._timed_out = True
            return False

        self.stats['nodes'] += 1
        self.stats['max_depth'] = max(self.stats['max_depth'], index + 1)
        if self.verbose and self.stats['nodes'] % 10000 == 0:
            print(f"  Progress: nodes {self.stats['nodes']} | backtracks {self.stats['backtracks']} | "
                  f"depth {index + 1}/{len(cells)}")

        col, row = cells[index]
        last = index == len(cells) - 1
        for value in current.live_candidates(col, row):
            trial = current.clone()
            trial.set_value(col, row, value)
            techniques.eliminate_by_value(trial, cell=(col, row))

            if last:
                if trial.validate():
                    self.solved_state = trial
                    return True
            elif self._search(index + 1, cells, trial):
                return True
            if self._timed_out:
                return False
            self.stats['backtracks'] += 1

        return False

    def _print_stats(self) -> None:
        print("\nSearch Statistics:")
        print(f"  Nodes: {self.stats['nodes']}")
        print(f"  Backtracks: {self.stats['backtracks']}")
        print(f"  Max depth: {self.stats['max_depth']}")
