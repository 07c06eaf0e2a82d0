"""
Diagnostics: why does a puzzle stall under logical solving?

Runs the logical solver, reports which techniques made progress and how
constrained the open cells are, then tries backtracking from the stalled
state to tell "needs stronger techniques" from "has no solution".
"""

import time
from typing import Dict, Sequence

import numpy as np

from .grid import GridState
from .solver import SolveController, BacktrackingSolver, SolveOutcome


class SolverDiagnostics:

    @staticmethod
    def analyze(givens: Sequence[int], timeout: float = 60, verbose: bool = True) -> Dict:
        """Deeply analyze one puzzle; returns the collected figures"""
        state = GridState.from_values(givens)
        controller = SolveController(state)

        start = time.time()
        logical = controller.run_logical_solve()
        logical_elapsed = time.time() - start

        open_mask = state.values == 0
        counts = state.candidates.sum(axis=2)[open_mask]
        histogram = {int(n): int(k) for n, k in zip(*np.unique(counts, return_counts=True))}

        report = {
            'clues': int(state.initial.sum()),
            'logical': logical,
            'logical_elapsed': logical_elapsed,
            'technique_totals': {t.key: n for t, n in controller.technique_totals().items()},
            'candidate_histogram': histogram,
            'search': None,
        }

        if not logical.success and logical.outcome is not SolveOutcome.INVALID:
            searcher = BacktrackingSolver(state, timeout_seconds=timeout)
            start = time.time()
            search = searcher.solve()
            report['search'] = search
            report['search_elapsed'] = time.time() - start
            report['search_stats'] = dict(searcher.stats)

        if verbose:
            SolverDiagnostics.print_summary(report)
        return report

    @staticmethod
    def print_summary(report: Dict) -> None:
        logical = report['logical']
        print(f"\n{'='*60}")
        print(f"Clues: {report['clues']}")
        status = "✓ SOLVED" if logical.success else f"✗ {logical.outcome.value.upper()}"
        print(f"Logical solve: {status} after {logical.passes} passes "
              f"({report['logical_elapsed']:.2f}s), {logical.remaining} cells open")

        print("\nTechnique totals:")
        for key, total in report['technique_totals'].items():
            if total:
                print(f"  {key:<24s} {total}")

        if report['candidate_histogram']:
            print("\nOpen cells by candidate count:")
            for n, k in sorted(report['candidate_histogram'].items()):
                print(f"  {n} candidates: {k} cells")
            if 0 in report['candidate_histogram']:
                print("\n⚠️  Some open cells have no candidates left - the clues contradict each other")

        search = report['search']
        if search is not None:
            stats = report['search_stats']
            print(f"\nBacktracking: {search.outcome.value} in {report['search_elapsed']:.2f}s "
                  f"({stats['nodes']} nodes, {stats['backtracks']} backtracks)")
            if search.success:
                print("   Suggestion: puzzle needs techniques beyond singles, locked candidates and n-sets")
        print(f"{'='*60}\n")
