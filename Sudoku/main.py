#!/usr/bin/env python3
"""
Sudoku Solver - Main Entry Point

Usage:
    python -m Sudoku.main puzzles.txt            # Solve every puzzle in a list file
    python -m Sudoku.main <81 digits>            # Solve one puzzle given inline
    python -m Sudoku.main --compare <puzzle>     # Compare technique configurations
    python -m Sudoku.main --diagnose <puzzle>    # Explain where logic stalls
    python -m Sudoku.main                        # Solve the configured default
"""

import os
import sys
from pathlib import Path

from .grid import GridState, InvalidInputError
from .puzzles import DEFAULT_PUZZLE, load_puzzles, parse_digit_string, parse_grid_text
from .solver import SolveController, BacktrackingSolver
from .output import SolutionFormatter
from .diagnostics import SolverDiagnostics

# ============================================================================
# CONFIGURATION
# ============================================================================
PUZZLE_PATH = None            # Puzzle list file to solve by default (None = built-in grid)
OUTPUT_DIR = "data/debug"     # Base output directory
SOLVE_ALL = False             # Solve every puzzle in PUZZLE_PATH rather than the first

MAX_PASSES = 50
# Pass limit for the logical solver

USE_LOCKED_CANDIDATES = True
USE_SUBSETS = True
# Technique families run in every pass after the singles
# RECOMMENDED: True for both (disable to see which family a puzzle needs)

USE_BACKTRACKING = True
# Fall back to exhaustive search when logical solving stalls

TIMEOUT_SECONDS = 300
# Maximum time the backtracking search may spend on one puzzle
# ============================================================================


def is_grid_file(source: str) -> bool:
    """True for a file in the 9-line clipboard format"""
    lines = Path(source).read_text(encoding="utf-8").splitlines()
    while len(lines) > 9 and not lines[-1].strip():
        lines.pop()
    return len(lines) == 9 and all(len(line.rstrip()) <= 9 for line in lines)


def load_givens(source: str):
    """A file holding one puzzle (list or 9-line grid) or an inline digit string"""
    if os.path.exists(source):
        if is_grid_file(source):
            return parse_grid_text(Path(source).read_text(encoding="utf-8"))
        return load_puzzles(source)[0]["givens"]
    return parse_digit_string(source)


def solve_puzzle(givens, name: str = "puzzle", output_dir: str = None, verbose: bool = True,
                 max_passes: int = MAX_PASSES,
                 use_locked_candidates: bool = USE_LOCKED_CANDIDATES,
                 use_subsets: bool = USE_SUBSETS,
                 use_backtracking: bool = USE_BACKTRACKING,
                 timeout_seconds: float = TIMEOUT_SECONDS):
    """
    Solve a single puzzle and save results.

    Args:
        givens: 81 row-major values, 0 for blanks
        name: Used for the output sub-directory
        output_dir: Directory for output files (default: data/debug/<name>/)
        verbose: Print detailed solving progress
        max_passes: Logical solver pass limit
        use_locked_candidates: Run the locked-candidate techniques
        use_subsets: Run the n-sets-of-n techniques
        use_backtracking: Search when logic stalls
        timeout_seconds: Maximum search time in seconds
    """
    if output_dir is None:
        output_dir = Path(OUTPUT_DIR) / name
    output_dir = Path(output_dir)
    output_dir.mkdir(parents=True, exist_ok=True)

    print(f"\n{'='*60}")
    print(f"Solving puzzle: {name}")
    print(f"Output directory: {output_dir}")
    print(f"{'='*60}")

    try:
        state = GridState.from_values(givens)
        controller = SolveController(
            state,
            verbose=verbose,
            max_passes=max_passes,
            use_locked_candidates=use_locked_candidates,
            use_subsets=use_subsets
        )

        if verbose:
            print("\n" + SolutionFormatter.format_grid_visualization(state))

        result = controller.run_logical_solve()

        stats = dict(controller.stats)
        if not result.success and use_backtracking and result.remaining > 0:
            if verbose:
                print(f"\nLogic stopped with {result.remaining} cells open ({result.outcome.value}), searching...")
            searcher = BacktrackingSolver(state, verbose=verbose, timeout_seconds=timeout_seconds)
            result = searcher.solve()
            stats.update(searcher.stats)

        if result.success:
            print(f"\n{'='*60}")
            print("SUCCESS! Puzzle solved ✓")
            print(f"{'='*60}")
        else:
            print(f"\n{'='*60}")
            print(f"FAILED: Could not solve puzzle ✗ ({result.outcome.value})")
            print(f"{'='*60}")

        SolutionFormatter.save_solution(state, str(output_dir / "solution.json"),
                                        result, controller.history, stats)
        SolutionFormatter.save_human_readable(state, str(output_dir / "solution.txt"),
                                              result, controller.history)

        if verbose:
            print(SolutionFormatter.format_grid_visualization(state))

        return result.success, state, result

    except InvalidInputError as e:
        print(f"\nInvalid puzzle {name}: {e}")
        return False, None, None

    except KeyboardInterrupt:
        print(f"\n\n{'='*60}")
        print("⚠ Solving interrupted by user (Ctrl+C)")
        print(f"{'='*60}")
        return False, None, None


def solve_all_puzzles(path: str, output_dir: str = None,
                      use_backtracking: bool = USE_BACKTRACKING,
                      timeout_seconds: float = TIMEOUT_SECONDS):
    """
    Solve every puzzle in a list file and print a summary
    """
    puzzles = load_puzzles(path)
    if not puzzles:
        print(f"No puzzles found in {path}")
        return []

    print(f"\nFound {len(puzzles)} puzzle(s) to solve")
    results = []

    for i, puzzle in enumerate(puzzles, 1):
        print(f"\n[{i}/{len(puzzles)}] Solving {puzzle['name']}...")
        sub_dir = Path(output_dir) / puzzle['name'] if output_dir else None
        solved, state, result = solve_puzzle(
            puzzle['givens'],
            name=puzzle['name'],
            output_dir=sub_dir,
            verbose=False,
            use_backtracking=use_backtracking,
            timeout_seconds=timeout_seconds
        )
        results.append({
            'name': puzzle['name'],
            'solved': bool(solved),
            'outcome': result.outcome.value if result else 'invalid',
        })

        status = "✓ SOLVED" if solved else "✗ FAILED"
        print(f"  {status}")

    solved_count = sum(1 for r in results if r['solved'])
    solve_rate = solved_count / len(results) * 100

    print(f"\n{'='*60}")
    print("SUMMARY")
    print(f"{'='*60}")
    for r in results:
        status = "✓" if r['solved'] else "✗"
        print(f"{status} {r['name']:30s} {r['outcome']}")
    print(f"\nSolved: {solved_count}/{len(results)} puzzles ({solve_rate:.1f}%)")
    print(f"{'='*60}\n")
    return results


def run_comparison_test(givens):
    """
    Run logical solving with each technique configuration and compare how far each gets.
    """
    configs = [
        {'name': 'Singles only', 'use_locked_candidates': False, 'use_subsets': False},
        {'name': 'Singles + locked', 'use_locked_candidates': True, 'use_subsets': False},
        {'name': 'Singles + n-sets', 'use_locked_candidates': False, 'use_subsets': True},
        {'name': 'All techniques', 'use_locked_candidates': True, 'use_subsets': True},
    ]

    print(f"\n{'='*60}")
    print(f"COMPARISON TEST: {len(configs)} configurations")
    print(f"{'='*60}\n")

    results = []
    for config in configs:
        state = GridState.from_values(givens)
        controller = SolveController(
            state,
            use_locked_candidates=config['use_locked_candidates'],
            use_subsets=config['use_subsets']
        )
        result = controller.run_logical_solve()
        results.append((config['name'], result))

    print(f"{'Configuration':<25} {'Result':<16} {'Passes':<8} {'Open':<6}")
    print(f"{'-'*25} {'-'*16} {'-'*8} {'-'*6}")
    for name, result in results:
        print(f"{name:<25} {result.outcome.value:<16} {result.passes:<8} {result.remaining:<6}")
    print(f"\n{'='*60}")
    return results


def main(argv=None):
    """Main entry point"""
    argv = sys.argv[1:] if argv is None else argv

    try:
        if argv and argv[0] in ("--compare", "-c", "--diagnose", "-d"):
            if len(argv) < 2:
                print(f"Usage: python -m Sudoku.main {argv[0]} <puzzle>")
                sys.exit(1)
            givens = load_givens(argv[1])
            if argv[0] in ("--compare", "-c"):
                run_comparison_test(givens)
            else:
                SolverDiagnostics.analyze(givens, timeout=TIMEOUT_SECONDS)
            return

        if argv:
            source = argv[0]
            if os.path.exists(source) and not is_grid_file(source) and len(load_puzzles(source)) > 1:
                solve_all_puzzles(source)
            else:
                solve_puzzle(load_givens(source), name=Path(source).stem if os.path.exists(source) else "inline")

        elif PUZZLE_PATH and SOLVE_ALL:
            print(f"SOLVE_ALL mode enabled - solving all puzzles in {PUZZLE_PATH}")
            solve_all_puzzles(PUZZLE_PATH)

        elif PUZZLE_PATH:
            print(f"Using configured PUZZLE_PATH: {PUZZLE_PATH}")
            solve_puzzle(load_givens(PUZZLE_PATH), name=Path(PUZZLE_PATH).stem)

        else:
            print("Using built-in default puzzle")
            solve_puzzle(parse_digit_string(DEFAULT_PUZZLE), name="default")

    except InvalidInputError as e:
        print(f"Error: {e}")
        sys.exit(1)


if __name__ == "__main__":
    main()
