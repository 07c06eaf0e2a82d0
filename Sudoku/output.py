import json
from datetime import datetime
from typing import Dict, List, Optional

from .grid import GridState, SIZE, VALUES
from .solver import SolveResult, TechniqueRecord


class SolutionFormatter:
    """Formats grid states and solve results for output"""

    @staticmethod
    def format_solution_json(state: GridState, result: Optional[SolveResult] = None,
                             history: Optional[List[TechniqueRecord]] = None,
                             stats: Optional[Dict] = None) -> Dict:
        """
        Format a grid and its solve outcome as a JSON-ready dict
        """
        solution = {
            'puzzle_info': {
                'solved_cells': state.solved_count,
                'remaining': state.remaining(),
                'valid': state.validate(),
                'timestamp': datetime.now().isoformat()
            },
            'grid': state.value_state_to_string().splitlines(),
            'clues': state.initial.sum().item(),
            'solving_stats': stats or {},
            'techniques': [],
        }

        if result is not None:
            solution['result'] = {
                'success': result.success,
                'outcome': result.outcome.value,
                'passes': result.passes,
                'changes': result.changes,
            }

        for record in history or []:
            solution['techniques'].append({
                'pass': record.pass_index,
                'technique': record.technique.key,
                'label': record.technique.label,
                'changes': record.changes,
            })

        return solution

    @staticmethod
    def format_grid_visualization(state: GridState) -> str:
        """Boxed grid with clues and deduced values; '·' marks open cells"""
        border = "+-------+-------+-------+"
        lines = [border]
        for r in range(1, SIZE + 1):
            cells = []
            for c in range(1, SIZE + 1):
                v = state.get_value(c, r)
                cells.append(str(v) if v else '·')
                if c % 3 == 0 and c < SIZE:
                    cells.append('|')
            lines.append("| " + " ".join(cells) + " |")
            if r % 3 == 0:
                lines.append(border)
        return "\n".join(lines)

    @staticmethod
    def format_candidates(state: GridState) -> str:
        """
        Pencil-mark view: each cell is a 3x3 block of its live candidates,
        or the value repeated in the centre for solved cells.
        """
        lines = []
        for r in range(1, SIZE + 1):
            for sub in range(3):
                parts = []
                for c in range(1, SIZE + 1):
                    v = state.get_value(c, r)
                    if v:
                        block = f" {v} " if sub == 1 else "   "
                    else:
                        block = "".join(
                            str(d) if state.get_candidate(c, r, d) else '.'
                            for d in VALUES[sub * 3:sub * 3 + 3]
                        )
                    parts.append(block)
                    if c % 3 == 0 and c < SIZE:
                        parts.append('|')
                lines.append(" ".join(parts))
            if r % 3 == 0 and r < SIZE:
                lines.append("-" * len(lines[-1]))
            elif r < SIZE:
                lines.append("")
        return "\n".join(lines)

    @staticmethod
    def format_solution_human_readable(state: GridState, result: Optional[SolveResult] = None,
                                       history: Optional[List[TechniqueRecord]] = None) -> str:
        """
        Format the outcome and technique log as human-readable text
        """
        lines = []
        lines.append("=" * 60)
        lines.append("SUDOKU SOLUTION")
        lines.append("=" * 60)
        lines.append(f"\nClues: {int(state.initial.sum())}, solved cells: {state.solved_count}, "
                     f"remaining: {state.remaining()}")
        if result is not None:
            status = "✓" if result.success else "✗"
            lines.append(f"Outcome: {result.outcome.value} {status} ({result.passes} passes)")

        if history:
            lines.append("\nTECHNIQUE LOG:")
            lines.append("-" * 60)
            current = object()
            for record in history:
                if record.pass_index != current:
                    current = record.pass_index
                    lines.append("Manual step" if current is None else f"Iteration {current}")
                lines.append(f"  {record.format()}")

        lines.append("\n" + "=" * 60)
        lines.append(SolutionFormatter.format_grid_visualization(state))
        lines.append("=" * 60)

        return "\n".join(lines)

    @staticmethod
    def save_solution(state: GridState, output_path: str, result: Optional[SolveResult] = None,
                      history: Optional[List[TechniqueRecord]] = None, stats: Optional[Dict] = None):
        """
        Save solution to JSON file
        """
        solution = SolutionFormatter.format_solution_json(state, result, history, stats)

        with open(output_path, 'w') as f:
            json.dump(solution, f, indent=2)

        print(f"\n✓ Solution saved to: {output_path}")

    @staticmethod
    def save_human_readable(state: GridState, output_path: str, result: Optional[SolveResult] = None,
                            history: Optional[List[TechniqueRecord]] = None):
        """
        Save human-readable solution plus the plain 9x9 digit grid to a text file
        """
        text = SolutionFormatter.format_solution_human_readable(state, result, history)
        text += "\n\n" + state.value_state_to_string()

        with open(output_path, 'w') as f:
            f.write(text)

        print(f"✓ Human-readable solution saved to: {output_path}")
