"""
Sudoku Solver Package

Logical deduction (singles, locked candidates, n-sets) with backtracking
search for 9x9 Sudoku puzzles.
"""

from .grid import GridState, InvalidInputError
from .techniques import Technique
from .solver import SolveController, BacktrackingSolver, SolveResult, SolveOutcome, TechniqueRecord
from .puzzles import parse_digit_string, parse_grid_text, load_puzzles
from .output import SolutionFormatter

__version__ = "1.0.0"
__all__ = [
    'GridState',
    'InvalidInputError',
    'Technique',
    'SolveController',
    'BacktrackingSolver',
    'SolveResult',
    'SolveOutcome',
    'TechniqueRecord',
    'parse_digit_string',
    'parse_grid_text',
    'load_puzzles',
    'SolutionFormatter'
]
