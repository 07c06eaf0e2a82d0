# tests/conftest.py
import sys
from pathlib import Path

import pytest

# Add project root to sys.path so "Sudoku" can be imported in tests
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from Sudoku.puzzles import parse_digit_string  # noqa: E402


EASY = "004300209005009001070060043006002087190007400050083000600000105003508690042910300"
EASY_SOLUTION = "864371259325849761971265843436192587198657432257483916689734125713528694542916378"

# Arto Inkala's puzzle: singles, locked candidates and n-sets all run dry on it
HARD = "800000000003600000070090200050007000000045700000100030001000068008500010090000400"
HARD_SOLUTION = "812753649943682175675491283154237896369845721287169534521974368438526917796318452"


@pytest.fixture
def easy_givens():
    return parse_digit_string(EASY)


@pytest.fixture
def hard_givens():
    return parse_digit_string(HARD)


@pytest.fixture
def full_grid():
    """A complete valid grid, row r / column c (0-based) = (3r + r//3 + c) % 9 + 1"""
    return [(3 * r + r // 3 + c) % 9 + 1 for r in range(9) for c in range(9)]


@pytest.fixture
def easy_solution():
    return EASY_SOLUTION


@pytest.fixture
def hard_solution():
    return HARD_SOLUTION
