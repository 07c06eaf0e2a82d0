"""
Deduction techniques for the Sudoku solver

Every technique takes a GridState, mutates it in place and returns the
number of atomic changes it made:
 - value assignments for the single family
 - candidate removals for propagation, locked candidates and n-sets
Calling a technique again on a state where it returned 0 returns 0.

Techniques never propagate on their own; run eliminate_by_value between
families to keep candidate sets consistent with placed values.
"""

from enum import Enum
from itertools import combinations
from typing import Callable, Dict, List, Optional, Tuple

import numpy as np

from .grid import GridState, InvalidInputError, SIZE, VALUES, Coord


# -----------------------------------------------------------------------------
# Technique catalogue
# -----------------------------------------------------------------------------
class Technique(Enum):
    """Technique kinds with their log label and whether they assign values"""

    SINGLE_POSSIBILITY = ('single_possibility', 'Single Possibility', True)
    SINGLE_IN_COLUMN = ('single_in_column', 'Single In Column', True)
    SINGLE_IN_ROW = ('single_in_row', 'Single In Row', True)
    SINGLE_IN_BOX = ('single_in_box', 'Single In 3x3', True)
    ELIMINATE_BY_VALUE = ('eliminate_by_value', 'Remove by Value', False)
    ROW_LOCKED_IN_BOX = ('row_locked_in_box', 'Remove by Row In 3x3', False)
    COLUMN_LOCKED_IN_BOX = ('column_locked_in_box', 'Remove by Column In 3x3', False)
    BOX_LOCKED_IN_ROW = ('box_locked_in_row', 'Remove by 3x3 In Row', False)
    BOX_LOCKED_IN_COLUMN = ('box_locked_in_column', 'Remove by 3x3 In Column', False)
    SUBSETS_IN_ROW = ('subsets_in_row', 'n Sets of n By Row', False)
    SUBSETS_IN_COLUMN = ('subsets_in_column', 'n Sets of n By Column', False)
    SUBSETS_IN_BOX = ('subsets_in_box', 'n Sets of n By 3x3', False)

    def __init__(self, key: str, label: str, assigns: bool):
        self.key = key
        self.label = label
        self.assigns = assigns

    @property
    def sign(self) -> str:
        return '+' if self.assigns else '-'

    @classmethod
    def from_name(cls, name) -> 'Technique':
        """Accept a member, its key ('single_in_row') or its member name ('SINGLE_IN_ROW')"""
        if isinstance(name, cls):
            return name
        for tech in cls:
            if name in (tech.key, tech.name):
                return tech
        raise InvalidInputError(f"[techniques] Unknown technique: {name!r}")


DIRECT_TECHNIQUES = (
    Technique.SINGLE_POSSIBILITY,
    Technique.SINGLE_IN_ROW,
    Technique.SINGLE_IN_COLUMN,
    Technique.SINGLE_IN_BOX,
)

LOCKED_TECHNIQUES = (
    Technique.ROW_LOCKED_IN_BOX,
    Technique.COLUMN_LOCKED_IN_BOX,
    Technique.BOX_LOCKED_IN_COLUMN,
    Technique.BOX_LOCKED_IN_ROW,
)

SUBSET_TECHNIQUES = (
    Technique.SUBSETS_IN_ROW,
    Technique.SUBSETS_IN_COLUMN,
    Technique.SUBSETS_IN_BOX,
)

MIN_SUBSET = 2
MAX_SUBSET = 7


# -----------------------------------------------------------------------------
# Unit index tables (0-based rows, cols arrays for fancy indexing)
# -----------------------------------------------------------------------------
Unit = Tuple[np.ndarray, np.ndarray]

ROW_UNITS: List[Unit] = [(np.full(SIZE, r), np.arange(SIZE)) for r in range(SIZE)]
COLUMN_UNITS: List[Unit] = [(np.arange(SIZE), np.full(SIZE, c)) for c in range(SIZE)]
BOX_UNITS: List[Unit] = [
    (np.repeat(np.arange(r0, r0 + 3), 3), np.tile(np.arange(c0, c0 + 3), 3))
    for r0 in range(0, SIZE, 3) for c0 in range(0, SIZE, 3)
]

_BIT_WEIGHTS = 1 << np.arange(SIZE)


def _placed(state: GridState, unit: Unit, value: int) -> bool:
    rows, cols = unit
    return bool((state.values[rows, cols] == value).any())


# -----------------------------------------------------------------------------
# Propagation
# -----------------------------------------------------------------------------
def eliminate_by_value(state: GridState, cell: Optional[Coord] = None) -> int:
    """
    For each solved cell (or just `cell`), clear its value from the candidates
    of every peer in the same row, column and box.
    """
    if cell is not None:
        cells = [cell]
    else:
        rows, cols = np.nonzero(state.values)
        cells = [(int(c) + 1, int(r) + 1) for r, c in zip(rows, cols)]

    count = 0
    for col, row in cells:
        value = state.get_value(col, row)
        if value > 0:
            count += state.clear_candidate_mask(GridState.peers(col, row), value)
    return count


# -----------------------------------------------------------------------------
# Direct deduction (assigns values)
# -----------------------------------------------------------------------------
def single_possibility(state: GridState) -> int:
    """Any unsolved cell left with exactly one candidate takes that value"""
    counts = state.candidates.sum(axis=2)
    targets = (state.values == 0) & (counts == 1)

    count = 0
    # Column-major scan, matching the other column-first techniques
    for c in range(SIZE):
        for r in range(SIZE):
            if targets[r, c]:
                value = int(np.argmax(state.candidates[r, c])) + 1
                state.set_value(c + 1, r + 1, value)
                count += 1
    return count


def _hidden_singles(state: GridState, units: List[Unit]) -> int:
    count = 0
    for value in VALUES:
        for unit in units:
            if _placed(state, unit, value):
                continue
            rows, cols = unit
            holders = np.flatnonzero(state.candidates[rows, cols, value - 1])
            if len(holders) == 1:
                k = holders[0]
                state.set_value(int(cols[k]) + 1, int(rows[k]) + 1, value)
                count += 1
    return count


def single_in_row(state: GridState) -> int:
    """A value that only one cell of a row can still hold goes in that cell"""
    return _hidden_singles(state, ROW_UNITS)


def single_in_column(state: GridState) -> int:
    return _hidden_singles(state, COLUMN_UNITS)


def single_in_box(state: GridState) -> int:
    return _hidden_singles(state, BOX_UNITS)


# -----------------------------------------------------------------------------
# Locked candidates (removes candidates)
# -----------------------------------------------------------------------------
def row_locked_in_box(state: GridState) -> int:
    """
    If every cell of a row that can hold `v` sits in one box, no other cell
    of that box (outside the row) can hold `v`.
    """
    count = 0
    for value in VALUES:
        for r in range(SIZE):
            if _placed(state, ROW_UNITS[r], value):
                continue
            cols = np.flatnonzero(state.candidates[r, :, value - 1])
            if len(cols) == 0 or len(set(cols // 3)) != 1:
                continue
            c0, r0 = (cols[0] // 3) * 3, (r // 3) * 3
            mask = np.zeros((SIZE, SIZE), dtype=bool)
            mask[r0:r0 + 3, c0:c0 + 3] = True
            mask[r, :] = False
            count += state.clear_candidate_mask(mask, value)
    return count


def column_locked_in_box(state: GridState) -> int:
    count = 0
    for value in VALUES:
        for c in range(SIZE):
            if _placed(state, COLUMN_UNITS[c], value):
                continue
            rows = np.flatnonzero(state.candidates[:, c, value - 1])
            if len(rows) == 0 or len(set(rows // 3)) != 1:
                continue
            c0, r0 = (c // 3) * 3, (rows[0] // 3) * 3
            mask = np.zeros((SIZE, SIZE), dtype=bool)
            mask[r0:r0 + 3, c0:c0 + 3] = True
            mask[:, c] = False
            count += state.clear_candidate_mask(mask, value)
    return count


def box_locked_in_row(state: GridState) -> int:
    """
    If every cell of a box that can hold `v` lies in one row, remove `v`
    from the rest of that row outside the box.
    """
    count = 0
    for value in VALUES:
        for b, unit in enumerate(BOX_UNITS):
            if _placed(state, unit, value):
                continue
            rows, cols = unit
            holders = np.flatnonzero(state.candidates[rows, cols, value - 1])
            if len(holders) == 0 or len(set(rows[holders])) != 1:
                continue
            r = int(rows[holders[0]])
            c0 = (b % 3) * 3
            mask = np.zeros((SIZE, SIZE), dtype=bool)
            mask[r, :] = True
            mask[r, c0:c0 + 3] = False
            count += state.clear_candidate_mask(mask, value)
    return count


def box_locked_in_column(state: GridState) -> int:
    count = 0
    for value in VALUES:
        for b, unit in enumerate(BOX_UNITS):
            if _placed(state, unit, value):
                continue
            rows, cols = unit
            holders = np.flatnonzero(state.candidates[rows, cols, value - 1])
            if len(holders) == 0 or len(set(cols[holders])) != 1:
                continue
            c = int(cols[holders[0]])
            r0 = (b // 3) * 3
            mask = np.zeros((SIZE, SIZE), dtype=bool)
            mask[:, c] = True
            mask[r0:r0 + 3, c] = False
            count += state.clear_candidate_mask(mask, value)
    return count


# -----------------------------------------------------------------------------
# n sets of n (removes candidates)
# -----------------------------------------------------------------------------
def _check_size(size: Optional[int]) -> None:
    if size is not None and not MIN_SUBSET <= size <= MAX_SUBSET:
        raise InvalidInputError(f"[techniques] Subset size {size} outside {MIN_SUBSET}..{MAX_SUBSET}")


def _candidate_bits(state: GridState, rows: np.ndarray, cols: np.ndarray) -> List[int]:
    return [int(b) for b in state.candidates[rows, cols] @ _BIT_WEIGHTS]


def _subsets_in_unit(state: GridState, unit: Unit, size: Optional[int]) -> int:
    rows, cols = unit
    open_k = np.flatnonzero(state.values[rows, cols] == 0)
    rows, cols = rows[open_k], cols[open_k]
    k = len(open_k)

    total = 0
    # A set of k-1 cells leaves one cell that a single would already have caught
    for n in range(MIN_SUBSET, min(MAX_SUBSET, k - 2) + 1):
        if size is not None and n != size:
            continue
        bits = _candidate_bits(state, rows, cols)
        for combo in combinations(range(k), n):
            union = 0
            for j in combo:
                union |= bits[j]
            if bin(union).count('1') != n:
                continue

            removed = 0
            others = np.zeros((SIZE, SIZE), dtype=bool)
            outside = [j for j in range(k) if j not in combo]
            others[rows[outside], cols[outside]] = True
            for value in VALUES:
                if union & (1 << (value - 1)):
                    removed += state.clear_candidate_mask(others, value)
            if removed:
                total += removed
                bits = _candidate_bits(state, rows, cols)
    return total


def _subsets(state: GridState, units: List[Unit], size: Optional[int]) -> int:
    _check_size(size)
    return sum(_subsets_in_unit(state, unit, size) for unit in units)


def subsets_in_row(state: GridState, size: Optional[int] = None) -> int:
    """
    n unsolved cells of a row whose combined candidates number exactly n
    own those values: remove them from every other cell in the row.
    `size` restricts the search to one n; None tries every n in range.
    """
    return _subsets(state, ROW_UNITS, size)


def subsets_in_column(state: GridState, size: Optional[int] = None) -> int:
    return _subsets(state, COLUMN_UNITS, size)


def subsets_in_box(state: GridState, size: Optional[int] = None) -> int:
    return _subsets(state, BOX_UNITS, size)


# -----------------------------------------------------------------------------
# Dispatch
# -----------------------------------------------------------------------------
TECHNIQUE_FUNCTIONS: Dict[Technique, Callable[..., int]] = {
    Technique.SINGLE_POSSIBILITY: single_possibility,
    Technique.SINGLE_IN_COLUMN: single_in_column,
    Technique.SINGLE_IN_ROW: single_in_row,
    Technique.SINGLE_IN_BOX: single_in_box,
    Technique.ELIMINATE_BY_VALUE: eliminate_by_value,
    Technique.ROW_LOCKED_IN_BOX: row_locked_in_box,
    Technique.COLUMN_LOCKED_IN_BOX: column_locked_in_box,
    Technique.BOX_LOCKED_IN_ROW: box_locked_in_row,
    Technique.BOX_LOCKED_IN_COLUMN: box_locked_in_column,
    Technique.SUBSETS_IN_ROW: subsets_in_row,
    Technique.SUBSETS_IN_COLUMN: subsets_in_column,
    Technique.SUBSETS_IN_BOX: subsets_in_box,
}


def run(technique, state: GridState, **params) -> int:
    """Run one technique by member or name; params go to the technique (size, cell)"""
    tech = Technique.from_name(technique)
    return TECHNIQUE_FUNCTIONS[tech](state, **params)
