"""
Core data structures for the 9x9 Sudoku grid state

All public methods take 1-based (column, row) coordinates. Internally every
array is indexed [row-1, col-1] (plus [value-1] for per-candidate arrays) so
that numpy slices line up with the row-major text rendering.
"""
from typing import Iterable, List, Optional, Sequence, Tuple

import numpy as np


SIZE = 9
CELLS = SIZE * SIZE
VALUES = range(1, SIZE + 1)

Coord = Tuple[int, int]  # (column, row), 1-based


class InvalidInputError(ValueError):
    """A clue or raw grid text the core cannot accept"""


def box_index(col: int, row: int) -> int:
    """Box number 1..9, numbered left-to-right, top-to-bottom"""
    return ((row - 1) // 3) * 3 + (col - 1) // 3 + 1


def box_origin(box: int) -> Coord:
    """Top-left (column, row) of a box"""
    return ((box - 1) % 3) * 3 + 1, ((box - 1) // 3) * 3 + 1


def row_cells(row: int) -> List[Coord]:
    return [(c, row) for c in range(1, SIZE + 1)]


def column_cells(col: int) -> List[Coord]:
    return [(col, r) for r in range(1, SIZE + 1)]


def box_cells(box: int) -> List[Coord]:
    c0, r0 = box_origin(box)
    return [(c0 + dc, r0 + dr) for dr in range(3) for dc in range(3)]


def peer_mask(col: int, row: int) -> np.ndarray:
    """9x9 mask of every cell sharing a row, column or box with (col, row), excluding itself"""
    mask = np.zeros((SIZE, SIZE), dtype=bool)
    mask[row - 1, :] = True
    mask[:, col - 1] = True
    c0, r0 = box_origin(box_index(col, row))
    mask[r0 - 1:r0 + 2, c0 - 1:c0 + 2] = True
    mask[row - 1, col - 1] = False
    return mask


# Peer masks never change, build them once
_PEERS = {(c, r): peer_mask(c, r) for r in range(1, SIZE + 1) for c in range(1, SIZE + 1)}


def _check_coord(col: int, row: int) -> None:
    if not (1 <= col <= SIZE and 1 <= row <= SIZE):
        raise InvalidInputError(f"[grid] Cell ({col},{row}) outside 1..{SIZE}")


def _check_value(value: int) -> None:
    if not 1 <= value <= SIZE:
        raise InvalidInputError(f"[grid] Value {value} outside 1..{SIZE}")


class GridState:
    """
    Value, candidate and change-tracking state of one Sudoku grid.

    Change flags come in two generations: "now" (raised by mutations during
    the current deduction pass) and "prev" (the pass before). A renderer
    reads both to tell "just changed" from "changed one step ago".
    cycle_iteration() ages "now" into "prev" and must run once per pass.
    """

    _ARRAYS = (
        'values', 'candidates', 'initial',
        'value_changed', 'cell_changed', 'candidate_changed', 'any_candidate_changed',
        'prev_value_changed', 'prev_cell_changed', 'prev_candidate_changed',
        'prev_any_candidate_changed',
    )

    def __init__(self):
        self.values = np.zeros((SIZE, SIZE), dtype=np.int8)
        self.candidates = np.ones((SIZE, SIZE, SIZE), dtype=bool)
        self.initial = np.zeros((SIZE, SIZE), dtype=bool)

        self.value_changed = np.zeros((SIZE, SIZE), dtype=bool)
        self.cell_changed = np.zeros((SIZE, SIZE), dtype=bool)
        self.candidate_changed = np.zeros((SIZE, SIZE, SIZE), dtype=bool)
        self.any_candidate_changed = np.zeros((SIZE, SIZE), dtype=bool)

        self.prev_value_changed = np.zeros((SIZE, SIZE), dtype=bool)
        self.prev_cell_changed = np.zeros((SIZE, SIZE), dtype=bool)
        self.prev_candidate_changed = np.zeros((SIZE, SIZE, SIZE), dtype=bool)
        self.prev_any_candidate_changed = np.zeros((SIZE, SIZE), dtype=bool)

        self.solved_count = 0

    # -------------------------------------------------------------------------
    # Construction helpers
    # -------------------------------------------------------------------------
    @classmethod
    def from_values(cls, values: Sequence[int]) -> 'GridState':
        """Build a state from 81 row-major digits (0 = blank), all marked as clues"""
        state = cls()
        state.load_values(values)
        return state

    def load_values(self, values: Sequence[int]) -> None:
        """Set every non-zero entry of a flat 81-value sequence as an initial clue"""
        values = list(values)
        if len(values) != CELLS:
            raise InvalidInputError(f"[grid] Expected {CELLS} values, got {len(values)}")
        bad = [(i, v) for i, v in enumerate(values) if not isinstance(v, (int, np.integer)) or not 0 <= v <= SIZE]
        if bad:
            i, v = bad[0]
            raise InvalidInputError(f"[grid] Value {v!r} at position {i} outside 0..{SIZE}")

        self.load_clues((i % SIZE + 1, i // SIZE + 1, v) for i, v in enumerate(values) if v)

    def load_clues(self, clues: Iterable[Tuple[int, int, int]]) -> None:
        """Apply (column, row, value) clues; nothing is applied unless all are valid"""
        clues = list(clues)
        for col, row, value in clues:
            if not all(isinstance(x, (int, np.integer)) for x in (col, row, value)):
                raise InvalidInputError(f"[grid] Clue ({col!r},{row!r},{value!r}) is not three integers")
            _check_coord(col, row)
            if not 1 <= value <= SIZE:
                raise InvalidInputError(f"[grid] Clue {value} at ({col},{row}) outside 1..{SIZE}")

        for col, row, value in clues:
            self.set_value(col, row, value, is_initial=True)

    def clear(self) -> None:
        """Reset to an empty grid: no values, every candidate open, all flags down"""
        self.values.fill(0)
        self.candidates.fill(True)
        self.initial.fill(False)
        for name in self._ARRAYS[3:]:
            getattr(self, name).fill(False)
        self.solved_count = 0

    # -------------------------------------------------------------------------
    # Mutation
    # -------------------------------------------------------------------------
    def set_value(self, col: int, row: int, value: int, is_initial: bool = False) -> None:
        """
        Set a cell's value and clear every other candidate in that cell.

        A value <= 0 is ignored. Values are not checked against peers, so
        transient invalid grids are allowed (validate() reports them).
        """
        if value <= 0:
            return
        _check_coord(col, row)
        if value > SIZE:
            raise InvalidInputError(f"[grid] Value {value} at ({col},{row}) outside 1..{SIZE}")

        r, c = row - 1, col - 1
        if self.values[r, c] == 0:
            self.solved_count += 1
        self.values[r, c] = value
        if is_initial:
            self.initial[r, c] = True
        else:
            self.cell_changed[r, c] = True
            self.value_changed[r, c] = True

        for v in VALUES:
            if v != value:
                self._clear_candidate(r, c, v - 1, is_initial)
        # Solved cells carry no live candidates
        self._clear_candidate(r, c, value - 1, is_initial)

    def clear_candidate(self, col: int, row: int, value: int, is_initial: bool = False) -> bool:
        """Remove one candidate. Returns True only if it was still live."""
        _check_coord(col, row)
        _check_value(value)
        return self._clear_candidate(row - 1, col - 1, value - 1, is_initial)

    def _clear_candidate(self, r: int, c: int, i: int, is_initial: bool) -> bool:
        if not self.candidates[r, c, i]:
            return False
        self.candidates[r, c, i] = False
        if not is_initial:
            self.cell_changed[r, c] = True
            self.candidate_changed[r, c, i] = True
            self.any_candidate_changed[r, c] = True
        return True

    def clear_candidate_mask(self, mask: np.ndarray, value: int) -> int:
        """
        Remove candidate `value` from every cell selected by a 9x9 mask.

        Flags are raised exactly as clear_candidate() does. Returns the number
        of candidates actually removed (already-cleared ones do not count).
        """
        _check_value(value)
        i = value - 1
        hit = mask & self.candidates[:, :, i]
        count = int(hit.sum())
        if count:
            self.candidates[:, :, i][hit] = False
            self.cell_changed[hit] = True
            self.candidate_changed[:, :, i][hit] = True
            self.any_candidate_changed[hit] = True
        return count

    def cycle_iteration(self, col: Optional[int] = None, row: Optional[int] = None) -> None:
        """Age the "now" flags into "prev" and lower the "now" flags (whole grid or one cell)"""
        if col is None or row is None:
            sel = (slice(None), slice(None))
        else:
            _check_coord(col, row)
            sel = (row - 1, col - 1)
        self.prev_value_changed[sel] = self.value_changed[sel]
        self.prev_cell_changed[sel] = self.cell_changed[sel]
        self.prev_candidate_changed[sel] = self.candidate_changed[sel]
        self.prev_any_candidate_changed[sel] = self.any_candidate_changed[sel]
        self.value_changed[sel] = False
        self.cell_changed[sel] = False
        self.candidate_changed[sel] = False
        self.any_candidate_changed[sel] = False

    # -------------------------------------------------------------------------
    # Reads
    # -------------------------------------------------------------------------
    def get_value(self, col: int, row: int) -> int:
        _check_coord(col, row)
        return int(self.values[row - 1, col - 1])

    def get_candidate(self, col: int, row: int, value: int) -> bool:
        _check_coord(col, row)
        _check_value(value)
        return bool(self.candidates[row - 1, col - 1, value - 1])

    def live_candidates(self, col: int, row: int) -> List[int]:
        _check_coord(col, row)
        return [v for v in VALUES if self.candidates[row - 1, col - 1, v - 1]]

    def is_initial(self, col: int, row: int) -> bool:
        _check_coord(col, row)
        return bool(self.initial[row - 1, col - 1])

    def value_changed_now(self, col: int, row: int) -> bool:
        _check_coord(col, row)
        return bool(self.value_changed[row - 1, col - 1])

    def value_changed_prev(self, col: int, row: int) -> bool:
        _check_coord(col, row)
        return bool(self.prev_value_changed[row - 1, col - 1])

    def any_candidate_changed_now(self, col: int, row: int) -> bool:
        _check_coord(col, row)
        return bool(self.any_candidate_changed[row - 1, col - 1])

    def any_candidate_changed_prev(self, col: int, row: int) -> bool:
        _check_coord(col, row)
        return bool(self.prev_any_candidate_changed[row - 1, col - 1])

    def candidate_changed_now(self, col: int, row: int, value: int) -> bool:
        _check_coord(col, row)
        _check_value(value)
        return bool(self.candidate_changed[row - 1, col - 1, value - 1])

    def candidate_changed_prev(self, col: int, row: int, value: int) -> bool:
        _check_coord(col, row)
        _check_value(value)
        return bool(self.prev_candidate_changed[row - 1, col - 1, value - 1])

    def remaining(self) -> int:
        return CELLS - self.solved_count

    def is_solved(self) -> bool:
        return self.remaining() == 0 and self.validate()

    def unsolved_cells(self) -> List[Coord]:
        """Unsolved cells in row-major scan order"""
        rows, cols = np.nonzero(self.values == 0)
        return [(int(c) + 1, int(r) + 1) for r, c in zip(rows, cols)]

    @staticmethod
    def peers(col: int, row: int) -> np.ndarray:
        return _PEERS[(col, row)]

    def validate(self) -> bool:
        """False if any row, column or box holds the same non-zero value twice"""
        for r in range(SIZE):
            if not self._unit_ok(self.values[r, :]):
                return False
        for c in range(SIZE):
            if not self._unit_ok(self.values[:, c]):
                return False
        for r0 in range(0, SIZE, 3):
            for c0 in range(0, SIZE, 3):
                if not self._unit_ok(self.values[r0:r0 + 3, c0:c0 + 3]):
                    return False
        return True

    @staticmethod
    def _unit_ok(unit: np.ndarray) -> bool:
        filled = unit[unit != 0]
        return len(np.unique(filled)) == len(filled)

    def check_invariants(self) -> None:
        """Fail fast on bookkeeping drift; these are programming errors, not user errors"""
        assert self.solved_count == int(np.count_nonzero(self.values)), \
            f"solved_count {self.solved_count} != {int(np.count_nonzero(self.values))} filled cells"
        assert not self.candidates[self.values != 0].any(), "solved cell still carries candidates"

    # -------------------------------------------------------------------------
    # Copies
    # -------------------------------------------------------------------------
    def clone(self) -> 'GridState':
        """Independent deep copy; no array is shared with the source"""
        new = GridState.__new__(GridState)
        for name in self._ARRAYS:
            setattr(new, name, getattr(self, name).copy())
        new.solved_count = self.solved_count
        return new

    def copy_from(self, other: 'GridState') -> None:
        """Overwrite this state's contents from `other`, keeping this object's identity"""
        for name in self._ARRAYS:
            np.copyto(getattr(self, name), getattr(other, name))
        self.solved_count = other.solved_count

    # -------------------------------------------------------------------------
    # Serialisation
    # -------------------------------------------------------------------------
    def value_state_to_string(self) -> str:
        """9 lines of 9 digits (0 = unset), every line newline-terminated"""
        return "".join("".join(str(int(v)) for v in row) + "\n" for row in self.values)

    def to_digit_string(self) -> str:
        return "".join(str(int(v)) for v in self.values.flat)

    def to_values(self) -> List[int]:
        return [int(v) for v in self.values.flat]

    def __eq__(self, other):
        if not isinstance(other, GridState):
            return NotImplemented
        return self.solved_count == other.solved_count and all(
            np.array_equal(getattr(self, n), getattr(other, n)) for n in self._ARRAYS
        )

    def __repr__(self):
        return f"GridState(solved={self.solved_count}, remaining={self.remaining()})"
