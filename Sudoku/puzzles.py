"""
Puzzle input: digit strings, 9-line clipboard text and puzzle list files
"""
from typing import Dict, List

from .grid import CELLS, SIZE, InvalidInputError


# Built-in sample grid, 9 rows of 9 (0 = blank)
DEFAULT_PUZZLE = (
    "004700000"
    "003080604"
    "600030000"
    "250190040"
    "300060009"
    "060073051"
    "000050007"
    "508010200"
    "000009500"
)

BLANKS = "0."


def parse_digit_string(text: str) -> List[int]:
    """
    81 cells in row-major order; '0' or '.' is a blank, whitespace is ignored.
    """
    cells = [ch for ch in text if not ch.isspace()]
    if len(cells) != CELLS:
        raise InvalidInputError(f"[puzzles] Expected {CELLS} cells, got {len(cells)}")

    out = []
    for i, ch in enumerate(cells):
        if ch in BLANKS:
            out.append(0)
        elif ch in "123456789":
            out.append(int(ch))
        else:
            raise InvalidInputError(f"[puzzles] Invalid character {ch!r} at cell {i + 1}")
    return out


def parse_grid_text(text: str) -> List[int]:
    """
    Clipboard format: 9 lines of up to 9 characters, each a digit 0-9 or a
    blank (space). Short lines are padded with blanks.
    """
    lines = text.splitlines()
    while len(lines) > SIZE and not lines[-1].strip():
        lines.pop()
    if len(lines) != SIZE:
        raise InvalidInputError(f"[puzzles] Expected {SIZE} lines, got {len(lines)}")

    out = []
    for r, line in enumerate(lines, 1):
        line = line.rstrip("\r\n")
        if len(line) > SIZE:
            line = line.rstrip()
        if len(line) > SIZE:
            raise InvalidInputError(f"[puzzles] Line {r} has {len(line)} characters, max {SIZE}")
        for c, ch in enumerate(line.ljust(SIZE), 1):
            if ch == " ":
                out.append(0)
            elif ch in "0123456789":
                out.append(int(ch))
            else:
                raise InvalidInputError(f"[puzzles] Invalid character {ch!r} at ({c},{r})")
    return out


def load_puzzles(path: str) -> List[Dict]:
    """
    One puzzle per line: an optional name followed by 81 cells. Blank lines
    and lines starting with '#' are skipped.
    """
    puzzles = []
    with open(path, "r", encoding="utf-8") as f:
        for lineno, line in enumerate(f, 1):
            if not line.strip() or line.lstrip().startswith("#"):
                continue
            parts = line.split()
            if len(parts) > 1 and len("".join(parts[1:])) == CELLS:
                name, digits = parts[0], "".join(parts[1:])
            else:
                name, digits = f"puzzle_{lineno}", "".join(parts)
            puzzles.append({
                "name": name,
                "givens": parse_digit_string(digits),
            })
    return puzzles
