"""The 12 fixed win lines of a 5x5 board and progress helpers over them."""

from __future__ import annotations

from typing import AbstractSet, Dict, FrozenSet, Iterable, List, Tuple

SIZE = 5
CELLS = SIZE * SIZE
WIN_THRESHOLD = 5
BINGO_LETTERS = "BINGO"


def _build_patterns() -> Tuple[FrozenSet[int], ...]:
    rows = [frozenset(r * SIZE + c for c in range(SIZE)) for r in range(SIZE)]
    cols = [frozenset(r * SIZE + c for r in range(SIZE)) for c in range(SIZE)]
    main_diag = frozenset(i * SIZE + i for i in range(SIZE))
    anti_diag = frozenset(i * SIZE + (SIZE - 1 - i) for i in range(SIZE))
    return tuple(rows + cols + [main_diag, anti_diag])


# Index order is stable: 0-4 rows, 5-9 columns, 10 main diagonal, 11 anti-diagonal.
WIN_PATTERNS: Tuple[FrozenSet[int], ...] = _build_patterns()


def _patterns_by_cell() -> Dict[int, Tuple[int, ...]]:
    out: Dict[int, List[int]] = {i: [] for i in range(CELLS)}
    for p, pattern in enumerate(WIN_PATTERNS):
        for idx in pattern:
            out[idx].append(p)
    return {i: tuple(ps) for i, ps in out.items()}


PATTERNS_BY_CELL: Dict[int, Tuple[int, ...]] = _patterns_by_cell()


def pattern_name(index: int) -> str:
    if 0 <= index < SIZE:
        return f"row {index}"
    if SIZE <= index < 2 * SIZE:
        col = index - SIZE
        return f"column {col} ({BINGO_LETTERS[col]})"
    if index == 2 * SIZE:
        return "main diagonal"
    if index == 2 * SIZE + 1:
        return "anti-diagonal"
    raise IndexError(f"No win pattern with index {index}")


def compute_completed_lines(marked_positions: AbstractSet[int]) -> Tuple[int, ...]:
    """Return the indices of every pattern fully covered by ``marked_positions``.

    Always a full recomputation, in pattern order.
    """
    return tuple(p for p, pattern in enumerate(WIN_PATTERNS) if pattern.issubset(marked_positions))


def completed_lines_after(
    previous: Iterable[int], marked_positions: AbstractSet[int], new_index: int
) -> Tuple[int, ...]:
    """Incremental form of :func:`compute_completed_lines`.

    Only the patterns through ``new_index`` can change, so only those are
    re-tested. ``previous`` must be the completed lines for
    ``marked_positions - {new_index}``.
    """
    lines = set(previous)
    for p in PATTERNS_BY_CELL.get(new_index, ()):
        if WIN_PATTERNS[p].issubset(marked_positions):
            lines.add(p)
    return tuple(sorted(lines))


def has_won(completed_lines: Iterable[int]) -> bool:
    return len(set(completed_lines)) >= WIN_THRESHOLD


def crossed_letters(completed_lines: Iterable[int]) -> str:
    """Letters of BINGO crossed out so far, one per completed line."""
    return BINGO_LETTERS[: min(len(set(completed_lines)), len(BINGO_LETTERS))]
