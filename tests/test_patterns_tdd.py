from __future__ import annotations

import pytest

from bingo_eval.core.patterns import (
    PATTERNS_BY_CELL,
    WIN_PATTERNS,
    WIN_THRESHOLD,
    compute_completed_lines,
    crossed_letters,
    has_won,
    pattern_name,
)


def test_pattern_order_is_fixed():
    expected = [
        [0, 1, 2, 3, 4], [5, 6, 7, 8, 9], [10, 11, 12, 13, 14],
        [15, 16, 17, 18, 19], [20, 21, 22, 23, 24],
        [0, 5, 10, 15, 20], [1, 6, 11, 16, 21], [2, 7, 12, 17, 22],
        [3, 8, 13, 18, 23], [4, 9, 14, 19, 24],
        [0, 6, 12, 18, 24], [4, 8, 12, 16, 20],
    ]
    assert [sorted(p) for p in WIN_PATTERNS] == expected


def test_centre_cell_belongs_to_four_patterns():
    assert PATTERNS_BY_CELL[12] == (2, 7, 10, 11)
    assert PATTERNS_BY_CELL[1] == (0, 6)


def test_full_board_completes_all_twelve():
    assert compute_completed_lines(frozenset(range(25))) == tuple(range(12))
    assert compute_completed_lines(frozenset()) == ()


def test_threshold():
    assert WIN_THRESHOLD == 5
    assert has_won([0, 1, 2, 3]) is False
    assert has_won([0, 1, 2, 3, 11]) is True


def test_crossed_letters_follow_completed_count():
    assert crossed_letters([]) == ""
    assert crossed_letters([7, 10]) == "BI"
    assert crossed_letters(range(12)) == "BINGO"


def test_pattern_names():
    assert pattern_name(0) == "row 0"
    assert pattern_name(7) == "column 2 (N)"
    assert pattern_name(10) == "main diagonal"
    assert pattern_name(11) == "anti-diagonal"
    with pytest.raises(IndexError):
        pattern_name(12)
