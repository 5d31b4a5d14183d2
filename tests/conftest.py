from __future__ import annotations

import pytest

from bingo_eval.core.board import Board


@pytest.fixture
def row_major_board() -> Board:
    return Board(tuple(range(1, 26)))


@pytest.fixture
def transposed_board() -> Board:
    # number at (r, c) of the row-major board sits at (c, r)
    return Board(tuple(c * 5 + r + 1 for r in range(5) for c in range(5)))
