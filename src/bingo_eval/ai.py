from __future__ import annotations

import logging
from typing import AbstractSet, List, Optional

from .core.board import Board
from .rng import RandomSource, create_rng

logger = logging.getLogger(__name__)


def remaining_numbers(board: Board, called: AbstractSet[int]) -> List[int]:
    return [n for n in board.numbers if n not in called]


def choose_number(
    board: Board, called: AbstractSet[int], rng: Optional[RandomSource] = None
) -> Optional[int]:
    """Pick uniformly among the board's uncalled numbers; None when nothing is left."""
    remaining = remaining_numbers(board, called)
    if not remaining:
        logger.debug("AI has no remaining numbers")
        return None
    source = rng if rng is not None else create_rng("system")
    return source.choice(remaining)
