from __future__ import annotations

from dataclasses import dataclass
from typing import Iterable, List, Optional, Tuple

from ..errors import InvalidBoard
from ..rng import RandomSource, create_rng
from .patterns import CELLS, SIZE

NUMBER_POOL: Tuple[int, ...] = tuple(range(1, CELLS + 1))


@dataclass(frozen=True)
class Board:
    """A 5x5 permutation of 1..25, stored row-major."""

    numbers: Tuple[int, ...]

    def __post_init__(self) -> None:
        numbers = tuple(self.numbers)
        if len(numbers) != CELLS:
            raise InvalidBoard(f"Board needs exactly {CELLS} numbers, got {len(numbers)}")
        for n in numbers:
            # bool is an int subclass and 1.0 == 1; neither belongs on a board
            if isinstance(n, bool) or not isinstance(n, int):
                raise InvalidBoard(f"Board entries must be ints, got {n!r}")
        if sorted(numbers) != list(NUMBER_POOL):
            raise InvalidBoard("Board must be a permutation of 1..25")
        object.__setattr__(self, "numbers", numbers)

    @classmethod
    def from_rows(cls, rows: Iterable[Iterable[int]]) -> "Board":
        flat: List[int] = []
        for row in rows:
            row = list(row)
            if len(row) != SIZE:
                raise InvalidBoard(f"Each row needs {SIZE} numbers, got {len(row)}")
            flat.extend(row)
        return cls(tuple(flat))

    def __len__(self) -> int:
        return CELLS

    def __getitem__(self, index: int) -> int:
        return self.numbers[index]

    def __iter__(self):
        return iter(self.numbers)

    def __contains__(self, number: object) -> bool:
        return number in self.numbers

    def index_of(self, number: int) -> Optional[int]:
        try:
            return self.numbers.index(number)
        except ValueError:
            return None

    def rows(self) -> List[List[int]]:
        return [list(self.numbers[r * SIZE : (r + 1) * SIZE]) for r in range(SIZE)]


def create_board(rng: Optional[RandomSource] = None) -> Board:
    """Shuffle the full pool into a new board.

    Each call is independent; without ``rng`` the OS entropy source is used,
    so results are not reproducible.
    """
    source = rng if rng is not None else create_rng("system")
    numbers = list(NUMBER_POOL)
    source.shuffle(numbers)
    return Board(tuple(numbers))
