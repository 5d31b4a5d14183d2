from __future__ import annotations

import math
from collections import Counter, defaultdict
from typing import Dict, List, Optional, Sequence

from .core.board import NUMBER_POOL, Board, create_board
from .core.patterns import CELLS
from .rng import RandomSource


def check_permutations(boards: Sequence[Board]) -> bool:
    for board in boards:
        if sorted(board.numbers) != list(NUMBER_POOL):
            return False
    return True


def compute_position_frequencies(boards: Sequence[Board]) -> Dict[int, Dict[int, int]]:
    """Count how often each number sits at each board index."""
    pos_counts: Dict[int, Counter] = defaultdict(Counter)
    for board in boards:
        for i, number in enumerate(board.numbers):
            pos_counts[i][number] += 1
    out: Dict[int, Dict[int, int]] = {}
    for i in range(CELLS):
        cn = pos_counts.get(i, Counter())
        out[i] = {x: cn.get(x, 0) for x in NUMBER_POOL}
    return out


def chi2_wilson_hilferty_pvalue(stat: float, df: int) -> float:
    if df <= 0:
        return 1.0
    # Wilson–Hilferty: cube root of chi2/df is approximately normal
    t = (stat / df) ** (1.0 / 3.0)
    mu = 1.0 - 2.0 / (9.0 * df)
    sigma = math.sqrt(2.0 / (9.0 * df))
    z = (t - mu) / sigma

    def phi(val: float) -> float:
        return 0.5 * (1.0 + math.erf(val / math.sqrt(2.0)))

    p_right = 1.0 - phi(z)
    return max(0.0, min(1.0, p_right))


def position_uniformity_test(
    pos_freqs: Dict[int, Dict[int, int]], samples: int, alpha: float = 0.05
) -> Dict[str, object]:
    """Chi-square each cell's number counts separately, Bonferroni across cells.

    A single cell's counts over ``samples`` boards are multinomial with 25
    equally likely outcomes, so each statistic has 24 degrees of freedom.
    Cells are not independent of each other, hence the correction.
    """
    df = len(NUMBER_POOL) - 1
    if samples == 0:
        return {"stat": 0.0, "df": df, "p_value": 1.0, "alpha": alpha, "uniform": True, "positions": {}}
    expected = samples / len(NUMBER_POOL)
    positions: Dict[int, Dict[str, float]] = {}
    total = 0.0
    min_p = 1.0
    for pos, counts in sorted(pos_freqs.items()):
        stat = sum((counts.get(x, 0) - expected) ** 2 / expected for x in NUMBER_POOL)
        p = chi2_wilson_hilferty_pvalue(stat, df)
        positions[pos] = {"stat": round(stat, 6), "p_value": round(p, 6)}
        total += stat
        min_p = min(min_p, p)
    p_adjusted = min(1.0, min_p * len(positions))
    return {
        "stat": round(total, 6),
        "df": df,
        "p_value": round(p_adjusted, 6),
        "alpha": alpha,
        "uniform": p_adjusted >= alpha,
        "correction": "bonferroni",
        "engine": "wilson_hilferty",
        "positions": positions,
    }


def board_uniformity_report(
    samples: int,
    *,
    rng: Optional[RandomSource] = None,
    alpha: float = 0.05,
    boards: Optional[Sequence[Board]] = None,
) -> Dict[str, object]:
    """Sample ``samples`` boards (or use ``boards``) and test position uniformity."""
    if boards is None:
        generated: List[Board] = [create_board(rng) for _ in range(samples)]
        boards = generated
    n = len(boards)
    pos_freqs = compute_position_frequencies(boards)
    all_counts = [c for counts in pos_freqs.values() for c in counts.values()]
    expected = n / len(NUMBER_POOL) if n else 0.0
    return {
        "samples": n,
        "expected_per_cell": round(expected, 6),
        "min_count": min(all_counts) if all_counts else 0,
        "max_count": max(all_counts) if all_counts else 0,
        "ok_all_permutations": check_permutations(boards),
        "position_frequencies": pos_freqs,
        "tests": {"position": position_uniformity_test(pos_freqs, n, alpha=alpha)},
    }
