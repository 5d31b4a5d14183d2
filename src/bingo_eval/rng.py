from __future__ import annotations

import hashlib
import random
from dataclasses import dataclass
from typing import List, Optional, Sequence


try:  # optional dependency
    import numpy as _np  # type: ignore
except Exception:  # pragma: no cover - optional
    _np = None


ENGINES = ("system", "py_random", "numpy_pcg64")


@dataclass
class RandomSource:
    engine: str

    def choice(self, seq: Sequence[int]) -> int:
        raise NotImplementedError

    def shuffle(self, arr: List[int]) -> None:
        raise NotImplementedError


class SystemRandomSource(RandomSource):
    """OS entropy; not seedable. Default for live games."""

    def __init__(self) -> None:
        super().__init__(engine="system")
        self._rng = random.SystemRandom()

    def choice(self, seq: Sequence[int]) -> int:
        return self._rng.choice(list(seq))

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


class PyRandomSource(RandomSource):
    def __init__(self, seed: Optional[int]):
        super().__init__(engine="py_random")
        self._rng = random.Random(seed)

    def choice(self, seq: Sequence[int]) -> int:
        return self._rng.choice(list(seq))

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


class NumpyPCG64Source(RandomSource):  # pragma: no cover - covered when numpy present
    def __init__(self, seed: Optional[int]):
        if _np is None:
            raise RuntimeError("numpy is not installed; install bingo-eval[pcg]")
        super().__init__(engine="numpy_pcg64")
        self._rng = _np.random.Generator(_np.random.PCG64(seed))

    def choice(self, seq: Sequence[int]) -> int:
        items = list(seq)
        return items[int(self._rng.integers(low=0, high=len(items)))]

    def shuffle(self, arr: List[int]) -> None:
        self._rng.shuffle(arr)


def create_rng(engine: str = "system", seed: Optional[int] = None) -> RandomSource:
    engine = (engine or "system").strip().lower()
    if engine == "system":
        if seed is not None:
            raise ValueError("The 'system' engine cannot be seeded; use 'py_random'")
        return SystemRandomSource()
    if engine == "py_random":
        return PyRandomSource(seed)
    if engine == "numpy_pcg64":
        return NumpyPCG64Source(seed)
    raise ValueError(f"Unsupported RNG engine: {engine}")


def derive_game_seed(base_seed: int, index: int, purpose: str) -> int:
    """Derive a per-game seed from base seed, game index and purpose using sha256.

    Returns a 63-bit positive integer suitable for seeding common RNGs.
    """
    s = f"{base_seed}|{index}|{purpose}".encode("utf-8")
    digest = hashlib.sha256(s).digest()
    # first 8 bytes, masked to 63 bits
    return int.from_bytes(digest[:8], byteorder="big") & ((1 << 63) - 1)
