from __future__ import annotations

import random


class LayoutCancelled(RuntimeError):
    pass


class CancellationToken:
    def __init__(self) -> None:
        self._cancelled = False

    @property
    def cancelled(self) -> bool:
        return self._cancelled

    def cancel(self) -> None:
        self._cancelled = True

    def raise_if_cancelled(self, stage: str) -> None:
        if self._cancelled:
            raise LayoutCancelled(f"layout cancelled before {stage}")


class LayoutContext:
    """Owns the one random generator shared by clustering and landmark placement."""

    def __init__(self, seed: int = 1) -> None:
        self._seed = int(seed)
        self._rng = random.Random(self._seed)

    @property
    def seed(self) -> int:
        return self._seed

    @property
    def rng(self) -> random.Random:
        return self._rng

    def reset(self) -> None:
        self._rng.seed(self._seed)

    def snapshot(self) -> object:
        return self._rng.getstate()

    def restore(self, state: object) -> None:
        self._rng.setstate(state)
