"""
Shuffle deck: draw without repetition until the universe is exhausted.

Once every item has been drawn the deck reshuffles the full universe
automatically. Nothing prevents the last item of one pass from being the
first item of the next.
"""

from __future__ import annotations

import random
from typing import Generic, Iterable, TypeVar

T = TypeVar("T")


class ShuffleDeck(Generic[T]):
    def __init__(self, items: Iterable[T], rng: random.Random | None = None) -> None:
        self._rng = rng or random.Random()
        self._items: list[T] = list(items)
        self._deck: list[T] = []
        self._shuffle()

    def draw(self) -> T | None:
        """Pop the next item, reshuffling first if the deck ran out.

        Returns None only when the universe itself is empty.
        """
        if not self._items:
            return None
        if not self._deck:
            self._shuffle()
        return self._deck.pop()

    def reshuffle(self) -> None:
        self._shuffle()

    def set_items(self, items: Iterable[T]) -> None:
        """Replace the universe (e.g. after a rescan) and reshuffle."""
        self._items = list(items)
        self._shuffle()

    @property
    def remaining(self) -> int:
        return len(self._deck)

    @property
    def size(self) -> int:
        return len(self._items)

    def _shuffle(self) -> None:
        # Fisher-Yates
        deck = list(self._items)
        for i in range(len(deck) - 1, 0, -1):
            j = self._rng.randint(0, i)
            deck[i], deck[j] = deck[j], deck[i]
        self._deck = deck
