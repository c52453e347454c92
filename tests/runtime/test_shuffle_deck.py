from __future__ import annotations

import random

from toasttv.runtime.shuffle_deck import ShuffleDeck


def test_full_pass_draws_every_item_exactly_once():
    items = list(range(12))
    deck = ShuffleDeck(items, rng=random.Random(7))

    drawn = [deck.draw() for _ in items]

    assert sorted(drawn) == items
    assert deck.remaining == 0


def test_empty_universe_always_returns_none():
    deck: ShuffleDeck[int] = ShuffleDeck([])

    assert deck.draw() is None
    assert deck.draw() is None
    assert deck.size == 0


def test_exhaustion_reshuffles_on_next_draw():
    items = ["a", "b", "c"]
    deck = ShuffleDeck(items, rng=random.Random(1))

    first_pass = [deck.draw() for _ in items]
    second_pass = [deck.draw() for _ in items]

    assert sorted(first_pass) == items
    assert sorted(second_pass) == items


def test_set_items_replaces_universe():
    deck = ShuffleDeck([1, 2, 3], rng=random.Random(3))
    deck.draw()

    deck.set_items([10, 20])

    assert deck.size == 2
    assert deck.remaining == 2
    assert sorted([deck.draw(), deck.draw()]) == [10, 20]


def test_reshuffle_restores_full_deck():
    deck = ShuffleDeck([1, 2, 3, 4], rng=random.Random(5))
    deck.draw()
    deck.draw()

    deck.reshuffle()

    assert deck.remaining == 4


def test_shuffle_order_is_reproducible_with_seed():
    a = ShuffleDeck(list(range(20)), rng=random.Random(42))
    b = ShuffleDeck(list(range(20)), rng=random.Random(42))

    assert [a.draw() for _ in range(20)] == [b.draw() for _ in range(20)]
