from __future__ import annotations

import random
from collections import Counter
from itertools import product

import pytest

from rpsgame.core.models import CHOICES, Choice, Outcome
from rpsgame.core.rules import beats, choose_random, resolve


@pytest.mark.parametrize("choice", CHOICES)
def test_same_choice_is_tie(choice: Choice):
    assert resolve(choice, choice) is Outcome.TIE


@pytest.mark.parametrize(
    ("player", "computer"),
    [
        (Choice.ROCK, Choice.SCISSORS),
        (Choice.PAPER, Choice.ROCK),
        (Choice.SCISSORS, Choice.PAPER),
    ],
)
def test_cyclic_relation(player: Choice, computer: Choice):
    assert resolve(player, computer) is Outcome.WIN
    assert resolve(computer, player) is Outcome.LOSE
    assert beats(player) is computer


def test_resolve_is_antisymmetric_and_total():
    for a, b in product(CHOICES, repeat=2):
        outcome = resolve(a, b)
        assert outcome in set(Outcome)
        assert (outcome is Outcome.WIN) == (resolve(b, a) is Outcome.LOSE)
        assert (outcome is Outcome.TIE) == (a == b)


def test_each_choice_beats_exactly_one_other():
    wins = Counter(a for a, b in product(CHOICES, repeat=2) if resolve(a, b) is Outcome.WIN)
    assert wins == {choice: 1 for choice in CHOICES}


def test_choose_random_is_roughly_uniform():
    rng = random.Random(7)
    samples = 30_000
    counts = Counter(choose_random(rng) for _ in range(samples))
    assert set(counts) == set(CHOICES)
    expected = samples / 3
    for choice in CHOICES:
        assert abs(counts[choice] - expected) < 0.05 * expected


def test_choose_random_without_rng_returns_choice():
    assert choose_random() in CHOICES
