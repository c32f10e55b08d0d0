"""Tests for discrete and continuous pointwise ranks."""

from __future__ import annotations

import math

import numpy as np
import pytest

from ordering.pointwise import pointwise_ranks, rank_continuous, rank_discrete, value_runs
from utils.config import Alternative, Measure


def test_rank_discrete_directions() -> None:
    x = np.array([3.0, 1.0, 2.0])
    np.testing.assert_allclose(rank_discrete(x, "less"), [3.0, 1.0, 2.0])
    np.testing.assert_allclose(rank_discrete(x, "greater"), [1.0, 3.0, 2.0])
    np.testing.assert_allclose(rank_discrete(x, "two.sided"), [1.0, 1.0, 2.0])


def test_rank_discrete_averages_ties() -> None:
    np.testing.assert_allclose(rank_discrete([1.0, 1.0, 2.0], "less"), [1.5, 1.5, 3.0])


def test_rank_discrete_sign_symmetry_and_two_sided_minimum() -> None:
    rng = np.random.default_rng(3)
    for _ in range(20):
        x = rng.integers(0, 5, size=11).astype(float)
        np.testing.assert_allclose(rank_discrete(x, "greater"), rank_discrete(-x, "less"))
        expected = np.minimum(rank_discrete(x, "less"), rank_discrete(x, "greater"))
        np.testing.assert_allclose(rank_discrete(x, "two.sided"), expected)


def test_value_runs() -> None:
    starts, lengths = value_runs(np.array([5.0, 2.0, 2.0, 2.0, 0.0]))
    np.testing.assert_array_equal(starts, [0, 1, 4])
    np.testing.assert_array_equal(lengths, [1, 3, 1])


def test_rank_continuous_without_ties() -> None:
    ranks = rank_continuous(np.array([4.0, 3.0, 1.0, 0.0]), "greater")
    expected = [math.exp(-1.0 / 3.0), 1.0 + 1.0 / 3.0, 2.0 + 2.0 / 3.0, 3.0]
    np.testing.assert_allclose(ranks, expected)


def test_rank_continuous_less_mirrors_greater() -> None:
    y = np.array([0.3, -1.2, 2.5, 0.9, -0.4])
    np.testing.assert_allclose(rank_continuous(y, "less"), rank_continuous(-y, "greater"))


def test_rank_continuous_two_sided_is_minimum() -> None:
    y = np.array([4.0, 3.0, 1.0, 0.0])
    ranks = rank_continuous(y, "two.sided")
    third = math.exp(-1.0 / 3.0)
    np.testing.assert_allclose(ranks, [third, 4.0 / 3.0, 4.0 / 3.0, third])


def test_rank_continuous_tied_run_shares_mean_position() -> None:
    ranks = rank_continuous(np.array([2.0, 5.0, 2.0, 0.0, 2.0]), "greater")
    np.testing.assert_allclose(ranks, [3.0, math.exp(-1.5), 3.0, 4.0, 3.0])


def test_rank_continuous_long_tied_run_sums_to_its_positions() -> None:
    ranks = rank_continuous(np.array([5.0, 2.0, 2.0, 2.0, 2.0, 0.0]), "greater")
    np.testing.assert_allclose(ranks, [math.exp(-1.5), 3.5, 3.5, 3.5, 3.5, 5.0])
    assert ranks[1:5].sum() == pytest.approx(2.0 + 3.0 + 4.0 + 5.0)


@pytest.mark.parametrize(
    ("values", "expected"),
    [
        ([1.0, 1.0, 1.0], [2.0, 2.0, 2.0]),
        ([7.0, 7.0], [1.5, 1.5]),
        ([3.0, 1.0, 1.0], [0.0, 2.0, 2.0]),
        ([3.0, 3.0, 1.0], [1.0, 1.0, 2.0]),
    ],
)
def test_rank_continuous_degenerate_cases_are_finite(values, expected) -> None:
    with np.errstate(all="raise"):
        ranks = rank_continuous(np.array(values), "greater")
    np.testing.assert_allclose(ranks, expected)


def test_pointwise_ranks_rowwise() -> None:
    rng = np.random.default_rng(7)
    table = rng.normal(size=(4, 6))
    for alternative in Alternative:
        discrete = pointwise_ranks(table, Measure.RANK, alternative)
        cont = pointwise_ranks(table, Measure.CONT, alternative)
        for i in range(table.shape[0]):
            np.testing.assert_allclose(discrete[i], rank_discrete(table[i], alternative))
            np.testing.assert_allclose(cont[i], rank_continuous(table[i], alternative))


def test_pointwise_ranks_rejects_deviation_measure() -> None:
    with pytest.raises(ValueError):
        pointwise_ranks(np.zeros((2, 3)), Measure.MAX, Alternative.TWO_SIDED)
