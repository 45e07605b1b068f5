import math

import numpy as np
import torch
import pytest
import hypothesis.strategies as st
from hypothesis import given, settings

from ddkit import KthSelector, OutOfRangeError, median, percentile


def test_median_of_ten():
    assert percentile(list(range(1, 11)), 50) == 5.5


def test_median_odd():
    assert median([3.0, 1.0, 2.0]) == 2.0


def test_percentile_bounds():
    values = [4.0, -1.0, 7.5, 3.0]
    assert percentile(values, 100) == 7.5
    # pos < 1 даёт минимум
    assert percentile(values, 1) == -1.0


@pytest.mark.parametrize("p", [0, -5, 100.5, float("nan")])
def test_percentile_rejects_out_of_range(p):
    with pytest.raises(OutOfRangeError):
        percentile([1.0, 2.0], p)


def test_out_of_range_is_value_error():
    with pytest.raises(ValueError, match="out of"):
        percentile([1.0], 0)


def test_percentile_empty_and_single():
    assert math.isnan(percentile([], 50))
    assert percentile([42.0], 10) == 42.0


def test_percentile_does_not_mutate_input():
    values = torch.tensor([5.0, 3.0, 8.0, 1.0, 9.0, 2.0], dtype=torch.float64)
    before = values.clone()
    percentile(values, 25)
    assert torch.equal(values, before)

    array = np.array([3.0, 1.0, 2.0])
    median(array)
    assert array.tolist() == [3.0, 1.0, 2.0]


def test_percentile_with_custom_selector():
    values = np.random.default_rng(4).normal(size=101)
    expected = float(np.sort(values)[50])
    assert percentile(values, 50, selector=KthSelector("random")) == expected


@given(
    values=st.lists(st.floats(min_value=-1e6, max_value=1e6, width=64), min_size=2, max_size=80),
    p=st.floats(min_value=0.5, max_value=100.0),
)
@settings(max_examples=80, deadline=None)
def test_percentile_matches_sorted_interpolation(values, p):
    ordered = sorted(values)
    n = len(ordered)
    pos = p * (n + 1) / 100
    if pos < 1:
        expected = ordered[0]
    elif pos >= n:
        expected = ordered[-1]
    else:
        lower, upper = ordered[int(pos) - 1], ordered[int(pos)]
        expected = lower + (pos - math.floor(pos)) * (upper - lower)
    assert percentile(values, p) == expected
