"""Тесты медленных вычислителей рядов и expint."""

import math

import torch
import pytest
from mpmath import mp
import hypothesis.strategies as st
from hypothesis import given, settings

from ddkit import E, FACT, LN_SPLIT_COEF, expint, slow_cos, slow_exp, slow_log, slow_sin
from tests.helpers import dd_to_mp, dd_to_mp_values, rel_err

mp.dps = 60


def test_constant_tables():
    assert FACT.shape == (20,)
    assert FACT.dtype == torch.float64
    for i, f in enumerate(FACT.tolist()):
        assert f == float(math.factorial(i))
    assert len(LN_SPLIT_COEF) == 16
    assert LN_SPLIT_COEF[0].hi.item() == 2.0
    assert rel_err(dd_to_mp(E), mp.e) < 1e-30


@pytest.mark.parametrize("i", range(7))
def test_slow_sin_cos_table_points(i):
    x = i / 8.0
    s_val, s = slow_sin(x)
    c_val, c = slow_cos(x)

    assert abs(dd_to_mp(s) - mp.sin(mp.mpf(x))) < 1e-20
    assert abs(dd_to_mp(c) - mp.cos(mp.mpf(x))) < 1e-20
    assert s_val.item() == s.hi.item() + s.lo.item()
    assert c_val.item() == pytest.approx(math.cos(x), rel=1e-15)


@given(x=st.floats(min_value=1e-3, max_value=0.75, width=64))
@settings(max_examples=50, deadline=None)
def test_sin_cos_pythagorean_identity(x):
    _, s = slow_sin(x)
    _, c = slow_cos(x)
    s_mp, c_mp = dd_to_mp(s), dd_to_mp(c)
    assert abs(s_mp * s_mp + c_mp * c_mp - 1) < 1e-20


@given(x=st.floats(min_value=0.0, max_value=1e-3, exclude_max=True, width=64))
@settings(max_examples=50, deadline=None)
def test_sin_cos_pythagorean_identity_small_angles(x):
    # сложение старших частей с 1/0! округляется до одного ulp double
    _, s = slow_sin(x)
    _, c = slow_cos(x)
    s_mp, c_mp = dd_to_mp(s), dd_to_mp(c)
    assert abs(s_mp * s_mp + c_mp * c_mp - 1) < 2.3e-16


def test_slow_cos_small_angle_exact_components():
    _, c = slow_cos(1.2675934823758863e-08)
    assert c.hi.item() == 0.9999998807907104
    assert c.lo.item() == 1.1920928943975895e-07


def test_slow_sin_zero():
    value, s = slow_sin(0.0)
    assert value.item() == 0.0
    assert s.hi.item() == 0.0


def test_slow_series_vectorised_matches_scalar():
    x = torch.tensor([0.0, 0.125, 0.3, 0.75], dtype=torch.float64)
    _, vec = slow_sin(x)
    for i, v in enumerate(x.tolist()):
        _, scalar = slow_sin(v)
        assert vec.hi[i].item() == scalar.hi.item()
        assert vec.lo[i].item() == scalar.lo.item()


@pytest.mark.parametrize("x", [0.0, 1.0 / 1024, 0.1, 0.25, 0.5])
def test_slow_exp(x):
    value, result = slow_exp(x)
    assert rel_err(dd_to_mp(result), mp.exp(mp.mpf(x))) < 1e-20
    assert value.item() == pytest.approx(math.exp(x), rel=1e-15)


def test_slow_exp_at_one():
    # ряд обрывается на 19!, остаток порядка 1/20!
    _, result = slow_exp(1.0)
    assert rel_err(dd_to_mp(result), mp.e) < 1e-17


@pytest.mark.parametrize("xi", [1.0 + 1.0 / 1024, 1.25, 1.5, math.sqrt(2.0), 1.75, 2.0 - 1.0 / 1024])
def test_slow_log(xi):
    result = slow_log(xi)
    assert abs(dd_to_mp(result) - mp.log(mp.mpf(xi))) < 1e-18


def test_slow_log_of_one_is_zero():
    assert slow_log(1.0).value().item() == 0.0


def test_slow_log_out_of_range_does_not_raise():
    """Вне [1, 2] проверки нет: результат конечен, но точность не гарантируется."""
    result = slow_log(10.0)
    assert math.isfinite(result.value().item())


def test_slow_log_vectorised():
    xi = 1.0 + torch.arange(0, 1024, 128, dtype=torch.float64) / 1024.0
    result = slow_log(xi)
    for actual, x in zip(dd_to_mp_values(result), xi.tolist()):
        assert abs(actual - mp.log(mp.mpf(x))) < 1e-18


def test_expint_zero():
    value, result = expint(0)
    assert value.item() == 1.0
    assert result.hi.item() == 1.0
    assert result.lo.item() == 0.0


@pytest.mark.parametrize("p", [-1, -3, -100])
def test_expint_negative_power_returns_one(p):
    value, _ = expint(p)
    assert value.item() == 1.0


@pytest.mark.parametrize("p", [1, 2, 3, 7, 20, 64])
def test_expint_matches_mpmath(p):
    value, result = expint(p)
    assert rel_err(dd_to_mp(result), mp.exp(p)) < 1e-19
    assert value.item() == pytest.approx(math.exp(p), rel=1e-15)


def test_expint_three():
    value, _ = expint(3)
    assert value.item() == pytest.approx(20.085536923187668, rel=1e-15)


@given(p1=st.integers(0, 50), p2=st.integers(0, 50))
@settings(max_examples=40, deadline=None)
def test_expint_is_multiplicative(p1, p2):
    _, a = expint(p1)
    _, b = expint(p2)
    _, ab = expint(p1 + p2)
    assert rel_err(dd_to_mp(ab), dd_to_mp(a) * dd_to_mp(b)) < 1e-19


def test_expint_vectorised_matches_scalar():
    powers = torch.tensor([0, 1, 2, 3, 10, -2], dtype=torch.int64)
    _, vec = expint(powers)
    for i, p in enumerate(powers.tolist()):
        _, scalar = expint(p)
        assert vec.hi[i].item() == scalar.hi.item()
        assert vec.lo[i].item() == scalar.lo.item()
