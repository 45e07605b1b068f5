"""ddkit._series
================
Медленные, но точные вычислители, используемые только при генерации
таблиц: ряды Тейлора для sin, cos, exp, приближение Ремеза для log
и возведение `e` в целую степень.

Все функции векторизованы: аргумент может быть тензором, тогда
вычисление идёт поэлементно с той же последовательностью операций,
что и для скаляра.
"""

from __future__ import annotations

from typing import Optional, Tuple

import torch

from ._core import (
    DoubleDouble,
    Number,
    _as_float64,
    quad_mult,
    resplit,
    split,
    split_add,
    split_mult,
    split_reciprocal,
)

__all__ = [
    "FACT",
    "LN_SPLIT_COEF",
    "E",
    "slow_sin",
    "slow_cos",
    "slow_exp",
    "slow_log",
    "expint",
]

# 0!, 1!, ..., 19!
FACT = torch.tensor(
    [
        1.0,
        1.0,
        2.0,
        6.0,
        24.0,
        120.0,
        720.0,
        5040.0,
        40320.0,
        362880.0,
        3628800.0,
        39916800.0,
        479001600.0,
        6227020800.0,
        87178291200.0,
        1307674368000.0,
        20922789888000.0,
        355687428096000.0,
        6402373705728000.0,
        121645100408832000.0,
    ],
    dtype=torch.float64,
)


def _dd(hi: float, lo: float) -> DoubleDouble:
    return DoubleDouble(torch.tensor(hi, dtype=torch.float64), torch.tensor(lo, dtype=torch.float64))


# Коэффициенты Ремеза для ln((1 + x) / (1 - x)) / x как многочлена от x^2
LN_SPLIT_COEF = (
    _dd(2.0, 0.0),
    _dd(0.6666666269302368, 3.9736429850260626e-8),
    _dd(0.3999999761581421, 2.3841857910019882e-8),
    _dd(0.2857142686843872, 1.7029898543501842e-8),
    _dd(0.2222222089767456, 1.3245471311735498e-8),
    _dd(0.1818181574344635, 2.4384203044354907e-8),
    _dd(0.1538461446762085, 9.140260083262505e-9),
    _dd(0.13333332538604736, 9.220590270857665e-9),
    _dd(0.11764700710773468, 1.2393345855018391e-8),
    _dd(0.10526403784751892, 8.251545029714408e-9),
    _dd(0.0952233225107193, 1.2675934823758863e-8),
    _dd(0.08713622391223907, 1.1430250008909141e-8),
    _dd(0.07842259109020233, 2.404307984052299e-9),
    _dd(0.08371849358081818, 1.176342548272881e-8),
    _dd(0.030589580535888672, 1.2958646899018938e-9),
    _dd(0.14982303977012634, 1.225743062930824e-8),
)

# Число e в расщеплённой форме
E = _dd(2.718281828459045, 1.4456468917292502e-16)


def _taylor(x: Number, parity: Optional[int], alternate: bool) -> Tuple[torch.Tensor, DoubleDouble]:
    """Схема Горнера по таблице факториалов, от 19! к 0!.

    `parity` оставляет только индексы этой чётности (None оставляет все),
    `alternate` делает отрицательным каждый второй оставленный член.
    """
    xs = split(_as_float64(x))
    ys = DoubleDouble(torch.zeros_like(xs.hi), torch.zeros_like(xs.hi))
    for i in range(FACT.shape[0] - 1, -1, -1):
        ys = split_mult(xs, ys)
        if parity is not None and (i & 1) != parity:
            continue
        facts = split_reciprocal(split(FACT[i]))
        if alternate and i & 2:
            facts = -facts
        ys = split_add(ys, facts)
    return ys.value(), ys


def slow_cos(x: Number) -> Tuple[torch.Tensor, DoubleDouble]:
    """cos(x) = 1 - x^2/2! + x^4/4! - ... для 0 <= x <= pi/4.

    Возвращает `(значение, пара)`; значение равно `hi + lo`.
    """
    return _taylor(x, parity=0, alternate=True)


def slow_sin(x: Number) -> Tuple[torch.Tensor, DoubleDouble]:
    """sin(x) = x - x^3/3! + x^5/5! - ... для 0 <= x <= pi/4."""
    return _taylor(x, parity=1, alternate=True)


def slow_exp(x: Number) -> Tuple[torch.Tensor, DoubleDouble]:
    """exp(x) для 0 <= x <= 1 в расширенной точности."""
    return _taylor(x, parity=None, alternate=False)


def slow_log(xi: Number) -> DoubleDouble:
    """ln(xi) для xi из [1, 2].

    После замены x = (xi - 1) / (xi + 1) имеем

        ln((1 + x) / (1 - x)) = 2 (x + x^3/3 + x^5/5 + ...)

    Чётная функция ln(...) / x приближается многочленом Ремеза от x^2
    при x из [0, 1/3], результат домножается на x. Аргумент вне
    диапазона не проверяется: ответ будет неверным, но без исключения.
    """
    x = split(_as_float64(xi, "xi"))

    # X = (x - 1) / (x + 1)
    x = resplit(DoubleDouble(x.hi + 1.0, x.lo))
    a = split_reciprocal(x)
    x = resplit(DoubleDouble(x.hi - 2.0, x.lo))
    x = split_mult(x, a)

    x2 = split_mult(x, x)

    y = LN_SPLIT_COEF[-1]
    for coef in reversed(LN_SPLIT_COEF[:-1]):
        y = split_mult(y, x2)
        y = split_add(y, coef)
    return split_mult(y, x)


def expint(p) -> Tuple[torch.Tensor, DoubleDouble]:
    """e^p для целого p (int или int64 тензор) двоичным возведением в степень.

    Возвращает `(значение, пара)`. Значение: сумма компонентов до
    финальной ренормализации, пара: после неё. Для p <= 0 цикл не
    выполняется и результат равен ровно 1.0.
    """
    p = torch.as_tensor(p, dtype=torch.int64)
    shape = p.shape

    xs = DoubleDouble(E.hi.expand(shape).clone(), E.lo.expand(shape).clone())
    ys = split(torch.ones(shape, dtype=torch.float64))
    while bool((p > 0).any()):
        active = p > 0
        take = active & ((p & 1) != 0)
        prod = quad_mult(ys, xs)
        ys = DoubleDouble(torch.where(take, prod.hi, ys.hi), torch.where(take, prod.lo, ys.lo))
        xs = quad_mult(xs, xs)
        p = torch.where(active, p >> 1, p)

    return ys.hi + ys.lo, resplit(ys)
