from __future__ import annotations

"""ddkit._core
==============
Примитивы «расщеплённой» (double-double) арифметики, на которых
строятся генераторы таблиц трансцендентных функций.

* split / resplit: разложение числа на старшую часть с обнулёнными
  30 младшими битами мантиссы и остаток
* split_mult / split_add: умножение и сложение в расщеплённой форме
* split_reciprocal: обратная величина с двумя проходами уточнения
* quad_mult: произведение с компенсированным накоплением (для expint)

Все операции работают покомпонентно на `torch.float64` тензорах
(0-d тензоры для скаляров) и возвращают новый `DoubleDouble`.
Численные крайние случаи (деление на ноль, переполнение) исключений
не вызывают, результат просто теряет точность.
"""

from typing import NamedTuple, Union

import mpmath
import torch

__all__ = [
    "DoubleDouble",
    "split",
    "resplit",
    "split_mult",
    "split_add",
    "split_reciprocal",
    "quad_mult",
]

# 2^30: обнуляет 30 младших битов мантиссы при split
HEX_40000000 = 1073741824.0
# 2^-30
_INV_HEX_40000000 = 9.31322574615478515625e-10
# Выше этой величины c * 2^30 переполняется
_SPLIT_LIMIT = 8e298

Number = Union[float, int, torch.Tensor]


def _as_float64(x: Number, name: str = "x") -> torch.Tensor:
    if isinstance(x, torch.Tensor):
        if x.dtype != torch.float64:
            raise TypeError(f"{name} must be torch.float64, got {x.dtype}")
        return x
    return torch.as_tensor(x, dtype=torch.float64)


class DoubleDouble(NamedTuple):
    """Число в расщеплённой форме: значение равно `hi + lo`.

    Оба компонента: `torch.float64` тензоры одинаковой формы.
    Экземпляры неизменяемы, операции всегда возвращают новый объект.
    """

    hi: torch.Tensor
    lo: torch.Tensor

    @classmethod
    def from_float(cls, x: Number) -> DoubleDouble:
        """Пара `(x, 0)` без расщепления."""
        t = _as_float64(x)
        return cls(t, torch.zeros_like(t))

    @classmethod
    def from_mpmath(cls, x, mp_ctx=None) -> DoubleDouble:
        """Извлекает два float64 компонента из высокоточного числа mpmath."""
        if mp_ctx is None:
            mp_ctx = mpmath.mp
        residue = mp_ctx.mpf(x)
        hi = float(residue)
        lo = float(residue - mp_ctx.mpf(hi))
        return cls(torch.tensor(hi, dtype=torch.float64), torch.tensor(lo, dtype=torch.float64))

    def value(self) -> torch.Tensor:
        """Сумма компонентов в обычной float64 точности."""
        return self.hi + self.lo

    def to_mpmath(self, mp_ctx=None):
        """Точная сумма компонентов; для тензоров список по элементам."""
        if mp_ctx is None:
            mp_ctx = mpmath.mp
        his = self.hi.flatten().tolist()
        los = self.lo.flatten().tolist()
        values = [mp_ctx.mpf(h) + mp_ctx.mpf(l) for h, l in zip(his, los)]
        if self.hi.ndim == 0:
            return values[0]
        return values

    def element(self, index) -> DoubleDouble:
        """Компоненты по индексу (для таблиц, хранящихся как 1-d тензоры)."""
        return DoubleDouble(self.hi[index], self.lo[index])

    def __neg__(self) -> DoubleDouble:
        return DoubleDouble(-self.hi, -self.lo)


def _high_part(c: torch.Tensor) -> torch.Tensor:
    # Для |c| >= 8e298 сначала масштабируем вниз, иначе c * 2^30 = inf
    normal = (c < _SPLIT_LIMIT) & (c > -_SPLIT_LIMIT)
    z = c * HEX_40000000
    hi_normal = c + z - z
    z = c * _INV_HEX_40000000
    hi_large = (c + z - c) * HEX_40000000
    return torch.where(normal, hi_normal, hi_large)


def split(d: Number) -> DoubleDouble:
    """Расщепляет `d` так, что `hi + lo == d`, а у `hi` 30 младших битов нулевые."""
    d = _as_float64(d, "d")
    hi = _high_part(d)
    return DoubleDouble(hi, d - hi)


def resplit(x: DoubleDouble) -> DoubleDouble:
    """Повторная нормализация пары.

    `d` хранит ошибку округления суммы `c = hi + lo` и возвращается
    в младший компонент.
    """
    c = x.hi + x.lo
    d = -(c - x.hi - x.lo)
    hi = _high_part(c)
    return DoubleDouble(hi, c - hi + d)


def split_mult(a: DoubleDouble, b: DoubleDouble) -> DoubleDouble:
    """Произведение двух чисел в расщеплённой форме."""
    hi = a.hi * b.hi
    lo = a.hi * b.lo + a.lo * b.hi + a.lo * b.lo
    return resplit(DoubleDouble(hi, lo))


def split_add(a: DoubleDouble, b: DoubleDouble) -> DoubleDouble:
    """Сумма двух чисел в расщеплённой форме."""
    return resplit(DoubleDouble(a.hi + b.hi, a.lo + b.lo))


def split_reciprocal(x: DoubleDouble) -> DoubleDouble:
    """Обратная величина `1 / (c + d)`.

    Берём `b = 2^-22`, `a = 1 - b`, так что `a + b = 1`, и используем
    тождество

        (a + b) / (c + d) = a / c + (bc - ad) / (c^2 + cd)

    Первое слагаемое идёт в `hi`, второе в `lo`. Ошибку округления
    затем дважды убираем, аккуратно вычисляя `1 - (c + d)(hi + lo)`.
    Если `hi == 0`, компоненты меняются местами; при нулевом делителе
    результат бесконечен или NaN, исключения нет.
    """
    b = 1.0 / 4194304.0
    a = 1.0 - b

    zero_hi = x.hi == 0.0
    c = torch.where(zero_hi, x.lo, x.hi)
    d = torch.where(zero_hi, torch.zeros_like(x.lo), x.lo)

    hi = a / c
    lo = (b * c - a * d) / (c * c + c * d)
    lo = torch.where(torch.isnan(lo), torch.zeros_like(lo), lo)

    result = resplit(DoubleDouble(hi, lo))
    for _ in range(2):
        err = 1.0 - result.hi * c - result.hi * d - result.lo * c - result.lo * d
        err = err * (result.hi + result.lo)
        result = DoubleDouble(result.hi, result.lo + err)
    return result


def _accumulate(r0: torch.Tensor, r1: torch.Tensor, z: DoubleDouble):
    # Компенсированное сложение: r1 собирает ошибку округления r0
    for part in (z.hi, z.lo):
        tmp = r0 + part
        r1 = r1 - (tmp - r0 - part)
        r0 = tmp
    return r0, r1


def quad_mult(a: DoubleDouble, b: DoubleDouble) -> DoubleDouble:
    """`(a.hi + a.lo) * (b.hi + b.lo)` через четыре точных перекрёстных произведения.

    Каждый скалярный множитель сначала расщепляется, так что
    `split_mult` перемножает 23-битные старшие части без округления.
    """
    xs = split(a.hi)
    zs = split_mult(xs, split(b.hi))
    r0, r1 = zs.hi, zs.lo

    r0, r1 = _accumulate(r0, r1, split_mult(xs, split(b.lo)))

    xs = split(a.lo)
    r0, r1 = _accumulate(r0, r1, split_mult(xs, split(b.hi)))
    r0, r1 = _accumulate(r0, r1, split_mult(xs, split(b.lo)))
    return DoubleDouble(r0, r1)
