"""ddkit._tables
================
Генерация и печать таблиц, которыми пользуются быстрые реализации
exp, log, sin, cos, tan и atan.

* build_sin_cos_tables: sin/cos/tan в точках 0, 1/8, ..., 13/8
* build_exp_int_table: e^i для целых i
* build_exp_frac_table: e^(i/1024) на [0, 1]
* build_ln_mant_table: ln мантиссы на [1, 2) с шагом 2^-10
* print_array / print_tables: вывод в виде литералов массивов

Вывод таблиц нужен только при сборке, в горячем пути не участвует.
"""

from __future__ import annotations

import logging
import math
import sys
from decimal import Decimal
from typing import NamedTuple, Optional, Sequence, TextIO, Union

import torch

from ._core import DoubleDouble, split_add, split_mult, split_reciprocal
from ._errors import DimensionMismatchError
from ._series import expint, slow_cos, slow_exp, slow_log, slow_sin

__all__ = [
    "SINE_TABLE_LEN",
    "EXP_INT_TABLE_MAX_INDEX",
    "EXP_INT_TABLE_LEN",
    "EXP_FRAC_TABLE_LEN",
    "LN_MANT_LEN",
    "SinCosTables",
    "build_sin_cos_tables",
    "build_exp_int_table",
    "build_exp_frac_table",
    "build_ln_mant_table",
    "format_double",
    "check_len",
    "print_array",
    "print_tables",
]

log = logging.getLogger(__name__)

# 0, 1/8, ..., 13/8 (чуть больше pi/2)
SINE_TABLE_LEN = 14
EXP_INT_TABLE_MAX_INDEX = 750
EXP_INT_TABLE_LEN = EXP_INT_TABLE_MAX_INDEX * 2
# 0, 1/1024, ..., 1024/1024
EXP_FRAC_TABLE_LEN = 1025
LN_MANT_LEN = 1024

# Сколько первых точек считается рядом Тейлора (x <= 6/8)
_TAYLOR_POINTS = 7

TABLE_START_DECL = "    {"
TABLE_END_DECL = "    };"


class SinCosTables(NamedTuple):
    sine: DoubleDouble
    cosine: DoubleDouble
    tangent: DoubleDouble


def _store(hi: torch.Tensor, lo: torch.Tensor, i: int, value: DoubleDouble) -> None:
    hi[i] = value.hi
    lo[i] = value.lo


def build_sin_cos_tables(length: int = SINE_TABLE_LEN) -> SinCosTables:
    """Строит таблицы sin, cos и tan для углов i/8, i = 0..length-1.

    Первые семь точек считаются рядом Тейлора, остальные по формулам
    сложения углов: для чётного i удвоение угла i/2, для нечётного
    сумма углов i//2 и i//2 + 1. Поэтому заполнять таблицу можно только
    по возрастанию индекса.
    """
    sin_hi = torch.zeros(length, dtype=torch.float64)
    sin_lo = torch.zeros(length, dtype=torch.float64)
    cos_hi = torch.zeros(length, dtype=torch.float64)
    cos_lo = torch.zeros(length, dtype=torch.float64)

    n_taylor = min(_TAYLOR_POINTS, length)
    x = torch.arange(n_taylor, dtype=torch.float64) / 8.0
    _, s = slow_sin(x)
    _, c = slow_cos(x)
    sin_hi[:n_taylor], sin_lo[:n_taylor] = s.hi, s.lo
    cos_hi[:n_taylor], cos_lo[:n_taylor] = c.hi, c.lo

    sine = DoubleDouble(sin_hi, sin_lo)
    cosine = DoubleDouble(cos_hi, cos_lo)
    for i in range(n_taylor, length):
        half = i // 2
        xs = sine.element(half)
        ys = cosine.element(half)
        if i & 1 == 0:
            # удвоение угла
            result = split_mult(xs, ys)
            _store(sin_hi, sin_lo, i, DoubleDouble(result.hi * 2.0, result.lo * 2.0))
            result = split_add(split_mult(ys, ys), -split_mult(xs, xs))
            _store(cos_hi, cos_lo, i, result)
        else:
            as_ = sine.element(half + 1)
            bs = cosine.element(half + 1)
            result = split_add(split_mult(ys, as_), split_mult(xs, bs))
            _store(sin_hi, sin_lo, i, result)
            result = split_add(split_mult(ys, bs), -split_mult(xs, as_))
            _store(cos_hi, cos_lo, i, result)

    tangent = split_mult(sine, split_reciprocal(cosine))
    log.debug("built sine/cosine/tangent tables of length %d", length)
    return SinCosTables(sine, cosine, tangent)


def build_exp_int_table(max_index: int = EXP_INT_TABLE_MAX_INDEX) -> DoubleDouble:
    """e^i для i из [-max_index, max_index), элемент i лежит по индексу i + max_index.

    Отрицательные степени: обратные величины положительных. Первый
    элемент (e^-max_index) не вычисляется и остаётся нулём.
    """
    hi = torch.zeros(2 * max_index, dtype=torch.float64)
    lo = torch.zeros(2 * max_index, dtype=torch.float64)

    _, pos = expint(torch.arange(max_index, dtype=torch.int64))
    hi[max_index:], lo[max_index:] = pos.hi, pos.lo

    recip = split_reciprocal(DoubleDouble(pos.hi[1:], pos.lo[1:]))
    hi[1:max_index], lo[1:max_index] = recip.hi.flip(0), recip.lo.flip(0)
    log.debug("built exp int table, max index %d", max_index)
    return DoubleDouble(hi, lo)


def build_exp_frac_table(length: int = EXP_FRAC_TABLE_LEN) -> DoubleDouble:
    """e^(i / (length - 1)) для i = 0..length-1, нужно length >= 2."""
    if length < 2:
        raise ValueError(f"length must be at least 2, got {length}")
    factor = 1.0 / (length - 1)
    x = torch.arange(length, dtype=torch.float64) * factor
    _, result = slow_exp(x)
    log.debug("built exp frac table of length %d", length)
    return result


def build_ln_mant_table(length: int = LN_MANT_LEN) -> torch.Tensor:
    """ln(1 + i/1024) для i = 0..length-1 в виде тензора `[length, 2]`."""
    x = 1.0 + torch.arange(length, dtype=torch.float64) / 1024.0
    result = slow_log(x)
    log.debug("built ln mantissa table of length %d", length)
    return torch.stack([result.hi, result.lo], dim=-1)


def _java_double_str(d: float) -> str:
    """Запись числа как у `Double.toString`: кратчайшие цифры `repr`,
    но экспонента вида `1.0E-9` вне диапазона [1e-3, 1e7)."""
    if math.isinf(d):
        return "Infinity" if d > 0 else "-Infinity"
    sign = "-" if math.copysign(1.0, d) < 0 else ""
    a = abs(d)
    if a == 0.0:
        return sign + "0.0"
    dec = Decimal(repr(a)).normalize()
    if 1e-3 <= a < 1e7:
        text = format(dec, "f")
        return sign + (text if "." in text else text + ".0")
    digits = "".join(map(str, dec.as_tuple().digits))
    exponent = len(digits) - 1 + dec.as_tuple().exponent
    return sign + digits[0] + "." + (digits[1:] or "0") + "E" + str(exponent)


def format_double(d: float) -> str:
    """Литерал для исходника таблицы: явный знак, суффикс `d`, запятая."""
    d = float(d)
    if d != d:
        return "Double.NaN,"
    return ("+" if d >= 0 else "") + _java_double_str(d) + "d,"


def check_len(expected_len: int, actual: int) -> None:
    if expected_len != actual:
        raise DimensionMismatchError(actual, expected_len)


ArrayLike = Union[torch.Tensor, Sequence[float], Sequence[Sequence[float]]]


def print_array(name: str, expected_len: int, array: ArrayLike, file: Optional[TextIO] = None) -> None:
    """Печатает массив (1-d или 2-d) блоком `    {` ... `    };`.

    Длина проверяется после строки с именем, но до содержимого;
    при расхождении DimensionMismatchError.
    """
    if file is None:
        file = sys.stdout
    rows = array.tolist() if isinstance(array, torch.Tensor) else list(array)

    if rows and isinstance(rows[0], (list, tuple)):
        print(name, file=file)
        check_len(expected_len, len(rows))
        print(TABLE_START_DECL + " ", file=file)
        for i, row in enumerate(rows):
            entries = "".join(f"{format_double(d):<25.25}" for d in row)
            print("        {" + entries + "}, // " + str(i), file=file)
        print(TABLE_END_DECL, file=file)
        return

    print(name + "=", file=file)
    check_len(expected_len, len(rows))
    print(TABLE_START_DECL, file=file)
    for d in rows:
        print("        " + format_double(d), file=file)
    print(TABLE_END_DECL, file=file)


def print_tables(file: Optional[TextIO] = None) -> None:
    """Генерирует все таблицы и печатает их в порядке исходных литералов."""
    exp_int = build_exp_int_table()
    exp_frac = build_exp_frac_table()
    ln_mant = build_ln_mant_table()
    sin_cos = build_sin_cos_tables()

    print_array("EXP_INT_TABLE_A", EXP_INT_TABLE_LEN, exp_int.hi, file=file)
    print_array("EXP_INT_TABLE_B", EXP_INT_TABLE_LEN, exp_int.lo, file=file)
    print_array("EXP_FRAC_TABLE_A", EXP_FRAC_TABLE_LEN, exp_frac.hi, file=file)
    print_array("EXP_FRAC_TABLE_B", EXP_FRAC_TABLE_LEN, exp_frac.lo, file=file)
    print_array("LN_MANT", LN_MANT_LEN, ln_mant, file=file)
    print_array("SINE_TABLE_A", SINE_TABLE_LEN, sin_cos.sine.hi, file=file)
    print_array("SINE_TABLE_B", SINE_TABLE_LEN, sin_cos.sine.lo, file=file)
    print_array("COSINE_TABLE_A", SINE_TABLE_LEN, sin_cos.cosine.hi, file=file)
    print_array("COSINE_TABLE_B", SINE_TABLE_LEN, sin_cos.cosine.lo, file=file)
    print_array("TANGENT_TABLE_A", SINE_TABLE_LEN, sin_cos.tangent.hi, file=file)
    print_array("TANGENT_TABLE_B", SINE_TABLE_LEN, sin_cos.tangent.lo, file=file)
