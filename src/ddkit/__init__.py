"""ddkit: расщеплённая (double-double) арифметика для генерации таблиц
трансцендентных функций и выбор порядковых статистик.

Экспортируются примитивы ядра, медленные вычислители рядов,
генераторы таблиц, KthSelector со стратегиями выбора опорного
элемента и процентили поверх него.
"""

import torch
import warnings

# Все таблицы и рабочие массивы считаются в float64
if torch.get_default_dtype() != torch.float64:
    warnings.warn(
        "ddkit: setting torch.set_default_dtype(torch.float64). "
        "New tensors will be float64 unless a dtype is given explicitly.",
        stacklevel=2,
    )
    torch.set_default_dtype(torch.float64)

from ._core import (  # noqa: F401
    DoubleDouble,
    quad_mult,
    resplit,
    split,
    split_add,
    split_mult,
    split_reciprocal,
)
from ._errors import DimensionMismatchError, OutOfRangeError  # noqa: F401
from ._series import E, FACT, LN_SPLIT_COEF, expint, slow_cos, slow_exp, slow_log, slow_sin  # noqa: F401
from ._tables import (  # noqa: F401
    SinCosTables,
    build_exp_frac_table,
    build_exp_int_table,
    build_ln_mant_table,
    build_sin_cos_tables,
    format_double,
    print_array,
    print_tables,
)
from ._pivoting import (  # noqa: F401
    PIVOTING_STRATEGIES,
    CentralPivotingStrategy,
    MedianOf3PivotingStrategy,
    PivotingStrategy,
    RandomPivotingStrategy,
)
from ._select import KthSelector, new_pivots_heap, partition, select  # noqa: F401
from ._stats import median, percentile  # noqa: F401

__all__ = [
    # ядро
    "DoubleDouble",
    "split",
    "resplit",
    "split_mult",
    "split_add",
    "split_reciprocal",
    "quad_mult",
    # ряды
    "E",
    "FACT",
    "LN_SPLIT_COEF",
    "slow_sin",
    "slow_cos",
    "slow_exp",
    "slow_log",
    "expint",
    # таблицы
    "SinCosTables",
    "build_sin_cos_tables",
    "build_exp_int_table",
    "build_exp_frac_table",
    "build_ln_mant_table",
    "format_double",
    "print_array",
    "print_tables",
    # выбор
    "PIVOTING_STRATEGIES",
    "PivotingStrategy",
    "MedianOf3PivotingStrategy",
    "CentralPivotingStrategy",
    "RandomPivotingStrategy",
    "KthSelector",
    "new_pivots_heap",
    "partition",
    "select",
    "percentile",
    "median",
    # ошибки
    "DimensionMismatchError",
    "OutOfRangeError",
]
