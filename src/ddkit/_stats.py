"""ddkit._stats
===============
Процентили и медиана поверх KthSelector.

Оба ранга одного запроса ищутся в одной копии данных с общим кэшем
опорных элементов, так что второй поиск почти бесплатен.
"""

from __future__ import annotations

import math
from typing import Optional, Sequence, Union

import numpy as np
import torch

from ._errors import OutOfRangeError
from ._select import KthSelector, new_pivots_heap

__all__ = ["percentile", "median"]


def percentile(
    values: Union[torch.Tensor, np.ndarray, Sequence[float]],
    p: float,
    selector: Optional[KthSelector] = None,
) -> float:
    """p-й процентиль, 0 < p <= 100.

    Позиция `pos = p * (n + 1) / 100`; между соседними порядковыми
    статистиками значение интерполируется линейно. Исходные данные
    не меняются. Для пустого входа возвращается NaN.
    """
    if not 0 < p <= 100:
        raise OutOfRangeError(p, 0, 100)

    work = torch.as_tensor(values, dtype=torch.float64).flatten().clone()
    n = work.shape[0]
    if n == 0:
        return math.nan
    if n == 1:
        return float(work[0])

    if selector is None:
        selector = KthSelector()
    pivots_heap = new_pivots_heap()

    pos = p * (n + 1) / 100
    fpos = math.floor(pos)
    int_pos = int(fpos)
    dif = pos - fpos

    if pos < 1:
        return selector.select(work, pivots_heap, 0)
    if pos >= n:
        return selector.select(work, pivots_heap, n - 1)

    lower = selector.select(work, pivots_heap, int_pos - 1)
    upper = selector.select(work, pivots_heap, int_pos)
    return lower + dif * (upper - lower)


def median(
    values: Union[torch.Tensor, np.ndarray, Sequence[float]],
    selector: Optional[KthSelector] = None,
) -> float:
    """Медиана, то же что `percentile(values, 50)`."""
    return percentile(values, 50.0, selector=selector)
