"""ddkit._select
================
Выбор k-й порядковой статистики (quickselect) с кэшем опорных
элементов в виде двоичной кучи.

Рабочий массив: 1-d `torch.float64` тензор на CPU или `numpy.ndarray`
типа float64. Он переставляется на месте: после `select(k)` элемент
с рангом k стоит на позиции k, слева от него нет больших элементов.
Кэш `pivots_heap` хранит в узле `node` позицию опорного элемента
предыдущего разбиения (-1 значит неизвестно); потомки узла: `2*node + 1`
и `2*node + 2`. Кэш действителен, пока массив меняет только селектор.

Потокобезопасности нет: каждой паре (массив, кэш) нужен свой поток.
"""

from __future__ import annotations

from typing import Optional, Union

import numpy as np
import torch

from ._pivoting import PivotingStrategy, get_strategy

__all__ = [
    "MIN_SELECT_SIZE",
    "MAX_CACHED_LEVELS",
    "KthSelector",
    "new_pivots_heap",
    "partition",
    "select",
]

# Срезы не длиннее этого просто сортируются
MIN_SELECT_SIZE = 15
# Глубина кэша опорных элементов по умолчанию
MAX_CACHED_LEVELS = 10

ArrayLike = Union[torch.Tensor, np.ndarray]


def _as_buffer(array: ArrayLike, name: str) -> np.ndarray:
    # Тензор превращается в numpy-представление над той же памятью
    if isinstance(array, torch.Tensor):
        if array.device.type != "cpu":
            raise ValueError(f"{name} must live on the CPU, got {array.device}")
        array = array.detach().numpy()
    elif not isinstance(array, np.ndarray):
        raise TypeError(f"{name} must be a torch.Tensor or numpy.ndarray, got {type(array).__name__}")
    if array.ndim != 1:
        raise ValueError(f"{name} must be one-dimensional, got {array.ndim} dimensions")
    return array


def _as_work_buffer(work: ArrayLike) -> np.ndarray:
    buf = _as_buffer(work, "work")
    if buf.dtype != np.float64:
        raise TypeError(f"work must be float64, got {buf.dtype}")
    return buf


def _as_heap_buffer(pivots_heap: ArrayLike) -> np.ndarray:
    buf = _as_buffer(pivots_heap, "pivots_heap")
    if buf.dtype.kind != "i":
        raise TypeError(f"pivots_heap must have an integer dtype, got {buf.dtype}")
    return buf


def new_pivots_heap(levels: int = MAX_CACHED_LEVELS) -> torch.Tensor:
    """Пустой кэш на `levels` уровней: `2**levels - 1` узлов со значением -1."""
    return torch.full(((1 << levels) - 1,), -1, dtype=torch.int64)


def _partition(work: np.ndarray, begin: int, end: int, pivot: int) -> int:
    value = work[pivot]
    work[pivot] = work[begin]
    i = begin + 1
    j = end - 1
    while i < j:
        while i < j and work[j] > value:
            j -= 1
        while i < j and work[i] < value:
            i += 1
        if i < j:
            work[i], work[j] = work[j], work[i]
            i += 1
            j -= 1

    if i >= end or work[i] > value:
        i -= 1
    work[begin] = work[i]
    work[i] = value
    return i


def partition(work: ArrayLike, begin: int, end: int, pivot: int) -> int:
    """Разбивает срез `work[begin:end]` вокруг элемента `work[pivot]`.

    Слева оказываются элементы не больше опорного, справа не меньше.
    Опорное значение копируется заранее, поэтому перестановки его не
    портят. Возвращает итоговую позицию опорного элемента.
    """
    return _partition(_as_work_buffer(work), begin, end, pivot)


class KthSelector:
    """Выбор k-го по величине элемента рабочего массива.

    Args:
        pivoting: имя зарегистрированной стратегии ("median_of_3",
            "central", "random") или экземпляр PivotingStrategy.
    """

    def __init__(self, pivoting: Union[str, PivotingStrategy] = "median_of_3"):
        self._pivoting_strategy = get_strategy(pivoting)

    @property
    def pivoting_strategy(self) -> PivotingStrategy:
        return self._pivoting_strategy

    def select(self, work: ArrayLike, pivots_heap: Optional[ArrayLike], k: int) -> float:
        """Возвращает k-й (с нуля) наименьший элемент `work`.

        `pivots_heap` может быть None, тогда кэш не используется.
        Ранг k не проверяется: `0 <= k < len(work)` обеспечивает вызывающий.
        """
        buf = _as_work_buffer(work)
        heap = None if pivots_heap is None else _as_heap_buffer(pivots_heap)
        use_heap = heap is not None

        begin = 0
        end = len(buf)
        node = 0
        while end - begin > MIN_SELECT_SIZE:
            if use_heap and node < len(heap) and heap[node] >= 0:
                # массив уже разбит вокруг этого элемента прошлым вызовом
                pivot = int(heap[node])
            else:
                pivot = _partition(buf, begin, end, self._pivoting_strategy.pivot_index(buf, begin, end))
                if use_heap and node < len(heap):
                    heap[node] = pivot

            if k == pivot:
                return float(buf[k])
            # узлы за концом кэша просто не кэшируются, ограничивать node не нужно
            if k < pivot:
                end = pivot
                node = 2 * node + 1
            else:
                begin = pivot + 1
                node = 2 * node + 2

        buf[begin:end].sort()
        return float(buf[k])

    def __repr__(self) -> str:
        return f"KthSelector(pivoting={self._pivoting_strategy!r})"


def select(
    work: ArrayLike,
    pivots_heap: Optional[ArrayLike],
    k: int,
    pivoting: Union[str, PivotingStrategy] = "median_of_3",
) -> float:
    """Короткая форма `KthSelector(pivoting).select(work, pivots_heap, k)`."""
    return KthSelector(pivoting).select(work, pivots_heap, k)
