"""ddkit._pivoting
==================
Стратегии выбора опорного элемента для KthSelector.

Стратегии регистрируются декоратором @register_strategy и доступны
по имени через PIVOTING_STRATEGIES: "median_of_3", "central", "random".
"""

from __future__ import annotations

from typing import Dict, Optional, Type, Union

import torch

__all__ = [
    "PIVOTING_STRATEGIES",
    "register_strategy",
    "verify_values",
    "PivotingStrategy",
    "MedianOf3PivotingStrategy",
    "CentralPivotingStrategy",
    "RandomPivotingStrategy",
    "get_strategy",
]

# Заполняется декоратором @register_strategy
PIVOTING_STRATEGIES: Dict[str, Type["PivotingStrategy"]] = {}


def register_strategy(name: str):
    """Декоратор для регистрации стратегии под коротким именем."""
    def decorator(cls):
        PIVOTING_STRATEGIES[name] = cls
        cls.name = name
        return cls
    return decorator


def verify_values(work, begin: int, length: int, allow_empty: bool = False) -> bool:
    """Проверяет, что `[begin, begin + length)`: допустимый срез `work`.

    Возвращает False для пустого среза (если пустые не разрешены).
    """
    if work is None:
        raise ValueError("input array must not be None")
    if begin < 0:
        raise ValueError(f"start position ({begin}) must be non-negative")
    if length < 0:
        raise ValueError(f"length ({length}) must be non-negative")
    if begin + length > len(work):
        raise ValueError(f"subarray ends after array end: {begin + length} > {len(work)}")
    return length != 0 or allow_empty


class PivotingStrategy:
    """Выбирает индекс опорного элемента в срезе `work[begin:end]`."""

    name = ""

    def pivot_index(self, work, begin: int, end: int) -> int:
        raise NotImplementedError

    def __repr__(self) -> str:
        return f"{type(self).__name__}()"


@register_strategy("median_of_3")
class MedianOf3PivotingStrategy(PivotingStrategy):
    """Медиана первого, среднего и последнего элементов среза."""

    def pivot_index(self, work, begin: int, end: int) -> int:
        verify_values(work, begin, end - begin)
        inclusive_end = end - 1
        middle = begin + (inclusive_end - begin) // 2
        w_begin = work[begin]
        w_middle = work[middle]
        w_end = work[inclusive_end]

        if w_begin < w_middle:
            if w_middle < w_end:
                return middle
            return inclusive_end if w_begin < w_end else begin
        if w_begin < w_end:
            return begin
        return inclusive_end if w_middle < w_end else middle


@register_strategy("central")
class CentralPivotingStrategy(PivotingStrategy):
    """Середина среза."""

    def pivot_index(self, work, begin: int, end: int) -> int:
        verify_values(work, begin, end - begin)
        return begin + (end - begin) // 2


@register_strategy("random")
class RandomPivotingStrategy(PivotingStrategy):
    """Равномерно случайный индекс из `[begin, end - 2]`.

    Генератор можно передать явно или задать `seed` для воспроизводимости.
    """

    def __init__(self, generator: Optional[torch.Generator] = None, seed: Optional[int] = None):
        if generator is None:
            generator = torch.Generator()
            if seed is not None:
                generator.manual_seed(seed)
            else:
                generator.seed()
        self.generator = generator

    def pivot_index(self, work, begin: int, end: int) -> int:
        verify_values(work, begin, end - begin)
        bound = end - begin - 1
        if bound <= 0:
            raise ValueError(f"bound must be positive, got {bound}")
        return begin + int(torch.randint(bound, (1,), generator=self.generator).item())


def get_strategy(pivoting: Union[str, PivotingStrategy]) -> PivotingStrategy:
    """Возвращает экземпляр стратегии по имени или сам переданный экземпляр."""
    if isinstance(pivoting, PivotingStrategy):
        return pivoting
    if isinstance(pivoting, str):
        try:
            return PIVOTING_STRATEGIES[pivoting]()
        except KeyError:
            known = ", ".join(sorted(PIVOTING_STRATEGIES))
            raise ValueError(f"Unknown pivoting strategy {pivoting!r}, expected one of: {known}") from None
    raise TypeError(f"pivoting must be a strategy name or PivotingStrategy, got {type(pivoting).__name__}")
