"""ddkit._errors
================
Исключения, которые библиотека выбрасывает сама.

Численное ядро их не использует: ошибки здесь только для
диагностического вывода таблиц и проверок аргументов.
"""

from __future__ import annotations

__all__ = ["DimensionMismatchError", "OutOfRangeError"]


class DimensionMismatchError(ValueError):
    """Длина массива не совпадает с ожидаемой."""

    def __init__(self, wrong: int, expected: int):
        super().__init__(f"{wrong} != {expected}")
        self.wrong = wrong
        self.expected = expected


class OutOfRangeError(ValueError):
    """Значение вне допустимого диапазона `[lo, hi]`."""

    def __init__(self, value, lo, hi):
        super().__init__(f"{value} out of [{lo}, {hi}] range")
        self.value = value
        self.lo = lo
        self.hi = hi
