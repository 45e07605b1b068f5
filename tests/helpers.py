import torch
from mpmath import mp
from typing import List

from ddkit import DoubleDouble

mp.dps = 60 # с запасом выше ~76 бит расщеплённой пары


def dd(hi: float, lo: float = 0.0) -> DoubleDouble:
    """Вспомогательная функция для создания пары из двух float."""
    return DoubleDouble(torch.tensor(hi, dtype=torch.float64), torch.tensor(lo, dtype=torch.float64))


def dd_to_mp(x: DoubleDouble) -> mp.mpf:
    """Точная сумма компонентов скалярной пары."""
    return mp.mpf(x.hi.item()) + mp.mpf(x.lo.item())


def dd_to_mp_values(x: DoubleDouble) -> List[mp.mpf]:
    """Точные значения каждого элемента пары тензоров, плоским списком."""
    return [mp.mpf(h) + mp.mpf(l) for h, l in zip(x.hi.flatten().tolist(), x.lo.flatten().tolist())]


def rel_err(actual: mp.mpf, expected: mp.mpf) -> mp.mpf:
    if expected == 0:
        return abs(actual)
    return abs((actual - expected) / expected)
