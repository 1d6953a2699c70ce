"""
Aritmetica decimale per importi e volumi
Progetto: Fuel Station Manager (Gestionale Distributore)

Importi in valuta a 2 decimali, volumi carburante a 3 decimali.
Ogni cambio di scala arrotonda ROUND_HALF_UP. Mai float.
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, Optional, Union

MONEY_QUANT = Decimal("0.01")
VOLUME_QUANT = Decimal("0.001")

ZERO_MONEY = Decimal("0.00")
ZERO_VOLUME = Decimal("0.000")

Number = Union[Decimal, int, str]


def _as_decimal(value: Number) -> Decimal:
    if isinstance(value, float):
        raise TypeError("Gli importi non possono essere float")
    if isinstance(value, Decimal):
        return value
    return Decimal(str(value))


def to_money(value: Optional[Number]) -> Decimal:
    """Porta un valore a 2 decimali (None → 0.00)."""
    if value is None:
        return ZERO_MONEY
    return _as_decimal(value).quantize(MONEY_QUANT, rounding=ROUND_HALF_UP)


def to_volume(value: Optional[Number]) -> Decimal:
    """Porta un volume a 3 decimali (None → 0.000)."""
    if value is None:
        return ZERO_VOLUME
    return _as_decimal(value).quantize(VOLUME_QUANT, rounding=ROUND_HALF_UP)


def sum_money(values: Iterable[Optional[Number]]) -> Decimal:
    """Somma importi, arrotondando il risultato a 2 decimali."""
    return to_money(sum((_as_decimal(v) for v in values if v is not None), ZERO_MONEY))


def sum_volume(values: Iterable[Optional[Number]]) -> Decimal:
    """Somma volumi, arrotondando il risultato a 3 decimali."""
    return to_volume(sum((_as_decimal(v) for v in values if v is not None), ZERO_VOLUME))
