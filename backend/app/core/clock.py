"""
Orari del distributore
Progetto: Fuel Station Manager (Gestionale Distributore)

Gli orari di business (turni, erogatori, pagamenti) sono salvati come
ora locale del distributore, senza offset. Un orario con offset ricevuto
dai client viene convertito nel fuso del distributore e reso naive,
così che i confronti avvengano sempre tra valori omogenei.
"""

from datetime import datetime
from typing import Optional
from zoneinfo import ZoneInfo

from app.core.config import get_settings


def station_zone(timezone_name: Optional[str] = None) -> ZoneInfo:
    """Fuso orario del distributore (default da configurazione)."""
    return ZoneInfo(timezone_name or get_settings().station_timezone)


def station_now(timezone_name: Optional[str] = None) -> datetime:
    """Ora corrente del distributore, senza offset."""
    return datetime.now(station_zone(timezone_name)).replace(tzinfo=None)


def to_station_time(
    value: Optional[datetime],
    timezone_name: Optional[str] = None,
) -> Optional[datetime]:
    """
    Porta un orario all'ora locale del distributore, senza offset.

    Args:
        value: Orario ricevuto (None resta None)
        timezone_name: Fuso del distributore (default da configurazione)

    Returns:
        L'orario naive; un valore già naive è considerato ora locale
        e restituito invariato
    """
    if value is None or value.tzinfo is None or value.utcoffset() is None:
        return value
    return value.astimezone(station_zone(timezone_name)).replace(tzinfo=None)
