"""
Modello SQLAlchemy per i Prezzi di vendita
Progetto: Fuel Station Manager (Gestionale Distributore)

Storico dei prezzi unitari per prodotto: il prezzo valido a un certo
istante è quello con effective_from più recente non successivo.
"""

import uuid
from datetime import datetime
from decimal import Decimal

from sqlalchemy import CheckConstraint, DateTime, Index, Numeric, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import EntryByMixin, TimestampMixin, UUIDMixin


class ProductPrice(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """Prezzo unitario di vendita di un prodotto a partire da una data."""

    __tablename__ = "product_prices"

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        doc="Prodotto (catalogo esterno)",
    )

    unit_price: Mapped[Decimal] = mapped_column(
        Numeric(12, 2),
        nullable=False,
        doc="Prezzo per unità di volume",
    )

    effective_from: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Istante da cui il prezzo è valido",
    )

    __table_args__ = (
        CheckConstraint("unit_price >= 0", name="ck_product_prices_unit_price_positive"),
        Index("ix_product_prices_product_effective", "product_id", "effective_from"),
    )
