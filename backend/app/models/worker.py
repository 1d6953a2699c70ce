"""
Modello SQLAlchemy per i Dipendenti
Progetto: Fuel Station Manager (Gestionale Distributore)

L'anagrafica utenti è gestita altrove; qui serve solo ciò che
usano turni e partitario (ruolo e saldo iniziale).
"""

from __future__ import annotations
from datetime import date
from decimal import Decimal
from typing import Optional

from sqlalchemy import Date, Enum as SAEnum, Numeric, String
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import TimestampMixin, UUIDMixin
from app.schemas.enums import Role


class Worker(Base, UUIDMixin, TimestampMixin):
    """
    Dipendente del distributore (gestore, manager, amministratore).

    Attributes:
        username: Nome utente
        role: Ruolo operativo
        opening_balance: Saldo iniziale del partitario stipendi
        opening_balance_date: Data di riferimento del saldo iniziale
    """

    __tablename__ = "workers"

    username: Mapped[str] = mapped_column(
        String(100),
        nullable=False,
        unique=True,
        doc="Nome utente",
    )

    role: Mapped[Role] = mapped_column(
        SAEnum(Role, name="worker_role", native_enum=False, length=20),
        nullable=False,
        default=Role.SALESMAN,
        doc="Ruolo operativo",
    )

    opening_balance: Mapped[Decimal] = mapped_column(
        Numeric(17, 2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Saldo iniziale del partitario (positivo = dovuto al dipendente)",
    )

    opening_balance_date: Mapped[Optional[date]] = mapped_column(
        Date,
        nullable=True,
        doc="Data di riferimento del saldo iniziale",
    )

    def __repr__(self) -> str:
        return f"<Worker(id={self.id}, username='{self.username}', role={self.role})>"
