"""
Modelli SQLAlchemy per i Turni
Progetto: Fuel Station Manager (Gestionale Distributore)

 Contiene:
- Shift: Turno di lavoro di un gestore
- CreditBill: Buono a credito emesso durante il turno
- ShiftPayment: Incasso registrato nel turno (es. saldo cliente)
- ShiftExpense: Spesa pagata dalla cassa del turno

I figli referenziano il turno solo tramite foreign key: gli aggregati
si ottengono interrogando i repository.
"""


from __future__ import annotations
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Numeric,
    String,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import EntryByMixin, TimestampMixin, UUIDMixin
from app.schemas.enums import ShiftStatus


class Shift(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Turno di un gestore.

    States:
        OPEN → CLOSED

    Un turno chiuso è idoneo alla contabilità una sola volta
    (flag is_accounting_done).
    """

    __tablename__ = "shifts"

    worker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Gestore del turno",
    )

    start_datetime: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Inizio turno",
    )

    end_datetime: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        doc="Fine turno",
    )

    opening_cash: Mapped[Decimal] = mapped_column(
        Numeric(17, 2),
        nullable=False,
        default=Decimal("0.00"),
        doc="Fondo cassa iniziale",
    )

    status: Mapped[ShiftStatus] = mapped_column(
        SAEnum(ShiftStatus, name="shift_status", native_enum=False, length=10),
        nullable=False,
        default=ShiftStatus.OPEN,
        index=True,
        doc="Stato del turno",
    )

    is_accounting_done: Mapped[bool] = mapped_column(
        Boolean,
        nullable=False,
        default=False,
        doc="Contabilità del turno già registrata",
    )

    __table_args__ = (
        CheckConstraint("opening_cash >= 0", name="ck_shifts_opening_cash_positive"),
    )

    @property
    def is_open(self) -> bool:
        return self.status == ShiftStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == ShiftStatus.CLOSED

    def __repr__(self) -> str:
        return f"<Shift(id={self.id}, worker_id={self.worker_id}, status={self.status})>"


class CreditBill(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """Buono carburante a credito: riduce il contante atteso."""

    __tablename__ = "credit_bills"

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    net_amount: Mapped[Decimal] = mapped_column(
        Numeric(17, 2),
        nullable=False,
        doc="Importo netto del buono",
    )

    bill_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    reference: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Numero buono / cliente",
    )

    __table_args__ = (
        CheckConstraint("net_amount >= 0", name="ck_credit_bills_amount_positive"),
    )


class ShiftPayment(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """Incasso ricevuto durante il turno: aumenta il contante atteso."""

    __tablename__ = "shift_payments"

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(17, 2), nullable=False)

    payment_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    reference: Mapped[Optional[str]] = mapped_column(String(100), nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_shift_payments_amount_positive"),
    )


class ShiftExpense(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """Spesa pagata dalla cassa del turno."""

    __tablename__ = "shift_expenses"

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(17, 2), nullable=False)

    expense_date: Mapped[datetime] = mapped_column(DateTime, nullable=False)

    remarks: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_shift_expenses_amount_positive"),
    )
