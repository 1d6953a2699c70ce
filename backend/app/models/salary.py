"""
Modelli SQLAlchemy per Stipendi e Pagamenti
Progetto: Fuel Station Manager (Gestionale Distributore)

I conteggi stipendio sono prodotti dal payroll esterno; qui servono
come accrediti del partitario. I pagamenti sono gli addebiti.
"""


from __future__ import annotations
import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    Date,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    Uuid,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import EntryByMixin, TimestampMixin, UUIDMixin
from app.schemas.enums import PaymentMethod


class CalculatedSalary(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Stipendio calcolato per un periodo.

    Immutabile una volta creato, salvo correzioni amministrative.
    """

    __tablename__ = "calculated_salaries"

    worker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workers.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Dipendente",
    )

    from_date: Mapped[date] = mapped_column(Date, nullable=False)
    to_date: Mapped[date] = mapped_column(Date, nullable=False)

    calculation_date: Mapped[date] = mapped_column(
        Date,
        nullable=False,
        doc="Data del calcolo (posiziona l'accredito nel partitario)",
    )

    total_days: Mapped[int] = mapped_column(Integer, nullable=False, default=0)

    net_salary: Mapped[Decimal] = mapped_column(
        Numeric(17, 2),
        nullable=False,
        doc="Netto da corrispondere",
    )

    __table_args__ = (
        CheckConstraint("to_date >= from_date", name="ck_calculated_salaries_period"),
        Index("ix_calculated_salaries_worker_date", "worker_id", "calculation_date"),
    )

    def __repr__(self) -> str:
        return (
            f"<CalculatedSalary(worker_id={self.worker_id}, "
            f"{self.from_date}..{self.to_date}, net={self.net_salary})>"
        )


class SalaryPayment(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Pagamento a un dipendente.

    Senza calculated_salary_id è un anticipo (anche quelli generati
    automaticamente per un ammanco di cassa).
    """

    __tablename__ = "salary_payments"

    worker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workers.id", ondelete="RESTRICT"),
        nullable=False,
        doc="Dipendente",
    )

    amount: Mapped[Decimal] = mapped_column(Numeric(17, 2), nullable=False)

    payment_date: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Data/ora del pagamento",
    )

    calculated_salary_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("calculated_salaries.id", ondelete="SET NULL"),
        nullable=True,
        doc="Stipendio saldato (None = anticipo)",
    )

    reference_number: Mapped[Optional[str]] = mapped_column(String(50), nullable=True)

    payment_method: Mapped[PaymentMethod] = mapped_column(
        SAEnum(PaymentMethod, name="payment_method", native_enum=False, length=20),
        nullable=False,
        default=PaymentMethod.CASH,
    )

    notes: Mapped[Optional[str]] = mapped_column(Text, nullable=True)

    __table_args__ = (
        CheckConstraint("amount >= 0", name="ck_salary_payments_amount_positive"),
        Index("ix_salary_payments_worker_date", "worker_id", "payment_date"),
    )

    @property
    def is_advance(self) -> bool:
        return self.calculated_salary_id is None

    def __repr__(self) -> str:
        return f"<SalaryPayment(worker_id={self.worker_id}, amount={self.amount})>"
