"""
Modelli SQLAlchemy per Erogatori e Assegnazioni
Progetto: Fuel Station Manager (Gestionale Distributore)

 Contiene:
- Nozzle: Erogatore (pistola) collegato a un prodotto
- NozzleAssignment: Periodo in cui un gestore controlla un erogatore
- NozzleTest: Prelievo di prova, escluso dalle vendite
"""


from __future__ import annotations
import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from sqlalchemy import (
    CheckConstraint,
    DateTime,
    Enum as SAEnum,
    ForeignKey,
    Index,
    Numeric,
    String,
    Uuid,
    text,
)
from sqlalchemy.orm import Mapped, mapped_column

from app.models import Base
from app.models.mixins import EntryByMixin, TimestampMixin, UUIDMixin
from app.schemas.enums import AssignmentStatus


class Nozzle(Base, UUIDMixin, TimestampMixin):
    """
    Erogatore fisico che preleva da un serbatoio.

    Attributes:
        name: Nome dell'erogatore (es. "P1-N2")
        product_id: Prodotto erogato, usato per risolvere il prezzo
        current_reading: Ultima lettura totalizzatore registrata
        previous_reading: Lettura precedente
    """

    __tablename__ = "nozzles"

    name: Mapped[str] = mapped_column(
        String(50),
        nullable=False,
        doc="Nome dell'erogatore",
    )

    product_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        nullable=False,
        index=True,
        doc="Prodotto erogato (catalogo esterno)",
    )

    current_reading: Mapped[Decimal] = mapped_column(
        Numeric(15, 3),
        nullable=False,
        default=Decimal("0.000"),
        doc="Ultima lettura totalizzatore",
    )

    previous_reading: Mapped[Decimal] = mapped_column(
        Numeric(15, 3),
        nullable=False,
        default=Decimal("0.000"),
        doc="Lettura totalizzatore precedente",
    )

    def __repr__(self) -> str:
        return f"<Nozzle(id={self.id}, name='{self.name}')>"


class NozzleAssignment(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Assegnazione di un erogatore a un gestore all'interno di un turno.

    I valori erogato/incasso sono calcolati e congelati alla chiusura,
    insieme al prezzo unitario usato: variazioni di prezzo successive
    non modificano un'assegnazione chiusa.

    States:
        OPEN → CLOSED (terminale, nessuna riapertura)
    """

    __tablename__ = "nozzle_assignments"

    # ------------------------------------------------------------
    # Colonne Relazioni
    # ------------------------------------------------------------
    nozzle_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("nozzles.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Erogatore assegnato",
    )

    worker_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("workers.id", ondelete="RESTRICT"),
        nullable=False,
        index=True,
        doc="Gestore che controlla l'erogatore",
    )

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Turno di appartenenza",
    )

    # ------------------------------------------------------------
    # Colonne Stato e Letture
    # ------------------------------------------------------------
    start_time: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Inizio assegnazione",
    )

    end_time: Mapped[Optional[datetime]] = mapped_column(
        DateTime,
        nullable=True,
        doc="Fine assegnazione (valorizzata alla chiusura)",
    )

    opening_balance: Mapped[Decimal] = mapped_column(
        Numeric(15, 3),
        nullable=False,
        doc="Lettura totalizzatore all'apertura",
    )

    closing_balance: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(15, 3),
        nullable=True,
        doc="Lettura totalizzatore alla chiusura",
    )

    status: Mapped[AssignmentStatus] = mapped_column(
        SAEnum(AssignmentStatus, name="assignment_status", native_enum=False, length=10),
        nullable=False,
        default=AssignmentStatus.OPEN,
        index=True,
        doc="Stato dell'assegnazione",
    )

    # ------------------------------------------------------------
    # Valori congelati alla chiusura
    # ------------------------------------------------------------
    dispensed_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(15, 3),
        nullable=True,
        doc="Volume erogato (chiusura - apertura)",
    )

    total_amount: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(17, 2),
        nullable=True,
        doc="Incasso teorico (erogato x prezzo)",
    )

    unit_price: Mapped[Optional[Decimal]] = mapped_column(
        Numeric(12, 2),
        nullable=True,
        doc="Prezzo unitario risolto alla chiusura",
    )

    __table_args__ = (
        CheckConstraint("opening_balance >= 0", name="ck_nozzle_assignments_opening_positive"),
        CheckConstraint(
            "closing_balance IS NULL OR closing_balance >= opening_balance",
            name="ck_nozzle_assignments_closing_gte_opening",
        ),
        # Al più un'assegnazione aperta per erogatore
        Index(
            "uq_nozzle_assignments_open_nozzle",
            "nozzle_id",
            unique=True,
            postgresql_where=text("status = 'OPEN'"),
            sqlite_where=text("status = 'OPEN'"),
        ),
    )

    @property
    def is_open(self) -> bool:
        return self.status == AssignmentStatus.OPEN

    @property
    def is_closed(self) -> bool:
        return self.status == AssignmentStatus.CLOSED

    def __repr__(self) -> str:
        return (
            f"<NozzleAssignment(id={self.id}, nozzle_id={self.nozzle_id}, "
            f"status={self.status})>"
        )


class NozzleTest(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Test di un erogatore durante il turno.

    Il carburante di prova viene rimesso nel serbatoio: compare sul
    totalizzatore ma non va contato come vendita.
    """

    __tablename__ = "nozzle_tests"

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Turno in cui è stato eseguito il test",
    )

    assignment_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("nozzle_assignments.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
        doc="Assegnazione dell'erogatore testato",
    )

    test_datetime: Mapped[datetime] = mapped_column(
        DateTime,
        nullable=False,
        doc="Data/ora del test",
    )

    test_quantity: Mapped[Decimal] = mapped_column(
        Numeric(15, 3),
        nullable=False,
        doc="Quantità prelevata per il test",
    )

    remarks: Mapped[Optional[str]] = mapped_column(
        String(500),
        nullable=True,
        doc="Note",
    )

    __table_args__ = (
        CheckConstraint("test_quantity >= 0", name="ck_nozzle_tests_quantity_positive"),
    )
