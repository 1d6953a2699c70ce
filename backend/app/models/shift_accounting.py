"""
Modello SQLAlchemy per la Contabilità di Turno
Progetto: Fuel Station Manager (Gestionale Distributore)

Riconciliazione tra contante dichiarato e contante atteso.
I totali del turno sono copiati alla creazione e non vengono più
ricalcolati, salvo un aggiornamento esplicito.
"""


from __future__ import annotations
import uuid
from decimal import Decimal
from typing import Optional

from sqlalchemy import CheckConstraint, ForeignKey, Integer, Numeric, UniqueConstraint, Uuid
from sqlalchemy.orm import Mapped, mapped_column

from app.core.config import DENOMINATION_COLUMNS
from app.models import Base
from app.models.mixins import EntryByMixin, TimestampMixin, UUIDMixin


def _money(doc: str) -> Mapped[Decimal]:
    return mapped_column(Numeric(17, 2), nullable=False, default=Decimal("0.00"), doc=doc)


def _count(doc: str) -> Mapped[int]:
    return mapped_column(Integer, nullable=False, default=0, doc=doc)


class ShiftAccounting(Base, UUIDMixin, TimestampMixin, EntryByMixin):
    """
    Contabilità di un turno chiuso (al più una per turno).

    Attributes:
        opening_cash: Fondo cassa copiato dal turno
        fuel_sales / credit_amount / payments_amount / expenses_amount:
            aggregati del turno congelati alla creazione
        upi_amount / card_amount / fleet_card_amount: incassi elettronici
        notes_* / coins_*: conteggio banconote e monete
        cash_in_hand: Σ conteggio x taglio
        expected_cash: contante atteso
        balance_amount: cash_in_hand - expected_cash (negativo = ammanco)
        advance_payment_id: anticipo generato per un ammanco
    """

    __tablename__ = "shift_accountings"

    shift_id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        ForeignKey("shifts.id", ondelete="CASCADE"),
        nullable=False,
        doc="Turno riconciliato",
    )

    # ------------------------------------------------------------
    # Totali congelati
    # ------------------------------------------------------------
    opening_cash: Mapped[Decimal] = _money("Fondo cassa iniziale")
    fuel_sales: Mapped[Decimal] = _money("Vendite carburante al netto dei test")
    credit_amount: Mapped[Decimal] = _money("Totale buoni a credito")
    payments_amount: Mapped[Decimal] = _money("Totale incassi del turno")
    expenses_amount: Mapped[Decimal] = _money("Totale spese del turno")
    system_received_amount: Mapped[Decimal] = _money("Vendite + incassi")

    # ------------------------------------------------------------
    # Incassi elettronici
    # ------------------------------------------------------------
    upi_amount: Mapped[Decimal] = _money("Incassi UPI")
    card_amount: Mapped[Decimal] = _money("Incassi carta")
    fleet_card_amount: Mapped[Decimal] = _money("Incassi fleet card")

    # ------------------------------------------------------------
    # Conteggio contante
    # ------------------------------------------------------------
    notes_2000: Mapped[int] = _count("Banconote da 2000")
    notes_1000: Mapped[int] = _count("Banconote da 1000")
    notes_500: Mapped[int] = _count("Banconote da 500")
    notes_200: Mapped[int] = _count("Banconote da 200")
    notes_100: Mapped[int] = _count("Banconote da 100")
    notes_50: Mapped[int] = _count("Banconote da 50")
    notes_20: Mapped[int] = _count("Banconote da 20")
    notes_10: Mapped[int] = _count("Banconote da 10")
    coins_5: Mapped[int] = _count("Monete da 5")
    coins_2: Mapped[int] = _count("Monete da 2")
    coins_1: Mapped[int] = _count("Monete da 1")

    # ------------------------------------------------------------
    # Risultato
    # ------------------------------------------------------------
    cash_in_hand: Mapped[Decimal] = _money("Contante contato")
    expected_cash: Mapped[Decimal] = _money("Contante atteso")
    balance_amount: Mapped[Decimal] = _money("Differenza (negativo = ammanco)")

    advance_payment_id: Mapped[Optional[uuid.UUID]] = mapped_column(
        Uuid,
        ForeignKey("salary_payments.id", ondelete="SET NULL"),
        nullable=True,
        doc="Anticipo generato per l'ammanco",
    )

    __table_args__ = (
        UniqueConstraint("shift_id", name="uq_shift_accountings_shift"),
        CheckConstraint(
            " AND ".join(f"{col} >= 0" for col in DENOMINATION_COLUMNS.values()),
            name="ck_shift_accountings_counts_positive",
        ),
        CheckConstraint(
            "upi_amount >= 0 AND card_amount >= 0 AND fleet_card_amount >= 0",
            name="ck_shift_accountings_electronic_positive",
        ),
    )

    def denomination_counts(self) -> dict[int, int]:
        """Conteggi per taglio, nell'ordine dei tagli."""
        return {face: getattr(self, col) or 0 for face, col in DENOMINATION_COLUMNS.items()}

    def __repr__(self) -> str:
        return (
            f"<ShiftAccounting(shift_id={self.shift_id}, "
            f"balance={self.balance_amount})>"
        )
