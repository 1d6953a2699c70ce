"""
Schemas Pydantic per la Contabilità di Turno
Progetto: Fuel Station Manager (Gestionale Distributore)

Contiene:
- ElectronicTotals: incassi UPI / carta / fleet card
- DenominationCounts: conteggio banconote e monete
- ReconciliationRequest: corpo di creazione/aggiornamento
- ReconciliationResult: valori congelati della contabilità
"""

import uuid
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.core.config import DENOMINATION_COLUMNS


class ElectronicTotals(BaseModel):
    """Incassi non in contanti dichiarati dal gestore."""

    upi: Decimal = Field(Decimal("0.00"), description="Totale UPI")
    card: Decimal = Field(Decimal("0.00"), description="Totale carte")
    fleet_card: Decimal = Field(Decimal("0.00"), description="Totale fleet card")


class DenominationCounts(BaseModel):
    """
    Numero di banconote e monete per taglio.

    I tagli non abilitati per il distributore devono restare a zero.
    """

    notes_2000: int = 0
    notes_1000: int = 0
    notes_500: int = 0
    notes_200: int = 0
    notes_100: int = 0
    notes_50: int = 0
    notes_20: int = 0
    notes_10: int = 0
    coins_5: int = 0
    coins_2: int = 0
    coins_1: int = 0

    def by_face_value(self) -> dict[int, int]:
        """Conteggi indicizzati per valore facciale."""
        return {face: getattr(self, col) for face, col in DENOMINATION_COLUMNS.items()}

    @classmethod
    def from_face_values(cls, counts: dict[int, int]) -> "DenominationCounts":
        return cls(**{DENOMINATION_COLUMNS[face]: n for face, n in counts.items()})


class ReconciliationRequest(BaseModel):
    electronic_totals: ElectronicTotals = Field(default_factory=ElectronicTotals)
    denominations: DenominationCounts = Field(default_factory=DenominationCounts)


class ReconciliationResult(BaseModel):
    """
    Contabilità di un turno, così come memorizzata.

    balance = cash_in_hand - expected_cash (positivo = eccedenza,
    negativo = ammanco).
    """

    model_config = ConfigDict(frozen=True)

    shift_id: uuid.UUID
    opening_cash: Decimal
    fuel_sales: Decimal
    credit: Decimal
    payments: Decimal
    expenses: Decimal
    system_received_amount: Decimal
    electronic_totals: ElectronicTotals
    denominations: DenominationCounts
    cash_in_hand: Decimal
    expected_cash: Decimal
    balance: Decimal
    advance_payment_id: Optional[uuid.UUID] = None
    entry_by: Optional[str] = None

    @computed_field
    @property
    def is_shortage(self) -> bool:
        return self.balance < 0

    @classmethod
    def from_model(cls, accounting) -> "ReconciliationResult":
        """Costruisce il risultato dai valori congelati del modello."""
        return cls(
            shift_id=accounting.shift_id,
            opening_cash=accounting.opening_cash,
            fuel_sales=accounting.fuel_sales,
            credit=accounting.credit_amount,
            payments=accounting.payments_amount,
            expenses=accounting.expenses_amount,
            system_received_amount=accounting.system_received_amount,
            electronic_totals=ElectronicTotals(
                upi=accounting.upi_amount,
                card=accounting.card_amount,
                fleet_card=accounting.fleet_card_amount,
            ),
            denominations=DenominationCounts.from_face_values(
                accounting.denomination_counts()
            ),
            cash_in_hand=accounting.cash_in_hand,
            expected_cash=accounting.expected_cash,
            balance=accounting.balance_amount,
            advance_payment_id=accounting.advance_payment_id,
            entry_by=accounting.entry_by,
        )
