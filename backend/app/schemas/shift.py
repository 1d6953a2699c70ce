"""
Schemas Pydantic per i Turni
Progetto: Fuel Station Manager (Gestionale Distributore)

Contiene:
- Richieste di apertura/chiusura turno
- ShiftTotals: aggregati calcolati sempre al volo
- Schemas per buoni a credito, incassi e spese
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, computed_field

from app.schemas.enums import ShiftStatus


# -------------------------------------------------------------------
# Turno
# -------------------------------------------------------------------

class ShiftStart(BaseModel):
    """Apertura di un turno."""

    worker_id: uuid.UUID = Field(..., description="Gestore del turno")
    opening_cash: Decimal = Field(Decimal("0.00"), description="Fondo cassa iniziale")
    start_datetime: Optional[datetime] = Field(
        None,
        description="Inizio turno (solo manager/admin, default adesso)",
    )


class ShiftClose(BaseModel):
    end_datetime: Optional[datetime] = Field(
        None,
        description="Fine turno (solo manager/admin, default adesso)",
    )


class ShiftRead(BaseModel):
    """Schema per la lettura di un turno."""

    id: uuid.UUID
    worker_id: uuid.UUID
    start_datetime: datetime
    end_datetime: Optional[datetime] = None
    opening_cash: Decimal
    status: ShiftStatus
    is_accounting_done: bool
    entry_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class ShiftTotals(BaseModel):
    """
    Aggregati di un turno.

    Non sono mai memorizzati: la contabilità ne copia una fotografia.

    Attributes:
        gross_fuel_sales: Σ incassi delle assegnazioni chiuse
        test_value: valore del carburante di prova (stesso prezzo)
        fuel_sales: gross_fuel_sales - test_value
    """

    model_config = ConfigDict(frozen=True)

    shift_id: uuid.UUID
    gross_fuel_sales: Decimal
    test_value: Decimal
    fuel_sales: Decimal
    total_dispensed: Decimal
    total_test_quantity: Decimal
    credit: Decimal
    payments: Decimal
    expenses: Decimal
    open_nozzle_count: int
    closed_nozzle_count: int

    @computed_field
    @property
    def is_complete(self) -> bool:
        """Turno completo: nessun erogatore ancora aperto."""
        return self.open_nozzle_count == 0


# -------------------------------------------------------------------
# Movimenti del turno
# -------------------------------------------------------------------

class CreditBillCreate(BaseModel):
    net_amount: Decimal = Field(..., description="Importo netto del buono")
    bill_date: Optional[datetime] = None
    reference: Optional[str] = Field(None, max_length=100)


class ShiftPaymentCreate(BaseModel):
    amount: Decimal = Field(..., description="Importo incassato")
    payment_date: Optional[datetime] = None
    reference: Optional[str] = Field(None, max_length=100)


class ShiftExpenseCreate(BaseModel):
    amount: Decimal = Field(..., description="Importo della spesa")
    expense_date: Optional[datetime] = None
    remarks: Optional[str] = Field(None, max_length=500)


class CreditBillRead(CreditBillCreate):
    id: uuid.UUID
    shift_id: uuid.UUID
    bill_date: datetime

    model_config = ConfigDict(from_attributes=True)


class ShiftPaymentRead(ShiftPaymentCreate):
    id: uuid.UUID
    shift_id: uuid.UUID
    payment_date: datetime

    model_config = ConfigDict(from_attributes=True)


class ShiftExpenseRead(ShiftExpenseCreate):
    id: uuid.UUID
    shift_id: uuid.UUID
    expense_date: datetime

    model_config = ConfigDict(from_attributes=True)
