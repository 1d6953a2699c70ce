"""
Schemas Pydantic per il Partitario Dipendente
Progetto: Fuel Station Manager (Gestionale Distributore)

Il partitario non è persistito: è ricostruito a richiesta da stipendi
calcolati (accrediti) e pagamenti (addebiti).
"""

import uuid
from datetime import date, datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.enums import LedgerDirection, LedgerSourceType, PaymentMethod


class LedgerEntry(BaseModel):
    """Riga del partitario con il saldo progressivo dopo la riga stessa."""

    model_config = ConfigDict(frozen=True)

    date_time: datetime
    direction: LedgerDirection
    action: str = Field(..., description="'Salary Calculated' o 'Payment Made'")
    amount: Decimal
    credit_amount: Decimal
    debit_amount: Decimal
    balance: Decimal = Field(..., description="Saldo progressivo")
    description: str
    source_type: LedgerSourceType
    source_id: uuid.UUID
    reference_number: Optional[str] = None
    payment_method: Optional[PaymentMethod] = None


class LedgerSummary(BaseModel):
    """
    Riepilogo del partitario.

    closing_balance = opening_balance + total_salaries_till_date
    - total_payments_till_date
    """

    model_config = ConfigDict(frozen=True)

    opening_balance: Decimal
    opening_balance_date: Optional[date] = None
    total_salaries_before: Decimal
    total_payments_before: Decimal
    balance_before: Decimal
    total_salaries_in_range: Decimal
    total_payments_in_range: Decimal
    total_salaries_till_date: Decimal
    total_payments_till_date: Decimal
    closing_balance: Decimal


class LedgerStatement(BaseModel):
    model_config = ConfigDict(frozen=True)

    worker_id: uuid.UUID
    from_date: date
    to_date: date
    entries: list[LedgerEntry]
    summary: LedgerSummary
