"""
Schemas Pydantic per Assegnazioni Erogatore e Test
Progetto: Fuel Station Manager (Gestionale Distributore)

Contiene:
- Richieste di apertura/chiusura assegnazione
- AssignmentSummary: valori catturati alla chiusura
- Schemas per NozzleTest
"""

import uuid
from datetime import datetime
from decimal import Decimal
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.enums import AssignmentStatus


# -------------------------------------------------------------------
# Richieste
# -------------------------------------------------------------------

class NozzleAssignmentOpen(BaseModel):
    """Apertura di un'assegnazione erogatore su un turno."""

    nozzle_id: uuid.UUID = Field(..., description="Erogatore da assegnare")
    worker_id: uuid.UUID = Field(..., description="Gestore (deve coincidere con quello del turno)")
    opening_balance: Decimal = Field(..., description="Lettura totalizzatore all'apertura")
    start_time: Optional[datetime] = Field(
        None,
        description="Orario di inizio (solo manager/admin, default adesso)",
    )


class NozzleAssignmentClose(BaseModel):
    """Chiusura di un'assegnazione."""

    closing_balance: Decimal = Field(..., description="Lettura totalizzatore alla chiusura")
    end_time: Optional[datetime] = Field(
        None,
        description="Orario di fine (solo manager/admin, default adesso)",
    )


# -------------------------------------------------------------------
# Risposte
# -------------------------------------------------------------------

class NozzleAssignmentRead(BaseModel):
    """Schema per la lettura di un'assegnazione."""

    id: uuid.UUID
    nozzle_id: uuid.UUID
    worker_id: uuid.UUID
    shift_id: uuid.UUID
    start_time: datetime
    end_time: Optional[datetime] = None
    opening_balance: Decimal
    closing_balance: Optional[Decimal] = None
    status: AssignmentStatus
    dispensed_amount: Optional[Decimal] = None
    total_amount: Optional[Decimal] = None
    unit_price: Optional[Decimal] = None
    entry_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)


class AssignmentSummary(BaseModel):
    """
    Valori di un'assegnazione catturati nel momento della chiusura.

    È un valore immutabile: non si aggiorna se la riga a DB cambia.
    """

    model_config = ConfigDict(frozen=True)

    assignment_id: uuid.UUID
    nozzle_id: uuid.UUID
    worker_id: uuid.UUID
    shift_id: uuid.UUID
    start_time: datetime
    end_time: datetime
    opening_balance: Decimal = Field(..., description="Lettura apertura (3 decimali)")
    closing_balance: Decimal = Field(..., description="Lettura chiusura (3 decimali)")
    dispensed_amount: Decimal = Field(..., description="Volume erogato (3 decimali)")
    unit_price: Decimal = Field(..., description="Prezzo unitario usato (2 decimali)")
    total_amount: Decimal = Field(..., description="Incasso teorico (2 decimali)")
    status: AssignmentStatus = AssignmentStatus.CLOSED


# -------------------------------------------------------------------
# Schemas per NozzleTest
# -------------------------------------------------------------------

class NozzleTestCreate(BaseModel):
    """Registrazione di un test erogatore."""

    assignment_id: uuid.UUID = Field(..., description="Assegnazione aperta dell'erogatore")
    test_quantity: Decimal = Field(..., description="Quantità di prova")
    test_datetime: Optional[datetime] = Field(None, description="Data/ora del test")
    remarks: Optional[str] = Field(None, max_length=500)


class NozzleTestRead(BaseModel):
    id: uuid.UUID
    shift_id: uuid.UUID
    assignment_id: uuid.UUID
    test_datetime: datetime
    test_quantity: Decimal
    remarks: Optional[str] = None
    entry_by: Optional[str] = None

    model_config = ConfigDict(from_attributes=True)
