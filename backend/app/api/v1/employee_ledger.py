"""
Router FastAPI per il Partitario Dipendente
Progetto: Fuel Station Manager (Gestionale Distributore)
"""

import uuid
from datetime import date
from decimal import Decimal
from typing import Optional

from fastapi import APIRouter, Path, Query
from pydantic import BaseModel

from app.core.clock import station_now
from app.core.deps import CurrentActor, EmployeeLedgerServiceDep
from app.schemas.employee_ledger import LedgerStatement

router = APIRouter(
    prefix="/workers/{worker_id}",
    tags=["Partitario Dipendente"],
)


class WorkerBalance(BaseModel):
    worker_id: uuid.UUID
    as_of: date
    balance: Decimal


@router.get(
    "/ledger",
    name="partitario",
    summary="Partitario stipendi/pagamenti del dipendente",
    response_model=LedgerStatement,
)
async def get_ledger(
    actor: CurrentActor,
    service: EmployeeLedgerServiceDep,
    worker_id: uuid.UUID = Path(..., description="UUID del dipendente"),
    from_date: date = Query(..., description="Data iniziale (inclusa)"),
    to_date: date = Query(..., description="Data finale (inclusa)"),
) -> LedgerStatement:
    return await service.build_ledger(actor, worker_id, from_date, to_date)


@router.get(
    "/balance",
    name="saldo_dipendente",
    summary="Saldo del dipendente a fine giornata",
    response_model=WorkerBalance,
)
async def get_balance(
    actor: CurrentActor,
    service: EmployeeLedgerServiceDep,
    worker_id: uuid.UUID = Path(..., description="UUID del dipendente"),
    as_of: Optional[date] = Query(None, description="Data di riferimento (default oggi)"),
) -> WorkerBalance:
    as_of = as_of or station_now().date()
    balance = await service.current_balance(actor, worker_id, as_of)
    return WorkerBalance(worker_id=worker_id, as_of=as_of, balance=balance)
