"""
Router FastAPI per la Contabilità di Turno
Progetto: Fuel Station Manager (Gestionale Distributore)

Aggiornamento ed eliminazione sono riservati a manager e amministratori.
"""

import uuid

from fastapi import APIRouter, Path, Response, status

from app.core.deps import CurrentActor, ShiftAccountingServiceDep
from app.schemas.shift_accounting import ReconciliationRequest, ReconciliationResult

router = APIRouter(
    prefix="/shifts/{shift_id}/accounting",
    tags=["Contabilità Turno"],
)


@router.post(
    "",
    name="contabilita_creazione",
    summary="Registra la contabilità di un turno chiuso",
    response_model=ReconciliationResult,
    status_code=status.HTTP_201_CREATED,
)
async def create_accounting(
    data: ReconciliationRequest,
    actor: CurrentActor,
    service: ShiftAccountingServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ReconciliationResult:
    return await service.create(actor, shift_id, data.electronic_totals, data.denominations)


@router.get(
    "",
    name="contabilita_dettaglio",
    summary="Contabilità del turno",
    response_model=ReconciliationResult,
)
async def get_accounting(
    actor: CurrentActor,
    service: ShiftAccountingServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ReconciliationResult:
    return await service.get(actor, shift_id)


@router.put(
    "",
    name="contabilita_aggiornamento",
    summary="Ricalcola la contabilità dai dati attuali del turno",
    response_model=ReconciliationResult,
)
async def update_accounting(
    data: ReconciliationRequest,
    actor: CurrentActor,
    service: ShiftAccountingServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ReconciliationResult:
    return await service.update(actor, shift_id, data.electronic_totals, data.denominations)


@router.delete(
    "",
    name="contabilita_eliminazione",
    summary="Elimina la contabilità del turno",
    status_code=status.HTTP_204_NO_CONTENT,
)
async def delete_accounting(
    actor: CurrentActor,
    service: ShiftAccountingServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> Response:
    await service.delete(actor, shift_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)
