"""
Router FastAPI per le Assegnazioni Erogatore
Progetto: Fuel Station Manager (Gestionale Distributore)

L'apertura avviene dal turno (/shifts/{id}/nozzle-assignments);
qui la lettura e la chiusura.
"""

import uuid

from fastapi import APIRouter, Path

from app.core.deps import CurrentActor, NozzleAssignmentServiceDep
from app.schemas.nozzle_assignment import (
    AssignmentSummary,
    NozzleAssignmentClose,
    NozzleAssignmentRead,
)

router = APIRouter(
    prefix="/nozzle-assignments",
    tags=["Erogatori"],
)


@router.get(
    "/{assignment_id}",
    name="assegnazione_dettaglio",
    summary="Dettaglio assegnazione",
    response_model=NozzleAssignmentRead,
)
async def get_assignment(
    actor: CurrentActor,
    service: NozzleAssignmentServiceDep,
    assignment_id: uuid.UUID = Path(..., description="UUID dell'assegnazione"),
) -> NozzleAssignmentRead:
    return NozzleAssignmentRead.model_validate(await service.get_assignment(assignment_id))


@router.post(
    "/{assignment_id}/close",
    name="assegnazione_chiusura",
    summary="Chiude un'assegnazione",
    description=(
        "Registra la lettura di chiusura, risolve il prezzo del prodotto "
        "e congela erogato e incasso."
    ),
    response_model=AssignmentSummary,
)
async def close_assignment(
    data: NozzleAssignmentClose,
    actor: CurrentActor,
    service: NozzleAssignmentServiceDep,
    assignment_id: uuid.UUID = Path(..., description="UUID dell'assegnazione"),
) -> AssignmentSummary:
    return await service.close_assignment(
        actor,
        assignment_id,
        closing_balance=data.closing_balance,
        end_time=data.end_time,
    )
