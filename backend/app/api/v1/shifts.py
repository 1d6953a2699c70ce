"""
Router FastAPI per i Turni
Progetto: Fuel Station Manager (Gestionale Distributore)

Definisce gli endpoint per apertura/chiusura turno, assegnazione
erogatori, test erogatore e movimenti del turno.
"""

import logging
import uuid

from fastapi import APIRouter, Path, status

from app.core.deps import CurrentActor, NozzleAssignmentServiceDep, ShiftServiceDep
from app.schemas.nozzle_assignment import (
    NozzleAssignmentOpen,
    NozzleAssignmentRead,
    NozzleTestCreate,
    NozzleTestRead,
)
from app.schemas.shift import (
    CreditBillCreate,
    CreditBillRead,
    ShiftClose,
    ShiftExpenseCreate,
    ShiftExpenseRead,
    ShiftPaymentCreate,
    ShiftPaymentRead,
    ShiftRead,
    ShiftStart,
    ShiftTotals,
)

# Logger per questo modulo
logger = logging.getLogger(__name__)

# Router con prefix e tag
router = APIRouter(
    prefix="/shifts",
    tags=["Turni"],
)


# -------------------------------------------------------------------
# Ciclo di vita del turno
# -------------------------------------------------------------------

@router.post(
    "/",
    name="turno_apertura",
    summary="Apre un turno",
    response_model=ShiftRead,
    status_code=status.HTTP_201_CREATED,
)
async def start_shift(
    data: ShiftStart,
    actor: CurrentActor,
    service: ShiftServiceDep,
) -> ShiftRead:
    shift = await service.start_shift(
        actor,
        worker_id=data.worker_id,
        opening_cash=data.opening_cash,
        start_datetime=data.start_datetime,
    )
    return ShiftRead.model_validate(shift)


@router.get(
    "/{shift_id}",
    name="turno_dettaglio",
    summary="Dettaglio turno",
    response_model=ShiftRead,
)
async def get_shift(
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ShiftRead:
    return ShiftRead.model_validate(await service.get_shift(shift_id))


@router.post(
    "/{shift_id}/close",
    name="turno_chiusura",
    summary="Chiude un turno",
    description="Richiede che tutti gli erogatori del turno siano chiusi.",
    response_model=ShiftRead,
)
async def close_shift(
    data: ShiftClose,
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ShiftRead:
    shift = await service.close_shift(actor, shift_id, end_datetime=data.end_datetime)
    return ShiftRead.model_validate(shift)


@router.get(
    "/{shift_id}/totals",
    name="turno_totali",
    summary="Aggregati del turno",
    description="Vendite, crediti, incassi e spese calcolati dai dati attuali.",
    response_model=ShiftTotals,
)
async def get_shift_totals(
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ShiftTotals:
    return await service.get_totals(shift_id)


# -------------------------------------------------------------------
# Erogatori e test
# -------------------------------------------------------------------

@router.post(
    "/{shift_id}/nozzle-assignments",
    name="turno_assegna_erogatore",
    summary="Assegna un erogatore al gestore del turno",
    response_model=NozzleAssignmentRead,
    status_code=status.HTTP_201_CREATED,
)
async def open_assignment(
    data: NozzleAssignmentOpen,
    actor: CurrentActor,
    service: NozzleAssignmentServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> NozzleAssignmentRead:
    assignment_id = await service.open_assignment(
        actor,
        nozzle_id=data.nozzle_id,
        worker_id=data.worker_id,
        shift_id=shift_id,
        opening_balance=data.opening_balance,
        start_time=data.start_time,
    )
    return NozzleAssignmentRead.model_validate(await service.get_assignment(assignment_id))


@router.get(
    "/{shift_id}/nozzle-assignments",
    name="turno_lista_erogatori",
    summary="Assegnazioni del turno",
    response_model=list[NozzleAssignmentRead],
)
async def list_assignments(
    actor: CurrentActor,
    service: NozzleAssignmentServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> list[NozzleAssignmentRead]:
    assignments = await service.list_for_shift(shift_id)
    return [NozzleAssignmentRead.model_validate(a) for a in assignments]


@router.post(
    "/{shift_id}/nozzle-tests",
    name="turno_test_erogatore",
    summary="Registra un test erogatore",
    response_model=NozzleTestRead,
    status_code=status.HTTP_201_CREATED,
)
async def register_nozzle_test(
    data: NozzleTestCreate,
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> NozzleTestRead:
    test = await service.register_nozzle_test(
        actor,
        shift_id=shift_id,
        assignment_id=data.assignment_id,
        test_quantity=data.test_quantity,
        test_datetime=data.test_datetime,
        remarks=data.remarks,
    )
    return NozzleTestRead.model_validate(test)


# -------------------------------------------------------------------
# Movimenti del turno
# -------------------------------------------------------------------

@router.post(
    "/{shift_id}/credit-bills",
    name="turno_buono_credito",
    summary="Registra un buono a credito",
    response_model=CreditBillRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_credit_bill(
    data: CreditBillCreate,
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> CreditBillRead:
    bill = await service.add_credit_bill(
        actor, shift_id, data.net_amount, bill_date=data.bill_date, reference=data.reference
    )
    return CreditBillRead.model_validate(bill)


@router.post(
    "/{shift_id}/payments",
    name="turno_incasso",
    summary="Registra un incasso",
    response_model=ShiftPaymentRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_payment(
    data: ShiftPaymentCreate,
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ShiftPaymentRead:
    payment = await service.add_payment(
        actor, shift_id, data.amount, payment_date=data.payment_date, reference=data.reference
    )
    return ShiftPaymentRead.model_validate(payment)


@router.post(
    "/{shift_id}/expenses",
    name="turno_spesa",
    summary="Registra una spesa",
    response_model=ShiftExpenseRead,
    status_code=status.HTTP_201_CREATED,
)
async def add_expense(
    data: ShiftExpenseCreate,
    actor: CurrentActor,
    service: ShiftServiceDep,
    shift_id: uuid.UUID = Path(..., description="UUID del turno"),
) -> ShiftExpenseRead:
    expense = await service.add_expense(
        actor, shift_id, data.amount, expense_date=data.expense_date, remarks=data.remarks
    )
    return ShiftExpenseRead.model_validate(expense)
