"""
Dependency Injection per autenticazione e service
Progetto: Fuel Station Manager (Gestionale Distributore)

- get_current_actor: operatore ricavato dal token JWT (bearer)
- get_*_service: service costruiti sulla sessione della richiesta
"""

from typing import Annotated, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.database import get_db
from app.core.security import actor_from_token, decode_token
from app.repositories.nozzle_repository import (
    NozzleAssignmentRepository,
    NozzleRepository,
    NozzleTestRepository,
)
from app.repositories.product_price_repository import ProductPriceRepository
from app.repositories.salary_repository import (
    CalculatedSalaryRepository,
    SalaryPaymentRepository,
)
from app.repositories.shift_repository import (
    ShiftAccountingRepository,
    ShiftRepository,
    ShiftTransactionRepository,
)
from app.repositories.worker_repository import WorkerRepository
from app.schemas.actor import Actor
from app.services.employee_ledger_service import EmployeeLedgerService
from app.services.nozzle_assignment_service import NozzleAssignmentService
from app.services.shift_accounting_service import ShiftAccountingService
from app.services.shift_service import ShiftService

# OAuth2 scheme - estrae il token dall'header Authorization
# (i token sono emessi dal servizio di autenticazione)
oauth2_scheme = OAuth2PasswordBearer(
    tokenUrl="/api/v1/auth/login",
    auto_error=False,
)


async def get_current_actor(
    token: Optional[str] = Depends(oauth2_scheme),
) -> Actor:
    """
    Dependency per ottenere l'operatore corrente dal token JWT.

    Raises:
        HTTPException 401: Se il token manca, è invalido o non è di accesso
    """
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token di autenticazione non fornito",
            headers={"WWW-Authenticate": "Bearer"},
        )

    token_data = decode_token(token)

    # Verifica che sia un token di accesso
    if token_data.type != "access":
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Token di refresh non valido per questa operazione",
            headers={"WWW-Authenticate": "Bearer"},
        )

    return actor_from_token(token_data)


# ------------------------------------------------------------
# Service factories
# ------------------------------------------------------------

def get_shift_service(db: AsyncSession = Depends(get_db)) -> ShiftService:
    return ShiftService(
        shifts=ShiftRepository(db),
        assignments=NozzleAssignmentRepository(db),
        tests=NozzleTestRepository(db),
        transactions=ShiftTransactionRepository(db),
        workers=WorkerRepository(db),
    )


def get_nozzle_assignment_service(
    db: AsyncSession = Depends(get_db),
) -> NozzleAssignmentService:
    return NozzleAssignmentService(
        assignments=NozzleAssignmentRepository(db),
        nozzles=NozzleRepository(db),
        shifts=ShiftRepository(db),
        tests=NozzleTestRepository(db),
        prices=ProductPriceRepository(db),
    )


def get_shift_accounting_service(
    db: AsyncSession = Depends(get_db),
    shift_service: ShiftService = Depends(get_shift_service),
) -> ShiftAccountingService:
    return ShiftAccountingService(
        shifts=ShiftRepository(db),
        accountings=ShiftAccountingRepository(db),
        shift_service=shift_service,
        salary_payments=SalaryPaymentRepository(db),
        workers=WorkerRepository(db),
    )


def get_employee_ledger_service(
    db: AsyncSession = Depends(get_db),
) -> EmployeeLedgerService:
    return EmployeeLedgerService(
        workers=WorkerRepository(db),
        salaries=CalculatedSalaryRepository(db),
        payments=SalaryPaymentRepository(db),
    )


# Type aliases per uso comune
CurrentActor = Annotated[Actor, Depends(get_current_actor)]
ShiftServiceDep = Annotated[ShiftService, Depends(get_shift_service)]
NozzleAssignmentServiceDep = Annotated[
    NozzleAssignmentService, Depends(get_nozzle_assignment_service)
]
ShiftAccountingServiceDep = Annotated[
    ShiftAccountingService, Depends(get_shift_accounting_service)
]
EmployeeLedgerServiceDep = Annotated[
    EmployeeLedgerService, Depends(get_employee_ledger_service)
]


# Export
__all__ = [
    "get_current_actor",
    "oauth2_scheme",
    "get_shift_service",
    "get_nozzle_assignment_service",
    "get_shift_accounting_service",
    "get_employee_ledger_service",
    "CurrentActor",
    "ShiftServiceDep",
    "NozzleAssignmentServiceDep",
    "ShiftAccountingServiceDep",
    "EmployeeLedgerServiceDep",
]
