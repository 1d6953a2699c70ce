"""
Schemas Pydantic per il progetto Fuel Station Manager

Questo modulo contiene tutti gli schemi Pydantic utilizzati per la validazione
e serializzazione delle risposte API.
"""

# Import degli schemi per renderli disponibili tramite import diretto
# es: from app.schemas import ShiftRead, LedgerStatement, etc.

from app.schemas.enums import (
    AssignmentStatus,
    LedgerDirection,
    LedgerSourceType,
    PaymentMethod,
    Role,
    ShiftStatus,
)
from app.schemas.actor import Actor
from app.schemas.token import TokenPayload
from app.schemas.nozzle_assignment import (
    AssignmentSummary,
    NozzleAssignmentClose,
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
from app.schemas.shift_accounting import (
    DenominationCounts,
    ElectronicTotals,
    ReconciliationRequest,
    ReconciliationResult,
)
from app.schemas.employee_ledger import LedgerEntry, LedgerStatement, LedgerSummary

__all__ = [
    "AssignmentStatus",
    "LedgerDirection",
    "LedgerSourceType",
    "PaymentMethod",
    "Role",
    "ShiftStatus",
    "Actor",
    "TokenPayload",
    "AssignmentSummary",
    "NozzleAssignmentClose",
    "NozzleAssignmentOpen",
    "NozzleAssignmentRead",
    "NozzleTestCreate",
    "NozzleTestRead",
    "CreditBillCreate",
    "CreditBillRead",
    "ShiftClose",
    "ShiftExpenseCreate",
    "ShiftExpenseRead",
    "ShiftPaymentCreate",
    "ShiftPaymentRead",
    "ShiftRead",
    "ShiftStart",
    "ShiftTotals",
    "DenominationCounts",
    "ElectronicTotals",
    "ReconciliationRequest",
    "ReconciliationResult",
    "LedgerEntry",
    "LedgerStatement",
    "LedgerSummary",
]
