"""
Enum di dominio condivisi
Progetto: Fuel Station Manager (Gestionale Distributore)

Gli stati sono tipi chiusi: i modelli li mappano con sqlalchemy.Enum
e i consumer li gestiscono in modo esaustivo.
"""

from enum import Enum


class AssignmentStatus(str, Enum):
    """Stato di un'assegnazione erogatore. CLOSED è terminale."""
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class ShiftStatus(str, Enum):
    """Stato di un turno del gestore."""
    OPEN = "OPEN"
    CLOSED = "CLOSED"


class Role(str, Enum):
    """Ruoli operativi del distributore."""
    ADMIN = "ADMIN"
    MANAGER = "MANAGER"
    SALESMAN = "SALESMAN"


class PaymentMethod(str, Enum):
    """Metodo di pagamento di uno stipendio o anticipo."""
    CASH = "CASH"
    UPI = "UPI"
    BANK_TRANSFER = "BANK_TRANSFER"
    CHEQUE = "CHEQUE"
    CARD = "CARD"


class LedgerDirection(str, Enum):
    """Verso di una riga del partitario dipendente."""
    CREDIT = "credit"
    DEBIT = "debit"


class LedgerSourceType(str, Enum):
    """Origine di una riga del partitario dipendente."""
    SALARY = "SALARY"
    PAYMENT = "PAYMENT"


# Manager e amministratori hanno pieno accesso a turni e contabilità
SUPERVISOR_ROLES: frozenset[Role] = frozenset({Role.ADMIN, Role.MANAGER})
