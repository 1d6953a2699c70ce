"""
Modelli Database SQLAlchemy
Progetto: Fuel Station Manager (Gestionale Distributore)

Import centralizzato di tutti i modelli per Alembic e usage generico.

Modelli:
- Worker: Dipendenti (ruolo e saldo iniziale partitario)
- Nozzle: Erogatori
- NozzleAssignment: Assegnazioni erogatore → gestore
- NozzleTest: Test erogatore (esclusi dalle vendite)
- Shift: Turni
- CreditBill / ShiftPayment / ShiftExpense: Movimenti del turno
- ShiftAccounting: Contabilità di turno
- CalculatedSalary / SalaryPayment: Stipendi e pagamenti
- ProductPrice: Storico prezzi
"""

# SQLAlchemy 2.0 Base declarativa
# Importato qui per essere disponibile per tutti i modelli
from sqlalchemy.orm import DeclarativeBase


class Base(DeclarativeBase):
    """Base class per tutti i modelli SQLAlchemy."""
    pass


# Import modelli implementati
from app.models.worker import Worker
from app.models.nozzle import Nozzle, NozzleAssignment, NozzleTest
from app.models.shift import Shift, CreditBill, ShiftPayment, ShiftExpense
from app.models.salary import CalculatedSalary, SalaryPayment
from app.models.shift_accounting import ShiftAccounting
from app.models.product_price import ProductPrice

# Esportazione di tutti i modelli per Alembic
__all__ = [
    "Base",
    "Worker",
    "Nozzle",
    "NozzleAssignment",
    "NozzleTest",
    "Shift",
    "CreditBill",
    "ShiftPayment",
    "ShiftExpense",
    "CalculatedSalary",
    "SalaryPayment",
    "ShiftAccounting",
    "ProductPrice",
]
