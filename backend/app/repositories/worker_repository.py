"""
Repository Dipendenti
Progetto: Fuel Station Manager (Gestionale Distributore)
"""

from app.models.worker import Worker
from app.repositories.base import SQLAlchemyRepository


class WorkerRepository(SQLAlchemyRepository[Worker]):
    model = Worker
