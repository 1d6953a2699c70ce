"""
API v1 Routes
Progetto: Fuel Station Manager (Gestionale Distributore)

Router versione 1 dell'API.
"""

from fastapi import APIRouter

from app.api.v1 import employee_ledger, nozzle_assignments, shift_accounting, shifts

# Router aggregato per v1
api_v1_router = APIRouter(prefix="/api/v1")

# Includi i router dei moduli
api_v1_router.include_router(shifts.router)
api_v1_router.include_router(nozzle_assignments.router)
api_v1_router.include_router(shift_accounting.router)
api_v1_router.include_router(employee_ledger.router)

# Esportazione
__all__ = ["api_v1_router"]
