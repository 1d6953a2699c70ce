"""
Operatore che esegue un'operazione
Progetto: Fuel Station Manager (Gestionale Distributore)

Ogni operazione che modifica lo stato riceve l'operatore in modo
esplicito, invece di leggerlo da un contesto globale.
"""

import uuid

from pydantic import BaseModel, ConfigDict, Field

from app.schemas.enums import Role, SUPERVISOR_ROLES


class Actor(BaseModel):
    """Utente autenticato che esegue l'operazione."""

    model_config = ConfigDict(frozen=True)

    id: uuid.UUID = Field(..., description="ID utente")
    username: str = Field(..., min_length=1, description="Nome utente (entry_by)")
    role: Role = Field(..., description="Ruolo operativo")

    @property
    def is_supervisor(self) -> bool:
        """True per manager e amministratori."""
        return self.role in SUPERVISOR_ROLES
