"""
Schemas Pydantic per i token JWT
Progetto: Fuel Station Manager (Gestionale Distributore)

I token sono emessi dal servizio di autenticazione esterno;
qui serve solo il payload per ricostruire l'operatore.
"""

from datetime import datetime

from pydantic import BaseModel, Field


class TokenPayload(BaseModel):
    """
    Schema per il payload contenuto nei token JWT.

    Attributes:
        sub: Subject - ID dell'utente come stringa
        username: Nome utente, usato per il campo entry_by
        role: Ruolo dell'utente
        exp: Expiration - Data/ora di scadenza
        type: Tipo di token ("access" o "refresh")
    """

    sub: str = Field(..., description="ID utente")
    username: str = Field(default="system", description="Nome utente")
    role: str = Field(..., description="Ruolo dell'utente")
    exp: datetime = Field(..., description="Data/ora di scadenza")
    type: str = Field(..., description="Tipo di token (access/refresh)")


# Export degli schemas
__all__ = [
    "TokenPayload",
]
