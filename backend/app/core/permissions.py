"""
Controlli di autorizzazione sull'operatore
Progetto: Fuel Station Manager (Gestionale Distributore)

- ADMIN / MANAGER: accesso a tutti i turni e ai dati di tutti i dipendenti
- SALESMAN: solo i propri dati e i propri turni aperti
"""

import uuid

from app.core.exceptions import AuthorizationError
from app.schemas.actor import Actor


def can_backdate(actor: Actor) -> bool:
    """Solo manager e amministratori possono impostare orari personalizzati."""
    return actor.is_supervisor


def can_access_worker_data(actor: Actor, worker_id: uuid.UUID) -> bool:
    """Verifica se l'operatore può leggere i dati di un dipendente."""
    if actor.is_supervisor:
        return True
    return actor.id == worker_id


def can_modify_shift(actor: Actor, worker_id: uuid.UUID, shift_open: bool) -> bool:
    """Un gestore modifica solo i propri turni, e solo finché sono aperti."""
    if actor.is_supervisor:
        return True
    return shift_open and actor.id == worker_id


def verify_backdate(actor: Actor, requested: object) -> None:
    """
    Rifiuta un orario esplicito se l'operatore non può retrodatare.

    Args:
        actor: Operatore corrente
        requested: Orario richiesto (None = adesso)

    Raises:
        AuthorizationError: Se l'orario è impostato da un operatore non abilitato
    """
    if requested is not None and not can_backdate(actor):
        raise AuthorizationError(
            "Solo manager e amministratori possono impostare orari personalizzati"
        )


def verify_worker_access(actor: Actor, worker_id: uuid.UUID) -> None:
    """Solleva AuthorizationError se l'operatore non vede i dati del dipendente."""
    if not can_access_worker_data(actor, worker_id):
        raise AuthorizationError("Non hai i permessi per accedere ai dati di questo dipendente")


def verify_can_modify_shift(actor: Actor, worker_id: uuid.UUID, shift_open: bool) -> None:
    """Solleva AuthorizationError se l'operatore non può modificare il turno."""
    if not can_modify_shift(actor, worker_id, shift_open):
        raise AuthorizationError("Non hai i permessi per modificare questo turno")


def verify_supervisor(actor: Actor) -> None:
    """Operazioni riservate a manager e amministratori."""
    if not actor.is_supervisor:
        raise AuthorizationError(
            "Solo manager e amministratori possono eseguire questa operazione"
        )
