"""
Repository base su AsyncSession
Progetto: Fuel Station Manager (Gestionale Distributore)

I service non costruiscono query: chiedono ai repository
"le assegnazioni del turno X", "il turno bloccato per aggiornamento", ecc.
I repository fanno flush ma non commit: la transazione è della richiesta.
"""

import logging
import uuid
from typing import Any, Generic, Optional, TypeVar

from sqlalchemy import select
from sqlalchemy.exc import DBAPIError, IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from app.core.exceptions import ConflictError

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")

# SQLSTATE PostgreSQL: lock non ottenuto entro lock_timeout
LOCK_NOT_AVAILABLE = "55P03"


class SQLAlchemyRepository(Generic[ModelT]):
    """
    Operazioni comuni di lettura/scrittura per un modello.

    Attributes:
        model: Classe del modello gestito
        conflict_detail: Messaggio usato quando un vincolo unico fallisce
    """

    model: type
    conflict_detail: str = "Il record viola un vincolo di unicità"

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    async def get(self, obj_id: uuid.UUID) -> Optional[ModelT]:
        return await self.db.get(self.model, obj_id)

    async def get_for_update(self, obj_id: uuid.UUID) -> Optional[ModelT]:
        """Legge la riga con SELECT ... FOR UPDATE (lock fino a fine transazione)."""
        stmt = (
            select(self.model)
            .where(self.model.id == obj_id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        try:
            result = await self.db.execute(stmt)
        except DBAPIError as e:
            if getattr(e.orig, "pgcode", None) == LOCK_NOT_AVAILABLE:
                logger.warning("Lock non ottenuto su %s %s", self.model.__name__, obj_id)
                raise ConflictError(
                    "Record in uso da un'altra operazione, riprovare",
                    extra={"id": str(obj_id)},
                ) from e
            raise
        return result.scalar_one_or_none()

    async def add(self, obj: Any) -> Any:
        self.db.add(obj)
        await self._flush()
        return obj

    async def save(self, obj: Any) -> Any:
        """Scrive le modifiche di un oggetto già in sessione."""
        await self._flush()
        return obj

    async def delete(self, obj: Any) -> None:
        await self.db.delete(obj)
        await self._flush()

    async def _flush(self) -> None:
        try:
            await self.db.flush()
        except IntegrityError as e:
            logger.warning("Violazione di integrità su %s: %s", self.model.__name__, e.orig)
            raise ConflictError(self.conflict_detail) from e
