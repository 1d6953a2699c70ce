"""
Mixin SQLAlchemy per modelli
Progetto: Fuel Station Manager (Gestionale Distributore)

Mixin riutilizzabili per aggiungere funzionalità comuni ai modelli.
"""

import datetime
import uuid
from typing import Optional

from sqlalchemy import DateTime, String, Uuid
from sqlalchemy import event
from sqlalchemy.orm import Mapped, mapped_column, Session
from sqlalchemy.sql import func


class TimestampMixin:
    """
    Mixin per gestione automatica timestamp creazione e aggiornamento.

    Aggiunge i campi:
    - created_at: data/ora di creazione record (impostato automaticamente)
    - updated_at: data/ora ultimo aggiornamento (aggiornato automaticamente)
    """

    created_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora di creazione del record",
    )

    updated_at: Mapped[datetime.datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
        doc="Data/ora ultimo aggiornamento del record",
    )


class UUIDMixin:
    """
    Mixin per ID UUID generato lato applicazione.

    Aggiunge il campo id come UUID primary key con generazione automatica.
    """

    id: Mapped[uuid.UUID] = mapped_column(
        Uuid,
        primary_key=True,
        default=uuid.uuid4,
        doc="UUID primary key",
    )


class EntryByMixin:
    """
    Mixin per l'operatore che ha registrato il record.

    Valorizzato dai service con actor.username.
    """

    entry_by: Mapped[Optional[str]] = mapped_column(
        String(100),
        nullable=True,
        doc="Utente che ha inserito il record",
    )


# ------------------------------------------------------------
# Event Listeners
# ------------------------------------------------------------
@event.listens_for(Session, "before_flush")
def update_timestamp(session: Session, flush_context, instances) -> None:
    """
    Event listener per aggiornare automaticamente il campo updated_at.

    Args:
        session: Sessione SQLAlchemy
        flush_context: Contesto del flush
        instances: Oggetti instances (non usato)
    """
    now = datetime.datetime.now(datetime.timezone.utc)

    for obj in session.dirty:
        if hasattr(obj, 'updated_at'):
            if session.is_modified(obj, include_collections=False):
                obj.updated_at = now

    for obj in session.new:
        if hasattr(obj, 'updated_at'):
            obj.updated_at = now
