"""
Configurazione Database - SQLAlchemy 2.0 Async
Progetto: Fuel Station Manager (Gestionale Distributore)

Definisce engine, session factory e dependency injection per FastAPI.

Le operazioni su erogatori e turni prendono lock di riga
(SELECT ... FOR UPDATE). Con db_lock_timeout_ms > 0 una richiesta
concorrente fallisce con ConflictError invece di restare in attesa.
"""

import logging
from typing import Any, AsyncGenerator

from sqlalchemy import text
from sqlalchemy.ext.asyncio import (
    AsyncEngine,
    AsyncSession,
    async_sessionmaker,
    create_async_engine,
)

from app.core.config import settings

# Logger per questo modulo
logger = logging.getLogger(__name__)


def _connect_args(database_url: str) -> dict[str, Any]:
    # server_settings è specifico di asyncpg
    if not database_url.startswith("postgresql+asyncpg"):
        return {}
    server_settings = {"application_name": settings.app_name}
    if settings.db_lock_timeout_ms > 0:
        server_settings["lock_timeout"] = str(settings.db_lock_timeout_ms)
    return {"server_settings": server_settings}


# ------------------------------------------------------------
# Engine Async SQLAlchemy 2.0
# ------------------------------------------------------------
engine: AsyncEngine = create_async_engine(
    settings.database_url,
    echo=settings.debug,
    pool_pre_ping=True,
    pool_size=settings.db_pool_size,
    max_overflow=settings.db_max_overflow,
    connect_args=_connect_args(settings.database_url),
)


# ------------------------------------------------------------
# Session Factory
# ------------------------------------------------------------
AsyncSessionLocal = async_sessionmaker(
    bind=engine,
    class_=AsyncSession,
    expire_on_commit=False,
    autoflush=False,
)


async def get_db() -> AsyncGenerator[AsyncSession, None]:
    """
    Dependency injection per FastAPI.

    Una sessione (e una transazione) per richiesta: commit se il
    service termina senza errori, rollback altrimenti. I lock presi
    dai repository si rilasciano qui.
    """
    async with AsyncSessionLocal() as session:
        try:
            yield session
            await session.commit()
        except Exception:
            await session.rollback()
            logger.debug("Rollback della transazione di richiesta")
            raise


async def init_db() -> None:
    """Verifica che il database sia raggiungibile all'avvio."""
    try:
        async with engine.connect() as conn:
            await conn.execute(text("SELECT 1"))
        logger.info("Connessione al database stabilita con successo")
    except Exception as e:
        logger.error("Errore connessione database: %s", e)
        raise


async def reset_schema() -> list[str]:
    """
    Elimina e ricrea tutte le tabelle del distributore.

    Solo per sviluppo e test: i dati esistenti vanno persi.

    Returns:
        Nomi delle tabelle create, in ordine di dipendenza
    """
    from app.models import Base

    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.drop_all)
        await conn.run_sync(Base.metadata.create_all)

    tables = [table.name for table in Base.metadata.sorted_tables]
    logger.warning("Schema ricreato: %d tabelle", len(tables))
    return tables


async def close_db() -> None:
    """Chiude le connessioni al database (shutdown dell'applicazione)."""
    await engine.dispose()
    logger.info("Connessioni database chiuse")
