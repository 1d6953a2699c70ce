"""
Main Entry Point - FastAPI Application
Progetto: Fuel Station Manager (Gestionale Distributore)

Configura l'applicazione FastAPI con middleware, router e lifecycle.
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from app.core.config import settings
from app.core.database import close_db, init_db
from app.core.exceptions import (
    AppException,
    AuthorizationError,
    ConflictError,
    InvalidStateError,
    NotFoundError,
    ValidationError,
)

# ------------------------------------------------------------
# Configurazione Logging
# ------------------------------------------------------------
logging.basicConfig(
    level=settings.log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)
logger = logging.getLogger(__name__)


# ------------------------------------------------------------
# Lifespan Handler
# ------------------------------------------------------------
@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    Gestisce il ciclo di vita dell'applicazione.

    - Startup: inizializza la connessione al database
    - Shutdown: chiude le connessioni database
    """
    # Startup
    logger.info("Avvio %s v%s", settings.app_name, settings.app_version)
    await init_db()
    logger.info("Applicazione avviata con successo")

    yield

    # Shutdown
    logger.info("Arresto applicazione in corso...")
    await close_db()
    logger.info("Applicazione arrestata")


# ------------------------------------------------------------
# FastAPI Application
# ------------------------------------------------------------
app = FastAPI(
    title=settings.app_name,
    description="Gestionale per distributore di carburante - Backend API",
    version=settings.app_version,
    lifespan=lifespan,
    docs_url="/docs" if settings.debug else None,
    redoc_url="/redoc" if settings.debug else None,
)


# ------------------------------------------------------------
# Middleware CORS
# ------------------------------------------------------------
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# ------------------------------------------------------------
# Exception Handlers
# ------------------------------------------------------------
def _error_response(exc: AppException) -> JSONResponse:
    content = {"detail": exc.detail, "error_code": exc.error_code}
    if exc.extra:
        content["extra"] = exc.extra
    return JSONResponse(status_code=exc.status_code, content=content)


@app.exception_handler(NotFoundError)
async def not_found_exception_handler(request: Request, exc: NotFoundError) -> JSONResponse:
    """
    Gestore per eccezioni NotFoundError.

    Converte l'eccezione in risposta HTTP 404.
    """
    return _error_response(exc)


@app.exception_handler(ValidationError)
async def validation_exception_handler(request: Request, exc: ValidationError) -> JSONResponse:
    """
    Gestore per eccezioni ValidationError.

    Converte l'eccezione in risposta HTTP 422.
    """
    return _error_response(exc)


@app.exception_handler(InvalidStateError)
async def invalid_state_exception_handler(request: Request, exc: InvalidStateError) -> JSONResponse:
    """
    Gestore per eccezioni InvalidStateError.

    Converte l'eccezione in risposta HTTP 409 (INVALID_STATE).
    """
    return _error_response(exc)


@app.exception_handler(ConflictError)
async def conflict_exception_handler(request: Request, exc: ConflictError) -> JSONResponse:
    """
    Gestore per eccezioni ConflictError.

    Converte l'eccezione in risposta HTTP 409 (CONFLICT_STATE).
    """
    return _error_response(exc)


@app.exception_handler(AuthorizationError)
async def authorization_exception_handler(request: Request, exc: AuthorizationError) -> JSONResponse:
    logger.warning("Accesso negato su %s: %s", request.url.path, exc.detail)
    return _error_response(exc)


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """
    Gestore generico per tutte le eccezioni non catturate.

    Converte l'eccezione in risposta HTTP 500 e logga l'errore.
    """
    logger.error("Unhandled exception: %s", exc, exc_info=True)
    return JSONResponse(
        status_code=500,
        content={"detail": "Errore interno del server"},
    )


# ------------------------------------------------------------
# Endpoints
# ------------------------------------------------------------
@app.get(
    "/health",
    name="Health Check",
    summary="Controlla lo stato dell'applicazione",
    tags=["System"],
)
async def health_check() -> dict[str, str]:
    """
    Endpoint per il controllo dello stato di salute.

    Returns:
        dict: Stato dell'applicazione
    """
    return {
        "status": "healthy",
        "app": settings.app_name,
        "version": settings.app_version,
        "environment": settings.app_env,
    }


# ------------------------------------------------------------
# Router
# ------------------------------------------------------------
from app.api.v1 import api_v1_router

app.include_router(api_v1_router)
