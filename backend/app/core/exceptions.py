"""
Eccezioni Custom per l'applicazione.
Progetto: Fuel Station Manager (Gestionale Distributore)

Definisce eccezioni specifiche del dominio per una gestione
centralizzata degli errori.

NOTA: BusinessValidationError è volutamente distinta da pydantic.ValidationError.
- pydantic.ValidationError: errori di formato/tipo nei dati di input (gestiti da FastAPI → 422)
- BusinessValidationError: violazioni delle regole di business logic (gestiti dal nostro handler → 422)

Nessuna di queste eccezioni è fatale: il chiamante decide se riprovare
o mostrare l'errore all'operatore.
"""

from typing import Any, Dict, Optional

__all__ = [
    "AppException",
    "NotFoundError",
    "BusinessValidationError",
    "ValidationError",       # alias di BusinessValidationError
    "InvalidStateError",
    "ConflictError",
    "AuthorizationError",
]


class AppException(Exception):
    """
    Base exception per l'applicazione.

    Tutte le eccezioni custom ereditano da questa classe base.

    Attributes:
        status_code: HTTP status code da restituire al client
        error_code: Identificativo univoco dell'errore per il frontend
        detail: Messaggio di errore leggibile per l'utente
        extra: Dizionario con dati aggiuntivi per il frontend
    """

    status_code: int = 500
    error_code: str = "INTERNAL_SERVER_ERROR"

    def __init__(
        self,
        detail: str,
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        """
        Inizializza l'eccezione.

        Args:
            detail: Messaggio di errore dettagliato
            error_code: Identificativo univoco (default: quello di classe)
            extra: Dati aggiuntivi da passare al frontend (default: None)
        """
        self.detail = detail
        self.error_code = error_code if error_code is not None else self.error_code
        self.extra = extra if extra is not None else None
        self.status_code = self.__class__.status_code
        super().__init__(detail)


class NotFoundError(AppException):
    """
    Eccezione sollevata quando una risorsa non viene trovata.

    Propagata invariata dai repository (turno, erogatore, dipendente...).
    """

    status_code: int = 404
    error_code: str = "RESOURCE_NOT_FOUND"

    def __init__(
        self,
        detail: str = "Risorsa non trovata",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class BusinessValidationError(ValueError, AppException):
    """
    Eccezione sollevata per input fuori dominio.

    Eredita da ValueError per essere catturata dai validatori Pydantic.

    Esempi di utilizzo:
        - "La lettura di apertura non può essere negativa"
        - "La lettura di chiusura non può essere inferiore a quella di apertura"
        - "Il numero di banconote non può essere negativo"

    Sollevata sempre prima di qualsiasi modifica allo stato.
    """

    status_code: int = 422
    error_code: str = "BUSINESS_VALIDATION_ERROR"

    def __init__(
        self,
        detail: str = "Validazione dati fallita",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        # Chiama AppException.__init__ direttamente per evitare ValueError
        AppException.__init__(self, detail, error_code, extra)


# Alias per compatibilità
ValidationError = BusinessValidationError


class InvalidStateError(AppException):
    """
    Eccezione sollevata quando l'operazione non è ammessa nello stato corrente.

    Esempi di utilizzo:
        - chiusura di un'assegnazione già chiusa
        - contabilità su un turno ancora aperto
        - chiusura turno con erogatori ancora aperti
    """

    status_code: int = 409
    error_code: str = "INVALID_STATE"

    def __init__(
        self,
        detail: str = "Operazione non consentita nello stato attuale",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class ConflictError(AppException):
    """
    Eccezione sollevata per violazioni di vincoli "al più uno".

    Utilizzata per un secondo turno/assegnazione aperta sullo stesso
    erogatore o per una seconda contabilità dello stesso turno.
    """

    status_code: int = 409
    error_code: str = "CONFLICT_STATE"

    def __init__(
        self,
        detail: str = "Conflitto di stato",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)


class AuthorizationError(AppException):
    """
    Eccezione sollevata per accesso non autorizzato.

    Esempi di utilizzo:
        - "Puoi operare solo sui tuoi turni"
        - "Solo manager e amministratori possono impostare orari personalizzati"
    """

    status_code: int = 403
    error_code: str = "FORBIDDEN"

    def __init__(
        self,
        detail: str = "Accesso non autorizzato",
        error_code: Optional[str] = None,
        extra: Optional[Dict[str, Any]] = None,
    ) -> None:
        super().__init__(detail, error_code, extra)
