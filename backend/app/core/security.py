"""
Modulo di sicurezza per i token JWT
Progetto: Fuel Station Manager (Gestionale Distributore)

Decodifica dei token emessi dal servizio di autenticazione e
ricostruzione dell'operatore (Actor).
"""

import uuid
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from jose import JWTError, jwt

from app.core.config import settings
from app.schemas.actor import Actor
from app.schemas.enums import Role
from app.schemas.token import TokenPayload


def create_access_token(user_id: str, username: str, role: str) -> str:
    """
    Crea un token di accesso JWT.

    Args:
        user_id: ID dell'utente
        username: Nome utente
        role: Ruolo dell'utente

    Returns:
        Token JWT codificato
    """
    expire = datetime.now(timezone.utc) + timedelta(
        minutes=settings.access_token_expire_minutes
    )

    payload = {
        "sub": user_id,
        "username": username,
        "role": role,
        "exp": expire,
        "type": "access",
    }

    return jwt.encode(
        payload,
        settings.secret_key,
        algorithm=settings.jwt_algorithm,
    )


def decode_token(token: str) -> TokenPayload:
    """
    Decodifica e valida un token JWT.

    Args:
        token: Token JWT da decodificare

    Returns:
        TokenPayload con i dati del token

    Raises:
        HTTPException: Se il token è invalido o scaduto
    """
    try:
        payload = jwt.decode(
            token,
            settings.secret_key,
            algorithms=[settings.jwt_algorithm],
        )

        token_data = TokenPayload(
            sub=payload.get("sub"),
            username=payload.get("username") or "system",
            role=payload.get("role"),
            exp=datetime.fromtimestamp(int(payload.get("exp")), tz=timezone.utc),
            type=payload.get("type"),
        )

        if not token_data.sub:
            raise HTTPException(
                status_code=status.HTTP_401_UNAUTHORIZED,
                detail="Token invalido: missing subject",
                headers={"WWW-Authenticate": "Bearer"},
            )

        return token_data

    except JWTError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail=f"Token invalido o scaduto: {str(e)}",
            headers={"WWW-Authenticate": "Bearer"},
        )


def actor_from_token(token_data: TokenPayload) -> Actor:
    """
    Costruisce l'operatore a partire dal payload del token.

    Raises:
        HTTPException 401: Se ID o ruolo non sono validi
    """
    try:
        return Actor(
            id=uuid.UUID(token_data.sub),
            username=token_data.username,
            role=Role(token_data.role.upper()),
        )
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="ID utente o ruolo invalido nel token",
            headers={"WWW-Authenticate": "Bearer"},
        )


# Export delle funzioni
__all__ = [
    "create_access_token",
    "decode_token",
    "actor_from_token",
]
