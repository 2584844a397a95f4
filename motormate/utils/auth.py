"""
Utilitaires d'authentification / Authentication utilities.
Gestion des tokens JWT (acces et etat OAuth).
JWT token management (access tokens and OAuth state).
"""

import secrets
from datetime import datetime, timedelta, timezone

from jose import JWTError, jwt

from motormate.config import settings


def create_access_token(user_id: int) -> str:
    """Créer un access token JWT / Create a JWT access token."""
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.ACCESS_TOKEN_EXPIRE_MINUTES)
    payload = {"sub": str(user_id), "type": "access", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def create_oauth_state() -> str:
    """Créer un state OAuth signe / Create a signed OAuth state.

    Le state est auto-verifiable, aucun stockage serveur n'est necessaire.
    The state is self-verifying, no server-side storage is needed.
    """
    expire = datetime.now(timezone.utc) + timedelta(minutes=settings.OAUTH_STATE_EXPIRE_MINUTES)
    payload = {"nonce": secrets.token_urlsafe(16), "type": "oauth_state", "exp": expire}
    return jwt.encode(payload, settings.SECRET_KEY, algorithm=settings.JWT_ALGORITHM)


def verify_oauth_state(state: str | None) -> bool:
    """Vérifier un state OAuth / Verify an OAuth state."""
    if not state:
        return False
    payload = decode_token(state)
    return payload is not None and payload.get("type") == "oauth_state"


def decode_token(token: str) -> dict | None:
    """Décoder un token JWT / Decode a JWT token. Returns None if invalid."""
    try:
        return jwt.decode(token, settings.SECRET_KEY, algorithms=[settings.JWT_ALGORITHM])
    except JWTError:
        return None
