# notification_api/security/jwt_utils.py
import logging
from datetime import datetime, timedelta, timezone
from typing import Optional

import jwt
from pydantic import BaseModel

logger = logging.getLogger(__name__)


class SessionUser(BaseModel):
    id: str
    name: Optional[str] = None
    email: Optional[str] = None


class Session(BaseModel):
    user: SessionUser
    expires: Optional[str] = None


def decode_token(token: str, secret: str, algorithm: str = "HS256") -> dict:
    """Decodifica y valida el JWT. Deja pasar jwt.PyJWTError."""
    return jwt.decode(token, secret, algorithms=[algorithm])


def create_token(
    sub: str,
    secret: str,
    algorithm: str = "HS256",
    expires_in: int = 3600,
    **claims,
) -> str:
    now = datetime.now(timezone.utc)
    payload = {
        **claims,
        "sub": sub,
        "iat": now,
        "exp": now + timedelta(seconds=expires_in),
    }
    return jwt.encode(payload, secret, algorithm=algorithm)


def get_session(
    authorization_header: Optional[str],
    secret: str,
    algorithm: str = "HS256",
) -> Optional[Session]:
    """
    Toma el header: Authorization: Bearer <token>
    Devuelve la sesión o None si falta, tiene mal formato, es inválido
    o no trae 'sub'. Decidir si eso es un 401 le toca a quien llama.
    """
    if not authorization_header or not authorization_header.startswith("Bearer "):
        return None

    token = authorization_header.removeprefix("Bearer ").strip()

    try:
        payload = decode_token(token, secret, algorithm)
    except jwt.PyJWTError as e:
        logger.debug("[auth] rejected bearer token: %s", e)
        return None

    if not payload.get("sub"):
        return None

    exp = payload.get("exp")
    return Session(
        user=SessionUser(
            id=str(payload["sub"]),
            name=payload.get("name"),
            email=payload.get("email"),
        ),
        expires=(
            datetime.fromtimestamp(exp, tz=timezone.utc).isoformat()
            if isinstance(exp, (int, float)) else None
        ),
    )
