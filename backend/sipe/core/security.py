# backend/sipe/core/security.py

from datetime import datetime, timedelta
from typing import Any, Optional

from jose import jwt, JWTError, ExpiredSignatureError
from passlib.context import CryptContext

from sipe.core.config import get_settings
from sipe.core.errors import AuthError

# ONLY pbkdf2_sha256 (no bcrypt anywhere)
pwd_context = CryptContext(schemes=["pbkdf2_sha256"], deprecated="auto")


def hash_password(password: str) -> str:
    return pwd_context.hash(password or "")


def verify_password(plain_password: str, hashed_password: Optional[str]) -> bool:
    if not hashed_password:
        return False

    # anything that is not a passlib hash (e.g. a legacy plaintext value) never matches
    if not pwd_context.identify(hashed_password):
        return False

    return pwd_context.verify(plain_password or "", hashed_password)


def create_access_token(
    user_id: int,
    role: str,
    expires_delta: Optional[timedelta] = None,
) -> str:
    settings = get_settings()
    expire = datetime.utcnow() + (expires_delta or timedelta(minutes=settings.access_token_expire_minutes))
    to_encode: dict[str, Any] = {"id": user_id, "role": role, "exp": expire}
    return jwt.encode(to_encode, settings.jwt_secret_key, algorithm=settings.jwt_algorithm)


def decode_token(token: str) -> dict[str, Any]:
    settings = get_settings()
    try:
        payload = jwt.decode(token, settings.jwt_secret_key, algorithms=[settings.jwt_algorithm])
    except ExpiredSignatureError as e:
        raise AuthError("Token expirado", kind=AuthError.EXPIRED) from e
    except JWTError as e:
        raise AuthError("Token inválido") from e

    if payload.get("id") is None or not payload.get("role"):
        raise AuthError("Token inválido")

    return payload
