# backend/sipe/api/deps_auth.py

from typing import Optional

from fastapi import Depends
from fastapi.security import OAuth2PasswordBearer
from pydantic import BaseModel

from sipe.core.database import SessionLocal
from sipe.core.errors import AuthError, ForbiddenError
from sipe.core.security import decode_token
from sipe.models.user import ROLE_ADMIN

# Used by Swagger UI for the "Authorize" flow; auto_error is off so a missing
# header is reported as 403 instead of FastAPI's default 401.
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/token", auto_error=False)


class TokenUser(BaseModel):
    user_id: int
    role: str  # "admin" | "user"

    @property
    def is_admin(self) -> bool:
        return self.role == ROLE_ADMIN


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_token_user(token: Optional[str] = Depends(oauth2_scheme)) -> TokenUser:
    """Resolve identity and role from the bearer token alone (no store lookup)."""
    if not token:
        raise ForbiddenError("Token no proporcionado")

    # raises AuthError("Token inválido" | "Token expirado")
    payload = decode_token(token)

    try:
        return TokenUser(user_id=int(payload["id"]), role=str(payload["role"]))
    except (TypeError, ValueError) as e:
        raise AuthError("Token inválido") from e


def get_optional_token_user(token: Optional[str] = Depends(oauth2_scheme)) -> Optional[TokenUser]:
    """Like ``get_token_user`` for public routes: no token means anonymous."""
    if not token:
        return None
    return get_token_user(token)


def require_admin(user: TokenUser = Depends(get_token_user)) -> TokenUser:
    if not user.is_admin:
        raise ForbiddenError("Acceso denegado. Solo administradores pueden realizar esta acción.")
    return user


def require_self_or_admin(user_id: int, user: TokenUser = Depends(get_token_user)) -> TokenUser:
    if user.user_id != user_id and not user.is_admin:
        raise ForbiddenError("No tienes permiso para realizar esta acción")
    return user
