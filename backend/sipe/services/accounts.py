import logging
from typing import Optional

from sqlalchemy.orm import Session

from sipe.core.database import commit_or_conflict
from sipe.core.errors import AuthError, NotFoundError, ValidationError
from sipe.core.security import hash_password, verify_password
from sipe.models.user import User, ROLE_USER

logger = logging.getLogger(__name__)

DUPLICATE_USER = "El email o username ya está registrado"


def get_user_or_404(db: Session, user_id: int) -> User:
    user = db.get(User, user_id)
    if not user:
        raise NotFoundError("Usuario no encontrado")
    return user


def create_user(db: Session, *, username: str, email: str, password: str, role: Optional[str] = None) -> User:
    user = User(
        username=username,
        email=email,
        password_hash=hash_password(password),
        role=role or ROLE_USER,
    )
    db.add(user)
    commit_or_conflict(db, DUPLICATE_USER)
    db.refresh(user)

    logger.info("User created: %s (%s)", user.email, user.role)
    return user


def authenticate(db: Session, email: str, password: str) -> User:
    """Return the user for these credentials.

    Both failure paths raise the same ``AuthError``; only the log tells them apart.
    """
    user = db.query(User).filter(User.email == email).first()
    if not user:
        logger.info("Login failed for %s: no such user", email)
        raise AuthError("Credenciales inválidas")

    if not verify_password(password, user.password_hash):
        logger.info("Login failed for %s: wrong password", email)
        raise AuthError("Credenciales inválidas")

    logger.info("Login ok for %s", email)
    return user


def update_user(db: Session, user: User, changes: dict, *, actor_is_admin: bool) -> User:
    changes = {k: v for k, v in changes.items() if v}
    # only an admin can change roles; anyone else's role field is ignored
    if not actor_is_admin:
        changes.pop("role", None)

    if not changes:
        raise ValidationError("No hay datos para actualizar")

    fields = sorted(changes)
    if "password" in changes:
        user.password_hash = hash_password(changes.pop("password"))
    for k, v in changes.items():
        setattr(user, k, v)

    commit_or_conflict(db, DUPLICATE_USER)
    db.refresh(user)

    logger.info("User %s updated (%s)", user.id, ", ".join(fields))
    return user


def delete_user(db: Session, user_id: int) -> dict:
    user = get_user_or_404(db, user_id)
    # attributes expire on commit; keep what the response echoes
    snapshot = {"id": user.id, "username": user.username, "email": user.email}
    db.delete(user)
    db.commit()
    logger.info("User deleted: %s", snapshot["email"])
    return snapshot
